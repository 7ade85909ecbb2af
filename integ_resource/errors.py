# *******************************************************************************
# Copyright (c) 2026 Contributors to the Eclipse Foundation
#
# See the NOTICE file(s) distributed with this work for additional
# information regarding copyright ownership.
#
# This program and the accompanying materials are made available under the
# terms of the Apache License Version 2.0 which is available at
# https://www.apache.org/licenses/LICENSE-2.0
#
# SPDX-License-Identifier: Apache-2.0
# *******************************************************************************


class IntegResourceError(Exception):
    prefix = "integ-resource"

    def __init__(self, value):
        super().__init__(value)
        self.value = value

    def __str__(self):
        return f"{self.prefix}: {repr(self.value)}"


class ArtifactResolutionError(IntegResourceError):
    """The properties resource naming the launchable artifact could not be used."""
    prefix = "Artifact resolution"


class ArtifactNotFoundError(IntegResourceError):
    """The resolved artifact path does not exist on disk."""
    prefix = "Artifact not found"


class HandshakeTimeoutError(IntegResourceError):
    """No valid readiness token arrived within the handshake budget."""
    prefix = "Handshake"


class ProcessExitedError(HandshakeTimeoutError):
    """The supervised process died before it reported readiness."""
    prefix = "Handshake, process exited"


class RuntimeConfigError(IntegResourceError):
    prefix = "Runtime config"


class NotStartedError(IntegResourceError):
    prefix = "Not started"


class IllegalStateError(IntegResourceError):
    prefix = "Illegal state"
