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

"""
Integration test resource for servers running in an external process.

This package starts the server from the artifact produced by the build,
waits until the server reports readiness over its standard streams, exposes
the discovered endpoint to the tests and shuts the server down afterwards.
"""

from .errors import (
    ArtifactNotFoundError,
    ArtifactResolutionError,
    HandshakeTimeoutError,
    IllegalStateError,
    IntegResourceError,
    NotStartedError,
    ProcessExitedError,
    RuntimeConfigError,
)
from .resource import IntegResource, ServerResource, TestMode, TestParams
from .supervisor import ProcessSupervisor, State

__version__ = "1.0.0"
__all__ = [
    "ArtifactNotFoundError",
    "ArtifactResolutionError",
    "HandshakeTimeoutError",
    "IllegalStateError",
    "IntegResource",
    "IntegResourceError",
    "NotStartedError",
    "ProcessExitedError",
    "ProcessSupervisor",
    "RuntimeConfigError",
    "ServerResource",
    "State",
    "TestMode",
    "TestParams",
]
