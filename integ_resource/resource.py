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

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from integ_resource.artifact import find_executable_artifact
from integ_resource.errors import NotStartedError
from integ_resource.supervisor import ProcessSupervisor


class TestMode(Enum):
    __test__ = False

    UNIT = "unit"
    INTEG = "integ"


@dataclass(frozen=True)
class TestParams:
    """Connection parameters of a running server, handed to test code."""
    __test__ = False

    hostname: str
    port: int
    server_url: str
    secure: bool
    mode: TestMode


class ServerResource(ABC):
    """
    Abstract class that builds the interface every server resource has to implement.
    Tests only reach the server under test through this interface, so the same
    test can run against an in-process server or an external process.
    """

    @abstractmethod
    def setup(self) -> None:
        """Brings the server up. The test body must not run if this raises."""
        pass

    @abstractmethod
    def teardown(self) -> None:
        """Brings the server down. Must not mask the outcome of the test."""
        pass

    @property
    @abstractmethod
    def mode(self) -> TestMode:
        pass

    @abstractmethod
    def new_test_params(self) -> TestParams:
        pass

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.teardown()


class IntegResource(ServerResource):
    """Runs the server from the build's launchable artifact in a separate process."""

    def __init__(self, artifact_path: Optional[str] = None,
                 args: Sequence[str] = (),
                 system_properties: Optional[Mapping[str, Optional[str]]] = None,
                 debug_port: int = -1,
                 **supervisor_options) -> None:
        if artifact_path is None:
            artifact_path = find_executable_artifact()
        self.supervisor = ProcessSupervisor(artifact_path, args=args, system_properties=system_properties,
                                            debug_port=debug_port, **supervisor_options)

    def setup(self) -> None:
        self.supervisor.start()

    def teardown(self) -> None:
        self.supervisor.stop()

    @property
    def mode(self) -> TestMode:
        return TestMode.INTEG

    @property
    def is_started(self) -> bool:
        return self.supervisor.is_started

    @property
    def hostname(self) -> str:
        return self.supervisor.hostname

    @property
    def port(self) -> int:
        return self.supervisor.port

    @property
    def server_url(self) -> str:
        return self.supervisor.base_url

    @property
    def is_secure(self) -> bool:
        return self.supervisor.is_secure

    @property
    def app_properties(self) -> Mapping[str, str]:
        return self.supervisor.app_properties

    def expect_output(self, expr: str, timeout: float = 30, regex: bool = False) -> bool:
        """Waits until the server writes a matching line to stdout."""
        if not self.is_started:
            raise NotStartedError(f"{self.supervisor.name} is {self.supervisor.state.value}")
        return self.supervisor.console.expect(expr, timeout, regex)

    def new_test_params(self) -> TestParams:
        if not self.is_started:
            raise NotStartedError("This IntegResource is not started.")
        return TestParams(hostname=self.hostname, port=self.port, server_url=self.server_url,
                          secure=self.is_secure, mode=self.mode)
