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
import atexit
import logging
import os
import subprocess
import threading
import time
from enum import Enum
from typing import List, Mapping, Optional, Sequence

from integ_resource import protocol
from integ_resource.console import PipeConsole
from integ_resource.errors import (
    ArtifactNotFoundError,
    HandshakeTimeoutError,
    IllegalStateError,
    NotStartedError,
    ProcessExitedError,
)
from integ_resource.runtime_config import RuntimeConfig

DEFAULT_LAUNCHER = ("java", "-jar")
REMOTE_DEBUG = "-agentlib:jdwp=transport=dt_socket,server=y,suspend=n,address="
HOSTNAME = "localhost"


class State(Enum):
    IDLE = "idle"
    STARTING = "starting"
    READY = "ready"
    STOPPED = "stopped"
    FAILED = "failed"


def build_command(artifact_path: str,
                  launcher: Sequence[str] = DEFAULT_LAUNCHER,
                  debug_port: int = -1,
                  system_properties: Optional[Mapping[str, Optional[str]]] = None,
                  args: Sequence[str] = ()) -> List[str]:
    """Builds the launch command line.

    The order is fixed: launcher, remote debug flag (only for a positive
    debug port), one -D flag per system property in the order supplied, the
    artifact path and finally the positional arguments. A property whose
    value is None becomes a bare ``-Dname`` toggle.
    """
    cmd = list(launcher)

    if debug_port > 0:
        cmd.append(f"{REMOTE_DEBUG}{debug_port}")

    for name, value in (system_properties or {}).items():
        if value is None:
            cmd.append(f"-D{name}")
        else:
            cmd.append(f"-D{name}={value}")

    cmd.append(artifact_path)
    cmd.extend(args)
    return cmd


def _delete_quietly(path):
    try:
        os.remove(path)
    except OSError:
        pass


class ProcessSupervisor:
    """
    Owns one external server process for the lifetime of a test.

    start() spawns the process and keeps asking it for its pid file until
    the process answers on stderr, then loads the runtime properties the
    server wrote to that file. stop() tears everything down again. An
    instance is single use: once stopped or failed it cannot be restarted.
    """

    def __init__(self, artifact_path: str,
                 args: Sequence[str] = (),
                 system_properties: Optional[Mapping[str, Optional[str]]] = None,
                 debug_port: int = -1,
                 launcher: Sequence[str] = DEFAULT_LAUNCHER,
                 handshake_interval: float = 0.5,
                 handshake_timeout: float = 60.0,
                 shutdown_grace: float = 5.0,
                 logfile: Optional[str] = None,
                 logger: Optional[logging.Logger] = None,
                 name: str = "integ-server"):
        self.artifact_path = artifact_path
        self.args = list(args)
        self.system_properties = dict(system_properties or {})
        self.debug_port = debug_port
        self.launcher = list(launcher)
        self.handshake_interval = handshake_interval
        self.handshake_timeout = handshake_timeout
        self.shutdown_grace = shutdown_grace
        self.name = name
        self._logfile = logfile
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._state = State.IDLE
        self._process = None
        self._console = None
        self._pid_file_path = None
        self._runtime_config = None

    @property
    def state(self) -> State:
        return self._state

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self._process

    @property
    def console(self) -> Optional[PipeConsole]:
        return self._console

    @property
    def pid_file_path(self) -> Optional[str]:
        return self._pid_file_path

    def _transition(self, expected, target):
        with self._lock:
            if self._state not in expected:
                raise IllegalStateError(f"cannot go from {self._state.value} to {target.value}")
            self._state = target

    def command(self) -> List[str]:
        return build_command(os.path.realpath(self.artifact_path), self.launcher,
                             self.debug_port, self.system_properties, self.args)

    def start(self) -> None:
        self._transition((State.IDLE,), State.STARTING)

        if not os.path.exists(self.artifact_path):
            self._fail()
            raise ArtifactNotFoundError(f"Cannot find artifact: {os.path.realpath(self.artifact_path)}")

        cmd = self.command()
        self._logger.info(f"Starting {self.name}: {' '.join(cmd)}")
        try:
            if self._logfile:
                # the reader threads append to it; an unusable path must fail before spawning
                open(self._logfile, encoding="utf-8", mode="a").close()
            self._process = subprocess.Popen(cmd, shell=False, stdin=subprocess.PIPE,
                                             stdout=subprocess.PIPE, stderr=subprocess.PIPE, close_fds=True)
        except OSError:
            self._fail()
            raise

        self._console = PipeConsole(self.name, self._process, protocol.is_readiness_token,
                                    logfile=self._logfile, logger=self._logger)
        self._console.start()

        try:
            self._pid_file_path = self._issue_pid_file_command()
            self._logger.info(f"Loading properties from pid file {self._pid_file_path}")
            self._runtime_config = RuntimeConfig.load(self._pid_file_path)
        except BaseException:
            # no failed start may leave the process running
            self._abort()
            raise

        self._logger.info(f"Loaded properties file: {self._pid_file_path}")
        for key, value in sorted(self._runtime_config.properties.items()):
            self._logger.info(f"  {key}={value}")

        self._transition((State.STARTING,), State.READY)

    def _issue_pid_file_command(self) -> str:
        deadline = time.monotonic() + self.handshake_timeout
        reader = self._console.stderr_reader

        while True:
            try:
                written = self._console.write(protocol.Command.PID_FILE.value)
            except OSError as error:
                raise ProcessExitedError(f"stdin of {self.name} broke during handshake: {error}") from error
            if not written:
                raise ProcessExitedError(f"{self.name} exited with code {self._process.returncode}")

            remaining = deadline - time.monotonic()
            pid_file_path = reader.wait_for_token(max(0.0, min(self.handshake_interval, remaining)))
            if pid_file_path is not None:
                return pid_file_path

            if time.monotonic() >= deadline:
                raise HandshakeTimeoutError(
                    f"no pid file path from {self.name} within {self.handshake_timeout} seconds")

    def _fail(self):
        with self._lock:
            self._state = State.FAILED

    def _abort(self):
        self._fail()
        try:
            self._console.close()
        except OSError as error:
            self._logger.warning(f"Closing stdin of {self.name} failed: {error}")
        self._destroy(grace=0)

    def _destroy(self, grace):
        process = self._process
        if process.poll() is None:
            if grace > 0:
                try:
                    process.wait(timeout=grace)
                except subprocess.TimeoutExpired:
                    pass
            if process.poll() is None:
                process.terminate()
                try:
                    process.wait(timeout=1)
                except subprocess.TimeoutExpired:
                    process.kill()
                    process.wait()
        self._console.join(timeout=1)
        self._logger.info(f"{self.name} has been stopped with code {process.returncode}.")

    def stop(self) -> None:
        with self._lock:
            if self._state is State.STOPPED:
                return
            if self._state is not State.READY:
                raise IllegalStateError(f"cannot stop {self.name} while {self._state.value}")
            self._state = State.STOPPED

        self._delete_pid_file()

        try:
            if not self._console.write(protocol.Command.SHUTDOWN.value):
                self._logger.warning(f"{self.name} exited before the shutdown command")
        except OSError as error:
            self._logger.warning(f"Sending shutdown to {self.name} failed: {error}")
        try:
            self._console.close()
        except OSError as error:
            self._logger.warning(f"Closing stdin of {self.name} failed: {error}")

        self._destroy(grace=self.shutdown_grace)

    def _delete_pid_file(self):
        path = self._pid_file_path
        if path is None or not os.path.exists(path):
            return
        try:
            os.remove(path)
        except OSError as error:
            self._logger.warning(f"Cannot delete {path} now ({error}), deleting it at exit")
            atexit.register(_delete_quietly, path)

    def _runtime(self) -> RuntimeConfig:
        if self._state is not State.READY:
            raise NotStartedError(f"{self.name} is {self._state.value}")
        return self._runtime_config

    @property
    def is_started(self) -> bool:
        return self._state is State.READY

    @property
    def hostname(self) -> str:
        self._runtime()
        return HOSTNAME

    @property
    def port(self) -> int:
        return self._runtime().port

    @property
    def base_url(self) -> str:
        return self._runtime().url

    @property
    def is_secure(self) -> bool:
        return self._runtime().secure

    @property
    def app_properties(self) -> Mapping[str, str]:
        return self._runtime().properties
