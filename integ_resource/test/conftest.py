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
import os
import sys

import pytest

from integ_resource.supervisor import ProcessSupervisor, State

FAKE_SERVER = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fake_server.py")
PYTHON_LAUNCHER = (sys.executable, "-u")


@pytest.fixture()
def fake_server():
    return FAKE_SERVER


@pytest.fixture()
def make_supervisor(tmp_path):
    """Factory for supervisors running the fake server; leftovers are torn down."""
    created = []

    def factory(*server_args, artifact_path=FAKE_SERVER, launcher=PYTHON_LAUNCHER, **options):
        options.setdefault("handshake_interval", 0.1)
        options.setdefault("handshake_timeout", 10.0)
        supervisor = ProcessSupervisor(
            artifact_path,
            args=["--pid-dir", str(tmp_path), *server_args],
            launcher=launcher,
            **options,
        )
        created.append(supervisor)
        return supervisor

    yield factory

    for supervisor in created:
        if supervisor.state is State.READY:
            supervisor.stop()
        process = supervisor.process
        if process is not None and process.poll() is None:
            process.kill()
            process.wait()
