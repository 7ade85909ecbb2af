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
import pytest

from integ_resource.protocol import Command, is_readiness_token


@pytest.mark.parametrize("line", ["/tmp/run123.pid", "/var/run/server/app.pid"])
def test_absolute_pid_path_is_token(line):
    assert is_readiness_token(line)


@pytest.mark.parametrize("line", [
    None,
    "",
    "run123.pid",
    "relative/run.pid",
    "/tmp/run123.properties",
    "/tmp/run123.pid.bak",
    "INFO Server started on /tmp/run123.pid and more",
])
def test_other_lines_are_not_tokens(line):
    assert not is_readiness_token(line)


def test_command_values():
    assert Command.PID_FILE.value == "pidFile"
    assert Command.SHUTDOWN.value == "shutdown"
