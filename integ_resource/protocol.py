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
Control protocol spoken with the supervised server process.

Commands go to the process's stdin, one per line. Once the server is up it
answers the readiness query by writing the absolute path of its pid file to
stderr. That file holds the runtime properties of the server.
"""

import os
from enum import Enum
from typing import Optional

PID_FILE_SUFFIX = ".pid"

SERVER_PORT = "port"
SERVER_URL = "url"
IS_SECURE = "secure"


class Command(str, Enum):
    PID_FILE = "pidFile"
    SHUTDOWN = "shutdown"


def is_readiness_token(line: Optional[str]) -> bool:
    """True if the line is an absolute path to a pid file."""
    if not line:
        return False
    return os.path.isabs(line) and line.endswith(PID_FILE_SUFFIX)
