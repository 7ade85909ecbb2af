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
import logging
import shlex

import pytest

from integ_resource.resource import IntegResource

logger = logging.getLogger(__name__)


def pytest_addoption(parser):
    group = parser.getgroup("integ-resource", "external server process under test")
    group.addoption(
        "--integ-artifact",
        action="store",
        default=None,
        help="Launchable server artifact. Resolved from integ-resource.properties if omitted.",
    )
    group.addoption(
        "--integ-arg",
        action="append",
        default=[],
        help="Positional argument passed to the server after the artifact (repeatable).",
    )
    group.addoption(
        "--integ-launcher",
        action="store",
        default=None,
        help="Command that launches the artifact, shell quoted. Defaults to 'java -jar'.",
    )
    group.addoption(
        "--integ-property",
        action="append",
        default=[],
        metavar="KEY[=VALUE]",
        help="System property passed to the server, a bare KEY is a toggle (repeatable).",
    )
    group.addoption(
        "--integ-debug-port",
        action="store",
        type=int,
        default=-1,
        help="Attach a remote debug agent on this port.",
    )
    group.addoption(
        "--integ-handshake-timeout",
        action="store",
        type=float,
        default=60.0,
        help="Seconds to wait for the server to report readiness.",
    )
    group.addoption(
        "--integ-logfile",
        action="store",
        default=None,
        help="Append the server's stdout and stderr to this file.",
    )


def parse_properties_option(values):
    properties = {}
    for value in values:
        name, sep, setting = value.partition("=")
        properties[name] = setting if sep else None
    return properties


def integ_resource_from_config(config, **overrides):
    options = dict(
        artifact_path=config.getoption("integ_artifact"),
        args=config.getoption("integ_arg"),
        system_properties=parse_properties_option(config.getoption("integ_property")),
        debug_port=config.getoption("integ_debug_port"),
        handshake_timeout=config.getoption("integ_handshake_timeout"),
        logfile=config.getoption("integ_logfile"),
    )
    launcher = config.getoption("integ_launcher")
    if launcher:
        options["launcher"] = shlex.split(launcher)
    options.update(overrides)
    return IntegResource(**options)


@pytest.fixture()
def integ_resource(request):
    """Started IntegResource configured from the --integ-* options, stopped after the test."""
    resource = integ_resource_from_config(request.config)
    with resource:
        logger.info(f"Server ready at {resource.server_url}")
        yield resource
