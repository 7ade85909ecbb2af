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
import sys

import pytest

from integ_resource import (
    ArtifactResolutionError,
    HandshakeTimeoutError,
    IntegResource,
    NotStartedError,
    State,
    TestMode,
    TestParams,
)
from integ_resource.artifact import RESOURCE_FILE

PYTHON_LAUNCHER = (sys.executable, "-u")


@pytest.fixture()
def resource_options(tmp_path):
    return dict(args=["--pid-dir", str(tmp_path)], launcher=PYTHON_LAUNCHER,
                handshake_interval=0.1, handshake_timeout=10.0)


def test_context_manager_runs_the_server(fake_server, resource_options):
    resource = IntegResource(fake_server, **resource_options)
    assert resource.mode is TestMode.INTEG
    assert not resource.is_started

    with resource as started:
        assert started is resource
        assert resource.is_started
        params = resource.new_test_params()
        assert params == TestParams(hostname="localhost", port=8443, server_url="https://localhost:8443",
                                    secure=True, mode=TestMode.INTEG)
        assert resource.app_properties["port"] == "8443"
        assert resource.expect_output("Starting fake server", timeout=5)

    assert resource.supervisor.state is State.STOPPED
    assert resource.supervisor.process.poll() is not None


def test_teardown_runs_when_the_test_body_fails(fake_server, resource_options):
    resource = IntegResource(fake_server, **resource_options)

    with pytest.raises(RuntimeError, match="test failed"):
        with resource:
            raise RuntimeError("test failed")

    assert resource.supervisor.state is State.STOPPED
    assert resource.supervisor.process.poll() is not None


def test_failed_setup_never_runs_the_body(fake_server, resource_options):
    resource_options["args"].append("--silent")
    resource = IntegResource(fake_server, **dict(resource_options, handshake_timeout=0.5))
    body_ran = []

    with pytest.raises(HandshakeTimeoutError):
        with resource:
            body_ran.append(True)

    assert body_ran == []
    assert resource.supervisor.process.poll() is not None


def test_test_params_require_a_started_server(fake_server):
    resource = IntegResource(fake_server)
    with pytest.raises(NotStartedError):
        resource.new_test_params()
    with pytest.raises(NotStartedError):
        resource.expect_output("anything", timeout=0)


def test_artifact_resolved_from_resource_file(tmp_path, monkeypatch, fake_server):
    (tmp_path / RESOURCE_FILE).write_text(f"artifact.file.path={fake_server}\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    resource = IntegResource()
    assert resource.supervisor.artifact_path == fake_server


def test_unresolvable_artifact_fails_construction(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RUNFILES_DIR", raising=False)
    monkeypatch.delenv("RUNFILES_MANIFEST_FILE", raising=False)

    with pytest.raises(ArtifactResolutionError):
        IntegResource()
