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
Discovery of the launchable server artifact produced by the build.

The build drops a small properties resource next to the tests that names the
artifact, e.g.::

    artifact.file.path=/path/to/server.jar

The resource is looked up in a list of directories first and then, when the
tests run under Bazel, through the runfiles tree.
"""

import logging
import os
from typing import Iterable, Mapping, Optional

from runfiles import Runfiles

from integ_resource.errors import ArtifactResolutionError
from integ_resource.runtime_config import load_properties

logger = logging.getLogger(__name__)

RESOURCE_FILE = "integ-resource.properties"
ARTIFACT_PATH_KEY = "artifact.file.path"


def find_resource_file(resource_file: str = RESOURCE_FILE,
                       search_paths: Optional[Iterable[str]] = None,
                       runfiles_env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Returns the path of the resource file, or None when it is nowhere to be found.

    :param resource_file: name of the properties resource
    :param search_paths: directories to look in, defaults to the current working directory
    :param runfiles_env: environment used to locate the runfiles tree, defaults to os.environ
    """
    if search_paths is None:
        search_paths = [os.getcwd()]

    for directory in search_paths:
        candidate = os.path.join(directory, resource_file)
        if os.path.isfile(candidate):
            return candidate

    r = Runfiles.Create(runfiles_env)
    if r is not None:
        candidate = r.Rlocation(f"_main/{resource_file}")
        if candidate and os.path.isfile(candidate):
            return candidate

    return None


def find_executable_artifact(resource_file: str = RESOURCE_FILE,
                             key: str = ARTIFACT_PATH_KEY,
                             search_paths: Optional[Iterable[str]] = None,
                             runfiles_env: Optional[Mapping[str, str]] = None) -> str:
    """Resolves the path of the launchable artifact from the properties resource.

    A relative artifact path is taken relative to the resource file. The
    artifact itself is not required to exist yet; that is checked on start.

    :raises ArtifactResolutionError: if the resource file or the key is missing
    """
    path = find_resource_file(resource_file, search_paths, runfiles_env)
    if path is None:
        logger.warning(f"Resource file for finding the executable artifact {resource_file} not found.")
        raise ArtifactResolutionError(f"resource file {resource_file} not found")

    try:
        properties = load_properties(path)
    except OSError as error:
        raise ArtifactResolutionError(f"cannot read {path}: {error}") from error

    artifact = properties.get(key)
    if not artifact:
        raise ArtifactResolutionError(f"no '{key}' property in {path}")

    if not os.path.isabs(artifact):
        artifact = os.path.join(os.path.dirname(path), artifact)
    logger.info(f"Resolved executable artifact {artifact} from {path}")
    return artifact
