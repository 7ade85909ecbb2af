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
Reading of the flat key/value files written by the server launcher.

The files follow the java.util.Properties text format, since that is what the
launcher writes: ``key=value``, ``key: value`` or ``key value`` entries,
``#``/``!`` comment lines, backslash escapes and backslash line continuations.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping
from urllib.parse import urlparse

from integ_resource import protocol
from integ_resource.errors import RuntimeConfigError

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=:"


def _ends_with_continuation(line: str) -> bool:
    backslashes = len(line) - len(line.rstrip("\\"))
    return backslashes % 2 == 1


def _logical_lines(lines: Iterable[str]):
    pending = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        if pending is None:
            stripped = line.lstrip()
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped
        else:
            line = pending + line.lstrip()
        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        pending = None
        yield line
    if pending is not None:
        yield pending


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\" or i + 1 == len(text):
            out.append(char)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and i + 6 <= len(text):
            try:
                out.append(chr(int(text[i + 2:i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_entry(line: str):
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in _SEPARATORS or char.isspace():
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip()
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip()
    return _unescape(key), _unescape(rest)


def parse_properties(lines: Iterable[str]) -> Dict[str, str]:
    """Parses properties text, given as an iterable of lines, into a dict.

    Later entries override earlier ones, as with java.util.Properties.
    """
    properties = {}
    for line in _logical_lines(lines):
        key, value = _split_entry(line)
        properties[key] = value
    return properties


def load_properties(path: str) -> Dict[str, str]:
    with open(path, encoding="utf-8") as properties_file:
        return parse_properties(properties_file)


@dataclass(frozen=True)
class RuntimeConfig:
    """Where and how the running server can be reached."""

    port: int
    url: str
    secure: bool
    properties: Mapping[str, str]

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> "RuntimeConfig":
        missing = [key for key in (protocol.SERVER_PORT, protocol.SERVER_URL, protocol.IS_SECURE)
                   if key not in properties]
        if missing:
            raise RuntimeConfigError(f"missing required keys {missing}")

        try:
            port = int(properties[protocol.SERVER_PORT])
        except ValueError as error:
            raise RuntimeConfigError(
                f"'{protocol.SERVER_PORT}' is not an integer: {properties[protocol.SERVER_PORT]}") from error

        url = properties[protocol.SERVER_URL]
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise RuntimeConfigError(f"'{protocol.SERVER_URL}' is not an absolute URL: {url}")

        # Anything but "true", in any case, is false.
        secure = properties[protocol.IS_SECURE].strip().lower() == "true"

        return cls(port=port, url=url, secure=secure, properties=MappingProxyType(dict(properties)))

    @classmethod
    def load(cls, path: str) -> "RuntimeConfig":
        try:
            properties = load_properties(path)
        except OSError as error:
            raise RuntimeConfigError(f"cannot read {path}: {error}") from error
        return cls.from_properties(properties)
