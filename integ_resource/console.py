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
import re
import subprocess
from typing import Callable, Optional

from integ_resource.line_reader import LineReader, TokenReader


def try_to_encode(data, encoding='utf-8'):
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, bytes):
        return data
    raise TypeError("could not encode data. must be a str or bytes")


def try_to_decode(data, encoding='utf-8'):
    if isinstance(data, bytes):
        data = re.sub(b'\r[^\n]', b'', data)
        return data.decode(encoding, 'replace').rstrip("\n").rstrip("\r")
    if isinstance(data, str):
        return data.rstrip("\n").rstrip("\r")
    raise TypeError("could not decode data. must be a str or bytes")


class PipeConsole:
    """Control channel over the three standard streams of a subprocess.

    Commands are written to stdin, one per line. Two reader threads drain
    stdout and stderr concurrently, so the child never blocks on a full
    pipe. The stderr reader also watches for the readiness token.
    """

    def __init__(
            self,
            name: str,
            process: subprocess.Popen,
            token_predicate: Callable[[str], bool],
            linefeed: str = "\n",
            encoding: str = "utf-8",
            logfile: Optional[str] = None,
            print_logger: bool = True,
            logger: Optional[logging.Logger] = None,
    ) -> None:
        r"""Initializes the PipeConsole instance.

        Args:
            name: Name of the console, used for the reader threads.
            process: The subprocess.Popen instance, opened with binary pipes
                for stdin, stdout and stderr.
            token_predicate: Decides whether a stderr line is the readiness
                token.
            linefeed: Linefeed character(s) appended to commands.
                Defaults to '\n'.
            encoding: Encoding of the process streams. Defaults to 'utf-8'.
            logfile: Path to a log file receiving all relayed lines.
                Defaults to None.
            print_logger: Flag to enable or disable relaying lines to the
                logger. Defaults to True.
            logger: Parent logger of the relay channels. Defaults to a logger
                named after the console.
        """
        self.name = name
        self._linefeed = linefeed
        self._encoding = encoding
        self._process = process
        self._closed = False
        parent = logger or logging.getLogger(name)

        def reader(stream):
            def readline() -> Optional[str]:
                line = stream.readline()
                if not line:  # EOF detected
                    return None
                return try_to_decode(line, self._encoding)
            return readline

        self.stdout_reader = LineReader(
            readline_func=reader(process.stdout),
            name=f"{name}.stdout",
            print_logger=print_logger,
            logfile=logfile,
            logger=parent.getChild("stdout"),
        )
        self.stderr_reader = TokenReader(
            readline_func=reader(process.stderr),
            name=f"{name}.stderr",
            predicate=token_predicate,
            print_logger=print_logger,
            logfile=logfile,
            logger=parent.getChild("stderr"),
        )

    def start(self) -> None:
        # stderr first: it carries the answer to the first command we send
        self.stderr_reader.start()
        self.stdout_reader.start()

    def write(self, command: str) -> bool:
        """Writes a command line to the process's stdin and flushes it.

        Returns False without writing when the process has already exited.
        Raises OSError (e.g. BrokenPipeError) if the pipe breaks while writing.
        """
        if self._closed or self._process.poll() is not None:
            return False
        self._process.stdin.write(try_to_encode(command + self._linefeed, self._encoding))
        self._process.stdin.flush()
        return True

    def close(self) -> None:
        """Closes the write side. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._process.stdin.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def join(self, timeout=None) -> None:
        """Waits for both readers and closes the read sides they are done with."""
        for reader, stream in ((self.stderr_reader, self._process.stderr),
                               (self.stdout_reader, self._process.stdout)):
            if reader.is_alive():
                reader.join(timeout)
            # closing under a blocked reader would wait on its buffer lock
            if not reader.is_alive():
                stream.close()

    def expect(self, expr, timeout, regex=False) -> bool:
        return self.stdout_reader.read_until(expr, timeout, regex)
