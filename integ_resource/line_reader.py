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
import threading
import time
from collections import deque
from contextlib import nullcontext
from datetime import datetime
from queue import Empty


class LineReader(threading.Thread):
    """
    This class launches a separate thread to drain one output pipe
    of the supervised process line by line. The readline function
    blocks until a new line is ready, and returns None once the pipe
    is closed. Every line is relayed to the logger, optionally
    appended to a logfile, and kept in a bounded history so tests
    can wait for specific output.
    """
    log_locks = {}

    def __init__(self, readline_func, name, print_logger=True, logfile=None, logger=None):
        super().__init__(name=name, daemon=True)
        self.readline_func = readline_func
        self.name = name
        self.logger = logger or logging.getLogger(name)
        self.print_logger = print_logger
        self._logfile = logfile
        self._history = LineHistory(max_size=400)
        if logfile and logfile not in LineReader.log_locks:
            LineReader.log_locks[logfile] = threading.Lock()

    def run(self):
        with open(self._logfile, encoding="utf-8", mode="a") if self._logfile else nullcontext() as logfile:
            while True:
                try:
                    line = self.readline_func()
                except ValueError:
                    # readline on a pipe that was closed underneath us
                    line = None
                except Exception as exception:
                    self.logger.error(f"Stopping {self.name} reader after read failure: {exception}")
                    return
                if line is None:
                    self.logger.info(f"External process stream {self.name} closed.")
                    return
                self._handle_line(line.replace('\x00', '').rstrip("\r\n"), logfile)

    def _handle_line(self, line, logfile):
        if self.print_logger:
            self.logger.info(line)
        if logfile:
            with LineReader.log_locks[self._logfile]:
                try:
                    logfile.write(f"[{datetime.now()}] [{self.name}] - {line} \n")
                    logfile.flush()
                except OSError as exception:
                    self.logger.error(f"Exception on write: {exception}")
        self._history.put(line)

    def read_until(self, expr, timeout=90, regex=False):
        """Consumes history until a line matches expr, False on timeout."""
        assert isinstance(expr, str)
        start = time.monotonic()
        while True:
            time_remaining = start - time.monotonic() + timeout
            if time_remaining <= 0:
                return False
            try:
                line = self.get_line(block=True, timeout=time_remaining)
            except Empty:
                return False
            if self._check_msg(line, expr, regex):
                return True

    def get_line(self, block=False, timeout=None):
        return self._history.get(block=block, timeout=timeout)

    @staticmethod
    def _check_msg(msg, expr, regex=False):
        return bool((regex and re.search(expr, msg)) or (not regex and expr in msg))


class TokenReader(LineReader):
    """
    Reader for the pipe that carries the readiness token.

    Lines are discarded until one satisfies the token predicate. That
    line is handed over to waiting threads exactly once; every line
    after it is relayed like ordinary diagnostic output and never
    looked at as a token again.
    """

    def __init__(self, readline_func, name, predicate, **kwargs):
        super().__init__(readline_func, name, **kwargs)
        self._predicate = predicate
        self._token = None
        self._token_found = threading.Event()

    def _handle_line(self, line, logfile):
        if self._token_found.is_set():
            super()._handle_line(line, logfile)
            return

        if self._predicate(line):
            self._token = line
            self._token_found.set()
            self.logger.info(f"Got pid file path {line} from application")

    @property
    def token(self):
        if self._token_found.is_set():
            return self._token
        return None

    def wait_for_token(self, timeout=None):
        """Blocks up to timeout seconds, returns the token or None."""
        if self._token_found.wait(timeout):
            return self._token
        return None


class LineHistory:
    """
    Thread-safe bounded history of relayed lines.
    When full, the oldest lines are dropped.
    """

    def __init__(self, max_size=0):
        self.lines = deque(maxlen=max_size or None)
        self.not_empty = threading.Condition(threading.Lock())

    def put(self, item):
        with self.not_empty:
            self.lines.append(item)
            self.not_empty.notify()

    def get(self, block=True, timeout=None):
        with self.not_empty:
            if not block:
                if not self.lines:
                    raise Empty
            elif timeout is None:
                while not self.lines:
                    self.not_empty.wait()
            elif timeout < 0:
                raise ValueError("'timeout' must be a non-negative number")
            elif not self.not_empty.wait_for(lambda: self.lines, timeout):
                raise Empty
            return self.lines.popleft()
