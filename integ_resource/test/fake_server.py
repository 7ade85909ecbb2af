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

"""Stand-in for an embedded server launcher, speaking the stdin/stderr control protocol."""

import argparse
import os
import sys
import time


def parse_args():
    parser = argparse.ArgumentParser()
    parser.add_argument("--pid-dir", required=True)
    parser.add_argument("--port", type=int, default=8443)
    parser.add_argument("--url", default="https://localhost:8443")
    parser.add_argument("--secure", default="true")
    parser.add_argument("--ready-after", type=float, default=0.0)
    parser.add_argument("--silent", action="store_true", help="never answer the pid file query")
    parser.add_argument("--exit-code", type=int, default=None, help="exit right away")
    parser.add_argument("--broken-config", action="store_true", help="omit the port from the config")
    parser.add_argument("--noise", action="store_true", help="surround the token with other stderr lines")
    return parser.parse_known_args()


def write_config(args):
    path = os.path.join(os.path.abspath(args.pid_dir), f"run{os.getpid()}.pid")
    # colons escaped the way java.util.Properties.store writes them
    url = args.url.replace(":", "\\:")
    with open(path, "w", encoding="utf-8") as config:
        config.write("#Server runtime properties\n")
        if not args.broken_config:
            config.write(f"port={args.port}\n")
        config.write(f"url={url}\n")
        config.write(f"secure={args.secure}\n")
        config.write(f"argv={'|'.join(sys.argv[1:])}\n")
    return path


def main():
    args, _ = parse_args()
    if args.exit_code is not None:
        sys.exit(args.exit_code)

    started = time.monotonic()
    print("Starting fake server", flush=True)
    if args.noise:
        print("WARNING: still booting", file=sys.stderr, flush=True)
        print("relative/run.pid", file=sys.stderr, flush=True)

    pid_file = None
    for line in sys.stdin:
        command = line.strip()
        if command == "pidFile":
            if args.silent or time.monotonic() - started < args.ready_after:
                continue
            if pid_file is None:
                pid_file = write_config(args)
            print(pid_file, file=sys.stderr, flush=True)
            if args.noise:
                print("/tmp/decoy.pid", file=sys.stderr, flush=True)
                print("diagnostic after ready", file=sys.stderr, flush=True)
        elif command == "shutdown":
            print("Shutdown received", flush=True)
            return
        else:
            print(f"Unknown command {command}", flush=True)


if __name__ == "__main__":
    main()
