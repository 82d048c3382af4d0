#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""check_events - Search logfiles for down & up events

The logfile is searched for lines matching the down and the up pattern. When a
down event is found, the check reports WARNING (or CRITICAL, see --critical)
until an up event shows up in the logfile. This is ideal for searching an snmp
trap logfile, e.g.

    check_events -L /var/log/snmptrapd.log \\
        -D "utility power failure" -U "utility power restored"

Only the part of the logfile written since the last run is searched. Where to
continue is stored in a seekfile, by default one per logfile and pattern pair
below /var/tmp/check_events. If you specify a seekfile, you *must* supply a
different one for each service, even if the services check the same logfile.
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

from pydantic import BaseModel

import checkprobes
from checkprobes.events import Mode, scan, State, StateStore
from checkprobes.utils import extra_opts
from checkprobes.utils.exceptions import (
    ProbeException,
    ProbeTimeout,
    StatePersistError,
    TargetUnavailable,
)
from checkprobes.utils.log import logger, setup_console_logging, verbosity_to_log_level
from checkprobes.utils.regex import regex
from checkprobes.utils.timeout import Deadline

PROG = "check_events"

TIMEOUT_TEXT = "plugin timed out."

_LOGGER = logging.getLogger("checkprobes.check_events")


class Args(BaseModel):
    logfile: str
    downevent: str
    upevent: str
    seekfile: None | str
    severity: State
    mode: Mode
    message: None | str
    timeout: int
    verbose: int
    debug: bool


class _ArgumentParser(argparse.ArgumentParser):
    # argparse exits with 2, which is CRITICAL for the monitoring core
    def error(self, message: str) -> NoReturn:
        output_check_result(State.UNKNOWN, message)
        self.print_usage(sys.stderr)
        sys.exit(State.UNKNOWN)


def parse_arguments(argv: Sequence[str]) -> Args:
    parser = _ArgumentParser(
        prog=PROG,
        description="Check for down & up events in a logfile",
        epilog="Options may also be read from an ini file with "
        "--extra-opts=[<section>][@<config_file>].",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {checkprobes.__version__}"
    )
    parser.add_argument(
        "-L", "--logfile", required=True, metavar="FILE", help="Filename to read and parse"
    )
    parser.add_argument(
        "-D",
        "--downevent",
        required=True,
        metavar="REGEX",
        help="Regular expression, matching the down event text",
    )
    parser.add_argument(
        "-U",
        "--upevent",
        required=True,
        metavar="REGEX",
        help="Regular expression, matching the up event text",
    )
    parser.add_argument(
        "-S",
        "--seekfile",
        default=None,
        metavar="FILE",
        help="Filename to store last pos and other runtime things. If not specified, it is "
        "computed using an md5 hash of the down & up event and a slightly modified name of "
        'the logfile, e.g. "/var/tmp/check_events/<logfile>.seekfile.<md5hash>"',
    )
    parser.add_argument(
        "-W",
        "-w",
        "--warning",
        dest="severity",
        action="store_const",
        const=State.WARNING,
        default=State.WARNING,
        help="Report WARNING if down event text is found (default)",
    )
    parser.add_argument(
        "-C",
        "-c",
        "--critical",
        dest="severity",
        action="store_const",
        const=State.CRITICAL,
        help="Report CRITICAL if down event text is found",
    )
    parser.add_argument(
        "-G",
        "--glitch",
        dest="mode",
        action="store_const",
        const=Mode.GLITCH,
        default=Mode.DEFAULT,
        help="Enable glitch finding mode: when a new down event is found, report it even if "
        "an up event follows, and start the next search at the line after the down event.",
    )
    parser.add_argument(
        "-M",
        "--message",
        default=None,
        help="Print MESSAGE when a down event is found (instead of the content of the down event)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=30,
        help="Seconds before plugin times out, 0 disables the timeout (default: 30)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show details for command-line debugging on stderr (can repeat up to 3 times)",
    )
    parser.add_argument("--debug", action="store_true", help="Raise python exceptions.")

    return Args.model_validate(vars(parser.parse_args(argv)))


def output_check_result(status: State, text: str) -> None:
    sys.stdout.write("%s - %s\n" % (status.name, text))


def _check_events_main(args: Args, deadline: Deadline) -> tuple[State, str]:
    # Bad patterns are reported before touching any file
    down = regex(args.downevent)
    up = regex(args.upevent)

    state_store = StateStore.for_target(args.logfile, args.downevent, args.upevent, args.seekfile)
    prior = state_store.load()

    try:
        status, text, new_state = scan(
            args.logfile,
            down,
            up,
            prior,
            mode=args.mode,
            severity=args.severity,
            message=args.message,
            deadline=deadline,
        )
    except TargetUnavailable as e:
        return State.OK, str(e)

    deadline.check()
    try:
        state_store.save(new_state)
    except StatePersistError as e:
        return State.UNKNOWN, f"{text} ({e})"

    return status, text


def check_events(args: Args) -> tuple[State, str]:
    try:
        with Deadline(args.timeout, message=TIMEOUT_TEXT) as deadline:
            return deadline.run(lambda: _check_events_main(args, deadline))
    except ProbeTimeout:
        return State.UNKNOWN, TIMEOUT_TEXT
    except ProbeException as e:
        if args.debug:
            raise
        return State.UNKNOWN, str(e)
    except Exception as e:
        if args.debug:
            raise
        return State.UNKNOWN, f"Unhandled exception: {e}"


def main(argv: Sequence[str] | None = None) -> int:
    raw_argv = sys.argv[1:] if argv is None else argv
    try:
        args = parse_arguments(extra_opts.expand(raw_argv, PROG))
    except ProbeException as e:
        output_check_result(State.UNKNOWN, str(e))
        return State.UNKNOWN

    setup_console_logging()
    logger.setLevel(verbosity_to_log_level(args.verbose))
    _LOGGER.info("Arguments: %r", args)

    status, text = check_events(args)
    output_check_result(status, text)
    return status
