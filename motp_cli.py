#!/usr/bin/env python3
"""Simple console mOTP tool."""

import argparse
import logging
import sys

from motp_config import MotpConfig
from motp_errors import MotpError
from motp_utils import DIGEST_ALGORITHMS, generate_motp
from time_utils import format_asctime

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    config = MotpConfig()
    parser = argparse.ArgumentParser(prog="motp", description="Simple console mOTP tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be verbose")
    parser.add_argument("-s", "--secret", help="Shared secret")
    parser.add_argument("-p", "--pin", help="PIN")
    parser.add_argument(
        "-P", "--duration", type=int, default=config.period,
        help=f"Code duration interval in seconds. Default: {config.period}",
    )
    parser.add_argument(
        "-d", "--length", type=int, default=config.length,
        help=f"Result code length. Default: {config.length}",
    )
    parser.add_argument(
        "-t", "--time",
        help="Time string, in one of formats: HTTP date / RFC 822, RFC 850, ANSI C, "
             "YYYY-MM-DD HH:MM:SS, @<seconds since the Epoch (UTC)>",
    )
    parser.add_argument(
        "-T", "--tz",
        help="Time zone offset from UTC, overrides the zone of --time. Ex: +0100, -0500",
    )
    parser.add_argument(
        "-D", "--digest", default=config.digest, choices=sorted(DIGEST_ALGORITHMS),
        help=f"Digest algorithm. Default: {config.digest}",
    )
    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s - %(message)s",
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        result = generate_motp(
            args.secret,
            args.pin,
            period=args.duration,
            length=args.length,
            time_str=args.time,
            tz=args.tz,
            digest=args.digest,
        )
    except MotpError as e:
        logger.error("%s", e)
        return 1

    if args.verbose:
        print(f"Time: {format_asctime(result.time)}")
    print(result.code)
    return 0


if __name__ == "__main__":
    sys.exit(main())
