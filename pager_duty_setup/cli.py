#!/usr/bin/env python3
"""
pager-duty-setup - check and set up Opsmatic webhooks on your PagerDuty services

You will need:
    Opsmatic organization integration token (Opsmatic dashboard, Org Settings | Team)
    PagerDuty subdomain (your custom PagerDuty URL subdomain)
    PagerDuty API access key (PagerDuty dashboard, API Access menu)

Usage:
    pager-duty-setup -s my-subdomain --pdkey my-pagerduty-key --okey my-opsmatic-token
    pager-duty-setup -s my-subdomain --pdkey my-pagerduty-key --okey my-opsmatic-token --addhooks

The subdomain and keys may also come from PAGERDUTY_SUBDOMAIN, PAGERDUTY_API_KEY
and OPSMATIC_TOKEN.
"""

import argparse
import logging
import sys
from typing import Optional, List

from .config import Options
from .errors import ConfigurationError, PagerDutySetupError
from .webhooks import PagerDutySetup

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pager-duty-setup',
        description='Check and set up Opsmatic webhooks on your PagerDuty services.',
    )
    parser.add_argument('-s', '--subdomain', help='PagerDuty subdomain')
    parser.add_argument('-p', '--pdkey', metavar='PAGERDUTY_API_KEY', help='PagerDuty API access key')
    parser.add_argument('-o', '--okey', metavar='OPSMATIC_TOKEN', help='Opsmatic integration token')
    parser.add_argument('-a', '--addhooks', action='store_true', help='add the Opsmatic webhook where missing')
    parser.add_argument('-t', '--timeout', type=float, help='per-request timeout in seconds (default 30)')
    parser.add_argument('-v', '--verbose', action='store_true', help='log progress')
    return parser


def parse_options(argv: Optional[List[str]] = None, environ=None) -> Options:
    args = build_parser().parse_args(argv)
    options = Options.from_env(environ, timeout=args.timeout)
    if args.subdomain:
        options.subdomain = args.subdomain
    if args.pdkey:
        options.pdkey = args.pdkey
    if args.okey:
        options.okey = args.okey
    options.addhooks = args.addhooks
    options.verbose = args.verbose
    return options.validate()


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
    )
    # keep urllib3 connection chatter out of verbose output
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        options = parse_options(argv)
    except ConfigurationError as e:
        print(e)
        build_parser().print_usage()
        return EXIT_USAGE

    configure_logging(options.verbose)
    logger.debug(f"Running with {options!r}")

    try:
        PagerDutySetup(options).run()
    except PagerDutySetupError as e:
        logger.error(f"ERROR: {e}", exc_info=options.verbose)
        return EXIT_ERROR
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
