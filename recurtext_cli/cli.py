import argparse
import json
import logging
import sys

from dateutil.parser import isoparse

import recurtext


def entrance(argv=None):
    recurtext_argparse = argparse.ArgumentParser(
        description="Parse an English recurrence description into Later-style schedules."
    )
    recurtext_argparse.add_argument(
        "text",
        nargs="+",
        help='The description to parse, e.g. "every 5 minutes between the 1st and 30th minute"',
    )
    recurtext_argparse.add_argument(
        "--now",
        type=isoparse,
        help="ISO 8601 timestamp used as the anchor of relative windows such as 'for 2 hours'",
    )
    recurtext_argparse.add_argument(
        "--instructions",
        help="Print the emitted recurrence instructions instead of the expanded schedules",
        action="store_true",
    )
    recurtext_argparse.add_argument(
        "-v",
        "--verbose",
        help="Log parser decisions to stderr",
        action="store_true",
    )

    args = recurtext_argparse.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    text = " ".join(args.text)
    result = recurtext.parse_text(text, now=args.now)

    if args.instructions:
        for instruction in result.instructions:
            print(repr(instruction))
    else:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))

    if not result.ok:
        logging.error(
            "recurtext: unparsable input at offset %d: %r", result.error, text[result.error:]
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(entrance())
