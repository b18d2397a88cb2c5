#!/usr/bin/env python3
"""
nsupdate feed

Turns host/address records into nsupdate directives for the forward (A/AAAA)
and reverse (PTR) zones, then runs nsupdate with them.

Accepted record forms, one per line or command-line argument:
    host,address[,extra]
    site,building,host,address[,extra]
    host=address    host|address    host address

Lines starting with '#' or '!' are comments. Bad lines are reported on stderr
as "<line>: <message>" and skipped.

Examples:
    nsfeed -d example.com host1,192.0.2.5
    nsfeed -d example.com -f inventory.csv --dry-run
    nsfeed -d example.com --remove 192.0.2.5=host1
"""

import argparse
import sys
from itertools import chain

import structlog

from .clients.feed_client import FeedClient
from .clients.nsupdate_client import NsupdateClient
from .config import configure_logging, load_config_from_env
from .pipeline import Pipeline

log = structlog.get_logger()


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="nsfeed",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("records", nargs="*", metavar="RECORD",
                        help="Records to process, each treated as one input line.")
    parser.add_argument("-f", "--file", action="append", default=[], dest="files",
                        help="Read records from FILE ('-' for stdin). May be repeated.")
    parser.add_argument("--url", help="Read records from an HTTP(S) inventory export.")
    parser.add_argument("-d", "--domain", help="Domain for hostnames (default: $DDNS_DOMAIN).")
    parser.add_argument("-s", "--server", help="DNS server to send updates to (default: $DDNS_SERVER).")
    parser.add_argument("-t", "--ttl", type=int, help="TTL for added records (default: $DDNS_TTL or 3600).")
    parser.add_argument("-k", "--key-file", help="TSIG key file for nsupdate (default: $NSUPDATE_KEY_FILE).")
    parser.add_argument("-r", "--remove", action="store_true",
                        help="Remove records instead of adding them.")
    parser.add_argument("--no-delete", dest="delete_before_add", action="store_false",
                        help="Do not delete existing forward records before adding.")
    direction = parser.add_mutually_exclusive_group()
    direction.add_argument("--forward-only", action="store_true", help="Only update forward records.")
    direction.add_argument("--reverse-only", action="store_true", help="Only update PTR records.")
    parser.add_argument("--keep-suffix", dest="drop_suffix", action="store_false",
                        help="Keep domain suffixes present in the input instead of forcing --domain.")
    parser.add_argument("-v", "--show", action="store_true",
                        help="Have nsupdate show each transaction before sending it.")
    parser.add_argument("-n", "--dry-run", action="store_true",
                        help="Print the nsupdate script instead of running nsupdate.")
    return parser.parse_args(argv)


def read_stdin_lines():
    # Undecodable bytes only spoil their own line.
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(errors="replace")
    return sys.stdin.read().splitlines()


def read_file_lines(path):
    if path == "-":
        return read_stdin_lines()
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read().splitlines()


def collect_lines(args):
    """Gathers input lines in order: arguments, files, then the HTTP feed."""
    sources = [args.records]
    for path in args.files:
        sources.append(read_file_lines(path))
    if args.url:
        feed_lines = FeedClient(args.url).fetch_lines()
        if feed_lines is None:
            return None
        sources.append(feed_lines)
    if not args.records and not args.files and not args.url:
        sources.append(read_stdin_lines())
    return list(chain.from_iterable(sources))


def run(argv=None):
    args = parse_args(argv)
    configure_logging()
    config = load_config_from_env(
        domain=args.domain,
        server=args.server,
        ttl=args.ttl,
        key_file=args.key_file,
        remove=args.remove,
        delete_before_add=args.delete_before_add,
        forward=not args.reverse_only,
        reverse=not args.forward_only,
        drop_suffix=args.drop_suffix,
        show=args.show,
    )

    lines = collect_lines(args)
    if lines is None:
        return 1

    script, result = Pipeline(config).render(lines)
    for error in result.errors:
        print(error, file=sys.stderr)

    if args.dry_run:
        sys.stdout.write(script)
        return 0

    if not result.directives:
        log.info("No records to update")
        return 0

    client = NsupdateClient(config.nsupdate_command, config.key_file, config.nsupdate_timeout)
    if not client.send(script):
        return 1
    return 0


def main():
    try:
        sys.exit(run())
    except OSError as e:
        log.error("Cannot read input", error=e)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception:
        log.critical("An unhandled exception occurred in main", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
