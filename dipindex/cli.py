#!/usr/bin/env python3
"""dips CLI entrypoint."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dipindex.lib.config import CollectionConfig, load_collection_config
from dipindex.store import LoadResult, load
from dipindex.commands import advance as cmd_advance_module
from dipindex.commands import browse as cmd_browse_module
from dipindex.commands import check as cmd_check_module
from dipindex.commands import links as cmd_links_module
from dipindex.commands import list as cmd_list_module
from dipindex.commands import show as cmd_show_module
from dipindex.commands import status as cmd_status_module
from dipindex.commands import table as cmd_table_module

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_dips_dir(args) -> Path:
    """Resolve the DIP directory from --dir, $DIPS_DIR, or the cwd."""
    if args.dir:
        return Path(args.dir)
    env_dir = os.environ.get("DIPS_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd()


def get_collection(args) -> tuple[LoadResult, CollectionConfig]:
    """Load config and proposals, or exit 2 on configuration errors."""
    dips_dir = get_dips_dir(args)
    if not dips_dir.is_dir():
        print(f"ERROR: DIP directory not found: {dips_dir}")
        sys.exit(2)

    try:
        config = load_collection_config(dips_dir)
    except ValueError as e:
        print(f"ERROR: Invalid dips.env in {dips_dir}: {e}")
        sys.exit(2)

    return load(dips_dir, config), config


def cmd_list(args):
    result, _ = get_collection(args)
    return cmd_list_module.cmd_list(args, result)


def cmd_show(args):
    result, _ = get_collection(args)
    return cmd_show_module.cmd_show(args, result)


def cmd_status(args):
    result, _ = get_collection(args)
    return cmd_status_module.cmd_status(args, result)


def cmd_check(args):
    result, _ = get_collection(args)
    return cmd_check_module.cmd_check(args, result)


def cmd_table(args):
    result, _ = get_collection(args)
    return cmd_table_module.cmd_table(args, result)


def cmd_links(args):
    result, _ = get_collection(args)
    return cmd_links_module.cmd_links(args, result)


def cmd_advance(args):
    result, config = get_collection(args)
    return cmd_advance_module.cmd_advance(args, result, config)


def cmd_triggers(args):
    result, config = get_collection(args)
    return cmd_advance_module.cmd_triggers(args, result, config)


def cmd_browse(args):
    result, _ = get_collection(args)
    return cmd_browse_module.cmd_browse(args, result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='dips', description='DIP collection index')
    parser.add_argument('--dir', '-d', help='DIP directory (default: $DIPS_DIR or current directory)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # dips list
    p_list = subparsers.add_parser('list', help='List proposals')
    p_list.add_argument('--status', '-s', help='Only proposals with this status')
    p_list.set_defaults(func=cmd_list)

    # dips show
    p_show = subparsers.add_parser('show', help='Show proposal metadata')
    p_show.add_argument('id', help='DIP identifier (1003 or DIP1003)')
    p_show.add_argument('--body', '-b', action='store_true', help='Also print the document body')
    p_show.set_defaults(func=cmd_show)

    # dips status
    p_status = subparsers.add_parser('status', help='Count proposals per status')
    p_status.set_defaults(func=cmd_status)

    # dips check
    p_check = subparsers.add_parser('check', help='Report malformed documents')
    p_check.set_defaults(func=cmd_check)

    # dips table
    p_table = subparsers.add_parser('table', help='Print the normalized metadata table')
    p_table.add_argument('id', help='DIP identifier')
    p_table.set_defaults(func=cmd_table)

    # dips links
    p_links = subparsers.add_parser('links', help='Show reference links, code blocks and grammar diffs')
    p_links.add_argument('id', help='DIP identifier')
    p_links.set_defaults(func=cmd_links)

    # dips advance
    p_advance = subparsers.add_parser('advance', help='Move a proposal through review')
    p_advance.add_argument('id', help='DIP identifier')
    p_advance.add_argument('trigger', help='Lifecycle trigger (e.g., start_review, accept)')
    p_advance.set_defaults(func=cmd_advance)

    # dips triggers
    p_triggers = subparsers.add_parser('triggers', help='List triggers available for a proposal')
    p_triggers.add_argument('id', help='DIP identifier')
    p_triggers.set_defaults(func=cmd_triggers)

    # dips browse
    p_browse = subparsers.add_parser('browse', help='Interactive browser')
    p_browse.add_argument('--status', '-s', help='Start filtered to this status')
    p_browse.set_defaults(func=cmd_browse)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
