"""Console commands: ``realtyhub acl:setup``, ``roles:show``, ``admin:create`` and ``teams:backfill-personal``."""

from __future__ import annotations

import argparse
import logging
import sys

from realtyhub.cli import acl, admin, roles, teams


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="realtyhub", description="RealtyHub management commands")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in (acl, roles, admin, teams):
        module.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
