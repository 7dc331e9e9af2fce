from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from ..config import ConfigError
from ..logging import get_logger
from ..orm import ENTITY_TABLES, DataClient, UnknownEntityError
from ..rowstore import APIError

LOG = get_logger("cli-main")


def _coerce(raw: str) -> Any:
    low = raw.lower()
    if low in ("true", "false"):
        return low == "true"
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def parse_where(pairs: Optional[Sequence[str]]) -> Dict[str, Any]:
    """`["pharmacyId=7", "branch.isActive=true"]` -> nested where mapping."""
    where: Dict[str, Any] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"--where expects key=value, got {pair!r}")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"--where expects key=value, got {pair!r}")
        if "." in key:
            outer, inner = key.split(".", 1)
            where.setdefault(outer, {})[inner] = _coerce(value.strip())
        else:
            where[key] = _coerce(value.strip())
    return where


def parse_order(raw: Optional[str]) -> Optional[Dict[str, str]]:
    if not raw:
        return None
    column, _, direction = raw.partition(":")
    return {column: (direction or "asc").lower()}


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pharmacy-db",
        description="Query pharmacy data through the entity handlers.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tables = subparsers.add_parser("tables", help="List entity -> table mapping")
    tables.set_defaults(handler=_cmd_tables)

    count = subparsers.add_parser("count", help="Count rows of an entity")
    count.add_argument("entity")
    count.add_argument("--where", action="append", help="Equality filter key=value (repeatable)")
    count.set_defaults(handler=_cmd_count)

    find = subparsers.add_parser("find", help="List rows of an entity")
    find.add_argument("entity")
    find.add_argument("--where", action="append", help="Equality filter key=value (repeatable)")
    find.add_argument("--include", action="append", help="Embed a related collection (repeatable)")
    find.add_argument("--order-by", help="column[:asc|desc]")
    find.add_argument("--skip", type=int)
    find.add_argument("--take", type=int)
    find.set_defaults(handler=_cmd_find)

    get = subparsers.add_parser("get", help="Fetch one row by id")
    get.add_argument("entity")
    get.add_argument("--id", type=int, required=True)
    get.add_argument("--include", action="append", help="Embed a related collection (repeatable)")
    get.set_defaults(handler=_cmd_get)
    return parser


def _includes(names: Optional[List[str]]) -> Optional[Dict[str, bool]]:
    return {n: True for n in names} if names else None


def _cmd_tables(ns: argparse.Namespace, db: Optional[DataClient]) -> int:
    _print(dict(ENTITY_TABLES))
    return 0


def _cmd_count(ns: argparse.Namespace, db: DataClient) -> int:
    _print({"entity": ns.entity, "count": db[ns.entity].count(parse_where(ns.where))})
    return 0


def _cmd_find(ns: argparse.Namespace, db: DataClient) -> int:
    rows = db[ns.entity].find_many(
        parse_where(ns.where),
        include=_includes(ns.include),
        order_by=parse_order(ns.order_by),
        skip=ns.skip,
        take=ns.take,
    )
    _print(rows)
    return 0


def _cmd_get(ns: argparse.Namespace, db: DataClient) -> int:
    row = db[ns.entity].find_unique({"id": ns.id}, include=_includes(ns.include))
    if row is None:
        LOG.warning(f"{ns.entity} id={ns.id} not found")
        return 1
    _print(row)
    return 0


def main(argv: Optional[Sequence[str]] = None, *, db: Optional[DataClient] = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    args = _build_parser().parse_args(provided)

    try:
        if db is None and args.command != "tables":
            from ..db import create_data_client

            db = create_data_client()
        code = args.handler(args, db)
    except (ConfigError, UnknownEntityError, ValueError) as e:
        LOG.error(str(e))
        return 2
    except APIError as e:
        LOG.error(f"Store error ({e.code}): {e.message}")
        return 1
    LOG.debug(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
