from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from edufund.config import get_settings  # noqa: E402
from edufund.database import ConnectionProvider, mask_db_url  # noqa: E402
from edufund.models.schema_meta import SCHEMA_VERSION  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Create ORM tables and record the schema version (deployment-time action)."
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Target DB URL (defaults to build_sqlalchemy_db_url(settings) from .env/env vars).",
    )
    parser.add_argument(
        "--i-understand",
        action="store_true",
        help="Required safety flag. Prevents accidental DDL against shared DBs.",
    )
    args = parser.parse_args(argv)

    if not args.i_understand:
        print("Refusing to run without --i-understand (safety).")
        return 2

    connections = ConnectionProvider(get_settings(), db_url=args.db_url)
    print("creating ORM tables on:", mask_db_url(connections.db_url))
    connections.create_schema()
    connections.dispose()
    print(f"done (schema version {SCHEMA_VERSION})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
