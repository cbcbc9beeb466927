from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "taskbit"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from taskbit.database.bootstrap import apply_schema, list_tables
from taskbit.database.connection import DBConfig


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    print(f"OK: Applied schema.sql -> {DBConfig.from_dict(db_config).describe()} (tables={len(tables)})")


if __name__ == "__main__":
    main()
