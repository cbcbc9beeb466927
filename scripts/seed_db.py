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

from taskbit.database.bootstrap import apply_seed_sql, ensure_demo_users
from taskbit.database.connection import DBConfig


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)
    print(f"OK: Seeded database -> {DBConfig.from_dict(db_config).describe()}")


if __name__ == "__main__":
    main()
