"""Seed ranks/groups and the demo admin + worker logins.

Demo logins: admin@example.com / admin123 (all permissions), worker@example.com / worker123.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.workorder_system.workorder_system.database.bootstrap import apply_seed_sql, ensure_demo_accounts


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_accounts(db_config)

    print(
        "OK: Seeded ranks, groups and demo accounts -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
