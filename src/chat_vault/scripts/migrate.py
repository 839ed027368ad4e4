# src/chat_vault/scripts/migrate.py
from __future__ import annotations
import os
from alembic import command
from alembic.config import Config

from chat_vault.core.settings import settings

_MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def run_upgrade_head() -> None:
    cfg = Config(os.path.join(_MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.effective_database_url)
    cfg.set_main_option("script_location", _MIGRATIONS_DIR)
    command.upgrade(cfg, "head")

if __name__ == "__main__":
    run_upgrade_head()
