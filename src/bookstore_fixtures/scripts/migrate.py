# src/bookstore_fixtures/scripts/migrate.py
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from bookstore_fixtures.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def build_config(url: str | None = None) -> Config:
    """Return an Alembic config pointing at the project migrations and `url`."""
    cfg = Config()
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    # ConfigParser interpolates "%", which URL-encoded passwords contain.
    cfg.set_main_option("sqlalchemy.url", (url or settings.database_url_sync).replace("%", "%%"))
    return cfg


def run_upgrade_head(url: str | None = None) -> None:
    command.upgrade(build_config(url), "head")


if __name__ == "__main__":
    run_upgrade_head()
