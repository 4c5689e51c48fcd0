"""Alembic environment and revisions, run against a throwaway SQLite file."""

import argparse
import sqlite3
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parent.parent
TABLES = {"readings", "user_profiles", "insights_cache", "insights_history", "rate_limits"}


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "powerpulse.db"


@pytest.fixture
def alembic_config(db_path):
    config = Config(cmd_opts=argparse.Namespace(x=[f"db_url=sqlite+aiosqlite:///{db_path}"]))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    return config


def _tables(db_path):
    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {name for (name,) in rows} - {"alembic_version"}


def test_upgrade_creates_tables_at_overridden_url(alembic_config, db_path):
    command.upgrade(alembic_config, "head")

    assert _tables(db_path) == TABLES


def test_downgrade_drops_everything(alembic_config, db_path):
    command.upgrade(alembic_config, "head")
    command.downgrade(alembic_config, "base")

    assert _tables(db_path) == set()
