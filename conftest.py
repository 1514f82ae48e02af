"""Shared pytest setup: every test runs against a fresh in-memory SQLite database."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from portfolio.core.database import engine  # noqa: E402
from portfolio.repositories.tables import metadata  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    metadata.drop_all(engine)
    metadata.create_all(engine)
    yield
