# tests/conftest.py
"""Shared test fixtures and helpers.

Databases are SQLite files under pytest temp directories, accessed through
SQLAlchemy exactly as production code does.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings
from sqlalchemy import create_engine, text

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo logging configuration applied by CLI invocations."""
    yield
    structlog.reset_defaults()


def _create_customers_db(path: Path, count: int) -> str:
    """Create a SQLite database with ``count`` customers; return its URL.

    Customer ids run 1..count, names are "customer-<id>", and every third
    customer has status "closed" (the rest "open").
    """
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE customers ("
                "id INTEGER PRIMARY KEY, name TEXT, status TEXT)"
            )
        )
        if count:
            conn.execute(
                text("INSERT INTO customers (id, name, status) VALUES (:id, :name, :status)"),
                [
                    {
                        "id": i,
                        "name": f"customer-{i}",
                        "status": "closed" if i % 3 == 0 else "open",
                    }
                    for i in range(1, count + 1)
                ],
            )
    engine.dispose()
    return url


@pytest.fixture
def customers_url(tmp_path: Path) -> str:
    """URL of a database holding 25 customers."""
    return _create_customers_db(tmp_path / "customers.db", 25)


@pytest.fixture(scope="module")
def shared_customers_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Module-scoped 25-customer database for hypothesis-driven tests."""
    return _create_customers_db(tmp_path_factory.mktemp("shared") / "customers.db", 25)


@pytest.fixture
def make_customers_db(tmp_path: Path):
    """Factory fixture: build a customers database of a given size."""

    def make(count: int, name: str = "generated.db") -> str:
        return _create_customers_db(tmp_path / name, count)

    return make
