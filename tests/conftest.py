from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coagula import dataset
from coagula.lookup import LookupTable
from coagula.records import Owner
from tests.rows import owner_table

# A single shared connection keeps the in-memory database alive across sessions
DB_URL = "sqlite+pysqlite://"


@pytest.fixture
def owners() -> LookupTable[str, Owner]:
    return owner_table()


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """Create an in-memory database engine shared by the whole test session."""
    sync_engine = create_engine(
        DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    try:
        dataset.create_schema(sync_engine)
        yield sync_engine
    finally:
        sync_engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory."""
    return sessionmaker(bind=engine, expire_on_commit=False)
