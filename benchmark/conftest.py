from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from coagula import dataset
from coagula.config import DatasetParams, Settings, create_engine, parameter_grid
from coagula.harness import prepare, strategies_for, verify_equivalence

GRID = list(parameter_grid())


@pytest.fixture(scope="session")
def settings() -> Settings:
    """Benchmark settings, read once from COAGULA_* environment variables."""
    return Settings.from_env()


@pytest.fixture(scope="session")
def engine(settings: Settings) -> Generator[Engine, None, None]:
    """Create a database engine for benchmark tests."""
    sync_engine = create_engine(settings)

    try:
        dataset.create_schema(sync_engine)
        yield sync_engine
    finally:
        sync_engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory."""
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture(scope="module", params=GRID, ids=lambda params: params.label)
def seeded(request, session_factory: sessionmaker, settings: Settings) -> DatasetParams:
    """Seed one parameter combination and check every strategy agrees on it.

    Module scoped and parametrized, so pytest groups the benchmarks of one
    combination together and seeds each combination once.
    """
    params: DatasetParams = request.param
    prepare(session_factory, params)
    verify_equivalence(
        session_factory,
        params,
        strategies_for(validate=settings.validate_records),
    )
    return params
