"""
Comparison harness.

Seeds one dataset per parameter combination, then loads the blog graph with
every strategy and records how long it took and how much memory it needed.

Run with: python -m coagula.harness
Configure with COAGULA_DB_URL, COAGULA_DB_ECHO, COAGULA_REPEAT and
COAGULA_VALIDATE.
"""

from __future__ import annotations

import logging
import sys
import time
import tracemalloc
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker
from tabulate import tabulate

from coagula import dataset
from coagula.config import DatasetParams, Settings, create_engine, parameter_grid
from coagula.records import Blog, count_entities, graph_signature
from coagula.strategies import Strategy

logger = logging.getLogger(__name__)


class Measurement(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: str
    params: DatasetParams
    elapsed: Optional[float] = None
    peak_bytes: Optional[int] = None
    rows: Optional[int] = None
    entities: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Report(dict[tuple[str, DatasetParams], Measurement]):
    def record(self, measurement: Measurement) -> Measurement:
        self[(measurement.strategy, measurement.params)] = measurement
        return measurement

    def failures(self) -> list[Measurement]:
        return [measurement for measurement in self.values() if not measurement.ok]

    def render(self) -> str:
        table = [
            (
                m.params.label,
                m.strategy,
                f"{m.elapsed * 1000:.3f}" if m.elapsed is not None else "-",
                f"{m.peak_bytes / 1024:.1f}" if m.peak_bytes is not None else "-",
                m.rows if m.rows is not None else "-",
                m.entities if m.entities is not None else "-",
                m.error or "",
            )
            for m in self.values()
        ]
        return tabulate(
            table,
            headers=(
                "params",
                "strategy",
                "ms",
                "peak KiB",
                "rows",
                "entities",
                "error",
            ),
            disable_numparse=True,
        )


def strategies_for(
    names: Optional[Iterable[str]] = None, *, validate: bool = False
) -> list[Strategy]:
    names = list(names) if names is not None else list(Strategy.registry())
    return [Strategy.get(name)(validate=validate) for name in names]


def measure(
    strategy: Strategy,
    session_factory: sessionmaker,
    params: DatasetParams,
    *,
    repeat: int = 1,
) -> Measurement:
    """Best wall time over ``repeat`` loads plus the peak allocation of one more.

    A failing load becomes a failed measurement instead of an exception so one
    broken strategy does not take the rest of the sweep down with it.
    """
    try:
        best: Optional[float] = None
        graph: tuple[Blog, ...] = ()
        for _ in range(repeat):
            with session_factory() as session:
                start = time.perf_counter()
                graph = strategy(session, params)
                elapsed = time.perf_counter() - start
            best = elapsed if best is None else min(best, elapsed)

        # Leave tracing running if the caller started it.
        tracing = tracemalloc.is_tracing()
        with session_factory() as session:
            if tracing:
                tracemalloc.reset_peak()
            else:
                tracemalloc.start()
            try:
                baseline, _ = tracemalloc.get_traced_memory()
                strategy(session, params)
                _, peak = tracemalloc.get_traced_memory()
                peak -= baseline
            finally:
                if not tracing:
                    tracemalloc.stop()
    except Exception as e:
        logger.exception("Strategy %s failed for %s", strategy.name, params.label)
        return Measurement(
            strategy=strategy.name, params=params, error=f"{type(e).__name__}: {e}"
        )

    measurement = Measurement(
        strategy=strategy.name,
        params=params,
        elapsed=best,
        peak_bytes=peak,
        rows=strategy.rows,
        entities=count_entities(graph),
    )
    logger.info(
        "%s %s: %.3f ms, %.1f KiB, %s rows",
        params.label,
        strategy.name,
        (best or 0.0) * 1000,
        peak / 1024,
        strategy.rows if strategy.rows is not None else "-",
    )
    return measurement


def prepare(session_factory: sessionmaker, params: DatasetParams) -> None:
    with session_factory() as session:
        with session.begin():
            dataset.seed(session, params)


def compare(
    session_factory: sessionmaker,
    params: DatasetParams,
    strategies: Sequence[Strategy],
    *,
    repeat: int = 1,
) -> dict[str, Measurement]:
    """Seed ``params`` once and measure every strategy against it."""
    try:
        prepare(session_factory, params)
    except Exception as e:
        logger.exception("Could not prepare data for %s", params.label)
        return {
            strategy.name: Measurement(
                strategy=strategy.name,
                params=params,
                error=f"{type(e).__name__}: {e}",
            )
            for strategy in strategies
        }

    return {
        strategy.name: measure(strategy, session_factory, params, repeat=repeat)
        for strategy in strategies
    }


def verify_equivalence(
    session_factory: sessionmaker,
    params: DatasetParams,
    strategies: Sequence[Strategy],
) -> dict[str, tuple[Blog, ...]]:
    """Load the graph with every strategy and check they are structurally equal.

    The data for ``params`` must already be seeded.
    """
    graphs: dict[str, tuple[Blog, ...]] = {}
    for strategy in strategies:
        with session_factory() as session:
            graphs[strategy.name] = strategy(session, params)

    names = list(graphs)
    if names:
        reference = graph_signature(graphs[names[0]])
        for name in names[1:]:
            if graph_signature(graphs[name]) != reference:
                raise AssertionError(
                    f"Strategy {name!r} produced a different graph than {names[0]!r} for {params.label}"
                )
    return graphs


def run(
    settings: Settings,
    grid: Optional[Iterable[DatasetParams]] = None,
    strategies: Optional[Sequence[Strategy]] = None,
    *,
    engine: Optional[Engine] = None,
) -> Report:
    engine = engine or create_engine(settings)
    dataset.create_schema(engine)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    strategies = strategies or strategies_for(validate=settings.validate_records)

    report = Report()
    for params in grid if grid is not None else parameter_grid():
        for measurement in compare(
            session_factory, params, strategies, repeat=settings.repeat
        ).values():
            report.record(measurement)
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = Settings.from_env()
    argv = sys.argv[1:] if argv is None else argv
    names = list(argv) if argv else None
    strategies = strategies_for(names, validate=settings.validate_records)
    report = run(settings, strategies=strategies)
    print(report.render())
    return 1 if report.failures() else 0


if __name__ == "__main__":
    sys.exit(main())
