from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel

from coagula.errors import MalformedRowError, MaterializationError
from coagula.lookup import LookupTable
from coagula.records import Owner
from coagula.schema import RowSchema

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)
C = TypeVar("C", bound=BaseModel)


class Materializer(Generic[R]):
    """Fold a stream of flat joined rows into a deduplicated nested graph.

    Rows are consumed one at a time and top down: a level whose key was seen
    before is reused, an unseen key builds a record, resolves its owner and
    appends it to the parent record of the same row. A null key ends the
    descent for that row, as produced by a LEFT JOIN that matched nothing.

    The instance may be fed incrementally; ``result`` returns whatever is
    complete so far, so a stream that ends early still yields a usable graph.
    Any materialization error discards the partial graph before propagating.
    """

    schema: RowSchema
    owners: LookupTable[str, Owner]
    validate: bool

    indexes: dict[str, LookupTable[Any, BaseModel]]
    roots: list[R]
    rows: int

    def __init__(
        self,
        schema: RowSchema,
        owners: LookupTable[str, Owner],
        *,
        validate: bool = False,
    ) -> None:
        self.schema = schema
        self.owners = owners
        self.validate = validate
        self.reset()

    def reset(self) -> None:
        self.indexes = {
            level.name: LookupTable(name=level.name) for level in self.schema.levels
        }
        self.roots = []
        self.rows = 0

    def feed(self, row: Any) -> None:
        try:
            self._consume(row)
        except MaterializationError:
            self.reset()
            raise

    def feed_many(self, rows: Iterable[Any]) -> None:
        for row in rows:
            self.feed(row)
        logger.debug(
            "Materialized %d rows into %s",
            self.rows,
            ", ".join(f"{len(index)} {name}" for name, index in self.indexes.items()),
        )

    def _consume(self, row: Any) -> None:
        levels = self.schema.levels
        parent: Optional[BaseModel] = None

        for depth, level in enumerate(levels):
            key = level.key(row)
            if key is None:
                if not level.optional:
                    raise MalformedRowError(
                        f"Row {self.rows} has no {level.name} key but the {level.name} join is required",
                        level=level.name,
                        row_index=self.rows,
                    )
                for deeper in levels[depth + 1 :]:
                    if (deeper_key := deeper.key(row)) is not None:
                        raise MalformedRowError(
                            f"Row {self.rows} has {deeper.name} {deeper_key!r} under a missing {level.name}",
                            level=deeper.name,
                            key=deeper_key,
                            row_index=self.rows,
                        )
                break

            index = self.indexes[level.name]
            record = index.get(key)
            if record is None:
                owner = (
                    self.owners.resolve(level.owner(row), level=level.name)
                    if level.owner is not None
                    else None
                )
                record = level.build(row, owner, parent, validate=self.validate)
                index[key] = record
                if parent is None:
                    self.roots.append(record)  # type: ignore[arg-type]
                else:
                    level.attach(parent, record)
            parent = record

        self.rows += 1

    def index(self, name: str) -> LookupTable[Any, BaseModel]:
        """Records built so far for one level, keyed by their surrogate key."""
        return self.indexes[name]

    def result(self) -> tuple[R, ...]:
        return tuple(self.roots)

    def __len__(self) -> int:
        return len(self.roots)


def materialize(
    rows: Iterable[Any],
    schema: RowSchema,
    owners: LookupTable[str, Owner],
    *,
    validate: bool = False,
) -> tuple[Any, ...]:
    materializer: Materializer[Any] = Materializer(schema, owners, validate=validate)
    materializer.feed_many(rows)
    return materializer.result()


def link(
    children: Iterable[C],
    parents: LookupTable[Any, BaseModel],
    *,
    via: str,
    collection: str,
) -> int:
    """Append each child to the ``collection`` of the parent its ``via`` field names.

    Children keep their relative order inside every parent collection. Returns
    the number of children linked.
    """
    linked = 0
    for child in children:
        parent = parents.resolve(
            getattr(child, via), level=type(child).__name__.lower()
        )
        getattr(parent, collection).append(child)
        linked += 1
    return linked
