from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from sqlalchemy import Executable, select
from sqlalchemy.orm import Session

from coagula import models
from coagula.config import DatasetParams
from coagula.lookup import LookupTable
from coagula.materializer import Materializer
from coagula.records import Blog, Owner
from coagula.schema import RowSchema

logger = logging.getLogger(__name__)

# Rows fetched per round trip when streaming a result into the materializer.
YIELD_PER = 1000


class Strategy(ABC):
    """A way of loading the blog graph.

    Every strategy returns the same logical graph for the same data, so the
    only thing that differs between them is how many rows and round trips it
    takes to get there.
    """

    __strategy_registry__: ClassVar[dict[str, type[Strategy]]] = {}

    name: ClassVar[str]
    description: ClassVar[str] = ""
    baseline: ClassVar[bool] = False

    validate: bool
    rows: Optional[int]

    def __init__(self, *, validate: bool = False) -> None:
        self.validate = validate
        self.rows = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # intermediate bases leave the name out and stay unregistered
        name = cls.__dict__.get("name")
        if name is None:
            return
        if name in cls.__strategy_registry__:
            raise RuntimeError(
                f"Strategy {name!r} is already registered by {cls.__strategy_registry__[name].__name__}"
            )
        cls.__strategy_registry__[name] = cls

    @classmethod
    def registry(cls) -> dict[str, type[Strategy]]:
        return dict(cls.__strategy_registry__)

    @classmethod
    def get(cls, name: str) -> type[Strategy]:
        try:
            return cls.__strategy_registry__[name]
        except KeyError:
            raise KeyError(
                f"Unknown strategy {name!r}, available: {sorted(cls.__strategy_registry__)}"
            ) from None

    @abstractmethod
    def load(self, session: Session, params: DatasetParams) -> tuple[Blog, ...]: ...

    def owners(self, session: Session) -> LookupTable[str, Owner]:
        """Fresh snapshot of the owner records for one invocation."""
        emails = session.scalars(select(models.User.email))
        return LookupTable.build(
            (Owner.model_construct(email=email) for email in emails),
            key=lambda owner: owner.email,
        )

    def stream(
        self,
        session: Session,
        statement: Executable,
        schema: RowSchema,
        owners: LookupTable[str, Owner],
    ) -> Materializer[Any]:
        """Execute ``statement`` and fold its rows into a new materializer."""
        materializer: Materializer[Any] = Materializer(
            schema, owners, validate=self.validate
        )
        result = session.execute(statement.execution_options(yield_per=YIELD_PER))
        materializer.feed_many(result.mappings())
        self.rows = (self.rows or 0) + materializer.rows
        return materializer

    def __call__(self, session: Session, params: DatasetParams) -> tuple[Blog, ...]:
        self.rows = None
        graph = self.load(session, params)
        logger.debug(
            "%s loaded %d blogs from %s rows (%s)",
            self.name,
            len(graph),
            self.rows if self.rows is not None else "ORM",
            params.label,
        )
        return graph

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, validate={self.validate})"
