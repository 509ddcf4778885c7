from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Self, TypeVar

from coagula.errors import UnresolvedReferenceError

K = TypeVar("K")
V = TypeVar("V")


class LookupTable(dict, Generic[K, V]):
    """Read-only store of records keyed by a stable identifier.

    Used for the shared owner records every level references, and by the
    split loader to attach a level to the records of the level above it.
    """

    name: str

    def __init__(self, *args: Any, name: str = "owner", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.name = name

    @classmethod
    def build(
        cls, records: Iterable[V], key: Callable[[V], K], *, name: str = "owner"
    ) -> Self:
        table = cls(name=name)
        for record in records:
            table[key(record)] = record
        return table

    def resolve(self, key: K, *, level: str = "") -> V:
        """Return the record stored under ``key`` or fail loudly."""
        if key is None:
            raise UnresolvedReferenceError(
                f"Missing {self.name} reference on {level or 'row'}",
                level=level,
                key=key,
                target=self.name,
            )
        try:
            return self[key]
        except KeyError:
            raise UnresolvedReferenceError(
                f"{level or 'Row'} references unknown {self.name} {key!r}",
                level=level,
                key=key,
                target=self.name,
            ) from None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {len(self)} records)"
