from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import Any, Iterable, Iterator, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from coagula.lookup import LookupTable

interned: ContextVar[Optional[LookupTable[str, Owner]]] = ContextVar(
    "interned", default=None
)


@contextlib.contextmanager
def owner_context(owners: LookupTable[str, Owner]) -> Iterator[LookupTable[str, Owner]]:
    """Resolve the owner of every record validated inside the block through ``owners``.

    Graphs validated from ORM objects would otherwise carry one Owner copy
    per reference instead of the shared lookup record.
    """
    token = interned.set(owners)
    try:
        yield owners
    finally:
        interned.reset(token)


class Owner(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    email: str


class Record(BaseModel):
    """Base of the owned record shapes.

    Inside ``owner_context`` the owner is looked up by the record's own
    ``owner_id``, so an unknown owner is reported against the blog, post or
    comment that references it.
    """

    model_config = ConfigDict(from_attributes=True)

    @field_validator("owner", mode="wrap", check_fields=False)
    @classmethod
    def intern_owner(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Owner:
        owners = interned.get()
        if owners is None or isinstance(value, Owner):
            return handler(value)
        return owners.resolve(info.data.get("owner_id"), level=cls.__name__.lower())


class Comment(Record):
    id: int
    text: str
    post_id: int
    owner_id: str
    owner: Owner


class Post(Record):
    id: int
    title: str
    blog_id: int
    owner_id: str
    owner: Owner

    comments: list[Comment] = Field(default_factory=list)


class Blog(Record):
    id: int
    url: str
    owner_id: str
    owner: Owner

    posts: list[Post] = Field(default_factory=list)


def signature(record: BaseModel) -> dict[str, Any]:
    """Order-insensitive structural form of a record and its whole subtree.

    Nested collections become mappings keyed by id so two graphs compare equal
    when they hold the same ids, attributes and membership at every level,
    whatever order the rows arrived in.
    """
    form: dict[str, Any] = {}
    for name in type(record).model_fields:
        value = getattr(record, name)
        if isinstance(value, list):
            form[name] = {item.id: signature(item) for item in value}
        elif isinstance(value, BaseModel):
            form[name] = value.model_dump()
        else:
            form[name] = value
    return form


def graph_signature(graph: Iterable[BaseModel]) -> dict[Any, dict[str, Any]]:
    return {record.id: signature(record) for record in graph}  # type: ignore[attr-defined]


def structurally_equal(left: Iterable[BaseModel], right: Iterable[BaseModel]) -> bool:
    return graph_signature(left) == graph_signature(right)


def count_entities(graph: Iterable[Blog]) -> int:
    """Distinct blogs, posts and comments in a graph (owners excluded)."""
    total = 0
    for blog in graph:
        total += 1 + len(blog.posts)
        total += sum(len(post.comments) for post in blog.posts)
    return total


__all__ = [
    "Owner",
    "Record",
    "Blog",
    "Post",
    "Comment",
    "owner_context",
    "signature",
    "graph_signature",
    "structurally_equal",
    "count_entities",
]
