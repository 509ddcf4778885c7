"""Row schema descriptors.

A ``RowSchema`` tells the materializer how a flat, joined row splits into the
levels of a hierarchy: where each level's key lives, which record shape the
level builds, which collection of the parent record it is appended to, and
whether the join that produced it may leave it empty.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, TypeVar

from pydantic import BaseModel

from coagula.records import Blog, Comment, Owner, Post

R = TypeVar("R", bound=BaseModel)

Row = Mapping[str, Any]
Extractor = Callable[[Any], Any]


def _extractor(source: str | Extractor) -> Extractor:
    if isinstance(source, str):
        return operator.itemgetter(source)
    return source


class Level(Generic[R]):
    __slots__ = (
        "name",
        "record",
        "key",
        "fields",
        "owner",
        "attach_to",
        "parent_field",
        "optional",
    )

    name: str
    record: type[R]
    key: Extractor
    fields: dict[str, Extractor]
    owner: Optional[Extractor]
    attach_to: Optional[str]
    parent_field: Optional[str]
    optional: bool

    def __init__(
        self,
        name: str,
        record: type[R],
        *,
        key: str | Extractor,
        fields: Mapping[str, str | Extractor],
        owner: str | Extractor | None = None,
        attach_to: Optional[str] = None,
        parent_field: Optional[str] = None,
        optional: bool = False,
    ) -> None:
        self.name = name
        self.record = record
        self.key = _extractor(key)
        self.fields = {field: _extractor(source) for field, source in fields.items()}
        self.owner = _extractor(owner) if owner is not None else None
        self.attach_to = attach_to
        self.parent_field = parent_field
        self.optional = optional

    def build(
        self,
        row: Any,
        owner: Optional[Owner],
        parent: Optional[BaseModel],
        *,
        validate: bool = False,
    ) -> R:
        data = {field: extract(row) for field, extract in self.fields.items()}
        if self.owner is not None:
            data["owner"] = owner
        if parent is not None and self.parent_field:
            data[self.parent_field] = parent.id  # type: ignore[attr-defined]
        if validate:
            return self.record.model_validate(data)
        return self.record.model_construct(**data)

    def attach(self, parent: BaseModel, record: R) -> None:
        getattr(parent, self.attach_to).append(record)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"Level({self.name!r}, {self.record.__name__}, optional={self.optional})"


class RowSchema:
    levels: tuple[Level[Any], ...]

    def __init__(self, *levels: Level[Any]) -> None:
        if not levels:
            raise ValueError("A row schema needs at least one level.")
        if levels[0].optional:
            raise ValueError(
                f"Top level {levels[0].name!r} cannot come from an optional join."
            )
        for level in levels[1:]:
            if not level.attach_to:
                raise ValueError(
                    f"Level {level.name!r} must name the parent collection it is attached to."
                )
        names = [level.name for level in levels]
        if len(set(names)) != len(names):
            raise ValueError(f"Level names must be unique, got {names}.")
        self.levels = levels

    @property
    def depth(self) -> int:
        return len(self.levels)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(level.name for level in self.levels)

    def __getitem__(self, name: str) -> Level[Any]:
        for level in self.levels:
            if level.name == name:
                return level
        raise KeyError(f"Level '{name}' not found in schema {self.names}")

    def __repr__(self) -> str:
        return f"RowSchema({' -> '.join(self.names)})"


# Column labels shared by the generated and the hand-written join.
BLOG_COLUMNS: Sequence[str] = (
    "blog_id",
    "blog_url",
    "blog_owner_id",
    "post_id",
    "post_title",
    "post_blog_id",
    "post_owner_id",
    "comment_id",
    "comment_text",
    "comment_post_id",
    "comment_owner_id",
)

BLOG_LEVEL: Level[Blog] = Level(
    "blog",
    Blog,
    key="blog_id",
    fields={"id": "blog_id", "url": "blog_url", "owner_id": "blog_owner_id"},
    owner="blog_owner_id",
)

POST_LEVEL: Level[Post] = Level(
    "post",
    Post,
    key="post_id",
    fields={"id": "post_id", "title": "post_title", "owner_id": "post_owner_id"},
    owner="post_owner_id",
    attach_to="posts",
    parent_field="blog_id",
    optional=True,
)

COMMENT_LEVEL: Level[Comment] = Level(
    "comment",
    Comment,
    key="comment_id",
    fields={
        "id": "comment_id",
        "text": "comment_text",
        "owner_id": "comment_owner_id",
    },
    owner="comment_owner_id",
    attach_to="comments",
    parent_field="post_id",
    optional=True,
)

BLOG_ROW_SCHEMA = RowSchema(BLOG_LEVEL, POST_LEVEL, COMMENT_LEVEL)

# Single level schemas for loading each table on its own. The parent id comes
# from the row since there is no materialized parent to read it from.
SPLIT_SCHEMAS: dict[str, RowSchema] = {
    "blog": RowSchema(BLOG_LEVEL),
    "post": RowSchema(
        Level(
            "post",
            Post,
            key="post_id",
            fields={
                "id": "post_id",
                "title": "post_title",
                "blog_id": "post_blog_id",
                "owner_id": "post_owner_id",
            },
            owner="post_owner_id",
        )
    ),
    "comment": RowSchema(
        Level(
            "comment",
            Comment,
            key="comment_id",
            fields={
                "id": "comment_id",
                "text": "comment_text",
                "post_id": "comment_post_id",
                "owner_id": "comment_owner_id",
            },
            owner="comment_owner_id",
        )
    ),
}
