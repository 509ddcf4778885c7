from __future__ import annotations

import itertools
import os
from typing import Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Engine
from sqlalchemy import create_engine as sqlalchemy_create_engine

SEED = 42

DEFAULT_DB_URL = "sqlite+pysqlite:///coagula.sqlite3"

# Parameter sweep of the benchmark: every combination is measured once.
PARAMETER_GRID: dict[str, tuple[int, ...]] = {
    "blog_count": (1, 100),
    "posts_per_blog": (100, 1),
    "comments_per_post": (1, 10),
    "owner_count": (1, 5),
}


class DatasetParams(BaseModel):
    """Shape of one synthetic dataset."""

    model_config = ConfigDict(frozen=True)

    blog_count: int = Field(ge=0)
    posts_per_blog: int = Field(ge=0)
    comments_per_post: int = Field(ge=0)
    owner_count: int = Field(default=1, ge=1)
    seed: int = SEED

    @property
    def post_count(self) -> int:
        return self.blog_count * self.posts_per_blog

    @property
    def comment_count(self) -> int:
        return self.post_count * self.comments_per_post

    @property
    def entity_count(self) -> int:
        return self.blog_count + self.post_count + self.comment_count

    @property
    def expected_rows(self) -> int:
        """Rows the LEFT JOIN over blogs, posts and comments yields."""
        per_post = max(1, self.comments_per_post)
        per_blog = self.posts_per_blog * per_post if self.posts_per_blog else 1
        return self.blog_count * per_blog

    @property
    def label(self) -> str:
        return (
            f"blogs={self.blog_count}-posts={self.posts_per_blog}"
            f"-comments={self.comments_per_post}-owners={self.owner_count}"
        )


def parameter_grid(
    grid: Optional[Mapping[str, tuple[int, ...]]] = None, seed: int = SEED
) -> Iterator[DatasetParams]:
    grid = grid or PARAMETER_GRID
    names = list(grid)
    for values in itertools.product(*(grid[name] for name in names)):
        yield DatasetParams(seed=seed, **dict(zip(names, values)))


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    db_url: str = DEFAULT_DB_URL
    echo: bool = False
    repeat: int = Field(default=3, ge=1)
    validate_records: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        environ = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if url := environ.get("COAGULA_DB_URL"):
            values["db_url"] = url
        if echo := environ.get("COAGULA_DB_ECHO"):
            values["echo"] = _flag(echo)
        if repeat := environ.get("COAGULA_REPEAT"):
            values["repeat"] = int(repeat)
        if validate := environ.get("COAGULA_VALIDATE"):
            values["validate_records"] = _flag(validate)
        return cls.model_validate(values)


def create_engine(settings: Settings) -> Engine:
    if settings.db_url.startswith("sqlite"):
        return sqlalchemy_create_engine(settings.db_url, echo=settings.echo)
    return sqlalchemy_create_engine(
        settings.db_url,
        echo=settings.echo,
        pool_size=10,
        max_overflow=20,
    )
