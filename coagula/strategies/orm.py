from __future__ import annotations

from abc import abstractmethod

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, joinedload, selectinload

from coagula import models
from coagula.config import DatasetParams
from coagula.records import Blog, owner_context
from coagula.strategies.base import Strategy


class OrmStrategy(Strategy):
    """Let the ORM build the graph, then validate it into the record shapes.

    Owners are resolved through the same lookup table as the row based
    strategies, so an ORM owner that is missing from it fails just the same.
    """

    @abstractmethod
    def statement(self) -> Select: ...

    def load(self, session: Session, params: DatasetParams) -> tuple[Blog, ...]:
        owners = self.owners(session)
        blogs = session.scalars(self.statement()).unique().all()
        with owner_context(owners):
            return tuple(Blog.model_validate(blog) for blog in blogs)


class OrmJoinedStrategy(OrmStrategy):
    name = "orm-joined"
    description = "ORM SingleQuery - joinedload posts, comments & owners"

    def statement(self) -> Select:
        return (
            select(models.Blog)
            .options(
                joinedload(models.Blog.owner),
                joinedload(models.Blog.posts).joinedload(models.Post.owner),
                joinedload(models.Blog.posts)
                .joinedload(models.Post.comments)
                .joinedload(models.Comment.owner),
            )
            .order_by(models.Blog.id)
        )


class OrmSelectinStrategy(OrmStrategy):
    name = "orm-selectin"
    description = "ORM SplitQuery - selectinload posts, comments & owners"

    def statement(self) -> Select:
        return (
            select(models.Blog)
            .options(
                selectinload(models.Blog.owner),
                selectinload(models.Blog.posts).selectinload(models.Post.owner),
                selectinload(models.Blog.posts)
                .selectinload(models.Post.comments)
                .selectinload(models.Comment.owner),
            )
            .order_by(models.Blog.id)
        )
