from __future__ import annotations

from sqlalchemy import Executable, Select, select
from sqlalchemy.orm import Session

from coagula import models
from coagula.config import DatasetParams
from coagula.records import Blog
from coagula.schema import BLOG_ROW_SCHEMA
from coagula.strategies.base import Strategy


def blog_join_statement() -> Select:
    """Blogs LEFT JOINed with their posts and comments.

    Owners are not joined: every level carries its owner key and the owner
    itself comes from the lookup table, so a dangling owner key still reaches
    the materializer instead of being filtered out by the database.
    """
    return (
        select(
            models.Blog.id.label("blog_id"),
            models.Blog.url.label("blog_url"),
            models.Blog.owner_id.label("blog_owner_id"),
            models.Post.id.label("post_id"),
            models.Post.title.label("post_title"),
            models.Post.blog_id.label("post_blog_id"),
            models.Post.owner_id.label("post_owner_id"),
            models.Comment.id.label("comment_id"),
            models.Comment.text.label("comment_text"),
            models.Comment.post_id.label("comment_post_id"),
            models.Comment.owner_id.label("comment_owner_id"),
        )
        .select_from(models.Blog)
        .outerjoin(models.Post, models.Post.blog_id == models.Blog.id)
        .outerjoin(models.Comment, models.Comment.post_id == models.Post.id)
        .order_by(models.Blog.id, models.Post.id, models.Comment.id)
    )


class SingleJoinStrategy(Strategy):
    """One generated query, every level in one flat fanned-out row stream."""

    name = "single-join"
    description = "SingleQuery - generated join of posts & comments"

    def statement(self) -> Executable:
        return blog_join_statement()

    def load(self, session: Session, params: DatasetParams) -> tuple[Blog, ...]:
        owners = self.owners(session)
        materializer = self.stream(session, self.statement(), BLOG_ROW_SCHEMA, owners)
        return materializer.result()
