from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from coagula import models
from coagula.config import DatasetParams
from coagula.materializer import link
from coagula.records import Blog
from coagula.schema import SPLIT_SCHEMAS
from coagula.strategies.base import Strategy


class SplitStrategy(Strategy):
    """One query per level, linked through the parent level's lookup table.

    Each query returns every entity exactly once, so nothing fans out; the
    price is one round trip per level.
    """

    name = "split"
    description = "SplitQuery - one query per level, linked by parent key"

    def load(self, session: Session, params: DatasetParams) -> tuple[Blog, ...]:
        owners = self.owners(session)

        blogs = self.stream(
            session,
            select(
                models.Blog.id.label("blog_id"),
                models.Blog.url.label("blog_url"),
                models.Blog.owner_id.label("blog_owner_id"),
            ).order_by(models.Blog.id),
            SPLIT_SCHEMAS["blog"],
            owners,
        )
        posts = self.stream(
            session,
            select(
                models.Post.id.label("post_id"),
                models.Post.title.label("post_title"),
                models.Post.blog_id.label("post_blog_id"),
                models.Post.owner_id.label("post_owner_id"),
            ).order_by(models.Post.id),
            SPLIT_SCHEMAS["post"],
            owners,
        )
        comments = self.stream(
            session,
            select(
                models.Comment.id.label("comment_id"),
                models.Comment.text.label("comment_text"),
                models.Comment.post_id.label("comment_post_id"),
                models.Comment.owner_id.label("comment_owner_id"),
            ).order_by(models.Comment.id),
            SPLIT_SCHEMAS["comment"],
            owners,
        )

        link(
            comments.result(),
            posts.index("post"),
            via="post_id",
            collection="comments",
        )
        link(posts.result(), blogs.index("blog"), via="blog_id", collection="posts")
        return blogs.result()
