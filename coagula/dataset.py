"""
Synthetic dataset generation.

Creates a hierarchy of:
- Users (owner_count), keyed by email
- Blogs (blog_count), owned round-robin by the users
- Each blog has posts (posts_per_blog) with a random owner
- Each post has comments (comments_per_post) with a random owner

Titles and comment texts are Faker lorem sentences. Generation is seeded from
the dataset parameters so the same parameters always produce the same rows.
"""

from __future__ import annotations

import logging
import random

from faker import Faker
from sqlalchemy import Engine, delete
from sqlalchemy.orm import Session

from coagula.config import DatasetParams
from coagula.models import Base, Blog, Comment, Post, User

logger = logging.getLogger(__name__)


def create_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        Base.metadata.create_all(conn)


def drop_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        Base.metadata.drop_all(conn)


def reset(session: Session) -> None:
    """Empty all tables, children first so no foreign key is left dangling."""
    for model in (Comment, Post, Blog, User):
        session.execute(delete(model))
    session.flush()


def seed(session: Session, params: DatasetParams) -> list[Blog]:
    logger.info(
        "Preparing data: Blogs=%d, PostsPerBlog=%d, CommentsPerPost=%d, Owners=%d",
        params.blog_count,
        params.posts_per_blog,
        params.comments_per_post,
        params.owner_count,
    )

    reset(session)

    rng = random.Random(params.seed)
    fake = Faker()
    fake.seed_instance(params.seed)

    users = [User(email=f"user{i}@email.com") for i in range(1, params.owner_count + 1)]
    session.add_all(users)
    session.flush()

    step = max(1, params.blog_count // 10)
    blogs = []
    for i in range(params.blog_count):
        if i % step == 0:
            logger.info("Generating blog %d of %d...", i + 1, params.blog_count)

        blog = Blog(url=f"https://blog{i}.com", owner=users[i % len(users)])
        for _ in range(params.posts_per_blog):
            post = Post(title=fake.sentence(), owner=rng.choice(users))
            post.comments = [
                Comment(text=fake.sentence(), owner=rng.choice(users))
                for _ in range(params.comments_per_post)
            ]
            blog.posts.append(post)
        blogs.append(blog)

    session.add_all(blogs)
    session.flush()
    logger.info("Data generated and saved.")
    return blogs
