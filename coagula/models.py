from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase): ...


# User (1-M with Blog, Post and Comment through owner_id)
class User(Base):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), primary_key=True)

    blogs: Mapped[list[Blog]] = relationship(back_populates="owner", uselist=True)
    posts: Mapped[list[Post]] = relationship(back_populates="owner", uselist=True)
    comments: Mapped[list[Comment]] = relationship(
        back_populates="owner", uselist=True
    )


# Blog (M-1 with User, 1-M with Post)
class Blog(Base):
    __tablename__ = "blogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(255), nullable=False)

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="RESTRICT"),
        nullable=False,
    )
    owner: Mapped[User] = relationship(back_populates="blogs", uselist=False)

    posts: Mapped[list[Post]] = relationship(
        back_populates="blog",
        uselist=True,
        order_by="Post.id",
        cascade="save-update, merge",
    )


# Post (M-1 with Blog, M-1 with User, 1-M with Comment)
class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    blog_id: Mapped[int] = mapped_column(
        ForeignKey("blogs.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    blog: Mapped[Blog] = relationship(back_populates="posts", uselist=False)

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="RESTRICT"),
        nullable=False,
    )
    owner: Mapped[User] = relationship(back_populates="posts", uselist=False)

    comments: Mapped[list[Comment]] = relationship(
        back_populates="post",
        uselist=True,
        order_by="Comment.id",
        cascade="save-update, merge",
    )


# Comment (M-1 with Post, M-1 with User)
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    post: Mapped[Post] = relationship(back_populates="comments", uselist=False)

    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.email", ondelete="RESTRICT"),
        nullable=False,
    )
    owner: Mapped[User] = relationship(back_populates="comments", uselist=False)


__all__ = [
    "Base",
    "User",
    "Blog",
    "Post",
    "Comment",
]
