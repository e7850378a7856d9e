"""initial bookstore schema

Revision ID: 5b1e7c2a9d04
Revises:
Create Date: 2026-10-18 09:12:41.338215

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1e7c2a9d04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create books, authors, reviews and price offers."""
    op.create_table(
        "books",
        sa.Column("book_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("published_on", sa.Date(), nullable=False),
        sa.Column("publisher", sa.String(length=128), nullable=True),
        sa.Column("price", sa.Numeric(precision=9, scale=2), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sa.Column("soft_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("book_id"),
    )
    op.create_table(
        "authors",
        sa.Column("author_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("author_id"),
    )
    op.create_table(
        "book_authors",
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("order", sa.SmallInteger(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["authors.author_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("book_id", "author_id"),
    )
    op.create_table(
        "reviews",
        sa.Column("review_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("voter_name", sa.String(length=100), nullable=False),
        sa.Column("num_stars", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("review_id"),
    )
    op.create_table(
        "price_offers",
        sa.Column("price_offer_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("new_price", sa.Numeric(precision=9, scale=2), nullable=False),
        sa.Column("promotional_text", sa.String(length=200), nullable=False),
        sa.Column("book_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["book_id"], ["books.book_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("price_offer_id"),
        sa.UniqueConstraint("book_id"),
    )


def downgrade() -> None:
    """Drop the book store schema."""
    op.drop_table("price_offers")
    op.drop_table("reviews")
    op.drop_table("book_authors")
    op.drop_table("authors")
    op.drop_table("books")
