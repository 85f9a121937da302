"""Table models for account and token storage.

These SQLModel classes describe the relational schema only; the domain works
with `warden.domain.entities` and the repositories translate between them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Identity,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlmodel import Column, Field, SQLModel

USERS_EMAIL_CONSTRAINT = "users_email_key"


class UserRecord(SQLModel, table=True):
    """Row of the `users` table.

    `id`, `created_at` and `version` are filled in by the database and read
    back with RETURNING in the same statement as the insert.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name=USERS_EMAIL_CONSTRAINT),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, Identity(always=False), primary_key=True),
    )
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )
    name: str = Field(sa_column=Column(Text, nullable=False))
    email: str = Field(sa_column=Column(String(320), nullable=False))
    password_hash: str = Field(sa_column=Column(String(60), nullable=False))
    activated: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default=text("false")),
    )
    version: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, server_default=text("1")),
    )


class TokenRecord(SQLModel, table=True):
    """Row of the `tokens` table. Holds the SHA-256 digest, never the plaintext."""

    __tablename__ = "tokens"
    __table_args__ = (
        Index("ix_tokens_user_id_scope", "user_id", "scope"),
        {"extend_existing": True},
    )

    hash: bytes = Field(sa_column=Column(LargeBinary(32), primary_key=True))
    user_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    )
    expiry: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    scope: str = Field(sa_column=Column(String(32), nullable=False))


users_table = UserRecord.__table__
tokens_table = TokenRecord.__table__
