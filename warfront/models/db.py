"""
SQLAlchemy ORM models for persistent storage.

Timestamps are stored as naive UTC so that comparisons behave the same on
PostgreSQL and SQLite. Use `utcnow()` for every value written or compared.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# --- Accounts ---


class UserDB(Base):
    """
    A registered account.

    Name and email are unique case-insensitively through their normalized
    columns.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64))
    email: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default="user")

    name_normalized: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email_normalized: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    # Account settings
    display_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    region: Mapped[str | None] = mapped_column(String(64), nullable=True)
    dob: Mapped[str | None] = mapped_column(String(10), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, name={self.name})>"


class SessionDB(Base):
    """Bearer session. Only the SHA-256 digest of the token is stored."""

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime)


class EmailVerificationTokenDB(Base):
    """Single-use token mailed to a new account to confirm its address."""

    __tablename__ = "email_verification_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime)


# --- Cards ---


class CardDB(Base):
    """
    A physical card design.

    `custom_id` is the editor-assigned external identifier printed in the
    card's QR URL. A card with a claim code can be bound to exactly one
    inventory; `is_claimed` never goes back to False.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    custom_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    card_name: Mapped[str] = mapped_column(String(255))
    name_normalized: Mapped[str] = mapped_column(String(255), index=True)
    card_type: Mapped[str] = mapped_column(String(64))

    rarity: Mapped[str | None] = mapped_column(String(64), nullable=True)
    frame: Mapped[str | None] = mapped_column(String(64), nullable=True)
    numbering: Mapped[str | None] = mapped_column(String(64), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    claim_code: Mapped[str | None] = mapped_column(String(128), nullable=True)
    is_claimed: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, custom_id={self.custom_id})>"


class BatchDB(Base):
    """
    A print-run of a card.

    NORMAL batches carry a positive max supply; EXCLUSIVE and LIMITED never do.
    """

    __tablename__ = "batches"
    __table_args__ = (UniqueConstraint("card_id", "label", name="uq_batch_card_label"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    label: Mapped[str] = mapped_column(String(16))
    type: Mapped[str] = mapped_column(String(16))
    max_supply: Mapped[int | None] = mapped_column(Integer, nullable=True)
    minted: Mapped[int] = mapped_column(Integer, default=0)
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<BatchDB(card_id={self.card_id}, label={self.label})>"


class CardVerifyTokenDB(Base):
    """One-time token proving a card's QR code was scanned."""

    __tablename__ = "card_verify_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime)


class OwnedCardDB(Base):
    """A card in a user's inventory. At most one row per (user, card)."""

    __tablename__ = "owned_cards"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_owned_user_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    card: Mapped["CardDB"] = relationship(lazy="selectin")


# --- Social ---


class FriendshipDB(Base):
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("requester_id", "requestee_id", name="uq_friendship_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    requester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    requestee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(String(16), default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class NotificationDB(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[str] = mapped_column(String(32))
    message: Mapped[str] = mapped_column(Text)
    href: Mapped[str] = mapped_column(String(255))
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# --- Battles ---


class BattleDB(Base):
    """1v1 battle lobby: Open -> Full -> Complete."""

    __tablename__ = "battles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    host_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    opponent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(16), default="Open", index=True)
    winner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_activity: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    host: Mapped["UserDB"] = relationship(foreign_keys=[host_id], lazy="selectin")
    opponent: Mapped["UserDB | None"] = relationship(foreign_keys=[opponent_id], lazy="selectin")


class MultiplayerBattleDB(Base):
    """Multiplayer lobby: Waiting -> In Progress -> Finished."""

    __tablename__ = "multiplayer_battles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    host_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    max_players: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(16), default="Waiting", index=True)
    last_activity: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    players: Mapped[list["MultiplayerPlayerDB"]] = relationship(
        back_populates="battle",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MultiplayerPlayerDB.id",
    )


class MultiplayerPlayerDB(Base):
    __tablename__ = "multiplayer_players"
    __table_args__ = (UniqueConstraint("battle_id", "user_id", name="uq_multiplayer_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    battle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("multiplayer_battles.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    battle: Mapped["MultiplayerBattleDB"] = relationship(back_populates="players")
    user: Mapped["UserDB"] = relationship(lazy="selectin")


# --- Packs ---


class PackDB(Base):
    """A sealed booster pack with a scannable id."""

    __tablename__ = "packs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pack_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    scan_count: Mapped[int] = mapped_column(Integer, default=0)
    batch: Mapped[str | None] = mapped_column(String(16), nullable=True)
