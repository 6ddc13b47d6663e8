"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
Structured card fields (colors, prices) are JSON columns; they are turned
into domain values in db.operations and nowhere else.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    Local copy of a Scryfall card.

    Overwritten in full every time the card is fetched from Scryfall.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    set_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    rarity: Mapped[str] = mapped_column(String(16), default="common")
    image_uri: Mapped[str | None] = mapped_column(Text, nullable=True)
    mana_cost: Mapped[str | None] = mapped_column(String(128), nullable=True)
    type_line: Mapped[str] = mapped_column(String(255), default="")
    oracle_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    cmc: Mapped[float] = mapped_column(Float, default=0.0)
    prices: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    scryfall_uri: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class CollectionEntryDB(Base):
    """
    Owned copies of a card.

    One row per (card, condition, foil); adding the same combination again
    increases the quantity.
    """

    __tablename__ = "collection"
    __table_args__ = (
        UniqueConstraint("card_id", "condition", "foil", name="uq_collection_card_condition_foil"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    condition: Mapped[str] = mapped_column(String(8), default="NM")
    foil: Mapped[bool] = mapped_column(Boolean, default=False)
    language: Mapped[str] = mapped_column(String(8), default="en")
    notes: Mapped[str] = mapped_column(Text, default="")
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<CollectionEntryDB(card={self.card_id}, qty={self.quantity})>"


class WishlistEntryDB(Base):
    """A wanted card. At most one row per card."""

    __tablename__ = "wishlist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.id"), unique=True, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    max_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    priority: Mapped[str] = mapped_column(String(8), default="medium")
    notes: Mapped[str] = mapped_column(Text, default="")
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<WishlistEntryDB(card={self.card_id}, priority={self.priority})>"


class DeckDB(Base):
    """A user deck."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    format: Mapped[str] = mapped_column(String(50), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    color_identity: Mapped[str] = mapped_column(String(16), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckCardDB(Base):
    """Copies of one card in one category of a deck."""

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", "category", name="uq_deck_card_category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    category: Mapped[str] = mapped_column(String(16), default="mainboard")

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckCardDB(deck={self.deck_id}, card={self.card_id}, qty={self.quantity})>"


class PriceHistoryDB(Base):
    """A recorded price for a card on a platform."""

    __tablename__ = "price_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    platform: Mapped[str] = mapped_column(String(32), index=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<PriceHistoryDB(card={self.card_id}, platform={self.platform}, price={self.price})>"
        )


class PriceAlertDB(Base):
    """Threshold alert on a card's price."""

    __tablename__ = "price_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(64), ForeignKey("cards.id"), index=True)
    platform: Mapped[str] = mapped_column(String(32))
    target_price: Mapped[float] = mapped_column(Float)
    condition: Mapped[str] = mapped_column(String(8), default="below")
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    triggered: Mapped[bool] = mapped_column(Boolean, default=False)
    triggered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<PriceAlertDB(card={self.card_id}, {self.condition} {self.target_price})>"


class BudgetTransactionDB(Base):
    """A purchase, sale or trade."""

    __tablename__ = "budget_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(16), index=True)
    amount: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    description: Mapped[str] = mapped_column(Text, default="")
    card_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("cards.id"), nullable=True, index=True
    )
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return f"<BudgetTransactionDB(type={self.type}, amount={self.amount})>"


class CollectionSnapshotDB(Base):
    """Collection value at a point in time."""

    __tablename__ = "collection_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_value: Mapped[float] = mapped_column(Float, default=0.0)
    total_cards: Mapped[int] = mapped_column(Integer, default=0)
    unique_cards: Mapped[int] = mapped_column(Integer, default=0)
    platform: Mapped[str] = mapped_column(String(32), index=True)
    snapshot_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return f"<CollectionSnapshotDB(value={self.total_value}, platform={self.platform})>"
