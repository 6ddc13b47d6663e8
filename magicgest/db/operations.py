"""
Database CRUD operations.

Async functions for the card cache, collection, wishlist, decks, price
history, price alerts and budget ledger. Every function works inside the
caller's session; committing is left to the session scope, so a request's
writes land together or not at all.

ORM rows are converted to domain models here (the *_to_model functions);
JSON columns never leave this module as raw JSON.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from magicgest.analysis.alerts import current_price, should_trigger
from magicgest.analysis.budget import collection_value
from magicgest.models.budget import (
    BudgetTransaction,
    CollectionSnapshot,
    TransactionType,
)
from magicgest.models.card import CardRecord, CollectionEntry, WishlistEntry, sort_colors
from magicgest.models.db import (
    BudgetTransactionDB,
    CardDB,
    CollectionEntryDB,
    CollectionSnapshotDB,
    DeckCardDB,
    DeckDB,
    PriceAlertDB,
    PriceHistoryDB,
    WishlistEntryDB,
    utcnow,
)
from magicgest.models.deck import Deck, DeckCardEntry, DeckCategory
from magicgest.models.failure import ConflictError, NotFoundError
from magicgest.models.platform import PriceSource
from magicgest.models.price import (
    AlertCondition,
    BulkRecordResult,
    PriceAlert,
    PricePoint,
    RecordOutcome,
    TriggeredAlert,
)

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _as_utc_or_none(value: datetime | None) -> datetime | None:
    return as_utc(value) if value is not None else None


# --- Card Cache Operations ---


def card_to_model(card: CardDB) -> CardRecord:
    """Convert a cached card row to a domain model."""
    return CardRecord(
        id=card.id,
        name=card.name,
        set_code=card.set_code,
        set_name=card.set_name,
        collector_number=card.collector_number,
        rarity=card.rarity,
        image_uri=card.image_uri,
        mana_cost=card.mana_cost,
        type_line=card.type_line or "",
        oracle_text=card.oracle_text,
        colors=frozenset(card.colors or []),
        cmc=card.cmc or 0.0,
        prices=dict(card.prices or {}),
        scryfall_uri=card.scryfall_uri,
        updated_at=_as_utc_or_none(card.updated_at),
    )


async def get_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get a cached card by Scryfall id."""
    return await session.get(CardDB, card_id)


async def require_card(session: AsyncSession, card_id: str) -> CardDB:
    """
    Get a cached card or fail.

    Raises:
        NotFoundError: If the card has never been fetched from Scryfall
    """
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError(
            f"Card '{card_id}' not found in database",
            suggestion="Search for it first.",
        )
    return card


async def upsert_card(session: AsyncSession, card: CardRecord) -> CardDB:
    """
    Insert or fully overwrite a cached card.

    Every field is replaced; cached cards are never partially patched.
    """
    now = utcnow()
    existing = await get_card(session, card.id)
    db_card = existing or CardDB(id=card.id, created_at=now)

    db_card.name = card.name
    db_card.set_code = card.set_code
    db_card.set_name = card.set_name
    db_card.collector_number = card.collector_number
    db_card.rarity = card.rarity
    db_card.image_uri = card.image_uri
    db_card.mana_cost = card.mana_cost
    db_card.type_line = card.type_line
    db_card.oracle_text = card.oracle_text
    db_card.colors = sort_colors(card.colors)
    db_card.cmc = card.cmc
    db_card.prices = dict(card.prices)
    db_card.scryfall_uri = card.scryfall_uri
    db_card.updated_at = now

    if existing is None:
        session.add(db_card)
    await session.flush()
    logger.debug("Cached card %s (%s)", card.name, card.id)
    return db_card


async def upsert_cards(session: AsyncSession, cards: Iterable[CardRecord]) -> int:
    """Upsert several cards. Returns the number written."""
    count = 0
    for card in cards:
        await upsert_card(session, card)
        count += 1
    return count


async def search_cached_cards(
    session: AsyncSession, name: str | None = None, limit: int = 50
) -> list[CardRecord]:
    """Cached cards whose name contains `name`, alphabetical."""
    query = select(CardDB)
    if name:
        query = query.where(CardDB.name.ilike(f"%{name}%"))
    result = await session.execute(query.order_by(CardDB.name).limit(limit))
    return [card_to_model(c) for c in result.scalars().all()]


async def get_cards_by_ids(session: AsyncSession, card_ids: Iterable[str]) -> dict[str, CardRecord]:
    ids = set(card_ids)
    if not ids:
        return {}
    result = await session.execute(select(CardDB).where(CardDB.id.in_(ids)))
    return {c.id: card_to_model(c) for c in result.scalars().all()}


# --- Collection Operations ---

COLLECTION_SORT_COLUMNS = {
    "added_at": CollectionEntryDB.added_at,
    "quantity": CollectionEntryDB.quantity,
    "condition": CollectionEntryDB.condition,
    "language": CollectionEntryDB.language,
    "name": CardDB.name,
}


def collection_entry_to_model(entry: CollectionEntryDB, card: CardDB) -> CollectionEntry:
    """Convert a collection row and its card to a domain model."""
    return CollectionEntry(
        id=entry.id,
        card=card_to_model(card),
        quantity=entry.quantity,
        condition=entry.condition,
        foil=bool(entry.foil),
        language=entry.language,
        notes=entry.notes or "",
        added_at=_as_utc_or_none(entry.added_at),
    )


async def list_collection(
    session: AsyncSession,
    filter_text: str | None = None,
    sort_by: str = "added_at",
    descending: bool = True,
) -> list[CollectionEntry]:
    """
    List owned cards.

    Args:
        filter_text: Substring matched against card name or set name
        sort_by: One of COLLECTION_SORT_COLUMNS
        descending: Sort direction

    Raises:
        ValueError: If sort_by is not a known column
    """
    if sort_by not in COLLECTION_SORT_COLUMNS:
        raise ValueError(f"Cannot sort collection by '{sort_by}'")

    column = COLLECTION_SORT_COLUMNS[sort_by]
    query = select(CollectionEntryDB, CardDB).join(CardDB, CollectionEntryDB.card_id == CardDB.id)

    if filter_text:
        pattern = f"%{filter_text}%"
        query = query.where(CardDB.name.ilike(pattern) | CardDB.set_name.ilike(pattern))

    query = query.order_by(
        column.desc() if descending else column.asc(),
        CollectionEntryDB.id.desc() if descending else CollectionEntryDB.id.asc(),
    )

    result = await session.execute(query)
    return [collection_entry_to_model(entry, card) for entry, card in result.all()]


async def get_collection_entry(session: AsyncSession, entry_id: int) -> CollectionEntry | None:
    result = await session.execute(
        select(CollectionEntryDB, CardDB)
        .join(CardDB, CollectionEntryDB.card_id == CardDB.id)
        .where(CollectionEntryDB.id == entry_id)
    )
    row = result.first()
    if row is None:
        return None
    return collection_entry_to_model(row[0], row[1])


async def _find_collection_entry(
    session: AsyncSession, card_id: str, condition: str, foil: bool
) -> CollectionEntryDB | None:
    result = await session.execute(
        select(CollectionEntryDB).where(
            CollectionEntryDB.card_id == card_id,
            CollectionEntryDB.condition == condition,
            CollectionEntryDB.foil == foil,
        )
    )
    return result.scalar_one_or_none()


async def add_to_collection(
    session: AsyncSession,
    card_id: str,
    quantity: int = 1,
    condition: str = "NM",
    foil: bool = False,
    language: str = "en",
    notes: str = "",
) -> tuple[CollectionEntry, bool]:
    """
    Add copies of a card to the collection.

    Adding a (card, condition, foil) combination that already exists
    increases its quantity instead of creating a new row.

    Returns:
        Tuple of (entry, created) where created is True for a new row.

    Raises:
        NotFoundError: If the card is not cached
    """
    card = await require_card(session, card_id)

    existing = await _find_collection_entry(session, card_id, condition, foil)
    if existing:
        existing.quantity += quantity
        await session.flush()
        return collection_entry_to_model(existing, card), False

    entry = CollectionEntryDB(
        card_id=card_id,
        quantity=quantity,
        condition=condition,
        foil=foil,
        language=language,
        notes=notes,
        added_at=utcnow(),
    )
    session.add(entry)
    await session.flush()
    return collection_entry_to_model(entry, card), True


async def update_collection_entry(
    session: AsyncSession,
    entry_id: int,
    quantity: int | None = None,
    condition: str | None = None,
    foil: bool | None = None,
    language: str | None = None,
    notes: str | None = None,
) -> CollectionEntry | None:
    """
    Update an owned-card row.

    A quantity below 1 deletes the row. Changing condition or foil onto a
    combination that already exists merges this row into that one.

    Returns:
        The updated (or merged-into) entry, or None if the row was deleted.

    Raises:
        NotFoundError: If no entry has this id
    """
    entry = await session.get(CollectionEntryDB, entry_id)
    if entry is None:
        raise NotFoundError("Card not found in collection")

    if quantity is not None and quantity < 1:
        await session.delete(entry)
        await session.flush()
        return None

    new_condition = condition if condition is not None else entry.condition
    new_foil = foil if foil is not None else bool(entry.foil)
    new_quantity = quantity if quantity is not None else entry.quantity

    if (new_condition, new_foil) != (entry.condition, bool(entry.foil)):
        twin = await _find_collection_entry(session, entry.card_id, new_condition, new_foil)
        if twin is not None and twin.id != entry.id:
            twin.quantity += new_quantity
            if notes:
                twin.notes = notes
            await session.delete(entry)
            await session.flush()
            return await get_collection_entry(session, twin.id)

    entry.quantity = new_quantity
    entry.condition = new_condition
    entry.foil = new_foil
    if language is not None:
        entry.language = language
    if notes is not None:
        entry.notes = notes

    await session.flush()
    return await get_collection_entry(session, entry.id)


async def remove_from_collection(session: AsyncSession, entry_id: int) -> bool:
    """
    Delete an owned-card row.

    Returns True if deleted, False if not found.
    """
    entry = await session.get(CollectionEntryDB, entry_id)
    if entry is None:
        return False
    await session.delete(entry)
    await session.flush()
    return True


# --- Wishlist Operations ---

_PRIORITY_RANK = case(
    {"high": 1, "medium": 2, "low": 3},
    value=WishlistEntryDB.priority,
    else_=4,
)


def wishlist_entry_to_model(entry: WishlistEntryDB, card: CardDB) -> WishlistEntry:
    return WishlistEntry(
        id=entry.id,
        card=card_to_model(card),
        quantity=entry.quantity,
        max_price=entry.max_price,
        priority=entry.priority,
        notes=entry.notes or "",
        added_at=_as_utc_or_none(entry.added_at),
    )


async def list_wishlist(session: AsyncSession) -> list[WishlistEntry]:
    """Wishlist ordered by priority (high first), newest first within a priority."""
    result = await session.execute(
        select(WishlistEntryDB, CardDB)
        .join(CardDB, WishlistEntryDB.card_id == CardDB.id)
        .order_by(_PRIORITY_RANK, WishlistEntryDB.added_at.desc(), WishlistEntryDB.id.desc())
    )
    return [wishlist_entry_to_model(entry, card) for entry, card in result.all()]


async def add_to_wishlist(
    session: AsyncSession,
    card_id: str,
    quantity: int = 1,
    max_price: float | None = None,
    priority: str = "medium",
    notes: str = "",
) -> WishlistEntry:
    """
    Add a card to the wishlist.

    Raises:
        NotFoundError: If the card is not cached
        ConflictError: If the card is already wishlisted
    """
    card = await require_card(session, card_id)

    existing = await session.execute(
        select(WishlistEntryDB.id).where(WishlistEntryDB.card_id == card_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Card already in wishlist")

    entry = WishlistEntryDB(
        card_id=card_id,
        quantity=quantity,
        max_price=max_price,
        priority=priority,
        notes=notes,
        added_at=utcnow(),
    )
    session.add(entry)
    await session.flush()
    return wishlist_entry_to_model(entry, card)


_UNSET = object()


async def update_wishlist_entry(
    session: AsyncSession,
    entry_id: int,
    quantity: int | None = None,
    max_price: float | None | object = _UNSET,
    priority: str | None = None,
    notes: str | None = None,
) -> WishlistEntry:
    """
    Update a wishlist row. Pass max_price=None to clear the ceiling.

    Raises:
        NotFoundError: If no entry has this id
    """
    entry = await session.get(WishlistEntryDB, entry_id)
    if entry is None:
        raise NotFoundError("Item not found")

    if quantity is not None:
        entry.quantity = quantity
    if max_price is not _UNSET:
        entry.max_price = max_price  # type: ignore[assignment]
    if priority is not None:
        entry.priority = priority
    if notes is not None:
        entry.notes = notes

    await session.flush()
    card = await require_card(session, entry.card_id)
    return wishlist_entry_to_model(entry, card)


async def remove_from_wishlist(session: AsyncSession, entry_id: int) -> bool:
    """Returns True if deleted, False if not found."""
    entry = await session.get(WishlistEntryDB, entry_id)
    if entry is None:
        return False
    await session.delete(entry)
    await session.flush()
    return True


# --- Deck Operations ---


def deck_to_model(deck: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    return Deck(
        id=deck.id,
        name=deck.name,
        format=deck.format or "",
        description=deck.description or "",
        color_identity=deck.color_identity or "",
        created_at=_as_utc_or_none(deck.created_at),
        updated_at=_as_utc_or_none(deck.updated_at),
    )


def deck_card_to_model(entry: DeckCardDB, card: CardDB) -> DeckCardEntry:
    return DeckCardEntry(
        id=entry.id,
        deck_id=entry.deck_id,
        card=card_to_model(card),
        quantity=entry.quantity,
        category=DeckCategory(entry.category),
    )


async def list_decks(session: AsyncSession) -> list[tuple[Deck, int, int]]:
    """
    All decks, most recently updated first.

    Returns:
        List of (deck, distinct entries, total card quantity)
    """
    result = await session.execute(
        select(
            DeckDB,
            func.count(DeckCardDB.id),
            func.coalesce(func.sum(DeckCardDB.quantity), 0),
        )
        .outerjoin(DeckCardDB, DeckCardDB.deck_id == DeckDB.id)
        .group_by(DeckDB.id)
        .order_by(DeckDB.updated_at.desc(), DeckDB.id.desc())
    )
    return [(deck_to_model(deck), int(count), int(total)) for deck, count, total in result.all()]


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    return await session.get(DeckDB, deck_id)


async def require_deck(session: AsyncSession, deck_id: int) -> DeckDB:
    """
    Raises:
        NotFoundError: If the deck does not exist
    """
    deck = await get_deck(session, deck_id)
    if deck is None:
        raise NotFoundError("Deck not found")
    return deck


async def create_deck(
    session: AsyncSession,
    name: str,
    format_name: str = "",
    description: str = "",
    color_identity: str = "",
) -> Deck:
    now = utcnow()
    deck = DeckDB(
        name=name,
        format=format_name,
        description=description,
        color_identity=color_identity,
        created_at=now,
        updated_at=now,
    )
    session.add(deck)
    await session.flush()
    return deck_to_model(deck)


async def update_deck(
    session: AsyncSession,
    deck_id: int,
    name: str | None = None,
    format_name: str | None = None,
    description: str | None = None,
    color_identity: str | None = None,
) -> Deck:
    """
    Update deck metadata and touch updated_at.

    Raises:
        NotFoundError: If the deck does not exist
    """
    deck = await require_deck(session, deck_id)

    if name:
        deck.name = name
    if format_name is not None:
        deck.format = format_name
    if description is not None:
        deck.description = description
    if color_identity is not None:
        deck.color_identity = color_identity
    deck.updated_at = utcnow()

    await session.flush()
    return deck_to_model(deck)


async def delete_deck(session: AsyncSession, deck_id: int) -> bool:
    """
    Delete a deck and all of its card entries.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id).options(selectinload(DeckDB.cards))
    )
    deck = result.scalar_one_or_none()
    if deck is None:
        return False

    await session.delete(deck)
    await session.flush()
    return True


async def get_deck_cards(
    session: AsyncSession,
    deck_id: int,
    category: DeckCategory | None = None,
) -> list[DeckCardEntry]:
    """Deck entries with their cards, ordered by category, mana value, name."""
    query = (
        select(DeckCardDB, CardDB)
        .join(CardDB, DeckCardDB.card_id == CardDB.id)
        .where(DeckCardDB.deck_id == deck_id)
    )
    if category is not None:
        query = query.where(DeckCardDB.category == category.value)

    result = await session.execute(
        query.order_by(DeckCardDB.category, CardDB.cmc, CardDB.name)
    )
    return [deck_card_to_model(entry, card) for entry, card in result.all()]


async def _find_deck_card(
    session: AsyncSession, deck_id: int, card_id: str, category: str
) -> DeckCardDB | None:
    result = await session.execute(
        select(DeckCardDB).where(
            DeckCardDB.deck_id == deck_id,
            DeckCardDB.card_id == card_id,
            DeckCardDB.category == category,
        )
    )
    return result.scalar_one_or_none()


async def _require_deck_card(session: AsyncSession, deck_id: int, entry_id: int) -> DeckCardDB:
    entry = await session.get(DeckCardDB, entry_id)
    if entry is None or entry.deck_id != deck_id:
        raise NotFoundError("Card not found in deck")
    return entry


async def add_card_to_deck(
    session: AsyncSession,
    deck_id: int,
    card_id: str,
    quantity: int = 1,
    category: DeckCategory = DeckCategory.MAINBOARD,
) -> tuple[DeckCardEntry, bool]:
    """
    Add copies of a card to a deck and touch the deck's updated_at.

    An existing (deck, card, category) entry has its quantity increased.

    Returns:
        Tuple of (entry, created)

    Raises:
        NotFoundError: If the deck or card does not exist
    """
    deck = await require_deck(session, deck_id)
    card = await require_card(session, card_id)

    entry = await _find_deck_card(session, deck_id, card_id, category.value)
    created = entry is None
    if entry is None:
        entry = DeckCardDB(
            deck_id=deck_id,
            card_id=card_id,
            quantity=quantity,
            category=category.value,
        )
        session.add(entry)
    else:
        entry.quantity += quantity

    deck.updated_at = utcnow()
    await session.flush()
    return deck_card_to_model(entry, card), created


async def update_deck_card(
    session: AsyncSession,
    deck_id: int,
    entry_id: int,
    quantity: int | None = None,
    category: DeckCategory | None = None,
) -> DeckCardEntry | None:
    """
    Change quantity or category of a deck entry and touch the deck.

    Moving an entry onto a category where the card already sits merges the
    two entries. A quantity below 1 removes the entry.

    Returns:
        The updated (or merged-into) entry, or None if removed.

    Raises:
        NotFoundError: If the deck or entry does not exist
    """
    deck = await require_deck(session, deck_id)
    entry = await _require_deck_card(session, deck_id, entry_id)
    deck.updated_at = utcnow()

    if quantity is not None and quantity < 1:
        await session.delete(entry)
        await session.flush()
        return None

    new_quantity = quantity if quantity is not None else entry.quantity
    target = entry

    if category is not None and category.value != entry.category:
        twin = await _find_deck_card(session, deck_id, entry.card_id, category.value)
        if twin is not None:
            twin.quantity += new_quantity
            await session.delete(entry)
            target = twin
        else:
            entry.category = category.value
            entry.quantity = new_quantity
    else:
        entry.quantity = new_quantity

    await session.flush()
    card = await require_card(session, target.card_id)
    return deck_card_to_model(target, card)


async def remove_card_from_deck(session: AsyncSession, deck_id: int, entry_id: int) -> None:
    """
    Remove an entry from a deck and touch the deck.

    Raises:
        NotFoundError: If the deck or entry does not exist
    """
    deck = await require_deck(session, deck_id)
    entry = await _require_deck_card(session, deck_id, entry_id)

    await session.delete(entry)
    deck.updated_at = utcnow()
    await session.flush()


# --- Price History Operations ---


def price_point_to_model(point: PriceHistoryDB) -> PricePoint:
    return PricePoint(
        id=point.id,
        card_id=point.card_id,
        platform=point.platform,
        price=point.price,
        currency=point.currency,
        recorded_at=as_utc(point.recorded_at),
    )


def _day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """UTC calendar day containing `moment`."""
    start = as_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


async def has_price_for_day(
    session: AsyncSession, card_id: str, platform: PriceSource, moment: datetime
) -> bool:
    start, end = _day_bounds(moment)
    result = await session.execute(
        select(PriceHistoryDB.id)
        .where(
            PriceHistoryDB.card_id == card_id,
            PriceHistoryDB.platform == platform.value,
            PriceHistoryDB.recorded_at >= start,
            PriceHistoryDB.recorded_at < end,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def record_price(
    session: AsyncSession,
    card_id: str,
    platform: PriceSource,
    force: bool = False,
    now: datetime | None = None,
) -> RecordOutcome:
    """
    Record a card's current cached price as a history point.

    At most one point per (card, platform, UTC day) unless `force` is set;
    later attempts on the same day are skipped.

    Raises:
        NotFoundError: If the card is not cached or has no price for the platform
    """
    now = now or utcnow()
    card = card_to_model(await require_card(session, card_id))
    price = card.price_for(platform)
    currency = platform.currency.value

    if price is None:
        raise NotFoundError("No price available for this platform")

    if not force and await has_price_for_day(session, card_id, platform, now):
        return RecordOutcome(recorded=False, price=price, currency=currency)

    session.add(
        PriceHistoryDB(
            card_id=card_id,
            platform=platform.value,
            price=price,
            currency=currency,
            recorded_at=now,
        )
    )
    await session.flush()
    return RecordOutcome(recorded=True, price=price, currency=currency)


async def _record_daily_price(
    session: AsyncSession, card: CardRecord, platform: PriceSource, now: datetime
) -> bool:
    """Add today's point for one card. False when already recorded or unpriced."""
    if await has_price_for_day(session, card.id, platform, now):
        return False

    price = card.price_for(platform)
    if price is None:
        return False

    session.add(
        PriceHistoryDB(
            card_id=card.id,
            platform=platform.value,
            price=price,
            currency=platform.currency.value,
            recorded_at=now,
        )
    )
    await session.flush()
    return True


async def record_collection_prices(
    session: AsyncSession,
    platform: PriceSource,
    now: datetime | None = None,
) -> BulkRecordResult:
    """
    Record today's price for every distinct card in the collection.

    Cards already recorded today or without a price are skipped. A card
    that fails is counted and the run continues.
    """
    now = now or utcnow()
    result = await session.execute(
        select(CardDB)
        .where(CardDB.id.in_(select(CollectionEntryDB.card_id).distinct()))
        .order_by(CardDB.id)
    )
    cards = [card_to_model(db_card) for db_card in result.scalars().all()]
    outcome = BulkRecordResult(total=len(cards))

    for card in cards:
        try:
            # One savepoint per card; a failure only undoes that card's point
            async with session.begin_nested():
                recorded = await _record_daily_price(session, card, platform, now)
        except SQLAlchemyError as e:
            logger.warning("Failed to record %s price for card %s: %s", platform.value, card.id, e)
            outcome.failed += 1
            continue

        if recorded:
            outcome.recorded += 1
        else:
            outcome.skipped += 1

    logger.info(
        "Recorded %s prices: %d recorded, %d skipped, %d failed (of %d)",
        platform.value,
        outcome.recorded,
        outcome.skipped,
        outcome.failed,
        outcome.total,
    )
    return outcome


async def get_price_history(
    session: AsyncSession,
    card_id: str,
    platform: PriceSource,
    days: int = 30,
    now: datetime | None = None,
) -> list[PricePoint]:
    """A card's history on a platform for the last `days` days, oldest first."""
    since = (now or utcnow()) - timedelta(days=days)
    result = await session.execute(
        select(PriceHistoryDB)
        .where(
            PriceHistoryDB.card_id == card_id,
            PriceHistoryDB.platform == platform.value,
            PriceHistoryDB.recorded_at >= since,
        )
        .order_by(PriceHistoryDB.recorded_at.asc(), PriceHistoryDB.id.asc())
    )
    return [price_point_to_model(p) for p in result.scalars().all()]


async def get_platform_history(
    session: AsyncSession,
    platform: PriceSource,
    days: int,
    now: datetime | None = None,
) -> list[PricePoint]:
    """Every history point on a platform in the window, oldest first."""
    since = (now or utcnow()) - timedelta(days=days)
    result = await session.execute(
        select(PriceHistoryDB)
        .where(
            PriceHistoryDB.platform == platform.value,
            PriceHistoryDB.recorded_at >= since,
        )
        .order_by(PriceHistoryDB.recorded_at.asc(), PriceHistoryDB.id.asc())
    )
    return [price_point_to_model(p) for p in result.scalars().all()]


# --- Price Alert Operations ---


def alert_to_model(alert: PriceAlertDB, card: CardDB) -> PriceAlert:
    return PriceAlert(
        id=alert.id,
        card=card_to_model(card),
        platform=PriceSource(alert.platform),
        target_price=alert.target_price,
        condition=AlertCondition(alert.condition),
        active=bool(alert.active),
        triggered=bool(alert.triggered),
        triggered_at=_as_utc_or_none(alert.triggered_at),
        created_at=_as_utc_or_none(alert.created_at),
    )


async def list_alerts(session: AsyncSession, active_only: bool = True) -> list[PriceAlert]:
    """Alerts, newest first."""
    query = select(PriceAlertDB, CardDB).join(CardDB, PriceAlertDB.card_id == CardDB.id)
    if active_only:
        query = query.where(PriceAlertDB.active.is_(True))
    result = await session.execute(
        query.order_by(PriceAlertDB.created_at.desc(), PriceAlertDB.id.desc())
    )
    return [alert_to_model(alert, card) for alert, card in result.all()]


async def list_triggered_alerts(session: AsyncSession) -> list[PriceAlert]:
    """Triggered alerts, most recently triggered first."""
    result = await session.execute(
        select(PriceAlertDB, CardDB)
        .join(CardDB, PriceAlertDB.card_id == CardDB.id)
        .where(PriceAlertDB.triggered.is_(True))
        .order_by(PriceAlertDB.triggered_at.desc(), PriceAlertDB.id.desc())
    )
    return [alert_to_model(alert, card) for alert, card in result.all()]


async def create_alert(
    session: AsyncSession,
    card_id: str,
    platform: PriceSource,
    target_price: float,
    condition: AlertCondition = AlertCondition.BELOW,
) -> PriceAlert:
    """
    Create an active, untriggered alert.

    Raises:
        NotFoundError: If the card is not cached
    """
    card = await require_card(session, card_id)
    alert = PriceAlertDB(
        card_id=card_id,
        platform=platform.value,
        target_price=target_price,
        condition=condition.value,
        active=True,
        triggered=False,
        created_at=utcnow(),
    )
    session.add(alert)
    await session.flush()
    return alert_to_model(alert, card)


async def update_alert(
    session: AsyncSession,
    alert_id: int,
    target_price: float | None = None,
    condition: AlertCondition | None = None,
    active: bool | None = None,
    triggered: bool | None = None,
) -> PriceAlert:
    """
    Edit an alert.

    `triggered=False` is the manual reset; alerts are never reset
    automatically. `triggered=True` is ignored.

    Raises:
        NotFoundError: If no alert has this id
    """
    alert = await session.get(PriceAlertDB, alert_id)
    if alert is None:
        raise NotFoundError("Alert not found")

    if target_price is not None:
        alert.target_price = target_price
    if condition is not None:
        alert.condition = condition.value
    if active is not None:
        alert.active = active
    if triggered is False:
        alert.triggered = False
        alert.triggered_at = None

    await session.flush()
    card = await require_card(session, alert.card_id)
    return alert_to_model(alert, card)


async def delete_alert(session: AsyncSession, alert_id: int) -> bool:
    alert = await session.get(PriceAlertDB, alert_id)
    if alert is None:
        return False
    await session.delete(alert)
    await session.flush()
    return True


async def check_alerts(
    session: AsyncSession, now: datetime | None = None
) -> tuple[int, list[TriggeredAlert]]:
    """
    Evaluate every active, untriggered alert against cached prices.

    Alerts whose condition holds flip to triggered with a timestamp.

    Returns:
        Tuple of (alerts checked, alerts triggered by this run)
    """
    now = now or utcnow()
    result = await session.execute(
        select(PriceAlertDB, CardDB)
        .join(CardDB, PriceAlertDB.card_id == CardDB.id)
        .where(PriceAlertDB.active.is_(True), PriceAlertDB.triggered.is_(False))
        .order_by(PriceAlertDB.id)
    )
    rows = result.all()
    triggered: list[TriggeredAlert] = []

    for db_alert, db_card in rows:
        alert = alert_to_model(db_alert, db_card)
        price = current_price(alert.card, alert.platform)
        if not should_trigger(alert.condition, alert.target_price, price):
            continue

        db_alert.triggered = True
        db_alert.triggered_at = now
        alert.triggered = True
        alert.triggered_at = now
        triggered.append(TriggeredAlert(alert=alert, current_price=price))  # type: ignore[arg-type]
        logger.info(
            "Alert %d triggered: %s %s %.2f (current %.2f)",
            alert.id,
            alert.card.name,
            alert.condition.value,
            alert.target_price,
            price,
        )

    await session.flush()
    return len(rows), triggered


# --- Budget Operations ---


def transaction_to_model(tx: BudgetTransactionDB, card: CardDB | None) -> BudgetTransaction:
    return BudgetTransaction(
        id=tx.id,
        type=TransactionType(tx.type),
        amount=tx.amount,
        currency=tx.currency,
        transaction_date=as_utc(tx.transaction_date),
        description=tx.description or "",
        card_id=tx.card_id,
        card_name=card.name if card else None,
        set_name=card.set_name if card else None,
        image_uri=card.image_uri if card else None,
        quantity=tx.quantity,
    )


async def list_transactions(
    session: AsyncSession,
    tx_type: TransactionType | None = None,
    currency: str | None = None,
    limit: int | None = 50,
) -> list[BudgetTransaction]:
    """Transactions, newest first."""
    query = select(BudgetTransactionDB, CardDB).outerjoin(
        CardDB, BudgetTransactionDB.card_id == CardDB.id
    )
    if tx_type is not None:
        query = query.where(BudgetTransactionDB.type == tx_type.value)
    if currency is not None:
        query = query.where(BudgetTransactionDB.currency == currency)
    query = query.order_by(
        BudgetTransactionDB.transaction_date.desc(), BudgetTransactionDB.id.desc()
    )
    if limit is not None:
        query = query.limit(limit)

    result = await session.execute(query)
    return [transaction_to_model(tx, card) for tx, card in result.all()]


async def add_transaction(
    session: AsyncSession,
    tx_type: TransactionType,
    amount: float,
    currency: str = "USD",
    description: str = "",
    card_id: str | None = None,
    quantity: int | None = None,
    transaction_date: datetime | None = None,
) -> BudgetTransaction:
    """
    Append a transaction.

    Raises:
        NotFoundError: If a card id is given but not cached
    """
    card = await require_card(session, card_id) if card_id else None
    tx = BudgetTransactionDB(
        type=tx_type.value,
        amount=amount,
        currency=currency,
        description=description,
        card_id=card_id,
        quantity=quantity,
        transaction_date=as_utc(transaction_date) if transaction_date else utcnow(),
    )
    session.add(tx)
    await session.flush()
    return transaction_to_model(tx, card)


async def delete_transaction(session: AsyncSession, tx_id: int) -> bool:
    tx = await session.get(BudgetTransactionDB, tx_id)
    if tx is None:
        return False
    await session.delete(tx)
    await session.flush()
    return True


def snapshot_to_model(snapshot: CollectionSnapshotDB) -> CollectionSnapshot:
    return CollectionSnapshot(
        id=snapshot.id,
        total_value=snapshot.total_value,
        total_cards=snapshot.total_cards,
        unique_cards=snapshot.unique_cards,
        platform=snapshot.platform,
        snapshot_date=as_utc(snapshot.snapshot_date),
    )


async def create_collection_snapshot(
    session: AsyncSession,
    platform: PriceSource,
    now: datetime | None = None,
) -> CollectionSnapshot:
    """Value the whole collection against a platform and store the result."""
    entries = await list_collection(session)
    value = collection_value(entries, platform)

    snapshot = CollectionSnapshotDB(
        total_value=value.total_value,
        total_cards=value.total_cards,
        unique_cards=value.unique_cards,
        platform=platform.value,
        snapshot_date=now or utcnow(),
    )
    session.add(snapshot)
    await session.flush()
    return snapshot_to_model(snapshot)


async def get_value_history(
    session: AsyncSession,
    platform: PriceSource,
    days: int = 30,
    now: datetime | None = None,
) -> list[CollectionSnapshot]:
    """Snapshots for a platform in the last `days` days, oldest first."""
    since = (now or utcnow()) - timedelta(days=days)
    result = await session.execute(
        select(CollectionSnapshotDB)
        .where(
            CollectionSnapshotDB.platform == platform.value,
            CollectionSnapshotDB.snapshot_date >= since,
        )
        .order_by(CollectionSnapshotDB.snapshot_date.asc(), CollectionSnapshotDB.id.asc())
    )
    return [snapshot_to_model(s) for s in result.scalars().all()]

