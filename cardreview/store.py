"""CardStore: owns every card, the active deck, directory labels and settings.

Every write path runs in the same order: mutate in memory, invalidate the
affected cached views, persist the whole blob, then notify subscribers. A
persistence failure raises ``PersistError`` after the in-memory mutation has
already happened; subscribers are not notified in that case.

Usage:
    store = CardStore(BlobStorage(conn))
    store.load()
    store.create_card("Some text", "notes/page.md")
    deck = store.build_or_resume_deck()
"""

import math
import random
import sys
import time
from typing import Callable, Iterable

from cardreview.blocks import MIN_CARD_LENGTH, Block, format_for_card
from cardreview.cache import DEFAULT_TTL_MS, QueryCache
from cardreview.config import Settings
from cardreview.deck import DeckSession, shuffle
from cardreview.directories import DirectoryIndex
from cardreview.migrate import SCHEMA_VERSION, migrate
from cardreview.models import UNKNOWN_SOURCE, Card, derive_directory

UNREVIEWED = "unreviewed"
ALL = "all"
DECK = "deck"


def now_ms() -> int:
    return int(time.time() * 1000)


def total_pages(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, math.ceil(total / page_size))


class CardStore:
    def __init__(self, storage, clock: Callable[[], int] = now_ms,
                 cache: QueryCache | None = None, rng: random.Random | None = None,
                 cache_ttl_ms: float = DEFAULT_TTL_MS):
        self.storage = storage
        self.cards: list[Card] = []
        self.labels: list[str] = []
        self.deck: DeckSession | None = None
        self.settings = Settings()
        self.cache = cache or QueryCache(ttl_ms=cache_ttl_ms)
        self.directories = DirectoryIndex(self)
        self._clock = clock
        self._rng = rng or random.Random()
        self._listeners: list[Callable[[str], None]] = []

    # ─── Persistence ─────────────────────────────────────────────────────

    def load(self):
        blob = migrate(self.storage.load())
        self.cards = [Card.from_dict(c) for c in blob["cards"]]
        self.labels = list(blob["directories"])
        deck = blob["currentDeck"]
        self.deck = DeckSession.from_dict(deck) if deck is not None else None
        self.settings = Settings.from_dict(blob["settings"])
        self.cache.invalidate()

    def to_blob(self) -> dict:
        return {
            "version": SCHEMA_VERSION,
            "cards": [c.to_dict() for c in self.cards],
            "currentDeck": self.deck.to_dict() if self.deck else None,
            "directories": list(self.labels),
            "settings": self.settings.to_dict(),
        }

    def persist(self):
        self.storage.save(self.to_blob())

    # ─── Notification ────────────────────────────────────────────────────

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Register a refresh listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self, event: str):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                print(f"Warning: refresh listener failed on '{event}': {e}", file=sys.stderr)

    def _commit(self, event: str, *views: str):
        self.cache.invalidate(*views)
        self.persist()
        self._notify(event)

    # ─── Cards ───────────────────────────────────────────────────────────

    def get_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def _unique_id(self, base: str, taken: set[str]) -> str:
        candidate = base
        n = 1
        while candidate in taken:
            candidate = f"{base}.{n}"
            n += 1
        taken.add(candidate)
        return candidate

    def _new_card(self, text: str, source: str | None, card_id: str, created_at: int) -> Card:
        source = source or UNKNOWN_SOURCE
        return Card(id=card_id, text=text, source=source,
                    directory=derive_directory(source), created_at=created_at)

    def create_card(self, text: str, source: str | None = None) -> Card | None:
        """Create one card. Returns None without mutating when text is blank."""
        text = (text or "").strip()
        if not text:
            return None
        created_at = self._clock()
        taken = {c.id for c in self.cards}
        card = self._new_card(text, source, self._unique_id(str(created_at), taken), created_at)
        self.cards.append(card)
        self._commit("created", UNREVIEWED, ALL)
        return card

    def create_cards_from_blocks(self, source: str | None,
                                 blocks: Iterable[Block | str]) -> list[Card]:
        """Create a card per block, in order.

        Blocks are formatted and filtered like card candidates; plain strings
        are only trimmed. Ids share the batch timestamp and carry a per-batch
        sequence number.
        """
        texts = []
        for block in blocks:
            if isinstance(block, Block):
                text = format_for_card(block)
                if len(text) < MIN_CARD_LENGTH:
                    continue
            else:
                text = (block or "").strip()
                if not text:
                    continue
            texts.append(text)
        if not texts:
            return []

        created_at = self._clock()
        taken = {c.id for c in self.cards}
        created = [
            self._new_card(text, source, self._unique_id(f"{created_at}-{seq}", taken), created_at)
            for seq, text in enumerate(texts)
        ]
        self.cards.extend(created)
        self._commit("created", UNREVIEWED, ALL)
        return created

    def mark_reviewed(self, card_id: str, kept: bool) -> bool:
        card = self.get_card(card_id)
        if card is None:
            return False
        card.reviewed = True
        card.kept = kept
        self._commit("reviewed", UNREVIEWED, ALL)
        return True

    def delete_card(self, card_id: str) -> bool:
        card = self.get_card(card_id)
        if card is None:
            return False
        self.cards.remove(card)
        self._commit("deleted", UNREVIEWED, ALL)
        return True

    def move_source_to_directory(self, source: str, directory: str) -> int:
        """Reassign every card from ``source`` to ``directory``. Returns the count moved."""
        directory = (directory or "").strip()
        if not directory:
            return 0
        matched = [c for c in self.cards if c.source == source]
        if not matched:
            return 0
        for card in matched:
            card.directory = directory
        self._commit("moved", UNREVIEWED, ALL)
        return len(matched)

    def reset_reviewed_kept(self) -> int:
        """Put every kept card back into review and drop the active deck."""
        count = 0
        for card in self.cards:
            if card.kept:
                card.reviewed = False
                count += 1
        self.deck = None
        self._commit("reset")
        return count

    # ─── Views ───────────────────────────────────────────────────────────

    def _compute_unreviewed(self) -> list[Card]:
        cards = [c.copy() for c in self.cards if not c.reviewed]
        if self.settings.random_mode:
            shuffle(cards, self._rng)
        return cards

    def get_unreviewed(self) -> list[Card]:
        return list(self.cache.get(UNREVIEWED, self._compute_unreviewed))

    def get_all(self) -> list[Card]:
        return list(self.cache.get(ALL, lambda: [c.copy() for c in self.cards]))

    def get_all_paged(self, page: int, page_size: int) -> list[Card]:
        if page < 0 or page_size <= 0:
            return []
        return self.get_all()[page * page_size:(page + 1) * page_size]

    def get_stats(self) -> dict:
        cards = self.get_all()
        reviewed = sum(1 for c in cards if c.reviewed)
        return {"total": len(cards), "reviewed": reviewed, "unreviewed": len(cards) - reviewed}

    def get_sources(self) -> list[str]:
        return sorted({c.source for c in self.get_all()})

    def select(self, directory: str | None = None, source: str | None = None) -> list[Card]:
        """Unreviewed cards narrowed to a directory and/or source."""
        return [c for c in self.get_unreviewed()
                if (directory is None or c.directory == directory)
                and (source is None or c.source == source)]

    # ─── Directories ─────────────────────────────────────────────────────

    def get_directories(self) -> list[str]:
        return self.directories.all()

    def create_directory(self, name: str) -> bool:
        return self.directories.create(name)

    def delete_directory(self, name: str) -> bool:
        return self.directories.delete(name)

    # ─── Deck ────────────────────────────────────────────────────────────

    def get_deck(self) -> DeckSession | None:
        def compute():
            if self.deck is None:
                return None
            return DeckSession(cards=list(self.deck.cards), current_index=self.deck.current_index)
        return self.cache.get(DECK, compute)

    def build_deck(self, cards: list[Card]) -> DeckSession:
        self.deck = DeckSession.build(cards)
        self._commit("deck", DECK)
        return self.deck

    def advance_deck(self) -> bool:
        if self.deck is None or not self.deck.advance():
            return False
        self._commit("deck", DECK)
        return True

    def clear_deck(self) -> bool:
        if self.deck is None:
            return False
        self.deck = None
        self._commit("deck", DECK)
        return True

    def build_or_resume_deck(self, selection: list[Card] | None = None) -> list[Card]:
        """Cards left to review: the active deck's remainder, or a fresh deck.

        A fresh deck is built from ``selection`` when given, otherwise from all
        unreviewed cards. Nothing is built when there is nothing to review.
        """
        deck = self.get_deck()
        if deck is not None and not deck.exhausted:
            return deck.remaining()
        cards = self.get_unreviewed() if selection is None else list(selection)
        if not cards:
            return []
        return self.build_deck(cards).remaining()

    # ─── Settings ────────────────────────────────────────────────────────

    def update_settings(self, **changes) -> Settings:
        self.settings.update(**changes)
        self._commit("settings", UNREVIEWED)
        return self.settings
