"""ReviewSession: walks the active deck one keep/discard decision at a time."""

from cardreview.models import Card


class ReviewSession:
    def __init__(self, store, selection: list[Card] | None = None, limit: int | None = None):
        self.store = store
        self.cards = store.build_or_resume_deck(selection)
        self.limit = limit
        self.kept = 0
        self.discarded = 0
        self.skipped = 0
        self.current_card: Card | None = None

    @property
    def reviewed(self) -> int:
        return self.kept + self.discarded

    @property
    def finished(self) -> bool:
        if self.limit is not None and self.reviewed >= self.limit:
            return True
        return self.current() is None

    def current(self) -> Card | None:
        """Current deck card, skipping cards deleted since the deck was built."""
        while True:
            deck = self.store.deck
            card = deck.current() if deck else None
            if card is None or self.store.get_card(card.id) is not None:
                self.current_card = card
                return card
            self.store.advance_deck()
            self.skipped += 1

    def decide(self, keep: bool) -> Card:
        card = self.current()
        if card is None:
            raise ValueError("No current card")
        if keep:
            self.store.mark_reviewed(card.id, True)
            self.kept += 1
        else:
            self.store.delete_card(card.id)
            self.discarded += 1
        self.store.advance_deck()
        self.current_card = None
        return card

    def remaining_count(self) -> int:
        deck = self.store.deck
        return len(deck.remaining()) if deck else 0

    def position(self) -> tuple[int, int]:
        """1-based index of the current card and the deck size."""
        deck = self.store.deck
        if not deck:
            return 0, 0
        return deck.current_index + 1, len(deck.cards)
