"""DeckSession: one resumable review pass over a frozen set of cards."""

import random
from dataclasses import dataclass, field

from cardreview.models import Card


def shuffle(items: list, rng: random.Random | None = None) -> list:
    """Fisher-Yates shuffle in place; returns ``items`` for chaining."""
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


@dataclass
class DeckSession:
    cards: list[Card] = field(default_factory=list)
    current_index: int = 0

    @classmethod
    def build(cls, cards: list[Card]) -> "DeckSession":
        return cls(cards=[c.copy() for c in cards], current_index=0)

    @property
    def state(self) -> str:
        return "exhausted" if self.exhausted else "active"

    @property
    def exhausted(self) -> bool:
        return self.current_index >= len(self.cards)

    def current(self) -> Card | None:
        if self.exhausted:
            return None
        return self.cards[self.current_index]

    def remaining(self) -> list[Card]:
        return list(self.cards[self.current_index:])

    def advance(self) -> bool:
        """Move the cursor past the current card. Returns False when already exhausted."""
        if self.exhausted:
            return False
        self.current_index += 1
        return True

    def to_dict(self) -> dict:
        return {
            "cards": [c.to_dict() for c in self.cards],
            "currentIndex": self.current_index,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeckSession":
        cards = [Card.from_dict(c) for c in data.get("cards", [])]
        index = int(data.get("currentIndex", 0))
        return cls(cards=cards, current_index=max(0, min(index, len(cards))))
