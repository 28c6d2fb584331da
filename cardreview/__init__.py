"""cardreview — snippet flashcards with keep/discard review."""

__version__ = "0.1.0"

from cardreview.models import Card
from cardreview.deck import DeckSession
from cardreview.store import CardStore
from cardreview.app import App

__all__ = ["App", "Card", "CardStore", "DeckSession"]
