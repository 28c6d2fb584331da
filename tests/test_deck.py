"""Tests for DeckSession, deck persistence and the shuffle."""

import itertools
import random
from collections import Counter

from cardreview.cache import QueryCache
from cardreview.deck import DeckSession, shuffle
from cardreview.models import Card
from cardreview.store import CardStore


def _cards(*names):
    return [Card(id=n, text=f"text {n}", source="a.md") for n in names]


def test_build_starts_active():
    deck = DeckSession.build(_cards("A", "B"))
    assert deck.current_index == 0
    assert deck.state == "active"
    assert deck.current().id == "A"


def test_build_copies_cards():
    cards = _cards("A")
    deck = DeckSession.build(cards)
    cards[0].text = "changed"
    assert deck.cards[0].text == "text A"


def test_advance_until_exhausted():
    deck = DeckSession.build(_cards("A", "B"))
    assert deck.advance()
    assert deck.advance()
    assert deck.exhausted
    assert deck.state == "exhausted"
    assert deck.current() is None
    assert deck.remaining() == []
    assert deck.advance() is False
    assert deck.current_index == 2


def test_from_dict_clamps_index():
    data = DeckSession.build(_cards("A")).to_dict()
    data["currentIndex"] = 9
    assert DeckSession.from_dict(data).current_index == 1
    data["currentIndex"] = -3
    assert DeckSession.from_dict(data).current_index == 0


def test_resume_after_reload(store, storage, clock):
    cards = store.create_cards_from_blocks("a.md", ["card A text", "card B text", "card C text"])
    store.build_deck(cards)
    store.advance_deck()
    store.advance_deck()

    reloaded = CardStore(storage, clock=clock, cache=QueryCache(clock=clock))
    reloaded.load()
    remaining = reloaded.build_or_resume_deck()
    assert [c.id for c in remaining] == [cards[2].id]
    assert reloaded.deck.current_index == 2


def test_build_or_resume_builds_from_unreviewed(store, clock):
    a = store.create_card("first text", "a.md")
    clock.tick()
    b = store.create_card("second text", "a.md")
    store.mark_reviewed(a.id, True)
    assert [c.id for c in store.build_or_resume_deck()] == [b.id]
    assert store.deck.state == "active"


def test_build_or_resume_uses_exact_selection(store):
    cards = store.create_cards_from_blocks("a.md", ["one text", "two text", "three text"])
    remaining = store.build_or_resume_deck([cards[2], cards[0]])
    assert [c.id for c in remaining] == [cards[2].id, cards[0].id]


def test_active_deck_wins_over_selection(store):
    cards = store.create_cards_from_blocks("a.md", ["one text", "two text"])
    store.build_deck(cards)
    store.advance_deck()
    assert [c.id for c in store.build_or_resume_deck([cards[0]])] == [cards[1].id]


def test_exhausted_deck_is_rebuilt(store):
    cards = store.create_cards_from_blocks("a.md", ["one text", "two text"])
    store.build_deck([cards[0]])
    store.advance_deck()
    assert store.get_deck().exhausted
    assert [c.id for c in store.build_or_resume_deck()] == [c.id for c in cards]


def test_nothing_to_review_builds_nothing(store):
    assert store.build_or_resume_deck() == []
    assert store.deck is None


def test_deck_view_reflects_advance(store):
    cards = store.create_cards_from_blocks("a.md", ["one text", "two text"])
    store.build_deck(cards)
    assert store.get_deck().current_index == 0
    store.advance_deck()
    assert store.get_deck().current_index == 1


def test_clear_deck(store):
    cards = store.create_cards_from_blocks("a.md", ["one text"])
    store.build_deck(cards)
    assert store.clear_deck()
    assert store.get_deck() is None
    assert store.clear_deck() is False


def test_shuffle_keeps_elements():
    items = list(range(30))
    shuffle(items, random.Random(1))
    assert sorted(items) == list(range(30))


def test_shuffle_empty_and_single():
    assert shuffle([]) == []
    assert shuffle(["x"]) == ["x"]


def test_shuffle_uniform_over_permutations():
    rng = random.Random(12345)
    base = ["a", "b", "c", "d"]
    perms = list(itertools.permutations(base))
    trials = 24000
    counts = Counter(tuple(shuffle(list(base), rng)) for _ in range(trials))

    assert set(counts) == set(perms)
    expected = trials / len(perms)
    chi2 = sum((counts[p] - expected) ** 2 / expected for p in perms)
    # 23 degrees of freedom; p = 0.001 critical value is about 49.7
    assert chi2 < 49.7
