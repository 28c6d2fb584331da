"""Directory labels: folder-like grouping of cards, derived from card paths plus user labels."""

from cardreview.models import ROOT_DIRECTORY, Card


class DirectoryIndex:
    """Label operations over a CardStore.

    The root label always exists. User-created labels live in ``store.labels``
    and survive without member cards until deleted.
    """

    def __init__(self, store):
        self.store = store

    def all(self) -> list[str]:
        names = {c.directory for c in self.store.cards} | set(self.store.labels)
        names.discard(ROOT_DIRECTORY)
        return [ROOT_DIRECTORY] + sorted(names)

    def create(self, name: str) -> bool:
        name = (name or "").strip()
        if not name or name == ROOT_DIRECTORY or name in self.store.labels:
            return False
        self.store.labels.append(name)
        self.store._commit("directories")
        return True

    def delete(self, name: str) -> bool:
        """Drop a label; its cards fall back to the root label."""
        name = (name or "").strip()
        if not name or name == ROOT_DIRECTORY:
            return False
        members = [c for c in self.store.cards if c.directory == name]
        if name not in self.store.labels and not members:
            return False
        if name in self.store.labels:
            self.store.labels.remove(name)
        for card in members:
            card.directory = ROOT_DIRECTORY
        self.store._commit("directories")
        return True


def group_by_directory(cards: list[Card]) -> dict[str, list[Card]]:
    groups: dict[str, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.directory or ROOT_DIRECTORY, []).append(card)
    return groups


def group_by_source(cards: list[Card]) -> dict[str, list[Card]]:
    groups: dict[str, list[Card]] = {}
    for card in cards:
        groups.setdefault(card.source, []).append(card)
    return groups
