"""Load-time migration of the persisted blob.

Runs once per load. Each step upgrades the blob by one version; the final
normalisation pass repairs what older or hand-edited blobs leave out, so the
rest of the package can rely on every field being present.
"""

import sys

from cardreview.config import Settings
from cardreview.models import UNKNOWN_SOURCE, derive_directory

SCHEMA_VERSION = 1


def _v0_to_v1(blob: dict) -> dict:
    """Back-fill card directories from their source path."""
    for card in blob.get("cards") or []:
        if isinstance(card, dict) and not card.get("directory"):
            card["directory"] = derive_directory(card.get("source"))
    if "settings" not in blob:
        # Older releases wrote settings into the top-level object.
        legacy = {k: blob[k] for k in Settings._KEYS if k in blob}
        if legacy:
            blob["settings"] = legacy
    return blob


_STEPS = {0: _v0_to_v1}


def migrate(blob: dict | None) -> dict:
    blob = dict(blob) if isinstance(blob, dict) else {}
    try:
        version = max(0, int(blob.get("version", 0)))
    except (TypeError, ValueError):
        version = 0
    while version < SCHEMA_VERSION:
        blob = _STEPS[version](blob)
        version += 1
    blob["version"] = SCHEMA_VERSION
    return _normalise(blob)


def _normalise_card(raw) -> dict | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    text = raw.get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    card_id = str(raw["id"])
    source = raw.get("source") or UNKNOWN_SOURCE
    created_at = raw.get("createdAt")
    if not isinstance(created_at, (int, float)):
        prefix = card_id.split("-", 1)[0]
        created_at = int(prefix) if prefix.isdigit() else 0
    return {
        "id": card_id,
        "text": text.strip(),
        "source": source,
        "directory": raw.get("directory") or derive_directory(source),
        "createdAt": int(created_at),
        "reviewed": bool(raw.get("reviewed", False)),
        "kept": bool(raw.get("kept", False)),
    }


def _normalise_cards(raw_cards, what: str, cursor: int = 0) -> tuple[list[dict], int]:
    """Repaired card records, and ``cursor`` shifted past any dropped before it."""
    if not isinstance(raw_cards, list):
        return [], 0
    cards = []
    seen: set[str] = set()
    dropped_before = 0
    for pos, raw in enumerate(raw_cards):
        card = _normalise_card(raw)
        if card is None:
            print(f"Warning: dropping malformed {what} record: {raw!r:.80}", file=sys.stderr)
        elif card["id"] in seen:
            print(f"Warning: dropping duplicate {what} id {card['id']}", file=sys.stderr)
        else:
            seen.add(card["id"])
            cards.append(card)
            continue
        if pos < cursor:
            dropped_before += 1
    return cards, cursor - dropped_before


def _normalise(blob: dict) -> dict:
    blob["cards"], _ = _normalise_cards(blob.get("cards"), "card")

    deck = blob.get("currentDeck")
    if isinstance(deck, dict) and isinstance(deck.get("cards"), list):
        try:
            index = max(0, int(deck.get("currentIndex", 0)))
        except (TypeError, ValueError):
            index = 0
        deck_cards, index = _normalise_cards(deck["cards"], "deck card", index)
        blob["currentDeck"] = {
            "cards": deck_cards,
            "currentIndex": min(index, len(deck_cards)),
        }
    else:
        blob["currentDeck"] = None

    labels = blob.get("directories")
    if isinstance(labels, list):
        blob["directories"] = [str(d).strip() for d in labels if str(d).strip()]
    else:
        blob["directories"] = []

    settings = blob.get("settings")
    blob["settings"] = Settings.from_dict(settings if isinstance(settings, dict) else None).to_dict()
    return blob
