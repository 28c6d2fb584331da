"""Shared data classes used across the store, deck and review session."""

import dataclasses
from dataclasses import dataclass

ROOT_DIRECTORY = "inbox"
UNKNOWN_SOURCE = "unknown"


def derive_directory(source: str | None) -> str:
    """Folder label for a source path: the path minus its last segment."""
    if not source or source == UNKNOWN_SOURCE:
        return ROOT_DIRECTORY
    parent, sep, _ = source.rstrip("/").rpartition("/")
    if not sep or not parent.strip("/"):
        return ROOT_DIRECTORY
    return parent


@dataclass
class Card:
    id: str
    text: str
    source: str = UNKNOWN_SOURCE
    directory: str = ROOT_DIRECTORY
    created_at: int = 0
    reviewed: bool = False
    kept: bool = False

    @property
    def status(self) -> str:
        if not self.reviewed:
            return "pending"
        return "kept" if self.kept else "discarded"

    def copy(self) -> "Card":
        return dataclasses.replace(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "directory": self.directory,
            "createdAt": self.created_at,
            "reviewed": self.reviewed,
            "kept": self.kept,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        source = data.get("source") or UNKNOWN_SOURCE
        return cls(
            id=str(data["id"]),
            text=data["text"],
            source=source,
            directory=data.get("directory") or derive_directory(source),
            created_at=int(data.get("createdAt") or 0),
            reviewed=bool(data.get("reviewed", False)),
            kept=bool(data.get("kept", False)),
        )
