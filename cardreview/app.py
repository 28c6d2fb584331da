"""App: central object that wires together data_dir, db, storage and the card store."""

import pathlib
import sqlite3

from cardreview.blocks import card_candidates
from cardreview.config import get_data_dir, load_host_options, parse_frontmatter
from cardreview.db import BlobStorage, init_db
from cardreview.models import Card
from cardreview.store import CardStore


class App:
    """Holds all shared state for a cardreview process.

    Usage:
        app = App(data_dir="/path/to/data")
        app.init_db()                    # uses data_dir/cardreview.db
        app.store.create_card("text", "notes/page.md")
        app.close()

    For testing:
        app = App(data_dir=tmp_path)
        app.init_db(":memory:")
    """

    def __init__(self, data_dir: pathlib.Path | str | None = None):
        if data_dir is None:
            data_dir = get_data_dir()
        self.data_dir = pathlib.Path(data_dir)
        self.options = load_host_options(self.data_dir)
        self.conn: sqlite3.Connection | None = None
        self.store: CardStore | None = None

    @property
    def db_path(self) -> pathlib.Path:
        return self.data_dir / self.options["db_name"]

    def init_db(self, db_path: pathlib.Path | str | None = None) -> CardStore:
        """Connect to the database and load the card store from it.

        Args:
            db_path: Path to the SQLite database file, or ":memory:" for
                     in-memory databases (useful for testing). Defaults to
                     data_dir/<db_name>.
        """
        if db_path is None:
            db_path = self.db_path
        self.conn = init_db(db_path)
        self.store = CardStore(BlobStorage(self.conn),
                               cache_ttl_ms=self.options["cache_ttl_ms"])
        self.store.load()
        return self.store

    def import_document(self, path: pathlib.Path | str, source: str | None = None) -> list[Card]:
        """Turn every card-worthy block of a markdown file into a card.

        The source is, in order: the ``source`` argument, a ``source:`` key in
        the file's frontmatter, the file path.
        """
        path = pathlib.Path(path)
        meta, body = parse_frontmatter(path.read_text())
        if source is None and isinstance(meta.get("source"), str):
            source = meta["source"]
        texts = [text for _block, text in card_candidates(body)]
        return self.store.create_cards_from_blocks(source or path.as_posix(), texts)

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.store = None
