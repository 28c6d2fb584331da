"""Tests for cardreview.app."""

from cardreview.app import App


def test_init_db_loads_store(app):
    assert app.store is not None
    assert app.store.cards == []


def test_import_document(app, tmp_path):
    doc = tmp_path / "notes" / "page.md"
    doc.parent.mkdir()
    doc.write_text("---\ntitle: Page\n---\n# Page heading\n\nA paragraph worth keeping.\n\ntiny\n")
    cards = app.import_document(doc)
    assert [c.text for c in cards] == ["Page heading", "A paragraph worth keeping."]
    assert all(c.source == doc.as_posix() for c in cards)
    assert cards[0].directory == (tmp_path / "notes").as_posix()


def test_import_document_custom_source(app, tmp_path):
    doc = tmp_path / "page.md"
    doc.write_text("A paragraph worth keeping.")
    cards = app.import_document(doc, source="vault/page.md")
    assert cards[0].directory == "vault"


def test_state_survives_reopen(tmp_path):
    first = App(data_dir=tmp_path)
    first.init_db()
    first.store.create_card("durable text", "a/b.md")
    first.close()
    assert first.store is None

    second = App(data_dir=tmp_path)
    second.init_db()
    assert [c.text for c in second.store.cards] == ["durable text"]
    second.close()


def test_options_from_settings_file(tmp_path):
    (tmp_path / "settings.toml").write_text('cache_ttl_ms = 10\ndb_name = "other.db"\n')
    app = App(data_dir=tmp_path)
    app.init_db()
    assert app.store.cache.ttl_ms == 10
    assert (tmp_path / "other.db").exists()
    app.close()


def test_import_document_source_from_frontmatter(app, tmp_path):
    doc = tmp_path / "page.md"
    doc.write_text("---\nsource: vault/topics/page.md\n---\nA paragraph worth keeping.\n")
    cards = app.import_document(doc)
    assert cards[0].source == "vault/topics/page.md"
    assert cards[0].directory == "vault/topics"


def test_import_document_argument_beats_frontmatter(app, tmp_path):
    doc = tmp_path / "page.md"
    doc.write_text("---\nsource: vault/topics/page.md\n---\nA paragraph worth keeping.\n")
    cards = app.import_document(doc, source="other/page.md")
    assert cards[0].source == "other/page.md"
