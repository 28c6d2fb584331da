"""CLI: command-line interface for cardreview."""

import argparse
import pathlib
import sys

from cardreview.app import App
from cardreview.directories import group_by_directory, group_by_source
from cardreview.review_session import ReviewSession
from cardreview.store import total_pages

KEEP_ANSWERS = {"k", "keep", "y", "yes", ""}
DISCARD_ANSWERS = {"d", "discard", "n", "no"}
QUIT_ANSWERS = {"q", "quit"}


def _preview(text: str, width: int = 50) -> str:
    first = text.splitlines()[0] if text else ""
    return first[:width] + ("..." if len(text) > width else "")


def cmd_add(args, app: App):
    card = app.store.create_card(args.text, args.source)
    if card is None:
        print("Nothing to add: text is empty.")
        return
    print(f"Created card {card.id}: \"{_preview(card.text)}\"")


def cmd_import(args, app: App):
    total = 0
    for p in args.path:
        path = pathlib.Path(p)
        try:
            cards = app.import_document(path)
        except OSError as e:
            print(f"Warning: cannot read {path}: {e}", file=sys.stderr)
            continue
        print(f"{path}: {len(cards)} card(s)")
        total += len(cards)
    print(f"Imported {total} card(s)")


def cmd_review(args, app: App):
    store = app.store
    selection = None
    if args.directory or args.source:
        selection = store.select(directory=args.directory, source=args.source)
        if store.deck is None or store.deck.exhausted:
            if not selection:
                print("No cards match that selection.")
                return

    session = ReviewSession(store, selection, limit=store.settings.review_batch_size)
    if session.finished:
        print("No cards to review.")
        return

    while not session.finished:
        card = session.current()
        index, size = session.position()
        print(f"\n[{index}/{size}] {card.source}")
        print(card.text)
        try:
            answer = input("Keep? [K]eep / [d]iscard / [q]uit: ").strip().lower()
        except EOFError:
            print()
            break
        if answer in QUIT_ANSWERS:
            break
        if answer in KEEP_ANSWERS:
            session.decide(True)
        elif answer in DISCARD_ANSWERS:
            session.decide(False)
        else:
            print("Please answer k, d or q.")

    print(f"\nKept {session.kept}, discarded {session.discarded}, "
          f"{session.remaining_count()} left in deck")
    deck = store.deck
    if deck is not None and deck.exhausted:
        store.clear_deck()


def cmd_list(args, app: App):
    store = app.store
    cards = store.get_all_paged(args.page - 1, args.page_size)
    pages = total_pages(len(store.get_all()), args.page_size)
    for card in cards:
        status = "kept" if card.reviewed else "pending"
        print(f"{card.id}  [{status}]  {card.directory}  {_preview(card.text)}")
    print(f"Page {args.page}/{pages}")


def cmd_stats(args, app: App):
    stats = app.store.get_stats()
    print(f"Cards:      {stats['total']}")
    print(f"Kept:       {stats['reviewed']}")
    print(f"Unreviewed: {stats['unreviewed']}")
    deck = app.store.get_deck()
    if deck is not None and not deck.exhausted:
        print(f"Deck:       {deck.current_index}/{len(deck.cards)} reviewed")


def cmd_dirs(args, app: App):
    store = app.store
    by_directory = group_by_directory(store.get_all())
    for name in store.get_directories():
        by_source = group_by_source(by_directory.get(name, []))
        print(f"{name} ({len(by_source)})")
        for source in sorted(by_source):
            print(f"  {source} ({len(by_source[source])})")


def cmd_mkdir(args, app: App):
    if app.store.create_directory(args.name):
        print(f"Created directory {args.name.strip()}")
    else:
        print(f"Directory not created: {args.name!r}")


def cmd_rmdir(args, app: App):
    if app.store.delete_directory(args.name):
        print(f"Deleted directory {args.name.strip()}")
    else:
        print(f"No such directory: {args.name!r}")


def cmd_move(args, app: App):
    moved = app.store.move_source_to_directory(args.source, args.directory)
    print(f"Moved {moved} card(s) to {args.directory}")


def cmd_delete(args, app: App):
    if app.store.delete_card(args.id):
        print(f"Deleted card {args.id}")
    else:
        print(f"No card {args.id}")


def cmd_reset(args, app: App):
    count = app.store.reset_reviewed_kept()
    print(f"Reset {count} card(s) for review")


def _parse_bool(value: str) -> bool:
    value = value.strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"Not a boolean: {value}")


def cmd_settings(args, app: App):
    changes = {}
    for attr in ("auto_save", "mobile_full_width", "random_mode"):
        value = getattr(args, attr)
        if value is None:
            continue
        try:
            changes[attr] = _parse_bool(value)
        except ValueError as e:
            print(f"Error: --{attr.replace('_', '-')}: {e}", file=sys.stderr)
            return
    if args.review_batch_size is not None:
        changes["review_batch_size"] = args.review_batch_size
    settings = app.store.update_settings(**changes) if changes else app.store.settings
    for key, value in settings.to_dict().items():
        print(f"{key} = {value}")


COMMANDS = {
    "add": cmd_add,
    "import": cmd_import,
    "review": cmd_review,
    "list": cmd_list,
    "stats": cmd_stats,
    "dirs": cmd_dirs,
    "mkdir": cmd_mkdir,
    "rmdir": cmd_rmdir,
    "move": cmd_move,
    "delete": cmd_delete,
    "reset": cmd_reset,
    "settings": cmd_settings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cardreview", description="Review snippets as flashcards")
    subparsers = parser.add_subparsers(dest="command")

    p_add = subparsers.add_parser("add", help="Create a card from text")
    p_add.add_argument("text")
    p_add.add_argument("--source", help="Originating document path")

    p_import = subparsers.add_parser("import", help="Create cards from the blocks of markdown files")
    p_import.add_argument("path", nargs="+")

    p_review = subparsers.add_parser("review", help="Keep or discard unreviewed cards")
    p_review.add_argument("--directory", help="Only review cards in this directory")
    p_review.add_argument("--source", help="Only review cards from this source")

    p_list = subparsers.add_parser("list", help="List all cards, one page at a time")
    p_list.add_argument("--page", type=int, default=1)
    p_list.add_argument("--page-size", type=int, default=20)

    subparsers.add_parser("stats", help="Show card counts")
    subparsers.add_parser("dirs", help="List directories and their sources")

    p_mkdir = subparsers.add_parser("mkdir", help="Create a directory label")
    p_mkdir.add_argument("name")

    p_rmdir = subparsers.add_parser("rmdir", help="Delete a directory label")
    p_rmdir.add_argument("name")

    p_move = subparsers.add_parser("move", help="Move a source's cards to a directory")
    p_move.add_argument("source")
    p_move.add_argument("directory")

    p_delete = subparsers.add_parser("delete", help="Delete a card")
    p_delete.add_argument("id")

    subparsers.add_parser("reset", help="Put kept cards back into review")

    p_settings = subparsers.add_parser("settings", help="Show or change settings")
    p_settings.add_argument("--auto-save", dest="auto_save")
    p_settings.add_argument("--review-batch-size", dest="review_batch_size", type=int)
    p_settings.add_argument("--mobile-full-width", dest="mobile_full_width")
    p_settings.add_argument("--random-mode", dest="random_mode")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    app = App()
    if not app.data_dir.exists():
        app.data_dir.mkdir(parents=True, exist_ok=True)
        print(f"Created data directory: {app.data_dir}")

    app.init_db()
    try:
        COMMANDS[args.command](args, app)
    finally:
        app.close()
