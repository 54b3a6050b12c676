"""CLI entry point for trello2vectors."""

from __future__ import annotations

import logging
import os
import sys

from trello2vectors.config import ImportConfig, load_env_file
from trello2vectors.exceptions import (
    BoardImportError,
    StoreError,
    TrelloAPIError,
    TrelloAuthenticationError,
)
from trello2vectors.importer import BoardImporter
from trello2vectors.logging_config import setup_logging
from trello2vectors.mapping import load_status_mapping
from trello2vectors.store_client import MemoryStore, SupabaseStore
from trello2vectors.trello_client import TrelloReader

logger = logging.getLogger("trello2vectors.cli")

USAGE = """
trello2vectors - Import a Trello board into Vectors

Usage:
    export TRELLO_API_KEY="your-key"
    export TRELLO_TOKEN="your-token"
    export TRELLO_BOARD_ID="your-board-id"     # or TRELLO_BOARD_URL
    export SUPABASE_URL="https://<project>.supabase.co"
    export SUPABASE_KEY="your-anon-key"
    export SUPABASE_ACCESS_TOKEN="user-jwt"     # optional
    export VECTORS_USER_ID="your-user-id"

    # Import the board
    trello2vectors

    # Preview without writing anything (in-memory store)
    trello2vectors --dry-run

    # Discover boards, preview one, or show past imports
    trello2vectors --list-boards
    trello2vectors --summary
    trello2vectors --history

    # Import a board again even though it was imported before
    trello2vectors --force

Options:
    -h, --help               Show this help
    -v, --verbose            Debug logging
    -q, --quiet              Errors only
    --log-level LEVEL        DEBUG, INFO, WARNING or ERROR
    --log-file PATH          Also write logs to PATH
    -n, --dry-run            Import into memory instead of Supabase
    --force                  Re-import a board that was already imported
    --status-mapping PATH    JSON file with custom list-name keywords
    --no-verify-ssl          Disable TLS certificate verification
"""


def _flag_value(argv: list[str], flag: str) -> str | None:
    """Value following ``flag`` in argv; exits if the flag is last"""
    if flag not in argv:
        return None
    idx = argv.index(flag)
    if idx + 1 >= len(argv):
        logger.error(f"❌ Error: {flag} requires a value")
        sys.exit(1)
    return argv[idx + 1]


def _print_progress(percent: float, message: str) -> None:
    logger.info(f"[{percent:5.1f}%] {message}")


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv

    if "--help" in argv or "-h" in argv:
        print(USAGE)
        sys.exit(0)

    log_level = "INFO"
    if "--verbose" in argv or "-v" in argv:
        log_level = "DEBUG"
    elif "--quiet" in argv or "-q" in argv:
        log_level = "ERROR"
    elif "--log-level" in argv:
        log_level = (_flag_value(argv, "--log-level") or "INFO").upper()

    setup_logging(log_level, _flag_value(argv, "--log-file"))

    load_env_file(os.getenv("TRELLO_ENV_FILE", ".env"))
    config = ImportConfig.from_env()

    dry_run = "--dry-run" in argv or "-n" in argv
    list_boards = "--list-boards" in argv
    show_summary = "--summary" in argv
    show_history = "--history" in argv
    force = "--force" in argv
    no_verify_ssl = "--no-verify-ssl" in argv

    if no_verify_ssl:
        import urllib3

        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.info("🔓 SSL verification disabled")

    status_keywords = None
    status_mapping_path = _flag_value(argv, "--status-mapping")
    if status_mapping_path:
        try:
            status_keywords = load_status_mapping(status_mapping_path)
            logger.info(f"✅ Loaded custom status mapping from: {status_mapping_path}")
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"❌ Error loading status mapping: {e}")
            sys.exit(1)

    needs_store = not (dry_run or list_boards or show_summary)
    missing = config.missing(include_store=needs_store)
    if list_boards or show_summary or dry_run:
        missing = [name for name in missing if name != "VECTORS_USER_ID"]
    if show_history:
        missing = [name for name in missing if not name.startswith("TRELLO_")]
    if missing:
        logger.error("❌ Error: Missing required configuration")
        for name in missing:
            logger.error(f"  {name}")
        logger.error("\nSet them in your environment or create a .env file.")
        sys.exit(1)

    trello = TrelloReader(
        config.trello_api_key, config.trello_token, verify_ssl=not no_verify_ssl
    )

    if list_boards:
        try:
            boards = trello.list_boards()
        except TrelloAPIError as e:
            logger.error(f"❌ Failed to list boards: {e}")
            sys.exit(1)
        logger.info(f"📋 {len(boards)} open boards:")
        for board in boards:
            logger.info(f"   {board['id']}  {board['name']}")
        sys.exit(0)

    board_id = config.board_id
    if config.board_url:
        try:
            board_id = TrelloReader.parse_board_url(config.board_url)
        except ValueError as e:
            logger.error(f"❌ Error: {e}")
            sys.exit(1)

    if show_summary:
        if not board_id:
            logger.error("❌ Error: TRELLO_BOARD_ID or TRELLO_BOARD_URL is required")
            sys.exit(1)
        try:
            summary = trello.get_board_summary(board_id)
        except TrelloAPIError as e:
            logger.error(f"❌ Failed to fetch board summary: {e}")
            sys.exit(1)
        logger.info(f"📋 Board: {summary['boardName']}")
        logger.info(f"   Cards: {summary['cardCount']}")
        logger.info(f"   Labels in use: {summary['labelCount']}")
        logger.info(f"   Checklist items: {summary['checklistItemCount']}")
        sys.exit(0)

    store: SupabaseStore | MemoryStore
    if dry_run:
        logger.info("🧪 Dry run: writing to an in-memory store")
        store = MemoryStore()
    else:
        assert config.supabase_url is not None
        assert config.supabase_key is not None
        store = SupabaseStore(
            config.supabase_url,
            config.supabase_key,
            access_token=config.supabase_access_token,
            verify_ssl=not no_verify_ssl,
        )

    user_id = config.user_id or "dry-run-user"
    importer = BoardImporter(trello, store, user_id, status_keywords=status_keywords)

    if show_history:
        try:
            history = importer.get_import_history()
        except StoreError as e:
            logger.error(f"❌ Failed to load import history: {e}")
            sys.exit(1)
        if not history:
            logger.info("No previous imports.")
        for record in history:
            logger.info(
                f"   {record.get('imported_at', '?')}  {record['trello_board_name']} "
                f"({record['cards_imported']} cards)"
            )
        sys.exit(0)

    if not board_id:
        logger.error("❌ Error: Missing board identifier")
        logger.error("  TRELLO_BOARD_ID    - The board ID (e.g., Bm0nnz1R)")
        logger.error("  TRELLO_BOARD_URL   - The full board URL")
        sys.exit(1)

    try:
        if not force and importer.has_been_imported(board_id):
            logger.error(f"❌ Board {board_id} has already been imported.")
            logger.error("   Run again with --force to import it a second time.")
            sys.exit(1)
    except StoreError as e:
        logger.error(f"❌ Failed to check import history: {e}")
        sys.exit(1)

    try:
        result = importer.import_board(board_id, on_progress=_print_progress)
    except TrelloAuthenticationError as e:
        logger.error(f"❌ {e}")
        logger.error("   Generate a new token and update TRELLO_TOKEN.")
        sys.exit(1)
    except (BoardImportError, TrelloAPIError) as e:
        logger.error(f"❌ Import failed: {e}")
        sys.exit(1)

    logger.info("")
    logger.info("=" * 60)
    logger.info("📊 IMPORT SUMMARY")
    logger.info("=" * 60)
    if result.board_created:
        logger.info(f"Board: {result.board_created['name']}")
    logger.info(f"Tasks imported: {result.tasks_imported}")
    logger.info(f"Subtasks imported: {result.subtasks_imported}")
    logger.info(f"Tags created: {result.tags_created}")
    if result.errors:
        logger.warning(f"⚠️  {len(result.errors)} items had errors and were skipped")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
