"""CLI entrypoint for browsing, building, and rendering prompts."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from .app import VIEW_LANDING, VIEW_LIST, VIEW_MODAL, PromptApp
from .clipboard import ClipboardExporter, ClipboardWriter, TkClipboardWriter, detect_primary_writer
from .config import Settings, configure_logging
from .content_loader import (
    ContentLoadError,
    build_collection,
    load_collection,
    load_collection_from_manifest,
    load_descriptions,
    validate_collection,
    write_build_outputs,
)
from .models import CATEGORIES, CATEGORY_LABELS, PromptCollection
from .renderer import RenderOptions, render_markdown
from .routing import HashLocation
from .scheduler import Scheduler
from .storage import KeyValueStorage, MemoryStorage, SqliteStorage, StorageError
from .terminal import TerminalCopyFeedback, TerminalLandingView, TerminalListView, TerminalModalView
from .viewed import ViewedTracker
from .views import Views

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
MENU_QUIT_COMMANDS = {"q"}
MENU_BACK_COMMANDS = {"b"}
MODAL_CLOSE_COMMANDS = {"x", "esc", "b"}
MODAL_COPY_COMMANDS = {"c"}
DESCRIPTIONS_FILENAME = "prompt-descriptions.json"


def _settings() -> Settings:
    """Create settings from the environment."""
    return Settings.from_env()


def _load_collection(settings: Settings) -> PromptCollection:
    """Load prompts from markdown sources in dev mode, else from the built document."""
    if settings.manifest_path is not None:
        return load_collection_from_manifest(settings.manifest_path, settings.prompts_root)
    return load_collection(settings.data_path)


def _open_storage(settings: Settings) -> KeyValueStorage:
    """Open persistent client state, falling back to memory if it is unavailable."""
    try:
        return SqliteStorage(settings.state_db_path)
    except StorageError as exc:
        logger.warning("Viewed prompts will not persist: %s", exc)
        return MemoryStorage()


def _clipboard_writers() -> tuple[ClipboardWriter | None, ClipboardWriter]:
    """Return (primary, fallback) clipboard writers for this platform."""
    return detect_primary_writer(), TkClipboardWriter()


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="promptdeck", description="Browse and copy curated AI prompts")
    parser.add_argument("--log-level", help="Logging level (default from PROMPTDECK_LOG_LEVEL or WARNING)")
    subparsers = parser.add_subparsers(dest="command")

    browse = subparsers.add_parser("browse", help="Browse prompts interactively (default)")
    browse.add_argument("fragment", nargs="?", default="", help="Initial route, e.g. '#students'")
    browse.add_argument("--data", type=Path, help="Pre-built prompts-data.json")
    browse.add_argument("--manifest", type=Path, help="Development mode: prompts-manifest.json")
    browse.add_argument("--prompts-root", type=Path, help="Markdown sources for development mode")
    browse.add_argument("--state-dir", type=Path, help="Where viewed-prompt state is kept")

    build = subparsers.add_parser("build", help="Build prompts-data.json and prompts-manifest.json")
    build.add_argument("prompts_root", type=Path)
    build.add_argument("--descriptions", type=Path, help=f"Description overrides (default ../{DESCRIPTIONS_FILENAME})")
    build.add_argument("--output", type=Path, default=Path("."))
    build.add_argument("--expected", type=int, default=None, help="Fail unless exactly this many prompts are found")

    render = subparsers.add_parser("render", help="Print the HTML rendering of one markdown file")
    render.add_argument("file", type=Path)

    args = parser.parse_args(argv)
    settings = _settings()
    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)

    if args.command == "build":
        return build_prompts(args.prompts_root, args.descriptions, args.output, args.expected)
    if args.command == "render":
        return render_file(args.file, RenderOptions(label_max_length=settings.label_max_length))

    if getattr(args, "data", None) is not None:
        settings.data_path = args.data
    if getattr(args, "manifest", None) is not None:
        settings.manifest_path = args.manifest
    if getattr(args, "prompts_root", None) is not None:
        settings.prompts_root = args.prompts_root
    if getattr(args, "state_dir", None) is not None:
        settings.state_dir = args.state_dir
    return browse_shell(settings, initial_fragment=getattr(args, "fragment", ""))


def browse_shell(
    settings: Settings,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    initial_fragment: str = "",
) -> int:
    """Run the menu-driven prompt browser."""
    try:
        collection = _load_collection(settings)
    except ContentLoadError as exc:
        logger.error("Error loading prompts data: %s", exc)
        print_fn(f"Failed to load prompts: {exc}")
        print_fn("Fix the prompt data and start again.")
        return 1

    storage = _open_storage(settings)
    scheduler = Scheduler()
    views = Views(
        landing=TerminalLandingView(print_fn),
        list=TerminalListView(print_fn),
        modal=TerminalModalView(print_fn),
        feedback=TerminalCopyFeedback(print_fn),
    )
    primary, fallback = _clipboard_writers()
    exporter = ClipboardExporter(
        views.feedback, scheduler, primary, fallback, revert_delay=settings.copy_feedback_seconds
    )
    app = PromptApp(
        collection,
        views,
        ViewedTracker(storage),
        exporter,
        scheduler,
        HashLocation(initial_fragment),
        RenderOptions(label_max_length=settings.label_max_length),
    )
    try:
        app.start()
        while True:
            scheduler.run_due()
            choice = input_fn("Choose: ").strip()
            scheduler.run_due()
            if not _handle_choice(app, choice, print_fn):
                return 0
    finally:
        for resource in (storage, fallback):
            close = getattr(resource, "close", None)
            if close is not None:
                close()


def _handle_choice(app: PromptApp, choice: str, print_fn: PrintFn) -> bool:
    """Apply one shell command; return False to quit."""
    lowered = choice.lower()
    if lowered in MENU_QUIT_COMMANDS:
        return False
    if choice.startswith("#"):
        app.navigate(choice)
        return True

    view = app.state.view
    if view == VIEW_LANDING:
        _landing_choice(app, lowered, print_fn)
    elif view == VIEW_LIST:
        _list_choice(app, lowered, print_fn)
    elif view == VIEW_MODAL:
        _modal_choice(app, lowered, print_fn)
    return True


def _landing_choice(app: PromptApp, choice: str, print_fn: PrintFn) -> None:
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < len(CATEGORIES):
            app.open_category(CATEGORIES[index])
            return
    print_fn("Invalid choice.")


def _list_choice(app: PromptApp, choice: str, print_fn: PrintFn) -> None:
    if choice in MENU_BACK_COMMANDS:
        app.go_home()
        return
    category = app.state.category
    prompts = app.collection.by_category(category) if category is not None else ()
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < len(prompts):
            app.open_prompt(prompts[index].id)
            return
    print_fn("Invalid choice.")


def _modal_choice(app: PromptApp, choice: str, print_fn: PrintFn) -> None:
    if choice in MODAL_COPY_COMMANDS:
        app.copy_current_prompt()
    elif choice in MODAL_CLOSE_COMMANDS:
        app.press_escape()
    else:
        print_fn("Invalid choice.")


def build_prompts(
    prompts_root: Path,
    descriptions_path: Path | None,
    output_dir: Path,
    expected_total: int | None,
    print_fn: PrintFn = print,
) -> int:
    """Build and validate the prompt data files from markdown sources."""
    if descriptions_path is None:
        default_path = prompts_root.parent / DESCRIPTIONS_FILENAME
        descriptions_path = default_path if default_path.is_file() else None
    try:
        descriptions = load_descriptions(descriptions_path) if descriptions_path is not None else {}
    except ContentLoadError as exc:
        print_fn(f"ERROR: {exc}")
        return 1

    print_fn("Building prompts data...")
    collection = build_collection(prompts_root, descriptions)
    report = validate_collection(collection, expected_total)
    for error in report.errors:
        print_fn(f"ERROR: {error}")
    for warning in report.warnings:
        print_fn(f"WARNING: {warning}")
    if not report.ok:
        print_fn("Build validation FAILED. Fix errors above and try again.")
        return 1
    if report.warnings:
        print_fn("Build validation passed with warnings (see above)")
    else:
        print_fn("Build validation passed!")

    data_path, manifest_path = write_build_outputs(collection, output_dir)
    for category in CATEGORIES:
        prompts = collection.by_category(category)
        print_fn(f"\n{CATEGORY_LABELS[category]} prompts: {len(prompts)}")
        for idx, prompt in enumerate(prompts, start=1):
            print_fn(f"  {idx}. {prompt.title}")
    print_fn(f"\nTotal prompts: {collection.metadata.total_count}")
    print_fn(f"Data written to: {data_path}")
    print_fn(f"Manifest written to: {manifest_path}")
    return 0


def render_file(path: Path, options: RenderOptions, print_fn: PrintFn = print) -> int:
    """Print the HTML fragment for one markdown document."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        print_fn(f"Could not read {path}: {exc}")
        return 1
    print_fn(render_markdown(text, options))
    return 0


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
