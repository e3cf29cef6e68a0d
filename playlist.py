#!/usr/bin/env python3
"""
PlayList - Personal Video Game Library Tracker
Keep track of your backlog, collection, completed games and wishlist from the terminal.
"""

import argparse
import json
import logging
import os
import sys
from typing import Callable, Dict, List, Optional

from colorama import init, Fore, Style

import database
from playlist_core.exceptions import CancelledError, PlayListError, ValidationError
from playlist_core.models import Category, GameRecord, SortField, SortOrder
from playlist_core.repositories import PreferencesRepository, VideoGameRepository
from playlist_core.services import (
    CategoryService, DisplayService, LibraryService, ListProjection,
    SettingsService, ToggleOutcome,
)
from playlist_core.validation import parse_date, parse_playtime, parse_price

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root PlayList logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('playlist')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


# Module-level logger used throughout playlist.py
logger = setup_logging()

DEFAULT_CONFIG = {
    'database_url': database.DATABASE_URL,
    'preferences_path': '.playlist_preferences.json',
    'log_level': 'WARNING',
    'placeholder_image': None,
}


def load_config(config_path: Optional[str]) -> Dict:
    """Load configuration from a JSON file with environment variable support.

    A missing file is fine: every key has a default.  Environment variables
    take precedence over config file values:
    - PLAYLIST_DATABASE_URL overrides database_url
    - PLAYLIST_LOG_LEVEL overrides log_level
    """
    config = dict(DEFAULT_CONFIG)
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                config.update(loaded)
            else:
                logger.warning("Ignoring %s: expected a JSON object", config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Could not load config %s: %s", config_path, e)

    if os.getenv('PLAYLIST_DATABASE_URL'):
        config['database_url'] = os.getenv('PLAYLIST_DATABASE_URL')
    if os.getenv('PLAYLIST_LOG_LEVEL'):
        config['log_level'] = os.getenv('PLAYLIST_LOG_LEVEL')
    return config


def prompt_confirm(message: str) -> bool:
    """Ask a yes/no question on the terminal; EOF or Ctrl-C cancels."""
    try:
        answer = input(f"{Fore.YELLOW}{message} [y/N]: ")
    except (EOFError, KeyboardInterrupt):
        print()
        raise CancelledError(message)
    return answer.strip().lower() in ('y', 'yes')


def _always_confirm(_message: str) -> bool:
    return True


class PlayList:
    """Builds the repositories and services for one configuration.

    Commands receive this object and only talk to its services.
    """

    def __init__(self, config: Dict, confirm: Callable[[str], bool] = prompt_confirm):
        self.config = config
        setup_logging(config.get('log_level', 'WARNING'))

        url = config.get('database_url') or database.DATABASE_URL
        if url == database.DATABASE_URL:
            engine, session_factory = database.engine, database.SessionLocal
        else:
            engine = database.make_engine(url)
            session_factory = database.make_session_factory(engine)
        if not database.init_db(engine):
            raise PlayListError(f"Could not open the database at {url}")
        self.database_url = url

        self.repository = VideoGameRepository(session_factory)
        self.preferences = PreferencesRepository(config['preferences_path'])
        self.settings = SettingsService(self.preferences)
        self.library = LibraryService(self.repository, self.settings)
        self.categories = CategoryService(self.repository, self.settings, confirm)
        self.display = DisplayService(self.settings, config.get('placeholder_image'))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _categories_from(values: Optional[List[str]]) -> Optional[frozenset]:
    if not values:
        return None
    return frozenset(Category.parse(v) for v in values)


def _record_from_args(args: argparse.Namespace, base: Optional[GameRecord] = None) -> GameRecord:
    """Build a record from command-line fields, falling back to *base* for omitted ones."""
    def pick(name, parse=None, current=None):
        raw = getattr(args, name)
        if raw is None:
            return current
        return parse(raw) if parse else raw.strip()

    return GameRecord(
        title=pick('title', current=base.title if base else ''),
        platform=pick('platform', current=base.platform if base else ''),
        publisher=pick('publisher', current=base.publisher if base else ''),
        release_date=pick('release_date', lambda v: parse_date(v, 'release_date'),
                          base.release_date if base else None),
        completion_date=pick('completion_date', lambda v: parse_date(v, 'completion_date'),
                             base.completion_date if base else None),
        playtime=pick('playtime', parse_playtime, base.playtime if base else None),
        price=pick('price', parse_price, base.price if base else None),
        categories=_categories_from(args.category) or (base.categories if base else frozenset()),
        image_path=pick('image', lambda v: v.strip() or None, base.image_path if base else None),
    )


def cmd_init_db(app: PlayList, args: argparse.Namespace) -> int:
    # Tables are created when PlayList starts up; this only reports it.
    print(f"{Fore.GREEN}Database ready at {app.database_url} "
          f"({app.library.total_games()} video games).")
    return 0


def cmd_add(app: PlayList, args: argparse.Namespace) -> int:
    game_id = app.library.add_game(_record_from_args(args))
    print(f"{Fore.GREEN}Video game added (id {game_id}).")
    return 0


def cmd_edit(app: PlayList, args: argparse.Namespace) -> int:
    current = app.library.read_game(args.id)
    app.library.edit_game(args.id, _record_from_args(args, base=current))
    print(f"{Fore.GREEN}Video game {args.id} updated.")
    return 0


def cmd_show(app: PlayList, args: argparse.Namespace) -> int:
    game = app.library.read_game(args.id)
    display = app.display
    print(f"{Fore.CYAN}{Style.BRIGHT}{game.title}")
    print(f"  Platform:        {game.platform}")
    print(f"  Publisher:       {game.publisher}")
    print(f"  Release date:    {game.release_date.isoformat()}")
    print(f"  Completion date: {display.view_date(Category.COMPLETION, game)}")
    print(f"  Playtime:        {display.format_playtime(game.playtime)}")
    print(f"  Price:           {display.format_price(game.price)}")
    print(f"  Categories:      {', '.join(c.value for c in Category if c in game.categories)}")
    if app.settings.display_images:
        print(f"  Cover:           {display.resolve_cover(game.image_path) or '(none)'}")
    return 0


def cmd_list(app: PlayList, args: argparse.Namespace) -> int:
    category = Category.parse(args.category)
    if args.sort or args.order:
        field, order = app.settings.get_sort_preference(category.value)
        app.settings.set_sort_preference(category.value, args.sort or field, args.order or order)
    projection = ListProjection(category)
    app.library.load_projection(projection)
    if args.search:
        projection.search(args.search)

    if projection.is_empty:
        print(f"{Fore.YELLOW}No video games found.")
        return 0
    for game in projection.authoritative:
        print(f"{Fore.WHITE}{game.id:>5}  {Style.BRIGHT}{game.title}{Style.RESET_ALL}"
              f"  {game.platform} | {game.publisher}"
              f" | {app.display.view_date(category, game)}"
              f" | {app.display.view_metric(category, game)}")
    return 0


_OUTCOME_MESSAGES = {
    ToggleOutcome.ADDED: (Fore.GREEN, "Video game {id} added to {category}."),
    ToggleOutcome.REMOVED: (Fore.GREEN, "Video game {id} removed from {category}."),
    ToggleOutcome.DELETED: (Fore.GREEN, "Video game {id} deleted."),
    ToggleOutcome.CANCELLED: (Fore.YELLOW, "Cancelled."),
}


def _print_outcome(outcome: ToggleOutcome, game_id: int, category: str = '') -> None:
    color, template = _OUTCOME_MESSAGES[outcome]
    print(f"{color}{template.format(id=game_id, category=category)}")


def cmd_toggle(app: PlayList, args: argparse.Namespace) -> int:
    category = Category.parse(args.category)
    outcome = app.categories.toggle_category(args.id, category)
    _print_outcome(outcome, args.id, category.value)
    return 0


def cmd_delete(app: PlayList, args: argparse.Namespace) -> int:
    _print_outcome(app.categories.delete_game(args.id), args.id)
    return 0


def cmd_delete_all(app: PlayList, args: argparse.Namespace) -> int:
    if app.library.total_games() == 0:
        print(f"{Fore.YELLOW}There are no video games to delete.")
        return 0
    ask = not args.yes and app.settings.always_confirm_delete
    if ask and not prompt_confirm("Delete all video games? This cannot be undone."):
        _print_outcome(ToggleOutcome.CANCELLED, 0)
        return 0
    app.library.delete_all_games()
    print(f"{Fore.GREEN}All video games deleted.")
    return 0


def cmd_count(app: PlayList, args: argparse.Namespace) -> int:
    print(f"{Fore.CYAN}Total: {app.library.total_games()}")
    for category in Category:
        print(f"  {category.value:<11} {len(app.repository.list_by_category(category))}")
    return 0


def cmd_settings(app: PlayList, args: argparse.Namespace) -> int:
    if args.confirm_delete is not None:
        app.settings.set_always_confirm_delete(args.confirm_delete == 'on')
    if args.display_images is not None:
        app.settings.set_display_images(args.display_images == 'on')
    if args.confirm_delete is not None or args.display_images is not None:
        print(f"{Fore.GREEN}Settings updated.")

    def state(flag: bool) -> str:
        return 'on' if flag else 'off'

    print(f"  confirm-delete: {state(app.settings.always_confirm_delete)}")
    print(f"  display-images: {state(app.settings.display_images)}")
    for category in Category:
        field, order = app.settings.get_sort_preference(category.value)
        print(f"  sort {category.value:<11} {field.value} {order.value}")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

_CATEGORY_CHOICES = [c.value for c in Category]


def _add_record_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument('--title', required=required, help='Title (max 100 characters)')
    parser.add_argument('--platform', required=required, help='Platform (max 50 characters)')
    parser.add_argument('--publisher', required=required, help='Publisher (max 50 characters)')
    parser.add_argument('--release-date', required=required, metavar='YYYY-MM-DD',
                        help='Release date')
    parser.add_argument('--completion-date', metavar='YYYY-MM-DD',
                        help='Completion date (not before the release date)')
    parser.add_argument('--playtime', metavar='HOURS', help='Playtime in hours (0-10000)')
    parser.add_argument('--price', required=required, help='Price, e.g. 59.99 (0-10000)')
    parser.add_argument('--category', action='append', choices=_CATEGORY_CHOICES,
                        required=required,
                        help='Category to save the game to (repeatable)')
    parser.add_argument('--image', help='Cover art path or file:// URI')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='playlist',
        description='PlayList - Personal Video Game Library Tracker',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  playlist add --title "Hades" --platform PC --publisher "Supergiant Games" \\
               --release-date 2020-09-17 --price 24.99 --category backlog
  playlist list backlog --sort metric --order desc
  playlist list wishlist --search "super"
  playlist toggle 3 collection
        """
    )
    parser.add_argument('--config', '-c', default='config.json',
                        help='Path to config file (default: config.json)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    init_parser = subparsers.add_parser('init-db', help='Create the database tables.')
    init_parser.set_defaults(func=cmd_init_db)

    add_parser = subparsers.add_parser('add', help='Add a video game.')
    _add_record_arguments(add_parser, required=True)
    add_parser.set_defaults(func=cmd_add)

    edit_parser = subparsers.add_parser('edit', help='Edit a video game.')
    edit_parser.add_argument('id', type=int)
    _add_record_arguments(edit_parser, required=False)
    edit_parser.set_defaults(func=cmd_edit)

    show_parser = subparsers.add_parser('show', help='Show a video game in detail.')
    show_parser.add_argument('id', type=int)
    show_parser.set_defaults(func=cmd_show)

    list_parser = subparsers.add_parser('list', help='List the games of a category.')
    list_parser.add_argument('category', choices=_CATEGORY_CHOICES)
    list_parser.add_argument('--sort', choices=[f.value for f in SortField],
                             help='Sort field (stored for next time)')
    list_parser.add_argument('--order', choices=[o.value for o in SortOrder],
                             help='Sort order (stored for next time)')
    list_parser.add_argument('--search', help='Only titles starting with this text')
    list_parser.set_defaults(func=cmd_list)

    toggle_parser = subparsers.add_parser(
        'toggle', help='Add a game to, or remove it from, a category.')
    toggle_parser.add_argument('id', type=int)
    toggle_parser.add_argument('category', choices=_CATEGORY_CHOICES)
    toggle_parser.add_argument('--yes', '-y', action='store_true',
                               help='Do not ask before deleting')
    toggle_parser.set_defaults(func=cmd_toggle)

    delete_parser = subparsers.add_parser('delete', help='Delete a video game.')
    delete_parser.add_argument('id', type=int)
    delete_parser.add_argument('--yes', '-y', action='store_true',
                               help='Do not ask before deleting')
    delete_parser.set_defaults(func=cmd_delete)

    delete_all_parser = subparsers.add_parser('delete-all', help='Delete every video game.')
    delete_all_parser.add_argument('--yes', '-y', action='store_true',
                                   help='Do not ask before deleting')
    delete_all_parser.set_defaults(func=cmd_delete_all)

    count_parser = subparsers.add_parser('count', help='Count games per category.')
    count_parser.set_defaults(func=cmd_count)

    settings_parser = subparsers.add_parser('settings', help='Show or change settings.')
    settings_parser.add_argument('--confirm-delete', choices=['on', 'off'])
    settings_parser.add_argument('--display-images', choices=['on', 'off'])
    settings_parser.set_defaults(func=cmd_settings)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    try:
        confirm = _always_confirm if getattr(args, 'yes', False) else prompt_confirm
        app = PlayList(load_config(args.config), confirm=confirm)
        return args.func(app, args)
    except CancelledError:
        _print_outcome(ToggleOutcome.CANCELLED, 0)
        return 0
    except ValidationError as e:
        print(f"{Fore.RED}Invalid video game:")
        for field, message in e.errors.items():
            print(f"{Fore.RED}  {field}: {message}")
        return 1
    except (PlayListError, ValueError) as e:
        print(f"{Fore.RED}Error: {e}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted by user. Goodbye!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
