"""
Command-line interface for the hours tracker.

This module provides the CLI using argparse: importing files into the local
state, exporting it, printing month summaries and quick edits.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

from .backup import export_json
from .config import Config, DEFAULT_DATA_FILE
from .csv_codec import serialize_state
from .date_utils import MonthKeyError, parse_month_key
from .dispatcher import STATUS_EMPTY, STATUS_SUCCESS, import_path
from .editing import (
    add_activity,
    add_news,
    add_objective,
    change_month,
    set_activity_color,
    set_hours,
    set_objective_status,
    toggle_activity,
    update_objective_month,
)
from .logging_utils import get_logger, log_error, log_section, log_step, log_success, log_warning, setup_logging
from .models import DEFAULT_COLOR, OBJECTIVE_STATUSES
from .reports import summarize_month
from .store import StateStore, StoreError


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_DATA = 2


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='hours_tracker',
        description='Personal time tracking: import, export and summarize hours',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import a legacy monthly report workbook
  python -m hours_tracker import report.xlsx

  # Import a JSON backup or a sectioned text export
  python -m hours_tracker import backup.json
  python -m hours_tracker import export.csv

  # Export the state
  python -m hours_tracker export --format csv --output export.csv
  python -m hours_tracker export --format json > backup.json

  # Summary of a month
  python -m hours_tracker summary --month 2025-11

  # Quick edits
  python -m hours_tracker add-activity "Newsletter" --color "#10b981"
  python -m hours_tracker log-hours act_k3j9x2a 2025-11-03 2.5
  python -m hours_tracker update-objective obj_p2m8q1z 2025-11 --progress 0.25 --note "Draft done"
        """
    )

    parser.add_argument(
        '--data-file',
        type=str,
        default=DEFAULT_DATA_FILE,
        metavar='PATH',
        help='State file (default: %(default)s)'
    )
    parser.add_argument(
        '--year',
        type=int,
        default=2025,
        metavar='YEAR',
        help='Year of the legacy monthly report (default: %(default)s)'
    )
    parser.add_argument(
        '--user-name',
        type=str,
        default='User',
        metavar='NAME',
        help='Owner name written into a new state (default: %(default)s)'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored log output'
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose logging (debug level)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    import_parser = subparsers.add_parser('import', help='Import a file into the state')
    import_parser.add_argument('path', metavar='PATH', help='File to import (.xlsx, .json, .csv, .txt)')

    export_parser = subparsers.add_parser('export', help='Export the state')
    export_parser.add_argument(
        '--format',
        choices=['csv', 'json'],
        default='csv',
        help='Output format (default: %(default)s)'
    )
    export_parser.add_argument(
        '--output',
        '-o',
        type=str,
        metavar='PATH',
        help='Output file (default: stdout)'
    )

    summary_parser = subparsers.add_parser('summary', help='Print a month summary')
    summary_parser.add_argument(
        '--month',
        type=str,
        metavar='YYYY-MM',
        help='Month to summarize (default: current month of the state)'
    )

    log_parser = subparsers.add_parser('log-hours', help='Set hours of an activity on a day')
    log_parser.add_argument('activity_id', metavar='ACTIVITY_ID')
    log_parser.add_argument('day', metavar='YYYY-MM-DD')
    log_parser.add_argument('hours', type=float, metavar='HOURS')

    news_parser = subparsers.add_parser('add-news', help='Add a news entry')
    news_parser.add_argument('text', metavar='TEXT')
    news_parser.add_argument('--tags', type=str, default='', help='Comma-separated tags')
    news_parser.add_argument('--date', type=str, metavar='YYYY-MM-DD', help='Entry date (default: today)')

    reset_parser = subparsers.add_parser('reset', help='Reset the state to defaults')
    activity_parser = subparsers.add_parser('add-activity', help='Add an activity')
    activity_parser.add_argument('name', metavar='NAME')
    activity_parser.add_argument('--color', type=str, default=DEFAULT_COLOR, help='Hex color (default: %(default)s)')
    activity_parser.add_argument('--description', type=str, default='')

    toggle_parser = subparsers.add_parser('toggle-activity', help='Activate or deactivate an activity')
    toggle_parser.add_argument('activity_id', metavar='ACTIVITY_ID')

    color_parser = subparsers.add_parser('set-activity-color', help='Change the color of an activity')
    color_parser.add_argument('activity_id', metavar='ACTIVITY_ID')
    color_parser.add_argument('color', metavar='COLOR')

    objective_parser = subparsers.add_parser('add-objective', help='Add an objective')
    objective_parser.add_argument('description', metavar='DESCRIPTION')
    objective_parser.add_argument('--target', type=float, default=1.0, help='Target progress (default: %(default)s)')

    progress_parser = subparsers.add_parser('update-objective', help='Set monthly progress or note of an objective')
    progress_parser.add_argument('objective_id', metavar='OBJECTIVE_ID')
    progress_parser.add_argument('month', metavar='YYYY-MM')
    progress_parser.add_argument('--progress', type=float, help='Progress contributed this month')
    progress_parser.add_argument('--note', type=str, help='Note for this month')

    status_parser = subparsers.add_parser('set-objective-status', help='Set the status of an objective')
    status_parser.add_argument('objective_id', metavar='OBJECTIVE_ID')
    status_parser.add_argument('status', choices=OBJECTIVE_STATUSES)

    month_parser = subparsers.add_parser('change-month', help='Move the current month')
    month_parser.add_argument('delta', type=int, metavar='DELTA', help='Months to move (negative moves back)')

    reset_parser.add_argument('--yes', action='store_true', help='Confirm the reset')

    return parser


def cmd_import(args: argparse.Namespace, config: Config) -> int:
    """
    Execute the import command.

    Returns:
        0 on success, 2 if no data was recognised, 1 on failure
    """
    logger = get_logger()
    log_section(f"Importing {args.path}", logger)

    if not Path(args.path).exists():
        log_error(f"File not found: {args.path}", logger)
        return EXIT_FAILED

    result = import_path(args.path, config.legacy_layout())

    if result.status == STATUS_EMPTY:
        log_warning(f"No valid data found in {args.path}", logger)
        return EXIT_NO_DATA
    if result.status != STATUS_SUCCESS:
        log_error(f"Import failed: {result.message}", logger)
        return EXIT_FAILED

    log_step(f"Merging {', '.join(result.partial.present_fields())} into {config.data_path}", logger)
    store = StateStore(config.data_path, config.user_name)
    try:
        state = store.apply(result.partial)
    except StoreError as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    log_success(result.message, logger)
    logger.info(
        f"State now has {len(state.activities)} activit(y/ies), "
        f"{len(state.objectives)} objective(s), {len(state.news)} news item(s)"
    )
    return EXIT_OK


def cmd_export(args: argparse.Namespace, config: Config) -> int:
    """Execute the export command."""
    logger = get_logger()
    state = StateStore(config.data_path, config.user_name).load()
    content = export_json(state) if args.format == 'json' else serialize_state(state)

    if not args.output:
        sys.stdout.write(content)
        if not content.endswith('\n'):
            sys.stdout.write('\n')
        return EXIT_OK

    try:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding='utf-8')
    except OSError as e:
        log_error(f"Failed to write {args.output}: {e}", logger)
        return EXIT_FAILED

    log_success(f"Exported {args.format.upper()} to {args.output}", logger)
    return EXIT_OK


def cmd_summary(args: argparse.Namespace, config: Config) -> int:
    """Execute the summary command."""
    logger = get_logger()
    state = StateStore(config.data_path, config.user_name).load()
    month = args.month or state.settings.current_month
    try:
        parse_month_key(month)
    except MonthKeyError as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    sys.stdout.write(summarize_month(state, month).format_summary())
    return EXIT_OK


def cmd_log_hours(args: argparse.Namespace, config: Config) -> int:
    """Execute the log-hours command."""
    logger = get_logger()
    store = StateStore(config.data_path, config.user_name)
    state = store.load()

    if state.find_activity(args.activity_id) is None:
        log_error(f"Unknown activity: {args.activity_id}", logger)
        return EXIT_FAILED

    try:
        store.save(set_hours(state, args.activity_id, args.day, args.hours).merge_into(state))
    except (ValueError, StoreError) as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    log_success(f"{args.activity_id} on {args.day}: {args.hours:g} hours", logger)
    return EXIT_OK


def cmd_add_news(args: argparse.Namespace, config: Config) -> int:
    """Execute the add-news command."""
    logger = get_logger()
    store = StateStore(config.data_path, config.user_name)
    state = store.load()

    if args.date:
        try:
            date.fromisoformat(args.date)
        except ValueError:
            log_error(f"Invalid date: {args.date} (expected YYYY-MM-DD)", logger)
            return EXIT_FAILED

    try:
        store.save(add_news(state, args.text, args.tags, args.date).merge_into(state))
    except (ValueError, StoreError) as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    log_success("News entry added", logger)
    return EXIT_OK


def cmd_reset(args: argparse.Namespace, config: Config) -> int:
    """Execute the reset command."""
    logger = get_logger()
    if not args.yes:
        log_error("Reset deletes all data; re-run with --yes to confirm", logger)
        return EXIT_FAILED

    try:
        StateStore(config.data_path, config.user_name).reset()
    except StoreError as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    log_success("Data reset successfully", logger)
    return EXIT_OK


def _edit_state(config: Config, edit, success_message: str) -> int:
    """
    Load the state, apply one editing operation and save the result.

    Args:
        config: Application configuration
        edit: Callable taking the current AppState and returning a PartialState
        success_message: Logged after the state was saved

    Returns:
        Exit code
    """
    logger = get_logger()
    store = StateStore(config.data_path, config.user_name)
    state = store.load()

    try:
        store.save(edit(state).merge_into(state))
    except KeyError as e:
        log_error(e.args[0], logger)
        return EXIT_FAILED
    except (ValueError, StoreError) as e:
        log_error(str(e), logger)
        return EXIT_FAILED

    log_success(success_message, logger)
    return EXIT_OK


def cmd_add_activity(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: add_activity(state, args.name, args.color, args.description),
        f"Activity '{args.name.strip()}' added",
    )


def cmd_toggle_activity(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: toggle_activity(state, args.activity_id),
        f"Activity {args.activity_id} toggled",
    )


def cmd_set_activity_color(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: set_activity_color(state, args.activity_id, args.color),
        f"Activity {args.activity_id} color set to {args.color}",
    )


def cmd_add_objective(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: add_objective(state, args.description, args.target),
        "Objective added",
    )


def cmd_update_objective(args: argparse.Namespace, config: Config) -> int:
    """Execute the update-objective command."""
    if args.progress is None and args.note is None:
        log_error("Nothing to update; give --progress and/or --note", get_logger())
        return EXIT_FAILED
    return _edit_state(
        config,
        lambda state: update_objective_month(state, args.objective_id, args.month, args.progress, args.note),
        f"Objective {args.objective_id} updated for {args.month}",
    )


def cmd_set_objective_status(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: set_objective_status(state, args.objective_id, args.status),
        f"Objective {args.objective_id} is now {args.status}",
    )


def cmd_change_month(args: argparse.Namespace, config: Config) -> int:
    return _edit_state(
        config,
        lambda state: change_month(state, args.delta),
        f"Moved current month by {args.delta}",
    )


COMMANDS = {
    'import': cmd_import,
    'export': cmd_export,
    'summary': cmd_summary,
    'log-hours': cmd_log_hours,
    'add-news': cmd_add_news,
    'reset': cmd_reset,
    'add-activity': cmd_add_activity,
    'toggle-activity': cmd_toggle_activity,
    'set-activity-color': cmd_set_activity_color,
    'add-objective': cmd_add_objective,
    'update-objective': cmd_update_objective,
    'set-objective-status': cmd_set_objective_status,
    'change-month': cmd_change_month,
}


def main(argv=None):
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = Config(
        data_file=args.data_file,
        user_name=args.user_name,
        year=args.year,
        verbose=args.verbose,
        use_colors=not args.no_color,
    )
    setup_logging(verbose=config.verbose, use_colors=config.use_colors)
    logger = get_logger()

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    try:
        config.validate()
    except ValueError as e:
        log_error(f"Configuration error: {e}", logger)
        return EXIT_FAILED

    handler = COMMANDS.get(args.command)
    if handler is None:
        log_error(f"Unknown command: {args.command}", logger)
        return EXIT_FAILED

    try:
        return handler(args, config)
    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())
