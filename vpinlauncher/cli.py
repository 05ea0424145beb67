"""Command-line interface for vpinlauncher."""

import sys
import logging
import argparse
import asyncio
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from vpinlauncher import __version__
from vpinlauncher.config.loader import load_config, ConfigError
from vpinlauncher.config.validator import validate_config, ValidationError
from vpinlauncher.session.controller import SessionController

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog='vpinlauncher',
        description='Visual Pinball table launcher with snapshots and PinMAME high scores',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Browse tables in the terminal UI
  vpinlauncher

  # List tables and their high scores
  vpinlauncher --list

  # Show the high score for a title
  vpinlauncher --score "Black Knight (Williams 1980)"

  # Play a table without the UI
  vpinlauncher --play "Fathom (Bally 1981).vpx"

  # Use custom config file
  vpinlauncher --config /path/to/config.yaml
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=Path,
        metavar='PATH',
        help='Path to config.yaml (default: ./config.yaml)'
    )

    parser.add_argument(
        '--ui',
        choices=['textual', 'headless'],
        default='textual',
        help='UI mode: textual (interactive TUI, default) or headless (list tables and exit)'
    )

    action = parser.add_mutually_exclusive_group()

    action.add_argument(
        '--list',
        action='store_true',
        help='List tables with their high scores and exit'
    )

    action.add_argument(
        '--score',
        metavar='TITLE',
        help='Print the high score for a table title and exit'
    )

    action.add_argument(
        '--play',
        metavar='TABLE',
        help='Play a table (file name or display title) without the UI'
    )

    return parser


def _setup_logging(config: dict, event_bus=None) -> None:
    """
    Setup logging configuration from config.

    Args:
        config: Configuration dictionary
        event_bus: Optional EventBus; when given, log records go to the
            Textual UI instead of the console
    """
    logging_config = config.get('logging', {})

    # Get log level
    level_str = str(logging_config.get('level', 'INFO')).upper()
    level = getattr(logging, level_str, logging.INFO)

    handlers = []

    # Console output would draw over the Textual UI
    if logging_config.get('console', True) and event_bus is None:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        handlers.append(console_handler)

    if event_bus is not None:
        from vpinlauncher.ui.event_log_handler import EventLogHandler
        event_handler = EventLogHandler(event_bus, level=level)
        event_handler.setFormatter(logging.Formatter('%(message)s'))
        handlers.append(event_handler)

    # File handler (if configured)
    log_file = logging_config.get('file')
    if log_file:
        try:
            log_path = Path(log_file).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(level)
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not create log file '{log_file}': {e}", file=sys.stderr)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    # Suppress PIL/Pillow debug logging (verbose chunk parsing messages)
    logging.getLogger('PIL').setLevel(logging.INFO)


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for vpinlauncher CLI.

    Args:
        argv: Command-line arguments (default: sys.argv)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Load and validate configuration
    try:
        config = load_config(args.config)
        validate_config(config)
    except (ConfigError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    _setup_logging(config)

    headless = (
        args.list or args.score is not None or args.play is not None
        or args.ui == 'headless' or not sys.stdout.isatty()
    )

    try:
        if headless:
            return run_headless(config, args)
        return run_textual(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


def run_textual(config: dict) -> int:
    """Run the interactive Textual UI until the user quits."""
    from vpinlauncher.ui.event_bus import EventBus
    from vpinlauncher.ui.textual_ui import LauncherUI

    event_bus = EventBus()
    _setup_logging(config, event_bus=event_bus)

    controller = SessionController(config, event_bus=event_bus)
    LauncherUI(controller, event_bus).run()

    _setup_logging(config)
    return 0


def run_headless(config: dict, args: argparse.Namespace) -> int:
    """
    Run a single headless action.

    Args:
        config: Loaded configuration
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    controller = SessionController(config)
    console = Console()

    if args.score is not None:
        result = controller.retriever.fetch(args.score)
        console.print(result.display_text())
        return 0

    controller.rescan()
    if controller.scan_error is not None:
        print(f"Error: {controller.scan_error}", file=sys.stderr)
        return 1

    if args.play is not None:
        index = controller.find_table(args.play)
        if index is None:
            print(f"Error: No table matching '{args.play}'", file=sys.stderr)
            return 1

        controller.select(index)
        outcome = asyncio.run(controller.play())
        if outcome.is_failure:
            print(f"Error: {outcome.reason}", file=sys.stderr)
            return 1
        console.print(f"{controller.current_table.display_title}: {outcome.describe()}")
        return 0

    table = Table(title=f"Tables in {controller.tables_dir}")
    table.add_column("Title")
    table.add_column("File", style="dim")
    table.add_column("High Score", justify="right")
    for descriptor in controller.tables:
        score = controller.retriever.fetch(descriptor.display_title)
        table.add_row(
            descriptor.display_title,
            descriptor.raw_filename,
            score.display_text().removeprefix("Hi Score: "),
        )
    console.print(table)
    return 0


if __name__ == '__main__':
    sys.exit(main())
