"""CLI module for CalendarHub.

Provides argument parsing, settings and logging setup, and dispatch to the
command handlers.
"""

from typing import Optional

from ..config.settings import CalendarHubSettings
from ..utils.logging import apply_command_line_overrides, setup_logging
from .commands import run_cached, run_refresh, run_status
from .parser import create_parser

COMMANDS = {
    "refresh": run_refresh,
    "cached": run_cached,
    "status": run_status,
}


async def main_entry(argv: Optional[list[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings_kwargs = {}
    if args.config_path is not None:
        settings_kwargs["config_path"] = args.config_path
    settings = CalendarHubSettings(**settings_kwargs)

    settings = apply_command_line_overrides(settings, args)
    logger = setup_logging(settings)
    if settings.loaded_config_file:
        logger.debug(f"Loaded configuration from {settings.loaded_config_file}")

    handler = COMMANDS[args.command]
    return await handler(settings, args)


__all__ = [
    "create_parser",
    "main_entry",
    "run_cached",
    "run_refresh",
    "run_status",
]
