"""Entry point for `python -m calendarhub` command."""

import asyncio
import sys

from calendarhub.cli import main_entry


def main() -> None:
    """Entry point for python -m calendarhub and the console script."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
