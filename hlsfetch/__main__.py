"""
Main entry point for the hlsfetch application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from hlsfetch.cli.app import app
from hlsfetch.cli.formatters import format_error_with_suggestions
from hlsfetch.exceptions import DownloadCancelledError, HlsFetchError


def main() -> None:
    """Main entry point function."""
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    log = logging.getLogger("hlsfetch")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError, DownloadCancelledError):
        console.print(
            "\n[yellow]⚠️  Download cancelled. A partial file may remain on disk.[/yellow]"
        )
        sys.exit(130)
    except HlsFetchError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
