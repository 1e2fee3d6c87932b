"""
pagesync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from pagesync import __version__
from pagesync.cli import deploy
from pagesync.core.config.env import load_layered_env

# Create the main Typer app
app = typer.Typer(
    name="pagesync",
    help="Publish built static sites to a git branch",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for pagesync commands.

    Args:
        debug: If True, enable DEBUG level logging (git command lines included,
            with credentials redacted)
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    pagesync - publish a built site to a branch such as gh-pages.

    Quick Start:
        pagesync deploy docs-output --repo owner/name

    In GitHub Actions, GITHUB_TOKEN, GITHUB_REPOSITORY and GITHUB_SHA are
    picked up from the environment.
    """
    setup_logging(debug)
    # Precedence: OS env > .env.local > project .env > user .env
    load_layered_env()

    ctx.obj = {"debug": debug}


app.command(name="deploy")(deploy.deploy)


@app.command()
def version() -> None:
    """Show pagesync version and exit."""
    console.print(f"pagesync version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
