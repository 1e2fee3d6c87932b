"""
Standardized error handling and exit codes for the pagesync CLI.

Consistent error messaging with actionable guidance and standardized exit
codes across commands.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for pagesync CLI operations."""

    SUCCESS = 0
    """Deployment published, or nothing to deploy."""

    GENERAL_ERROR = 1
    """The deployment pipeline failed."""

    USER_ERROR = 2
    """Missing or invalid input (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "No repository given",
        ...     reason="pagesync needs to know where to publish",
        ...     solution="pagesync deploy site --repo owner/name",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        # git output may contain bracketed text such as "[rejected]"
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_missing_token_error() -> None:
    """Print error when no access token is available."""
    print_error(
        "No access token available",
        reason="Publishing needs a token with write access to the repository",
        solution="export GITHUB_TOKEN=...  # or pass --token",
    )


def print_missing_repo_error(value: str | None = None) -> None:
    """Print error when repository coordinates are missing or malformed."""
    problem = (
        f"Invalid repository '{value}'" if value else "No target repository given"
    )
    print_error(
        problem,
        reason=(
            "The repository must be given as owner/name, or the current checkout "
            "must have a GitHub origin remote"
        ),
        solution="pagesync deploy <path> --repo owner/name  # or set GITHUB_REPOSITORY",
    )


def print_missing_revision_error() -> None:
    """Print error when no revision can be determined for the commit message."""
    print_error(
        "Could not determine the source revision",
        reason="GITHUB_SHA is not set and the current directory is not a git repository",
        solution="pagesync deploy <path> --revision <sha>",
    )
