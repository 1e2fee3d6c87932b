"""
pagesync CLI - Deploy command.

Publish a built artifact tree to the publishing branch of a repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from pagesync.cli.errors import (
    ExitCode,
    print_error,
    print_missing_repo_error,
    print_missing_revision_error,
    print_missing_token_error,
)
from pagesync.core.config import load_config
from pagesync.core.deploy import DeploymentRequest, DeployOutcome, DeployService
from pagesync.core.github.models import RepoInfo
from pagesync.utils.git import get_remote_url, resolve_revision

console = Console()


def deploy(
    artifact_path: Annotated[
        Path,
        typer.Argument(
            help="Directory produced by the site builder",
        ),
    ],
    repo: Annotated[
        str | None,
        typer.Option(
            "--repo",
            "-r",
            envvar="GITHUB_REPOSITORY",
            help="Target repository as owner/name (defaults to the origin remote)",
        ),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            envvar="GITHUB_TOKEN",
            help="Token with write access to the repository",
            show_default=False,
        ),
    ] = None,
    revision: Annotated[
        str | None,
        typer.Option(
            "--revision",
            help="Source revision for the commit message (defaults to GITHUB_SHA or HEAD)",
        ),
    ] = None,
    branch: Annotated[
        str | None,
        typer.Option(
            "--branch",
            "-b",
            help="Publishing branch (defaults to config, usually gh-pages)",
        ),
    ] = None,
    include_hidden: Annotated[
        bool,
        typer.Option(
            "--include-hidden",
            help="Also publish dot-prefixed files such as .nojekyll",
        ),
    ] = False,
    skip_token_check: Annotated[
        bool,
        typer.Option(
            "--skip-token-check",
            help="Do not verify repository access through the API first",
        ),
    ] = False,
) -> None:
    """
    Publish ARTIFACT_PATH to the publishing branch.

    Clones the repository into a temporary workspace, switches to the
    publishing branch (creating it if needed), replaces its content with
    the artifact tree, then commits and pushes. If the remote branch has
    diverged, the push is retried once with --force.

    Examples:
        pagesync deploy docs-output
        pagesync deploy site --repo user/project --branch pages
        GITHUB_TOKEN=... pagesync deploy build --revision $(git rev-parse HEAD)
    """
    try:
        deploy_config = load_config().deploy
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        print_error(
            "Invalid pagesync configuration",
            reason=problems,
            solution=(
                "Check .pagesync.json, ~/.config/pagesync/config.json and PAGESYNC_* variables"
            ),
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    updates: dict[str, object] = {}
    if include_hidden:
        updates["include_hidden"] = True
    if skip_token_check:
        updates["validate_token"] = False
    if updates:
        deploy_config = deploy_config.model_copy(update=updates)

    if not token:
        print_missing_token_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    if repo:
        repo_info = RepoInfo.from_slug(repo)
    else:
        # Outside CI, fall back to the origin of the checkout we run in
        repo_info = RepoInfo.from_remote_url(get_remote_url(), host=deploy_config.host)
    if repo_info is None:
        print_missing_repo_error(repo)
        raise typer.Exit(ExitCode.USER_ERROR)

    resolved_revision = resolve_revision(revision)
    if not resolved_revision:
        print_missing_revision_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        request = DeploymentRequest(
            artifact_path=artifact_path,
            branch=branch or deploy_config.branch,
            repo=repo_info,
            token=SecretStr(token),
            revision=resolved_revision,
        )
    except PydanticValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        print_error("Invalid deployment request", reason=problems)
        raise typer.Exit(ExitCode.USER_ERROR)

    console.print(
        f"[blue]Deploying[/blue] {artifact_path} → {repo_info.full_name}:{request.branch}"
    )

    result = DeployService(deploy_config).deploy(request)

    if result.outcome is DeployOutcome.PUBLISHED:
        forced = " [yellow](force-pushed)[/yellow]" if result.forced_push else ""
        console.print(
            f"[green]✓[/green] Published {result.files_synced} files "
            f"to {result.branch} ({(result.commit_sha or '')[:8]}){forced}"
        )
        return

    if result.outcome is DeployOutcome.NO_CHANGES:
        console.print("[blue]No changes to deploy[/blue]")
        return

    print_error(
        f"Deployment failed during {result.stage}",
        reason=result.reason,
    )
    raise typer.Exit(ExitCode.GENERAL_ERROR)
