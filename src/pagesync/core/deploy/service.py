"""
Deployment pipeline.

DeployService runs one deployment of an artifact tree to the publishing
branch:

    validate -> token check -> workspace -> clone -> reconcile
             -> sync -> commit -> publish -> workspace removal (always)

The first DeployError stops the run and becomes a ``failed`` DeployResult.
Only the push has a retry (see Publisher); branch probe fallbacks are part
of reconciliation, not retries.
"""

from __future__ import annotations

import logging

from pagesync.core.config.models import DeployConfig
from pagesync.core.deploy.auth import TokenValidator
from pagesync.core.deploy.cloner import RepositoryCloner
from pagesync.core.deploy.committer import ChangeCommitter, render_commit_message
from pagesync.core.deploy.content import ContentSynchronizer
from pagesync.core.deploy.errors import DeployError, ValidationError
from pagesync.core.deploy.git import GitRunner
from pagesync.core.deploy.models import DeploymentRequest, DeployOutcome, DeployResult
from pagesync.core.deploy.publisher import Publisher
from pagesync.core.deploy.reconciler import BranchReconciler
from pagesync.core.deploy.workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class DeployService:
    """
    Publishes artifact trees to a branch of a remote repository.

    Example:
        >>> service = DeployService(load_config().deploy)
        >>> result = service.deploy(request)
        >>> result.outcome
        <DeployOutcome.PUBLISHED: 'published'>
    """

    def __init__(
        self,
        config: DeployConfig | None = None,
        *,
        validator: TokenValidator | None = None,
        workspaces: WorkspaceManager | None = None,
    ) -> None:
        self.config = config or DeployConfig()
        self.validator = validator or TokenValidator(
            api_url=self.config.api_url,
            timeout=self.config.request_timeout,
        )
        self.workspaces = workspaces or WorkspaceManager(self.config.workspace_dir)

    def deploy(self, request: DeploymentRequest) -> DeployResult:
        """
        Run the pipeline for one request.

        Never raises DeployError; failures are reported in the result.
        """
        logger.info("Deploying %s to %s:%s", request.artifact_path, request.repo.full_name,
                    request.branch)
        try:
            return self._run(request)
        except DeployError as e:
            logger.error("Failed to deploy (%s): %s", e.stage, e.describe())
            return DeployResult(
                outcome=DeployOutcome.FAILED,
                branch=request.branch,
                reason=e.describe(),
                stage=e.stage,
            )

    def preflight(self, request: DeploymentRequest) -> None:
        """Reject requests that cannot succeed before touching anything."""
        artifact_path = request.artifact_path
        if not artifact_path.exists():
            raise ValidationError(f"Artifact tree does not exist: {artifact_path}")
        if not artifact_path.is_dir():
            raise ValidationError(f"Artifact tree is not a directory: {artifact_path}")

    def _run(self, request: DeploymentRequest) -> DeployResult:
        self.preflight(request)
        if self.config.validate_token:
            self.validator.validate(request.repo, request.token)

        token = request.token.get_secret_value()
        artifact_path = request.artifact_path.resolve()

        with self.workspaces.acquire() as workspace:
            runner = GitRunner(workspace.root, secrets=[token])

            cloner = RepositoryCloner(
                runner,
                remote_name=self.config.remote_name,
                depth=self.config.clone_depth,
            )
            repo_dir = cloner.clone(
                self.config.clone_url_for(request.repo),
                request.token,
                workspace.repo_dir,
            )
            repo = runner.at(repo_dir)

            reconciled = BranchReconciler(
                repo,
                request.branch,
                remote_name=self.config.remote_name,
                identity=self.config.identity,
            ).reconcile()

            report = ContentSynchronizer(self.config.include_hidden).sync(artifact_path, repo_dir)

            message = render_commit_message(self.config.commit_message, request.revision)
            commit = ChangeCommitter(repo, self.config.identity).commit_changes(message)
            if commit is None:
                return DeployResult(
                    outcome=DeployOutcome.NO_CHANGES,
                    branch=request.branch,
                    artifact_path=artifact_path,
                    branch_state=reconciled.branch_state,
                    files_synced=report.files_copied,
                )

            published = Publisher(
                repo,
                request.branch,
                remote_name=self.config.remote_name,
            ).publish()

        logger.info("Successfully deployed %s to %s", commit.sha[:8], request.branch)
        return DeployResult(
            outcome=DeployOutcome.PUBLISHED,
            branch=request.branch,
            artifact_path=artifact_path,
            commit_sha=commit.sha,
            branch_state=reconciled.branch_state,
            forced_push=published.forced,
            files_synced=report.files_copied,
        )
