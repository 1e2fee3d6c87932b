"""
pagesync - Static site publisher

Publishes a locally built artifact tree to a dedicated branch (gh-pages by
default) of a remote git repository.
"""

__version__ = "0.3.0-dev"

# Re-export core models for convenience
from pagesync.core.config.models import PagesyncConfig
from pagesync.core.deploy.models import DeploymentRequest, DeployOutcome, DeployResult

__all__ = [
    "DeployOutcome",
    "DeployResult",
    "DeploymentRequest",
    "PagesyncConfig",
    "__version__",
]
