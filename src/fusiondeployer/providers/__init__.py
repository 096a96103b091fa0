"""CI provider detection."""

import os
from typing import Mapping, Optional

from .azure import AzureProvider
from .base import BaseProvider
from .github import GitHubProvider
from .gitlab import GitLabProvider
from .local import LocalProvider

PROVIDERS = {
    "github": GitHubProvider,
    "azure": AzureProvider,
    "gitlab": GitLabProvider,
    "local": LocalProvider,
}

UNSUPPORTED_ENVIRONMENT_WARNING = (
    "Unsupported CI environment. Expected GitHub Actions, Azure Pipelines, or GitLab CI. "
    "Using GitHub Actions as a fallback."
)


def detect_provider_name(environ: Mapping[str, str]) -> Optional[str]:
    if environ.get("GITHUB_ACTIONS"):
        return "github"
    if environ.get("TF_BUILD"):
        return "azure"
    if environ.get("GITLAB_CI"):
        return "gitlab"
    return None


def create_provider(name: str = "auto", environ: Optional[Mapping[str, str]] = None) -> BaseProvider:
    """Returns the provider for ``name``, sniffing the environment for ``auto``.

    An undetected environment falls back to GitHub Actions with
    ``detected`` set to False so the caller can warn once logging is ready.
    """
    environ = os.environ if environ is None else environ

    if name != "auto":
        if name not in PROVIDERS:
            raise ValueError(f"Unknown provider: {name}")
        return PROVIDERS[name](environ=environ)

    detected = detect_provider_name(environ)
    provider = PROVIDERS[detected or "github"](environ=environ)
    provider.detected = detected is not None
    return provider


__all__ = [
    "AzureProvider",
    "BaseProvider",
    "GitHubProvider",
    "GitLabProvider",
    "LocalProvider",
    "PROVIDERS",
    "UNSUPPORTED_ENVIRONMENT_WARNING",
    "create_provider",
    "detect_provider_name",
]
