"""Shared domain models for fusiondeployer."""

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_ARTIFACT,
    DEFAULT_BUNDLE_PREFIX,
    DEFAULT_MINIMUM_RUNNING_VERSIONS,
    DEFAULT_PAGEBUILDER_VERSION,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TERMINATE_RETRY_COUNT,
    DEFAULT_TERMINATE_RETRY_DELAY,
)
from .errors import DeployerError


def positive_int_or_default(value: Any, default: int) -> int:
    """Parse ``value`` as a positive integer, falling back to ``default``."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CIContext:
    """Source revision the CI job is building."""

    ref_name: str = ""
    sha: str = ""


def build_bundle_name(
    prefix: Optional[str],
    context: CIContext,
    timestamp_ms: Optional[int] = None,
) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return "-".join(
        [
            prefix or DEFAULT_BUNDLE_PREFIX,
            str(timestamp_ms),
            context.ref_name or "",
            context.sha or "",
        ]
    )


@dataclass
class RunContext:
    """Configuration and run state for a single deployment.

    Built once by a CI provider. Every field is read-only for the rest of the
    run except ``newest_version``, which the orchestrator records once after
    the new version shows up.
    """

    org_id: str
    api_key: str = field(repr=False)
    api_hostname: str
    bundle_name: str
    client: Any = field(repr=False, compare=False)
    core: Any = field(repr=False, compare=False)
    context: CIContext = field(default_factory=CIContext)
    bundle_prefix: Optional[str] = None
    pagebuilder_version: str = DEFAULT_PAGEBUILDER_VERSION
    artifact: str = DEFAULT_ARTIFACT
    retry_count: int = DEFAULT_RETRY_COUNT
    retry_delay: int = DEFAULT_RETRY_DELAY
    minimum_running_versions: Any = DEFAULT_MINIMUM_RUNNING_VERSIONS
    terminate_retry_count: Any = DEFAULT_TERMINATE_RETRY_COUNT
    terminate_retry_delay: Any = DEFAULT_TERMINATE_RETRY_DELAY
    should_deploy: bool = True
    should_promote: bool = False
    newest_version: Optional[str] = field(default=None, init=False)

    def record_newest_version(self, version: str):
        if self.newest_version is not None:
            raise DeployerError(
                f"Newest version is already recorded as {self.newest_version}; "
                f"refusing to overwrite it with {version}."
            )
        self.newest_version = version

    def worst_case_wait_seconds(self) -> float:
        poll_budget = (self.retry_count + 1) * self.retry_delay
        terminate_budget = positive_int_or_default(
            self.terminate_retry_count, DEFAULT_TERMINATE_RETRY_COUNT
        ) * positive_int_or_default(self.terminate_retry_delay, DEFAULT_TERMINATE_RETRY_DELAY)
        return poll_budget + terminate_budget

    def describe(self) -> Dict[str, Any]:
        """Loggable summary without credentials."""
        return {
            "org_id": self.org_id,
            "api_hostname": self.api_hostname,
            "bundle_name": self.bundle_name,
            "pagebuilder_version": self.pagebuilder_version,
            "artifact": self.artifact,
            "retry_count": self.retry_count,
            "retry_delay": self.retry_delay,
            "minimum_running_versions": self.minimum_running_versions,
            "terminate_retry_count": self.terminate_retry_count,
            "terminate_retry_delay": self.terminate_retry_delay,
            "deploy": self.should_deploy,
            "promote": self.should_promote,
            "ref_name": self.context.ref_name,
            "sha": self.context.sha,
        }


@dataclass(frozen=True)
class TerminationAttempt:
    attempt: int
    success: bool
    timestamp: str
    status: Optional[int] = None
    error: Optional[str] = None


@dataclass
class TerminationResult:
    """Outcome of retiring one version, kept for logging and the run report."""

    version: Optional[str]
    success: bool = False
    attempts: List[TerminationAttempt] = field(default_factory=list)
    final_error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
