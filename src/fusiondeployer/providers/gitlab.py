"""GitLab CI provider."""

import logging
import sys

from fusiondeployer.models import CIContext

from .base import BaseProvider

_PREFIXES = {
    logging.DEBUG: "[DEBUG] ",
    logging.WARNING: "[WARNING] ",
    logging.ERROR: "[ERROR] ",
    logging.CRITICAL: "[ERROR] ",
}


class GitLabHandler(logging.Handler):
    """Plain prefixed lines; warnings and errors go to stderr."""

    def __init__(self, stdout=None, stderr=None):
        super().__init__()
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def emit(self, record: logging.LogRecord):
        try:
            line = _PREFIXES.get(record.levelno, "") + self.format(record)
            stream = self.stderr if record.levelno >= logging.WARNING else self.stdout
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)


class GitLabProvider(BaseProvider):
    """Reads inputs from ``INPUT_*`` variables set in ``.gitlab-ci.yml``.

    ``set_failed`` does not exit the process; the exit code is decided by the
    CLI once the orchestrator returns.
    """

    name = "gitlab"
    label = "GitLab CI"
    flags_default_on = True

    def get_input(self, name: str) -> str:
        return self.environ.get(f"INPUT_{name.upper().replace('-', '_')}", "").strip()

    def get_context(self) -> CIContext:
        return CIContext(
            ref_name=self.environ.get("CI_COMMIT_REF_NAME", ""),
            sha=self.environ.get("CI_COMMIT_SHA", ""),
        )

    def create_log_handler(self) -> logging.Handler:
        return GitLabHandler()

    def debug_enabled(self) -> bool:
        return self.environ.get("CI_DEBUG_TRACE", "").lower() == "true"
