"""GitHub Actions provider."""

import logging
import sys

from fusiondeployer.models import CIContext

from .base import BaseProvider


def escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsHandler(logging.StreamHandler):
    """Writes records as workflow commands so the runner annotates them."""

    def __init__(self, stream=None):
        super().__init__(stream or sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"::debug::{escape_data(message)}"
        return message


class GitHubProvider(BaseProvider):
    name = "github"
    label = "GitHub Actions"
    flags_default_on = False

    def get_input(self, name: str) -> str:
        return self.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()

    def get_context(self) -> CIContext:
        return CIContext(
            ref_name=self.environ.get("GITHUB_REF_NAME", ""),
            sha=self.environ.get("GITHUB_SHA", ""),
        )

    def create_log_handler(self) -> logging.Handler:
        return GitHubActionsHandler()

    def debug_enabled(self) -> bool:
        return self.environ.get("RUNNER_DEBUG") == "1"
