"""Azure Pipelines provider."""

import logging
import re
import sys

import click

from fusiondeployer.models import CIContext

from .base import BaseProvider

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def escape_data(message: str) -> str:
    return message.replace("%", "%AZP25").replace("\r", "%0D").replace("\n", "%0A")


class AzurePipelinesHandler(logging.StreamHandler):
    """Writes records as ``##vso`` logging commands."""

    def __init__(self, stream=None):
        super().__init__(stream or sys.stdout)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"##vso[task.logissue type=error]{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"##vso[task.logissue type=warning]{escape_data(message)}"
        if record.levelno <= logging.DEBUG:
            return f"##[debug]{escape_data(message)}"
        return message


class AzureProvider(BaseProvider):
    name = "azure"
    label = "Azure Pipelines"
    flags_default_on = True

    def input_name(self, key: str) -> str:
        head, *rest = key.split("_")
        return head + "".join(part.capitalize() for part in rest)

    def get_input(self, name: str) -> str:
        value = self.environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "")
        if not value:
            snake = _CAMEL_BOUNDARY.sub(r"\1_\2", name).replace(".", "_").replace(" ", "_")
            value = self.environ.get(f"INPUT_{snake.upper()}", "")
        return value.strip()

    def get_context(self) -> CIContext:
        branch = self.environ.get("BUILD_SOURCEBRANCH", "")
        for prefix in ("refs/heads/", "refs/tags/"):
            if branch.startswith(prefix):
                branch = branch[len(prefix):]
                break
        return CIContext(ref_name=branch, sha=self.environ.get("BUILD_SOURCEVERSION", ""))

    def create_log_handler(self) -> logging.Handler:
        return AzurePipelinesHandler()

    def debug_enabled(self) -> bool:
        return self.environ.get("SYSTEM_DEBUG", "").lower() == "true"

    def set_failed(self, message: str):
        super().set_failed(message)
        click.echo(f"##vso[task.complete result=Failed;]{escape_data(message)}")
