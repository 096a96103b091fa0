"""Provider for runs outside a CI system, e.g. from a developer machine."""

import logging

from rich.logging import RichHandler

from fusiondeployer.models import CIContext

from .base import BaseProvider


class LocalProvider(BaseProvider):
    name = "local"
    label = "local"
    flags_default_on = False

    def get_input(self, name: str) -> str:
        return self.environ.get(f"FUSION_DEPLOY_{name.upper().replace('-', '_')}", "").strip()

    def get_context(self) -> CIContext:
        return CIContext(
            ref_name=self.environ.get("FUSION_DEPLOY_REF_NAME", ""),
            sha=self.environ.get("FUSION_DEPLOY_SHA", ""),
        )

    def create_log_handler(self) -> logging.Handler:
        return RichHandler(rich_tracebacks=True, show_level=False, show_path=False)
