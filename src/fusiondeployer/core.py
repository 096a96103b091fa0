import json
import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import DeployerError
from .errors_catalog import actionable_error
from .models import RunContext, TerminationResult
from .services.report import ReportService
from .services.termination import TerminationRetrier
from .services.validation import ValidationService
from .services.version_poller import VersionPoller

console = Console()
logger = logging.getLogger("fusiondeployer")


class DeploymentOrchestrator:
    """Runs upload, deploy, terminate-oldest, poll and promote for one bundle.

    The version list is fetched once before anything changes. Its first and
    last entries are the oldest and latest versions for the whole run; lists
    fetched later while polling are only compared against them.
    """

    def __init__(
        self,
        run_context: RunContext,
        report: Optional[ReportService] = None,
        validation_service: Optional[ValidationService] = None,
        poller: Optional[VersionPoller] = None,
        terminator: Optional[TerminationRetrier] = None,
    ):
        self.run_context = run_context
        self.core = run_context.core
        self.client = run_context.client
        self.report = report or ReportService(report_file=None, logger=logger)
        self.validation_service = validation_service or ValidationService()
        self.poller = poller or VersionPoller(self.client, logger=self.core)
        self.terminator = terminator or TerminationRetrier(self.client, logger=self.core)

        self.current_versions: List[str] = []
        self.oldest_version: Optional[str] = None
        self.latest_version: Optional[str] = None
        self.termination_result: Optional[TerminationResult] = None
        self.failure_message: Optional[str] = None

    def _run_step(self, name: str, callback, *args, **kwargs):
        self.report.step_started(name)
        try:
            result = callback(*args, **kwargs)
        except Exception as exc:
            self.report.step_finished(name, "failed", error=str(exc))
            raise
        self.report.step_finished(name, "success")
        return result

    def _fail(self, message: str):
        self.failure_message = message
        self.core.set_failed(message)

    def validate(self):
        self.validation_service.validate(self.run_context)

    def fetch_current_versions(self) -> List[str]:
        versions = self.client.list_versions()
        self.core.debug("Current versions: %s", json.dumps(versions, indent=2))
        if not isinstance(versions, list) or not versions:
            raise DeployerError(actionable_error("no_current_versions"))
        return versions

    def upload(self):
        self.core.info(
            "Uploading %s as bundle %s...", self.run_context.artifact, self.run_context.bundle_name
        )
        self.client.upload_artifact(self.run_context.bundle_name, self.run_context.artifact)
        self.core.info("Upload complete.")

    def deploy(self):
        self.core.info(
            "Deploying bundle %s with page builder version %s...",
            self.run_context.bundle_name,
            self.run_context.pagebuilder_version,
        )
        self.client.deploy(self.run_context.bundle_name, self.run_context.pagebuilder_version)

    def terminate_oldest(self) -> TerminationResult:
        self.report.step_started("terminate_oldest", details={"version": self.oldest_version})
        result = self.terminator.terminate_oldest(self.run_context, self.oldest_version)
        self.core.debug("Termination result: %s", json.dumps(result.as_dict(), indent=2))
        self.report.set_termination(result)
        self.report.step_finished(
            "terminate_oldest",
            "success" if result.success else "failed",
            error=result.final_error,
        )
        self.termination_result = result
        return result

    def poll_new_version(self) -> Optional[str]:
        newest_version = self.poller.poll_for_new_version(self.run_context, self.latest_version)
        if not newest_version:
            raise DeployerError(
                actionable_error(
                    "poll_timeout",
                    retry_count=self.run_context.retry_count,
                    retry_delay=self.run_context.retry_delay,
                )
            )

        self.run_context.record_newest_version(newest_version)
        self.report.set_versions(newest=newest_version)
        return newest_version

    def promote(self):
        self.core.info("Promoting version %s...", self.run_context.newest_version)
        self.client.promote(self.run_context.newest_version)
        self.core.info("Version %s promoted.", self.run_context.newest_version)

    def _deploy_branch(self):
        self._run_step("deploy", self.deploy)

        running = len(self.current_versions)
        floor = self.run_context.minimum_running_versions
        if running > floor:
            self.terminate_oldest()
        else:
            reason = f"{running} running versions, minimum is {floor}"
            self.core.info("Skipping termination of the oldest version: %s.", reason)
            self.report.step_skipped("terminate_oldest", reason)

        self._run_step("poll_new_version", self.poll_new_version)

    def run(self) -> int:
        try:
            self.core.info("Starting deployment of bundle %s", self.run_context.bundle_name)
            self.core.debug("Run context: %s", json.dumps(self.run_context.describe(), indent=2))
            self.core.info(
                "Retry loops may wait up to %s seconds in total.",
                self.run_context.worst_case_wait_seconds(),
            )
            self.report.start_run(metadata=self.run_context.describe())

            self._run_step("validate", self.validate)
            self.current_versions = self._run_step(
                "fetch_current_versions", self.fetch_current_versions
            )
            self.oldest_version = self.current_versions[0]
            self.latest_version = self.current_versions[-1]
            self.report.set_versions(oldest=self.oldest_version, latest=self.latest_version)

            self._run_step("upload", self.upload)

            if self.run_context.should_deploy:
                self._deploy_branch()
            else:
                for step_name in ("deploy", "terminate_oldest", "poll_new_version"):
                    self.report.step_skipped(step_name, "deploy disabled")

            if self.run_context.should_promote:
                self._run_step("promote", self.promote)
            else:
                self.report.step_skipped("promote", "promote disabled")

        except KeyboardInterrupt:
            self._fail("Operation cancelled by user.")
        except DeployerError as exc:
            self._fail(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error")
            self._fail(f"Unexpected error: {exc}")
        finally:
            if self.failure_message:
                self.report.finalize("failed", error=self.failure_message)
            else:
                self.report.finalize("success")
            self.print_summary()
            self.core.debug("Finished.")

        return 1 if self.failure_message else 0

    def print_summary(self):
        table = Table(title=f"Deployment {self.run_context.bundle_name}")
        table.add_column("Step")
        table.add_column("Status")
        table.add_column("Duration (s)", justify="right")
        table.add_column("Details")

        styles = {"success": "green", "failed": "red", "skipped": "yellow", "running": "blue"}
        for step in self.report.steps:
            duration = step["duration_seconds"]
            details = step["error"] or step["details"].get("reason") or ""
            table.add_row(
                step["name"],
                f"[{styles.get(step['status'], 'white')}]{step['status']}[/]",
                f"{duration:.1f}" if duration is not None else "-",
                escape(details),
            )
        console.print(table)
