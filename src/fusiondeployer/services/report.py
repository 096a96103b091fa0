"""Run report bookkeeping for a deployment."""

import json
import os
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional

from fusiondeployer.models import TerminationResult, utc_now


class ReportService:
    """Collects step outcomes and version snapshots, optionally as JSON on disk."""

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "metadata": {},
            "versions": {
                "oldest": None,
                "latest": None,
                "newest": None,
            },
            "steps": [],
            "termination": None,
            "error": None,
        }

    @property
    def steps(self) -> List[Dict[str, Any]]:
        return self.report["steps"]

    def start_run(self, metadata: Dict[str, Any]):
        self.report["status"] = "running"
        self.report["started_at"] = utc_now()
        self.report["metadata"] = metadata
        self.write()

    def set_versions(self, **versions: Optional[str]):
        for key, value in versions.items():
            self.report["versions"][key] = value
        self.write()

    def set_termination(self, result: TerminationResult):
        self.report["termination"] = result.as_dict()
        self.write()

    def step_started(self, step_name: str, details: Optional[Dict[str, Any]] = None):
        self.steps.append(
            {
                "name": step_name,
                "status": "running",
                "started_at": utc_now(),
                "finished_at": None,
                "duration_seconds": None,
                "details": details or {},
                "error": None,
            }
        )
        self.write()

    def step_finished(
        self,
        step_name: str,
        status: str,
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        for step in reversed(self.steps):
            if step["name"] == step_name and step["status"] == "running":
                step["status"] = status
                step["finished_at"] = utc_now()
                step["error"] = error
                if details:
                    step["details"].update(details)
                step["duration_seconds"] = self._elapsed(step["started_at"], step["finished_at"])
                break
        self.write()

    def step_skipped(self, step_name: str, reason: str):
        self.steps.append(
            {
                "name": step_name,
                "status": "skipped",
                "started_at": None,
                "finished_at": None,
                "duration_seconds": None,
                "details": {"reason": reason},
                "error": None,
            }
        )
        self.write()

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = utc_now()
        if self.report.get("started_at"):
            self.report["duration_seconds"] = self._elapsed(
                self.report["started_at"], self.report["finished_at"]
            )
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.report_file:
            return

        directory = os.path.dirname(self.report_file) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix="deploy-report-", suffix=".json", dir=directory)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            return

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _elapsed(started_at: str, finished_at: str) -> float:
        return (datetime.fromisoformat(finished_at) - datetime.fromisoformat(started_at)).total_seconds()
