"""Waits for a freshly deployed version to show up in the running list."""

import json
import logging
import time
from typing import Callable, Optional

from fusiondeployer.models import RunContext

logger = logging.getLogger("fusiondeployer")


class VersionPoller:
    """Polls the version list until its newest entry changes.

    Performs ``retry_count + 1`` queries at most and sleeps ``retry_delay``
    seconds after every query that shows no change. Errors raised while
    fetching the list are not retried here; they propagate to the caller.
    """

    def __init__(self, client, logger=logger, sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.logger = logger
        self.sleep = sleep

    def poll_for_new_version(self, run_context: RunContext, previous_latest: str) -> Optional[str]:
        retries_remaining = run_context.retry_count
        attempt = 0

        while retries_remaining >= 0:
            attempt += 1
            versions = self.client.list_versions()
            self.logger.debug("New versions: %s", json.dumps(versions, indent=2))

            if versions and versions[-1] != previous_latest:
                self.logger.info("New version %s detected on poll %s.", versions[-1], attempt)
                return versions[-1]

            self.logger.debug(
                "No new version yet (poll %s/%s). Waiting %s seconds...",
                attempt,
                run_context.retry_count + 1,
                run_context.retry_delay,
            )
            self.sleep(run_context.retry_delay)
            retries_remaining -= 1

        return None


def poll_for_new_version(
    run_context: RunContext,
    previous_latest: str,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[str]:
    return VersionPoller(run_context.client, sleep=sleep).poll_for_new_version(
        run_context, previous_latest
    )
