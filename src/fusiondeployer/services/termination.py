"""Best-effort retirement of the oldest running version."""

import logging
import time
from typing import Callable, Optional

from fusiondeployer.constants import DEFAULT_TERMINATE_RETRY_COUNT, DEFAULT_TERMINATE_RETRY_DELAY
from fusiondeployer.models import (
    RunContext,
    TerminationAttempt,
    TerminationResult,
    positive_int_or_default,
    utc_now,
)

logger = logging.getLogger("fusiondeployer")


class TerminationRetrier:
    """Terminates one version with bounded retries.

    Never raises. Every outcome, including exhaustion, is reported through
    the returned ``TerminationResult`` and warning logs.
    """

    def __init__(self, client, logger=logger, sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.logger = logger
        self.sleep = sleep

    def terminate_oldest(
        self,
        run_context: RunContext,
        target_version: Optional[str],
    ) -> TerminationResult:
        result = TerminationResult(version=target_version)

        if not target_version:
            error = "Unable to detect the oldest version"
            self.logger.warning(error)
            result.final_error = error
            return result

        max_attempts = positive_int_or_default(
            run_context.terminate_retry_count, DEFAULT_TERMINATE_RETRY_COUNT
        )
        delay_seconds = positive_int_or_default(
            run_context.terminate_retry_delay, DEFAULT_TERMINATE_RETRY_DELAY
        )

        for attempt in range(1, max_attempts + 1):
            try:
                self.logger.debug(
                    "Attempt %s/%s: Terminating version %s", attempt, max_attempts, target_version
                )
                response = self.client.terminate(target_version)
            except Exception as exc:
                result.attempts.append(
                    TerminationAttempt(
                        attempt=attempt,
                        success=False,
                        timestamp=utc_now(),
                        error=str(exc),
                    )
                )
                self.logger.warning(
                    "Attempt %s/%s failed to terminate version %s: %s",
                    attempt,
                    max_attempts,
                    target_version,
                    exc,
                )

                if attempt < max_attempts:
                    self.logger.debug("Waiting %s seconds before retry...", delay_seconds)
                    self.sleep(delay_seconds)
                    continue

                result.final_error = str(exc)
                self.logger.warning(
                    "Failed to terminate version %s after %s attempts. "
                    "Proceeding with deployment. Error: %s",
                    target_version,
                    max_attempts,
                    exc,
                )
                return result

            result.attempts.append(
                TerminationAttempt(
                    attempt=attempt,
                    success=True,
                    timestamp=utc_now(),
                    status=getattr(response, "status_code", None),
                )
            )
            self.logger.info(
                "Successfully terminated version %s on attempt %s", target_version, attempt
            )
            result.success = True
            return result

        return result


def terminate_oldest(
    run_context: RunContext,
    target_version: Optional[str],
    sleep: Callable[[float], None] = time.sleep,
) -> TerminationResult:
    return TerminationRetrier(run_context.client, sleep=sleep).terminate_oldest(
        run_context, target_version
    )
