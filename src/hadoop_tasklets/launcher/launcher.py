"""Launch an external job and translate its outcome into a StepResult."""

import logging
import time

from hadoop_tasklets.errors import ErrorKind, TaskletError
from hadoop_tasklets.launcher.request import LaunchRequest
from hadoop_tasklets.launcher.submitters import JobSubmitter
from hadoop_tasklets.results import JobState, StepResult

logger = logging.getLogger(__name__)


class JobLauncher:
    """Submit a single job synchronously. No retries are attempted."""

    def __init__(self, submitter: JobSubmitter):
        """
        Initialize job launcher.

        Args:
            submitter: Submitter used to reach the cluster
        """
        self.submitter = submitter

    def launch(self, request: LaunchRequest) -> StepResult:
        """
        Validate, submit and wait for a job.

        Args:
            request: Launch request

        Returns:
            COMPLETED when the job succeeded, otherwise FAILED with a
            CONFIGURATION, SUBMISSION or EXTERNAL_RUNTIME error kind
        """
        try:
            request.validate()
        except TaskletError as e:
            logger.error(f"Launch request rejected: {e}")
            return StepResult.from_error(e)

        logger.info(
            f"Launching {request.engine.value} job {request.application_entry_point} "
            f"({request.executor_count} x {request.executor_memory})"
        )
        start_time = time.time()
        try:
            outcome = self.submitter.submit(request)
        except TaskletError as e:
            logger.error(f"Submission failed: {e}")
            return StepResult.from_error(e)

        elapsed = time.time() - start_time
        if outcome.state is JobState.SUCCEEDED:
            logger.info(f"Job succeeded in {elapsed:.2f}s")
            return StepResult.completed(application_id=outcome.application_id)

        logger.error(f"Job {outcome.state.value.lower()} after {elapsed:.2f}s: {outcome.diagnostic}")
        return StepResult.failed(
            outcome.diagnostic,
            error_kind=ErrorKind.EXTERNAL_RUNTIME,
            application_id=outcome.application_id,
        )
