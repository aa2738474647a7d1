"""Linear step sequencing with short-circuit on the first failure."""

import logging
import time
from collections.abc import Callable, Iterable

from hadoop_tasklets.results import StepResult, WorkflowRun

logger = logging.getLogger(__name__)

Step = tuple[str, Callable[[], StepResult]]


class StepOrchestrator:
    """Run named steps in order on the calling thread.

    Stops at the first FAILED result; later steps are never invoked.
    Exceptions escaping a step are recorded as a FAILED result for that
    step, so ``run_workflow`` always returns a WorkflowRun.
    """

    def run_workflow(self, steps: Iterable[Step], name: str = "workflow") -> WorkflowRun:
        run = WorkflowRun(name=name)
        start_time = time.time()

        for step_name, step in steps:
            logger.info(f"Executing step: [{step_name}]")
            step_start = time.time()
            try:
                result = step()
            except Exception as e:
                logger.exception(f"Step [{step_name}] raised")
                result = StepResult.from_error(e)

            if not isinstance(result, StepResult):
                result = StepResult.failed(
                    f"Step returned {type(result).__name__}, expected StepResult"
                )

            run.record(step_name, result)
            logger.info(
                f"Step: [{step_name}] {result.status.value.lower()} in "
                f"{time.time() - step_start:.2f}s"
            )
            if not result.succeeded:
                break

        run.elapsed_time_seconds = time.time() - start_time
        logger.info(f"Workflow: [{name}] completed with status: [{run.status.value}]")
        return run
