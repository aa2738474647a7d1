"""Workflow sequencing and job assembly."""

from hadoop_tasklets.workflow.jobs import (
    TaskletJob,
    build_launch_request,
    create_filesystem_client,
    create_job_submitter,
    run_job,
)
from hadoop_tasklets.workflow.orchestrator import Step, StepOrchestrator

__all__ = [
    "Step",
    "StepOrchestrator",
    "TaskletJob",
    "build_launch_request",
    "create_filesystem_client",
    "create_job_submitter",
    "run_job",
]
