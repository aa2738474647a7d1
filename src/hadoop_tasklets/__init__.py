"""
Hadoop Tasklets

Batch tasklets that stage data on HDFS and launch external Spark-on-YARN
or Pig jobs, reporting a single success/failure status per run.

Usage:
    from hadoop_tasklets import JobConfig, run_job

    config = JobConfig.from_preset("hashtags")
    exit_code = run_job(config)
"""

__version__ = "1.0.0"

from hadoop_tasklets.config.job_config import JobConfig
from hadoop_tasklets.results import StepResult, StepStatus, WorkflowRun
from hadoop_tasklets.workflow.jobs import TaskletJob, run_job

__all__ = [
    "JobConfig",
    "StepResult",
    "StepStatus",
    "TaskletJob",
    "WorkflowRun",
    "run_job",
    "__version__",
]
