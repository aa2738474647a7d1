"""External job launching for Spark on YARN and Pig."""

from hadoop_tasklets.launcher.launcher import JobLauncher
from hadoop_tasklets.launcher.request import Engine, LaunchRequest
from hadoop_tasklets.launcher.submitters import (
    JobSubmitter,
    PigSubmitter,
    SparkYarnSubmitter,
    create_submitter,
)

__all__ = [
    "Engine",
    "JobLauncher",
    "JobSubmitter",
    "LaunchRequest",
    "PigSubmitter",
    "SparkYarnSubmitter",
    "create_submitter",
]
