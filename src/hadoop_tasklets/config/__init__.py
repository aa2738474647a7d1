"""Configuration module."""

from hadoop_tasklets.config.job_config import (
    DEFAULT_INIT_SCRIPT,
    HadoopConfig,
    JobConfig,
    PigConfig,
    ScriptConfig,
    SparkConfig,
)

__all__ = [
    "DEFAULT_INIT_SCRIPT",
    "JobConfig",
    "HadoopConfig",
    "ScriptConfig",
    "SparkConfig",
    "PigConfig",
]
