"""Launch requests handed to job submitters."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from hadoop_tasklets.errors import ConfigurationError
from hadoop_tasklets.utils.helpers import parse_memory_size

if TYPE_CHECKING:
    from hadoop_tasklets.config.job_config import PigConfig, SparkConfig


class Engine(str, Enum):
    SPARK = "spark"
    PIG = "pig"


@dataclass(frozen=True)
class LaunchRequest:
    """Everything needed to submit one external batch job.

    For Spark the first artifact URI is the application jar and the rest
    are shipped with ``--jars``. For Pig the entry point is the script path
    and ``parameters`` become ``-param`` substitutions.
    """

    application_entry_point: str
    resource_artifact_uris: tuple[str, ...] = ()
    executor_memory: str = "1G"
    executor_count: int = 1
    arguments: tuple[str, ...] = ()
    engine: Engine = Engine.SPARK
    app_name: str | None = None
    spark_conf: Mapping[str, str] = field(default_factory=dict)
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "resource_artifact_uris", tuple(self.resource_artifact_uris))
        object.__setattr__(self, "arguments", tuple(str(a) for a in self.arguments))
        object.__setattr__(self, "spark_conf", MappingProxyType(dict(self.spark_conf)))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        try:
            object.__setattr__(self, "engine", Engine(self.engine))
        except ValueError:
            raise ConfigurationError(f"Unknown engine: {self.engine!r}") from None

    def validate(self) -> None:
        """Check the request before anything is handed to the cluster.

        Raises:
            ConfigurationError: describing the first problem found.
        """
        if not self.application_entry_point or not self.application_entry_point.strip():
            raise ConfigurationError("Application entry point is not set")

        if isinstance(self.executor_count, bool) or not isinstance(self.executor_count, int):
            raise ConfigurationError(f"Executor count must be an integer: {self.executor_count!r}")
        if self.executor_count < 1:
            raise ConfigurationError(f"Executor count must be at least 1, got {self.executor_count}")

        parse_memory_size(self.executor_memory)

        for uri in self.resource_artifact_uris:
            if not uri or not str(uri).strip():
                raise ConfigurationError("Empty resource artifact URI")

        if self.engine is Engine.SPARK and not self.resource_artifact_uris:
            raise ConfigurationError("Spark jobs need at least one resource artifact (the app jar)")

    @classmethod
    def from_spark_config(
        cls, spark: "SparkConfig", arguments: list[str] | tuple[str, ...] = ()
    ) -> "LaunchRequest":
        artifacts = [spark.app_jar] if spark.app_jar else []
        artifacts.extend(spark.extra_jars)

        conf = dict(spark.spark_conf or {})
        if spark.assembly_jar:
            conf.setdefault("spark.yarn.jar", spark.assembly_jar)

        return cls(
            application_entry_point=spark.app_class,
            resource_artifact_uris=tuple(artifacts),
            executor_memory=spark.executor_memory,
            executor_count=spark.executor_count,
            arguments=tuple(arguments),
            engine=Engine.SPARK,
            app_name=spark.app_name,
            spark_conf=conf,
        )

    @classmethod
    def from_pig_config(
        cls, pig: "PigConfig", arguments: list[str] | tuple[str, ...] = ()
    ) -> "LaunchRequest":
        return cls(
            application_entry_point=pig.script,
            resource_artifact_uris=tuple(pig.jars),
            arguments=tuple(arguments),
            engine=Engine.PIG,
            app_name=pig.job_name,
            parameters=dict(pig.parameters or {}),
        )
