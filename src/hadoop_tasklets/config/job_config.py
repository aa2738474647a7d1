"""Job configuration module."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from hadoop_tasklets.errors import ConfigurationError
from hadoop_tasklets.scripting.script import ScriptLanguage, ScriptTask, resolve_placeholders


DEFAULT_INIT_SCRIPT = """\
# clear staging directories, then stage the input data
if-exists ${input_dir}: rmr ${input_dir}
if-exists ${output_dir}: rmr ${output_dir}
mkdir ${input_dir}
put ${local_data} ${input_dir}
"""


@dataclass
class HadoopConfig:
    """Cluster endpoints and the filesystem client to use."""

    fs_uri: str | None = None  # hdfs://namenode:8020
    resource_manager: str | None = None
    filesystem: Literal["hdfs", "local", "memory"] = "hdfs"
    local_root: str = "./data/hdfs"  # namespace root for the "local" filesystem
    hdfs_command: str = "hdfs"
    skip_trash: bool = False


@dataclass
class ScriptConfig:
    """Init script run before the job is launched."""

    enabled: bool = True
    body: str | None = None  # falls back to DEFAULT_INIT_SCRIPT
    file: str | None = None
    language: Literal["shell", "embedded"] | None = None
    sources: dict[str, str] = field(default_factory=dict)


@dataclass
class SparkConfig:
    """Spark-on-YARN application settings."""

    app_class: str = ""
    app_jar: str | None = None
    assembly_jar: str | None = None
    extra_jars: list[str] = field(default_factory=list)
    executor_memory: str = "1G"
    executor_count: int = 1
    app_name: str | None = None
    queue: str | None = None

    spark_submit: str = "spark-submit"
    master: str = "yarn"
    deploy_mode: str = "cluster"

    # Additional --conf entries
    spark_conf: dict[str, str] | None = None


@dataclass
class PigConfig:
    """Pig script settings."""

    script: str = ""
    exec_type: Literal["mapreduce", "tez", "local"] = "mapreduce"
    parameters: dict[str, str] = field(default_factory=dict)
    properties: dict[str, str] = field(default_factory=dict)
    jars: list[str] = field(default_factory=list)
    pig_command: str = "pig"
    job_name: str | None = None


# flat property name -> (section, attribute)
PROPERTY_KEYS: dict[str, tuple[str | None, str]] = {
    "job.name": (None, "name"),
    "job.engine": (None, "engine"),
    "input.dir": (None, "input_dir"),
    "output.dir": (None, "output_dir"),
    "local.data": (None, "local_data"),
    "hd.fs": ("hadoop", "fs_uri"),
    "hd.rm": ("hadoop", "resource_manager"),
    "hd.filesystem": ("hadoop", "filesystem"),
    "spark.app.class": ("spark", "app_class"),
    "spark.app.jar": ("spark", "app_jar"),
    "spark.app.name": ("spark", "app_name"),
    "spark.assembly.jar": ("spark", "assembly_jar"),
    "spark.executor.memory": ("spark", "executor_memory"),
    "spark.executor.count": ("spark", "executor_count"),
    "spark.queue": ("spark", "queue"),
    "pig.script": ("pig", "script"),
    "pig.exec.type": ("pig", "exec_type"),
}
_INT_PROPERTIES = {"spark.executor.count"}
FILESYSTEMS = ("hdfs", "local", "memory")


def _parse_properties(text: str) -> dict[str, str]:
    """Parse ``key=value`` / ``key: value`` lines, ``#`` and ``!`` comments."""
    properties = {}
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        separators = [i for i in (line.find("="), line.find(":")) if i > 0]
        if not separators:
            raise ConfigurationError(f"line {line_no}: expected key=value, got {raw!r}")
        split_at = min(separators)
        properties[line[:split_at].strip()] = line[split_at + 1 :].strip()
    return properties


@dataclass
class JobConfig:
    """Main job configuration: init script followed by one external job."""

    name: str = "tasklet-job"
    engine: Literal["spark", "pig"] = "spark"

    # Staging directories and the local data copied into them
    input_dir: str = "/tmp/input"
    output_dir: str = "/tmp/output"
    local_data: str | None = None

    # Job arguments; may reference ${placeholders}
    arguments: list[str] = field(default_factory=list)

    # Sub-configs
    hadoop: HadoopConfig = field(default_factory=HadoopConfig)
    script: ScriptConfig = field(default_factory=ScriptConfig)
    spark: SparkConfig = field(default_factory=SparkConfig)
    pig: PigConfig = field(default_factory=PigConfig)

    def __post_init__(self):
        if self.engine not in ("spark", "pig"):
            raise ConfigurationError(f"Unknown engine: {self.engine}. Available: ['spark', 'pig']")
        if self.hadoop.filesystem not in FILESYSTEMS:
            raise ConfigurationError(
                f"Unknown filesystem: {self.hadoop.filesystem}. Available: {list(FILESYSTEMS)}"
            )
        if isinstance(self.spark.executor_count, str):
            try:
                self.spark.executor_count = int(self.spark.executor_count)
            except ValueError:
                raise ConfigurationError(
                    f"spark.executor_count must be an integer, got {self.spark.executor_count!r}"
                ) from None

    @property
    def fs_prefix(self) -> str:
        """Scheme and authority prepended to paths handed to the job.

        With the local filesystem the namespace lives under ``local_root``,
        so paths resolve to ``file://<absolute local_root>``.
        """
        if self.hadoop.filesystem == "local":
            return f"file://{Path(self.hadoop.local_root).resolve().as_posix().rstrip('/')}"
        return self.hadoop.fs_uri.rstrip("/") if self.hadoop.fs_uri else "hdfs://"

    def placeholder_sources(self) -> dict[str, str]:
        """Values available to ``${...}`` references in scripts and arguments."""
        sources = {
            "input_dir": self.input_dir,
            "output_dir": self.output_dir,
            "fs_prefix": self.fs_prefix,
        }
        if self.local_data is not None:
            sources["local_data"] = self.local_data
        if self.hadoop.fs_uri:
            sources["fs_uri"] = self.hadoop.fs_uri
        sources.update(self.script.sources)
        return sources

    def resolved_arguments(self) -> list[str]:
        sources = self.placeholder_sources()
        return [resolve_placeholders(str(arg), sources) for arg in self.arguments]

    def script_task(self) -> ScriptTask | None:
        """Build the init script task, or None when the script is disabled."""
        if not self.script.enabled:
            return None
        sources = self.placeholder_sources()
        if self.script.file:
            return ScriptTask.from_file(self.script.file, sources, self.script.language)
        return ScriptTask(
            body=self.script.body or DEFAULT_INIT_SCRIPT,
            sources=sources,
            language=ScriptLanguage(self.script.language or "shell"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "JobConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobConfig":
        """Create configuration from dictionary."""
        data = dict(data)
        job_data = data.pop("job", None)
        if job_data:
            data.update(job_data)

        hadoop_data = data.pop("hadoop", {}) or {}
        script_data = data.pop("script", {}) or {}
        spark_data = data.pop("spark", {}) or {}
        pig_data = data.pop("pig", {}) or {}

        try:
            return cls(
                **data,
                hadoop=HadoopConfig(**hadoop_data),
                script=ScriptConfig(**script_data),
                spark=SparkConfig(**spark_data),
                pig=PigConfig(**pig_data),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_properties(cls, path: str) -> "JobConfig":
        """Load configuration from a flat ``hadoop.properties`` style file.

        Known keys map onto config fields, ``spark.conf.*`` onto extra Spark
        conf, ``pig.param.*`` onto Pig parameters and ``arg.N`` onto job
        arguments. Everything else becomes a script placeholder.
        """
        properties = _parse_properties(Path(path).read_text())

        data: dict[str, Any] = {"hadoop": {}, "script": {"sources": {}}, "spark": {}, "pig": {}}
        arguments: dict[int, str] = {}
        for key, value in properties.items():
            if key in PROPERTY_KEYS:
                section, attr = PROPERTY_KEYS[key]
                if key in _INT_PROPERTIES:
                    try:
                        value = int(value)
                    except ValueError:
                        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None
                (data[section] if section else data)[attr] = value
            elif key.startswith("spark.conf."):
                data["spark"].setdefault("spark_conf", {})[key[len("spark.conf.") :]] = value
            elif key.startswith("pig.param."):
                data["pig"].setdefault("parameters", {})[key[len("pig.param.") :]] = value
            elif key.startswith("arg.") and key[4:].isdigit():
                arguments[int(key[4:])] = value
            else:
                data["script"]["sources"][key] = value

        if arguments:
            data["arguments"] = [arguments[i] for i in sorted(arguments)]
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str) -> "JobConfig":
        """Load from YAML or ``.properties`` depending on the extension."""
        if not Path(path).is_file():
            raise ConfigurationError(f"Config file not found: {path}")
        if Path(path).suffix == ".properties":
            return cls.from_properties(path)
        return cls.from_yaml(path)

    @classmethod
    def from_preset(cls, preset: str) -> "JobConfig":
        """Create configuration from preset."""
        presets = {
            "hashtags": cls(
                name="hashtags",
                engine="spark",
                input_dir="/tmp/hashtags/input",
                output_dir="/tmp/hashtags/output",
                local_data="data/tweets.dat",
                arguments=[
                    "${fs_prefix}${input_dir}/tweets.dat",
                    "${fs_prefix}${output_dir}",
                ],
                hadoop=HadoopConfig(fs_uri="hdfs://localhost:8020", resource_manager="localhost"),
                spark=SparkConfig(
                    app_class="Hashtags",
                    app_jar="app/spark-hashtags_2.10-0.1.0.jar",
                    assembly_jar="hdfs:///app/spark/spark-assembly-1.5.0-hadoop2.6.0.jar",
                    executor_memory="1G",
                    executor_count=1,
                    app_name="hashtags",
                ),
            ),
            "pig-password": cls(
                name="pig-password",
                engine="pig",
                input_dir="/tmp/pig/input",
                output_dir="/tmp/pig/output",
                local_data="/etc/passwd",
                arguments=["inputDir=${input_dir}", "outputDir=${output_dir}"],
                hadoop=HadoopConfig(fs_uri="hdfs://localhost:8020", resource_manager="localhost"),
                pig=PigConfig(script="scripts/password-repo.pig", job_name="pig-password"),
            ),
            "local": cls(
                name="local-hashtags",
                engine="spark",
                input_dir="/tmp/hashtags/input",
                output_dir="/tmp/hashtags/output",
                local_data="data/tweets.dat",
                arguments=["${fs_prefix}${input_dir}/tweets.dat", "${fs_prefix}${output_dir}"],
                hadoop=HadoopConfig(filesystem="local", local_root="./data/hdfs"),
                spark=SparkConfig(
                    app_class="Hashtags",
                    app_jar="app/spark-hashtags_2.10-0.1.0.jar",
                    master="local[*]",
                    deploy_mode="client",
                ),
            ),
        }

        if preset not in presets:
            raise ValueError(f"Unknown preset: {preset}. Available: {list(presets.keys())}")

        return presets[preset]

    def to_yaml(self, path: str) -> None:
        """Save configuration to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)
