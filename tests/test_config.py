"""Tests for job configuration loading."""

from pathlib import Path

import pytest

from hadoop_tasklets.config import DEFAULT_INIT_SCRIPT, HadoopConfig, JobConfig
from hadoop_tasklets.errors import ConfigurationError
from hadoop_tasklets.fs import LocalFileSystem
from hadoop_tasklets.scripting import ScriptLanguage, ScriptRunner

HADOOP_PROPERTIES = """\
# cluster
hd.fs=hdfs://localhost:8020
hd.rm=localhost

input.dir=/tmp/hashtags/input
output.dir=/tmp/hashtags/output
local.data=data/tweets.dat

spark.app.class=Hashtags
spark.app.jar=app/spark-hashtags_2.10-0.1.0.jar
spark.assembly.jar: hdfs:///app/spark/spark-assembly-1.5.0-hadoop2.6.0.jar
spark.executor.memory=1G
spark.executor.count=2
spark.conf.spark.eventLog.enabled=true

arg.1=${fs_prefix}${output_dir}
arg.0=${fs_prefix}${input_dir}/tweets.dat
staging.user=batch
"""


class TestJobConfig:
    def test_default_config(self):
        config = JobConfig()
        assert config.name == "tasklet-job"
        assert config.engine == "spark"
        assert config.hadoop.filesystem == "hdfs"
        assert config.script.enabled is True

    def test_unknown_engine(self):
        with pytest.raises(ConfigurationError, match="Unknown engine"):
            JobConfig(engine="hive")

    def test_preset_config(self):
        config = JobConfig.from_preset("hashtags")
        assert config.spark.app_class == "Hashtags"
        assert config.input_dir == "/tmp/hashtags/input"
        assert config.resolved_arguments() == [
            "hdfs://localhost:8020/tmp/hashtags/input/tweets.dat",
            "hdfs://localhost:8020/tmp/hashtags/output",
        ]

    def test_pig_preset(self):
        config = JobConfig.from_preset("pig-password")
        assert config.engine == "pig"
        assert config.resolved_arguments() == ["inputDir=/tmp/pig/input", "outputDir=/tmp/pig/output"]

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            JobConfig.from_preset("nope")

    def test_config_to_dict(self):
        data = JobConfig().to_dict()
        assert isinstance(data, dict)
        assert "spark" in data
        assert data["hadoop"]["filesystem"] == "hdfs"

    def test_placeholder_sources(self):
        config = JobConfig(local_data="a.dat")
        config.script.sources = {"extra": "x"}
        sources = config.placeholder_sources()
        assert sources["local_data"] == "a.dat"
        assert sources["fs_prefix"] == "hdfs://"
        assert sources["extra"] == "x"
        assert "fs_uri" not in sources

    def test_default_script_task(self):
        task = JobConfig(local_data="a.dat").script_task()
        assert task.body == DEFAULT_INIT_SCRIPT
        assert task.language is ScriptLanguage.SHELL
        assert task.sources["input_dir"] == "/tmp/input"

    def test_disabled_script_task(self):
        config = JobConfig()
        config.script.enabled = False
        assert config.script_task() is None

    def test_local_preset_points_job_at_local_root(self):
        config = JobConfig.from_preset("local")
        root = Path("./data/hdfs").resolve().as_posix()
        assert config.resolved_arguments() == [
            f"file://{root}/tmp/hashtags/input/tweets.dat",
            f"file://{root}/tmp/hashtags/output",
        ]

    def test_local_arguments_match_staged_data(self, tmp_path, tweets_file):
        config = JobConfig(
            local_data=str(tweets_file),
            arguments=["${fs_prefix}${input_dir}/tweets.dat"],
            hadoop=HadoopConfig(filesystem="local", local_root=str(tmp_path / "namespace")),
        )
        fs = LocalFileSystem(root=config.hadoop.local_root)

        assert ScriptRunner(fs).run(config.script_task()).succeeded

        (argument,) = config.resolved_arguments()
        assert argument.startswith("file://")
        assert Path(argument[len("file://") :]).is_file()


class TestFromDict:
    def test_nested_sections(self):
        config = JobConfig.from_dict(
            {
                "job": {"name": "nightly", "engine": "spark"},
                "input_dir": "/stage/in",
                "hadoop": {"fs_uri": "hdfs://nn:8020", "filesystem": "local"},
                "spark": {"app_class": "Main", "executor_count": "4"},
                "script": {"language": "embedded", "body": "fsh.ls('/')"},
            }
        )
        assert config.name == "nightly"
        assert config.input_dir == "/stage/in"
        assert config.hadoop.filesystem == "local"
        assert config.spark.executor_count == 4
        assert config.script_task().language is ScriptLanguage.EMBEDDED

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            JobConfig.from_dict({"spark": {"executors": 3}})

    def test_unknown_filesystem(self):
        with pytest.raises(ConfigurationError, match="Unknown filesystem: s3"):
            JobConfig.from_dict({"hadoop": {"filesystem": "s3"}})

    def test_non_numeric_executor_count(self):
        with pytest.raises(ConfigurationError, match="executor_count"):
            JobConfig.from_dict({"spark": {"executor_count": "many"}})


class TestFileLoading:
    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "job.yaml"
        JobConfig.from_preset("hashtags").to_yaml(str(path))

        loaded = JobConfig.from_file(str(path))
        assert loaded == JobConfig.from_preset("hashtags")

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert JobConfig.from_yaml(str(path)) == JobConfig()

    def test_properties(self, tmp_path):
        path = tmp_path / "hadoop.properties"
        path.write_text(HADOOP_PROPERTIES)

        config = JobConfig.from_file(str(path))

        assert config.hadoop.fs_uri == "hdfs://localhost:8020"
        assert config.hadoop.resource_manager == "localhost"
        assert config.local_data == "data/tweets.dat"
        assert config.spark.assembly_jar == "hdfs:///app/spark/spark-assembly-1.5.0-hadoop2.6.0.jar"
        assert config.spark.executor_count == 2
        assert config.spark.spark_conf == {"spark.eventLog.enabled": "true"}
        assert config.script.sources == {"staging.user": "batch"}
        assert config.resolved_arguments() == [
            "hdfs://localhost:8020/tmp/hashtags/input/tweets.dat",
            "hdfs://localhost:8020/tmp/hashtags/output",
        ]

    def test_properties_bad_line(self, tmp_path):
        path = tmp_path / "bad.properties"
        path.write_text("just-a-word\n")
        with pytest.raises(ConfigurationError, match="line 1"):
            JobConfig.from_properties(str(path))

    def test_properties_bad_integer(self, tmp_path):
        path = tmp_path / "bad.properties"
        path.write_text("spark.executor.count=lots\n")
        with pytest.raises(ConfigurationError, match="integer"):
            JobConfig.from_properties(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            JobConfig.from_file(str(tmp_path / "nope.yaml"))
