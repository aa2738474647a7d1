"""Tests for the hadoop-tasklets command-line interface."""

import pytest
import yaml
from click.testing import CliRunner

from hadoop_tasklets.cli import main
from hadoop_tasklets.config import JobConfig


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def write_config(tmp_path, tweets_file):
    """Write a job YAML using the in-memory filesystem; returns its path."""

    def _write(spark_overrides=None, **overrides):
        spark = {
            "app_class": "Hashtags",
            "app_jar": "app/spark-hashtags_2.10-0.1.0.jar",
            "spark_submit": str(tmp_path / "no-such-spark-submit"),
        }
        spark.update(spark_overrides or {})
        data = {
            "name": "cli-job",
            "input_dir": "/tmp/hashtags/input",
            "output_dir": "/tmp/hashtags/output",
            "local_data": str(tweets_file),
            "arguments": ["${fs_prefix}${input_dir}/tweets.dat"],
            "hadoop": {"filesystem": "memory"},
            "spark": spark,
        }
        data.update(overrides)
        path = tmp_path / "job.yaml"
        path.write_text(yaml.safe_dump(data))
        return str(path)

    return _write


# ---------------------------------------------------------------------------
# Informational commands
# ---------------------------------------------------------------------------


class TestInfoCommands:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ["run", "script", "show-config", "init-config", "list-presets"]:
            assert command in result.output

    def test_list_presets(self, runner):
        result = runner.invoke(main, ["list-presets"])
        assert result.exit_code == 0
        assert "hashtags" in result.output
        assert "pig-password" in result.output

    def test_show_config_preset(self, runner):
        result = runner.invoke(main, ["show-config", "--preset", "hashtags"])
        assert result.exit_code == 0
        assert "app_class: Hashtags" in result.output

    def test_init_config(self, runner, tmp_path):
        output = tmp_path / "configs" / "hashtags.yaml"
        result = runner.invoke(main, ["init-config", "hashtags", str(output)])

        assert result.exit_code == 0
        assert "[OK]" in result.output
        assert JobConfig.from_yaml(str(output)) == JobConfig.from_preset("hashtags")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_dry_run_spark(self, runner):
        result = runner.invoke(main, ["run", "--preset", "hashtags", "--dry-run"])
        assert result.exit_code == 0
        assert "spark-submit --master yarn --deploy-mode cluster" in result.output
        assert "hdfs://localhost:8020/tmp/hashtags/input/tweets.dat" in result.output

    def test_dry_run_pig(self, runner):
        result = runner.invoke(main, ["run", "--preset", "pig-password", "--dry-run"])
        assert result.exit_code == 0
        assert "-f scripts/password-repo.pig" in result.output
        assert "-param inputDir=/tmp/pig/input" in result.output

    def test_dry_run_invalid_request(self, runner, write_config):
        config = write_config(spark_overrides={"executor_count": 0})
        result = runner.invoke(main, ["run", config, "--dry-run"])
        assert result.exit_code == 1
        assert "at least 1" in result.output

    def test_successful_run(self, runner, write_config):
        config = write_config(spark_overrides={"spark_submit": "true"})
        result = runner.invoke(main, ["run", config])

        assert result.exit_code == 0
        assert "Batch job [cli-job] starting" in result.output
        assert "Workflow 'cli-job': COMPLETED" in result.output

    def test_submission_failure(self, runner, write_config):
        result = runner.invoke(main, ["run", write_config()])

        assert result.exit_code == 1
        assert "Workflow 'cli-job': FAILED" in result.output
        assert "SUBMISSION" in result.output

    def test_configuration_failure_skips_launch(self, runner, write_config):
        config = write_config(local_data=None)
        result = runner.invoke(main, ["run", config])

        assert result.exit_code == 1
        assert "CONFIGURATION" in result.output
        assert "spark-tasklet" not in result.output

    def test_no_script_flag(self, runner, write_config):
        config = write_config(spark_overrides={"spark_submit": "true"}, local_data=None)
        result = runner.invoke(main, ["run", config, "--no-script"])
        assert result.exit_code == 0
        assert "init-script" not in result.output

    def test_requires_config(self, runner):
        result = runner.invoke(main, ["run"])
        assert result.exit_code == 2

    def test_config_and_preset_conflict(self, runner, write_config):
        result = runner.invoke(main, ["run", write_config(), "--preset", "hashtags"])
        assert result.exit_code == 2

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("spark:\n  executors: 3\n")
        result = runner.invoke(main, ["run", str(path)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_filesystem(self, runner, write_config):
        config = write_config(hadoop={"filesystem": "s3"})
        result = runner.invoke(main, ["run", config])
        assert result.exit_code == 1
        assert "Unknown filesystem: s3" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)


# ---------------------------------------------------------------------------
# script
# ---------------------------------------------------------------------------


class TestScriptCommand:
    def test_script_only(self, runner, write_config):
        result = runner.invoke(main, ["script", write_config()])
        assert result.exit_code == 0
        assert "init-script: COMPLETED" in result.output

    def test_script_failure(self, runner, write_config, tmp_path):
        config = write_config(local_data=str(tmp_path / "missing.dat"))
        result = runner.invoke(main, ["script", config])
        assert result.exit_code == 1
        assert "FILESYSTEM" in result.output

    def test_script_on_local_filesystem(self, runner, write_config, tmp_path):
        root = tmp_path / "namespace"
        config = write_config()
        result = runner.invoke(main, ["script", config, "--filesystem", "memory"])
        assert result.exit_code == 0

        data = yaml.safe_load(open(config))
        data["hadoop"] = {"filesystem": "local", "local_root": str(root)}
        with open(config, "w") as f:
            yaml.safe_dump(data, f)

        result = runner.invoke(main, ["script", config])
        assert result.exit_code == 0
        assert (root / "tmp" / "hashtags" / "input" / "tweets.dat").is_file()
