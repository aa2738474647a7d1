"""Command-line interface for Hadoop Tasklets."""

import logging

import click
import yaml

from hadoop_tasklets.config.job_config import JobConfig
from hadoop_tasklets.errors import ConfigurationError, TaskletError
from hadoop_tasklets.results import StepStatus
from hadoop_tasklets.utils.helpers import setup_logging
from hadoop_tasklets.workflow.jobs import (
    INIT_SCRIPT_STEP,
    TaskletJob,
    build_launch_request,
    create_job_submitter,
)

logger = logging.getLogger(__name__)

PRESETS = ["hashtags", "pig-password", "local"]


def _load_config(config_path: str | None, preset: str | None) -> JobConfig:
    if config_path and preset:
        raise click.UsageError("Pass either CONFIG or --preset, not both")
    if preset:
        return JobConfig.from_preset(preset)
    if not config_path:
        raise click.UsageError("Missing CONFIG (a .yaml or .properties file) or --preset")
    try:
        return JobConfig.from_file(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


def _apply_overrides(
    config: JobConfig,
    engine: str | None,
    filesystem: str | None,
    no_script: bool,
) -> JobConfig:
    if engine:
        config.engine = engine
    if filesystem:
        config.hadoop.filesystem = filesystem
    if no_script:
        config.script.enabled = False
    return config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool):
    """Hadoop Tasklets - stage data on HDFS and launch Spark or Pig jobs."""
    level = "DEBUG" if verbose else "INFO"
    setup_logging(level)


@main.command("list-presets")
def list_presets():
    """List available configuration presets."""
    click.echo("\nAvailable Presets:")
    click.echo("-" * 60)

    for name in PRESETS:
        config = JobConfig.from_preset(name)
        click.echo(f"  {name:15} {config.engine:6} {config.input_dir} -> {config.output_dir}")

    click.echo()


@main.command()
@click.argument("config_path", required=False, type=click.Path(exists=True))
@click.option("--preset", type=click.Choice(PRESETS), default=None, help="Use a preset config")
@click.option("--engine", type=click.Choice(["spark", "pig"]), default=None, help="Override engine")
@click.option(
    "--filesystem",
    type=click.Choice(["hdfs", "local", "memory"]),
    default=None,
    help="Override filesystem client",
)
@click.option("--no-script", is_flag=True, help="Skip the init script step")
@click.option("--dry-run", is_flag=True, help="Print the submit command without running anything")
@click.pass_context
def run(
    ctx: click.Context,
    config_path: str | None,
    preset: str | None,
    engine: str | None,
    filesystem: str | None,
    no_script: bool,
    dry_run: bool,
):
    """Run the init script and launch the configured job."""
    config = _apply_overrides(_load_config(config_path, preset), engine, filesystem, no_script)

    if dry_run:
        try:
            request = build_launch_request(config)
            request.validate()
            command = create_job_submitter(config).build_command(request)
        except TaskletError as e:
            raise click.ClickException(str(e)) from e
        click.echo(" ".join(command))
        return

    click.echo(f"Batch job [{config.name}] starting...")
    workflow_run = TaskletJob(config).run()
    click.echo(workflow_run.summary())
    ctx.exit(workflow_run.exit_code)


@main.command()
@click.argument("config_path", required=False, type=click.Path(exists=True))
@click.option("--preset", type=click.Choice(PRESETS), default=None, help="Use a preset config")
@click.option(
    "--filesystem",
    type=click.Choice(["hdfs", "local", "memory"]),
    default=None,
    help="Override filesystem client",
)
@click.pass_context
def script(ctx: click.Context, config_path: str | None, preset: str | None, filesystem: str | None):
    """Run only the init script."""
    config = _apply_overrides(_load_config(config_path, preset), None, filesystem, False)
    job = TaskletJob(config)

    result = job.run_init_script()
    if result.status is StepStatus.COMPLETED:
        click.echo(f"{INIT_SCRIPT_STEP}: {result.status.value}")
        ctx.exit(0)

    kind = result.error_kind.value if result.error_kind else "ERROR"
    click.echo(f"{INIT_SCRIPT_STEP}: {result.status.value} ({kind}: {result.diagnostic})")
    ctx.exit(1)


@main.command("show-config")
@click.argument("config_path", required=False, type=click.Path(exists=True))
@click.option("--preset", type=click.Choice(PRESETS), default=None, help="Use a preset config")
def show_config(config_path: str | None, preset: str | None):
    """Print the resolved configuration as YAML."""
    config = _load_config(config_path, preset)
    click.echo(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))


@main.command("init-config")
@click.argument("preset", type=click.Choice(PRESETS))
@click.argument("output", type=click.Path())
def init_config(preset: str, output: str):
    """Write a preset configuration to a YAML file."""
    JobConfig.from_preset(preset).to_yaml(output)
    click.echo(f"[OK] Wrote {preset} config to {output}")


if __name__ == "__main__":
    main()
