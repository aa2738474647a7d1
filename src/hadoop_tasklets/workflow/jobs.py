"""Assemble the init-script + launch workflow from a JobConfig."""

import logging

from hadoop_tasklets.config.job_config import JobConfig
from hadoop_tasklets.errors import TaskletError
from hadoop_tasklets.fs.backends import DistributedFileSystem, create_filesystem
from hadoop_tasklets.launcher.launcher import JobLauncher
from hadoop_tasklets.launcher.request import LaunchRequest
from hadoop_tasklets.launcher.submitters import JobSubmitter, create_submitter
from hadoop_tasklets.results import StepResult, WorkflowRun
from hadoop_tasklets.scripting.script import ScriptRunner
from hadoop_tasklets.workflow.orchestrator import Step, StepOrchestrator

logger = logging.getLogger(__name__)

INIT_SCRIPT_STEP = "init-script"


def create_filesystem_client(config: JobConfig) -> DistributedFileSystem:
    """Create the filesystem client named by ``config.hadoop.filesystem``."""
    hadoop = config.hadoop
    if hadoop.filesystem == "hdfs":
        return create_filesystem(
            "hdfs",
            fs_uri=hadoop.fs_uri,
            hdfs_command=hadoop.hdfs_command,
            skip_trash=hadoop.skip_trash,
        )
    if hadoop.filesystem == "local":
        return create_filesystem("local", root=hadoop.local_root)
    return create_filesystem(hadoop.filesystem)


def create_job_submitter(config: JobConfig) -> JobSubmitter:
    """Create the submitter for ``config.engine``."""
    if config.engine == "pig":
        pig = config.pig
        properties = dict(pig.properties)
        if config.hadoop.fs_uri:
            properties.setdefault("fs.defaultFS", config.hadoop.fs_uri)
        if config.hadoop.resource_manager:
            properties.setdefault("yarn.resourcemanager.hostname", config.hadoop.resource_manager)
        return create_submitter(
            "pig",
            pig_command=pig.pig_command,
            exec_type=pig.exec_type,
            properties=properties,
        )

    spark = config.spark
    return create_submitter(
        "spark",
        spark_submit=spark.spark_submit,
        master=spark.master,
        deploy_mode=spark.deploy_mode,
        queue=spark.queue,
        fs_uri=config.hadoop.fs_uri,
        resource_manager=config.hadoop.resource_manager,
    )


def build_launch_request(config: JobConfig) -> LaunchRequest:
    """Build the launch request; placeholders in arguments are resolved here."""
    arguments = config.resolved_arguments()
    if config.engine == "pig":
        return LaunchRequest.from_pig_config(config.pig, arguments)
    return LaunchRequest.from_spark_config(config.spark, arguments)


class TaskletJob:
    """Two-step batch job: run the init script, then launch the external job.

    Components are composed explicitly: filesystem client, script runner,
    job launcher, orchestrator. Any of them can be injected for testing.
    """

    def __init__(
        self,
        config: JobConfig,
        fs: DistributedFileSystem | None = None,
        submitter: JobSubmitter | None = None,
        orchestrator: StepOrchestrator | None = None,
    ):
        self.config = config
        self.fs = fs if fs is not None else create_filesystem_client(config)
        self.submitter = submitter if submitter is not None else create_job_submitter(config)
        self.script_runner = ScriptRunner(self.fs)
        self.launcher = JobLauncher(self.submitter)
        self.orchestrator = orchestrator or StepOrchestrator()

    @property
    def launch_step_name(self) -> str:
        return f"{self.config.engine}-tasklet"

    def run_init_script(self) -> StepResult:
        try:
            task = self.config.script_task()
        except TaskletError as e:
            return StepResult.from_error(e)
        if task is None:
            return StepResult.completed()
        return self.script_runner.run(task)

    def launch(self) -> StepResult:
        try:
            request = build_launch_request(self.config)
        except TaskletError as e:
            logger.error(f"Could not build launch request: {e}")
            return StepResult.from_error(e)
        return self.launcher.launch(request)

    def steps(self) -> list[Step]:
        steps: list[Step] = []
        if self.config.script.enabled:
            steps.append((INIT_SCRIPT_STEP, self.run_init_script))
        steps.append((self.launch_step_name, self.launch))
        return steps

    def run(self) -> WorkflowRun:
        return self.orchestrator.run_workflow(self.steps(), name=self.config.name)


def run_job(config: JobConfig, **components) -> int:
    """Run the configured job and return a process exit code (0 = COMPLETED)."""
    logger.info(f"Batch job [{config.name}] starting")
    run = TaskletJob(config, **components).run()
    logger.info(f"Batch job [{config.name}] finished: {run.status.value}")
    return run.exit_code
