"""Job submitters: hand a LaunchRequest to the cluster and wait for it."""

import logging
import re
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable

from hadoop_tasklets.errors import ConfigurationError, SubmissionError
from hadoop_tasklets.launcher.request import LaunchRequest
from hadoop_tasklets.results import JobOutcome, JobState
from hadoop_tasklets.scripting.template import PigSession, PigTemplate

logger = logging.getLogger(__name__)

_APP_ID_RE = re.compile(r"application_\d+_\d+")
_FINAL_STATUS_RE = re.compile(r"final status:\s*(\w+)", re.IGNORECASE)
_DIAGNOSTICS_RE = re.compile(r"diagnostics:\s*(.*)", re.IGNORECASE)


class JobSubmitter(ABC):
    """Abstract base class for external job submission."""

    @abstractmethod
    def build_command(self, request: LaunchRequest) -> list[str]:
        """Return the command line that would submit the request."""
        pass

    @abstractmethod
    def submit(self, request: LaunchRequest) -> JobOutcome:
        """Submit the request and block until the job reaches a terminal state.

        Raises:
            SubmissionError: when the job was never accepted by the cluster.
        """
        pass


class SparkYarnSubmitter(JobSubmitter):
    """Submit Spark applications to YARN through ``spark-submit``.

    Runs in cluster deploy mode with ``spark.yarn.submit.waitAppCompletion``
    so the call returns only once YARN reports a final status.
    """

    def __init__(
        self,
        spark_submit: str = "spark-submit",
        master: str = "yarn",
        deploy_mode: str = "cluster",
        queue: str | None = None,
        fs_uri: str | None = None,
        resource_manager: str | None = None,
        command_runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.spark_submit = spark_submit
        self.master = master
        self.deploy_mode = deploy_mode
        self.queue = queue
        self.fs_uri = fs_uri
        self.resource_manager = resource_manager
        self._run_command = command_runner

    def _conf(self, request: LaunchRequest) -> dict[str, str]:
        conf = {"spark.yarn.submit.waitAppCompletion": "true"}
        if self.fs_uri:
            conf["spark.hadoop.fs.defaultFS"] = self.fs_uri
        if self.resource_manager:
            conf["spark.hadoop.yarn.resourcemanager.hostname"] = self.resource_manager
        conf.update(request.spark_conf)
        return conf

    def build_command(self, request: LaunchRequest) -> list[str]:
        app_jar, *extra_jars = request.resource_artifact_uris

        cmd = [
            self.spark_submit,
            "--master",
            self.master,
            "--deploy-mode",
            self.deploy_mode,
            "--class",
            request.application_entry_point,
            "--num-executors",
            str(request.executor_count),
            "--executor-memory",
            request.executor_memory,
        ]
        if request.app_name:
            cmd.extend(["--name", request.app_name])
        if self.queue:
            cmd.extend(["--queue", self.queue])
        if extra_jars:
            cmd.extend(["--jars", ",".join(extra_jars)])
        for key, value in self._conf(request).items():
            cmd.extend(["--conf", f"{key}={value}"])

        cmd.append(app_jar)
        cmd.extend(request.arguments)
        return cmd

    def submit(self, request: LaunchRequest) -> JobOutcome:
        cmd = self.build_command(request)
        logger.info(f"Submitting Spark application: {' '.join(cmd)}")

        try:
            result = self._run_command(cmd, capture_output=True, text=True)
        except OSError as e:
            raise SubmissionError(f"Could not run {self.spark_submit}: {e}") from e

        output = f"{result.stdout or ''}\n{result.stderr or ''}"
        for line in output.splitlines():
            if line.strip():
                logger.debug(f"[spark-submit] {line}")

        return self._parse_outcome(output, result.returncode)

    def _parse_outcome(self, output: str, returncode: int) -> JobOutcome:
        app_ids = _APP_ID_RE.findall(output)
        application_id = app_ids[0] if app_ids else None

        statuses = _FINAL_STATUS_RE.findall(output)
        final_status = statuses[-1].upper() if statuses else None

        diagnostics = [d.strip() for d in _DIAGNOSTICS_RE.findall(output)]
        diagnostic = next((d for d in reversed(diagnostics) if d and d != "N/A"), None)

        tail = [line.strip() for line in output.splitlines() if line.strip()][-1:]
        if application_id is None and returncode != 0:
            # only YARN masters report an application id; local runs never do
            if self.master.startswith("yarn"):
                message = tail[0] if tail else f"exit code {returncode}"
                raise SubmissionError(f"spark-submit failed before YARN accepted the job: {message}")
            if diagnostic is None and tail:
                diagnostic = tail[0]

        if final_status == "KILLED":
            state = JobState.KILLED
        elif final_status == "FAILED" or returncode != 0:
            state = JobState.FAILED
        else:
            state = JobState.SUCCEEDED

        if state is not JobState.SUCCEEDED and diagnostic is None:
            diagnostic = f"exit code {returncode}" if returncode else f"final status {final_status}"

        logger.info(f"Application {application_id} finished: {state.value}")
        return JobOutcome(
            state,
            diagnostic=diagnostic if state is not JobState.SUCCEEDED else None,
            application_id=application_id,
            exit_code=returncode,
        )


class PigSubmitter(JobSubmitter):
    """Run a Pig script through a :class:`PigTemplate`.

    Arguments of the form ``key=value`` are passed as extra ``-param``
    substitutions on top of the request's parameters.
    """

    def __init__(self, template: PigTemplate | None = None, **session_kwargs):
        if template is None:
            template = PigTemplate(lambda: PigSession(**session_kwargs))
        self.template = template

    @staticmethod
    def _parameters(request: LaunchRequest) -> dict[str, str]:
        parameters = dict(request.parameters)
        for argument in request.arguments:
            key, sep, value = argument.partition("=")
            if not sep or not key:
                raise ConfigurationError(f"Pig arguments must be key=value, got {argument!r}")
            parameters[key] = value
        return parameters

    def build_command(self, request: LaunchRequest) -> list[str]:
        session = self.template.session_factory()
        return session.build_command(
            request.application_entry_point,
            self._parameters(request),
            request.resource_artifact_uris,
        )

    def submit(self, request: LaunchRequest) -> JobOutcome:
        parameters = self._parameters(request)
        return self.template.run_script(
            request.application_entry_point,
            parameters,
            request.resource_artifact_uris,
        )


def create_submitter(
    engine: str,
    **kwargs,
) -> JobSubmitter:
    """Factory function to create job submitters."""
    submitters = {
        "spark": SparkYarnSubmitter,
        "pig": PigSubmitter,
    }

    if engine not in submitters:
        raise ValueError(f"Unknown engine: {engine}. Available: {list(submitters.keys())}")

    return submitters[engine](**kwargs)
