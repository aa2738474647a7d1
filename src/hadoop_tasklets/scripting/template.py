"""Scoped access to Pig: acquire a session, run a callback, always release."""

import logging
import re
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from hadoop_tasklets.errors import (
    ConfigurationError,
    ExternalRuntimeError,
    SubmissionError,
    TaskletError,
)
from hadoop_tasklets.results import JobOutcome, JobState

logger = logging.getLogger(__name__)

T = TypeVar("T")

_JOB_ID_RE = re.compile(r"job_\d+_\d+")
_PIG_ERROR_RE = re.compile(r"ERROR\s+\d+:.*")

# Pig exits with these codes when the script never reached the cluster
# (4: illegal arguments, 7: parse error).
_REJECTED_EXIT_CODES = {4, 7}


class PigSession:
    """Handle to the ``pig`` launcher for the lifetime of one callback."""

    def __init__(
        self,
        pig_command: str = "pig",
        exec_type: str = "mapreduce",
        properties: Mapping[str, str] | None = None,
        command_runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.pig_command = pig_command
        self.exec_type = exec_type
        self.properties = dict(properties or {})
        self._run_command = command_runner
        self._statements: list[str] = []
        self._work_dir: Path | None = None

    @property
    def is_open(self) -> bool:
        return self._work_dir is not None

    def open(self) -> None:
        self._work_dir = Path(tempfile.mkdtemp(prefix="pig-session-"))
        logger.debug(f"Opened Pig session in {self._work_dir}")

    def close(self) -> None:
        if self._work_dir is not None:
            shutil.rmtree(self._work_dir, ignore_errors=True)
            logger.debug("Closed Pig session")
        self._work_dir = None
        self._statements.clear()

    def register_query(self, statement: str) -> None:
        """Queue a Pig Latin statement for :meth:`execute_queries`."""
        self._statements.append(statement.rstrip().rstrip(";") + ";")

    def build_command(
        self,
        script: str,
        parameters: Mapping[str, str] | None = None,
        jars: tuple[str, ...] | list[str] = (),
    ) -> list[str]:
        cmd = [self.pig_command]
        for key, value in self.properties.items():
            cmd.append(f"-D{key}={value}")
        if jars:
            cmd.append(f"-Dpig.additional.jars={':'.join(jars)}")
        cmd.extend(["-x", self.exec_type])
        for key, value in (parameters or {}).items():
            cmd.extend(["-param", f"{key}={value}"])
        cmd.extend(["-f", script])
        return cmd

    def run_script(
        self,
        script: str,
        parameters: Mapping[str, str] | None = None,
        jars: tuple[str, ...] | list[str] = (),
    ) -> JobOutcome:
        """Run a Pig script file and wait for it to finish."""
        if not self.is_open:
            raise ConfigurationError("Pig session is not open")

        cmd = self.build_command(script, parameters, jars)
        logger.info(f"Running Pig: {' '.join(cmd)}")
        try:
            result = self._run_command(cmd, capture_output=True, text=True)
        except OSError as e:
            raise SubmissionError(f"Could not run {self.pig_command}: {e}") from e

        output = f"{result.stdout or ''}\n{result.stderr or ''}"
        for line in output.splitlines():
            if line.strip():
                logger.debug(f"[pig] {line}")

        job_ids = _JOB_ID_RE.findall(output)
        application_id = job_ids[-1] if job_ids else None

        if result.returncode == 0:
            return JobOutcome(JobState.SUCCEEDED, application_id=application_id, exit_code=0)

        errors = _PIG_ERROR_RE.findall(output)
        diagnostic = errors[-1].strip() if errors else f"exit code {result.returncode}"
        if result.returncode in _REJECTED_EXIT_CODES:
            raise SubmissionError(diagnostic)
        return JobOutcome(
            JobState.FAILED,
            diagnostic=diagnostic,
            application_id=application_id,
            exit_code=result.returncode,
        )

    def execute_queries(self, parameters: Mapping[str, str] | None = None) -> JobOutcome:
        """Write the registered statements to a script and run it."""
        if not self.is_open:
            raise ConfigurationError("Pig session is not open")
        if not self._statements:
            raise ConfigurationError("No Pig statements registered")

        script = self._work_dir / "queries.pig"
        script.write_text("\n".join(self._statements) + "\n")
        return self.run_script(str(script), parameters)


@contextmanager
def pig_session(factory: Callable[[], PigSession] = PigSession) -> Iterator[PigSession]:
    """Open a session from factory and close it on every exit path."""
    session = factory()
    session.open()
    try:
        yield session
    finally:
        session.close()


class PigTemplate:
    """Runs callbacks against a fresh Pig session.

    Errors raised inside the callback are translated into the tasklet
    error kinds, so callers only ever see :class:`TaskletError`.
    """

    def __init__(self, session_factory: Callable[[], PigSession] = PigSession):
        self.session_factory = session_factory

    def execute(self, callback: Callable[[PigSession], T]) -> T:
        try:
            with pig_session(self.session_factory) as session:
                return callback(session)
        except TaskletError:
            raise
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Pig callback rejected its input: {e}") from e
        except OSError as e:
            raise SubmissionError(f"Pig callback could not reach Pig: {e}") from e
        except Exception as e:
            raise ExternalRuntimeError(f"Pig callback failed: {e}") from e

    def run_script(
        self,
        script: str,
        parameters: Mapping[str, str] | None = None,
        jars: tuple[str, ...] | list[str] = (),
    ) -> JobOutcome:
        return self.execute(lambda session: session.run_script(script, parameters, jars))

    def run_queries(self, statements: list[str], **parameters: Any) -> JobOutcome:
        def callback(session: PigSession) -> JobOutcome:
            for statement in statements:
                session.register_query(statement)
            return session.execute_queries(parameters)

        return self.execute(callback)
