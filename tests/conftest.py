"""Shared fixtures: in-memory filesystem, staged data file, fake cluster."""

import subprocess

import pytest

from hadoop_tasklets.fs.backends import InMemoryFileSystem
from hadoop_tasklets.launcher.submitters import JobSubmitter
from hadoop_tasklets.results import JobOutcome, JobState


class RecordingSubmitter(JobSubmitter):
    """Fake resource manager returning a canned outcome and recording calls."""

    def __init__(self, outcome: JobOutcome | None = None, error: Exception | None = None):
        self.outcome = outcome or JobOutcome(JobState.SUCCEEDED, application_id="application_1_0001")
        self.error = error
        self.requests = []

    @property
    def called(self) -> bool:
        return bool(self.requests)

    def build_command(self, request):
        return ["fake-submit", request.application_entry_point, *request.arguments]

    def submit(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.outcome


class FakeCommandRunner:
    """Stands in for subprocess.run; records commands, replays canned results."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "", error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.commands: list[list[str]] = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(list(cmd))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture()
def memory_fs():
    return InMemoryFileSystem()


@pytest.fixture()
def tweets_file(tmp_path):
    """A local data file standing in for data/tweets.dat."""
    path = tmp_path / "data" / "tweets.dat"
    path.parent.mkdir(parents=True)
    path.write_text("#spark is great\n#hadoop #spark\n")
    return path


@pytest.fixture()
def make_submitter():
    return RecordingSubmitter


@pytest.fixture()
def make_runner():
    return FakeCommandRunner
