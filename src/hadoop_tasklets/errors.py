"""
Error classes for tasklet execution.

Every failure a tasklet can hit falls into one of four kinds:
- CONFIGURATION: a placeholder, argument or resource setting is missing or
  malformed. Detected before any external call is made.
- FILESYSTEM: a distributed filesystem operation failed (permission, path,
  connectivity).
- SUBMISSION: the external job was never accepted by the resource manager.
- EXTERNAL_RUNTIME: the external job ran and ended failed or killed.

None of these are retried. Steps raise them; the orchestrator catches them
at the step boundary and turns them into a failed StepResult.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure classification reported on a StepResult."""

    CONFIGURATION = "CONFIGURATION"
    FILESYSTEM = "FILESYSTEM"
    SUBMISSION = "SUBMISSION"
    EXTERNAL_RUNTIME = "EXTERNAL_RUNTIME"


class TaskletError(Exception):
    """Base exception for hadoop_tasklets."""

    kind: ErrorKind | None = None


class ConfigurationError(TaskletError):
    """
    A required placeholder, argument or setting is unresolved or malformed.

    Examples:
    - ``${inputDir}`` referenced in a script but not supplied
    - executor count below one
    - memory size literal that is not ``<digits>[k|m|g|t]``
    """

    kind = ErrorKind.CONFIGURATION


class FilesystemError(TaskletError):
    """A distributed filesystem operation failed."""

    kind = ErrorKind.FILESYSTEM


class SubmissionError(TaskletError):
    """
    The job could not be handed to the cluster.

    Examples:
    - spark-submit / pig executable not found
    - resource manager unreachable
    - artifact reference rejected before an application id was assigned
    """

    kind = ErrorKind.SUBMISSION


class ExternalRuntimeError(TaskletError):
    """The external job ran and terminated with failure or was killed."""

    kind = ErrorKind.EXTERNAL_RUNTIME
