"""Parameterized filesystem scripts run before a job is launched.

Two script languages are supported:

``shell``
    One command per line, ``#`` starts a comment, tokens follow shell quoting::

        if-exists ${input_dir}: rmr ${input_dir}
        mkdir ${input_dir}
        put ${local_data} ${input_dir}

``embedded``
    A Python snippet run with ``fsh`` (an :class:`FsShell`) and every
    placeholder bound as a variable::

        if fsh.test(input_dir):
            fsh.rmr(input_dir)
        fsh.put(local_data, input_dir)

Both languages accept ``${name}`` references, which are substituted from
the task's sources before anything runs. In shell scripts each value is
shell-quoted so it always stays a single token.

Embedded scripts are executed in-process with full interpreter access; they
are trusted operator configuration, never user input. Names they read that
are not bound by the script, the sources, ``fsh`` or builtins are rejected
before the first command runs.
"""

import ast
import builtins
import logging
import re
import shlex
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from hadoop_tasklets.errors import ConfigurationError, FilesystemError, TaskletError
from hadoop_tasklets.fs.backends import DistributedFileSystem
from hadoop_tasklets.results import StepResult

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.\-]*)\}")

# command name -> number of path arguments
SHELL_COMMANDS = {
    "test": 1,
    "rmr": 1,
    "mkdir": 1,
    "put": 2,
    "ls": 1,
}


class ScriptLanguage(str, Enum):
    SHELL = "shell"
    EMBEDDED = "embedded"


@dataclass(frozen=True)
class ScriptTask:
    """A script body plus the placeholder values it is rendered with."""

    body: str
    sources: Mapping[str, str] = field(default_factory=dict)
    language: ScriptLanguage = ScriptLanguage.SHELL

    def __post_init__(self):
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))
        object.__setattr__(self, "language", ScriptLanguage(self.language))

    @classmethod
    def from_file(
        cls,
        path: str,
        sources: Mapping[str, str] | None = None,
        language: ScriptLanguage | str | None = None,
    ) -> "ScriptTask":
        """Load a script body from disk. ``.py`` files default to embedded."""
        script_path = Path(path)
        if not script_path.is_file():
            raise ConfigurationError(f"Script file not found: {path}")
        if language is None:
            language = ScriptLanguage.EMBEDDED if script_path.suffix == ".py" else ScriptLanguage.SHELL
        return cls(body=script_path.read_text(), sources=sources or {}, language=language)

    @property
    def placeholders(self) -> set[str]:
        return set(PLACEHOLDER_RE.findall(self.body))


def resolve_placeholders(
    text: str,
    sources: Mapping[str, str],
    quote: Callable[[str], str] | None = None,
) -> str:
    """Substitute every ``${name}`` in text.

    Args:
        text: Text containing ``${name}`` references
        sources: Placeholder values
        quote: Optional escaping applied to each substituted value

    Raises:
        ConfigurationError: listing all names that have no value.
    """
    missing = sorted({name for name in PLACEHOLDER_RE.findall(text) if name not in sources})
    if missing:
        raise ConfigurationError(f"Unresolved placeholder(s): {', '.join(missing)}")

    def substitute(match: re.Match) -> str:
        value = str(sources[match.group(1)])
        return quote(value) if quote else value

    return PLACEHOLDER_RE.sub(substitute, text)


@dataclass(frozen=True)
class ShellCommand:
    """One parsed line of a shell-like script."""

    name: str
    args: tuple[str, ...]
    line_no: int
    condition: str | None = None

    def __str__(self) -> str:
        text = " ".join([self.name, *self.args])
        if self.condition:
            text = f"if-exists {self.condition}: {text}"
        return text


def parse_shell_script(text: str) -> list[ShellCommand]:
    """Parse a rendered shell-like script, validating every line up front."""
    commands = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            raise ConfigurationError(f"line {line_no}: {e}") from e
        if not tokens:
            continue

        condition = None
        if tokens[0] == "if-exists":
            if len(tokens) < 3 or not tokens[1].endswith(":"):
                raise ConfigurationError(
                    f"line {line_no}: expected 'if-exists PATH: COMMAND ...'"
                )
            condition = tokens[1][:-1]
            tokens = tokens[2:]

        name, args = tokens[0], tuple(tokens[1:])
        if name not in SHELL_COMMANDS:
            raise ConfigurationError(
                f"line {line_no}: unknown command {name!r}. "
                f"Available: {sorted(SHELL_COMMANDS)}"
            )
        if len(args) != SHELL_COMMANDS[name]:
            raise ConfigurationError(
                f"line {line_no}: {name} takes {SHELL_COMMANDS[name]} argument(s), got {len(args)}"
            )
        commands.append(ShellCommand(name=name, args=args, line_no=line_no, condition=condition))
    return commands


def unbound_names(tree: ast.AST, known: set[str]) -> list[str]:
    """Names an embedded script reads that neither it, ``known`` nor builtins bind."""
    loaded: set[str] = set()
    bound: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            (loaded if isinstance(node.ctx, ast.Load) else bound).add(node.id)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            bound.add(node.name)
        elif isinstance(node, ast.arg):
            bound.add(node.arg)
        elif isinstance(node, ast.alias):
            bound.add((node.asname or node.name).split(".")[0])
        elif isinstance(node, ast.ExceptHandler) and node.name:
            bound.add(node.name)
    return sorted(loaded - bound - known - set(dir(builtins)))


class FsShell:
    """Filesystem facade handed to scripts as ``fsh``.

    Records every mutating call so a partial failure can be reported.
    """

    def __init__(self, fs: DistributedFileSystem):
        self.fs = fs
        self.applied: list[str] = []

    def test(self, path: str) -> bool:
        return self.fs.exists(path)

    def rmr(self, path: str) -> None:
        logger.info(f"Removing {path}")
        self.fs.remove_recursive(path)
        self.applied.append(f"rmr {path}")

    def mkdir(self, path: str) -> None:
        logger.info(f"Creating {path}")
        self.fs.mkdirs(path)
        self.applied.append(f"mkdir {path}")

    def put(self, local_path: str, remote_path: str) -> None:
        logger.info(f"Copying {local_path} to {remote_path}")
        self.fs.copy_from_local(local_path, remote_path)
        self.applied.append(f"put {local_path} {remote_path}")

    copy_from_local = put

    def ls(self, path: str) -> list[str]:
        entries = self.fs.list_dir(path)
        for entry in entries:
            logger.info(f"  {entry}")
        return entries


class ScriptRunner:
    """Runs a ScriptTask against a filesystem client."""

    def __init__(self, fs: DistributedFileSystem):
        self.fs = fs

    def run(self, task: ScriptTask) -> StepResult:
        """Run the script and report the outcome as a StepResult.

        Configuration problems are detected before the filesystem is touched.
        Mutations are not rolled back when a later command fails.
        """
        shell = FsShell(self.fs)
        try:
            if task.language is ScriptLanguage.SHELL:
                rendered = resolve_placeholders(task.body, task.sources, quote=shlex.quote)
                self._run_shell(parse_shell_script(rendered), shell)
            else:
                rendered = resolve_placeholders(task.body, task.sources)
                self._run_embedded(rendered, task.sources, shell)
        except TaskletError as e:
            logger.error(f"Init script failed: {e}")
            if shell.applied:
                logger.warning(
                    f"Namespace left partially modified, applied before failure: {shell.applied}"
                )
            return StepResult.from_error(e)

        logger.info(f"Init script completed ({len(shell.applied)} change(s))")
        return StepResult.completed()

    def _run_shell(self, commands: list[ShellCommand], shell: FsShell) -> None:
        for command in commands:
            if command.condition is not None and not shell.test(command.condition):
                logger.debug(f"Skipping line {command.line_no}: {command.condition} does not exist")
                continue
            if command.name == "test":
                if not shell.test(command.args[0]):
                    raise FilesystemError(f"line {command.line_no}: {command.args[0]} does not exist")
                continue
            getattr(shell, command.name)(*command.args)

    def _run_embedded(self, code: str, sources: Mapping[str, str], shell: FsShell) -> None:
        try:
            tree = ast.parse(code, "<init-script>")
            compiled = compile(tree, "<init-script>", "exec")
        except SyntaxError as e:
            raise ConfigurationError(f"Invalid embedded script: {e}") from e

        namespace = {name: value for name, value in sources.items() if name.isidentifier()}
        namespace["fsh"] = shell

        unbound = unbound_names(tree, set(namespace))
        if unbound:
            raise ConfigurationError(f"Unresolved name(s) in embedded script: {', '.join(unbound)}")

        try:
            exec(compiled, namespace)
        except TaskletError:
            raise
        except NameError as e:
            raise ConfigurationError(f"Unresolved name in embedded script: {e}") from e
        except Exception as e:
            raise FilesystemError(f"Embedded script failed: {e}") from e
