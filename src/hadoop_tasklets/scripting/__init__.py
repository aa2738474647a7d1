"""Init scripts and the Pig callback template."""

from hadoop_tasklets.scripting.script import (
    FsShell,
    ScriptLanguage,
    ScriptRunner,
    ScriptTask,
    parse_shell_script,
    resolve_placeholders,
)
from hadoop_tasklets.scripting.template import PigSession, PigTemplate, pig_session

__all__ = [
    "FsShell",
    "ScriptLanguage",
    "ScriptRunner",
    "ScriptTask",
    "parse_shell_script",
    "resolve_placeholders",
    "PigSession",
    "PigTemplate",
    "pig_session",
]
