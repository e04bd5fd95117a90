"""Unsafe local execution of Python code and shell commands.

Nothing here is sandboxed. Everything that runs user-supplied code goes
through run_python_unsafely() or run_shell_command(), so a sandbox can be
slotted in without touching the modes.
"""

import builtins
import contextlib
import io
import re
import shlex
import subprocess
import sys
import traceback
from dataclasses import dataclass

# Any of these means the command line needs /bin/sh to interpret it.
_SHELL_SYNTAX = re.compile(r"[*?{}\[\]<>()~&|\\$;'`\"\n#=%]")
_SHELL_BUILTINS = frozenset(
    {
        "alias", "bg", "break", "case", "cd", "command", "continue", "eval",
        "exec", "exit", "export", "fg", "for", "if", "jobs", "read", "readonly",
        "return", "set", "shift", "source", "trap", "type", "ulimit", "umask",
        "unalias", "unset", "until", "wait", "while", ".",
    }
)


@dataclass(frozen=True)
class ExecutionFailure:
    type_name: str
    message: str
    traceback: str = ""

    def describe(self) -> str:
        return f"Error: {self.type_name}: {self.message}"


@dataclass(frozen=True)
class ExecutionResult:
    stdout: str
    stderr: str
    error: ExecutionFailure | None = None


def _section(text: str) -> str:
    text = text.rstrip("\n")
    return text if text else "(empty)"


def format_execution_report(label: str, result: ExecutionResult) -> str:
    """Render the fixed report appended to the context after every execution."""
    lines = [
        f"System Message: {label} Execution Output",
        "STDOUT:",
        _section(result.stdout),
        "STDERR:",
        _section(result.stderr),
    ]
    if result.error is not None:
        lines += ["Exception:", result.error.describe()]
        if result.error.traceback:
            lines += ["Traceback:", result.error.traceback.rstrip("\n")]
    return "\n".join(lines) + "\n"


def _snippet_builtins() -> dict:
    # site.Quitter closes sys.stdin before raising; the REPL still needs it.
    names = dict(vars(builtins))
    names["exit"] = names["quit"] = sys.exit
    return names


def run_python_unsafely(code: str) -> ExecutionResult:
    """Execute ``code`` in this interpreter with a brand-new global namespace.

    Nothing defined by one call is visible to the next. stdout and stderr
    are captured separately; a raised exception (including SystemExit) is
    returned as data. KeyboardInterrupt propagates.
    """
    out, err = io.StringIO(), io.StringIO()
    namespace = {"__name__": "__main__", "__builtins__": _snippet_builtins()}
    failure = None
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        try:
            exec(compile(code, "<repl>", "exec"), namespace)
        except (Exception, SystemExit) as e:
            # Drop this function's own frame from the trace.
            tb = e.__traceback__.tb_next if e.__traceback__ else None
            failure = ExecutionFailure(
                type_name=type(e).__name__,
                message=str(e),
                traceback="".join(traceback.format_exception(type(e), e, tb)),
            )
    return ExecutionResult(out.getvalue(), err.getvalue(), failure)


def needs_shell(command: str) -> bool:
    if _SHELL_SYNTAX.search(command):
        return True
    words = command.split()
    return not words or words[0] in _SHELL_BUILTINS


def _argv_for(command: str) -> list[str]:
    if sys.platform == "win32":
        return ["cmd.exe", "/c", command]
    if needs_shell(command):
        return ["/bin/sh", "-c", command]
    return shlex.split(command)


def run_shell_command(command: str) -> ExecutionResult:
    """Run ``command`` through the operating system and capture its output.

    A non-zero exit status is not an error: the status is appended to
    stderr. Failing to start the program at all is reported as an
    ExecutionFailure, with the reason also appended to stderr.
    """
    try:
        proc = subprocess.run(
            _argv_for(command),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
    except (OSError, ValueError) as e:
        reason = getattr(e, "strerror", None) or str(e)
        target = getattr(e, "filename", None)
        detail = f"{reason} - {target}" if target else reason
        return ExecutionResult(
            stdout="",
            stderr=f"Execution failed: {detail}",
            error=ExecutionFailure(type(e).__name__, str(e)),
        )

    stderr = proc.stderr.rstrip("\n")
    if proc.returncode != 0:
        status_line = f"Command exited with status: {proc.returncode}"
        stderr = f"{stderr}\n{status_line}" if stderr.strip() else status_line
    return ExecutionResult(proc.stdout, stderr)
