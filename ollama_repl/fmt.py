"""Terminal output using Rich.

Diagnostics (info, warnings, errors, debug lines) go to stderr; the
transcript (assistant text, execution reports, context dumps, listings)
goes to stdout.
"""

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

_console = Console(stderr=True)
_out = Console(highlight=False)
_debug = False


def init(*, color: bool = False, no_color: bool = False, debug: bool = False) -> None:
    """Reconfigure the module-level consoles from CLI flags.

    Call once at startup, before any output.
    """
    global _console, _out, _debug
    kwargs: dict = {}
    if color:
        kwargs["force_terminal"] = True
        kwargs["no_color"] = False
    if no_color:
        kwargs["no_color"] = True
    _console = Console(stderr=True, **kwargs)
    _out = Console(highlight=False, **kwargs)
    _debug = debug


def is_debug() -> bool:
    return _debug


# -- Diagnostics -------------------------------------------------------------


def info(msg: str) -> None:
    _console.print(Text(msg, style="dim"))


def warning(msg: str) -> None:
    line = Text()
    line.append("⚠ Warning: ", style="yellow")
    line.append(msg, style="yellow")
    _console.print(line)


def error(msg: str) -> None:
    line = Text()
    line.append("[Error] ", style="bold red")
    line.append(msg, style="red")
    _console.print(line)


def api_error(msg: str) -> None:
    line = Text()
    line.append("[API Error] ", style="bold red")
    line.append(msg, style="red")
    _console.print(line)


def unexpected_error(label: str, exc: BaseException, trace: str = "") -> None:
    line = Text()
    line.append(f"[{label}] ", style="bold red")
    line.append(f"{type(exc).__name__}: {exc}", style="red")
    _console.print(line)
    if trace and _debug:
        _console.print(Text(trace.rstrip("\n"), style="dim"))


def debug(msg: str) -> None:
    """Print a diagnostic line, only when debug verbosity is on."""
    if _debug:
        _console.print(Text(f"[Debug] {msg}", style="dim magenta"))


# -- Transcript --------------------------------------------------------------


def say(msg: str = "", style: str | None = None) -> None:
    _out.print(Text(msg, style=style or ""))


def banner(model: str) -> None:
    _out.print(Text("Welcome to Ollama REPL!", style="bold"))
    _out.print(Text(f"Using model: {model}"))
    _out.print(Text("Type `/help` for commands.", style="dim"))


def mode_switched(name: str) -> None:
    _out.print(Text(f"Switched to {name} mode.", style="cyan"))


def assistant_prefix() -> None:
    f = _out.file
    f.write("\nAssistant: ")
    f.flush()


def stream_fragment(text: str) -> None:
    """Echo one streamed fragment as-is, unbuffered."""
    f = _out.file
    f.write(text)
    f.flush()


def stream_end() -> None:
    f = _out.file
    f.write("\n")
    f.flush()


def executing(label: str) -> None:
    _out.print(Text(f"{label} Executing...", style="dim"))


def execution_report(label: str, stdout: str, stderr: str, error_details: str = "") -> None:
    if error_details:
        _out.print(Text(f"[{label} Execution Error]", style="bold red"))
        _out.print(Text(error_details, style="red"))
    else:
        _out.print(Text(f"[{label} Execution Result]", style="bold green"))
    _out.print(Text("--- STDOUT ---", style="cyan"))
    _out.print(Text(stdout.strip() or "(empty)"))
    _out.print(Text("--- STDERR ---", style="cyan"))
    _out.print(Text(stderr.strip() or "(empty)"))
    _out.print(Text("--------------", style="cyan"))


def context_dump(messages) -> None:
    _out.print(Rule("Conversation Context", style="cyan"))
    if not messages:
        _out.print(Text("(empty)", style="dim"))
    for index, msg in enumerate(messages, start=1):
        _out.print(Text(f"[{index}] {msg.role.value.capitalize()}:", style="bold"))
        _out.print(Text(msg.content))
        _out.print(Text("---", style="dim"))
    _out.print(Text(f"Total messages: {len(messages)}"))
    _out.print(Rule(style="cyan"))


def model_list(models: list[str], current: str) -> None:
    _out.print(Text("Available models:", style="bold"))
    for name in models:
        style = "green" if name == current else ""
        _out.print(Text(f"- {name}", style=style))
    _out.print()
    _out.print(Text(f"Current model: {current}"))
    _out.print()
    _out.print(
        Text(
            "Tip: Type '/model' followed by at least 3 characters and press Tab for autocompletion",
            style="dim",
        )
    )


def help_text(text: str) -> None:
    _out.print(Text(text))
