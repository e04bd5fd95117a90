"""Slash commands and the dispatcher that routes them."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from . import fmt
from .context import ContextManager, Role
from .errors import FileIngestError
from .files import format_file_message, read_context_file
from .modes import ModeTag

COMMAND_PREFIX = "/"

HELP_TEXT = """\
--- Ollama REPL Help ---
Modes:
  /llm              Switch to durable LLM interaction mode (default).
  /python           Switch to durable Python execution mode (alias: /py).
  /shell            Switch to durable Shell execution mode.

One-off actions (stay in the current durable mode):
  /llm {prompt}     Send a single prompt to the LLM.
  /python {code}    Execute a single snippet of Python code.
  /shell {command}  Execute a single shell command.

Commands:
  /file {path}      Add the content of the specified file to the context.
  /model            List available Ollama models.
  /model {name}     Switch to the specified Ollama model (allows prefix matching).
                    Type at least 3 characters after '/model ' and press Tab to complete.
  /context          Display the current conversation context.
  /clear            Clear the conversation context (asks for confirmation).
  /help             Show this help message.
  /exit, /quit      Exit the REPL.
  Ctrl+C            Interrupt the current action.
  Ctrl+D            Exit the REPL (at an empty prompt).

Python snippets run in a fresh namespace each time; nothing carries over.
------------------------"""


@dataclass
class CommandContext:
    """What every command gets to work with."""

    session: Any
    context: ContextManager
    output: Any = fmt


class Command(ABC):
    @abstractmethod
    def execute(self, args: str, ctx: CommandContext) -> None: ...


def split_command(raw: str) -> tuple[str, str]:
    """Split ``/word rest of line`` into (lowercased word, unsplit remainder)."""
    parts = raw.strip().split(None, 1)
    if not parts:
        return "", ""
    return parts[0].lower(), parts[1].strip() if len(parts) > 1 else ""


class CommandDispatcher:
    """Maps command words to Command objects and invokes them with a shared context."""

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx
        self.commands: dict[str, Command] = {}

    def register(self, name: str, command: Command) -> None:
        name = name.lower()
        if not name.startswith(COMMAND_PREFIX):
            name = COMMAND_PREFIX + name
        self.commands[name] = command

    def command_names(self) -> list[str]:
        return sorted(self.commands)

    def dispatch(self, raw: str) -> None:
        token, args = split_command(raw)
        command = self.commands.get(token)
        if command is None:
            self.ctx.output.error(
                f"Unknown command: {token}. Type /help for available commands."
            )
            return
        command.execute(args, self.ctx)


# -- Mode commands -----------------------------------------------------------


class ModeCommand(Command):
    """``/llm``, ``/python``, ``/shell``: switch durably, or run one input."""

    def __init__(self, tag: ModeTag):
        self.tag = tag

    def execute(self, args: str, ctx: CommandContext) -> None:
        if args:
            ctx.session.run_once(self.tag, args)
        else:
            ctx.session.switch_mode(self.tag)


# -- Context commands --------------------------------------------------------


class FileCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        if not args:
            ctx.output.say("Usage: /file {file_path}")
            return
        try:
            path, content = read_context_file(args)
        except FileIngestError as e:
            ctx.output.error(str(e))
            return
        ctx.context.add(Role.SYSTEM, format_file_message(path, content))
        ctx.output.say(f"Added content from {path.name} to context.")


class ContextCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        ctx.output.context_dump(ctx.context.all())


class ClearCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        answer = ctx.session.read_confirmation(
            "Are you sure you want to clear the conversation history? (y/N): "
        )
        if (answer or "").strip().lower() == "y":
            ctx.context.clear()
            ctx.output.say("Conversation context cleared.")
        else:
            ctx.output.say("Clear context cancelled.")


# -- Model command -----------------------------------------------------------


@dataclass(frozen=True)
class ModelResolution:
    status: str  # "exact", "prefix", "ambiguous" or "not_found"
    model: str | None = None
    matches: tuple[str, ...] = ()


def resolve_model_name(target: str, available: list[str]) -> ModelResolution:
    """Exact match wins; otherwise a unique prefix match; otherwise report why not."""
    if target in available:
        return ModelResolution("exact", target)
    matches = tuple(m for m in available if m.startswith(target))
    if len(matches) == 1:
        return ModelResolution("prefix", matches[0], matches)
    if matches:
        return ModelResolution("ambiguous", None, matches)
    return ModelResolution("not_found")


class ModelCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        session = ctx.session
        out = ctx.output
        available = session.model_cache.get_models()

        if not args:
            if not available:
                out.say("No models available on the Ollama host.")
            else:
                out.model_list(available, session.client.current_model)
            return

        target = args.strip()
        resolution = resolve_model_name(target, available)
        if resolution.status == "ambiguous":
            out.say(f"Ambiguous model name '{target}'. Matches:")
            for name in resolution.matches:
                out.say(f"- {name}")
            return
        if resolution.status == "not_found":
            out.error(f"Model '{target}' not found.")
            if available:
                out.say(f"Available models: {', '.join(available)}")
            return

        session.client.set_model(resolution.model)
        out.say(f"Model set to '{resolution.model}'.")


# -- Misc --------------------------------------------------------------------


class HelpCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        ctx.output.help_text(HELP_TEXT)


class ExitCommand(Command):
    def execute(self, args: str, ctx: CommandContext) -> None:
        ctx.output.say("Exiting.")
        raise SystemExit(0)


def default_dispatcher(ctx: CommandContext) -> CommandDispatcher:
    dispatcher = CommandDispatcher(ctx)
    dispatcher.register("/llm", ModeCommand(ModeTag.LLM))
    dispatcher.register("/python", ModeCommand(ModeTag.PYTHON))
    dispatcher.register("/py", ModeCommand(ModeTag.PYTHON))
    dispatcher.register("/shell", ModeCommand(ModeTag.SHELL))
    dispatcher.register("/file", FileCommand())
    dispatcher.register("/model", ModelCommand())
    dispatcher.register("/context", ContextCommand())
    dispatcher.register("/clear", ClearCommand())
    dispatcher.register("/help", HelpCommand())
    dispatcher.register("/exit", ExitCommand())
    dispatcher.register("/quit", ExitCommand())
    return dispatcher
