"""Execution modes: what a plain (non-command) input line does."""

from abc import ABC, abstractmethod
from enum import Enum

from . import fmt
from .context import ContextManager, Role
from .errors import ApiError, UnknownModeError
from .execution import (
    ExecutionResult,
    format_execution_report,
    run_python_unsafely,
    run_shell_command,
)


class ModeTag(str, Enum):
    LLM = "llm"
    PYTHON = "python"
    SHELL = "shell"


class Mode(ABC):
    """One way of handling input. Modes only touch the context and the terminal."""

    tag: ModeTag
    name: str

    def __init__(self, client, context: ContextManager, output=fmt):
        self.client = client
        self.context = context
        self.output = output

    @abstractmethod
    def prompt(self) -> str: ...

    @abstractmethod
    def handle_input(self, text: str) -> None: ...

    def add_message(self, role: Role, content: str) -> None:
        self.context.add(role, content)


class LlmMode(Mode):
    tag = ModeTag.LLM
    name = "LLM"

    def prompt(self) -> str:
        return "🤖 ❯ "

    def handle_input(self, text: str) -> None:
        # The user message stays in the context even if the call fails.
        self.add_message(Role.USER, text)
        parts: list[str] = []
        self.output.assistant_prefix()
        try:
            for chunk in self.client.chat(self.context.for_api()):
                if chunk.content:
                    self.output.stream_fragment(chunk.content)
                    parts.append(chunk.content)
                if chunk.done:
                    break
        except ApiError as e:
            self.output.stream_end()
            self.output.api_error(f"Error interacting with LLM: {e}")
            return
        self.output.stream_end()

        response = "".join(parts)
        if response:
            self.add_message(Role.ASSISTANT, response)


class _ExecutionMode(Mode):
    """Shared flow for modes that run something locally and report on it."""

    label: str
    glyph: str

    def handle_input(self, text: str) -> None:
        self.output.executing(self.glyph)
        self.add_message(Role.USER, self.describe_request(text))

        result = self.execute(text)

        details = ""
        if result.error is not None:
            details = result.error.describe()
            if result.error.traceback:
                details += f"\nBacktrace:\n{result.error.traceback.rstrip()}"
        self.output.execution_report(self.label, result.stdout, result.stderr, details)
        self.add_message(Role.SYSTEM, format_execution_report(self.label, result))

    def prompt(self) -> str:
        return f"{self.glyph} ❯ "

    @abstractmethod
    def describe_request(self, text: str) -> str: ...

    @abstractmethod
    def execute(self, text: str) -> ExecutionResult: ...


class PythonMode(_ExecutionMode):
    """Runs input as Python code. Each input gets a fresh namespace."""

    tag = ModeTag.PYTHON
    name = "Python"
    label = "Python"
    glyph = "🐍"

    def describe_request(self, text: str) -> str:
        return f"Execute Python code: ```python\n{text}\n```"

    def execute(self, text: str) -> ExecutionResult:
        return run_python_unsafely(text)


class ShellMode(_ExecutionMode):
    tag = ModeTag.SHELL
    name = "Shell"
    label = "Shell"
    glyph = "🐚"

    def describe_request(self, text: str) -> str:
        return f"Execute shell command: ```\n{text}\n```"

    def execute(self, text: str) -> ExecutionResult:
        return run_shell_command(text)


_MODES: dict[ModeTag, type[Mode]] = {
    ModeTag.LLM: LlmMode,
    ModeTag.PYTHON: PythonMode,
    ModeTag.SHELL: ShellMode,
}


class ModeFactory:
    """Builds mode instances by tag; the only place that lists every mode."""

    def __init__(self, client, context: ContextManager, output=fmt):
        self.client = client
        self.context = context
        self.output = output

    def create(self, tag: ModeTag | str) -> Mode:
        try:
            mode_cls = _MODES[ModeTag(tag)]
        except (ValueError, KeyError):
            raise UnknownModeError(f"Unknown mode type '{tag}'") from None
        return mode_cls(self.client, self.context, self.output)
