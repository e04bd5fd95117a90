"""The interactive session: owns the current mode and the read/dispatch loop."""

import traceback

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory

from . import fmt
from .client import OllamaClient
from .commands import COMMAND_PREFIX, CommandContext, default_dispatcher
from .context import ContextManager
from .errors import ApiError, ModelNotFoundError, ReplError
from .model_cache import DEFAULT_CACHE_DURATION, ModelCache
from .modes import Mode, ModeFactory, ModeTag

MODEL_COMPLETION_MIN_CHARS = 3


class Session:
    """Single-user REPL session.

    Holds the conversation context, the model cache, the active mode and
    the command dispatcher. Everything runs on the calling thread.
    """

    def __init__(
        self,
        client: OllamaClient,
        *,
        context: ContextManager | None = None,
        model_cache: ModelCache | None = None,
        output=fmt,
        cache_duration: float = DEFAULT_CACHE_DURATION,
        confirm_input=input,
    ):
        self.client = client
        self.context = context if context is not None else ContextManager()
        self.model_cache = model_cache or ModelCache(client, cache_duration)
        self.output = output
        self.mode_factory = ModeFactory(client, self.context, output)
        self.current_mode: Mode = self.mode_factory.create(ModeTag.LLM)
        self.dispatcher = default_dispatcher(CommandContext(self, self.context, output))
        self._confirm_input = confirm_input

    # -- Mode state ----------------------------------------------------------

    def prompt(self) -> str:
        return self.current_mode.prompt()

    def switch_mode(self, tag: ModeTag | str) -> None:
        """Durably replace the current mode."""
        try:
            self.current_mode = self.mode_factory.create(tag)
        except ReplError as e:
            self.output.error(str(e))
            return
        self.output.mode_switched(self.current_mode.name)

    def run_once(self, tag: ModeTag | str, text: str) -> None:
        """Feed one input to a throwaway mode; the durable mode is untouched."""
        try:
            self.mode_factory.create(tag).handle_input(text)
        except ReplError as e:
            self.output.error(str(e))
        except Exception as e:
            mode_name = getattr(tag, "value", tag)
            self.output.unexpected_error(
                f"Unexpected Error during one-off execution in {mode_name} mode",
                e,
                traceback.format_exc(),
            )

    # -- Input handling ------------------------------------------------------

    def read_confirmation(self, question: str) -> str:
        """Ask a yes/no question with a plain read, outside the line editor's history."""
        try:
            return self._confirm_input(question)
        except EOFError:
            return ""

    def process_input(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        if line.startswith(COMMAND_PREFIX):
            self.dispatcher.dispatch(line)
        else:
            self.current_mode.handle_input(line)

    def process_line_safely(self, line: str) -> None:
        """Process one line; only SystemExit escapes."""
        try:
            self.process_input(line)
        except KeyboardInterrupt:
            self.output.say()
            self.output.info("Type /exit or /quit to leave.")
        except ApiError as e:
            self.output.api_error(str(e))
        except Exception as e:
            self.output.unexpected_error("Unexpected Error", e, traceback.format_exc())

    # -- Startup -------------------------------------------------------------

    def startup_check(self) -> None:
        """Warm the model cache and verify the configured model exists.

        A missing model is reported but not fatal; any other connectivity
        failure propagates as ConnectivityError.
        """
        self.model_cache.get_models()
        try:
            self.client.check_connection_and_model()
        except ModelNotFoundError as e:
            self.output.error(str(e))
            self.output.say(f"Available models: {', '.join(e.available_models)}")
            self.output.say(
                "Please select an available model using the command: /model {model_name}"
            )

    # -- Loop ----------------------------------------------------------------

    def run(self, prompt_session=None) -> None:
        """Read lines until EOF or /exit."""
        if prompt_session is None:
            prompt_session = build_prompt_session(self)

        self.output.banner(self.client.current_model)
        while True:
            try:
                line = prompt_session.prompt(self.prompt())
            except KeyboardInterrupt:
                self.output.info("Type /exit or /quit to leave.")
                continue
            except EOFError:
                self.output.say()
                self.output.say("Exiting.")
                return
            self.process_line_safely(line)


def build_prompt_session(session: Session) -> PromptSession:
    """Create the line editor with command and model-name completion."""
    return PromptSession(
        history=InMemoryHistory(),
        completer=ReplCompleter(session),
        complete_while_typing=False,
    )


class ReplCompleter(Completer):
    """Completes command names after ``/`` and model names after ``/model ``.

    Model names are only offered once at least three characters have been
    typed, so a bare Tab doesn't hit the API.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_completions(self, document, complete_event):
        line = document.text_before_cursor
        if not line.startswith(COMMAND_PREFIX):
            return

        if line.lower().startswith("/model "):
            partial = line[len("/model ") :]
            if len(partial) < MODEL_COMPLETION_MIN_CHARS:
                return
            for name in self.session.model_cache.get_models():
                if name.startswith(partial):
                    yield Completion(name, start_position=-len(partial))
            return

        if " " in line:
            return
        word = line.lower()
        for name in self.session.dispatcher.command_names():
            if name.startswith(word):
                yield Completion(name, start_position=-len(line))
