"""Tests for the fmt module (Rich output helpers)."""

from ollama_repl import fmt
from ollama_repl.context import Message, Role


class TestDiagnostics:
    def test_error_goes_to_stderr(self, captured_output):
        out, err = captured_output
        fmt.error("bad thing")
        assert "[Error] bad thing" in err.getvalue()
        assert out.getvalue() == ""

    def test_api_error(self, captured_output):
        fmt.api_error("refused")
        assert "[API Error] refused" in captured_output[1].getvalue()

    def test_warning(self, captured_output):
        fmt.warning("careful")
        assert "Warning: careful" in captured_output[1].getvalue()

    def test_debug_hidden_by_default(self, captured_output):
        fmt.debug("secret")
        assert captured_output[1].getvalue() == ""

    def test_debug_shown_when_enabled(self, captured_output, debug_enabled):
        fmt.debug("visible")
        assert "[Debug] visible" in captured_output[1].getvalue()

    def test_unexpected_error_trace_only_in_debug(self, captured_output):
        fmt.unexpected_error("Unexpected Error", ValueError("x"), "Traceback: here")
        text = captured_output[1].getvalue()
        assert "[Unexpected Error] ValueError: x" in text
        assert "Traceback" not in text

    def test_unexpected_error_trace_with_debug(self, captured_output, debug_enabled):
        fmt.unexpected_error("Unexpected Error", ValueError("x"), "Traceback: here")
        assert "Traceback: here" in captured_output[1].getvalue()


class TestTranscript:
    def test_banner(self, captured_output):
        fmt.banner("llama3")
        text = captured_output[0].getvalue()
        assert "Welcome to Ollama REPL!" in text
        assert "Using model: llama3" in text

    def test_stream_is_verbatim(self, captured_output):
        fmt.assistant_prefix()
        for part in ["[bold]", "not ", "markup"]:
            fmt.stream_fragment(part)
        fmt.stream_end()
        assert captured_output[0].getvalue() == "\nAssistant: [bold]not markup\n"

    def test_execution_report_success(self, captured_output):
        fmt.execution_report("Shell", "out\n", "")
        text = captured_output[0].getvalue()
        assert "[Shell Execution Result]" in text
        assert "--- STDOUT ---\nout\n--- STDERR ---\n(empty)\n--------------" in text

    def test_execution_report_error(self, captured_output):
        fmt.execution_report("Shell", "", "boom", "Error: OSError: nope")
        text = captured_output[0].getvalue()
        assert "[Shell Execution Error]" in text
        assert "Error: OSError: nope" in text

    def test_context_dump(self, captured_output):
        fmt.context_dump((Message(Role.SYSTEM, "sys text"),))
        text = captured_output[0].getvalue()
        assert "[1] System:\nsys text\n---" in text
        assert "Total messages: 1" in text

    def test_model_list(self, captured_output):
        fmt.model_list(["llama2", "llama3"], "llama3")
        text = captured_output[0].getvalue()
        assert "- llama2\n- llama3" in text
        assert "Current model: llama3" in text
        assert "at least 3 characters" in text

    def test_mode_switched(self, captured_output):
        fmt.mode_switched("Shell")
        assert "Switched to Shell mode." in captured_output[0].getvalue()


class TestInit:
    def test_sets_debug(self, monkeypatch):
        monkeypatch.setattr(fmt, "_console", fmt._console)
        monkeypatch.setattr(fmt, "_out", fmt._out)
        monkeypatch.setattr(fmt, "_debug", False)
        fmt.init(no_color=True, debug=True)
        assert fmt.is_debug()
        assert fmt._console.no_color
