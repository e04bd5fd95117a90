"""Shared fixtures for the ollama-repl test suite."""

from io import StringIO

import pytest
from rich.console import Console

from ollama_repl import fmt


@pytest.fixture
def captured_output(monkeypatch):
    """Route both fmt consoles into in-memory buffers.

    Returns a (stdout_buffer, stderr_buffer) pair.
    """
    out, err = StringIO(), StringIO()
    monkeypatch.setattr(fmt, "_out", Console(file=out, no_color=True, width=120))
    monkeypatch.setattr(fmt, "_console", Console(file=err, no_color=True, width=120))
    return out, err


@pytest.fixture
def debug_enabled(monkeypatch):
    monkeypatch.setattr(fmt, "_debug", True)
