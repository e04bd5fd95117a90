"""HTTP client for the Ollama model-serving API."""

import http.client
import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Iterator

from . import fmt
from .errors import ApiError, ConnectivityError, ModelNotFoundError

DEFAULT_TIMEOUT = 300  # seconds; generous because local models can be slow to load


@dataclass(frozen=True)
class StreamChunk:
    content: str
    done: bool


def _describe_http_error(e: urllib.error.HTTPError) -> str:
    try:
        body = e.read().decode("utf-8", errors="replace").strip()
    except OSError:
        body = ""
    detail = f"HTTP {e.code} {e.reason}"
    if body:
        detail += f" (Response: {body[:500]})"
    return detail


class OllamaClient:
    """Talks to ``/api/tags`` and ``/api/chat`` on one Ollama host.

    The active model is plain mutable state; checking it against the
    host's model list is the caller's job.
    """

    def __init__(self, host: str, model: str, timeout: float = DEFAULT_TIMEOUT):
        self.host = host.rstrip("/")
        self._model = model
        self.timeout = timeout

    @property
    def current_model(self) -> str:
        return self._model

    def set_model(self, name: str) -> None:
        self._model = name

    def list_models(self) -> list[str]:
        """Return the names of the models installed on the host."""
        url = f"{self.host}/api/tags"
        fmt.debug(f"GET {url}")
        try:
            req = urllib.request.Request(url, headers={"Accept": "application/json"})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise ApiError(f"API request failed to list models: {_describe_http_error(e)}")
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise ApiError(f"API request failed to list models: {e}")

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ApiError(f"Failed to parse models API response: {e}")

        try:
            return [entry["name"] for entry in data["models"]]
        except (KeyError, TypeError) as e:
            raise ApiError(
                f"Unexpected models API response structure: {e!r} (Body: {raw[:500]!r})"
            )

    def chat(self, messages: list[dict]) -> Iterator[StreamChunk]:
        """Stream a chat completion for ``messages``.

        Yields one StreamChunk per NDJSON line. Lines that are not valid
        JSON are skipped. Iteration stops after a chunk with ``done`` set
        or when the server closes the connection.
        """
        url = f"{self.host}/api/chat"
        payload = {"model": self._model, "messages": messages, "stream": True}
        fmt.debug(f"POST {url} (streaming): {json.dumps(payload)[:2000]}")

        received: list[str] = []
        try:
            req = urllib.request.Request(
                url,
                data=json.dumps(payload).encode(),
                headers={"Content-Type": "application/json"},
                method="POST",
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                for raw_line in resp:
                    chunk = self._parse_line(raw_line)
                    if chunk is None:
                        continue
                    received.append(chunk.content)
                    yield chunk
                    if chunk.done:
                        return
        except urllib.error.HTTPError as e:
            raise ApiError(
                f"API request failed: {_describe_http_error(e)}", "".join(received)
            )
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            partial = "".join(received)
            message = f"API request failed: {e}"
            if partial:
                message += f" (Response Body accumulated: {partial})"
            raise ApiError(message, partial)

    @staticmethod
    def _parse_line(raw_line: bytes) -> StreamChunk | None:
        line = raw_line.decode("utf-8", errors="replace").strip()
        if not line:
            return None
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            fmt.debug(f"JSON parse error on chunk: {e} - Chunk: {line!r}")
            return None
        if not isinstance(obj, dict):
            fmt.debug(f"ignoring non-object chunk: {line!r}")
            return None
        message = obj.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            content = ""
        return StreamChunk(content=content, done=bool(obj.get("done", False)))

    def check_connection_and_model(self) -> None:
        """Verify the host answers and has the configured model installed."""
        try:
            available = self.list_models()
        except ApiError as e:
            raise ConnectivityError(f"Error connecting to Ollama at {self.host}: {e}")
        if self._model not in available:
            raise ModelNotFoundError(
                f"Configured model '{self._model}' not found on Ollama host '{self.host}'.",
                available,
            )
