"""Stand-ins for ``httpx.AsyncClient`` used by adapter tests."""

from __future__ import annotations

from typing import Any


class DummyHTTPResponse:
    def __init__(
        self,
        status_code: int,
        json_data: Any = None,
        text: str = "",
        reason_phrase: str = "",
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.text = text
        self.reason_phrase = reason_phrase

    def json(self) -> Any:
        if self._json_data is None:
            raise ValueError("No JSON data")
        return self._json_data


class DummyAsyncClient:
    def __init__(self, responses: list[DummyHTTPResponse | Exception], sent: list[dict[str, Any]]) -> None:
        self._responses = responses
        self.sent = sent

    async def __aenter__(self) -> "DummyAsyncClient":  # pragma: no cover - helper
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:  # pragma: no cover - helper
        return None

    async def post(
        self, url: str, headers: dict[str, str], json: dict[str, Any] | None = None
    ) -> DummyHTTPResponse:
        self.sent.append({"method": "POST", "url": url, "headers": headers, "json": json})
        return self._next()

    async def get(self, url: str, headers: dict[str, str]) -> DummyHTTPResponse:
        self.sent.append({"method": "GET", "url": url, "headers": headers, "json": None})
        return self._next()

    def _next(self) -> DummyHTTPResponse:
        if not self._responses:
            raise RuntimeError("No responses queued")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def configure_httpx(
    monkeypatch, responses: list[DummyHTTPResponse | Exception]
) -> list[dict[str, Any]]:
    """Route every ``httpx.AsyncClient`` to a queue of canned responses."""
    sent: list[dict[str, Any]] = []

    def factory(*args, **kwargs):
        return DummyAsyncClient(responses, sent)

    monkeypatch.setattr("httpx.AsyncClient", factory)
    return sent
