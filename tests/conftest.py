from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Literal

from minimux.rsgi import HTTPScope


@dataclass
class MockHTTPScope:
    proto: Literal["http"] = "http"
    http_version: Literal["1", "1.1", "2"] = "1.1"
    rsgi_version: str = "1.0"
    server: str = "localhost"
    client: str = "127.0.0.1"
    scheme: str = "http"
    method: str = "GET"
    path: str = "/"
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    authority: str | None = None


class MockHTTPProtocol:
    """Mock protocol that captures response data.

    Responses are write-once: a second write fails the test.
    """

    def __init__(self, body: bytes = b"") -> None:
        self.request_body = body
        self.response_status: int | None = None
        self.response_headers: list[tuple[str, str]] | None = None
        self.response_body: bytes | None = None
        self.writes = 0

    async def __call__(self) -> bytes:
        return self.request_body

    def __aiter__(self) -> AsyncIterator[bytes]:
        raise NotImplementedError

    async def client_disconnect(self) -> None:
        raise NotImplementedError

    def _write(
        self, status: int, headers: list[tuple[str, str]], body: bytes
    ) -> None:
        self.writes += 1
        assert self.writes == 1, "response written more than once"
        self.response_status = status
        self.response_headers = headers
        self.response_body = body

    def response_empty(self, status: int, headers: list[tuple[str, str]]) -> None:
        self._write(status, headers, b"")

    def response_str(
        self, status: int, headers: list[tuple[str, str]], body: str
    ) -> None:
        self._write(status, headers, body.encode("utf-8"))

    def response_bytes(
        self, status: int, headers: list[tuple[str, str]], body: bytes
    ) -> None:
        self._write(status, headers, body)

    def response_file(
        self, status: int, headers: list[tuple[str, str]], file: str
    ) -> None:
        raise NotImplementedError

    def response_file_range(
        self,
        status: int,
        headers: list[tuple[str, str]],
        file: str,
        start: int,
        end: int,
    ) -> None:
        raise NotImplementedError

    def response_stream(self, status: int, headers: list[tuple[str, str]]) -> None:
        raise NotImplementedError


def mock_scope(
    path: str = "/",
    method: str = "GET",
    headers: dict[str, str] | None = None,
    client: str = "127.0.0.1",
) -> HTTPScope:
    return MockHTTPScope(
        path=path, method=method, headers=headers or {}, client=client
    )
