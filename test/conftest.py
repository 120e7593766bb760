import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

import requests
from pytest import fixture
from requests.adapters import BaseAdapter
from requests.models import PreparedRequest, Response

from texnote import LocalCache, NoteRecord, StorageConfig

logging.basicConfig(level=logging.WARNING)

ENDPOINT = "https://notes.example.com/api/notes"
CREDENTIAL = "secret-token"

REASONS = {
    200: "OK",
    401: "Unauthorized",
    404: "Not Found",
    500: "Internal Server Error",
}


class FakeRemote(BaseAdapter):
    """
    Transport adapter standing in for a remote store holding one JSON
    document. Mounted on a `requests.Session`, so drivers run unchanged.
    """

    document: Any
    """Stored note array"""

    envelope: bool
    """Wrap responses as JSONBin does"""

    fail_status: int | None
    """Respond to every request with this status"""

    unreachable: bool
    """Raise a connection error for every request"""

    raw_body: bytes | None
    """Respond to reads with this body instead of the document"""

    latency: float
    """Seconds to block before answering"""

    requests: list[PreparedRequest]

    def __init__(self, document: Any = None):
        super().__init__()
        self.document = document if document is not None else []
        self.envelope = False
        self.fail_status = None
        self.unreachable = False
        self.raw_body = None
        self.latency = 0.0
        self.requests = []

    def send(self, request: PreparedRequest, **kwargs) -> Response:
        self.requests.append(request)

        if self.latency:
            time.sleep(self.latency)

        if self.unreachable:
            raise requests.ConnectionError("Connection refused")

        if self.fail_status is not None:
            return self._response(request, self.fail_status, b'{"message": "failed"}')

        if request.method == "GET":
            if self.raw_body is not None:
                return self._response(request, 200, self.raw_body)
            return self._response(request, 200, self._encode(self.document))

        assert request.body is not None
        self.document = json.loads(request.body)
        return self._response(request, 200, self._encode(self.document))

    def close(self):
        pass

    @property
    def writes(self) -> list[PreparedRequest]:
        return [r for r in self.requests if r.method != "GET"]

    def _encode(self, document: Any) -> bytes:
        payload = (
            {"record": document, "metadata": {"private": True}}
            if self.envelope
            else document
        )
        return json.dumps(payload).encode()

    def _response(
        self, request: PreparedRequest, status: int, body: bytes
    ) -> Response:
        response = Response()
        response.status_code = status
        response.reason = REASONS.get(status, "")
        response._content = body
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        response.url = request.url or ""
        response.request = request
        return response


@fixture
def remote() -> FakeRemote:
    return FakeRemote()


@fixture
def http(remote: FakeRemote) -> requests.Session:
    session = requests.Session()
    session.mount("https://", remote)
    session.mount("http://", remote)
    return session


@fixture
def remote_config() -> StorageConfig:
    return StorageConfig(endpoint=ENDPOINT, credential=CREDENTIAL)


@fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache")


@fixture
def make_note() -> Callable[..., NoteRecord]:
    """
    Factory for notes with fixed timestamps.
    """

    def make_note(
        note_id: str,
        parent_id: str | None = None,
        created_at: int = 1000,
        **fields: Any,
    ) -> NoteRecord:
        return NoteRecord(
            id=note_id,
            parent_id=parent_id,
            title=fields.pop("title", f"Note {note_id}"),
            content=fields.pop("content", ""),
            created_at=created_at,
            updated_at=fields.pop("updated_at", created_at),
            **fields,
        )

    return make_note


@fixture
def notes(make_note: Callable[..., NoteRecord]) -> tuple[NoteRecord, ...]:
    """
    Small hierarchy:

    - a
        - b
            - d
        - c
    - e
    """
    return (
        make_note("a", created_at=1000),
        make_note("b", "a", created_at=2000),
        make_note("c", "a", created_at=3000),
        make_note("d", "b", created_at=4000),
        make_note("e", created_at=5000),
    )
