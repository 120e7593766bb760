import json

import requests
from pytest import raises

from texnote import (
    BackendKind,
    GenericDriver,
    JsonBinDriver,
    NoteRecord,
    RemoteRejected,
    RemoteShapeInvalid,
    RemoteUnreachable,
    StorageConfig,
    create_driver,
)

from conftest import CREDENTIAL, FakeRemote


def test_generic_fetch(
    remote: FakeRemote,
    http: requests.Session,
    remote_config: StorageConfig,
    notes: tuple[NoteRecord, ...],
):
    remote.document = [note.to_json_dict() for note in notes]

    driver = create_driver(remote_config, http)
    assert isinstance(driver, GenericDriver)

    assert tuple(driver.fetch()) == notes

    request = remote.requests[0]
    assert request.method == "GET"
    assert request.url == remote_config.endpoint
    assert request.headers["Authorization"] == f"Bearer {CREDENTIAL}"
    assert request.headers["Content-Type"] == "application/json"


def test_generic_push(
    remote: FakeRemote,
    http: requests.Session,
    remote_config: StorageConfig,
    notes: tuple[NoteRecord, ...],
):
    create_driver(remote_config, http).push(notes)

    request = remote.requests[0]
    assert request.method == "POST"
    assert request.body is not None

    # plain array with wire field names
    body = json.loads(request.body)
    assert isinstance(body, list)
    assert body[1]["parentId"] == "a"
    assert body == [note.to_json_dict() for note in notes]


def test_jsonbin(
    remote: FakeRemote,
    http: requests.Session,
    remote_config: StorageConfig,
    notes: tuple[NoteRecord, ...],
):
    remote.envelope = True
    config = remote_config.model_copy(update={"backend": BackendKind.JSONBIN})

    driver = create_driver(config, http)
    assert isinstance(driver, JsonBinDriver)

    driver.push(notes)
    assert tuple(driver.fetch()) == notes

    push, fetch = remote.requests
    assert push.method == "PUT"
    assert fetch.method == "GET"

    for request in remote.requests:
        assert request.headers["X-Master-Key"] == CREDENTIAL
        assert "Authorization" not in request.headers

    # payload is sent without envelope
    assert push.body is not None
    assert isinstance(json.loads(push.body), list)


def test_jsonbin_no_envelope(
    remote: FakeRemote, http: requests.Session, remote_config: StorageConfig
):
    config = remote_config.model_copy(update={"backend": BackendKind.JSONBIN})

    with raises(RemoteShapeInvalid):
        create_driver(config, http).fetch()


def test_no_credential(
    remote: FakeRemote, http: requests.Session, remote_config: StorageConfig
):
    config = StorageConfig(endpoint=remote_config.endpoint)

    assert create_driver(config, http).fetch() == []
    assert "Authorization" not in remote.requests[0].headers


def test_rejected(
    remote: FakeRemote,
    http: requests.Session,
    remote_config: StorageConfig,
    notes: tuple[NoteRecord, ...],
):
    remote.fail_status = 500
    driver = create_driver(remote_config, http)

    with raises(RemoteRejected) as e:
        driver.push(notes)

    assert e.value.status == 500
    assert str(e.value) == "Backend error: 500 Internal Server Error"

    with raises(RemoteRejected):
        driver.fetch()


def test_unreachable(
    remote: FakeRemote, http: requests.Session, remote_config: StorageConfig
):
    remote.unreachable = True

    with raises(RemoteUnreachable):
        create_driver(remote_config, http).fetch()


def test_shape_invalid(
    remote: FakeRemote, http: requests.Session, remote_config: StorageConfig
):
    driver = create_driver(remote_config, http)

    for body in [b"<html></html>", b'{"notes": []}', b'[{"title": "x"}]']:
        remote.raw_body = body

        with raises(RemoteShapeInvalid):
            driver.fetch()


def test_timeout(
    remote: FakeRemote, http: requests.Session, remote_config: StorageConfig
):
    """
    Configured timeout is passed to the transport.
    """
    sent: list[object] = []
    send = remote.send

    def send_spy(request, **kwargs):
        sent.append(kwargs.get("timeout"))
        return send(request, **kwargs)

    remote.send = send_spy  # type: ignore[method-assign]

    config = remote_config.model_copy(update={"timeout": 2.5})
    create_driver(config, http).fetch()

    assert sent == [2.5]
