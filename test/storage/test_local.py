import logging
from pathlib import Path

from pytest import LogCaptureFixture, raises

from texnote import (
    BackendKind,
    LocalCache,
    LocalCorrupt,
    NoteRecord,
    StorageConfig,
)
from texnote.storage import CONFIG_KEY, NOTES_KEY


def test_notes(cache: LocalCache, notes: tuple[NoteRecord, ...]):
    assert cache.read_notes() is None

    cache.write_notes(notes)
    assert tuple(cache.read_notes() or ()) == notes

    # writing again is idempotent
    cache.write_notes(cache.read_notes() or ())
    assert tuple(cache.read_notes() or ()) == notes

    cache.write_notes([])
    assert cache.read_notes() == []


def test_atomic_write(cache: LocalCache, notes: tuple[NoteRecord, ...]):
    cache.write_notes(notes)
    cache.write_notes(notes[:1])

    # only the final value remains, with no temporary files
    assert sorted(p.name for p in cache.path.iterdir()) == [f"{NOTES_KEY}.json"]


def test_corrupt(cache: LocalCache):
    cache.set(NOTES_KEY, "{not json")
    with raises(LocalCorrupt):
        cache.read_notes()

    cache.set(NOTES_KEY, '{"id": "a"}')
    with raises(LocalCorrupt):
        cache.read_notes()


def test_raw(cache: LocalCache):
    assert cache.get("key") is None

    cache.set("key", "value")
    assert cache.get("key") == "value"

    cache.remove("key")
    assert cache.get("key") is None

    # removing again is harmless
    cache.remove("key")


def test_config(cache: LocalCache, remote_config: StorageConfig):
    assert cache.read_config() == StorageConfig()

    config = StorageConfig(
        endpoint=remote_config.endpoint,
        credential="key",
        backend=BackendKind.JSONBIN,
        timeout=5.0,
    )
    cache.write_config(config)

    assert cache.read_config() == config


def test_config_legacy(cache: LocalCache):
    cache.set(
        CONFIG_KEY, '{"apiUrl": "https://example.com/notes", "apiKey": "key"}'
    )

    config = cache.read_config()
    assert config.endpoint == "https://example.com/notes"
    assert config.credential == "key"
    assert config.backend is BackendKind.GENERIC


def test_config_corrupt(cache: LocalCache, caplog: LogCaptureFixture):
    cache.set(CONFIG_KEY, '{"endpoint": "ftp://example.com"}')

    with caplog.at_level(logging.WARNING):
        assert cache.read_config() == StorageConfig()

    assert "Ignoring corrupt storage config" in caplog.text


def test_separate_folders(tmp_path: Path, notes: tuple[NoteRecord, ...]):
    cache1 = LocalCache(tmp_path / "one")
    cache2 = LocalCache(tmp_path / "two")

    cache1.write_notes(notes)

    assert cache2.read_notes() is None


def test_not_utf8(cache: LocalCache, caplog: LogCaptureFixture):
    cache.path.mkdir(parents=True)
    (cache.path / f"{NOTES_KEY}.json").write_bytes(b"\xff\xfe[garbage")
    (cache.path / f"{CONFIG_KEY}.json").write_bytes(b"\xff\xfe{garbage")

    with raises(LocalCorrupt):
        cache.read_notes()

    with caplog.at_level(logging.WARNING):
        assert cache.read_config() == StorageConfig()

    assert "Ignoring corrupt storage config" in caplog.text
