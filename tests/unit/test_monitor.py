from __future__ import annotations

from fastapi.testclient import TestClient

from blazer.monitor import create_status_app
from blazer.registry import WriterRegistry
from blazer.writer import Writer


def test_index_lists_registered_writers(fake_bucket):
    registry = WriterRegistry()
    registry.add(Writer(fake_bucket, "b.bin"))
    registry.add(Writer(fake_bucket, "a.bin"))

    resp = TestClient(create_status_app(registry)).get("/")

    assert resp.status_code == 200
    writers = resp.json()["writers"]
    assert [w["name"] for w in writers] == ["a.bin", "b.bin"]
    assert writers[0]["state"] == "buffering"
    assert writers[0]["bucket"] == "test-bucket"


def test_empty_registry():
    resp = TestClient(create_status_app(WriterRegistry())).get("/")

    assert resp.json() == {"writers": []}


def test_single_writer_by_key(fake_bucket):
    registry = WriterRegistry()
    w = Writer(fake_bucket, "nested/path/file.bin", chunk_size=10)
    registry.add(w)
    w.write(b"y" * 15)
    client = TestClient(create_status_app(registry))

    resp = client.get("/writers/test-bucket/nested/path/file.bin")
    assert resp.status_code == 200
    assert resp.json()["parts_sealed"] == 1
    assert resp.json()["buffered"] == 5

    assert client.get("/writers/test-bucket/missing").status_code == 404
    w.close()
