from __future__ import annotations

import threading

from blazer.registry import WriterRegistry
from blazer.writer import Writer


class TestWriterRegistry:
    def test_table_is_created_on_first_add(self, fake_bucket):
        registry = WriterRegistry()
        assert registry._writers is None
        assert len(registry) == 0

        registry.add(Writer(fake_bucket, "a.bin"))
        assert registry._writers is not None
        assert len(registry) == 1

    def test_add_and_remove(self, fake_bucket):
        registry = WriterRegistry()
        w = Writer(fake_bucket, "dir/a.bin")
        registry.add(w)

        assert w in registry
        assert registry.get("test-bucket/dir/a.bin") is w

        registry.remove(w)
        assert w not in registry
        assert registry.get("test-bucket/dir/a.bin") is None

    def test_remove_missing_is_a_noop(self, fake_bucket):
        registry = WriterRegistry()
        registry.remove(Writer(fake_bucket, "never-added"))
        assert registry._writers is None

        registry.add(Writer(fake_bucket, "a"))
        registry.remove(Writer(fake_bucket, "b"))
        assert len(registry) == 1

    def test_same_key_is_registered_once(self, fake_bucket):
        registry = WriterRegistry()
        first = Writer(fake_bucket, "same")
        second = Writer(fake_bucket, "same")
        registry.add(first)
        registry.add(second)

        assert len(registry) == 1
        assert registry.get("test-bucket/same") is second

    def test_keys_include_the_bucket(self, make_bucket):
        registry = WriterRegistry()
        registry.add(Writer(make_bucket("one"), "file"))
        registry.add(Writer(make_bucket("two"), "file"))

        assert len(registry) == 2

    def test_concurrent_add_and_remove(self, fake_bucket):
        registry = WriterRegistry()
        writers = [[Writer(fake_bucket, f"t{t}/w{i}") for i in range(50)] for t in range(8)]

        def churn(batch: list[Writer]) -> None:
            for w in batch:
                registry.add(w)
            for w in batch[::2]:
                registry.remove(w)

        threads = [threading.Thread(target=churn, args=(batch,)) for batch in writers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 8 * 25

    def test_snapshot_reports_status(self, fake_bucket):
        registry = WriterRegistry()
        w = Writer(fake_bucket, "snap.bin", chunk_size=10)
        registry.add(w)
        w.write(b"x" * 25)

        (status,) = registry.snapshot()
        assert status.bucket == "test-bucket"
        assert status.name == "snap.bin"
        assert status.state == "uploading"
        assert status.parts_sealed == 2
        w.close()
