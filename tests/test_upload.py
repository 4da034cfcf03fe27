"""Tests for the upload service."""

import pytest

from upld.config import LIMITS
from upld.errors import EmptyBody, TooLarge, TooSmall
from upld.identifier import derive_identifier


class TestValidation:
    async def test_empty_body(self, uploads, store) -> None:
        with pytest.raises(EmptyBody):
            await uploads.handle_upload(b"", "upld.test")
        assert store.lookup_calls == []

    async def test_missing_body(self, uploads) -> None:
        with pytest.raises(EmptyBody):
            await uploads.handle_upload(None, "upld.test")

    async def test_below_minimum(self, uploads, make_payload, store) -> None:
        with pytest.raises(TooSmall):
            await uploads.handle_upload(make_payload(31), "upld.test")
        assert store.lookup_calls == []

    async def test_short_examples_rejected(self, uploads) -> None:
        for body in (b"testing\n", b"testing testing 123"):
            with pytest.raises(TooSmall):
                await uploads.handle_upload(body, "upld.test")

    async def test_exact_minimum(self, uploads, make_payload) -> None:
        result = await uploads.handle_upload(make_payload(32), "upld.test")
        assert result.created

    async def test_exact_maximum(self, uploads, make_payload) -> None:
        result = await uploads.handle_upload(make_payload(24 * 1024 * 1024), "upld.test")
        assert result.created

    async def test_above_maximum(self, uploads, make_payload, store) -> None:
        with pytest.raises(TooLarge):
            await uploads.handle_upload(make_payload(24 * 1024 * 1024 + 1), "upld.test")
        assert store.lookup_calls == []

    def test_error_statuses(self) -> None:
        assert EmptyBody().status_code == 400
        assert TooSmall().status_code == 400
        assert TooLarge().status_code == 413
        assert EmptyBody().message == "missing upload body"
        assert TooSmall().message == "content too small"
        assert TooLarge().message == "content too large"


class TestStore:
    async def test_writes_under_file_key(self, uploads, store, make_payload) -> None:
        body = make_payload(40)
        result = await uploads.handle_upload(body, "upld.test")

        assert result.identifier == derive_identifier(body)
        assert await store.lookup(f"file_{result.identifier}") == body

    async def test_location(self, uploads, make_payload) -> None:
        result = await uploads.handle_upload(make_payload(40), "upld.test")
        assert result.location == f"https://upld.test/{result.identifier}"

    async def test_location_with_filename(self, uploads, make_payload) -> None:
        result = await uploads.handle_upload(make_payload(40), "upld.test", filename="notes.txt")
        assert result.location == f"https://upld.test/{result.identifier}/notes.txt"

    async def test_filename_does_not_affect_identifier(self, uploads, make_payload) -> None:
        body = make_payload(40)
        first = await uploads.handle_upload(body, "a.test", filename="one.txt")
        second = await uploads.handle_upload(body, "b.test", filename="two.txt")
        assert first.identifier == second.identifier

    async def test_expires_after_store_ttl(self, uploads, store, clock, make_payload) -> None:
        result = await uploads.handle_upload(make_payload(40), "upld.test")
        key = f"file_{result.identifier}"

        clock.advance(LIMITS.store_ttl / 2)
        assert await store.lookup(key) is not None

        clock.advance(LIMITS.store_ttl / 2)
        assert await store.lookup(key) is None


class TestDeduplication:
    async def test_same_bytes_same_identifier(self, uploads, make_payload) -> None:
        body = make_payload(64, b"ab")
        first = await uploads.handle_upload(body, "upld.test")
        second = await uploads.handle_upload(body, "upld.test")

        assert first.identifier == second.identifier
        assert first.created
        assert not second.created

    async def test_reupload_counts_once(self, uploads, stats, make_payload) -> None:
        body = make_payload(64, b"ab")
        before = await stats.current_count()

        await uploads.handle_upload(body, "upld.test")
        await uploads.handle_upload(body, "upld.test")

        assert await stats.current_count() == before + 1

    async def test_reupload_does_not_overwrite(self, uploads, store, make_payload) -> None:
        body = make_payload(64, b"ab")
        result = await uploads.handle_upload(body, "upld.test")
        key = f"file_{result.identifier}"

        await uploads.handle_upload(body, "upld.test")
        assert await store.generation(key) == 1

    async def test_reupload_after_expiry_stores_again(
        self, uploads, stats, clock, make_payload
    ) -> None:
        body = make_payload(64, b"ab")
        await uploads.handle_upload(body, "upld.test")
        clock.advance(LIMITS.store_ttl)

        result = await uploads.handle_upload(body, "upld.test")

        assert result.created
        assert await stats.current_count() == 2
