"""Tests for batch decoding of selected files."""

from __future__ import annotations

import asyncio

import pytest

from grievance.intake.uploads import UploadCandidate, decode_uploads

MIB = 1024 * 1024


def _pdf(name: str = "a.pdf", size: int = 16) -> UploadCandidate:
    return UploadCandidate.from_bytes(name, "application/pdf", b"%" * size)


class TestDecodeUploads:
    @pytest.mark.asyncio
    async def test_empty_batch(self):
        outcome = await decode_uploads(0, [])
        assert outcome.files == []
        assert outcome.messages == []

    @pytest.mark.asyncio
    async def test_accepts_supported_files(self):
        outcome = await decode_uploads(
            0, [_pdf("a.pdf"), UploadCandidate.from_bytes("b.jpg", "image/jpg", b"jpg")]
        )
        assert [f.name for f in outcome.files] == ["a.pdf", "b.jpg"]
        assert outcome.files[1].type == "image/jpeg"
        assert outcome.files[1].decode() == b"jpg"
        assert outcome.messages == []

    @pytest.mark.asyncio
    async def test_oversized_file_rejected(self):
        outcome = await decode_uploads(0, [_pdf("huge.pdf", size=6 * MIB)])
        assert outcome.files == []
        assert outcome.messages == ["File huge.pdf exceeds 5MB limit."]

    @pytest.mark.asyncio
    async def test_six_files_rejected_whole(self):
        outcome = await decode_uploads(0, [_pdf(f"{i}.pdf") for i in range(6)])
        assert outcome.files == []
        assert outcome.messages == ["Maximum 5 files allowed in total."]

    @pytest.mark.asyncio
    async def test_limit_counts_existing_files(self):
        outcome = await decode_uploads(4, [_pdf("a.pdf"), _pdf("b.pdf")])
        assert outcome.files == []
        assert outcome.messages == ["Maximum 5 files allowed in total."]

    @pytest.mark.asyncio
    async def test_unsupported_type_skipped(self):
        outcome = await decode_uploads(
            0, [UploadCandidate.from_bytes("notes.txt", "text/plain", b"hi"), _pdf("ok.pdf")]
        )
        assert [f.name for f in outcome.files] == ["ok.pdf"]
        assert outcome.messages == ["File notes.txt has unsupported format."]

    @pytest.mark.asyncio
    async def test_failed_read_isolated(self):
        async def _fail() -> bytes:
            raise OSError("device removed")

        bad = UploadCandidate("bad.pdf", "application/pdf", 10, _fail)
        outcome = await decode_uploads(0, [_pdf("first.pdf"), bad, _pdf("last.pdf")])
        assert [f.name for f in outcome.files] == ["first.pdf", "last.pdf"]
        assert outcome.messages == ["File bad.pdf could not be read."]

    @pytest.mark.asyncio
    async def test_understated_size_rechecked(self):
        async def _read() -> bytes:
            return b"x" * (6 * MIB)

        liar = UploadCandidate("liar.pdf", "application/pdf", 10, _read)
        outcome = await decode_uploads(0, [liar])
        assert outcome.files == []
        assert outcome.messages == ["File liar.pdf exceeds 5MB limit."]

    @pytest.mark.asyncio
    async def test_reads_run_concurrently_and_keep_order(self):
        release = asyncio.Event()
        started: list[str] = []

        def _slow(name: str, delay: float) -> UploadCandidate:
            async def _read() -> bytes:
                started.append(name)
                await release.wait()
                await asyncio.sleep(delay)
                return name.encode()
            return UploadCandidate(name, "image/png", 3, _read)

        task = asyncio.create_task(decode_uploads(0, [_slow("one.png", 0.02), _slow("two.png", 0)]))
        for _ in range(3):
            await asyncio.sleep(0)
        assert sorted(started) == ["one.png", "two.png"]
        release.set()
        outcome = await task
        assert [f.name for f in outcome.files] == ["one.png", "two.png"]

    @pytest.mark.asyncio
    async def test_from_path(self, tmp_path):
        path = tmp_path / "scan.png"
        path.write_bytes(b"\x89PNG")
        candidate = UploadCandidate.from_path(path)
        assert candidate.mime_type == "image/png"
        assert candidate.size == 4
        outcome = await decode_uploads(0, [candidate])
        assert outcome.files[0].decode() == b"\x89PNG"
