"""End-to-end tests for the file service over real filesystem and database providers."""

import hashlib
import sqlite3

import pytest

from cli.commands import handle_upload
from cli.models import UploadCommand
from common.exceptions import DistributionError, NotFoundError, StorageIOError
from common.types import ChunkStatus, FileStatus
from controller.database import get_db_connection
from controller.repositories.chunk_repository import ChunkRepository
from controller.repositories.file_repository import FileRepository
from controller.services.file_service import FileService

UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


def count_rows(table):
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM {table}")
        return cursor.fetchone()[0]


def chunk_files(provider):
    return sorted(p.name for p in provider.storage_root.glob("*.chunk"))


def flip_first_byte(path):
    data = bytearray(path.read_bytes())
    data[0] ^= 0xFF
    path.write_bytes(bytes(data))


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_records_file_and_chunks(self, file_service, sample_file):
        file = await file_service.upload_file(sample_file)

        assert file.status == FileStatus.COMPLETED
        assert file.name == "sample.bin"
        assert file.size == 10_000
        assert file.chunk_size == 1024
        assert file.total_chunks == 10
        assert file.checksum == hashlib.sha256(sample_file.read_bytes()).hexdigest()
        assert len(ChunkRepository.get_chunks_by_file(file.file_id)) == file.total_chunks

        stored = file_service.get_file_metadata(file.file_id)
        assert stored.status == FileStatus.COMPLETED
        assert [c.sequence_number for c in stored.chunks] == list(range(10))
        assert [c.provider_id for c in stored.chunks] == ["FileSystem", "Database"] * 5
        assert all(c.status == ChunkStatus.STORED for c in stored.chunks)

    @pytest.mark.asyncio
    async def test_display_name_and_mime_type(self, file_service, sample_file):
        file = await file_service.upload_file(sample_file, display_name="report.pdf")

        assert file.name == "report.pdf"
        assert file.mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_duplicate_content_returns_existing_file(self, file_service, fs_provider, sample_file, tmp_path):
        first = await file_service.upload_file(sample_file)
        copy = tmp_path / "copy.bin"
        copy.write_bytes(sample_file.read_bytes())

        second = await file_service.upload_file(copy)

        assert second.file_id == first.file_id
        assert [c.chunk_id for c in second.chunks] == [c.chunk_id for c in first.chunks]
        assert count_rows("files") == 1
        assert count_rows("chunks") == 10
        assert len(chunk_files(fs_provider)) == 5

    @pytest.mark.asyncio
    async def test_reupload_after_delete_creates_new_file(self, file_service, sample_file):
        first = await file_service.upload_file(sample_file)
        assert await file_service.delete_file(first.file_id)

        second = await file_service.upload_file(sample_file)

        assert second.file_id != first.file_id
        assert second.status == FileStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_missing_source(self, file_service, tmp_path):
        with pytest.raises(NotFoundError):
            await file_service.upload_file(tmp_path / "missing.bin")
        assert count_rows("files") == 0

    @pytest.mark.asyncio
    async def test_empty_file(self, file_service, tmp_path):
        source = tmp_path / "empty.txt"
        source.write_bytes(b"")

        file = await file_service.upload_file(source)
        output = tmp_path / "out" / "empty.txt"

        assert file.total_chunks == 0
        assert file.status == FileStatus.COMPLETED
        assert await file_service.download_file(file.file_id, output) is True
        assert output.read_bytes() == b""

    @pytest.mark.asyncio
    async def test_store_failure_leaves_no_trace(self, test_db, settings, fs_provider, make_memory_provider, sample_file):
        broken = make_memory_provider("Broken", fail_store=True)
        service = FileService([fs_provider, broken], settings)

        with pytest.raises(DistributionError):
            await service.upload_file(sample_file)

        assert count_rows("files") == 0
        assert count_rows("chunks") == 0
        assert chunk_files(fs_provider) == []
        assert service.list_files() == []


    @pytest.mark.asyncio
    async def test_metadata_failure_is_reported_and_cleaned_up(self, file_service, fs_provider, sample_file, monkeypatch):
        def locked(chunks, conn=None):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(ChunkRepository, "save_chunks", staticmethod(locked))

        with pytest.raises(StorageIOError):
            await file_service.upload_file(sample_file)

        assert count_rows("files") == 0
        assert count_rows("chunk_data") == 0
        assert chunk_files(fs_provider) == []

    @pytest.mark.asyncio
    async def test_dedup_lookup_failure_is_reported(self, file_service, sample_file, monkeypatch):
        def locked(checksum, conn=None):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(FileRepository, "find_by_checksum", staticmethod(locked))

        with pytest.raises(StorageIOError):
            await file_service.upload_file(sample_file)


def test_upload_command_reports_metadata_failure(file_service, fs_provider, sample_file, monkeypatch):
    def locked(chunks, conn=None):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(ChunkRepository, "save_chunks", staticmethod(locked))

    result = handle_upload(UploadCommand(path=str(sample_file)), service=file_service)

    assert "Upload failed" in result
    assert "database is locked" in result
    assert count_rows("files") == 0
    assert count_rows("chunk_data") == 0
    assert chunk_files(fs_provider) == []


class TestDownload:
    @pytest.mark.asyncio
    async def test_round_trip(self, file_service, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)
        output = tmp_path / "downloads" / "nested" / "sample.bin"

        assert await file_service.download_file(file.file_id, output) is True
        assert output.read_bytes() == sample_file.read_bytes()
        assert file_service.get_file_metadata(file.file_id).last_accessed_at is not None

    @pytest.mark.asyncio
    async def test_overwrites_existing_output(self, file_service, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)
        output = tmp_path / "existing.bin"
        output.write_bytes(b"old content" * 5000)

        assert await file_service.download_file(file.file_id, output) is True
        assert output.read_bytes() == sample_file.read_bytes()

    @pytest.mark.asyncio
    async def test_corrupted_chunk_fails_without_output(self, file_service, fs_provider, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)
        flip_first_byte(fs_provider.get_chunk_path(file.chunks[0].storage_location))
        output = tmp_path / "out.bin"

        assert await file_service.download_file(file.file_id, output) is False
        assert not output.exists()

    @pytest.mark.asyncio
    async def test_whole_file_mismatch_removes_output(self, file_service, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)
        with get_db_connection() as conn:
            conn.execute("UPDATE files SET checksum = ? WHERE file_id = ?", ("0" * 64, file.file_id))
            conn.commit()
        output = tmp_path / "out.bin"

        assert await file_service.download_file(file.file_id, output) is False
        assert not output.exists()

    @pytest.mark.asyncio
    async def test_unregistered_provider(self, test_db, settings, fs_provider, file_service, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)
        fs_only = FileService([fs_provider], settings)

        assert await fs_only.download_file(file.file_id, tmp_path / "out.bin") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_id", [UNKNOWN_ID, "not-a-uuid", ""])
    async def test_unknown_or_malformed_id(self, file_service, file_id, tmp_path):
        assert await file_service.download_file(file_id, tmp_path / "out.bin") is False


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_payloads_and_marks_deleted(self, file_service, fs_provider, db_provider, sample_file, tmp_path):
        file = await file_service.upload_file(sample_file)

        assert await file_service.delete_file(file.file_id) is True

        assert file_service.get_file_metadata(file.file_id).status == FileStatus.DELETED
        assert chunk_files(fs_provider) == []
        assert count_rows("chunk_data") == 0
        assert file_service.list_files() == []
        assert await file_service.download_file(file.file_id, tmp_path / "out.bin") is False
        assert await file_service.verify_file_integrity(file.file_id) is False

    @pytest.mark.asyncio
    async def test_second_delete_returns_false(self, file_service, sample_file):
        file = await file_service.upload_file(sample_file)

        assert await file_service.delete_file(file.file_id) is True
        assert await file_service.delete_file(file.file_id) is False

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_payload(self, file_service, db_provider, sample_file):
        file = await file_service.upload_file(sample_file)
        chunk = file.chunks[1]
        await db_provider.delete(chunk.chunk_id, chunk.storage_location)

        assert await file_service.delete_file(file.file_id) is True
        assert file_service.get_file_metadata(file.file_id).status == FileStatus.DELETED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_id", [UNKNOWN_ID, "bogus"])
    async def test_unknown_or_malformed_id(self, file_service, file_id):
        assert await file_service.delete_file(file_id) is False


class TestVerify:
    @pytest.mark.asyncio
    async def test_intact_file(self, file_service, sample_file):
        file = await file_service.upload_file(sample_file)

        assert await file_service.verify_file_integrity(file.file_id) is True

        stored = file_service.get_file_metadata(file.file_id)
        assert stored.status == FileStatus.COMPLETED
        assert all(c.status == ChunkStatus.VERIFIED for c in stored.chunks)
        assert all(c.last_verified_at is not None for c in stored.chunks)

    @pytest.mark.asyncio
    async def test_corrupted_chunk_is_isolated(self, file_service, fs_provider, sample_file):
        file = await file_service.upload_file(sample_file)
        flip_first_byte(fs_provider.get_chunk_path(file.chunks[0].storage_location))

        assert await file_service.verify_file_integrity(file.file_id) is False

        stored = file_service.get_file_metadata(file.file_id)
        assert stored.status == FileStatus.CORRUPTED
        assert stored.chunks[0].status == ChunkStatus.CORRUPTED
        assert stored.chunks[0].last_verified_at is None
        assert all(c.status == ChunkStatus.VERIFIED for c in stored.chunks[1:])

    @pytest.mark.asyncio
    async def test_missing_chunk(self, file_service, db_provider, sample_file):
        file = await file_service.upload_file(sample_file)
        chunk = file.chunks[3]
        await db_provider.delete(chunk.chunk_id, chunk.storage_location)

        assert await file_service.verify_file_integrity(file.file_id) is False

        stored = file_service.get_file_metadata(file.file_id)
        assert stored.chunks[3].status == ChunkStatus.MISSING
        assert stored.status == FileStatus.CORRUPTED

    @pytest.mark.asyncio
    async def test_unregistered_provider_marks_missing(self, test_db, settings, fs_provider, file_service, sample_file):
        file = await file_service.upload_file(sample_file)
        fs_only = FileService([fs_provider], settings)

        assert await fs_only.verify_file_integrity(file.file_id) is False

        stored = fs_only.get_file_metadata(file.file_id)
        assert [c.status for c in stored.chunks] == [ChunkStatus.VERIFIED, ChunkStatus.MISSING] * 5

    @pytest.mark.asyncio
    async def test_corrupted_file_stays_corrupted(self, file_service, fs_provider, sample_file):
        file = await file_service.upload_file(sample_file)
        path = fs_provider.get_chunk_path(file.chunks[0].storage_location)
        flip_first_byte(path)
        await file_service.verify_file_integrity(file.file_id)
        flip_first_byte(path)

        assert await file_service.verify_file_integrity(file.file_id) is True
        assert file_service.get_file_metadata(file.file_id).status == FileStatus.CORRUPTED

    @pytest.mark.asyncio
    async def test_unknown_id(self, file_service):
        assert await file_service.verify_file_integrity(UNKNOWN_ID) is False


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_files_newest_first(self, file_service, sample_file, tmp_path):
        other = tmp_path / "other.txt"
        other.write_bytes(b"different content")

        first = await file_service.upload_file(sample_file)
        second = await file_service.upload_file(other)

        assert [f.file_id for f in file_service.list_files()] == [second.file_id, first.file_id]

    def test_get_file_metadata_unknown_or_malformed(self, file_service):
        assert file_service.get_file_metadata(UNKNOWN_ID) is None
        assert file_service.get_file_metadata("not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_check_providers(self, file_service):
        assert await file_service.check_providers() == {"FileSystem": True, "Database": True}
