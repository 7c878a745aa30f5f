"""Tests for database acquisition."""

from __future__ import annotations

import io
from pathlib import Path
import tarfile
import zlib

import pytest

from daily_edition import acquire
from daily_edition.acquire import (
    AndroidBackupAcquirer,
    NullAcquirer,
    RemoteCopyAcquirer,
    build_acquirer,
    extract_android_backup,
)
from daily_edition.config import AcquireConfig
from daily_edition.core.errors import AcquisitionError
from daily_edition.sources import SOURCES, get_source

HEADER = b"ANDROID BACKUP\n1\n1\nnone\n"


def _backup(path: Path, files: dict[str, bytes]) -> Path:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as archive:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    path.write_bytes(HEADER + zlib.compress(buffer.getvalue()))
    return path


def test_header_is_24_bytes():
    assert len(HEADER) == acquire.BACKUP_HEADER_SIZE


def test_extract_android_backup_unpacks_databases(tmp_path: Path):
    backup = _backup(
        tmp_path / "papers.ab",
        {"apps/dk.politiken.reader/db/data.db": b"SQLite format 3\x00"},
    )

    names = extract_android_backup(backup, tmp_path / "work")

    assert names == ["apps/dk.politiken.reader/db/data.db"]
    extracted = tmp_path / "work" / "apps" / "dk.politiken.reader" / "db" / "data.db"
    assert extracted.read_bytes() == b"SQLite format 3\x00"


def test_extract_rejects_members_outside_destination(tmp_path: Path):
    backup = _backup(tmp_path / "evil.ab", {"../escape.txt": b"x"})

    with pytest.raises(AcquisitionError):
        extract_android_backup(backup, tmp_path / "work")
    assert not (tmp_path / "escape.txt").exists()


def test_extract_rejects_uncompressed_payload(tmp_path: Path):
    backup = tmp_path / "bad.ab"
    backup.write_bytes(HEADER + b"not zlib data")

    with pytest.raises(AcquisitionError):
        extract_android_backup(backup, tmp_path / "work")


def test_android_backup_acquirer_runs_adb(tmp_path: Path, monkeypatch):
    calls = []

    def fake_run(args, timeout=None):
        calls.append(args)
        _backup(Path(args[3]), {"apps/dk.politiken.reader/db/data.db": b"db"})

    monkeypatch.setattr(acquire, "_run", fake_run)
    AndroidBackupAcquirer().acquire(list(SOURCES), tmp_path)

    assert calls == [
        ["adb", "backup", "-f", str(tmp_path / "papers.ab"), "-noapk",
         "dk.politiken.reader", "dk.information.areader"]
    ]
    assert (tmp_path / "apps" / "dk.politiken.reader" / "db" / "data.db").is_file()


def test_remote_copy_continues_after_failed_source(tmp_path: Path, monkeypatch):
    calls = []

    def fake_run(args, timeout=None):
        calls.append(args)
        if "dk.politiken.reader" in args[2]:
            raise AcquisitionError("no such file")
        Path(args[3]).write_bytes(b"db")

    monkeypatch.setattr(acquire, "_run", fake_run)
    RemoteCopyAcquirer("reader@tablet").acquire(list(SOURCES), tmp_path)

    assert [c[2] for c in calls] == [
        "reader@tablet:/data/data/dk.politiken.reader/databases/data.db",
        "reader@tablet:/data/data/dk.information.areader/databases/data.db",
    ]
    assert (tmp_path / "apps" / "dk.information.areader" / "db" / "data.db").is_file()
    assert not (tmp_path / "apps" / "dk.politiken.reader" / "db" / "data.db").exists()


def test_run_reports_missing_tool():
    with pytest.raises(AcquisitionError):
        acquire._run(["definitely-not-a-real-tool-xyz"])


def test_build_acquirer_by_method():
    assert isinstance(build_acquirer(AcquireConfig(method="adb")), AndroidBackupAcquirer)
    assert isinstance(build_acquirer(AcquireConfig(method="none")), NullAcquirer)
    remote = build_acquirer(AcquireConfig(method="scp", ssh_host="me@host", remote_root="/srv/"))
    assert isinstance(remote, RemoteCopyAcquirer)
    assert remote.remote_path(get_source("Information")) == "/srv/dk.information.areader/databases/data.db"
    with pytest.raises(ValueError):
        build_acquirer(AcquireConfig(method="scp"))
    with pytest.raises(ValueError):
        build_acquirer(AcquireConfig(method="carrier-pigeon"))


def test_extract_rejects_payload_that_is_not_a_tar(tmp_path: Path):
    backup = tmp_path / "notar.ab"
    backup.write_bytes(HEADER + zlib.compress(b"not a tar archive" * 100))

    with pytest.raises(AcquisitionError) as excinfo:
        extract_android_backup(backup, tmp_path / "work")
    assert "could not be unpacked" in excinfo.value.message


def test_extract_missing_backup_file(tmp_path: Path):
    with pytest.raises(AcquisitionError) as excinfo:
        extract_android_backup(tmp_path / "never-written.ab", tmp_path / "work")
    assert "could not be read" in excinfo.value.message


def test_declined_backup_raises_acquisition_error(tmp_path: Path, monkeypatch):
    # adb succeeds but writes nothing when the user declines on the device.
    monkeypatch.setattr(acquire, "_run", lambda args, timeout=None: None)

    with pytest.raises(AcquisitionError):
        AndroidBackupAcquirer().acquire(list(SOURCES), tmp_path)
