"""
Acquisition of the reader databases.

The core pipeline only needs ``apps/<app_id>/db/data.db`` to exist inside
the work directory. The acquirers here put it there, either from a local
device through an Android backup or from a remote host through scp.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
import subprocess
import tarfile
from typing import Protocol, Sequence
import zlib

from .config import AcquireConfig
from .core.errors import AcquisitionError
from .input.edition import database_path
from .sources import EditionSource

logger = logging.getLogger("daily_edition.acquire")

# "ANDROID BACKUP\n1\n1\nnone\n": magic, format version, compressed, unencrypted.
BACKUP_HEADER_SIZE = 24


class Acquirer(Protocol):
    def acquire(self, sources: Sequence[EditionSource], work_dir: Path) -> None: ...


def _run(args: list[str], timeout: float | None = None) -> subprocess.CompletedProcess:
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise AcquisitionError(f"{args[0]} could not be run: {exc}") from exc
    if result.returncode != 0:
        raise AcquisitionError(
            f"{' '.join(args)} failed ({result.returncode}): {result.stderr.strip()}"
        )
    return result


def extract_android_backup(backup_path: Path, dest: Path) -> list[str]:
    """Unpack an unencrypted Android backup into ``dest``.

    Returns:
        Names of the extracted members.

    Raises:
        AcquisitionError: If the backup is missing or truncated, is not a
            zlib-compressed tar archive, or contains members outside ``dest``.
    """
    try:
        raw = backup_path.read_bytes()
    except OSError as exc:
        # adb exits 0 without writing a file when the backup is declined.
        raise AcquisitionError(f"Backup {backup_path} could not be read: {exc}") from exc
    if len(raw) <= BACKUP_HEADER_SIZE:
        raise AcquisitionError(f"Backup {backup_path} is empty")
    try:
        payload = zlib.decompress(raw[BACKUP_HEADER_SIZE:])
    except zlib.error as exc:
        raise AcquisitionError(f"Backup {backup_path} is not a compressed backup: {exc}") from exc

    try:
        return _extract_tar(payload, dest)
    except (tarfile.TarError, OSError) as exc:
        raise AcquisitionError(f"Backup {backup_path} could not be unpacked: {exc}") from exc


def _extract_tar(payload: bytes, dest: Path) -> list[str]:
    root = dest.resolve()
    with tarfile.open(fileobj=io.BytesIO(payload)) as archive:
        members = archive.getmembers()
        for member in members:
            target = (root / member.name).resolve()
            if target != root and root not in target.parents:
                raise AcquisitionError(f"Backup member {member.name!r} escapes {dest}")
            if not (member.isfile() or member.isdir()):
                raise AcquisitionError(f"Backup member {member.name!r} is not a regular file")
        dest.mkdir(parents=True, exist_ok=True)
        if hasattr(tarfile, "data_filter"):
            archive.extractall(dest, filter="data")
        else:
            archive.extractall(dest)
    return [m.name for m in members]


class AndroidBackupAcquirer:
    """Back up the reader apps with ``adb`` and unpack their data."""

    def __init__(self, adb_command: str = "adb", backup_name: str = "papers.ab"):
        self.adb_command = adb_command
        self.backup_name = backup_name

    def acquire(self, sources: Sequence[EditionSource], work_dir: Path) -> None:
        backup = work_dir / self.backup_name
        logger.info("Requesting backup of %d apps; confirm on the device", len(sources))
        _run(
            [self.adb_command, "backup", "-f", str(backup), "-noapk"]
            + [s.app_id for s in sources]
        )
        members = extract_android_backup(backup, work_dir)
        logger.info("Extracted %d backup members", len(members))


class RemoteCopyAcquirer:
    """Copy each app's database from a remote host with ``scp``."""

    def __init__(self, ssh_host: str, remote_root: str = "/data/data", scp_command: str = "scp"):
        self.ssh_host = ssh_host
        self.remote_root = remote_root.rstrip("/")
        self.scp_command = scp_command

    def remote_path(self, source: EditionSource) -> str:
        return f"{self.remote_root}/{source.app_id}/databases/data.db"

    def acquire(self, sources: Sequence[EditionSource], work_dir: Path) -> None:
        for source in sources:
            target = database_path(work_dir, source)
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                _run(
                    [self.scp_command, "-q", f"{self.ssh_host}:{self.remote_path(source)}", str(target)]
                )
            except AcquisitionError as exc:
                # The source stays unavailable and is skipped by the runner.
                logger.warning("Copy failed for %s: %s", source.name, exc.message)


class NullAcquirer:
    def acquire(self, sources: Sequence[EditionSource], work_dir: Path) -> None:
        logger.debug("Acquisition disabled; using databases in %s", work_dir)


def build_acquirer(cfg: AcquireConfig) -> Acquirer:
    """Create the acquirer selected by ``cfg.method``."""
    method = cfg.method.lower()
    if method == "adb":
        return AndroidBackupAcquirer(cfg.adb_command, cfg.backup_name)
    if method == "scp":
        if not cfg.ssh_host:
            raise ValueError("acquire.ssh_host is required for the scp method")
        return RemoteCopyAcquirer(cfg.ssh_host, cfg.remote_root, cfg.scp_command)
    if method == "none":
        return NullAcquirer()
    raise ValueError(f"Unknown acquire method: {cfg.method}")
