"""
External e-reader compiler.

``kindlegen`` reads the OPF manifest and writes the compiled book next to
it, named after the manifest. The runner moves that artifact into the
output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
import subprocess
from typing import Protocol

from .core.errors import CompilerError

logger = logging.getLogger("daily_edition.compiler")


class Compiler(Protocol):
    def compile(self, manifest_path: Path) -> Path: ...


class Kindlegen:
    """Run ``kindlegen`` on a manifest and return the produced artifact."""

    def __init__(self, command: str = "kindlegen", extension: str = ".mobi"):
        self.command = command
        self.extension = extension

    def artifact_path(self, manifest_path: Path) -> Path:
        return manifest_path.with_suffix(self.extension)

    def compile(self, manifest_path: Path) -> Path:
        try:
            result = subprocess.run(
                [self.command, manifest_path.name],
                cwd=manifest_path.parent,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise CompilerError(f"{self.command} could not be run: {exc}") from exc

        # kindlegen exits 1 when it only emitted warnings.
        if result.returncode not in (0, 1):
            raise CompilerError(
                f"{self.command} failed ({result.returncode}): {result.stdout.strip()[-500:]}"
            )
        artifact = self.artifact_path(manifest_path)
        if not artifact.is_file():
            raise CompilerError(f"{self.command} did not produce {artifact.name}")
        logger.debug("Compiled %s", artifact)
        return artifact


def relocate(artifact: Path, output_dir: Path) -> Path:
    """Move an artifact into ``output_dir``, replacing an older one."""
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / artifact.name
    if target.exists():
        target.unlink()
    shutil.move(str(artifact), str(target))
    return target
