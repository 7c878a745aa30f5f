"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- AcquireConfig: How the reader databases are fetched from the device
- CompilerConfig: External e-reader compiler settings
- ManifestConfig: Package manifest metadata
- MarkupConfig: Handling of malformed article markup
- OutputConfig: Output and work directories
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml


@dataclass
class AcquireConfig:
    """Configuration for fetching the reader databases.

    Attributes:
        method: "adb" for a local device backup, "scp" for a remote copy
            over SSH, "none" when the databases are already in the work dir
        adb_command: adb executable
        backup_name: File name of the Android backup inside the work dir
        scp_command: scp executable
        ssh_host: Remote host (``user@host``) for the "scp" method
        remote_root: Directory on the remote host holding one folder per app id
    """

    method: str = "adb"
    adb_command: str = "adb"
    backup_name: str = "papers.ab"
    scp_command: str = "scp"
    ssh_host: str | None = None
    remote_root: str = "/data/data"


@dataclass
class CompilerConfig:
    """Configuration for the external document compiler.

    Attributes:
        enabled: Whether to run the compiler; when disabled the manifest is
            copied to the output directory instead
        command: Compiler executable
        extension: Extension of the artifact the compiler produces
    """

    enabled: bool = True
    command: str = "kindlegen"
    extension: str = ".mobi"


@dataclass
class ManifestConfig:
    """Metadata written into the package manifest."""

    language: str = "da-dk"
    creator: str = "daily-edition"
    subject: str = "Newspaper"


@dataclass
class MarkupConfig:
    """Configuration for malformed article markup.

    Attributes:
        on_error: "skip_article" drops the offending article, "abort_source"
            fails the whole source
    """

    on_error: str = "skip_article"


@dataclass
class OutputConfig:
    """Configuration for output locations.

    Attributes:
        output_dir: Directory receiving the compiled artifacts
        work_dir: Working directory for acquired databases and build files;
            a fresh temporary directory when unset
    """

    output_dir: str = "out"
    work_dir: str | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to a file in the work directory
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections.

    ``sources`` lists the source names to process; empty means all built-in
    sources.
    """

    sources: list[str] = field(default_factory=list)
    acquire: AcquireConfig = field(default_factory=AcquireConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    markup: MarkupConfig = field(default_factory=MarkupConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "sources": list(cfg.sources),
        "acquire": {
            "method": cfg.acquire.method,
            "adb_command": cfg.acquire.adb_command,
            "backup_name": cfg.acquire.backup_name,
            "scp_command": cfg.acquire.scp_command,
            "ssh_host": cfg.acquire.ssh_host,
            "remote_root": cfg.acquire.remote_root,
        },
        "compiler": {
            "enabled": cfg.compiler.enabled,
            "command": cfg.compiler.command,
            "extension": cfg.compiler.extension,
        },
        "manifest": {
            "language": cfg.manifest.language,
            "creator": cfg.manifest.creator,
            "subject": cfg.manifest.subject,
        },
        "markup": {
            "on_error": cfg.markup.on_error,
        },
        "output": {
            "output_dir": cfg.output.output_dir,
            "work_dir": cfg.output.work_dir,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        sources=list(data.get("sources") or []),
        acquire=AcquireConfig(**data["acquire"]),
        compiler=CompilerConfig(**data["compiler"]),
        manifest=ManifestConfig(**data["manifest"]),
        markup=MarkupConfig(**data["markup"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )
