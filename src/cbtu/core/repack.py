"""Archive -> .cbt repack pipeline.

Entries are pulled from the source in container order, non-images are
skipped, the classifier decides accept/exclude against the last accepted
entry, accepted images are appended to the tar output and excluded ones are
written as loose backup files next to it.
"""

from __future__ import annotations

import io
import os
import tarfile
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import rarfile
from loguru import logger

from .classifier import ClassifierState
from .config import RepackConfig
from .constants import TAR_ENTRY_MODE
from .predicates import is_image, target_name_for
from .sources import ArchiveEntry, open_entry_source


# 单个条目读取失败时跳过该条目，其余异常照常抛出
ENTRY_READ_ERRORS = (
    OSError,
    EOFError,
    zlib.error,
    zipfile.BadZipFile,
    rarfile.Error,
    tarfile.TarError,
)


class RepackError(Exception):
    """Writing the output archive failed; the conversion of *source* is aborted."""

    def __init__(self, message: str, *, source: str, entry: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source
        self.entry = entry


@dataclass
class RepackResult:
    """What happened to one source archive."""

    source: str
    target: str
    accepted: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    backups: List[str] = field(default_factory=list)
    failed_entries: List[str] = field(default_factory=list)


def backup_path_for(target: str, entry_name: str) -> str:
    """``/out/Vol.01.cbt`` + ``ad.jpg`` -> ``/out/Vol.01_ad.jpg``"""
    stem, _ = os.path.splitext(target)
    return f"{stem}_{entry_name}"


def write_backup(target: str, entry_name: str, data: bytes) -> str:
    """Write an excluded entry next to *target* and return the path used.

    Existing files are never overwritten: ``_1``, ``_2``... is inserted
    before the extension until a free name is found.
    """
    candidate = backup_path_for(target, entry_name)
    root, ext = os.path.splitext(candidate)
    index = 0
    while True:
        try:
            with open(candidate, "xb") as f:
                f.write(data)
            return candidate
        except FileExistsError:
            index += 1
            candidate = f"{root}_{index}{ext}"


def _tar_mtime(mod_time: Optional[datetime]) -> int:
    if mod_time is None:
        return 0
    try:
        return max(int(mod_time.timestamp()), 0)
    except (OverflowError, OSError, ValueError):
        return 0


def _append_entry(writer: tarfile.TarFile, entry: ArchiveEntry, data: bytes, source: str) -> None:
    info = tarfile.TarInfo(name=entry.name)
    info.mode = TAR_ENTRY_MODE
    info.size = len(data)
    info.mtime = _tar_mtime(entry.mod_time)
    try:
        writer.addfile(info, io.BytesIO(data))
    except (OSError, tarfile.TarError) as exc:
        raise RepackError(
            f"写入 .cbt 失败, 文件: {source}, 条目: {entry.name}, 错误: {exc}",
            source=source,
            entry=entry.name,
        ) from exc


def repack_archive(
    source: str | os.PathLike[str],
    target: str | os.PathLike[str],
    config: Optional[RepackConfig] = None,
) -> RepackResult:
    """Transcode *source* into the tar archive *target*.

    Raises:
        FileExistsError: *target* already exists; nothing is overwritten.
        RepackError: the tar output could not be written.
        OSError, zipfile.BadZipFile, rarfile.Error, tarfile.TarError: the
            source could not be opened.
    """
    config = config or RepackConfig()
    source_path = os.fspath(source)
    target_path = os.fspath(target)
    result = RepackResult(source=source_path, target=target_path)
    state = ClassifierState()

    with open_entry_source(source_path) as archive, \
            open(target_path, "xb") as output, \
            tarfile.open(fileobj=output, mode="w") as writer:
        for entry in archive.entries():
            if entry.is_dir or not is_image(entry.name):
                continue

            try:
                data = entry.read()
            except ENTRY_READ_ERRORS as exc:
                logger.warning(f"读取条目失败 {entry.name} ({source_path}): {exc}")
                result.failed_entries.append(entry.name)
                continue

            if state.check(entry.name, entry.mod_time, config):
                result.excluded.append(entry.name)
                try:
                    backup = write_backup(target_path, entry.name, data)
                except OSError as exc:
                    logger.warning(f"备份排除文件失败 {entry.name}: {exc}")
                    result.failed_entries.append(entry.name)
                    continue
                result.backups.append(backup)
                logger.info(f"排除: {entry.name} -> {os.path.basename(backup)}")
                continue

            _append_entry(writer, entry, data, source_path)
            state.update(entry.name, entry.mod_time)
            result.accepted.append(entry.name)

    logger.debug(
        f"完成 {os.path.basename(target_path)}: 保留 {len(result.accepted)}, "
        f"排除 {len(result.excluded)}, 失败 {len(result.failed_entries)}"
    )
    return result


def pack(
    source: str | os.PathLike[str],
    target_dir: str | os.PathLike[str],
    config: Optional[RepackConfig] = None,
) -> RepackResult:
    """Convert *source* into ``target_dir/<stem>.cbt``."""
    source_path = os.fspath(source)
    logger.info(f"转换: {source_path}")
    target = os.path.join(os.fspath(target_dir), target_name_for(source_path))
    return repack_archive(source_path, target, config)


__all__ = ["RepackError", "RepackResult", "backup_path_for", "write_backup", "repack_archive", "pack"]
