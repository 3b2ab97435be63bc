"""Sequential entry sources over the supported archive containers.

Every reader exposes the same small surface: use it as a context manager and
iterate :meth:`EntrySource.entries` to get :class:`ArchiveEntry` objects in
the order the container stores them. Content is read on demand so that a
damaged entry only affects itself.
"""

from __future__ import annotations

import os
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, Iterator, Optional, Sequence, Type

import py7zr
import rarfile
from loguru import logger

from .constants import RAR_EXTENSIONS, SEVENZIP_EXTENSIONS, TAR_EXTENSIONS, ZIP_EXTENSIONS
from .predicates import base_name, extension_of


@dataclass
class ArchiveEntry:
    name: str
    mod_time: Optional[datetime]
    is_dir: bool = False
    reader: Callable[[], bytes] = field(default=lambda: b"", repr=False)

    def read(self) -> bytes:
        return self.reader()


def _from_date_time(date_time: Optional[Sequence[int]]) -> Optional[datetime]:
    """Convert a zip/rar ``date_time`` tuple, ``None`` when absent or invalid."""
    if not date_time:
        return None
    try:
        return datetime(*date_time[:6])
    except (TypeError, ValueError):
        return None


def _from_epoch(value: Optional[float]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value)
    except (OverflowError, OSError, ValueError):
        return None


def _from_archive_time(value) -> Optional[datetime]:
    """7z times come back as datetimes or as FILETIME stamps, depending on py7zr."""
    if value is None:
        return None
    if hasattr(value, "totimestamp"):
        return _from_epoch(value.totimestamp())
    if isinstance(value, datetime):
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value
    return None


class EntrySource:
    """Base class of the archive readers."""

    format_name = "archive"

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = os.fspath(path)
        self._archive = None

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    def __enter__(self) -> "EntrySource":
        if self._archive is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def entries(self) -> Iterator[ArchiveEntry]:
        raise NotImplementedError


class ZipEntrySource(EntrySource):
    format_name = "zip"

    def open(self) -> None:
        self._archive = zipfile.ZipFile(self.path, "r")

    def entries(self) -> Iterator[ArchiveEntry]:
        for info in self._archive.infolist():
            yield ArchiveEntry(
                name=base_name(info.filename),
                mod_time=_from_date_time(info.date_time),
                is_dir=info.is_dir(),
                reader=partial(self._archive.read, info),
            )


class RarEntrySource(EntrySource):
    format_name = "rar"

    def open(self) -> None:
        self._archive = rarfile.RarFile(self.path, "r")

    def entries(self) -> Iterator[ArchiveEntry]:
        for info in self._archive.infolist():
            yield ArchiveEntry(
                name=base_name(info.filename),
                mod_time=_from_date_time(info.date_time),
                is_dir=info.is_dir(),
                reader=partial(self._archive.read, info),
            )


class TarEntrySource(EntrySource):
    format_name = "tar"

    def open(self) -> None:
        self._archive = tarfile.open(self.path, "r:*")

    def _read_member(self, member: tarfile.TarInfo) -> bytes:
        handle = self._archive.extractfile(member)
        if handle is None:
            raise tarfile.ExtractError(f"不是普通文件: {member.name}")
        with handle:
            return handle.read()

    def entries(self) -> Iterator[ArchiveEntry]:
        for member in self._archive:
            yield ArchiveEntry(
                name=base_name(member.name),
                mod_time=_from_epoch(member.mtime),
                is_dir=member.isdir(),
                reader=partial(self._read_member, member),
            )


class SevenZipEntrySource(EntrySource):
    format_name = "7z"

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__(path)
        self._workdir: Optional[tempfile.TemporaryDirectory] = None
        self._infos = []

    def open(self) -> None:
        try:
            self._archive = py7zr.SevenZipFile(self.path, mode="r")
            self._infos = self._archive.list()
            # 固实压缩无法按条目随机读取，先整体解压到临时目录
            self._workdir = tempfile.TemporaryDirectory(prefix="cbtu-7z-")
            self._archive.extractall(path=self._workdir.name)
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        super().close()
        if self._workdir is not None:
            self._workdir.cleanup()
            self._workdir = None

    def _read_extracted(self, filename: str) -> bytes:
        with open(os.path.join(self._workdir.name, filename), "rb") as f:
            return f.read()

    def entries(self) -> Iterator[ArchiveEntry]:
        for info in self._infos:
            yield ArchiveEntry(
                name=base_name(info.filename),
                mod_time=_from_archive_time(info.creationtime),
                is_dir=info.is_directory,
                reader=partial(self._read_extracted, info.filename),
            )


def source_class_for(path: str | os.PathLike[str]) -> Type[EntrySource]:
    """Pick a reader by extension, then by content signature."""

    source_path = os.fspath(path)
    ext = extension_of(source_path)
    if ext in ZIP_EXTENSIONS:
        return ZipEntrySource
    if ext in RAR_EXTENSIONS:
        return RarEntrySource
    if ext in TAR_EXTENSIONS:
        return TarEntrySource
    if ext in SEVENZIP_EXTENSIONS:
        return SevenZipEntrySource

    # 扩展名不明确时按文件头识别
    if zipfile.is_zipfile(source_path):
        return ZipEntrySource
    if rarfile.is_rarfile(source_path):
        return RarEntrySource
    if py7zr.is_7zfile(source_path):
        return SevenZipEntrySource
    if tarfile.is_tarfile(source_path):
        return TarEntrySource
    raise ValueError(f"不支持的压缩包格式: {source_path}")


def open_entry_source(path: str | os.PathLike[str]) -> EntrySource:
    """Return an opened reader for *path*; close it with ``with``."""

    source = source_class_for(path)(path)
    source.open()
    logger.debug(f"打开 {source.format_name} 压缩包: {source.path}")
    return source


__all__ = [
    "ArchiveEntry",
    "EntrySource",
    "ZipEntrySource",
    "RarEntrySource",
    "TarEntrySource",
    "SevenZipEntrySource",
    "source_class_for",
    "open_entry_source",
]
