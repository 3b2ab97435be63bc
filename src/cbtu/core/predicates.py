"""Filename predicates deciding what gets converted and what gets packed."""

from __future__ import annotations

from typing import Tuple

from loguru import logger

from .constants import COMIC_EXTENSIONS, IMAGE_EXTENSIONS, RARE_IMAGE_EXTENSIONS, TARGET_EXTENSION


def base_name(name: str) -> str:
    """Last path component, accepting both ``/`` and ``\\`` separators."""
    return name.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]


def split_name(name: str) -> Tuple[str, str]:
    """Split a base name into ``(stem, extension)``.

    Unlike :func:`os.path.splitext` a leading dot starts the extension, so
    ``".jpg"`` yields ``("", ".jpg")``.
    """
    index = name.rfind(".")
    if index < 0:
        return name, ""
    return name[:index], name[index:]


def extension_of(name: str) -> str:
    return split_name(base_name(name))[1].lower()


def is_image(name: str) -> bool:
    ext = extension_of(name)
    if ext in IMAGE_EXTENSIONS:
        return True
    if ext in RARE_IMAGE_EXTENSIONS:
        logger.debug(f"少见图片格式: {name}")
        return True
    return False


def is_comic(name: str) -> bool:
    return extension_of(name) in COMIC_EXTENSIONS


def target_name_for(source_name: str) -> str:
    """``Vol.01.cbz`` -> ``Vol.01.cbt``"""
    stem, _ = split_name(base_name(source_name))
    return stem + TARGET_EXTENSION


__all__ = ["base_name", "split_name", "extension_of", "is_image", "is_comic", "target_name_for"]
