# src/cbtu/core/config.py

"""Runtime configuration for the repack pipeline."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from loguru import logger

from .constants import DEFAULT_DENYLIST

DEFAULT_CONFIG_NAME = "cbtu.toml"


@dataclass(frozen=True)
class RepackConfig:
    """Settings threaded through the classifier and the batch driver.

    Attributes:
        exclude_off: skip the digit-count rule of the classifier.
        denylist: junk filename fragments, compared case-insensitively.
        workers: number of archives converted concurrently in tree mode.
    """

    exclude_off: bool = False
    denylist: Tuple[str, ...] = field(default=DEFAULT_DENYLIST)
    workers: int = 1

    def with_overrides(
        self,
        *,
        exclude_off: Optional[bool] = None,
        workers: Optional[int] = None,
    ) -> "RepackConfig":
        changes: Dict[str, Any] = {}
        if exclude_off is not None:
            changes["exclude_off"] = exclude_off
        if workers is not None:
            changes["workers"] = workers
        return replace(self, **changes) if changes else self


def _string_list(value: Any, key: str) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"配置项 {key} 必须是字符串列表")
    return tuple(value)


def config_from_dict(data: Dict[str, Any]) -> RepackConfig:
    """Build a :class:`RepackConfig` from parsed TOML tables."""

    exclude = data.get("exclude", {}) or {}
    batch = data.get("batch", {}) or {}

    exclude_off = exclude.get("off", False)
    if not isinstance(exclude_off, bool):
        raise ValueError("配置项 exclude.off 必须是布尔值")

    denylist: Sequence[str] = DEFAULT_DENYLIST
    if "denylist" in exclude:
        denylist = _string_list(exclude["denylist"], "exclude.denylist")
    if "extra_denylist" in exclude:
        denylist = tuple(denylist) + _string_list(exclude["extra_denylist"], "exclude.extra_denylist")

    workers = batch.get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValueError("配置项 batch.workers 必须是正整数")

    return RepackConfig(exclude_off=exclude_off, denylist=tuple(denylist), workers=workers)


def load_config(path: Optional[str | os.PathLike[str]] = None) -> RepackConfig:
    """Load settings from a TOML file, falling back to defaults.

    Without *path*, ``cbtu.toml`` next to the package is used when present.
    """

    config_path = Path(path) if path else Path(__file__).parent.parent / DEFAULT_CONFIG_NAME
    if not config_path.exists():
        if path:
            logger.warning(f"配置文件不存在，使用默认配置: {config_path}")
        return RepackConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    logger.debug(f"已加载配置文件: {config_path}")
    return config_from_dict(data)


__all__ = ["RepackConfig", "config_from_dict", "load_config", "DEFAULT_CONFIG_NAME"]
