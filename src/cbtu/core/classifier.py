"""
Junk page classifier

判断压缩包中的图片是否为广告/水印/发布组标识等非正文页面。
规则按顺序匹配，命中即返回；阈值为经验值，修改前请先在真实样本上验证。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger

from .config import RepackConfig
from .constants import (
    DIGIT_SUFFIX_LENGTH_DELTA,
    EXCLUDED_PREFIXES,
    EXCLUDED_STEM_SUFFIXES,
    MAX_LENGTH_DELTA,
    MAX_TIME_GAP_SECONDS,
    MIN_DIGIT_COUNT,
    SIMILAR_LENGTH_DELTA,
)
from .predicates import split_name

_DEFAULT_CONFIG = RepackConfig()


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def count_digits(text: str) -> int:
    return sum(1 for char in text if _is_digit(char))


def is_excluded(
    name: str,
    previous_name: str,
    current_time: Optional[datetime],
    previous_time: Optional[datetime],
    config: RepackConfig = _DEFAULT_CONFIG,
) -> bool:
    """Return ``True`` when *name* looks like a junk page.

    Args:
        name: base filename of the current entry.
        previous_name: base filename of the last accepted entry, ``""`` if none.
        current_time: modification time of the current entry, if known.
        previous_time: modification time of the last accepted entry, ``None``
            before the first accept.
        config: supplies the denylist and the ``exclude_off`` switch.
    """
    stem, _ = split_name(name)
    lowered = name.lower()
    lowered_stem, _ = split_name(lowered)

    # 发布组常用的文件名前后缀
    if lowered.startswith(EXCLUDED_PREFIXES) or lowered_stem.endswith(EXCLUDED_STEM_SUFFIXES):
        return True

    for fragment in config.denylist:
        if fragment.lower() in lowered:
            return True

    # 正文页一般带页码，数字少于 2 个视为封面/广告/制作信息
    if not config.exclude_off and count_digits(stem) < MIN_DIGIT_COUNT:
        return True

    if previous_time is None:
        return False

    # 缺失时间戳按零时间处理，与已有时间的上一页相比必然超过阈值
    if current_time is None:
        logger.info(f"缺少修改时间: {name}")
        return True

    gap = abs((current_time - previous_time).total_seconds())
    if gap > MAX_TIME_GAP_SECONDS:
        logger.info(f"与上一页时间间隔超过 20 天: {name}")
        return True

    if previous_name == "":
        return False

    # 按 UTF-8 字节数比较长度
    delta = abs(len(name.encode("utf-8")) - len(previous_name.encode("utf-8")))
    if delta < SIMILAR_LENGTH_DELTA:
        return False
    if delta > MAX_LENGTH_DELTA:
        return True

    # 末两位之一是数字则视为正文页; 长度条件只约束倒数第二位
    last_is_digit = _is_digit(stem[-1:]) if stem else False
    second_is_digit = _is_digit(stem[-2:-1]) if len(stem) > 1 else False
    if last_is_digit or (second_is_digit and delta < DIGIT_SUFFIX_LENGTH_DELTA):
        return False

    return False


@dataclass
class ClassifierState:
    """Lookback window: the last entry that actually reached the output."""

    previous_name: str = ""
    previous_time: Optional[datetime] = None

    def check(self, name: str, mod_time: Optional[datetime], config: RepackConfig = _DEFAULT_CONFIG) -> bool:
        return is_excluded(name, self.previous_name, mod_time, self.previous_time, config)

    def update(self, name: str, mod_time: Optional[datetime]) -> None:
        self.previous_name = name
        self.previous_time = mod_time


__all__ = ["is_excluded", "count_digits", "ClassifierState"]
