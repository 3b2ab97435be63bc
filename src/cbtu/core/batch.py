"""Batch driver: single archive or a mirrored directory tree."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger
from tqdm import tqdm

from .config import RepackConfig
from .predicates import is_comic, target_name_for
from .repack import RepackResult, pack

STATUS_CONVERTED = "converted"
STATUS_EXISTS = "exists"
STATUS_ERROR = "error"


@dataclass
class BatchOutcome:
    """Result of converting a single source archive."""

    source_path: str
    target_path: str
    status: str
    message: str
    result: Optional[RepackResult] = None


def _summarize(result: RepackResult) -> str:
    message = f"保留 {len(result.accepted)} 页, 排除 {len(result.excluded)} 页"
    if result.failed_entries:
        message += f", {len(result.failed_entries)} 个条目读取/备份失败"
    return message


def _raise_walk_error(error: OSError) -> None:
    raise error


def discover_jobs(source_dir: str, target_dir: str) -> List[Tuple[str, str]]:
    """Mirror the directory tree and list ``(archive, destination_dir)`` pairs.

    Directory creation errors propagate and abort the run.
    """
    jobs: List[Tuple[str, str]] = []
    for root, dirs, files in os.walk(source_dir, onerror=_raise_walk_error):
        dirs.sort()
        rel = os.path.relpath(root, source_dir)
        mirrored = target_dir if rel == "." else os.path.join(target_dir, rel)
        os.makedirs(mirrored, exist_ok=True)

        for name in sorted(files):
            if is_comic(name):
                jobs.append((os.path.join(root, name), mirrored))
    return jobs


def convert_file(source: str, target_dir: str, config: Optional[RepackConfig] = None) -> BatchOutcome:
    """Run the pipeline for one archive, turning failures into an outcome."""

    target = os.path.join(target_dir, target_name_for(source))
    try:
        result = pack(source, target_dir, config)
    except FileExistsError:
        logger.error(f"转换失败, 目标已存在: {target}")
        return BatchOutcome(source, target, STATUS_EXISTS, "目标文件已存在，未覆盖")
    except Exception as exc:
        logger.error(f"转换失败, 文件: {source}, 错误: {exc}")
        return BatchOutcome(source, target, STATUS_ERROR, str(exc))

    return BatchOutcome(source, target, STATUS_CONVERTED, _summarize(result), result)


def convert_tree(
    source_dir: str | os.PathLike[str],
    target_dir: str | os.PathLike[str],
    config: Optional[RepackConfig] = None,
) -> List[BatchOutcome]:
    """Convert every comic archive below *source_dir* into *target_dir*.

    Outcomes come back in walk order even when ``config.workers > 1``.
    """
    config = config or RepackConfig()
    jobs = discover_jobs(os.fspath(source_dir), os.fspath(target_dir))
    logger.info(f"共发现 {len(jobs)} 个漫画压缩包")
    if not jobs:
        return []

    outcomes: List[Optional[BatchOutcome]] = [None] * len(jobs)
    with tqdm(total=len(jobs), desc="转换", unit="file", ncols=0, leave=True, disable=len(jobs) < 2) as bar:
        if config.workers <= 1:
            for index, (source, destination) in enumerate(jobs):
                outcomes[index] = convert_file(source, destination, config)
                bar.update(1)
        else:
            with ThreadPoolExecutor(max_workers=config.workers) as executor:
                futures = {
                    executor.submit(convert_file, source, destination, config): index
                    for index, (source, destination) in enumerate(jobs)
                }
                for future in as_completed(futures):
                    outcomes[futures[future]] = future.result()
                    bar.update(1)

    return [outcome for outcome in outcomes if outcome is not None]


def convert(
    source: str | os.PathLike[str],
    target_dir: Optional[str | os.PathLike[str]] = None,
    config: Optional[RepackConfig] = None,
) -> List[BatchOutcome]:
    """Entry point shared by the CLI: dispatch on the kind of *source*.

    A single file is converted directly and any failure propagates. A
    directory is converted with :func:`convert_tree`.

    Raises:
        FileNotFoundError: *source* is neither a file nor a directory.
    """
    config = config or RepackConfig()
    source_path = os.fspath(source)
    if not os.path.isfile(source_path) and not os.path.isdir(source_path):
        raise FileNotFoundError(f"源路径无效: {source_path}")

    destination = os.fspath(target_dir) if target_dir else os.path.dirname(os.path.abspath(source_path))
    os.makedirs(destination, exist_ok=True)

    if os.path.isfile(source_path):
        result = pack(source_path, destination, config)
        return [
            BatchOutcome(
                source_path,
                result.target,
                STATUS_CONVERTED,
                _summarize(result),
                result,
            )
        ]

    return convert_tree(source_path, destination, config)


__all__ = [
    "BatchOutcome",
    "STATUS_CONVERTED",
    "STATUS_EXISTS",
    "STATUS_ERROR",
    "discover_jobs",
    "convert_file",
    "convert_tree",
    "convert",
]
