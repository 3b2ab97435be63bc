"""Command-line interface for the ``cbtu`` package."""

from __future__ import annotations

import time
from collections import Counter
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .core.batch import STATUS_CONVERTED, BatchOutcome, convert
from .core.config import load_config
from .core.logger_config import setup_logger

app = typer.Typer(help="将 RAR/ZIP 漫画压缩包转换为 .cbt，并过滤广告/水印页")
console = Console()


def _render_summary(outcomes: List[BatchOutcome]) -> None:
    if not outcomes:
        console.print("[yellow]未检测到任何漫画压缩包。[/]")
        return

    counter = Counter(outcome.status for outcome in outcomes)
    table = Table(title="转换结果统计", show_lines=False)
    table.add_column("状态", style="cyan", justify="left")
    table.add_column("数量", style="green", justify="right")
    for status, count in counter.most_common():
        table.add_row(status, str(count))
    console.print(table)

    excluded = sum(len(outcome.result.excluded) for outcome in outcomes if outcome.result)
    if excluded:
        console.print(f"[cyan]共排除 {excluded} 张图片，已备份到输出目录。[/]")

    problematic = [outcome for outcome in outcomes if outcome.status != STATUS_CONVERTED]
    if problematic:
        problem_table = Table(title="需要关注的条目", show_lines=False)
        problem_table.add_column("状态", style="magenta")
        problem_table.add_column("源文件", style="white")
        problem_table.add_column("消息", style="yellow")
        for outcome in problematic[:20]:
            problem_table.add_row(outcome.status, outcome.source_path, outcome.message)
        console.print(problem_table)
        if len(problematic) > 20:
            console.print(f"[yellow]还有 {len(problematic) - 20} 条问题未展示。[/]")


@app.command()
def convert_command(
    source: Path = typer.Argument(..., help="漫画压缩包或包含压缩包的目录"),
    dest: Optional[Path] = typer.Argument(None, help="输出目录，默认为源路径所在目录"),
    exclude_off_arg: Optional[str] = typer.Argument(
        None, metavar="[EXCLUDE_OFF]", help="任意值即关闭“数字少于 2 个”的排除规则"
    ),
    exclude_off: bool = typer.Option(False, "--exclude-off", help="关闭“数字少于 2 个”的排除规则"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="同时转换的压缩包数量"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML 配置文件路径"),
    no_log_file: bool = typer.Option(False, "--no-log-file", help="仅输出到控制台，不写日志文件"),
) -> None:
    """转换单个压缩包，或递归转换目录并在输出目录中保持相同结构。"""

    setup_logger(app_name="cbtu", console_output=True, log_to_file=not no_log_file)

    try:
        config = load_config(config_path).with_overrides(
            exclude_off=True if (exclude_off or exclude_off_arg is not None) else None,
            workers=workers,
        )
    except (OSError, ValueError) as exc:
        console.print(f"[red]加载配置失败: {exc}[/]")
        raise typer.Exit(code=1)

    start = time.perf_counter()
    try:
        outcomes = convert(source, dest, config)
    except Exception as exc:
        logger.error(f"转换中止: {exc}")
        console.print(f"[red]耗时: {time.perf_counter() - start:.2f}s[/]")
        raise typer.Exit(code=1)

    _render_summary(outcomes)
    console.print(f"[green]耗时: {time.perf_counter() - start:.2f}s[/]")


def main() -> None:  # pragma: no cover - Typer 入口
    app()


__all__ = ["app", "main"]
