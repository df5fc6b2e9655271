"""CLI entry point for rpgmpack."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from rpgmpack import __version__
from rpgmpack.config import ConfigError, PackerConfig, get_default_config, load_config
from rpgmpack.filtering import UsageFilter
from rpgmpack.logger import BuildLogger, LogConfig, VerboseLevel
from rpgmpack.parser.detector import EngineVersion
from rpgmpack.resolver import AssetResolver, ResolutionResult
from rpgmpack.scanner import UnusedAssetScanner
from rpgmpack.types import ExitCode

app = typer.Typer(help="RPGツクールMV/MZプロジェクトの未使用アセットを検出するCLIツール")
console = Console()


def _format_size(size_bytes: int) -> str:
    """バイト数を人間が読みやすい形式に変換する"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def _load_options(engine: str | None, config_path: Path | None) -> tuple[EngineVersion | None, PackerConfig]:
    """--engine と --config を解釈する

    Raises:
        typer.Exit: 指定が不正な場合
    """
    try:
        config = load_config(config_path) if config_path is not None else get_default_config()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    if engine is None:
        return None, config
    try:
        return EngineVersion.from_name(engine), config
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e


def _resolve(
    project: Path, version: EngineVersion | None, config: PackerConfig, logger: BuildLogger
) -> tuple[AssetResolver, ResolutionResult]:
    """参照アセットを解決する

    Raises:
        typer.Exit: 入力が不正、または解決に失敗した場合
    """
    resolver = AssetResolver(project, version=version, config=config, logger=logger)

    errors = resolver.validate()
    if errors:
        for error in errors:
            console.print(f"[red]Error: {error}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    result = resolver.run()
    if not result.success:
        console.print(f"[red]解析失敗: {result.error_message}[/red]")
        raise typer.Exit(ExitCode.ERROR)
    return resolver, result


@app.command()
def scan(
    project: Annotated[Path, typer.Argument(help="RPGツクールのプロジェクトディレクトリ")],
    engine: Annotated[str | None, typer.Option(help="エンジン世代（mv/mz）")] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル（YAML）")] = None,
    list_files: Annotated[bool, typer.Option("--list", help="未使用ファイルをすべて表示")] = False,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """未使用アセットを検出する"""
    version, config = _load_options(engine, config_path)

    log_config = LogConfig(verbose_level=VerboseLevel(min(verbose, VerboseLevel.DEBUG)), log_file=log_file)
    with BuildLogger(log_config) as logger:
        resolver, result = _resolve(project, version, config, logger)
        assert result.asset_index is not None and result.version is not None

        usage_filter = UsageFilter(result.asset_index, resolver.registry, result.version)
        report = UnusedAssetScanner(project, usage_filter, config.keep).scan()

        table = Table(title="未使用アセット")
        table.add_column("ディレクトリ", style="cyan")
        table.add_column("ファイル数", justify="right", style="green")
        for directory, count in report.summary().items():
            table.add_row(directory, str(count))
        console.print(table)

        if list_files:
            for path in report.unused:
                console.print(path.as_posix())

        logger.log_summary(
            {
                "unused_files": len(report.unused),
                "unused_size": report.unused_size_bytes(),
                "engine": result.version.value,
            }
        )
        console.print(
            f"[green]未使用: {len(report.unused)} files ({_format_size(report.unused_size_bytes())})[/green]"
        )
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def info(
    project: Annotated[Path, typer.Argument(help="RPGツクールのプロジェクトディレクトリ")],
    engine: Annotated[str | None, typer.Option(help="エンジン世代（mv/mz）")] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル（YAML）")] = None,
) -> None:
    """参照アセットの集計を表示する"""
    version, config = _load_options(engine, config_path)

    logger = BuildLogger(LogConfig(verbose_level=VerboseLevel.QUIET))
    _, result = _resolve(project, version, config, logger)
    assert result.asset_index is not None and result.version is not None

    table = Table(title="Asset References")
    table.add_column("Category", style="cyan")
    table.add_column("Count", justify="right", style="green")

    table.add_row("Engine", result.version.value)
    table.add_row("Side view", "yes" if result.asset_index.use_side_view else "no")
    table.add_section()
    for category, count in result.asset_index.get_summary().items():
        table.add_row(category.value, str(count))
    table.add_section()
    table.add_row("Animation IDs", str(len(result.asset_index.animation_ids)))
    table.add_row("Effect resources", str(len(result.asset_index.effect_resources)))
    if result.asset_index.plugin_paths is not None:
        table.add_row("Plugin files", str(len(result.asset_index.plugin_paths)))

    console.print(table)
    raise typer.Exit(ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"rpgmpack {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """rpgmpack CLI - RPGツクールプロジェクトの参照アセット解析"""
    pass
