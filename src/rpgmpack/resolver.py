"""アセット参照解決の統合インターフェース定義

このモジュールは、ゲームデータ・エフェクト・プラグインの各解析を順に実行し、
1つの AssetIndex を構築する解決処理をオーケストレーションする。

解析は以下の順序で実行される:
1. DATA: Animations.json 以外のデータファイル
2. ANIMATIONS: Animations.json（他ファイルから集めたアニメーションIDが必要）
3. EFFECTS: エフェクトファイル（MZのみ、Animations.json のエフェクト名が必要）
4. PLUGINS: プラグインの依存アセット
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from rpgmpack.config import EffectFailurePolicy, PackerConfig, get_default_config
from rpgmpack.logger import BuildLogger, LogConfig, VerboseLevel
from rpgmpack.parser.assets import AssetCategory, AssetIndex
from rpgmpack.parser.data import ANIMATIONS_FILE, extract_animations, list_data_files, load_json
from rpgmpack.parser.detector import EngineVersion, ProjectDetectionError, ProjectDetector
from rpgmpack.parser.effect import EFFECT_EXTENSION, EffectFormatError, resolve_effect_resources
from rpgmpack.parser.plugins import resolve_project_plugins
from rpgmpack.registry import PathRegistry, absolute_path
from rpgmpack.types import ResolutionError


class MissingDataError(ResolutionError):
    """必須のデータファイルが存在しない場合に発生する例外"""

    pass


class ResolutionStage(Enum):
    """解決処理のステージ"""

    DATA = "data"
    ANIMATIONS = "animations"
    EFFECTS = "effects"
    PLUGINS = "plugins"


@dataclass(frozen=True)
class ResolutionProgress:
    """解決処理の進捗情報

    Attributes:
        stage: 現在実行中のステージ
        current: 現在の進捗（処理済みファイル数）
        total: 総数（処理対象ファイル数）
        message: 追加の進捗メッセージ（オプション）
    """

    stage: ResolutionStage
    current: int
    total: int
    message: str = ""


class ProgressCallback(Protocol):
    """進捗コールバックのプロトコル"""

    def __call__(self, progress: ResolutionProgress) -> None:
        """進捗情報を受け取るコールバック

        Args:
            progress: 現在の進捗情報
        """
        ...


@dataclass
class ResolutionResult:
    """解決処理の実行結果

    失敗時は asset_index が常にNoneとなり、途中まで構築された集合は返さない。

    Attributes:
        success: 解決処理が成功したか
        asset_index: 構築された参照アセット集合（失敗時はNone）
        version: 解析に使用したエンジン世代（判定前に失敗した場合はNone）
        error_message: エラーメッセージ（成功時は空文字列）
        stages_completed: 完了したステージのリスト
        statistics: 実行統計情報（処理時間、ファイル数など）
    """

    success: bool
    asset_index: AssetIndex | None
    version: EngineVersion | None = None
    error_message: str = ""
    stages_completed: list[ResolutionStage] = field(default_factory=list)
    statistics: dict[str, Any] = field(default_factory=dict)


class AssetResolver:
    """アセット参照解決オーケストレーター

    使用例:
        >>> resolver = AssetResolver(Path("MyGame"))
        >>> errors = resolver.validate()
        >>> if not errors:
        ...     result = resolver.run()
    """

    def __init__(
        self,
        project_dir: Path,
        version: EngineVersion | None = None,
        config: PackerConfig | None = None,
        logger: BuildLogger | None = None,
    ) -> None:
        """解決処理を初期化する

        Args:
            project_dir: プロジェクトのルートディレクトリ
            version: エンジン世代（Noneの場合はプロジェクトファイルから判定）
            config: 設定（Noneの場合はデフォルト設定）
            logger: ロガー（Noneの場合はエラー以外出力しない）
        """
        self._project_dir = project_dir
        self._registry = PathRegistry.from_project(project_dir)
        self._version = version
        self._config = config or get_default_config()
        self._logger = logger or BuildLogger(LogConfig(verbose_level=VerboseLevel.QUIET))
        self._statistics: dict[str, Any] = {}

    @property
    def registry(self) -> PathRegistry:
        """プロジェクトのディレクトリ構成を取得する"""
        return self._registry

    def validate(self) -> list[str]:
        """入力を検証する

        Returns:
            問題点のリスト（問題が無い場合は空）
        """
        errors: list[str] = []
        if not self._project_dir.is_dir():
            errors.append(f"プロジェクトディレクトリが見つかりません: {self._project_dir}")
        elif not self._registry.data.is_dir():
            errors.append(f"data ディレクトリが見つかりません: {self._registry.data}")
        return errors

    def run(self, progress_callback: ProgressCallback | None = None) -> ResolutionResult:
        """解決処理を実行する

        Args:
            progress_callback: 進捗通知用コールバック（オプション）

        Returns:
            解決処理の実行結果
        """
        start_time = time.time()

        errors = self.validate()
        if errors:
            self._logger.error(errors[0])
            return ResolutionResult(success=False, asset_index=None, error_message=errors[0])

        stages_completed: list[ResolutionStage] = []
        self._statistics = {}
        version: EngineVersion | None = None

        try:
            version = self._resolve_version()
            self._logger.verbose(f"エンジン: {version.value}")
            asset_index = AssetIndex()

            for stage in ResolutionStage:
                stage_start = time.time()
                self._logger.verbose(f"{stage.value} ステージを開始...")
                self._execute_stage(stage, asset_index, version, progress_callback)
                stages_completed.append(stage)
                self._statistics[f"{stage.value}_time_seconds"] = round(time.time() - stage_start, 2)

            self._statistics["total_time_seconds"] = round(time.time() - start_time, 2)
            return ResolutionResult(
                success=True,
                asset_index=asset_index,
                version=version,
                stages_completed=stages_completed,
                statistics=self._statistics,
            )
        except (ResolutionError, OSError) as e:
            self._logger.error(str(e))
            return ResolutionResult(
                success=False,
                asset_index=None,
                version=version,
                error_message=str(e),
                stages_completed=stages_completed,
                statistics=self._statistics,
            )

    def _resolve_version(self) -> EngineVersion:
        """エンジン世代を決定する

        明示指定 > プロジェクトファイルからの判定 > 設定ファイルの順に使用する。
        """
        if self._version is not None:
            return self._version
        try:
            return ProjectDetector(self._project_dir).detect()
        except ProjectDetectionError:
            if self._config.engine is not None:
                return self._config.engine
            raise

    def _execute_stage(
        self,
        stage: ResolutionStage,
        asset_index: AssetIndex,
        version: EngineVersion,
        progress_callback: ProgressCallback | None,
    ) -> None:
        """個別ステージを実行する"""
        match stage:
            case ResolutionStage.DATA:
                self._execute_data(asset_index, progress_callback)
            case ResolutionStage.ANIMATIONS:
                self._execute_animations(asset_index, version)
            case ResolutionStage.EFFECTS:
                if version == EngineVersion.MZ:
                    self._execute_effects(asset_index, progress_callback)
            case ResolutionStage.PLUGINS:
                if self._config.resolve_plugins:
                    self._execute_plugins(asset_index)

    def _execute_data(self, asset_index: AssetIndex, progress_callback: ProgressCallback | None) -> None:
        """DATAステージ: Animations.json 以外のデータファイルを解析する"""
        files = list_data_files(self._registry.data)
        for current, (path, extractor) in enumerate(files, start=1):
            self._logger.debug(f"{path.name} を解析中")
            extractor(load_json(path), asset_index)
            if progress_callback is not None:
                progress_callback(ResolutionProgress(ResolutionStage.DATA, current, len(files), path.name))
        self._statistics["data_files"] = len(files)

    def _execute_animations(self, asset_index: AssetIndex, version: EngineVersion) -> None:
        """ANIMATIONSステージ: 参照されたIDのアニメーションのみを解析する

        Raises:
            MissingDataError: Animations.json が存在しない場合
        """
        path = self._registry.data / ANIMATIONS_FILE
        if not path.is_file():
            raise MissingDataError(f"{ANIMATIONS_FILE} が見つかりません: {path}")
        self._logger.debug(f"{ANIMATIONS_FILE} を解析中")
        extract_animations(load_json(path), asset_index, version)

    def _execute_effects(self, asset_index: AssetIndex, progress_callback: ProgressCallback | None) -> None:
        """EFFECTSステージ: Animations.json から参照されたエフェクトファイルを解析する

        Raises:
            EffectFormatError: 解析に失敗し、失敗時の扱いが ABORT の場合
        """
        effects_dir = self._registry.effects
        effect_names = asset_index.names_of(AssetCategory.EFFECT)
        targets = self._find_effect_files(effects_dir, effect_names)

        failures: list[str] = []
        for current, path in enumerate(targets, start=1):
            self._logger.debug(f"エフェクト {path.name} を解析中")
            try:
                resources = resolve_effect_resources(path, effects_dir)
            except EffectFormatError as e:
                if self._config.effect_failure_policy == EffectFailurePolicy.ABORT:
                    raise
                self._logger.warning(f"エフェクトの解析をスキップします: {e}")
                failures.append(str(path))
                continue
            asset_index.effect_resources.extend(absolute_path(p) for p in resources)
            if progress_callback is not None:
                progress_callback(ResolutionProgress(ResolutionStage.EFFECTS, current, len(targets), path.name))

        self._statistics["effect_files"] = len(targets)
        self._statistics["effect_failures"] = failures

    def _find_effect_files(self, effects_dir: Path, effect_names: set[str]) -> list[Path]:
        """参照されているエフェクト名に一致する .efkefc ファイルを列挙する"""
        if not effects_dir.is_dir() or not effect_names:
            return []

        targets: list[Path] = []
        for path in sorted(effects_dir.rglob(f"*{EFFECT_EXTENSION}")):
            if not path.is_file():
                continue
            relative = str(path.relative_to(effects_dir))
            name = relative[: len(relative) - len(path.suffix)]
            if name in effect_names:
                targets.append(path)
        return targets

    def _execute_plugins(self, asset_index: AssetIndex) -> None:
        """PLUGINSステージ: プラグインが必要とするファイルを解決する"""
        self._logger.debug("プラグインを解析中")
        plugin_assets = resolve_project_plugins(self._registry.top, self._registry.js)
        for warning in plugin_assets.warnings:
            self._logger.warning(warning)
        asset_index.plugin_paths = [absolute_path(p) for p in plugin_assets.paths]
        self._statistics["plugin_paths"] = len(asset_index.plugin_paths)
