"""Configuration module for rpgmpack."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from rpgmpack.parser.detector import EngineVersion

DEFAULT_CONFIG_FILE = "rpgmpack.yml"


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


class EffectFailurePolicy(Enum):
    """エフェクトファイルの解析に失敗した場合の扱い

    ABORT: 解決処理全体を失敗させる
    SKIP: 警告を出してそのファイルのリソースを無視する
    """

    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class PackerConfig:
    """ルート設定"""

    engine: EngineVersion | None = None
    effect_failure_policy: EffectFailurePolicy = EffectFailurePolicy.ABORT
    resolve_plugins: bool = True
    keep: list[str] = field(default_factory=list)


def load_config(path: Path) -> PackerConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        PackerConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return PackerConfig(
        engine=_parse_engine(data.get("engine"), default.engine),
        effect_failure_policy=_parse_effect_failure_policy(
            data.get("effect_failure_policy"), default.effect_failure_policy
        ),
        resolve_plugins=bool(data.get("resolve_plugins", default.resolve_plugins)),
        keep=_parse_keep_patterns(data.get("keep"), default.keep),
    )


def get_default_config() -> PackerConfig:
    """デフォルト設定を取得する"""
    return PackerConfig()


def _parse_engine(value: Any, default: EngineVersion | None) -> EngineVersion | None:
    """エンジン世代の指定をパースする"""
    if value is None:
        return default
    try:
        return EngineVersion.from_name(str(value))
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _parse_effect_failure_policy(value: Any, default: EffectFailurePolicy) -> EffectFailurePolicy:
    """エフェクト解析失敗時の扱いをパースする"""
    if value is None:
        return default
    try:
        return EffectFailurePolicy(str(value).lower())
    except ValueError:
        raise ConfigError(f"effect_failure_policy は abort または skip を指定してください: {value}") from None


def _parse_keep_patterns(data: Any, default: list[str]) -> list[str]:
    """常に使用中とみなすパターンをパースする"""
    if not isinstance(data, list):
        return default
    return [str(item) for item in data if isinstance(item, str) and item]
