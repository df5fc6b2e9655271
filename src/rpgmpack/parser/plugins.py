"""プラグイン依存アセット解決モジュール

js/plugins.js のプラグイン登録情報と、各プラグインのソース先頭にある
パラメータ宣言コメント（/*: ... */）を解析し、
プラグインが必要とするアセットファイルのパスを求める。

plugins.js はスクリプトとして実行せず、配列リテラル部分のみをデータとして読み取る。
"""

import json
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import chardet

from rpgmpack.parser.assets import normalize_name
from rpgmpack.types import ResolutionError

PLUGINS_FILE = "plugins.js"

# `$plugins =` のような代入の直後に配列リテラルが続く位置
_ASSIGNMENT_PATTERN = re.compile(r"[\w$]+\s*=\s*(?=\[)")

_BLOCK_START = "/*:"
_BLOCK_END = "*/"

ANIMATIONS_DIR = "img/animations"


class PluginError(ResolutionError):
    """プラグイン情報を読み込めない場合に発生する例外"""

    pass


class PluginParameterType(Enum):
    """アセットを参照するパラメータの種別"""

    FILE = "file"
    ANIMATION = "animation"


@dataclass(frozen=True)
class PluginRegistration:
    """plugins.js に登録されたプラグイン1件分の設定

    Attributes:
        name: プラグイン名（js/plugins/{name}.js）
        status: 有効かどうか
        parameters: パラメータ名から設定値（文字列）への対応
    """

    name: str
    status: bool
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PluginParameter:
    """パラメータ宣言コメントで宣言されたパラメータ

    Attributes:
        name: パラメータ名
        default: @default の値（宣言が無い、または空の場合はNone）
        required: @require 1 が指定されているか
        directory: @dir の値（アニメーションの場合はNone）
        param_type: パラメータ種別
    """

    name: str
    default: str | None
    required: bool
    directory: str | None
    param_type: PluginParameterType


@dataclass
class PluginDescriptor:
    """パラメータ宣言コメントの解析結果

    Attributes:
        required_assets: @requiredAssets で宣言されたプロジェクト相対パス
        parameters: アセットを参照するパラメータ一覧
        warnings: 解析中に検出した警告メッセージ
    """

    required_assets: list[str] = field(default_factory=list)
    parameters: list[PluginParameter] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class PluginAssets:
    """プラグインが必要とするファイルの解決結果

    Attributes:
        paths: 常に使用中として扱うファイルの絶対パス
        warnings: 解決中に検出した警告メッセージ
    """

    paths: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def parse_plugin_registry(text: str) -> list[PluginRegistration]:
    """plugins.js の内容からプラグイン登録情報を取り出す

    Args:
        text: plugins.js の内容

    Returns:
        登録順のプラグイン設定リスト

    Raises:
        PluginError: 配列リテラルが見つからない、または形式が不正な場合
    """
    match = _ASSIGNMENT_PATTERN.search(text)
    if match is None:
        raise PluginError("plugins.js にプラグイン配列が見つかりません")

    try:
        value, _ = json.JSONDecoder().raw_decode(text, match.end())
    except json.JSONDecodeError as e:
        raise PluginError(f"plugins.js の配列を解析できません: {e}") from e

    if not isinstance(value, list):
        raise PluginError("plugins.js のプラグイン情報が配列ではありません")

    registrations: list[PluginRegistration] = []
    for entry in value:
        if not isinstance(entry, dict):
            raise PluginError(f"プラグイン情報がオブジェクトではありません: {entry!r}")
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise PluginError(f"プラグイン名がありません: {entry!r}")
        parameters = entry.get("parameters") or {}
        if not isinstance(parameters, dict):
            raise PluginError(f"プラグイン {name} のパラメータがオブジェクトではありません")
        registrations.append(
            PluginRegistration(
                name=name,
                status=bool(entry.get("status", False)),
                parameters={str(k): _parameter_text(v) for k, v in parameters.items()},
            )
        )
    return registrations


def _parameter_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False)


def parse_plugin_descriptor(source: str, source_name: str = "") -> PluginDescriptor:
    """プラグインソースのパラメータ宣言コメントを解析する

    `/*:` から次の `*/` までを1行ずつ `@directive value` として読み取る。
    @type が file / animation のパラメータのみを記録する。

    Args:
        source: プラグインのソースコード
        source_name: 警告メッセージに使用するファイル名

    Returns:
        解析結果（宣言コメントが無い場合は空）
    """
    descriptor = PluginDescriptor()

    start = source.find(_BLOCK_START)
    if start < 0:
        return descriptor
    end = source.find(_BLOCK_END, start + len(_BLOCK_START))
    if end < 0:
        end = len(source)

    builder: _ParameterBuilder | None = None

    # 1行目は /*: 自体
    for line in source[start:end].split("\n")[1:]:
        directive, value = _split_directive(line)
        if directive is None:
            continue

        if directive == "@requiredAssets":
            descriptor.required_assets.append(value)
            continue

        if directive == "@param":
            if builder is not None:
                builder.close(descriptor, source_name)
            builder = _ParameterBuilder(name=value)
            continue

        if builder is None:
            continue

        if directive == "@default":
            builder.default = value or None
        elif directive == "@require":
            builder.required = value == "1"
        elif directive == "@dir":
            builder.directory = value
        elif directive == "@type":
            try:
                builder.param_type = PluginParameterType(value.lower())
            except ValueError:
                descriptor.warnings.append(f"未知のパラメータ型です: {value.lower()} ({source_name})")

    if builder is not None:
        builder.close(descriptor, source_name)

    return descriptor


def _split_directive(line: str) -> tuple[str | None, str]:
    """コメント行を (ディレクティブ, 値) に分割する"""
    text = line.strip()
    if text.startswith("*"):
        text = text[1:].strip()
    if not text.startswith("@"):
        return None, ""
    parts = text.split(None, 1)
    value = parts[1].strip() if len(parts) > 1 else ""
    return parts[0], value


@dataclass
class _ParameterBuilder:
    """@param から次の @param（またはブロック終端）までの宣言を集める"""

    name: str
    default: str | None = None
    required: bool = False
    directory: str | None = None
    param_type: PluginParameterType | None = None

    def close(self, descriptor: PluginDescriptor, source_name: str) -> None:
        if not self.name:
            descriptor.warnings.append(f"名前の無いパラメータがあります ({source_name})")
            return
        if self.param_type is None:
            return
        descriptor.parameters.append(
            PluginParameter(
                name=self.name,
                default=self.default,
                required=self.required,
                directory=self.directory,
                param_type=self.param_type,
            )
        )


def infer_extension(directory: str) -> str:
    """ディレクトリ名からアセットの拡張子を推定する

    img で始まる場合は .png、audio で始まる場合は .ogg、それ以外は空文字列。
    """
    if directory.startswith("img"):
        return ".png"
    if directory.startswith("audio"):
        return ".ogg"
    return ""


def parameter_asset_path(project_dir: Path, parameter: PluginParameter, value: str) -> Path:
    """パラメータ値が指すアセットの絶対パスを求める

    @dir がある場合は dir + value + 拡張子、無い場合はアニメーション画像とみなす。
    """
    if parameter.directory is not None:
        relative = parameter.directory + value + infer_extension(parameter.directory)
    else:
        relative = ANIMATIONS_DIR + os.sep + value + infer_extension(ANIMATIONS_DIR)
    return project_dir / (normalize_name(relative) or "")


def resolve_plugin_assets(
    registrations: list[PluginRegistration],
    descriptors: dict[str, PluginDescriptor],
    project_dir: Path,
) -> PluginAssets:
    """プラグインが必要とするアセットのパスを解決する

    登録情報が無いプラグイン（または登録情報に該当パラメータが無い場合）は、
    必須かつ既定値を持つパラメータのみ既定値で解決する。
    登録情報で空文字列が設定されている場合は既定値があっても解決しない。

    Args:
        registrations: plugins.js の登録情報
        descriptors: プラグイン名からパラメータ宣言への対応
        project_dir: プロジェクトのルート（絶対パス）

    Returns:
        解決されたパスと警告メッセージ
    """
    result = PluginAssets()
    registered = {registration.name: registration for registration in registrations}

    for plugin_name, descriptor in descriptors.items():
        for asset in descriptor.required_assets:
            normalized = normalize_name(asset)
            if normalized is not None:
                result.paths.append(project_dir / normalized)

        registration = registered.get(plugin_name)
        for parameter in descriptor.parameters:
            if registration is None or parameter.name not in registration.parameters:
                if not parameter.required or parameter.default is None:
                    continue
                value = parameter.default
            else:
                value = registration.parameters[parameter.name].strip()
                if not value:
                    if parameter.default is not None:
                        result.warnings.append(
                            f"プラグイン {plugin_name} のパラメータ {parameter.name} は"
                            "既定値がありますが空に設定されています"
                        )
                    continue
            result.paths.append(parameter_asset_path(project_dir, parameter, value))

    return result


def read_plugin_source(path: Path) -> str:
    """プラグインのソースを読み込む

    UTF-8として解読できない場合は文字コードを推定して読み込む。

    Raises:
        PluginError: ファイルが存在しない場合
    """
    if not path.is_file():
        raise PluginError(f"プラグインファイルが見つかりません: {path}")

    raw_data = path.read_bytes()
    try:
        return raw_data.decode("utf-8-sig")
    except UnicodeDecodeError:
        detected = chardet.detect(raw_data)
        encoding = detected["encoding"] or "utf-8"
        return raw_data.decode(encoding, errors="replace")


def resolve_project_plugins(project_dir: Path, js_dir: Path) -> PluginAssets:
    """プロジェクトのプラグイン情報を読み込み、必要なファイルのパスを解決する

    登録済みプラグインのスクリプトファイル自体も結果に含める。

    Args:
        project_dir: プロジェクトのルート（絶対パス）
        js_dir: js ディレクトリ（絶対パス）

    Returns:
        解決されたパスと警告メッセージ

    Raises:
        PluginError: plugins.js またはプラグインファイルが読み込めない場合
    """
    plugins_file = js_dir / PLUGINS_FILE
    if not plugins_file.is_file():
        raise PluginError(f"plugins.js が見つかりません: {plugins_file}")

    registrations = parse_plugin_registry(read_plugin_source(plugins_file))

    plugins_dir = js_dir / "plugins"
    script_paths: list[Path] = []
    descriptors: dict[str, PluginDescriptor] = {}
    warnings: list[str] = []
    for registration in registrations:
        script_path = plugins_dir / f"{registration.name}.js"
        descriptor = parse_plugin_descriptor(read_plugin_source(script_path), script_path.name)
        descriptors[registration.name] = descriptor
        script_paths.append(script_path)
        warnings.extend(descriptor.warnings)

    result = resolve_plugin_assets(registrations, descriptors, project_dir)
    result.paths[:0] = script_paths
    result.warnings[:0] = warnings
    return result
