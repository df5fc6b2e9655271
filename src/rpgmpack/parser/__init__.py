"""Parser module for rpgmpack.

ゲームデータ（JSON）、エフェクトファイル、プラグイン宣言を解析し、
参照されているアセットを AssetIndex に集めるためのモジュール。
"""

from rpgmpack.parser.assets import AssetCategory, AssetIndex, normalize_name
from rpgmpack.parser.data import DATA_EXTRACTORS, extract_animations, is_map_file, load_json
from rpgmpack.parser.detector import EngineVersion, ProjectDetectionError, ProjectDetector
from rpgmpack.parser.effect import EffectFormatError, EffectParser, EffectResources
from rpgmpack.parser.opcodes import OPCODE_TABLE, ExtractionRule, NestedCommandRule, walk_events
from rpgmpack.parser.plugins import (
    PluginDescriptor,
    PluginError,
    PluginParameter,
    PluginParameterType,
    PluginRegistration,
    parse_plugin_descriptor,
    parse_plugin_registry,
    resolve_plugin_assets,
)

__all__ = [
    "AssetCategory",
    "AssetIndex",
    "DATA_EXTRACTORS",
    "EffectFormatError",
    "EffectParser",
    "EffectResources",
    "EngineVersion",
    "ExtractionRule",
    "NestedCommandRule",
    "OPCODE_TABLE",
    "PluginDescriptor",
    "PluginError",
    "PluginParameter",
    "PluginParameterType",
    "PluginRegistration",
    "ProjectDetectionError",
    "ProjectDetector",
    "extract_animations",
    "is_map_file",
    "load_json",
    "normalize_name",
    "parse_plugin_descriptor",
    "parse_plugin_registry",
    "resolve_plugin_assets",
    "walk_events",
]
