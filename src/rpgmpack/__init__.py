"""rpgmpack - RPG Maker MV/MZ asset reference resolver and unused-asset filter."""

from rpgmpack.filtering import UsageFilter, is_unused
from rpgmpack.logger import BuildLogger, LogConfig, VerboseLevel
from rpgmpack.parser.assets import AssetCategory, AssetIndex
from rpgmpack.parser.detector import EngineVersion
from rpgmpack.registry import PathRegistry
from rpgmpack.resolver import (
    AssetResolver,
    ProgressCallback,
    ResolutionProgress,
    ResolutionResult,
    ResolutionStage,
)

__version__ = "0.1.0"

__all__ = [
    "AssetCategory",
    "AssetIndex",
    "AssetResolver",
    "BuildLogger",
    "EngineVersion",
    "LogConfig",
    "PathRegistry",
    "ProgressCallback",
    "ResolutionProgress",
    "ResolutionResult",
    "ResolutionStage",
    "UsageFilter",
    "VerboseLevel",
    "is_unused",
]
