"""未使用アセット判定モジュール

解析済みの AssetIndex とプロジェクトのディレクトリ構成から、
ファイルごとにゲームデータから参照されているかを判定する。
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from rpgmpack.parser.assets import AssetCategory, AssetIndex
from rpgmpack.parser.detector import EngineVersion
from rpgmpack.registry import PathRegistry, absolute_path

DirectoryAccessor = Callable[[PathRegistry], Path]

# (カテゴリ, ディレクトリ, 対象世代) の判定順テーブル
# 対象世代が None の場合は両世代で判定する
SIMPLE_ASSET_DIRECTORIES: tuple[tuple[AssetCategory, DirectoryAccessor, EngineVersion | None], ...] = (
    (AssetCategory.BGM, lambda r: r.audio_bgm, None),
    (AssetCategory.BGS, lambda r: r.audio_bgs, None),
    (AssetCategory.ME, lambda r: r.audio_me, None),
    (AssetCategory.SE, lambda r: r.audio_se, None),
    (AssetCategory.ANIMATION, lambda r: r.img_animations, EngineVersion.MV),
    (AssetCategory.BATTLEBACK1, lambda r: r.img_battlebacks1, None),
    (AssetCategory.BATTLEBACK2, lambda r: r.img_battlebacks2, None),
    (AssetCategory.CHARACTER, lambda r: r.img_characters, None),
    (AssetCategory.FACE, lambda r: r.img_faces, None),
    (AssetCategory.PARALLAX, lambda r: r.img_parallaxes, None),
    (AssetCategory.PICTURE, lambda r: r.img_pictures, None),
    (AssetCategory.ACTOR_BATTLER, lambda r: r.img_sv_actors, None),
    (AssetCategory.TILESET, lambda r: r.img_tilesets, None),
    (AssetCategory.TITLE1, lambda r: r.img_titles1, None),
    (AssetCategory.TITLE2, lambda r: r.img_titles2, None),
    (AssetCategory.MOVIE, lambda r: r.movies, None),
)


def is_in_directory(path: Path, directory: Path) -> bool:
    """path が directory の配下（サブディレクトリを含む）にあるか判定する"""
    return directory in path.parents


def special_include(names: set[str], path: Path, root: Path) -> bool:
    """アセット名の集合にファイルが含まれるか判定する

    root 直下のファイルは拡張子を除いたファイル名で照合する。
    サブディレクトリ内のファイルは、ゲームデータ側で "foo/bar" のように
    サブディレクトリ込みの名前で参照されるため、root からの相対パス（拡張子なし）で照合する。

    Args:
        names: カテゴリの参照アセット名集合（正規化済み）
        path: 判定対象ファイルの絶対パス
        root: カテゴリのディレクトリ
    """
    if path.parent == root:
        return path.stem in names

    relative = str(path.relative_to(root))
    return relative[: len(relative) - len(path.suffix)] in names


def is_unused(path: Path | str, asset_index: AssetIndex, registry: PathRegistry, version: EngineVersion) -> bool:
    """ファイルが未使用か判定する

    Args:
        path: 判定対象ファイルのパス
        asset_index: 解析済みの参照アセット集合
        registry: プロジェクトのディレクトリ構成
        version: エンジン世代

    Returns:
        未使用の場合True。判定対象ディレクトリ外のファイルは常にFalse
    """
    path = absolute_path(path)

    # プラグインが必要とするファイル
    if asset_index.plugin_paths is not None and path in asset_index.plugin_paths:
        return False

    for category, directory_of, only_version in SIMPLE_ASSET_DIRECTORIES:
        if only_version is not None and only_version != version:
            continue
        root = directory_of(registry)
        if is_in_directory(path, root):
            return not special_include(asset_index.names_of(category), path, root)

    # 敵画像はフロントビューなら img/enemies、サイドビューなら img/sv_enemies のみを使用する
    if asset_index.use_side_view:
        live_root, dead_root = registry.img_sv_enemies, registry.img_enemies
    else:
        live_root, dead_root = registry.img_enemies, registry.img_sv_enemies

    if is_in_directory(path, dead_root):
        return True
    if is_in_directory(path, live_root):
        return not special_include(asset_index.names_of(AssetCategory.ENEMY_BATTLER), path, live_root)

    if version == EngineVersion.MZ and is_in_directory(path, registry.effects):
        if special_include(asset_index.names_of(AssetCategory.EFFECT), path, registry.effects):
            return False
        return path not in asset_index.effect_resources

    # 上記のどれにも当たらないファイルは、判定対象ディレクトリ配下の場合のみ未使用
    return any(is_in_directory(path, directory) for directory in registry.governed_directories(version))


class UsageFilter:
    """AssetIndex とディレクトリ構成を束ねた未使用判定器

    使用例:
        >>> usage_filter = UsageFilter(asset_index, registry, EngineVersion.MZ)
        >>> usage_filter.is_unused(Path("audio/bgm/Battle2.ogg"))
    """

    def __init__(self, asset_index: AssetIndex, registry: PathRegistry, version: EngineVersion) -> None:
        self._asset_index = asset_index
        self._registry = registry
        self._version = version

    @property
    def registry(self) -> PathRegistry:
        """プロジェクトのディレクトリ構成を取得する"""
        return self._registry

    def is_unused(self, path: Path | str) -> bool:
        """ファイルが未使用か判定する"""
        return is_unused(path, self._asset_index, self._registry, self._version)

    def __call__(self, path: Path | str) -> bool:
        return self.is_unused(path)
