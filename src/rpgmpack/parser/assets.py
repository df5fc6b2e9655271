"""参照アセット集合（AssetIndex）モジュール

ゲームデータから発見したアセット名をカテゴリごとに保持する集約オブジェクトと、
アセット名の正規化処理を提供する。
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class AssetCategory(Enum):
    """アセットのカテゴリ

    ゲームデータ内でアセット名が参照される意味的な区分を表す列挙型。
    値は対応するアセットディレクトリの慣用名。
    """

    ACTOR_BATTLER = "sv_actors"
    ANIMATION = "animations"
    EFFECT = "effects"
    ENEMY_BATTLER = "enemies"
    TILESET = "tilesets"
    TITLE1 = "titles1"
    TITLE2 = "titles2"
    CHARACTER = "characters"
    FACE = "faces"
    BGM = "bgm"
    BGS = "bgs"
    ME = "me"
    SE = "se"
    PICTURE = "pictures"
    MOVIE = "movies"
    BATTLEBACK1 = "battlebacks1"
    BATTLEBACK2 = "battlebacks2"
    PARALLAX = "parallaxes"


def normalize_name(name: object) -> str | None:
    """アセット名を正規化する

    パス区切り文字をホストの区切り文字に揃える。
    空文字列・None・文字列以外は参照なしとしてNoneを返す。

    Args:
        name: ゲームデータから取得した生の値

    Returns:
        正規化されたアセット名、参照なしの場合None
    """
    if not isinstance(name, str) or not name:
        return None
    return name.replace("\\", os.sep).replace("/", os.sep)


@dataclass
class AssetIndex:
    """参照アセット集合

    1回の解決処理につき1つ生成され、データ解析の全ステージで共有される。
    解析完了後は読み取り専用として扱う。

    Attributes:
        names: カテゴリごとの参照アセット名集合
        animation_ids: 他のデータから参照されたアニメーションID
        effect_resources: エフェクトコンテナ内から発見したリソースの絶対パス
        use_side_view: サイドビュー戦闘が有効か（System.json の optSideView）
        plugin_paths: プラグインが必要とするファイルパス（未解析の場合None）
    """

    names: dict[AssetCategory, set[str]] = field(
        default_factory=lambda: {category: set() for category in AssetCategory}
    )
    animation_ids: set[int] = field(default_factory=set)
    effect_resources: list[Path] = field(default_factory=list)
    use_side_view: bool = False
    plugin_paths: list[Path] | None = None

    def add(self, category: AssetCategory, name: object) -> None:
        """アセット名を正規化して追加する

        Args:
            category: 追加先カテゴリ
            name: 生のアセット名（空・Noneは無視される）
        """
        normalized = normalize_name(name)
        if normalized is not None:
            self.names[category].add(normalized)

    def add_animation_id(self, animation_id: object) -> None:
        """アニメーションIDを追加する

        -1（通常攻撃）と0（なし）、整数以外は無視する。

        Args:
            animation_id: 生のアニメーションID
        """
        if isinstance(animation_id, bool) or not isinstance(animation_id, int):
            return
        if animation_id <= 0:
            return
        self.animation_ids.add(animation_id)

    def names_of(self, category: AssetCategory) -> set[str]:
        """指定カテゴリの参照アセット名集合を取得する"""
        return self.names[category]

    def get_summary(self) -> dict[AssetCategory, int]:
        """カテゴリごとの参照数を取得する

        Returns:
            参照が1件以上あるカテゴリをキー、件数を値とする辞書
        """
        return {category: len(values) for category, values in self.names.items() if values}
