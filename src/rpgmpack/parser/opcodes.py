"""イベントコマンド（オペコード）テーブルモジュール

イベントコマンドのコード番号から、参照アセットの抽出ルールへの対応表を定義し、
イベントリストを走査して AssetIndex へ参照を登録する機能を提供する。
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from rpgmpack.parser.assets import AssetCategory, AssetIndex
from rpgmpack.types import DataParseError


@dataclass(frozen=True)
class ExtractionRule:
    """パラメータ1つ分の抽出ルール

    Attributes:
        target: 登録先カテゴリ（Noneの場合はアニメーションIDとして登録）
        index: parameters 配列内の位置（0始まり）
        key: 値がオブジェクトの場合に参照するキー（"name" など）
    """

    target: AssetCategory | None
    index: int
    key: str | None = None


@dataclass(frozen=True)
class NestedCommandRule:
    """パラメータ自体が {code, parameters} を持つコマンドの抽出ルール

    Attributes:
        index: 内部コマンドが格納されている parameters 配列内の位置
        table: 内部コマンドのコード番号から抽出ルールへの対応表
    """

    index: int
    table: Mapping[int, tuple[ExtractionRule, ...]]


Rule = ExtractionRule | NestedCommandRule

# 移動ルート（205）の各ステップとして現れる内部コマンド
# - 41: キャラクター画像の変更、[0] がキャラクター名
# - 44: SEの演奏、[0].name がSE名
MOVE_ROUTE_TABLE: dict[int, tuple[ExtractionRule, ...]] = {
    41: (ExtractionRule(AssetCategory.CHARACTER, 0),),
    44: (ExtractionRule(AssetCategory.SE, 0, "name"),),
}

OPCODE_TABLE: dict[int, tuple[Rule, ...]] = {
    # 文章の表示（顔グラフィック）
    101: (ExtractionRule(AssetCategory.FACE, 0),),
    # 戦闘BGMの変更 / BGMの演奏
    132: (ExtractionRule(AssetCategory.BGM, 0, "name"),),
    241: (ExtractionRule(AssetCategory.BGM, 0, "name"),),
    # 勝利ME / 敗北ME の変更 / MEの演奏
    133: (ExtractionRule(AssetCategory.ME, 0, "name"),),
    139: (ExtractionRule(AssetCategory.ME, 0, "name"),),
    249: (ExtractionRule(AssetCategory.ME, 0, "name"),),
    # 乗り物BGMの変更
    140: (ExtractionRule(AssetCategory.BGM, 1, "name"),),
    # BGSの演奏
    245: (ExtractionRule(AssetCategory.BGS, 0, "name"),),
    # SEの演奏
    250: (ExtractionRule(AssetCategory.SE, 0, "name"),),
    # アニメーションの表示 / 戦闘アニメーションの表示
    212: (ExtractionRule(None, 1),),
    337: (ExtractionRule(None, 1),),
    # ピクチャの表示
    231: (ExtractionRule(AssetCategory.PICTURE, 1),),
    # ムービーの再生
    261: (ExtractionRule(AssetCategory.MOVIE, 0),),
    # 戦闘背景の変更
    283: (
        ExtractionRule(AssetCategory.BATTLEBACK1, 0),
        ExtractionRule(AssetCategory.BATTLEBACK2, 1),
    ),
    # 遠景の変更
    284: (ExtractionRule(AssetCategory.PARALLAX, 0),),
    # アクターの画像変更
    322: (
        ExtractionRule(AssetCategory.FACE, 1),
        ExtractionRule(AssetCategory.CHARACTER, 3),
        ExtractionRule(AssetCategory.ACTOR_BATTLER, 5),
    ),
    # 乗り物の画像変更
    323: (ExtractionRule(AssetCategory.FACE, 1),),
    # 移動ルートの設定（205）の続き
    505: (NestedCommandRule(0, MOVE_ROUTE_TABLE),),
}


def walk_events(events: Any, index: AssetIndex, table: Mapping[int, tuple[Rule, ...]] = OPCODE_TABLE) -> None:
    """イベントリストを走査して参照アセットを登録する

    コード0（終端）と表に無いコードは何もせずに読み飛ばす。
    コモンイベント、敵グループのページ、マップイベントのページで共通に使用する。

    Args:
        events: イベントコマンドのリスト（JSONから読み込んだ値）
        index: 登録先のアセット集合
        table: 使用するオペコードテーブル

    Raises:
        DataParseError: 既知のコマンドのパラメータ構造が不正な場合
    """
    if events is None:
        return
    if not isinstance(events, list):
        raise DataParseError("イベントリストが配列ではありません")

    for event in events:
        if event is None:
            continue
        if not isinstance(event, dict):
            raise DataParseError(f"イベントコマンドがオブジェクトではありません: {event!r}")

        code = event.get("code")
        if code == 0:
            continue

        rules = table.get(code) if isinstance(code, int) else None
        if rules is None:
            continue

        for rule in rules:
            _apply_rule(rule, code, event.get("parameters"), index)


def _apply_rule(rule: Rule, code: int, parameters: Any, index: AssetIndex) -> None:
    """1つの抽出ルールをパラメータに適用する"""
    value = _parameter_at(parameters, rule.index, code)

    if isinstance(rule, NestedCommandRule):
        if value is None:
            return
        if not isinstance(value, dict):
            raise DataParseError(f"コード {code} の内部コマンドがオブジェクトではありません")
        inner_code = value.get("code")
        inner_rules = rule.table.get(inner_code) if isinstance(inner_code, int) else None
        if inner_rules is None:
            return
        for inner_rule in inner_rules:
            _apply_rule(inner_rule, inner_code, value.get("parameters"), index)
        return

    if rule.key is not None:
        if value is None:
            return
        if not isinstance(value, dict):
            raise DataParseError(f"コード {code} のパラメータ[{rule.index}]がオブジェクトではありません")
        value = value.get(rule.key)

    if rule.target is None:
        index.add_animation_id(value)
    else:
        index.add(rule.target, value)


def _parameter_at(parameters: Any, position: int, code: int) -> Any:
    """parameters 配列から値を取り出す

    Raises:
        DataParseError: 配列でない、または要素数が足りない場合
    """
    if not isinstance(parameters, list) or position >= len(parameters):
        raise DataParseError(f"コード {code} のパラメータ[{position}]が見つかりません")
    return parameters[position]
