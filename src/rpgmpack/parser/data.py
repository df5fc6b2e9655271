"""ゲームデータ（data/*.json）解析モジュール

RPGツクールMV/MZのデータファイルをスキーマごとに解析し、
参照されているアセット名を AssetIndex に登録する。
各抽出関数は読み込み済みのJSON値のみを入力とし、AssetIndex のみを変更する。
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rpgmpack.parser.assets import AssetCategory, AssetIndex
from rpgmpack.parser.detector import EngineVersion
from rpgmpack.parser.opcodes import walk_events
from rpgmpack.types import DataParseError

ANIMATIONS_FILE = "Animations.json"

Extractor = Callable[[Any, AssetIndex], None]


def load_json(path: Path) -> Any:
    """JSONファイルを読み込む

    Args:
        path: 読み込むファイルパス

    Returns:
        デコードされたJSON値

    Raises:
        DataParseError: JSONとして解析できない場合
    """
    try:
        with path.open(encoding="utf-8-sig") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataParseError(f"JSON解析エラー: {path.name}: {e}") from e


def _records(doc: Any, filename: str) -> list[dict[str, Any]]:
    """配列形式のデータから null 以外の要素を取り出す"""
    if not isinstance(doc, list):
        raise DataParseError(f"{filename} が配列ではありません")
    records: list[dict[str, Any]] = []
    for item in doc:
        if item is None:
            continue
        records.append(_as_object(item, filename))
    return records


def _as_object(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DataParseError(f"{context} の要素がオブジェクトではありません: {value!r}")
    return value


def _nested(obj: dict[str, Any], *keys: str) -> Any:
    """ネストしたキーを辿って値を取得する（途中が null の場合はNone）"""
    value: Any = obj
    for key in keys:
        if value is None:
            return None
        value = _as_object(value, ".".join(keys)).get(key)
    return value


def _list_of(value: Any, context: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DataParseError(f"{context} が配列ではありません")
    return value


def extract_actors(doc: Any, index: AssetIndex) -> None:
    """Actors.json を解析する

    battlerName => img/sv_actors/{}.png
    characterName => img/characters/{}.png
    faceName => img/faces/{}.png
    """
    for actor in _records(doc, "Actors.json"):
        index.add(AssetCategory.ACTOR_BATTLER, actor.get("battlerName"))
        index.add(AssetCategory.CHARACTER, actor.get("characterName"))
        index.add(AssetCategory.FACE, actor.get("faceName"))


def extract_enemies(doc: Any, index: AssetIndex) -> None:
    """Enemies.json を解析する（battlerName => img/enemies または img/sv_enemies）"""
    for enemy in _records(doc, "Enemies.json"):
        index.add(AssetCategory.ENEMY_BATTLER, enemy.get("battlerName"))


def extract_animation_ids(doc: Any, index: AssetIndex) -> None:
    """Items.json / Skills.json / Weapons.json の animationId を収集する"""
    for item in _records(doc, "animationId"):
        index.add_animation_id(item.get("animationId"))


def extract_tilesets(doc: Any, index: AssetIndex) -> None:
    """Tilesets.json を解析する（tilesetNames[n] => img/tilesets/{}.png+{}.txt）"""
    for tileset in _records(doc, "Tilesets.json"):
        for name in _list_of(tileset.get("tilesetNames"), "tilesetNames"):
            index.add(AssetCategory.TILESET, name)


def extract_system(doc: Any, index: AssetIndex) -> None:
    """System.json を解析する

    乗り物のBGMと画像、戦闘背景、タイトル画像、システム効果音、
    各種BGM/MEおよびサイドビュー設定を取得する。
    """
    system = _as_object(doc, "System.json")

    for vehicle in ("airship", "boat", "ship"):
        index.add(AssetCategory.BGM, _nested(system, vehicle, "bgm", "name"))
        index.add(AssetCategory.CHARACTER, _nested(system, vehicle, "characterName"))

    index.add(AssetCategory.BATTLEBACK1, system.get("battleback1Name"))
    index.add(AssetCategory.BATTLEBACK2, system.get("battleback2Name"))
    index.add(AssetCategory.ENEMY_BATTLER, system.get("battlerName"))
    index.add(AssetCategory.TITLE1, system.get("title1Name"))
    index.add(AssetCategory.TITLE2, system.get("title2Name"))

    index.use_side_view = bool(system.get("optSideView", False))

    for sound in _list_of(system.get("sounds"), "sounds"):
        if sound is None:
            continue
        index.add(AssetCategory.SE, _as_object(sound, "sounds").get("name"))

    for key in ("battleBgm", "titleBgm"):
        index.add(AssetCategory.BGM, _nested(system, key, "name"))
    for key in ("defeatMe", "gameoverMe", "victoryMe"):
        index.add(AssetCategory.ME, _nested(system, key, "name"))


def extract_common_events(doc: Any, index: AssetIndex) -> None:
    """CommonEvents.json を解析する（list をイベント走査）"""
    for common_event in _records(doc, "CommonEvents.json"):
        walk_events(common_event.get("list"), index)


def extract_troops(doc: Any, index: AssetIndex) -> None:
    """Troops.json を解析する（pages[n].list をイベント走査）"""
    for troop in _records(doc, "Troops.json"):
        for page in _list_of(troop.get("pages"), "pages"):
            if page is None:
                continue
            walk_events(_as_object(page, "pages").get("list"), index)


def extract_map(doc: Any, index: AssetIndex) -> None:
    """MapXXX.json を解析する

    戦闘背景、BGM/BGS、遠景、および各イベントページの画像とイベントリストを取得する。
    """
    game_map = _as_object(doc, "Map")

    index.add(AssetCategory.BATTLEBACK1, game_map.get("battleback1Name"))
    index.add(AssetCategory.BATTLEBACK2, game_map.get("battleback2Name"))
    index.add(AssetCategory.BGM, _nested(game_map, "bgm", "name"))
    index.add(AssetCategory.BGS, _nested(game_map, "bgs", "name"))
    index.add(AssetCategory.PARALLAX, game_map.get("parallaxName"))

    for event in _list_of(game_map.get("events"), "events"):
        if event is None:
            continue
        for page in _list_of(_as_object(event, "events").get("pages"), "pages"):
            if page is None:
                continue
            page = _as_object(page, "pages")
            index.add(AssetCategory.CHARACTER, _nested(page, "image", "characterName"))
            walk_events(page.get("list"), index)


def extract_animations(doc: Any, index: AssetIndex, version: EngineVersion) -> None:
    """Animations.json を解析する

    他のデータから参照されたIDのアニメーションのみを対象とする。
    MV: animation1Name/animation2Name => img/animations、timings[].se.name => audio/se
    MZ: effectName => effects/{}.efkefc、soundTimings[].se.name => audio/se

    Raises:
        DataParseError: id が整数でない要素がある場合
    """
    for animation in _records(doc, ANIMATIONS_FILE):
        animation_id = animation.get("id")
        if isinstance(animation_id, bool) or not isinstance(animation_id, int):
            raise DataParseError(f"{ANIMATIONS_FILE} の id が整数ではありません: {animation_id!r}")
        if animation_id not in index.animation_ids:
            continue

        if version == EngineVersion.MV:
            index.add(AssetCategory.ANIMATION, animation.get("animation1Name"))
            index.add(AssetCategory.ANIMATION, animation.get("animation2Name"))
            timings = animation.get("timings")
        else:
            index.add(AssetCategory.EFFECT, animation.get("effectName"))
            timings = animation.get("soundTimings")

        for timing in _list_of(timings, "timings"):
            if timing is None:
                continue
            index.add(AssetCategory.SE, _nested(_as_object(timing, "timings"), "se", "name"))


DATA_EXTRACTORS: dict[str, Extractor] = {
    "Actors.json": extract_actors,
    "CommonEvents.json": extract_common_events,
    "Enemies.json": extract_enemies,
    "Items.json": extract_animation_ids,
    "Skills.json": extract_animation_ids,
    "System.json": extract_system,
    "Tilesets.json": extract_tilesets,
    "Troops.json": extract_troops,
    "Weapons.json": extract_animation_ids,
}


def is_map_file(filename: str) -> bool:
    """MapXXX.json 形式（11文字、"Map"始まり）のファイル名か判定する"""
    return len(filename) == 11 and filename.startswith("Map")


def find_extractor(filename: str) -> Extractor | None:
    """ファイル名に対応する抽出関数を取得する

    Animations.json は最後に別途解析するため対象外。
    """
    extractor = DATA_EXTRACTORS.get(filename)
    if extractor is not None:
        return extractor
    if is_map_file(filename):
        return extract_map
    return None


def list_data_files(data_dir: Path) -> list[tuple[Path, Extractor]]:
    """data ディレクトリ内の解析対象ファイルを列挙する

    Args:
        data_dir: data ディレクトリのパス

    Returns:
        (ファイルパス, 抽出関数) のリスト。Animations.json は含まない
    """
    files: list[tuple[Path, Extractor]] = []
    for path in sorted(data_dir.iterdir()):
        if not path.is_file():
            continue
        extractor = find_extractor(path.name)
        if extractor is not None:
            files.append((path, extractor))
    return files
