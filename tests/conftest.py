"""テスト共通フィクスチャ

合成したRPGツクールMV/MZプロジェクトと、エフェクトファイルのバイト列を生成する。
"""

import json
import struct
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from rpgmpack.parser.effect import EFFECT_MAGIC, INFO_CHUNK_MAGIC

PLUGINS_JS = """// Generated by RPG Maker.
// Do not edit this file directly.
var $plugins =
[
{"name":"TestPlugin","status":true,"description":"テスト用","parameters":{"Picture":"Frame"}}
];
"""

TEST_PLUGIN_SOURCE = """//=============================================================================
// TestPlugin.js
//=============================================================================
/*:
 * @target MZ
 * @plugindesc テスト用プラグイン
 * @requiredAssets img/pictures/Logo.png
 *
 * @param Picture
 * @type file
 * @dir img/pictures/
 * @default Default
 */
(() => {})();
"""


def encode_effect(
    textures: Sequence[str] = (),
    alpha_maps: Sequence[str] = (),
    models: Sequence[str] = (),
) -> bytes:
    """リソース名一覧から .efkefc のバイト列を生成する"""

    def resource_list(names: Sequence[str]) -> bytes:
        body = struct.pack("<I", len(names))
        for name in names:
            encoded = (name + "\0").encode("utf-16-le")
            body += struct.pack("<I", len(encoded) // 2) + encoded
        return body

    info = (
        struct.pack("<I", 0)
        + resource_list(textures)
        + struct.pack("<I", 0)
        + resource_list(alpha_maps)
        + resource_list(models)
    )
    return struct.pack("<IIII", EFFECT_MAGIC, 0, INFO_CHUNK_MAGIC, len(info)) + info


def write_json(path: Path, data: Any) -> Path:
    """JSONファイルを書き出す"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


def touch(root: Path, *relative_paths: str) -> None:
    """空のアセットファイルを作成する"""
    for relative in relative_paths:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x00" * 16)


def _write_common_data(data_dir: Path, side_view: bool) -> None:
    write_json(
        data_dir / "Actors.json",
        [None, {"id": 1, "battlerName": "Actor1_1", "characterName": "Actor1", "faceName": "Actor1"}],
    )
    write_json(data_dir / "Enemies.json", [None, {"id": 1, "battlerName": "Slime"}])
    write_json(data_dir / "Items.json", [None, {"id": 1, "animationId": 1}])
    write_json(data_dir / "Skills.json", [None, {"id": 1, "animationId": -1}])
    write_json(data_dir / "Weapons.json", [None, {"id": 1, "animationId": 0}])
    write_json(data_dir / "Tilesets.json", [None, {"id": 1, "tilesetNames": ["World_A1", "", "", "", "", ""]}])
    write_json(
        data_dir / "System.json",
        {
            "airship": {"bgm": {"name": "Ship3"}, "characterName": "Vehicle"},
            "boat": {"bgm": {"name": "Ship1"}, "characterName": "Vehicle"},
            "ship": {"bgm": {"name": "Ship2"}, "characterName": "Vehicle"},
            "battleback1Name": "",
            "battleback2Name": "",
            "battlerName": "",
            "title1Name": "Castle",
            "title2Name": "",
            "optSideView": side_view,
            "sounds": [{"name": "Cursor1"}, {"name": ""}],
            "battleBgm": {"name": "Battle1"},
            "titleBgm": {"name": "Theme1"},
            "defeatMe": {"name": "Defeat1"},
            "gameoverMe": {"name": "Gameover1"},
            "victoryMe": {"name": "Victory1"},
        },
    )
    write_json(
        data_dir / "CommonEvents.json",
        [
            None,
            {
                "id": 1,
                "list": [
                    {"code": 241, "parameters": [{"name": "Battle2"}]},
                    {"code": 0, "parameters": []},
                ],
            },
        ],
    )
    write_json(
        data_dir / "Troops.json",
        [None, {"id": 1, "pages": [{"list": [{"code": 212, "parameters": [-1, 2, False]}]}]}],
    )
    write_json(
        data_dir / "Map001.json",
        {
            "battleback1Name": "",
            "battleback2Name": "",
            "bgm": {"name": "Town1"},
            "bgs": {"name": ""},
            "parallaxName": "",
            "events": [
                None,
                {
                    "id": 1,
                    "pages": [
                        {
                            "image": {"characterName": "People1"},
                            "list": [
                                {"code": 101, "parameters": ["People1", 0, 0, 2]},
                                {"code": 505, "parameters": [{"code": 44, "parameters": [{"name": "Door1"}]}]},
                                {"code": 0, "parameters": []},
                            ],
                        }
                    ],
                },
            ],
        },
    )
    write_json(data_dir / "MapInfos.json", [None, {"id": 1, "name": "MAP001"}])


@pytest.fixture
def effect_bytes() -> Callable[..., bytes]:
    """エフェクトファイルのバイト列を生成する関数"""
    return encode_effect


@pytest.fixture
def mz_project(tmp_path: Path) -> Path:
    """MZ形式の合成プロジェクト

    参照されているアセットと未参照のアセットの両方を含む。
    """
    project = tmp_path / "MZGame"
    project.mkdir()
    (project / "game.rmmzproject").write_text("RPGMZ 1.8.0", encoding="utf-8")

    data_dir = project / "data"
    _write_common_data(data_dir, side_view=False)
    write_json(
        data_dir / "Animations.json",
        [
            None,
            {"id": 1, "effectName": "HealOne", "soundTimings": [{"frame": 0, "se": {"name": "Heal1"}}]},
            {"id": 2, "effectName": "Fire", "soundTimings": []},
            {"id": 3, "effectName": "Unused", "soundTimings": [{"frame": 0, "se": {"name": "Thunder1"}}]},
        ],
    )

    effects = project / "effects"
    effects.mkdir()
    (effects / "HealOne.efkefc").write_bytes(encode_effect(textures=["Texture/Heal.png"], models=["Model/Ring.efkmodel"]))
    (effects / "Fire.efkefc").write_bytes(encode_effect(textures=["Texture/Fire.png"], alpha_maps=["Texture/Mask.png"]))
    (effects / "Unused.efkefc").write_bytes(encode_effect(textures=["Texture/Orphan.png"]))

    js = project / "js"
    (js / "plugins").mkdir(parents=True)
    (js / "plugins.js").write_text(PLUGINS_JS, encoding="utf-8")
    (js / "plugins" / "TestPlugin.js").write_text(TEST_PLUGIN_SOURCE, encoding="utf-8")

    touch(
        project,
        "audio/bgm/Battle1.ogg",
        "audio/bgm/Battle2.ogg",
        "audio/bgm/Town1.ogg",
        "audio/bgm/Unused.ogg",
        "audio/se/Cursor1.ogg",
        "audio/se/Door1.ogg",
        "audio/se/Heal1.ogg",
        "audio/se/Old.ogg",
        "effects/Texture/Heal.png",
        "effects/Texture/Fire.png",
        "effects/Texture/Mask.png",
        "effects/Texture/Orphan.png",
        "img/characters/Actor1.png",
        "img/characters/People1.png",
        "img/characters/sub/Door.png",
        "img/enemies/Bat.png",
        "img/enemies/Slime.png",
        "img/faces/Actor1.png",
        "img/faces/People1.png",
        "img/pictures/Frame.png",
        "img/pictures/Logo.png",
        "img/pictures/Other.png",
        "img/sv_enemies/Slime.png",
        "img/system/Window.png",
        "img/titles1/Castle.png",
    )
    return project


@pytest.fixture
def mv_project(tmp_path: Path) -> Path:
    """MV形式の合成プロジェクト（サイドビュー戦闘）"""
    project = tmp_path / "MVGame"
    project.mkdir()
    (project / "Game.rpgproject").write_text("RPGMV 1.6.2", encoding="utf-8")

    data_dir = project / "data"
    _write_common_data(data_dir, side_view=True)
    write_json(
        data_dir / "Animations.json",
        [
            None,
            {
                "id": 1,
                "animation1Name": "Hit1",
                "animation2Name": "",
                "timings": [{"frame": 1, "se": {"name": "Blow1"}}, {"frame": 2, "se": None}],
            },
            {"id": 2, "animation1Name": "Fire1", "animation2Name": "Fire2", "timings": []},
            {"id": 3, "animation1Name": "Ice1", "animation2Name": "", "timings": []},
        ],
    )

    js = project / "js"
    js.mkdir()
    (js / "plugins.js").write_text("var $plugins =\n[\n];\n", encoding="utf-8")

    touch(
        project,
        "audio/se/Blow1.ogg",
        "img/animations/Hit1.png",
        "img/animations/Fire1.png",
        "img/animations/Fire2.png",
        "img/animations/Ice1.png",
        "img/enemies/Slime.png",
        "img/sv_enemies/Slime.png",
        "img/sv_enemies/Bat.png",
    )
    return project
