"""プロジェクトのディレクトリ構成モジュール

RPGツクールプロジェクト内の意味的なサブディレクトリ（audio/bgm、img/characters など）を
絶対パスに解決して保持する。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from rpgmpack.parser.detector import EngineVersion


def absolute_path(path: Path | str) -> Path:
    """パスを絶対パスに正規化する

    シンボリックリンクは解決せず、"." や ".." のみを畳み込む。
    """
    return Path(os.path.abspath(path))


@dataclass(frozen=True)
class PathRegistry:
    """プロジェクトのディレクトリ構成

    生成時に一度だけ解決され、以後変更されない。
    すべてのエントリは正規化済みの絶対パス。
    """

    top: Path

    audio: Path
    audio_bgm: Path
    audio_bgs: Path
    audio_me: Path
    audio_se: Path

    data: Path

    # MZのみ
    effects: Path
    effects_texture: Path

    fonts: Path
    icon: Path

    img: Path
    # MVのみ
    img_animations: Path
    img_battlebacks1: Path
    img_battlebacks2: Path
    img_characters: Path
    img_enemies: Path
    img_faces: Path
    img_parallaxes: Path
    img_pictures: Path
    img_sv_actors: Path
    img_sv_enemies: Path
    img_system: Path
    img_tilesets: Path
    img_titles1: Path
    img_titles2: Path

    js: Path
    js_plugins: Path
    movies: Path
    save: Path

    @classmethod
    def from_project(cls, project_dir: Path | str) -> PathRegistry:
        """プロジェクトのルートからディレクトリ構成を生成する

        Args:
            project_dir: プロジェクトのルートディレクトリ

        Returns:
            解決済みのディレクトリ構成
        """
        top = absolute_path(project_dir)
        audio = top / "audio"
        effects = top / "effects"
        img = top / "img"
        js = top / "js"

        return cls(
            top=top,
            audio=audio,
            audio_bgm=audio / "bgm",
            audio_bgs=audio / "bgs",
            audio_me=audio / "me",
            audio_se=audio / "se",
            data=top / "data",
            effects=effects,
            effects_texture=effects / "Texture",
            fonts=top / "fonts",
            icon=top / "icon",
            img=img,
            img_animations=img / "animations",
            img_battlebacks1=img / "battlebacks1",
            img_battlebacks2=img / "battlebacks2",
            img_characters=img / "characters",
            img_enemies=img / "enemies",
            img_faces=img / "faces",
            img_parallaxes=img / "parallaxes",
            img_pictures=img / "pictures",
            img_sv_actors=img / "sv_actors",
            img_sv_enemies=img / "sv_enemies",
            img_system=img / "system",
            img_tilesets=img / "tilesets",
            img_titles1=img / "titles1",
            img_titles2=img / "titles2",
            js=js,
            js_plugins=js / "plugins",
            movies=top / "movies",
            save=top / "save",
        )

    def governed_directories(self, version: EngineVersion) -> list[Path]:
        """未使用判定の対象となるディレクトリ一覧を取得する

        Args:
            version: エンジン世代

        Returns:
            判定対象ディレクトリのリスト
        """
        directories = [
            self.audio_bgm,
            self.audio_bgs,
            self.audio_me,
            self.audio_se,
            self.img_battlebacks1,
            self.img_battlebacks2,
            self.img_characters,
            self.img_enemies,
            self.img_faces,
            self.img_parallaxes,
            self.img_pictures,
            self.img_sv_actors,
            self.img_sv_enemies,
            self.img_tilesets,
            self.img_titles1,
            self.img_titles2,
            self.movies,
        ]
        if version == EngineVersion.MV:
            directories.append(self.img_animations)
        else:
            directories.append(self.effects)
        return directories
