"""エンジン世代検出モジュール

プロジェクトファイルの拡張子から、RPGツクールMV/MZのどちらで
作成されたプロジェクトかを判定する。
"""

from enum import Enum
from pathlib import Path

from rpgmpack.types import ResolutionError


class EngineVersion(Enum):
    """対応するエンジン世代

    MV: 旧世代（img/animations を使用する）
    MZ: 新世代（effects/ のエフェクトを使用する）
    """

    MV = "RPG Maker MV"
    MZ = "RPG Maker MZ"

    @classmethod
    def from_name(cls, name: str) -> "EngineVersion":
        """短縮名（mv/mz）からエンジン世代を取得する

        Args:
            name: "mv" または "mz"（大文字小文字は区別しない）

        Returns:
            対応するエンジン世代

        Raises:
            ValueError: 未知の名前の場合
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"未知のエンジン世代です: {name}") from None


class ProjectDetectionError(ResolutionError):
    """プロジェクトのエンジン世代を判定できない場合に発生する例外"""

    pass


class ProjectDetector:
    """プロジェクトのエンジン世代を検出するクラス

    プロジェクトのルート直下にあるプロジェクトファイルを探し、
    拡張子からエンジン世代を判定する。
    """

    _PROJECT_EXTENSIONS: dict[str, EngineVersion] = {
        ".rpgproject": EngineVersion.MV,
        ".rmmzproject": EngineVersion.MZ,
    }

    def __init__(self, project_dir: Path) -> None:
        """プロジェクトディレクトリを指定して初期化

        Args:
            project_dir: 解析対象のプロジェクトディレクトリ
        """
        self._project_dir = project_dir

    def detect(self) -> EngineVersion:
        """エンジン世代を検出して返す

        Returns:
            検出されたエンジン世代

        Raises:
            ProjectDetectionError: ディレクトリが存在しない、またはプロジェクトファイルが無い場合
        """
        if not self._project_dir.is_dir():
            raise ProjectDetectionError(f"ディレクトリが存在しません: {self._project_dir}")

        for entry in sorted(self._project_dir.iterdir()):
            if not entry.is_file():
                continue
            version = self._PROJECT_EXTENSIONS.get(entry.suffix.lower())
            if version is not None:
                return version

        raise ProjectDetectionError(
            f"RPGツクールのプロジェクトファイルが見つかりません: {self._project_dir}"
        )
