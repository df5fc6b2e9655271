"""未使用アセットのスキャンモジュール"""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path

from rpgmpack.filtering import UsageFilter


@dataclass
class ScanReport:
    """スキャン結果

    Attributes:
        project_dir: プロジェクトのルート
        used: 使用中（または判定対象外）のファイルの相対パス
        unused: 未使用と判定されたファイルの相対パス
    """

    project_dir: Path
    used: list[Path] = field(default_factory=list)
    unused: list[Path] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        """ディレクトリ（先頭2階層）ごとの未使用ファイル数を取得する

        Returns:
            "audio/bgm" のようなディレクトリ名をキー、ファイル数を値とする辞書
        """
        summary: dict[str, int] = {}
        for path in self.unused:
            key = "/".join(path.parent.parts[:2]) or "."
            summary[key] = summary.get(key, 0) + 1
        return dict(sorted(summary.items()))

    def unused_size_bytes(self) -> int:
        """未使用ファイルの合計サイズを取得する"""
        total = 0
        for path in self.unused:
            full_path = self.project_dir / path
            if full_path.is_file():
                total += full_path.stat().st_size
        return total


class UnusedAssetScanner:
    """プロジェクト内のファイルを走査して未使用アセットを判定するクラス"""

    def __init__(self, project_dir: Path, usage_filter: UsageFilter, keep_patterns: list[str] | None = None) -> None:
        """プロジェクトディレクトリと判定器を指定して初期化する

        Args:
            project_dir: スキャン対象のプロジェクトディレクトリ
            usage_filter: 未使用判定器
            keep_patterns: 常に使用中とみなすglobパターン（省略可）

        Raises:
            FileNotFoundError: プロジェクトディレクトリが存在しない場合
        """
        if not project_dir.exists():
            raise FileNotFoundError(f"プロジェクトディレクトリが見つかりません: {project_dir}")

        self._project_dir = project_dir
        self._usage_filter = usage_filter
        self._keep_patterns = keep_patterns or []

    def scan(self) -> ScanReport:
        """プロジェクト内の全ファイルを判定する

        Returns:
            スキャン結果
        """
        report = ScanReport(project_dir=self._project_dir)

        for file_path in sorted(self._project_dir.rglob("*")):
            if not file_path.is_file():
                continue

            # 隠しファイルは除外
            if file_path.name.startswith("."):
                continue

            relative_path = file_path.relative_to(self._project_dir)
            if self._should_keep(relative_path) or not self._usage_filter.is_unused(file_path):
                report.used.append(relative_path)
            else:
                report.unused.append(relative_path)

        return report

    def _should_keep(self, relative_path: Path) -> bool:
        """keepパターンに一致するか判定する

        Args:
            relative_path: プロジェクトディレクトリからの相対パス
        """
        path_str = relative_path.as_posix()
        for pattern in self._keep_patterns:
            if fnmatch.fnmatch(path_str, pattern):
                return True
            if fnmatch.fnmatch(relative_path.name, pattern):
                return True
        return False
