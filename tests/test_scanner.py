"""未使用アセットスキャンのテスト"""

from pathlib import Path

import pytest

from rpgmpack.filtering import UsageFilter
from rpgmpack.parser.assets import AssetIndex
from rpgmpack.parser.detector import EngineVersion
from rpgmpack.registry import PathRegistry
from rpgmpack.resolver import AssetResolver
from rpgmpack.scanner import ScanReport, UnusedAssetScanner

MZ_UNUSED = {
    Path("audio/bgm/Unused.ogg"),
    Path("audio/se/Old.ogg"),
    Path("effects/Texture/Orphan.png"),
    Path("effects/Unused.efkefc"),
    Path("img/characters/sub/Door.png"),
    Path("img/enemies/Bat.png"),
    Path("img/pictures/Other.png"),
    Path("img/sv_enemies/Slime.png"),
}


def build_filter(project: Path) -> UsageFilter:
    resolver = AssetResolver(project)
    result = resolver.run()
    assert result.asset_index is not None and result.version is not None
    return UsageFilter(result.asset_index, resolver.registry, result.version)


class TestScanReport:
    """ScanReportデータクラスのテスト"""

    def test_summary_groups_by_two_levels(self, tmp_path: Path) -> None:
        """先頭2階層のディレクトリごとに集計する"""
        report = ScanReport(
            project_dir=tmp_path,
            unused=[
                Path("audio/se/a.ogg"),
                Path("audio/se/b.ogg"),
                Path("img/characters/sub/c.png"),
                Path("effects/d.efkefc"),
                Path("root.txt"),
            ],
        )
        assert report.summary() == {
            ".": 1,
            "audio/se": 2,
            "effects": 1,
            "img/characters": 1,
        }

    def test_unused_size_bytes(self, tmp_path: Path) -> None:
        """存在するファイルのサイズのみを合計する"""
        (tmp_path / "a.ogg").write_bytes(b"\x00" * 10)
        (tmp_path / "b.ogg").write_bytes(b"\x00" * 5)
        report = ScanReport(project_dir=tmp_path, unused=[Path("a.ogg"), Path("b.ogg"), Path("gone.ogg")])
        assert report.unused_size_bytes() == 15


class TestUnusedAssetScanner:
    """UnusedAssetScannerクラスのテスト"""

    def test_scan_mz_project(self, mz_project: Path) -> None:
        """MZプロジェクトの未使用アセットを検出する"""
        report = UnusedAssetScanner(mz_project, build_filter(mz_project)).scan()

        assert set(report.unused) == MZ_UNUSED
        assert Path("img/system/Window.png") in report.used
        assert Path("js/plugins/TestPlugin.js") in report.used
        assert Path("data/System.json") in report.used
        assert Path("effects/Texture/Mask.png") in report.used

    def test_scan_mz_project_size(self, mz_project: Path) -> None:
        """未使用ファイルの合計サイズを求める"""
        report = UnusedAssetScanner(mz_project, build_filter(mz_project)).scan()

        expected = (mz_project / "effects" / "Unused.efkefc").stat().st_size + 16 * (len(MZ_UNUSED) - 1)
        assert report.unused_size_bytes() == expected

    def test_scan_mv_project(self, mv_project: Path) -> None:
        """MVプロジェクトの未使用アセットを検出する（サイドビュー）"""
        report = UnusedAssetScanner(mv_project, build_filter(mv_project)).scan()

        assert set(report.unused) == {
            Path("img/animations/Ice1.png"),
            Path("img/enemies/Slime.png"),
            Path("img/sv_enemies/Bat.png"),
        }

    def test_keep_patterns(self, mz_project: Path) -> None:
        """keepパターンに一致するファイルは使用中とみなす"""
        scanner = UnusedAssetScanner(mz_project, build_filter(mz_project), ["img/pictures/*", "*.efkefc"])
        report = scanner.scan()

        assert Path("img/pictures/Other.png") in report.used
        assert Path("effects/Unused.efkefc") in report.used
        assert set(report.unused) == MZ_UNUSED - {Path("img/pictures/Other.png"), Path("effects/Unused.efkefc")}

    def test_hidden_files_are_skipped(self, tmp_path: Path) -> None:
        """隠しファイルは結果に含めない"""
        (tmp_path / "audio" / "bgm").mkdir(parents=True)
        (tmp_path / "audio" / "bgm" / ".DS_Store").write_bytes(b"")
        (tmp_path / "audio" / "bgm" / "Theme1.ogg").write_bytes(b"")
        usage_filter = UsageFilter(AssetIndex(), PathRegistry.from_project(tmp_path), EngineVersion.MZ)

        report = UnusedAssetScanner(tmp_path, usage_filter).scan()

        assert report.unused == [Path("audio/bgm/Theme1.ogg")]
        assert report.used == []

    def test_missing_project(self, tmp_path: Path) -> None:
        """プロジェクトディレクトリが無い場合はエラー"""
        usage_filter = UsageFilter(AssetIndex(), PathRegistry.from_project(tmp_path), EngineVersion.MZ)
        with pytest.raises(FileNotFoundError):
            UnusedAssetScanner(tmp_path / "missing", usage_filter)
