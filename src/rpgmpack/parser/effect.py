"""エフェクトコンテナ（.efkefc）解析モジュール

RPGツクールMZが使用するEffekseerのエフェクトファイルを読み込み、
INFOチャンクに埋め込まれたリソースファイル（テクスチャ、アルファマップ、モデル）の
パスを取り出す機能を提供する。
"""

import struct
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from rpgmpack.parser.assets import normalize_name
from rpgmpack.types import ResolutionError

EFFECT_EXTENSION = ".efkefc"

# "EFKE" (リトルエンディアン)
EFFECT_MAGIC = 0x454B4645

# "INFO" (リトルエンディアン)
INFO_CHUNK_MAGIC = 0x4F464E49

SUPPORTED_FORMAT_VERSION = 0

_UINT32 = struct.Struct("<I")


class EffectFormatError(ResolutionError):
    """エフェクトファイルの形式が不正な場合に発生する例外

    Attributes:
        path: 解析に失敗したファイルのパス（バイト列から解析した場合はNone）
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


@dataclass
class EffectResources:
    """エフェクトファイル内のリソース名一覧

    Attributes:
        textures: テクスチャ画像の相対パス
        alpha_maps: アルファマップ画像の相対パス
        models: モデルファイルの相対パス
    """

    textures: list[str] = field(default_factory=list)
    alpha_maps: list[str] = field(default_factory=list)
    models: list[str] = field(default_factory=list)

    def all_names(self) -> list[str]:
        """すべてのリソース名をファイル内の順序で取得する"""
        return [*self.textures, *self.alpha_maps, *self.models]


class EffectParser:
    """エフェクトファイルを解析するクラス

    ヘッダー(マジック、バージョン)とINFOチャンクを検証し、
    3種類のリソースリストを順に読み取る。
    """

    def parse_file(self, path: Path) -> EffectResources:
        """エフェクトファイルを解析する

        Args:
            path: .efkefc ファイルのパス

        Returns:
            ファイル内のリソース名一覧

        Raises:
            EffectFormatError: ファイル形式が不正、または読み取れない場合
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise EffectFormatError(f"エフェクトファイルを開けません ({e.strerror})", path) from e

        try:
            return self.parse_bytes(data)
        except EffectFormatError as e:
            raise EffectFormatError(str(e), path) from e

    def parse_bytes(self, data: bytes) -> EffectResources:
        """バイト列からエフェクトを解析する

        Args:
            data: エフェクトファイルの内容

        Returns:
            リソース名一覧

        Raises:
            EffectFormatError: 形式が不正な場合
        """
        stream = BytesIO(data)

        magic = self._read_uint32(stream)
        if magic != EFFECT_MAGIC:
            raise EffectFormatError("正しい .efkefc ファイルではありません")

        version = self._read_uint32(stream)
        if version != SUPPORTED_FORMAT_VERSION:
            raise EffectFormatError(f"未対応のバージョン番号です ({version})")

        chunk_name = self._read_uint32(stream)
        if chunk_name != INFO_CHUNK_MAGIC:
            raise EffectFormatError("INFOチャンクが見つかりません")

        chunk_size = self._read_uint32(stream)
        if chunk_size >= len(data):
            raise EffectFormatError(
                f"INFOチャンクのサイズがファイルサイズを超えています ({chunk_size} >= {len(data)})"
            )

        # 予約領域
        self._read_uint32(stream)

        resources = EffectResources()
        resources.textures = self._read_resource_list(stream, chunk_size)

        # テクスチャとアルファマップの間の予約領域（常に0）
        reserved = self._read_uint32(stream)
        if reserved != 0:
            raise EffectFormatError(f"未知のリソース種別があります ({reserved})")

        resources.alpha_maps = self._read_resource_list(stream, chunk_size)
        resources.models = self._read_resource_list(stream, chunk_size)
        return resources

    def _read_resource_list(self, stream: BytesIO, chunk_size: int) -> list[str]:
        """要素数付きのリソース名リストを読み取る

        各要素は文字数(uint32)とUTF-16LEの文字列（終端のNULを含む）。
        """
        count = self._read_uint32(stream)
        names: list[str] = []
        for _ in range(count):
            length = self._read_uint32(stream)
            if length >= chunk_size:
                raise EffectFormatError(
                    f"リソース名の長さがINFOチャンクを超えています ({length} >= {chunk_size})"
                )
            if length == 0:
                raise EffectFormatError("リソース名の長さが0です")

            raw = self._read_exact(stream, length * 2)
            try:
                # 末尾の1文字は終端のNUL
                names.append(raw[:-2].decode("utf-16-le"))
            except UnicodeDecodeError as e:
                raise EffectFormatError("リソース名をUTF-16として解読できません") from e
        return names

    def _read_uint32(self, stream: BytesIO) -> int:
        return _UINT32.unpack(self._read_exact(stream, _UINT32.size))[0]

    def _read_exact(self, stream: BytesIO, size: int) -> bytes:
        data = stream.read(size)
        if len(data) < size:
            raise EffectFormatError("ファイルが途中で終わっています")
        return data


def resolve_effect_resources(path: Path, effects_dir: Path) -> list[Path]:
    """エフェクトファイル内のリソースを effects ディレクトリ基準の絶対パスに解決する

    Args:
        path: .efkefc ファイルのパス
        effects_dir: effects ディレクトリ（絶対パス）

    Returns:
        リソースファイルのパス一覧（テクスチャ、アルファマップ、モデルの順）

    Raises:
        EffectFormatError: ファイル形式が不正な場合
    """
    resources = EffectParser().parse_file(path)
    paths: list[Path] = []
    for name in resources.all_names():
        normalized = normalize_name(name)
        if normalized is not None:
            paths.append(effects_dir / normalized)
    return paths
