"""共通型定義"""

from enum import IntEnum


class ExitCode(IntEnum):
    """CLIの終了コード"""

    SUCCESS = 0
    ERROR = 1
    INVALID_INPUT = 2


class ResolutionError(Exception):
    """アセット参照解決を中断させる致命的エラーの基底クラス"""

    pass


class DataParseError(ResolutionError):
    """ゲームデータ（JSON）の構造が不正な場合に発生する例外"""

    pass
