"""セッション管理用のロギングユーティリティ。"""

import logging
import sys


def is_uvicorn_context() -> bool:
    """
    uvicorn配下で実行中かどうかを判定する。

    Returns:
        bool: uvicornがロードされている場合True、そうでない場合False。
    """
    return "uvicorn" in sys.modules


def get_logger(name: str) -> logging.Logger:
    """
    ロガーインスタンスを取得する。

    uvicorn配下（Webサーバー）で実行中の場合は"uvicorn"ロガーを使用し、
    アクセスログと同じフォーマット・出力先に揃える。
    それ以外（テスト・スクリプト）では呼び出し元のモジュール名のロガーを返す。

    Args:
        name: ロガー名、通常は呼び出し元モジュールの__name__を指定。

    Returns:
        logging.Logger: ロガーインスタンス。
    """
    if is_uvicorn_context():
        return logging.getLogger("uvicorn")
    return logging.getLogger(name)


def redact(session_id: str, visible: int = 8) -> str:
    """
    ログ出力用にセッションIDを短縮する。

    セッションIDは認証情報と同等なので、ログには先頭数文字だけを残す。

    Examples:
        >>> redact("abcdefghijklmnop")
        'abcdefgh...'
    """
    if len(session_id) <= visible:
        return "***"
    return f"{session_id[:visible]}..."
