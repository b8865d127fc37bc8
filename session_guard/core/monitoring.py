"""監視ツール（Sentry）の初期化"""

import sentry_sdk

from .config import Settings, get_settings
from .logging import get_logger

logger = get_logger(__name__)


def init_monitoring(settings: Settings | None = None) -> bool:
    """
    Sentryの初期化

    SENTRY_DSNが設定されていない場合はスキップされる

    Returns:
        Sentryを有効化した場合True
    """
    settings = settings or get_settings()

    if not settings.SENTRY_DSN:
        logger.info(
            f"Sentry is disabled on {settings.ENV_MODE} mode"
            if not settings.is_production
            else "Sentry DSN is not set"
        )
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV_MODE,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        # Cookie・ヘッダーにセッションIDが含まれるため送信しない
        send_default_pii=False,
    )
    logger.info(f"Sentry is enabled on {settings.ENV_MODE} mode")
    return True
