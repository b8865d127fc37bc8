import ipaddress
from datetime import timedelta
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import get_logger

logger = get_logger(__name__)

SameSite = Literal["lax", "strict", "none"]


class SessionConfig(BaseModel):
    """
    セッションマネージャー設定（構築後は不変）

    Attributes:
        cookie_name: セッションCookie名
        timeout: アイドルタイムアウト
        max_age: 絶対有効期限
        domain: Cookieのドメイン
        secure: CookieのSecure属性
        http_only: セッションCookieのHttpOnly属性（XSRF-TOKENには付けない）
        same_site: CookieのSameSite属性
        encrypt_session: 永続ストアでペイロードを暗号化するか
        enable_csrf: CSRF検証を有効にするか
        regenerate_on_auth: bind_user時にセッションIDを再生成するか
        cleanup_interval: 期限切れセッション削除の間隔（0で無効）
        token_length: セッションIDのエントロピー（バイト数）
        trusted_proxies: 転送ヘッダーを信頼するプロキシのCIDR（空なら常に信頼）
        fingerprint_headers: フィンガープリントに使うリクエストヘッダー（空なら無効）
    """

    model_config = ConfigDict(frozen=True)

    cookie_name: str = "go_session"
    timeout: timedelta = timedelta(hours=1)
    max_age: timedelta = timedelta(hours=24)
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = True
    same_site: SameSite = "lax"
    encrypt_session: bool = True
    enable_csrf: bool = True
    regenerate_on_auth: bool = True
    cleanup_interval: timedelta = timedelta(hours=1)
    token_length: int = 32
    trusted_proxies: tuple[str, ...] = ()
    fingerprint_headers: tuple[str, ...] = ()

    @field_validator("timeout", "max_age")
    @classmethod
    def validate_positive_duration(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("duration must be positive")
        return v

    @field_validator("cleanup_interval")
    @classmethod
    def validate_cleanup_interval(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("cleanup_interval must not be negative")
        return v

    @field_validator("token_length")
    @classmethod
    def validate_token_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("token_length must be at least 1")
        return v

    @field_validator("trusted_proxies")
    @classmethod
    def validate_trusted_proxies(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for network in v:
            ipaddress.ip_network(network, strict=False)
        return v

    @field_validator("fingerprint_headers")
    @classmethod
    def normalize_fingerprint_headers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(header.lower() for header in v)


DEFAULT_SESSION_CONFIG = SessionConfig()


def _split_csv(v: str | list[str]) -> list[str]:
    if v == "":
        return []
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    if isinstance(v, list):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    """
    アプリケーション設定
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # 未定義のフィールドを無視
    )

    ENV_MODE: Literal["development", "production", "test"] = "development"

    BACKEND_CORS_ORIGINS: str | list[str] = []

    @field_validator("BACKEND_CORS_ORIGINS")
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str]) -> list[str]:
        if v == "*":
            return ["*"]
        return _split_csv(v)

    # memory: プロセス内, database: PostgreSQL（SQLAlchemy）
    SESSION_STORE: Literal["memory", "database"] = "memory"

    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "main"
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: str = "5432"

    @property
    def database_uri(self) -> str:
        """データベース接続URL"""
        # Kerberos設定済み環境だとタイムアウト待ちにハマるので、gssencmode=disableを設定
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            f"?gssencmode=disable"
        )

    @property
    def has_database(self) -> bool:
        """DBストア使用有無"""
        return self.SESSION_STORE == "database" and bool(
            self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_HOST
        )

    SESSION_COOKIE_NAME: str = "go_session"
    SESSION_TIMEOUT: int = 60 * 60  # 1 hour
    SESSION_EXPIRE: int = 60 * 60 * 24  # 1 day
    SESSION_COOKIE_DOMAIN: Optional[str] = None
    SESSION_COOKIE_SECURE: bool = False
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: SameSite = "lax"
    SESSION_ENCRYPT: bool = True
    SESSION_ENABLE_CSRF: bool = True
    SESSION_REGENERATE_ON_AUTH: bool = True
    SESSION_CLEANUP_INTERVAL: int = 60 * 60  # 0で無効
    SESSION_TOKEN_LENGTH: int = 32
    SESSION_TRUSTED_PROXIES: str | list[str] = []
    SESSION_FINGERPRINT_HEADERS: str | list[str] = []

    @field_validator("SESSION_TRUSTED_PROXIES", "SESSION_FINGERPRINT_HEADERS")
    @classmethod
    def split_list_settings(cls, v: str | list[str]) -> list[str]:
        return _split_csv(v)

    SESSION_ENCRYPTION_KEY: str = ""

    @field_validator("SESSION_ENCRYPTION_KEY")
    @classmethod
    def validate_encryption_key(cls, v: str) -> str:
        """暗号化キー検証"""
        if not v:
            logger.warning(
                "SESSION_ENCRYPTION_KEY is not set. Session encryption disabled."
            )
            return ""

        try:
            from cryptography.fernet import Fernet

            Fernet(v.encode())
        except Exception:
            raise ValueError(
                'Invalid SESSION_ENCRYPTION_KEY format. Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"'
            )

        return v

    @property
    def session_config(self) -> SessionConfig:
        """環境変数からSessionConfigを構築"""
        return SessionConfig(
            cookie_name=self.SESSION_COOKIE_NAME,
            timeout=timedelta(seconds=self.SESSION_TIMEOUT),
            max_age=timedelta(seconds=self.SESSION_EXPIRE),
            domain=self.SESSION_COOKIE_DOMAIN,
            secure=self.SESSION_COOKIE_SECURE,
            http_only=self.SESSION_COOKIE_HTTPONLY,
            same_site=self.SESSION_COOKIE_SAMESITE,
            encrypt_session=self.SESSION_ENCRYPT,
            enable_csrf=self.SESSION_ENABLE_CSRF,
            regenerate_on_auth=self.SESSION_REGENERATE_ON_AUTH,
            cleanup_interval=timedelta(seconds=self.SESSION_CLEANUP_INTERVAL),
            token_length=self.SESSION_TOKEN_LENGTH,
            trusted_proxies=tuple(self.SESSION_TRUSTED_PROXIES),
            fingerprint_headers=tuple(self.SESSION_FINGERPRINT_HEADERS),
        )

    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 1.0

    @field_validator("SENTRY_DSN")
    @classmethod
    def sentry_dsn_can_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return v

    @property
    def is_development(self) -> bool:
        """開発環境かどうか"""
        return self.ENV_MODE == "development"

    @property
    def is_production(self) -> bool:
        """本番環境かどうか"""
        return self.ENV_MODE == "production"

    @property
    def is_test(self) -> bool:
        """テスト環境かどうか"""
        return self.ENV_MODE == "test"


@lru_cache
def get_settings() -> Settings:
    """
    アプリケーション設定を取得（キャッシュ）
    """
    return Settings()
