from dataclasses import dataclass
import math
from typing import List, Optional

from pydantic_settings import BaseSettings

from inquiry_api.core.exceptions import ConfigurationError

DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 20.0


class Settings(BaseSettings):
    app_name: str = "KRV e-Invoicing Inquiry API"
    SMTP_HOST: Optional[str] = None
    # Numeric values kept as text so a bad value falls back to its default
    SMTP_PORT: Optional[str] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_SECURE: Optional[str] = None
    SMTP_TIMEOUT: Optional[str] = None
    FROM_EMAIL: Optional[str] = None
    TO_EMAIL: Optional[str] = None
    REPLY_TO: Optional[str] = None
    ALLOWED_ORIGINS: str = "*"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def smtp_port(self) -> int:
        try:
            port = int((self.SMTP_PORT or "").strip())
        except ValueError:
            return DEFAULT_SMTP_PORT
        return port or DEFAULT_SMTP_PORT

    @property
    def smtp_timeout(self) -> float:
        try:
            timeout = float((self.SMTP_TIMEOUT or "").strip())
        except ValueError:
            return DEFAULT_SMTP_TIMEOUT
        return timeout if math.isfinite(timeout) and timeout > 0 else DEFAULT_SMTP_TIMEOUT

    @property
    def smtp_secure(self) -> bool:
        return self.SMTP_SECURE == "true"

    @property
    def recipient(self) -> Optional[str]:
        return self.TO_EMAIL or self.REPLY_TO

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@dataclass(frozen=True)
class MailConfig:
    """Everything needed to open an SMTP session and address one inquiry."""

    host: str
    port: int
    user: str
    password: str
    sender: str
    recipient: str
    secure: bool = False
    timeout: float = DEFAULT_SMTP_TIMEOUT


def build_mail_config(settings: Settings) -> MailConfig:
    """Validate ``settings`` and freeze them into a :class:`MailConfig`.

    Raises :class:`ConfigurationError` listing every missing variable.
    """
    required = {
        "SMTP_HOST": settings.SMTP_HOST,
        "SMTP_USER": settings.SMTP_USER,
        "SMTP_PASS": settings.SMTP_PASS,
        "FROM_EMAIL": settings.FROM_EMAIL,
        "TO_EMAIL or REPLY_TO": settings.recipient,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(missing)

    return MailConfig(
        host=settings.SMTP_HOST,
        port=settings.smtp_port,
        user=settings.SMTP_USER,
        password=settings.SMTP_PASS,
        sender=settings.FROM_EMAIL,
        recipient=settings.recipient,
        secure=settings.smtp_secure,
        timeout=settings.smtp_timeout,
    )


settings = Settings()
