"""
Environment-backed settings for the conference backend.

All values come from environment variables; nothing is read from disk.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    mongodb_uri: Optional[str] = None
    mongodb_db: str = "conference"
    port: int = 5000
    resend_api_key: Optional[str] = None
    pastor_email: Optional[str] = None
    email_domain: str = "example.org"
    email_from_name: str = "Conference Website"
    app_env: str = "development"
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def from_address(self) -> str:
        return f"{self.email_from_name} <noreply@{self.email_domain}>"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongodb_uri=os.getenv("MONGODB_URI") or None,
            mongodb_db=os.getenv("MONGODB_DB", "conference"),
            port=int(os.getenv("PORT", "5000")),
            resend_api_key=os.getenv("RESEND_API_KEY") or None,
            pastor_email=os.getenv("PASTOR_EMAIL") or None,
            email_domain=os.getenv("EMAIL_DOMAIN", "example.org"),
            email_from_name=os.getenv("EMAIL_FROM_NAME", "Conference Website"),
            app_env=os.getenv("APP_ENV", "development"),
            allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS", "*")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings.from_env()
