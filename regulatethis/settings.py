# regulatethis/settings.py
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="RegulateThis")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)

    # public site
    SITE_NAME: str = Field(default="RegulateThis")
    SITE_URL: str = Field(default="https://regulatethis.com")
    SITE_EMAIL: str = Field(default="info@regulatethis.com")
    SITE_DESCRIPTION: str = Field(
        default=(
            "Sharp, actionable insights on practice management, wealth management "
            "technology, and regulatory compliance."
        )
    )
    SITE_LANGUAGE: str = Field(default="en-us")

    # headless CMS (Strapi v5)
    CMS_URL: str = Field(default="http://localhost:1337")
    STRAPI_API_TOKEN: str | None = None
    CMS_TIMEOUT: float = Field(default=10.0)
    CMS_RETRIES: int = Field(default=3)
    CMS_RETRY_WAIT: float = Field(default=1.0)

    # content snapshot
    CONTENT_SOURCE: str = Field(default="cms")  # "cms" | "file"
    CONTENT_FILE: str = Field(default="data/sample_content.yaml")
    CONTENT_REFRESH_SECONDS: float = Field(default=60.0)

    # newsletter
    NEWSLETTER_COLLECTION: str = Field(default="newsletter-subscribers")
    DEFAULT_TENANT_DOMAIN: str = Field(default="regulatethis.com")

    # HTTP caching
    FEED_CACHE_CONTROL: str = Field(default="public, s-maxage=3600, stale-while-revalidate=86400")
    ROBOTS_CACHE_CONTROL: str = Field(default="public, s-maxage=86400, stale-while-revalidate")

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME

    @property
    def base_url(self) -> str:
        return self.SITE_URL.rstrip("/")

    def full_url(self, path: str) -> str:
        clean = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{clean}"


settings = Settings()
