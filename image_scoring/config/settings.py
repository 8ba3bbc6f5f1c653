from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from image_scoring.constants import DEFAULT_DIFY_API_URL, DEFAULT_DIFY_USER


class DifySettings(BaseSettings):
    """Connection settings for the Dify workflow API"""

    model_config = SettingsConfigDict(env_prefix="DIFY_", env_file=".env", extra="ignore", populate_by_name=True)

    base_url: str = Field(default=DEFAULT_DIFY_API_URL, validation_alias="DIFY_API_URL")
    api_key: str = Field(default="", validation_alias="DIFY_API_KEY")
    user: str = Field(default=DEFAULT_DIFY_USER)
    timeout: float = Field(default=120.0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")

    def url_for(self, path: str) -> str:
        return f"{self.api_root}{path}"

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}


class APIConfig(BaseSettings):
    """HTTP surface limits"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    max_image_size_mb: int = Field(default=10, validation_alias="MAX_IMAGE_SIZE_MB")
    max_target_images: int = Field(default=20, validation_alias="MAX_TARGET_IMAGES")


class AppSettings(BaseSettings):
    """Application settings, read once at import time"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)

    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Sub-configurations
    dify: DifySettings = Field(default_factory=DifySettings)
    api: APIConfig = Field(default_factory=APIConfig)


# Global settings instance
settings = AppSettings()
