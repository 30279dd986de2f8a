from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "mobile.de feed connector"
    environment: str = "dev"
    debug: bool = False
    log_level: str = "INFO"

    request_timeout: float = 15.0
    user_agent: str = "mobilede-feed/0.1"

    detail_url_template: str = "https://services.mobile.de/search-api/ad/{mobile_ad_id}"
    detail_max_workers: int = 1
    equipment_policy: Literal["expand", "collapse"] = "expand"
    page_limit: int = 1000
    output_charset: str = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
