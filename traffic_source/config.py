from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Attribution
    marker_value: str = "wego-traffic-source"
    storage_key_utm: str = "wego_utm"
    storage_key_referrer: str = "wego_referrer"

    # Inline configuration document
    config_script_selector: str = 'script[type="application/json"].wego-tracking-config'

    # Context classification
    mobile_viewport_breakpoint: int = 768

    # Transport
    beacon_timeout_seconds: float = 5.0

    # YouTube IFrame API
    youtube_api_url: str = "https://www.youtube.com/iframe_api"
    youtube_ready_warning_seconds: float = 30.0

    # Redis-backed session storage (optional)
    redis_url: str | None = None
    session_ttl_seconds: int = 1800

    model_config = SettingsConfigDict(
        env_prefix="TRAFFIC_SOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
