from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Swing Points Service"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    upstox_base_url: str = "https://api.upstox.com/v3"
    upstox_access_token: str = ""
    use_mock_provider: bool = False
    request_timeout_seconds: int = 8

    range_retry_max_retries: int = 3
    range_retry_shrink_days: int = 10
    range_retry_backoff_seconds: float = 1.0

    # 15m and the other intraday timeframes are tuned separately
    chunk_days_15min: int = 30
    chunk_days_default: int = 30
    chunk_delay_seconds: float = 0.2

    swing_window: int = 5
    default_lookback_years: int = 1

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
