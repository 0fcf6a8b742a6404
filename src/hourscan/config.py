"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Candle source settings (ccxt exchange, pagination and retry)."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    exchange_id: str = "binance"
    timeframe: str = "1h"
    page_limit: int = 1000  # Binance klines max per call
    months: int = 1
    hours_per_month: int = 730  # ~30.42 days
    max_retries: int = 5
    retry_base_delay: float = 1.0
    fetch_batch_delay: float = 0.3  # seconds between paginated calls


class AnalysisSettings(BaseSettings):
    """Pattern mining parameters.

    ``timezone`` is the single IANA zone used both for day/hour bucketing
    and for RSI display timestamps.
    """

    model_config = SettingsConfigDict(env_prefix="PATTERN_")

    timezone: str = "UTC"
    min_occurrences: int = 3  # whole-history mining
    day_min_occurrences: int = 2  # single target-day mining
    top_k: int = 5
    recent_instances: int = 3  # presentation only


class RSISettings(BaseSettings):
    """RSI oscillator parameters."""

    model_config = SettingsConfigDict(env_prefix="RSI_")

    period: int = 14
    overbought: Decimal = Decimal("70")
    oversold: Decimal = Decimal("30")
    window: int = 24  # trailing points in a report


class ScanSettings(BaseSettings):
    """Multi-symbol scan parameters."""

    model_config = SettingsConfigDict(env_prefix="SCAN_")

    patterns_per_symbol: int = 1
    max_symbols: int = 10
    max_concurrency: int = 4


class ApiSettings(BaseSettings):
    """JSON API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "127.0.0.1"
    port: int = 8080
    enabled: bool = True  # False runs a single scan and prints it


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" for machine-readable logs
    exchange: ExchangeSettings = ExchangeSettings()
    analysis: AnalysisSettings = AnalysisSettings()
    rsi: RSISettings = RSISettings()
    scan: ScanSettings = ScanSettings()
    api: ApiSettings = ApiSettings()
