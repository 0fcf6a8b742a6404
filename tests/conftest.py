"""Shared test fixtures for hourscan."""

import pytest

from hourscan.config import AnalysisSettings, AppSettings, ExchangeSettings, RSISettings, ScanSettings


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (UTC bucketing, no fetch delays)."""
    return AppSettings(
        log_level="DEBUG",
        exchange=ExchangeSettings(
            retry_base_delay=0.0,
            fetch_batch_delay=0.0,
        ),
        analysis=AnalysisSettings(timezone="UTC"),
        rsi=RSISettings(),
        scan=ScanSettings(max_concurrency=2),
    )
