"""Exchange client layer -- public market data via ccxt."""

from hourscan.exchange.ccxt_client import CcxtExchangeClient
from hourscan.exchange.client import ExchangeClient

__all__ = ["CcxtExchangeClient", "ExchangeClient"]
