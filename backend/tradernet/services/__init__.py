# Services module
from .polymarket import DataAPIClient
from .fetcher import PositionFetcher
from .network import NetworkService

__all__ = ["DataAPIClient", "PositionFetcher", "NetworkService"]
