"""Transports: simulated API and HTTP relay"""
from .mock_api import MockApi
from .relay import RelayTransport, build_url

__all__ = ["MockApi", "RelayTransport", "build_url"]
