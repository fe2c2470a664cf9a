"""HTTP log-shipping client for Loki/Promtail push endpoints."""

from promtail_client.client import PromtailClient
from promtail_client.config import ClientConfig
from promtail_client.errors import (
    ClientClosedError,
    ConfigurationError,
    DeliveryError,
    EncodingError,
    PromtailError,
)
from promtail_client.handler import PromtailHandler
from promtail_client.levels import LogLevel

__all__ = [
    "ClientClosedError",
    "ClientConfig",
    "ConfigurationError",
    "DeliveryError",
    "EncodingError",
    "LogLevel",
    "PromtailClient",
    "PromtailError",
    "PromtailHandler",
]
