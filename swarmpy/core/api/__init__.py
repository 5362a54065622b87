"""Bee API module."""
from .events import EventEmitter
from .config import APIConfig, TimeoutConfig, DEFAULT_GATEWAY
from .async_client import AsyncAPIClient

__all__ = [
    # Client
    'AsyncAPIClient',

    # Configuration
    'APIConfig',
    'TimeoutConfig',
    'DEFAULT_GATEWAY',

    # Events
    'EventEmitter',
]
