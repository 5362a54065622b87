"""
API configuration module.

Provides configuration for the Bee API client and the upload engine.
"""
from dataclasses import dataclass, field
from typing import Dict, Any


DEFAULT_GATEWAY = 'http://127.0.0.1:1633'


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Applies to tag requests. Payload uploads run without a total timeout.
    """
    total: float = 30.0  # Total request timeout
    connect: float = 5.0  # Connection timeout
    sock_read: float = 30.0  # Socket read timeout

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read
        )

    def to_upload_timeout(self):
        """Timeout for payload uploads: connect bound only."""
        import aiohttp
        return aiohttp.ClientTimeout(total=None, connect=self.connect)


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes all configuration options for the Bee API client.
    """
    # Local Bee node
    gateway: str = DEFAULT_GATEWAY

    # User agent
    user_agent: str = 'swarmpy/1.0.0'

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    # Additional headers
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Connection pool settings
    limit: int = 10

    # GET /tags page size
    list_page_size: int = 1000

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def for_gateway(cls, gateway: str, **kwargs) -> 'APIConfig':
        """Create configuration pointing at another Bee API address."""
        return cls(gateway=gateway, **kwargs)

    @property
    def base_url(self) -> str:
        """Gateway without trailing slash."""
        return self.gateway.rstrip('/')

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }

