"""
Redis models and configuration classes
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class RedisConnectionConfig:
    """Redis connection configuration"""

    host: str
    port: int = 6379
    password: Optional[str] = None
    db: int = 0
    tls: bool = False
    decode_responses: bool = True
    socket_connect_timeout: float = 5.0
    socket_timeout: float = 5.0
    retry_on_timeout: bool = True
    health_check_interval: int = 30

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, masking the password"""
        return {
            "host": self.host,
            "port": self.port,
            "password": "***" if self.password else None,
            "db": self.db,
            "tls": self.tls,
        }

    def to_redis_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for `redis.asyncio.Redis`"""
        kwargs = {
            "host": self.host,
            "port": self.port,
            "password": self.password or None,
            "db": self.db,
            "decode_responses": self.decode_responses,
            "socket_connect_timeout": self.socket_connect_timeout,
            "socket_timeout": self.socket_timeout,
            "retry_on_timeout": self.retry_on_timeout,
            "health_check_interval": self.health_check_interval,
        }
        if self.tls and self.host != "localhost":
            kwargs["ssl"] = True
            kwargs["ssl_cert_reqs"] = None
        return kwargs
