"""Server configuration model"""

from dataclasses import dataclass


@dataclass
class ServerConfig:
    """Effective settings after merging env, config file and hardcoded defaults"""
    api_key: str
    base_url: str
    server_name: str
    server_version: str
    host: str
    port: int
    poll_interval: float
    max_attempts: int
    request_timeout: float
    open_browser: bool
