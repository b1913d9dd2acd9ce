"""HTTP services: the Security Agent analyzer and the gateway."""

from .analyzer_app import create_analyzer_app
from .gateway_app import create_gateway_app

__all__ = [
    "create_analyzer_app",
    "create_gateway_app",
]
