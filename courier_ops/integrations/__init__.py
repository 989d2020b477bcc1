"""
Integrations Package

Courier backend client and response adapters.
"""

from courier_ops.integrations.api_client import ApiError, CourierApiClient

__all__ = [
    'ApiError',
    'CourierApiClient',
]
