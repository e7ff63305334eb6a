"""
Client wrappers for the downstream bookkeeping services.
"""

from .hyperbridge_client import HyperbridgeServiceClient
from .relayer_client import RelayerServiceClient
from .service_client import TransactionServiceClient

__all__ = [
    'HyperbridgeServiceClient',
    'RelayerServiceClient',
    'TransactionServiceClient',
]
