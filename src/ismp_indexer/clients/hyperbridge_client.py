"""Bridge aggregation service client.

Maintains bridge-wide totals (messages delivered, per-chain volume).
"""

from .service_client import TransactionServiceClient


class HyperbridgeServiceClient(TransactionServiceClient):
    """Delivers handler transactions to the bridge aggregation service."""

    service_name = 'hyperbridge'
    transactions_path = '/hyperbridge/transactions'
