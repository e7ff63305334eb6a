"""Relayer accounting service client.

Tracks which relayer delivered each post request/response and the fees it
earned on the origin chain.
"""

from .service_client import TransactionServiceClient


class RelayerServiceClient(TransactionServiceClient):
    """Delivers handler transactions to the relayer accounting service."""

    service_name = 'relayer'
    transactions_path = '/relayers/transactions'
