"""
Data models for the ISMP transaction indexer.
"""

from .state_machine import (
    ChainKind,
    ConsensusDescriptor,
    ConsensusFamily,
    ETHEREUM_LAYER_CHAIN_IDS,
    EthereumLayer,
    SubstrateStateMachineId,
)
from .transaction import (
    UNRESOLVED_STATE_MACHINE_ID,
    ClassifiedTransaction,
    TransactionMethod,
    TransactionRecord,
)

__all__ = [
    'ChainKind',
    'ConsensusDescriptor',
    'ConsensusFamily',
    'ETHEREUM_LAYER_CHAIN_IDS',
    'EthereumLayer',
    'SubstrateStateMachineId',
    'UNRESOLVED_STATE_MACHINE_ID',
    'ClassifiedTransaction',
    'TransactionMethod',
    'TransactionRecord',
]
