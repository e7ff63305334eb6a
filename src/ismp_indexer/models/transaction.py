"""
Transaction models delivered by the indexing framework.

A TransactionRecord is one call to the ISMP handler contract/module that the
framework matched on a known method signature. It is immutable once read and
owned by the indexer only for the duration of a single dispatch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Marker sent downstream when a transaction's origin could not be resolved.
UNRESOLVED_STATE_MACHINE_ID = 'UNRESOLVED'


class TransactionMethod(str, Enum):
    """Handler entry points whose transactions are indexed."""

    POST_REQUEST = 'post-request'
    POST_RESPONSE = 'post-response'


class TransactionRecord(BaseModel):
    """A handler transaction as delivered by the indexing framework."""

    block_number: int = Field(..., ge=0, alias='blockNumber', description='Block the transaction was included in')
    transaction_hash: str = Field(
        ..., min_length=1, alias='transactionHash', description='Transaction (or extrinsic) hash'
    )
    raw_chain_descriptor: str | dict[str, Any] | None = Field(
        default=None,
        alias='rawChainDescriptor',
        description='Serialized StateMachineId embedded by Substrate hosts (absent for EVM origins)',
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description='Decoded call arguments',
    )

    model_config = {
        'frozen': True,
        'populate_by_name': True,
        'json_schema_extra': {
            'examples': [
                {
                    'blockNumber': 5432100,
                    'transactionHash': '0x9f2c1e7b5d4a3c2b1a0f9e8d7c6b5a4f3e2d1c0b9a8f7e6d5c4b3a2f1e0d9c8b',
                    'rawChainDescriptor': '{"stateId":{"Polkadot":"2000"},"consensusStateId":"PARA"}',
                    'payload': {'requests': []},
                }
            ]
        },
    }


@dataclass(frozen=True)
class ClassifiedTransaction:
    """A transaction paired with its canonical state machine id (if resolved)."""

    record: TransactionRecord
    state_machine_id: str | None

    @property
    def resolved(self) -> bool:
        return self.state_machine_id is not None

    @property
    def dispatch_state_machine_id(self) -> str:
        """Id handed to downstream services; unresolved origins carry a marker."""
        return self.state_machine_id or UNRESOLVED_STATE_MACHINE_ID
