"""
State machine identifier models.

A Substrate host reports the origin of a message as a serialized
``StateMachineId``:

    {"stateId": {"Polkadot": "2000"}, "consensusStateId": "PARA"}

The single key under ``stateId`` names the consensus family and its value
discriminates the chain within that family. These models parse that payload;
mapping it onto the canonical id namespace lives in ``pipeline.resolver``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ConsensusFamily(str, Enum):
    """Top-level kind of chain or finality system."""

    ETHEREUM = 'ETHEREUM'
    BSC = 'BSC'
    POLYGON = 'POLYGON'
    POLKADOT = 'POLKADOT'
    KUSAMA = 'KUSAMA'
    BEEFY = 'BEEFY'
    GRANDPA = 'GRANDPA'


class EthereumLayer(str, Enum):
    """Ethereum execution layer and the rollups settled on it."""

    EXECUTION_LAYER = 'EXECUTIONLAYER'
    OPTIMISM = 'OPTIMISM'
    ARBITRUM = 'ARBITRUM'
    BASE = 'BASE'


# Testnet chain ids (Sepolia and its rollups) for each Ethereum layer.
ETHEREUM_LAYER_CHAIN_IDS: dict[EthereumLayer, int] = {
    EthereumLayer.EXECUTION_LAYER: 11155111,
    EthereumLayer.OPTIMISM: 11155420,
    EthereumLayer.ARBITRUM: 421614,
    EthereumLayer.BASE: 84532,
}


class ChainKind(str, Enum):
    """Kind of chain an indexer instance is attached to."""

    EVM = 'evm'
    SUBSTRATE = 'substrate'


class SubstrateStateMachineId(BaseModel):
    """Serialized state machine id as emitted in Substrate event data."""

    state_id: dict[str, Any] = Field(
        ...,
        alias='stateId',
        description='Single-key object: consensus family -> chain discriminator',
    )
    consensus_state_id: Any = Field(
        default=None,
        alias='consensusStateId',
        description='Consensus client the state machine is verified by (unused for resolution)',
    )

    model_config = {'populate_by_name': True}

    @field_validator('state_id')
    @classmethod
    def _exactly_one_variant(cls, value: dict[str, Any]) -> dict[str, Any]:
        if len(value) != 1:
            raise ValueError(f'stateId must hold exactly one variant, got {len(value)}')
        (discriminator,) = value.values()
        if discriminator is not None and not isinstance(discriminator, (str, int)):
            raise ValueError(
                f'stateId variant value must be a string, integer or null, '
                f'got {type(discriminator).__name__}'
            )
        return value


@dataclass(frozen=True)
class ConsensusDescriptor:
    """
    One consensus family plus its sub-chain discriminator.

    ``family`` is upper-cased; ``value`` keeps its original casing since
    para ids and consensus ids are appended verbatim.
    """

    family: str
    value: str

    @property
    def consensus_family(self) -> ConsensusFamily | None:
        """The known family, or None when the family is not mapped."""
        try:
            return ConsensusFamily(self.family)
        except ValueError:
            return None

    @classmethod
    def from_state_machine_id(cls, state_machine_id: SubstrateStateMachineId) -> 'ConsensusDescriptor':
        """Build from a validated payload (null discriminator becomes '')."""
        ((family, value),) = state_machine_id.state_id.items()
        if value is None:
            text = ''
        elif isinstance(value, bool):
            # JSON spelling, as the event data carries it
            text = 'true' if value else 'false'
        else:
            text = str(value)
        return cls(family=family.upper(), value=text)
