"""
Transaction classification: attach a canonical state machine id to each record.

The chain an indexer instance is attached to is static knowledge:
- EVM hosts: the origin is the indexed chain itself, ``EVM-<chain id>``.
  A missing chain id is a configuration error and is never degraded.
- Substrate hosts: the origin is embedded in the event data as a serialized
  StateMachineId and resolved by ``resolver.extract_state_machine_id``.
  An unresolvable origin is carried forward as None.
"""

from dataclasses import dataclass

from ..errors import ConfigurationError
from ..logging import get_logger
from ..models.state_machine import ChainKind
from ..models.transaction import ClassifiedTransaction, TransactionRecord
from .resolver import extract_state_machine_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChainContext:
    """Static description of the chain this indexer instance is attached to."""

    kind: ChainKind
    chain_id: int | None = None

    def __post_init__(self):
        if self.kind is ChainKind.EVM:
            self.evm_state_machine_id()

    def evm_state_machine_id(self) -> str:
        """Canonical id of the attached EVM chain."""
        if self.chain_id is None or self.chain_id <= 0:
            raise ConfigurationError(
                'EVM indexer requires a positive chain id',
                context={'chain_id': self.chain_id},
            )
        return f'EVM-{self.chain_id}'

    @classmethod
    def from_values(cls, kind: str | ChainKind, chain_id: int | str | None = None) -> 'ChainContext':
        """
        Build from loosely typed settings.

        Raises:
            ConfigurationError: If the kind is unknown or an EVM chain id is
                missing or not a positive integer
        """
        try:
            chain_kind = ChainKind(kind.lower() if isinstance(kind, str) else kind)
        except ValueError:
            raise ConfigurationError(
                f'Unknown indexer chain kind {kind!r}',
                context={'allowed': [k.value for k in ChainKind]},
            ) from None

        parsed_id: int | None = None
        if chain_id not in (None, ''):
            try:
                parsed_id = int(chain_id)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f'Chain id {chain_id!r} is not an integer',
                    context={'kind': chain_kind.value},
                ) from None

        return cls(kind=chain_kind, chain_id=parsed_id)


class TransactionClassifier:
    """
    Determines the canonical state machine id of inbound transactions.

    Classification never drops a record: an unresolved Substrate origin
    yields a ClassifiedTransaction with ``state_machine_id=None``.
    """

    def __init__(self, chain: ChainContext):
        """
        Initialize for the attached chain.

        Args:
            chain: Static chain context of this indexer instance
        """
        self.chain = chain

    def classify(self, record: TransactionRecord) -> ClassifiedTransaction:
        """
        Classify one transaction.

        Raises:
            ConfigurationError: If an EVM chain id cannot be produced
        """
        if self.chain.kind is ChainKind.EVM:
            state_machine_id: str | None = self.chain.evm_state_machine_id()
        else:
            state_machine_id = extract_state_machine_id(record.raw_chain_descriptor)
            if state_machine_id is None:
                logger.info(
                    'classifier.unresolved_origin',
                    transaction_hash=record.transaction_hash,
                    block_number=record.block_number,
                )

        return ClassifiedTransaction(record=record, state_machine_id=state_machine_id)
