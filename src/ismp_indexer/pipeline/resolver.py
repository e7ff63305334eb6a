"""
Canonical state machine id resolution for Substrate-reported origins.

Maps a serialized ``StateMachineId`` onto the bridge-wide identifier
namespace:

    ETHEREUM/ExecutionLayer -> EVM-11155111     BSC      -> BSC
    ETHEREUM/Optimism       -> EVM-11155420     POLYGON  -> POLY
    ETHEREUM/Arbitrum       -> EVM-421614       POLKADOT -> POLKADOT-<para id>
    ETHEREUM/Base           -> EVM-84532        KUSAMA   -> KUSAMA-<para id>
                                                BEEFY    -> BEEFY-<id>
                                                GRANDPA  -> GRANDPA-<id>

``resolve_descriptor`` is pure: it returns a ``Resolution`` that is either an
id or a failure kind, and never logs or raises. ``extract_state_machine_id``
is the indexing policy on top of it: failures are logged once, counted, and
turned into ``None`` so a single bad event never halts indexing.
"""

import json
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ..logging import get_logger
from ..models.state_machine import (
    ConsensusDescriptor,
    ConsensusFamily,
    ETHEREUM_LAYER_CHAIN_IDS,
    EthereumLayer,
    SubstrateStateMachineId,
)

logger = get_logger(__name__)

RawDescriptor = str | bytes | Mapping[str, Any] | None

# Families whose id is the family prefix plus the raw discriminator.
_PREFIXED_FAMILIES: dict[ConsensusFamily, str] = {
    ConsensusFamily.POLKADOT: 'POLKADOT-',
    ConsensusFamily.KUSAMA: 'KUSAMA-',
    ConsensusFamily.BEEFY: 'BEEFY-',
    ConsensusFamily.GRANDPA: 'GRANDPA-',
}

# Families that map to a fixed id regardless of discriminator.
_FIXED_FAMILIES: dict[ConsensusFamily, str] = {
    ConsensusFamily.BSC: 'BSC',
    ConsensusFamily.POLYGON: 'POLY',
}


class ResolutionFailure(str, Enum):
    """Why a descriptor did not produce a canonical id."""

    MALFORMED_DESCRIPTOR = 'malformed_descriptor'
    UNKNOWN_FAMILY = 'unknown_family'
    UNKNOWN_VARIANT = 'unknown_variant'


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one descriptor: an id, or a failure with detail."""

    state_machine_id: str | None = None
    failure: ResolutionFailure | None = None
    detail: str | None = None
    descriptor: ConsensusDescriptor | None = None

    @property
    def resolved(self) -> bool:
        return self.state_machine_id is not None

    @classmethod
    def ok(cls, state_machine_id: str, descriptor: ConsensusDescriptor) -> 'Resolution':
        return cls(state_machine_id=state_machine_id, descriptor=descriptor)

    @classmethod
    def failed(
        cls,
        failure: ResolutionFailure,
        detail: str,
        descriptor: ConsensusDescriptor | None = None,
    ) -> 'Resolution':
        return cls(failure=failure, detail=detail, descriptor=descriptor)


# =============================================================================
# Unmapped identifier counter
# =============================================================================


class UnmappedIdentifierCounter:
    """
    Counts resolution failures so unmapped chains surface in monitoring.

    Keys are ``<failure>:<family or variant>``; malformed payloads are
    counted under ``malformed_descriptor``.
    """

    def __init__(self):
        self._counts: Counter[str] = Counter()

    def record(self, resolution: Resolution) -> None:
        """Count a failed resolution (successful ones are ignored)."""
        if resolution.failure is None:
            return
        key = resolution.failure.value
        descriptor = resolution.descriptor
        if resolution.failure is ResolutionFailure.UNKNOWN_FAMILY and descriptor:
            key = f'{key}:{descriptor.family}'
        elif resolution.failure is ResolutionFailure.UNKNOWN_VARIANT and descriptor:
            key = f'{key}:{descriptor.family}/{descriptor.value}'
        self._counts[key] += 1

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def snapshot(self) -> dict[str, int]:
        """Copy of the current counts."""
        return dict(self._counts)

    def reset(self) -> None:
        self._counts.clear()


unmapped_identifiers = UnmappedIdentifierCounter()


# =============================================================================
# Parsing and mapping
# =============================================================================


def parse_descriptor(raw: RawDescriptor) -> ConsensusDescriptor | None:
    """
    Decode a serialized StateMachineId into a ConsensusDescriptor.

    Accepts the JSON text emitted by Substrate event data or an already
    decoded mapping. Returns None when the payload is not a JSON object or
    lacks a single-variant ``stateId``.
    """
    if raw is None:
        return None
    try:
        if isinstance(raw, (str, bytes)):
            decoded = json.loads(raw)
        else:
            decoded = raw
        if not isinstance(decoded, Mapping):
            return None
        state_machine_id = SubstrateStateMachineId.model_validate(decoded)
        return ConsensusDescriptor.from_state_machine_id(state_machine_id)
    # JSONDecodeError, UnicodeDecodeError and oversized integers are ValueErrors;
    # deeply nested arrays exhaust the decoder's recursion limit.
    except (ValueError, RecursionError, ValidationError):
        return None


def map_descriptor(descriptor: ConsensusDescriptor) -> Resolution:
    """Map a parsed descriptor onto its canonical state machine id."""
    family = descriptor.consensus_family

    if family is None:
        return Resolution.failed(
            ResolutionFailure.UNKNOWN_FAMILY,
            f'Unknown state machine family {descriptor.family!r}',
            descriptor,
        )

    if family is ConsensusFamily.ETHEREUM:
        try:
            layer = EthereumLayer(descriptor.value.upper())
        except ValueError:
            return Resolution.failed(
                ResolutionFailure.UNKNOWN_VARIANT,
                f'Unknown Ethereum layer {descriptor.value!r}',
                descriptor,
            )
        return Resolution.ok(f'EVM-{ETHEREUM_LAYER_CHAIN_IDS[layer]}', descriptor)

    if family in _FIXED_FAMILIES:
        return Resolution.ok(_FIXED_FAMILIES[family], descriptor)

    return Resolution.ok(_PREFIXED_FAMILIES[family] + descriptor.value, descriptor)


def resolve_descriptor(raw: RawDescriptor) -> Resolution:
    """Parse and map a serialized descriptor without logging or raising."""
    try:
        descriptor = parse_descriptor(raw)
        if descriptor is None:
            return Resolution.failed(
                ResolutionFailure.MALFORMED_DESCRIPTOR,
                f'StateId not present in state machine id: {_preview(raw)}',
            )
        return map_descriptor(descriptor)
    except Exception as e:
        return Resolution.failed(
            ResolutionFailure.MALFORMED_DESCRIPTOR,
            f'Unreadable state machine id ({type(e).__name__}): {_preview(raw)}',
        )


def extract_state_machine_id(raw: RawDescriptor) -> str | None:
    """
    Resolve a serialized descriptor to its canonical id, or None.

    Failures are logged as a single error entry and counted in
    ``unmapped_identifiers``; nothing is raised to the caller.
    """
    resolution = resolve_descriptor(raw)
    if resolution.resolved:
        return resolution.state_machine_id

    unmapped_identifiers.record(resolution)
    descriptor = resolution.descriptor
    logger.error(
        f'resolver.{resolution.failure.value}',
        detail=resolution.detail,
        family=descriptor.family if descriptor else None,
        variant=descriptor.value if descriptor else None,
    )
    return None


def _preview(raw: RawDescriptor, limit: int = 200) -> str:
    try:
        text = raw.decode(errors='replace') if isinstance(raw, bytes) else str(raw)
    except (ValueError, RecursionError):
        return f'<unprintable {type(raw).__name__}>'
    return text if len(text) <= limit else text[:limit] + '...'
