"""
Pipeline components for state machine id resolution and transaction classification.
"""

from .classifier import ChainContext, TransactionClassifier
from .resolver import (
    Resolution,
    ResolutionFailure,
    UnmappedIdentifierCounter,
    extract_state_machine_id,
    map_descriptor,
    parse_descriptor,
    resolve_descriptor,
    unmapped_identifiers,
)

__all__ = [
    # Classification
    'ChainContext',
    'TransactionClassifier',
    # Resolution
    'Resolution',
    'ResolutionFailure',
    'UnmappedIdentifierCounter',
    'extract_state_machine_id',
    'map_descriptor',
    'parse_descriptor',
    'resolve_descriptor',
    'unmapped_identifiers',
]
