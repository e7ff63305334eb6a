"""
ISMP Transaction Indexer

Resolves the origin of ISMP handler transactions observed on EVM and
Substrate hosts to canonical state machine ids, and fans each classified
transaction out to the relayer accounting and bridge aggregation services.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .pipeline import (
    ChainContext,
    Resolution,
    ResolutionFailure,
    TransactionClassifier,
    extract_state_machine_id,
    resolve_descriptor,
    unmapped_identifiers,
)
from .models import (
    UNRESOLVED_STATE_MACHINE_ID,
    ClassifiedTransaction,
    ConsensusDescriptor,
    TransactionMethod,
    TransactionRecord,
)
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    IsmpIndexerError,
    PipelineError,
    ConfigurationError,
    DownstreamCallFailure,
    ServiceError,
)

__all__ = [
    # Version
    '__version__',
    # Resolution & classification
    'ChainContext',
    'Resolution',
    'ResolutionFailure',
    'TransactionClassifier',
    'extract_state_machine_id',
    'resolve_descriptor',
    'unmapped_identifiers',
    # Models
    'UNRESOLVED_STATE_MACHINE_ID',
    'ClassifiedTransaction',
    'ConsensusDescriptor',
    'TransactionMethod',
    'TransactionRecord',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'IsmpIndexerError',
    'PipelineError',
    'ConfigurationError',
    'DownstreamCallFailure',
    'ServiceError',
]
