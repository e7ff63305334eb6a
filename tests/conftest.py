"""
Pytest configuration and shared fixtures.

Key fixtures:
- evm_record: Handler transaction observed on an EVM host
- substrate_record: Handler transaction from a Substrate host with an
  embedded Polkadot origin
- reset_unmapped_identifiers: Clears the process-wide unmapped counter

No network access is required; downstream services are always mocked.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

# Load environment variables
from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from ismp_indexer.models.transaction import TransactionRecord
from ismp_indexer.pipeline.resolver import unmapped_identifiers


EVM_TX_HASH = '0x6a1f0c5e2b9d8c7a6f5e4d3c2b1a09f8e7d6c5b4a3928170f6e5d4c3b2a19081'
SUBSTRATE_TX_HASH = '0x1b7e2c9d4f3a5e6b8c0d1e2f3a4b5c6d7e8f9a0b1c2d3e4f5a6b7c8d9e0f1a2b'


@pytest.fixture(autouse=True)
def reset_unmapped_identifiers():
    """Each test starts with an empty unmapped-identifier counter."""
    unmapped_identifiers.reset()
    yield
    unmapped_identifiers.reset()


@pytest.fixture
def evm_record() -> TransactionRecord:
    """handlePostResponses transaction observed on Sepolia."""
    return TransactionRecord(
        block_number=5_432_100,
        transaction_hash=EVM_TX_HASH,
        payload={'responses': [{'nonce': 7}]},
    )


@pytest.fixture
def substrate_record() -> TransactionRecord:
    """Extrinsic on a Substrate host whose origin is Polkadot para 2000."""
    return TransactionRecord(
        block_number=1_204_311,
        transaction_hash=SUBSTRATE_TX_HASH,
        raw_chain_descriptor='{"stateId":{"Polkadot":"2000"},"consensusStateId":"PARA"}',
        payload={'requests': [{'nonce': 3}]},
    )
