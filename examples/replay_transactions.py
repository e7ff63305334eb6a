#!/usr/bin/env python3
"""
Replay recorded handler transactions through classification and dispatch.

This script:
1. Loads TransactionRecords from a JSON file (a list of framework payloads)
2. Classifies each against the configured chain
3. Dispatches each to the relayer and hyperbridge services (unless --dry-run)
4. Prints a per-transaction summary and the unmapped-identifier counts

Prerequisites:
    - Set environment variables:
        INDEXER_CHAIN_KIND=substrate        # or evm with EVM_CHAIN_ID
        RELAYER_SERVICE_URL=https://...
        HYPERBRIDGE_SERVICE_URL=https://...
        WORKER_API_KEY=...

Usage:
    python examples/replay_transactions.py transactions.json

    # Classify only, no downstream calls
    python examples/replay_transactions.py transactions.json --dry-run
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from dotenv import load_dotenv

# Load environment variables
env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from dispatcher.dispatcher import TransactionDispatcher
from ismp_indexer.api.config import get_settings
from ismp_indexer.clients import HyperbridgeServiceClient, RelayerServiceClient
from ismp_indexer.errors import DownstreamCallFailure
from ismp_indexer.handlers import TransactionHandler
from ismp_indexer.models import TransactionMethod, TransactionRecord
from ismp_indexer.pipeline import ChainContext, TransactionClassifier, unmapped_identifiers


async def replay(path: Path, method: TransactionMethod, dry_run: bool) -> int:
    """Replay every record in ``path``; returns the number of failed dispatches."""
    records = [TransactionRecord.model_validate(item) for item in json.loads(path.read_text())]
    settings = get_settings()
    classifier = TransactionClassifier(
        ChainContext.from_values(settings.INDEXER_CHAIN_KIND, settings.EVM_CHAIN_ID)
    )

    if dry_run:
        for record in records:
            classified = classifier.classify(record)
            print(f"{record.transaction_hash}  ->  {classified.dispatch_state_machine_id}")
        print(f"\nUnmapped: {unmapped_identifiers.snapshot()}")
        return 0

    client_options = {
        'api_key': settings.SERVICE_API_KEY or None,
        'timeout_seconds': settings.HTTP_TIMEOUT_SECONDS,
        'max_retries': settings.MAX_RETRIES,
    }
    failures = 0
    async with RelayerServiceClient(settings.RELAYER_SERVICE_URL, **client_options) as relayer, \
            HyperbridgeServiceClient(settings.HYPERBRIDGE_SERVICE_URL, **client_options) as hyperbridge:
        handler = TransactionHandler(classifier, TransactionDispatcher(relayer, hyperbridge))
        for record in records:
            try:
                result = await handler.handle(record, method)
                print(f"OK    {record.transaction_hash}  ->  {result.state_machine_id}")
            except DownstreamCallFailure as e:
                failures += 1
                print(f"FAIL  {record.transaction_hash}  {e.message}")

    print(f"\n{len(records) - failures}/{len(records)} dispatched")
    print(f"Unmapped: {unmapped_identifiers.snapshot()}")
    return failures


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Replay recorded ISMP handler transactions'
    )
    parser.add_argument('path', type=Path, help='JSON file with a list of transaction records')
    parser.add_argument(
        '--method', '-m',
        choices=[m.value for m in TransactionMethod],
        default=TransactionMethod.POST_REQUEST.value,
        help='Handler entry point the transactions called'
    )
    parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        help='Classify without dispatching'
    )

    args = parser.parse_args()

    failures = asyncio.run(replay(args.path, TransactionMethod(args.method), args.dry_run))
    sys.exit(1 if failures else 0)


if __name__ == '__main__':
    main()
