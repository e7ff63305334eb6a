"""POST /transactions/{method}: classify a handler transaction and dispatch it."""

import structlog
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dispatcher.dispatcher import TransactionDispatcher
from ismp_indexer.errors import ConfigurationError, DownstreamCallFailure
from ismp_indexer.handlers.transactions import TransactionHandler
from ismp_indexer.models.transaction import TransactionMethod, TransactionRecord
from ismp_indexer.pipeline.classifier import TransactionClassifier

from ..auth import verify_worker_token

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/transactions/{method}")
async def handle_transaction(
    method: TransactionMethod,
    record_data: dict[str, Any],
    request: Request,
    _auth: None = Depends(verify_worker_token),
):
    """
    Validate a TransactionRecord and dispatch it to both services.

    A 500 response tells the indexing framework to retry the record.
    """
    try:
        record = TransactionRecord.model_validate(record_data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    log = logger.bind(
        method=method.value,
        transaction_hash=record.transaction_hash,
        block_number=record.block_number,
    )
    log.info("transactions.received")

    handler = TransactionHandler(
        classifier=TransactionClassifier(request.app.state.chain),
        dispatcher=TransactionDispatcher(
            relayer_service=request.app.state.relayer,
            hyperbridge_service=request.app.state.hyperbridge,
        ),
    )

    try:
        result = await handler.handle(record, method)
    except DownstreamCallFailure as e:
        log.error("transactions.dispatch_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": e.message, "errors": e.context.get("errors", []), "succeeded": False},
        )
    except ConfigurationError as e:
        log.error("transactions.configuration_error", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "succeeded": False},
        )

    log.info(
        "transactions.complete",
        state_machine_id=result.state_machine_id,
        dispatch_time_ms=result.dispatch_time_ms,
    )
    return result.to_dict()
