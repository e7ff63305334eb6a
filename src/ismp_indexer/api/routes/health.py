"""Health check endpoint."""

from fastapi import APIRouter, Request

from ismp_indexer.pipeline.resolver import unmapped_identifiers

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Report the attached chain and any descriptors that failed to resolve."""
    chain = request.app.state.chain
    return {
        "status": "ok",
        "chain_kind": chain.kind.value,
        "unmapped_identifiers": {
            "total": unmapped_identifiers.total,
            "counts": unmapped_identifiers.snapshot(),
        },
    }
