"""
Payment Routes — eSewa payment initiation.
Mounted at the API path and at the serverless function path so the
frontend can call either; both share PaymentInitiationService.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from mamata.schemas.schemas import ErrorResponse, InitiationResponse
from mamata.services.initiation_service import PaymentInitiationService, get_initiation_service

router = APIRouter(tags=["Payment"])

# Every verb reaches the handler so the 405 body matches the serverless adapter
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

RESPONSES = {
    200: {"model": InitiationResponse},
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.api_route("/api/initiate-payment", methods=ALL_METHODS, responses=RESPONSES)
@router.api_route("/.netlify/functions/initiate-payment", methods=ALL_METHODS, include_in_schema=False)
async def initiate_payment(
    request: Request,
    service: PaymentInitiationService = Depends(get_initiation_service),
):
    """Initiate an eSewa payment and return the signed gateway form."""
    body = await request.body()
    result = await run_in_threadpool(
        service.handle,
        request.method,
        body,
        request.headers.get("idempotency-key"),
    )
    return JSONResponse(status_code=result.status_code, content=result.body)
