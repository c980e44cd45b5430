"""Stylization API router."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.core.errors import StylizeError
from app.models.style import StyleId
from app.models.stylize import (
    CancelResponse,
    ErrorResponse,
    StylesResponse,
    StylizeRequest,
    StylizeResponse,
)
from app.services.stylize import StylizeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stylize", tags=["stylize"])


def get_stylize_service(request: Request) -> StylizeService:
    """FastAPI dependency: retrieve StylizeService from app.state.

    Returns HTTP 503 if the service was not initialized at startup.
    """
    svc: StylizeService | None = getattr(request.app.state, "stylize_service", None)
    if svc is None:
        raise HTTPException(
            status_code=503,
            detail="Stylization service not initialized.",
        )
    return svc


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(
    "",
    response_model=StylizeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def stylize(
    body: StylizeRequest,
    service: StylizeService = Depends(get_stylize_service),
) -> StylizeResponse | JSONResponse:
    """Transform a sketch into the requested art style.

    Returns:
        200 with the styled image, composed prompt, parameters and analysis.
        400 for missing image/style, unknown style or malformed image data.
        500 when generation fails.
    """
    try:
        return await service.stylize(body)
    except StylizeError as exc:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "stylize rejected: %s",
            exc.message,
            extra={"style": body.style, "error_type": type(exc).__name__},
        )
        return error_response(exc.status_code, exc.message)
    except Exception as exc:
        logger.error(
            "stylize failed",
            exc_info=True,
            extra={"style": body.style, "error_type": type(exc).__name__},
        )
        return error_response(500, str(exc) or "Unknown error")


@router.post("/cancel", response_model=CancelResponse)
async def cancel() -> CancelResponse:
    """Acknowledge a cancellation request.

    In-flight generations are not interrupted; the hosted model offers no
    cancellation hook.
    """
    logger.info("Received stylization cancellation request")
    return CancelResponse(message="Stylization cancellation requested")


@router.get("/styles", response_model=StylesResponse)
async def list_styles() -> StylesResponse:
    """List the supported style identifiers."""
    return StylesResponse(styles=[style.value for style in StyleId])
