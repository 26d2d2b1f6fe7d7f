from typing import Mapping

from fastapi.responses import JSONResponse

from license_verifier.schemas.responses import VerifyOut

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def envelope(
    status_code: int,
    success: bool,
    message: str,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """JSON `{success, message}` response carrying the CORS headers."""
    return JSONResponse(
        status_code=status_code,
        content=VerifyOut(success=success, message=message).model_dump(),
        headers={**CORS_HEADERS, **(headers or {})},
    )
