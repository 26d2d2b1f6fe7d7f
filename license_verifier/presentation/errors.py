import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from license_verifier.domain.errors import (
    CodeAlreadyUsed,
    CodeBoundToAnotherMachine,
    CodeStoreError,
    CodeStoreMisconfigured,
    InvalidVerificationRequest,
    UnknownCode,
)
from license_verifier.presentation.responses import envelope

logger = logging.getLogger(__name__)

INVALID_OR_USED = "Invalid or already used verification code."


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        if "machineId" in error.get("loc", ()):
            return "Machine ID is required."
    return "Verification code is required."


async def handle_validation_error(request: Request, exc: RequestValidationError):
    return envelope(status.HTTP_400_BAD_REQUEST, False, _validation_message(exc))


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return envelope(exc.status_code, False, str(exc.detail), headers=exc.headers)


async def handle_invalid_request(request: Request, exc: InvalidVerificationRequest):
    return envelope(status.HTTP_400_BAD_REQUEST, False, exc.message)


async def handle_unknown_code(request: Request, exc: UnknownCode):
    if exc.single_use:
        return envelope(status.HTTP_404_NOT_FOUND, False, INVALID_OR_USED)
    return envelope(status.HTTP_404_NOT_FOUND, False, "Invalid verification code.")


async def handle_code_already_used(request: Request, exc: CodeAlreadyUsed):
    return envelope(status.HTTP_404_NOT_FOUND, False, INVALID_OR_USED)


async def handle_bound_elsewhere(request: Request, exc: CodeBoundToAnotherMachine):
    return envelope(
        status.HTTP_403_FORBIDDEN,
        False,
        "This code has already been activated on another machine.",
    )


async def handle_store_misconfigured(request: Request, exc: CodeStoreMisconfigured):
    logger.error("code store misconfigured: %s", exc)
    return envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, False, "Server configuration error."
    )


async def handle_store_error(request: Request, exc: CodeStoreError):
    logger.error("code store failure: %s", exc, exc_info=exc)
    return envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, False, "Database query failed."
    )


async def handle_unexpected(request: Request, exc: Exception):
    logger.error("unexpected server error", exc_info=exc)
    return envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, False, "An unexpected error occurred."
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(InvalidVerificationRequest, handle_invalid_request)
    app.add_exception_handler(UnknownCode, handle_unknown_code)
    app.add_exception_handler(CodeAlreadyUsed, handle_code_already_used)
    app.add_exception_handler(CodeBoundToAnotherMachine, handle_bound_elsewhere)
    app.add_exception_handler(CodeStoreMisconfigured, handle_store_misconfigured)
    app.add_exception_handler(CodeStoreError, handle_store_error)
    app.add_exception_handler(Exception, handle_unexpected)
