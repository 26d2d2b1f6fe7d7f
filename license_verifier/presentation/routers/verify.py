import json

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from license_verifier.application.verify_code import verify_code
from license_verifier.domain.entities import BindingPolicy, VerificationOutcome
from license_verifier.domain.errors import InvalidVerificationRequest
from license_verifier.domain.ports.unit_of_work import UnitOfWorkPort
from license_verifier.presentation.dependencies import get_binding_policy, get_uow
from license_verifier.presentation.responses import CORS_HEADERS, envelope
from license_verifier.schemas.requests import VerifyIn
from license_verifier.schemas.responses import VerifyOut

router = APIRouter(tags=["Verification"])

# Path served by the previous serverless deployment; kept for existing clients.
LEGACY_PATH = "/.netlify/functions/verify"

MESSAGES = {
    VerificationOutcome.ACTIVATED: "Verification successful. Access granted.",
    VerificationOutcome.REVERIFIED: (
        "Verification successful. Code already activated on this machine."
    ),
}

REQUEST_BODY_DOC = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": VerifyIn.model_json_schema(by_alias=True)
            }
        },
    }
}


async def read_payload(request: Request) -> VerifyIn:
    """
    Parse the body as JSON whatever the Content-Type: browsers post
    `text/plain` to skip the pre-flight.
    """
    raw = await request.body()
    try:
        data = json.loads(raw)
    except ValueError:
        raise InvalidVerificationRequest("Request body must be valid JSON.")
    try:
        return VerifyIn.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.post("/verify", response_model=VerifyOut, openapi_extra=REQUEST_BODY_DOC)
@router.post(LEGACY_PATH, response_model=VerifyOut, include_in_schema=False)
async def post_verify(
    request: Request,
    uow: UnitOfWorkPort = Depends(get_uow),
    policy: BindingPolicy = Depends(get_binding_policy),
):
    payload = await read_payload(request)
    outcome = await verify_code(
        uow=uow,
        code=payload.code,
        machine_id=payload.machine_id,
        policy=policy,
    )
    return envelope(status.HTTP_200_OK, True, MESSAGES[outcome])


@router.options("/verify", include_in_schema=False)
@router.options(LEGACY_PATH, include_in_schema=False)
async def options_verify() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)
