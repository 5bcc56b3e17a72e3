import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.deps import CurrentIdentity, GeneratorDep
from app.core.gateway.errors import ExternalFailure, InvalidRequest
from app.core.gateway.request_response import read_json_body, success_response
from app.core.generation import GenerationError
from app.schemas import GenerateRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


@router.post("/generate")
async def generate(
    request: Request, identity: CurrentIdentity, generator: GeneratorDep
) -> JSONResponse:
    """Validate an idea: title + description -> generated blueprint document."""
    body = await read_json_body(request)
    try:
        req = GenerateRequest.model_validate(body)
    except ValidationError:
        raise InvalidRequest("Title and description are required") from None
    try:
        result = await generator.generate(req.title, req.description)
    except GenerationError as e:
        logger.error("Generation failed for user %s: %s", identity.id, e)
        raise ExternalFailure(str(e) or "Failed to generate idea") from e
    return success_response(result)
