"""
Generic data endpoint: POST /api/database {action, table, data}.

The caller's identity comes from GatewayMiddleware; every operation goes
through QueryComposer, which injects the ownership constraints. The store is
synchronous, so the composed call runs in a worker thread.
"""

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.api.deps import ComposerDep, CurrentIdentity
from app.core.gateway.composer import ActionDescriptor
from app.core.gateway.request_response import read_json_body, success_response

router = APIRouter(tags=["database"])


@router.post("/database")
async def database(
    request: Request, identity: CurrentIdentity, composer: ComposerDep
) -> JSONResponse:
    body = await read_json_body(request)
    action = ActionDescriptor.from_request(body)
    result = await asyncio.to_thread(composer.execute, identity, action)
    return success_response(result)
