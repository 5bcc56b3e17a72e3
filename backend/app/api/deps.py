from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy import Engine

from app.core.gateway.composer import QueryComposer
from app.core.gateway.errors import Unauthenticated
from app.core.gateway.session import Identity
from app.core.generation import IdeaGenerator


@dataclass
class Services:
    """Collaborators constructed once in create_app() and shared by all requests."""

    composer: QueryComposer
    generator: IdeaGenerator
    engine: Engine | None = None


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_composer(services: ServicesDep) -> QueryComposer:
    return services.composer


def get_generator(services: ServicesDep) -> IdeaGenerator:
    return services.generator


def get_current_identity(request: Request) -> Identity:
    """
    Identity attached by GatewayMiddleware. A handler that needs one but finds
    none fails closed with 401 (e.g. a route missing from the protected list).
    """
    identity = getattr(request.state, "identity", None)
    if not isinstance(identity, Identity):
        raise Unauthenticated("Unauthorized")
    return identity


ComposerDep = Annotated[QueryComposer, Depends(get_composer)]
GeneratorDep = Annotated[IdeaGenerator, Depends(get_generator)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
