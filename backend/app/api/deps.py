from typing import Annotated

from fastapi import Depends, Request

from app.services.providers.base import FlightProvider


def get_provider(request: Request) -> FlightProvider:
    """Provider condiviso creato nel lifespan (uno per processo)."""
    return request.app.state.provider


ProviderDep = Annotated[FlightProvider, Depends(get_provider)]
