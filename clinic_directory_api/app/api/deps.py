"""
Dependencies shared by the endpoint modules.

The service registry is built once in the application lifespan and
kept on ``app.state``; handlers receive it through :func:`get_services`
so tests can run against a registry bound to a throwaway database.
"""

from fastapi import Request

from ..services import ServiceRegistry


def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services
