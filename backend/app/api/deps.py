r"""backend\app\api\deps.py"""

from __future__ import annotations

from fastapi import Request

from ..services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Return the service container attached to the running application."""

    return request.app.state.services
