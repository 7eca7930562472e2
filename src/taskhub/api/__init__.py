"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's
dependencies parameter, so no protected route can be added without
it. Handlers still take the Principal themselves to scope their work;
FastAPI resolves the dependency once per request. Health and auth
routers are open.
"""

from fastapi import APIRouter, Depends

from taskhub.api.auth import router as auth_router
from taskhub.api.health import router as health_router
from taskhub.api.projects import router as projects_router
from taskhub.api.tasks import router as tasks_router
from taskhub.auth.dependencies import get_current_principal

# All protected routers require a valid Bearer token
_auth = [Depends(get_current_principal)]

api_router = APIRouter(prefix="/api/v1")

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
