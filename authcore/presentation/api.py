from fastapi import APIRouter, Depends

from authcore.presentation.dependencies import api_rate_limit
from authcore.presentation.routers.v1.admin import router as admin_router
from authcore.presentation.routers.v1.auth import router as auth_router
from authcore.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here; every v1 call goes through the generic API bucket
routers = (auth_router, admin_router)
for router in routers:
    api.include_router(router, prefix="/v1", dependencies=[Depends(api_rate_limit)])

api.include_router(health_router)
