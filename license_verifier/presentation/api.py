from fastapi import APIRouter

from license_verifier.presentation.routers.verify import router as verify_router
from license_verifier.presentation.routes.health import router as health_router

api = APIRouter()

# Add all routers here
routers = (verify_router, health_router)
for router in routers:
    api.include_router(router)
