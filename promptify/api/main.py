from fastapi import APIRouter

from promptify.api.routes import admin, auth, health, marketplace, payments, playground, users

api_router = APIRouter()

for router in [
    health.router, auth.router, users.router, marketplace.router,
    playground.router, payments.router, admin.router,
]:
    api_router.include_router(router)
