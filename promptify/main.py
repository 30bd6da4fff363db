import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.routing import APIRoute
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlmodel import Session
from starlette.middleware.cors import CORSMiddleware

from promptify.api.main import api_router
from promptify.api.routes import health
from promptify.core.config import ai_settings, razorpay_settings, settings
from promptify.core.db import engine, init_db
from promptify.core.errors import register_exception_handlers
from promptify.core.logging_config import install_process_hooks, setup_logging

setup_logging()
install_process_hooks()
logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


@asynccontextmanager
async def lifespan(_: FastAPI):
    with Session(engine) as session:
        init_db(session)

    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started ({settings.ENVIRONMENT})")
    if not razorpay_settings.is_configured:
        logger.warning("Razorpay keys not configured, payment endpoints will be unavailable")
    if not any(
        (ai_settings.ANTHROPIC_API_KEY, ai_settings.OPENAI_API_KEY, ai_settings.PERPLEXITY_API_KEY)
    ):
        logger.warning("No AI provider keys configured, playground runs in mock mode")

    yield

    engine.dispose()
    logger.info("Shutdown complete")


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.all_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)
# load balancers probe the bare path
app.include_router(health.router)
