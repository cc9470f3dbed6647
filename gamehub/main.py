from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import logging

from gamehub.api.portal import router as portal_router
from gamehub.api.routes import router
from gamehub.api.users import router as users_router
from gamehub.infra.redis_client import create_redis
from gamehub.portal_context import init_portal
from gamehub.session_loop import session_loop
from gamehub.settings import get_settings

app = FastAPI(title="gamehub", version="0.1.0")
app.include_router(router)
app.include_router(users_router)
app.include_router(portal_router)
# Configure logging
logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


@app.on_event("startup")
async def _startup() -> None:
    # Tests inject a fakeredis-backed context before startup; init is then a no-op.
    ctx = init_portal(r=create_redis())
    logger.info("gamehub started theme=%s auto_tick=%s", ctx.theme, get_settings().auto_tick)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await session_loop.stop_all()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "gamehub", "version": "0.1.0"}
