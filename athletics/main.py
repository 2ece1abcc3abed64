from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .settings import settings
from .db import init_db, new_session
from .errors import AppError
from .log import configure_logging
from .auth import install_session_middleware
from . import services
from .routers import age_groups, athletes, auth, clubs, disciplines, performances, reference, seasons


def _field_path(loc) -> str:
    # drop the "body" / "query" prefix pydantic puts in front of the field name
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(parts)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        details = [{"path": _field_path(e.get("loc", ())), "message": e.get("msg", "")} for e in exc.errors()]
        return JSONResponse(status_code=400, content={"success": False, "error": "Validation failed", "details": details})

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on {} {}", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(title="Athletics Club Admin")
    install_session_middleware(app)
    install_error_handlers(app)

    for module in (auth, clubs, seasons, disciplines, age_groups, athletes, reference, performances):
        app.include_router(module.router, prefix="/api")

    app.mount(
        settings.ATHLETICS_UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.ATHLETICS_UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.on_event("startup")
    def _startup() -> None:
        configure_logging()
        init_db()
        s = new_session()
        try:
            services.ensure_reference_data(s)
        finally:
            s.close()
        logger.info("Athletics admin service started")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("athletics.main:app", host="0.0.0.0", port=8000)
