import traceback

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AppError
from app.core.logging import logger


def create_application() -> FastAPI:
    """Build the API app: CORS for the admin portal and student app, v1 routes, error envelope."""
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.DEBUG,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router, prefix=settings.API_V1_STR)
    register_exception_handlers(application)

    return application


def _error_body(error: str, message: str, **extra) -> dict:
    return {"success": False, "error": error, "message": message, **extra}


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API as {"success": false, "error", "message"}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error, exc.message),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        message = "; ".join(f"{d['field']}: {d['message']}" for d in details)
        logger.debug(f"{request.method} {request.url.path} -> 422: {message}")
        return JSONResponse(
            status_code=422,
            content=_error_body("Validation error", message, details=details),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}: {exc}")

        if settings.DEBUG:
            logger.error(
                f"   Path Params: {request.path_params}\n"
                f"   Query Params: {dict(request.query_params)}\n"
                f"   Traceback:\n{traceback.format_exc()}"
            )

        return JSONResponse(
            status_code=500,
            content=_error_body(
                "Internal server error",
                str(exc) if settings.DEBUG else "An unexpected error occurred",
            ),
        )


app = create_application()


@app.on_event("startup")
async def startup_event():
    """Optionally create missing tables, then log where the docs live."""
    if settings.AUTO_CREATE_TABLES:
        import app.models  # noqa: F401
        from app.core.database import engine, Base

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables checked")

    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"Documentation: {settings.API_V1_STR}/openapi.json and /docs")
    if settings.DEBUG:
        logger.warning("DEBUG mode is ON - error responses include exception text")


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME} API",
        "version": settings.VERSION,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a round trip to the database."""
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "database": "ok"}
