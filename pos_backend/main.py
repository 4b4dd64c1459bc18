# pos_backend/main.py
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from pos_backend.config import Settings
from pos_backend.database import build_context

# Routers
from pos_backend.routes.auth import router as auth_router
from pos_backend.routes.users import router as users_router
from pos_backend.routes.products import router as products_router
from pos_backend.routes.customers import router as customers_router
from pos_backend.routes.sales import router as sales_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        load_dotenv()
        settings = Settings()
    configure_logging(settings.LOG_LEVEL)

    # Store and tables
    ctx = build_context(settings)
    ctx.init_db()

    app = FastAPI(title="POS Backend API", version="1.0.0")
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    # Router registration
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(customers_router)
    app.include_router(sales_router)

    @app.get("/")
    def read_root():
        return {"message": "POS Backend API is running"}

    return app


def run() -> None:
    import uvicorn

    uvicorn.run("pos_backend.main:create_app", factory=True, host="0.0.0.0", port=8000)
