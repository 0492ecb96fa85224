# shopapi/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from shopapi.config import settings
from shopapi.database import init_db
from shopapi.utils.error_handlers import register_error_handlers
from shopapi.utils.logging_config import configure_logging

# Routers
from shopapi.routes.auth import router as auth_router
from shopapi.routes.products import router as products_router
from shopapi.routes.orders import router as orders_router
from shopapi.routes.logs import router as logs_router


def create_app(create_tables: bool = True) -> FastAPI:
    logger = configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Development convenience; deployments run the Alembic migrations instead
        if create_tables:
            init_db()
        logger.info("Shop API ready (environment=%s)", settings.ENVIRONMENT)
        yield

    app = FastAPI(title="Shop API", version="1.0.0", lifespan=lifespan)

    # CORS: local frontend plus the deployed one, when configured
    origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(logs_router)

    @app.get("/ping", response_class=PlainTextResponse)
    def ping():
        return "pong"

    return app


app = create_app(create_tables=settings.ENVIRONMENT == "dev")
