from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from sfa.api.errors import sqlalchemy_error_handler
from sfa.api.v1.router import api_router
from sfa.core.config import settings
from sfa.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME)

    # Allow frontend callers (field app, admin console)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return app


app = create_app()
