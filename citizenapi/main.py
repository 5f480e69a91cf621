import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from citizenapi import containers
from citizenapi.config import settings
from citizenapi.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from citizenapi.core.exceptions import BaseAPIException
from citizenapi.logging_config import setup_logging
from citizenapi.routers import (
    health_router,
    notification_router,
    point_router,
    reward_router,
    user_router,
)

load_dotenv("citizenapi/.env")
setup_logging(settings.LOG_LEVEL, service_name=settings.APP_NAME)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url}")
        response = await call_next(request)
        logger.info(f"Response: {response.status_code}")
        return response

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router, prefix=settings.API_V1_STR)
    app.include_router(point_router.router, prefix=settings.API_V1_STR)
    app.include_router(notification_router.router, prefix=settings.API_V1_STR)
    app.include_router(user_router.router, prefix=settings.API_V1_STR)
    app.include_router(reward_router.router, prefix=settings.API_V1_STR)

    return app


app = create_app()

handler = Mangum(app)
