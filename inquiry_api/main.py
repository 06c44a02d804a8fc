from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inquiry_api.core.config import build_mail_config, settings
from inquiry_api.core.error_handlers import register_error_handlers
from inquiry_api.core.exceptions import ConfigurationError
from inquiry_api.core.logger import get_logger
from inquiry_api.core.middleware import log_requests
from inquiry_api.routes.inquiry_router import inquiry_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.mail_config = build_mail_config(settings)
        logger.info(
            f"Mail delivery configured for {app.state.mail_config.recipient} "
            f"via {app.state.mail_config.host}:{app.state.mail_config.port}"
        )
    except ConfigurationError as e:
        # Keep serving; every inquiry answers with the generic configuration error
        app.state.mail_config = None
        app.state.mail_config_error = e
        logger.error(e.describe())

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown initiated")


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)
register_error_handlers(app)
app.include_router(inquiry_router)
