from fastapi import FastAPI

from bakery.app.api.v1.router import router as v1_router
from bakery.app.core.config import get_settings
from bakery.app.core.log_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)

app = FastAPI(title="Bakery inventory engine", version="0.1.0")
app.include_router(v1_router, prefix="/v1")
