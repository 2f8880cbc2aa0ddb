import logging
import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .api.routes import weather

# httpx logs full request URLs at INFO, and those carry the appid.
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging() -> None:
    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()

app = FastAPI(
    title="Weather App",
    version="1.0.0",
    description="Current weather and 5-day daily outlook backed by OpenWeatherMap.",
)


@app.get("/health", tags=["health"])
def health_check():
    """
    Basic health check endpoint used for monitoring and deployment.
    """
    return JSONResponse(content={"status": "ok"})


# ---- API Routers ----

app.include_router(
    weather.router,
    prefix="/api/weather",
    tags=["weather"],
)
