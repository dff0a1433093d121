import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orderflow.api.v1.routes import router as v1_router
from orderflow.core.config import settings
from orderflow.wiring.dependencies import close_api_client

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "order_id", "target_id", "status", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting order lifecycle API",
        extra={"reason": f"ENV={settings.ENV} backend={'http' if settings.API_BASE_URL else 'in-memory'}"},
    )
    yield
    await close_api_client()
    logger.info("Order lifecycle API stopped")


app = FastAPI(title="Order Lifecycle", version="1.0.0", lifespan=lifespan)

app.include_router(v1_router, prefix="/api/v1", tags=["lifecycle"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
