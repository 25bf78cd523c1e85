from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging

from servicefrios.config import settings
from servicefrios.database import init_db
from servicefrios.errors import install_error_handlers
from servicefrios.routers import schedules_router, service_orders_router, runs_router
from servicefrios.scheduler import start_scheduler, stop_scheduler, configure_jobs
from servicefrios.version import __version__

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_db()
    start_scheduler()
    configure_jobs()
    yield
    # Shutdown
    stop_scheduler()


app = FastAPI(title="ServiceFrios", version=__version__, lifespan=lifespan)

install_error_handlers(app)

# Include routers
app.include_router(schedules_router, prefix="/schedules", tags=["schedules"])
app.include_router(service_orders_router, prefix="/service-orders", tags=["service-orders"])
app.include_router(runs_router, prefix="/runs", tags=["runs"])


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "version": __version__}
