import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shopflow.core.errors import ShopflowError
from shopflow.server.api import inspections, jobs, quotes, system, work_orders
from shopflow.server.api.deps import http_status_for
from shopflow.server.db.session import init_db
from shopflow.server.settings.config import settings

log = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    log.info("Initializing database (%s)", settings.database_url)
    init_db()
    yield
    log.info("Shutting down")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# CORS for the shop-floor frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShopflowError)
async def shopflow_error_handler(request: Request, exc: ShopflowError):
    status = http_status_for(exc)
    if status >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


# Routers
app.include_router(system.router)        # /health, /__debug/routes (open)
app.include_router(jobs.router)          # /jobs/sort, /labor/..., requires API key
app.include_router(quotes.router)        # /quotes/from-inspection
app.include_router(work_orders.router)   # /work-orders/...
app.include_router(inspections.router)   # /inspections/...
