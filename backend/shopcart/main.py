import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopcart.api.health import router as health_router
from shopcart.api.routes_cart import router as cart_router
from shopcart.api.routes_catalogue import router as catalogue_router
from shopcart.api.routes_order import router as order_router
from shopcart.api.routes_users import router as users_router
from shopcart.config import settings
from shopcart.db import init_db
from shopcart.services.cart_service import run_purge_sweep

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("shopcart")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()

    # purge soft-deleted cart items; the first run happens immediately so
    # items that fell due while the process was down are reconciled
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_purge_sweep,
        "interval",
        seconds=settings.CART_PURGE_INTERVAL_SECONDS,
        id="purge_cart_items",
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    log.info("cart purge sweep every %ss", settings.CART_PURGE_INTERVAL_SECONDS)

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Shopcart - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(users_router, tags=["users"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])
