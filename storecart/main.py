# storecart/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storecart.api.routers import carts, health
from storecart.data.database import Base, init_db
from storecart.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    logger.info(f"Tables ready: {list(Base.metadata.tables.keys())}")
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Store Cart Service",
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
