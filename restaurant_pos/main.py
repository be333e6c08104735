# restaurant_pos/main.py
from fastapi import FastAPI
import uvicorn

from restaurant_pos.api import include_routers
from restaurant_pos.data.database import Base, engine
from restaurant_pos.utils.logging import get_logger

# import all models before create_all
from restaurant_pos.data import models  # noqa: F401

logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Restaurant POS",
        version="1.0.0",
    )
    include_routers(app)
    return app


init_db()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
