"""Application factory: logging, CORS, table creation and the domain routers."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi.middleware import cors

from components.core import init_db
from components.core.logging import setup_logging
from restapi.endpoints import (
    annual_budget,
    auth,
    category,
    health_check,
    monthly_budget,
    transaction,
    user,
    yearly_plan,
)

logger = logging.getLogger(__name__)

TITLE = "Budget Tracker API"
DESCRIPTION = "Personal budgeting: income allocation, budgets, transactions and yearly plans"
VERSION = "1.0.0"

ROUTERS = (
    health_check.router,
    auth.router,
    user.router,
    category.router,
    transaction.router,
    monthly_budget.router,
    annual_budget.router,
    yearly_plan.router,
)


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    await init_db.init_db()
    logger.info("%s %s started", TITLE, VERSION)
    yield
    await init_db.db_manager.engine.dispose()


def create_app() -> fastapi.FastAPI:
    setup_logging()

    app = fastapi.FastAPI(title=TITLE, description=DESCRIPTION, version=VERSION, lifespan=lifespan)
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in ROUTERS:
        app.include_router(router)
    return app
