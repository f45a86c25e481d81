"""Liveness probe that also pings the database."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core import schemas
from components.core.init_db import get_db

logger = logging.getLogger(__name__)

SERVICE_NAME = "Budget Tracker API"

router = APIRouter(prefix="/health_check", tags=["services"])


@router.get("/", response_model=schemas.HealthCheck)
async def health_check(db: AsyncSession = Depends(get_db)) -> schemas.HealthCheck:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return schemas.HealthCheck(service_name=SERVICE_NAME, status="degraded", database=False)
    return schemas.HealthCheck(service_name=SERVICE_NAME, status="healthy")
