"""Path parameters shared by the budget endpoints."""

from typing import Annotated

from fastapi import Path

from components.core.config import settings

Year = Annotated[int, Path(ge=settings.MIN_YEAR, le=settings.MAX_YEAR, description="Budget year")]
Month = Annotated[int, Path(ge=1, le=12, description="Budget month (1-12)")]
