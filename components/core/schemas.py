"""Response shapes shared across routers."""

from typing import Literal

from pydantic import BaseModel


class HealthCheck(BaseModel):
    service_name: str
    status: Literal["healthy", "degraded"]
    database: bool = True


class Message(BaseModel):
    """Plain acknowledgement, e.g. after a delete."""
    message: str
