"""Liveness and readiness payloads."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """GET /health: the process is up; names the running service."""

    status: Literal["ok"] = "ok"
    service: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """GET /health/ready: the database answered."""

    status: Literal["ok"] = "ok"
    database: Literal["ok"] = "ok"


class ReadinessErrorResponse(BaseModel):
    """503 body from GET /health/ready."""

    status: Literal["not_ready"] = "not_ready"
    message: str
