"""Schemas for service status endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str = "OK"
    timestamp: datetime
    database: str
    environment: str
    version: str


class PingResponse(BaseModel):
    message: str
    timestamp: datetime


class ServiceInfo(BaseModel):
    name: str
    version: str
    endpoints: dict[str, str]
