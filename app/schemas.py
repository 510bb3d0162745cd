"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from models.records import Reading


class IngestStatus(str, Enum):
    success = "success"


class IngestRequest(BaseModel):
    """Body posted by the device bridge."""

    data: str = Field(
        ...,
        description="Eight comma-separated values: particle, pm25, hcho, co2, "
        "temperature, humidity, voc, sequence number.",
        examples=["1200,12.5,20,650,22.5,45,150,1024"],
    )


class IngestResponse(BaseModel):
    status: IngestStatus = IngestStatus.success
    data: Reading
    message: str


class HistoryResponse(BaseModel):
    count: int = Field(..., ge=0)
    data: List[Reading] = Field(default_factory=list)
