from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConversionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[dict[str, str]]
    row_count: int = Field(..., alias="rowCount")
    processing_time: str = Field(..., alias="processingTime")


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    details: list[dict[str, Any]] | None = None
