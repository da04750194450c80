"""Pydantic schemas for the generation API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerateVideoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    provider: str | None = None
    api_key: str | None = Field(default=None, alias="apiKey")


class GenerateVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: str = Field(alias="videoUrl")
    status: Literal["completed"] = "completed"


class ErrorResponse(BaseModel):
    error: str
