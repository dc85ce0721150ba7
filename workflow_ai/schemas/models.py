"""Pydantic schemas for the model catalogue endpoint."""

from typing import List

from pydantic import BaseModel, Field


class ModelInfo(BaseModel):
    """A model the generator can be asked to use."""

    name: str = Field(..., description="Registry key")
    display_name: str = Field(..., description="Human readable name")


class ModelsResponse(BaseModel):
    """Schema for available models list."""

    models: List[ModelInfo] = Field(..., description="Available models")
    default: str = Field(..., description="Model used when the request names none")
