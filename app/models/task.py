"""Pydantic models for recorded tasks."""

from pydantic import BaseModel, Field


class CreateTaskRequest(BaseModel):
    project_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    human_time: int = Field(..., ge=0, description="Minutes without AI")
    ai_time: int = Field(..., ge=0, description="Minutes with AI")


class UpdateTaskRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    human_time: int | None = Field(default=None, ge=0)
    ai_time: int | None = Field(default=None, ge=0)
