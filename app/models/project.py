"""Pydantic models for project management."""

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    task_names: list[str] = Field(default_factory=list)


class UpdateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class TaskDefinitionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
