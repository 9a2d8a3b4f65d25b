"""Pydantic models for the chat and assistant APIs."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ChatMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Message cannot be empty")
        return text


class QuickActionRequest(BaseModel):
    action: Literal["create_project", "add_task", "fill_form"]


class EstimateTaskRequest(BaseModel):
    task_description: str = Field(..., min_length=1, max_length=2000)
