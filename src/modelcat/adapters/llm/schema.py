"""Pydantic models describing chat-completion payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChatBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ChatMessage(ChatBaseModel):
    role: str = "assistant"
    content: str | None = None


class ChatChoice(ChatBaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class OpenAIChatResponse(ChatBaseModel):
    choices: list[ChatChoice] = Field(default_factory=list[ChatChoice])

    @property
    def text(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].message.content


class OpenAIErrorDetail(ChatBaseModel):
    message: str
    type: str | None = None


class OpenAIErrorResponse(ChatBaseModel):
    error: OpenAIErrorDetail


class OllamaChatResponse(ChatBaseModel):
    model: str | None = None
    message: ChatMessage
    done: bool = True

    @property
    def text(self) -> str | None:
        return self.message.content
