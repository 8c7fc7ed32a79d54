from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class TieredRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Any shape is accepted; resolve_tier maps what it does not know to the default.
    tier: Any = None


class TextRequest(TieredRequest):
    text: str | None = None


class TranslateRequest(TextRequest):
    language: str | None = None


class RewriteRequest(TextRequest):
    tone: str | None = None


class CodeRequest(TieredRequest):
    code: str | None = None


class WriteRequest(TieredRequest):
    prompt: str | None = None
    type: str | None = None


class QuestionRequest(TieredRequest):
    question: str | None = None


class TopicRequest(TieredRequest):
    topic: str | None = None


class _CountMixin(BaseModel):
    count: int | None = None


class BrainstormRequest(TopicRequest, _CountMixin):
    pass


class GenerateTitleRequest(TextRequest, _CountMixin):
    pass


class CompareRequest(TieredRequest):
    item1: str | None = None
    item2: str | None = None


class AIResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    result: str
    endpoint: str


class HealthResponse(BaseModel):
    status: str = "online"
    network: str
    provider: str
    endpoints: int


class ErrorDetail(BaseModel):
    message: str
    type: str = "api_error"
    param: str | None = None
    code: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


def make_error_response(
    *,
    message: str,
    type: str = "api_error",
    param: str | None = None,
    code: str | None = None,
) -> ErrorResponse:
    return ErrorResponse(error=ErrorDetail(message=message, type=type, param=param, code=code))
