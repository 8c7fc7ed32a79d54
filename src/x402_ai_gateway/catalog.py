"""Paid AI endpoints: path, price, required body fields and prompt template."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .api_models import (
    BrainstormRequest,
    CodeRequest,
    CompareRequest,
    GenerateTitleRequest,
    QuestionRequest,
    RewriteRequest,
    TextRequest,
    TieredRequest,
    TopicRequest,
    TranslateRequest,
    WriteRequest,
)
from .errors import InvalidRequestError


@dataclass(frozen=True)
class AIEndpoint:
    name: str
    price: str
    description: str
    request_model: type[TieredRequest]
    required: tuple[str, ...]
    build_prompt: Callable[[Any], str]
    echo: Callable[[Any], dict[str, Any]] | None = None

    @property
    def path(self) -> str:
        return f"/api/{self.name}"

    def parse(self, body: dict[str, Any] | None) -> TieredRequest:
        try:
            req = self.request_model.model_validate(body or {})
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ())) or None
            raise InvalidRequestError(f"Invalid {field or 'body'}: {first.get('msg')}") from e
        if any(not getattr(req, f) for f in self.required):
            raise InvalidRequestError(f"Missing {' or '.join(self.required)}")
        return req

    def response_extras(self, req: BaseModel) -> dict[str, Any]:
        return self.echo(req) if self.echo else {}


def _translate_language(req: TranslateRequest) -> str:
    return req.language or "French"


def _rewrite_tone(req: RewriteRequest) -> str:
    return req.tone or "professional"


CATALOG: tuple[AIEndpoint, ...] = (
    AIEndpoint(
        name="summarize",
        price="$0.01",
        description="Summarize any text into key points",
        request_model=TextRequest,
        required=("text",),
        build_prompt=lambda r: "Summarize this concisely:\n\n" + r.text,
    ),
    AIEndpoint(
        name="translate",
        price="$0.02",
        description="Translate text to any language",
        request_model=TranslateRequest,
        required=("text",),
        build_prompt=lambda r: f"Translate to {_translate_language(r)}:\n\n{r.text}",
        echo=lambda r: {"language": _translate_language(r)},
    ),
    AIEndpoint(
        name="explain-code",
        price="$0.02",
        description="Explain what code does in plain English",
        request_model=CodeRequest,
        required=("code",),
        build_prompt=lambda r: "Explain this code in plain English:\n\n" + r.code,
    ),
    AIEndpoint(
        name="write",
        price="$0.03",
        description="Generate written content",
        request_model=WriteRequest,
        required=("prompt",),
        build_prompt=lambda r: f"Write a {r.type or 'general'} based on:\n\n{r.prompt}",
    ),
    AIEndpoint(
        name="analyze-sentiment",
        price="$0.01",
        description="Analyze the sentiment of text",
        request_model=TextRequest,
        required=("text",),
        build_prompt=lambda r: (
            "Analyze sentiment. Reply in JSON with sentiment, confidence, summary:\n\n" + r.text
        ),
    ),
    AIEndpoint(
        name="chat",
        price="$0.02",
        description="General Q&A - ask anything",
        request_model=QuestionRequest,
        required=("question",),
        build_prompt=lambda r: r.question,
    ),
    AIEndpoint(
        name="rewrite",
        price="$0.02",
        description="Improve and rewrite text professionally",
        request_model=RewriteRequest,
        required=("text",),
        build_prompt=lambda r: (
            f"Rewrite this text in a {_rewrite_tone(r)} tone. "
            f"Keep the meaning but improve clarity and style:\n\n{r.text}"
        ),
        echo=lambda r: {"tone": _rewrite_tone(r)},
    ),
    AIEndpoint(
        name="proofread",
        price="$0.01",
        description="Fix grammar, spelling, and punctuation",
        request_model=TextRequest,
        required=("text",),
        build_prompt=lambda r: (
            "Proofread this text. Fix all grammar, spelling, and punctuation errors. "
            "Return the corrected version:\n\n" + r.text
        ),
    ),
    AIEndpoint(
        name="brainstorm",
        price="$0.03",
        description="Generate creative ideas on any topic",
        request_model=BrainstormRequest,
        required=("topic",),
        build_prompt=lambda r: f"Brainstorm {r.count or 10} creative and unique ideas about:\n\n{r.topic}",
    ),
    AIEndpoint(
        name="eli5",
        price="$0.01",
        description="Explain anything like I'm 5 years old",
        request_model=TopicRequest,
        required=("topic",),
        build_prompt=lambda r: (
            "Explain this like I'm 5 years old. Use simple words and fun examples:\n\n" + r.topic
        ),
    ),
    AIEndpoint(
        name="extract-keywords",
        price="$0.01",
        description="Extract keywords and key phrases from text",
        request_model=TextRequest,
        required=("text",),
        build_prompt=lambda r: (
            "Extract the most important keywords and key phrases from this text. "
            "Return them as a JSON array:\n\n" + r.text
        ),
    ),
    AIEndpoint(
        name="generate-title",
        price="$0.01",
        description="Generate catchy headlines and titles",
        request_model=GenerateTitleRequest,
        required=("text",),
        build_prompt=lambda r: (
            f"Generate {r.count or 5} catchy, engaging headlines/titles for this content:\n\n{r.text}"
        ),
    ),
    AIEndpoint(
        name="compare",
        price="$0.02",
        description="Compare two things with pros and cons",
        request_model=CompareRequest,
        required=("item1", "item2"),
        build_prompt=lambda r: (
            "Compare these two things in detail with pros, cons, and a recommendation:"
            f"\n\n1: {r.item1}\n2: {r.item2}"
        ),
    ),
)
