"""
HTTP adapter -- FastAPI application exposing the council to web clients.

  GET  /api/ai/participants     -- List participants
  POST /api/ai/chat             -- Route a message and return a reply
  POST /api/ai/chat/followup    -- Follow-up from a different participant
  POST /api/ai/moderate         -- Moderate user content
  POST /api/ai/analyze          -- Themes, sentiment and resources for a story
  GET  /api/ai/topics           -- Topic catalog
  GET  /api/ai/health           -- Provider configuration status

Generation failures never surface as 5xx: the reply carries fallback text
and ``fallback: true``. An unknown participantId is a 404.

    uvicorn council.api:create_app --factory --port 3000
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from config.config_loader import load_config
from council.models import ConversationContext, HistoryEntry
from council.providers.base import UnconfiguredProvider
from council.registry import ParticipantNotFoundError
from council.service import CouncilService, build_service

logger = logging.getLogger(__name__)
router = APIRouter()


# =============================================================================
# REQUEST MODELS
# =============================================================================


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ContextModel(_CamelModel):
    topic: str | None = None
    description: str = ""
    key_points: list[str] = Field(default_factory=list, alias="keyPoints")
    mode: str = "discussion"

    def to_context(self) -> ConversationContext:
        return ConversationContext(
            topic=self.topic,
            description=self.description,
            key_points=list(self.key_points),
            mode=self.mode,
        )


class MessageModel(_CamelModel):
    role: str = "user"
    content: str = ""


class HistoryEntryModel(_CamelModel):
    author: str
    content: str
    timestamp: datetime | None = None


class ChatRequest(_CamelModel):
    messages: list[MessageModel] = Field(default_factory=list)
    context: ContextModel = Field(default_factory=ContextModel)
    conversation_history: list[HistoryEntryModel] | None = Field(None, alias="conversationHistory")
    participant_id: str | None = Field(None, alias="participantId")
    conversation_id: str | None = Field(None, alias="conversationId")


class FollowUpRequest(_CamelModel):
    original_message: str = Field("", alias="originalMessage")
    first_response: str = Field("", alias="firstResponse")
    context: ContextModel = Field(default_factory=ContextModel)
    exclude_participant_id: str | None = Field(None, alias="excludeParticipantId")


class ModerateRequest(_CamelModel):
    content: str = ""
    content_type: str = Field("message", alias="contentType")


class AnalyzeRequest(_CamelModel):
    content: str = ""


# =============================================================================
# ROUTES
# =============================================================================


def _service(request: Request) -> CouncilService:
    return request.app.state.service


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/participants")
async def list_participants(request: Request) -> dict:
    participants = _service(request).list_participants()
    return {"success": True, "participants": participants, "count": len(participants)}


@router.post("/chat")
async def chat(body: ChatRequest, request: Request) -> dict:
    if not body.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    history = None
    if body.conversation_history is not None:
        history = [HistoryEntry(h.author, h.content, h.timestamp) for h in body.conversation_history]

    try:
        reply = await _service(request).chat(
            message=body.messages[-1].content,
            context=body.context.to_context(),
            history=history,
            participant_id=body.participant_id,
            conversation_id=body.conversation_id,
        )
    except ParticipantNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "success": True,
        "response": reply.response,
        "agent": reply.agent,
        "participantId": reply.participant_id,
        "timestamp": reply.timestamp.isoformat(),
        "fallback": reply.fallback,
    }


@router.post("/chat/followup")
async def follow_up(body: FollowUpRequest, request: Request) -> dict:
    if not body.original_message or not body.first_response:
        raise HTTPException(status_code=400, detail="Original message and first response are required")

    service = _service(request)
    result = await service.follow_up(
        body.original_message,
        body.first_response,
        body.context.to_context(),
        body.exclude_participant_id,
    )
    if result is None:
        return {
            "success": True,
            "response": None,
            "agent": None,
            "participantId": None,
            "timestamp": _now(),
            "fallback": False,
        }

    return {
        "success": True,
        "response": result.text,
        "agent": service.registry.get(result.participant_id).name,
        "participantId": result.participant_id,
        "timestamp": _now(),
        "fallback": result.fallback,
    }


@router.post("/moderate")
async def moderate(body: ModerateRequest, request: Request) -> dict:
    if not body.content:
        raise HTTPException(status_code=400, detail="Content is required")
    result = await _service(request).moderate(body.content, body.content_type)
    return {
        "success": True,
        "approved": result.approved,
        "reasons": result.reasons,
        "severity": result.severity,
        "suggestions": result.suggestions,
        "fallback": result.fallback,
        "moderatedAt": _now(),
    }


@router.post("/analyze")
async def analyze(body: AnalyzeRequest, request: Request) -> dict:
    if not body.content:
        raise HTTPException(status_code=400, detail="Story content is required")
    result = await _service(request).analyze_story(body.content)
    return {
        "success": True,
        "analysis": result.to_dict(),
        "fallback": result.fallback,
        "analyzedAt": _now(),
    }


@router.get("/topics")
async def topics(request: Request) -> dict:
    return {
        "topics": {
            tid: {"context": t.description, "keyPoints": t.key_points}
            for tid, t in _service(request).topics.items()
        }
    }


@router.get("/health")
async def health(request: Request) -> dict:
    service = _service(request)
    configured = not isinstance(service.provider, UnconfiguredProvider)
    return {
        "service": "AI Integration",
        "status": "configured" if configured else "not_configured",
        "configured": configured,
        "provider": service.provider.name(),
        "model": service.provider.model_string(),
        "participants": service.registry.ids,
        "timestamp": _now(),
    }


def create_app(service: CouncilService | None = None) -> FastAPI:
    """Application factory; builds the service from settings.yaml when none is given."""
    if service is None:
        service = build_service(load_config())

    application = FastAPI(
        title="Commons Council API",
        description="Participant routing and response generation",
        version="0.1.0",
    )
    application.state.service = service
    application.include_router(router, prefix="/api/ai", tags=["AI"])
    logger.info("API initialized with %d participants", len(service.registry))
    return application
