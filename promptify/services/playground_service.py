"""Playground Service - quota checks, AI dispatch and session activity logs."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, col, func, select

from promptify.core.errors import AppError, AuthorizationError, ErrorCode, NotFoundError, ValidationError
from promptify.core.security import generate_session_id
from promptify.models import ActionType, PlaygroundSession, SessionType, User, as_utc
from promptify.services.ai import AIManager, get_ai_manager
from promptify.services.user_service import UserService

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1000
LIMIT_REACHED_MESSAGE = "Playground session limit reached. Please upgrade your plan."


class PlaygroundService:
    """Service for playground chat and session tracking."""

    def __init__(self, session: Session, ai_manager: Optional[AIManager] = None):
        self.session = session
        self.ai_manager = ai_manager or get_ai_manager()

    def usage(self, user: User) -> dict[str, Any]:
        user.refresh_usage_period()
        plan = user.plan
        return {
            "current": user.playground_sessions_current,
            "limit": user.playground_sessions_limit,
            "reset_date": as_utc(user.usage_reset_date),
            "unlimited": user.playground_unlimited,
            "can_use": user.can_use_playground(),
            "plan": {"id": plan.id, "name": plan.name} if plan else None,
        }

    def consume_session(self, user: User) -> User:
        """Count one playground use, refusing once the monthly quota is spent."""
        if not user.can_use_playground():
            raise AuthorizationError(LIMIT_REACHED_MESSAGE)
        return UserService(self.session).increment_playground_usage(user)

    async def chat(
        self,
        user: User,
        message: Optional[str],
        model: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> dict[str, Any]:
        if not message or not message.strip():
            raise ValidationError("Message is required")

        # soft limit: two concurrent requests can both pass the check
        self.consume_session(user)

        result = await self.ai_manager.send_message(
            message,
            model=model,
            session_id=session_id,
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
        if not result.success:
            logger.warning(f"Playground chat failed for user {user.id}: {result.error}")
            if result.code == 400:
                raise ValidationError(result.error or "Invalid request")
            raise AppError(
                result.error or "AI service error",
                status_code=result.code or 500,
                code=ErrorCode.EXTERNAL_API,
            )

        resolved_session_id = result.session_id or session_id or generate_session_id()
        self._log_chat(user, resolved_session_id, result.ai_model or model)

        return {
            "response": result.response,
            "session_id": resolved_session_id,
            "model": result.model,
            "ai_model": result.ai_model,
            "citations": result.citations,
            "token_usage": result.usage.model_dump(),
            "usage": {
                "current": user.playground_sessions_current,
                "limit": user.playground_sessions_limit,
                "unlimited": user.playground_unlimited,
            },
        }

    def _log_chat(self, user: User, session_id: str, model: Optional[str]) -> None:
        record = self.get_session(user, session_id)
        if record is None:
            record = PlaygroundSession(user_id=user.id, session_id=session_id, type=SessionType.PLAYGROUND)
        record.log_action(ActionType.CREATE, target="chat", model=model)
        self.session.add(record)
        self.session.commit()

    def get_session(self, user: User, session_id: str) -> PlaygroundSession | None:
        statement = select(PlaygroundSession).where(
            PlaygroundSession.session_id == session_id,
            PlaygroundSession.user_id == user.id,
        )
        return self.session.exec(statement).first()

    def start_session(
        self,
        user: User,
        session_type: SessionType = SessionType.PLAYGROUND,
        user_agent: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> PlaygroundSession:
        record = PlaygroundSession(
            user_id=user.id,
            session_id=generate_session_id(),
            type=session_type,
            user_agent=user_agent,
            ip=ip,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def end_session(self, user: User, session_id: Optional[str]) -> PlaygroundSession:
        if not session_id:
            raise ValidationError("Session ID is required")
        record = self.get_session(user, session_id)
        if record is None:
            raise NotFoundError("Session")
        record.end()
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def list_sessions(
        self, user_id: UUID, skip: int = 0, limit: int = 10, session_type: Optional[SessionType] = None
    ) -> tuple[list[PlaygroundSession], int]:
        conditions = [PlaygroundSession.user_id == user_id]
        if session_type:
            conditions.append(PlaygroundSession.type == session_type)
        total_count = self.session.exec(
            select(func.count(PlaygroundSession.id)).where(*conditions)
        ).one()
        statement = (
            select(PlaygroundSession)
            .where(*conditions)
            .order_by(col(PlaygroundSession.start_time).desc())
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.exec(statement).all()), total_count
