"""Audit logging utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger("ett.audit")

T = TypeVar("T")


class AuditLogger:
    """Structured audit logger."""

    def record(self, action: str, actor: str, details: Dict[str, Any]) -> None:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "actor": actor,
            "details": details,
        }
        logger.info(json.dumps(payload, default=str))


audit_logger = AuditLogger()


def audit_log(action: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator that emits start/success/error audit records around a coroutine."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            context_logger = _resolve_logger(args)
            actor = _resolve_actor(args, kwargs)
            metadata = {"call": func.__qualname__}
            context_logger.record(f"{action}.start", actor, metadata)
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                context_logger.record(f"{action}.error", actor, metadata | {"error": str(exc)})
                raise
            context_logger.record(f"{action}.success", actor, metadata)
            return result

        return wrapper

    return decorator


def _resolve_logger(args: tuple) -> AuditLogger:
    owner = args[0] if args else None
    candidate = getattr(owner, "audit_logger", None)
    if isinstance(candidate, AuditLogger):
        return candidate
    return audit_logger


def _resolve_actor(args: tuple, kwargs: Dict[str, Any]) -> str:
    actor = kwargs.get("entity_id")
    if actor is None and len(args) > 1 and isinstance(args[1], str):
        actor = args[1]
    return str(actor) if actor else "system"


__all__ = ["audit_logger", "audit_log", "AuditLogger"]
