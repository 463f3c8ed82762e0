"""
FastAPI dependencies for dependency injection.

Wires settings, the SQLAlchemy unit of work, the event bus and the order
services. Tests replace any of these through ``app.dependency_overrides``.
"""
from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException, status

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from yarnitt.application.interfaces import UnitOfWorkFactory  # noqa: E402
from yarnitt.application.services import OrderLifecycleService, OrderQueryService  # noqa: E402
from yarnitt.data.uow import create_uow  # noqa: E402
from yarnitt.domain.enums import ActorRole  # noqa: E402
from yarnitt.domain.event_bus import EventBus  # noqa: E402
from yarnitt.domain.value_objects import Actor  # noqa: E402
from yarnitt.infrastructure.bus import create_event_bus  # noqa: E402
from yarnitt.infrastructure.database import get_engine, get_session_factory  # noqa: E402
from yarnitt.settings import AppSettings, get_app_settings  # noqa: E402

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_uow_factory: Optional[UnitOfWorkFactory] = None
_event_bus: Optional[EventBus] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_settings() -> AppSettings:
    return get_app_settings()


def get_uow_factory(settings: AppSettings = Depends(get_settings)) -> UnitOfWorkFactory:
    """Unit of work factory bound to the configured database."""
    global _uow_factory
    if _uow_factory is None:
        session_factory = get_session_factory(get_engine(settings.database))
        _uow_factory = partial(create_uow, session_factory)
        logger.info("Created SQLAlchemy unit of work factory")
    return _uow_factory


def get_event_bus(settings: AppSettings = Depends(get_settings)) -> EventBus:
    global _event_bus
    if _event_bus is None:
        _event_bus = create_event_bus(settings.events)
        logger.info(f"Created {type(_event_bus).__name__} event bus")
    return _event_bus


def get_order_service(
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
    event_bus: EventBus = Depends(get_event_bus),
    settings: AppSettings = Depends(get_settings),
) -> OrderLifecycleService:
    return OrderLifecycleService(uow_factory, event_bus=event_bus, settings=settings.orders)


def get_query_service(
    uow_factory: UnitOfWorkFactory = Depends(get_uow_factory),
) -> OrderQueryService:
    return OrderQueryService(uow_factory)


def get_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Actor:
    """
    Resolve the calling account.

    Token verification happens upstream; this service trusts the identity
    headers set by the gateway.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        role = ActorRole((x_user_role or ActorRole.BUYER.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {x_user_role}",
        ) from None
    return Actor(id=x_user_id, role=role)


def reset_dependencies() -> None:
    """Drop cached singletons (tests, settings reload)."""
    global _uow_factory, _event_bus
    _uow_factory = None
    _event_bus = None
    get_app_settings.cache_clear()
