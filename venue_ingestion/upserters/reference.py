"""
Reference lookups shared by the upserters: channels and menu items.

Channel resolution is an idempotent find-or-create: a case-insensitive
match on display name (or code) for the location, else
``INSERT ... ON CONFLICT DO NOTHING`` followed by a re-select, so two
writers creating the same channel converge on one row.
"""

from __future__ import annotations

import re
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from venue_kernel.db.upsert import insert_if_absent
from venue_kernel.exceptions import UnresolvedReferenceError
from venue_kernel.logging_config import get_logger
from venue_modules.venue.orm import MenuItemModel, ServiceChannelModel

logger = get_logger("ingestion.reference")

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """``"Dine In"`` -> ``"dine-in"``."""
    return _NON_SLUG.sub("-", name.strip().lower()).strip("-")


def _find_channel(session: Session, location_id: UUID, name: str, code: str) -> UUID | None:
    return session.scalars(
        select(ServiceChannelModel.id)
        .where(ServiceChannelModel.location_id == location_id)
        .where(
            or_(
                func.lower(ServiceChannelModel.name) == name.lower(),
                ServiceChannelModel.code == code,
            )
        )
        .order_by(ServiceChannelModel.code)
        .limit(1)
    ).first()


def get_or_create_channel(
    session: Session,
    location_id: UUID,
    name: str | None,
    actor_id: UUID,
) -> UUID | None:
    """Channel id for ``name``; None for a blank name."""
    if name is None or not name.strip():
        return None
    name = name.strip()
    code = slugify(name)
    if not code:
        return None

    channel_id = _find_channel(session, location_id, name, code)
    if channel_id is not None:
        return channel_id

    insert_if_absent(
        session,
        ServiceChannelModel,
        {
            "location_id": location_id,
            "code": code,
            "name": name,
            "is_active": True,
            "created_by_id": actor_id,
        },
        conflict_columns=("location_id", "code"),
    )
    channel_id = _find_channel(session, location_id, name, code)
    logger.info(
        "channel_created",
        extra={"location_id": str(location_id), "channel_code": code},
    )
    return channel_id


def require_menu_item(session: Session, location_id: UUID, name: str) -> MenuItemModel:
    """
    Menu item by case-insensitive name.

    Raises:
        UnresolvedReferenceError: if the location has no such item.
    """
    item = session.scalars(
        select(MenuItemModel)
        .where(MenuItemModel.location_id == location_id)
        .where(func.lower(MenuItemModel.name) == name.strip().lower())
        .limit(1)
    ).first()
    if item is None:
        raise UnresolvedReferenceError("menu item", name.strip())
    return item
