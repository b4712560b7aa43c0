"""Endpoints exposing the in-app notification feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from notification_service.domain.entities import NotificationLog
from notification_service.infrastructure.database import get_db
from notification_service.infrastructure.repositories import NotificationLogRepository
from notification_service.interfaces.api.errors import NOT_FOUND, ApiError
from notification_service.interfaces.api.schemas import (
    MarkAllReadResponse,
    MarkAllReadResult,
    NotificationListResponse,
    NotificationLogRead,
    NotificationResponse,
    UnreadCount,
    UnreadCountResponse,
    UserScopedRequest,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _notification_to_schema(notification: NotificationLog) -> NotificationLogRead:
    return NotificationLogRead(
        id=notification.id or "",
        event_type=notification.event_type,
        recipient_user_id=notification.recipient_user_id,
        recipient_email=notification.recipient_email,
        subject=notification.subject,
        template=notification.template,
        payload=notification.payload or {},
        channel=notification.channel,
        status=notification.status,
        read=notification.read,
        dismissed=notification.dismissed,
        priority=notification.priority,
        category=notification.category,
        action_url=notification.action_url,
        action_label=notification.action_label,
        provider_message_id=notification.provider_message_id,
        error_message=notification.error_message,
        created_at=notification.created_at,
        sent_at=notification.sent_at,
        read_at=notification.read_at,
    )


def _not_found(notification_id: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND, f"Notification {notification_id} not found")


@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    body: UserScopedRequest,
    db: Session = Depends(get_db),
) -> MarkAllReadResponse:
    """Mark every unread, non-dismissed notification of the user as read."""

    updated = NotificationLogRepository(db).mark_all_as_read(user_id=body.user_id)
    return MarkAllReadResponse(data=MarkAllReadResult(success=True, updated=updated))


@router.get("/{user_id}", response_model=NotificationListResponse)
def list_notifications(
    user_id: str,
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> NotificationListResponse:
    """Return the user's feed, unread first and newest first."""

    notifications = NotificationLogRepository(db).list_for_user(
        user_id,
        unread_only=unread_only,
        limit=min(limit, MAX_PAGE_SIZE),
        offset=offset,
    )
    return NotificationListResponse(
        data=[_notification_to_schema(notification) for notification in notifications]
    )


@router.get("/{user_id}/unread-count", response_model=UnreadCountResponse)
def unread_count(user_id: str, db: Session = Depends(get_db)) -> UnreadCountResponse:
    count = NotificationLogRepository(db).count_unread(user_id)
    return UnreadCountResponse(data=UnreadCount(count=count))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    body: UserScopedRequest,
    db: Session = Depends(get_db),
) -> NotificationResponse:
    notification = NotificationLogRepository(db).mark_as_read(
        notification_id, user_id=body.user_id
    )
    if notification is None:
        raise _not_found(notification_id)
    return NotificationResponse(data=_notification_to_schema(notification))


@router.patch("/{notification_id}/dismiss", response_model=NotificationResponse)
def dismiss_notification(
    notification_id: str,
    body: UserScopedRequest,
    db: Session = Depends(get_db),
) -> NotificationResponse:
    notification = NotificationLogRepository(db).dismiss(notification_id, user_id=body.user_id)
    if notification is None:
        raise _not_found(notification_id)
    return NotificationResponse(data=_notification_to_schema(notification))
