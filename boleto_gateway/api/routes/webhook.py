"""Inbound bank webhook endpoints"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query

from boleto_gateway.api.dependencies import get_notification_sink
from boleto_gateway.api.routes.schemas import NotificationSchema, WebhookAck
from boleto_gateway.services.notifications import NotificationSink

router = APIRouter()


@router.post("/webhook/bradesco", response_model=WebhookAck)
def receive_bradesco_event(
    payload: Dict[str, Any] = Body(...),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Record an asynchronous bank event (liquidação, baixa, ...)"""
    notification = sink.receive(payload)
    return WebhookAck(id=notification.id)


@router.get("/webhook/logs", response_model=List[NotificationSchema])
def list_webhook_logs(
    limit: int = Query(50, ge=1, le=500),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Most recent inbound notifications, newest first"""
    return sink.recent(limit)
