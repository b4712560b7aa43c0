"""Liveness check reporting the broker connection."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from notification_service.interfaces.api.schemas import BrokerHealth, HealthRead

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthRead)
def health(request: Request, response: Response) -> HealthRead:
    """Report ``ok`` unless the broker consumer is enabled and disconnected."""

    consumer = getattr(request.app.state, "consumer", None)
    if consumer is None:
        return HealthRead(status="ok", broker=BrokerHealth(connected=False, state="disabled"))

    connected = consumer.is_connected()
    if not connected:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthRead(
        status="ok" if connected else "degraded",
        broker=BrokerHealth(connected=connected, state=consumer.state.value),
    )
