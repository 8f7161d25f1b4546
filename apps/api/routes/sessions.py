from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from apps.api.reminders_scheduler import ClientPoller, PollerRegistry
from apps.api.schemas.notifications import PollerStatusResponse, SessionAlertResponse
from packages.core.storage.sqlite import SQLiteMedStore


router = APIRouter(prefix="/sessions", tags=["sessions"])

_REGISTRY: Optional[PollerRegistry] = None


def _store() -> SQLiteMedStore:
    data_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data"))
    db_path = os.getenv("MEDPORTAL_DB_PATH", os.path.join(data_dir, "medportal.db"))
    return SQLiteMedStore(db_path=db_path)


def _registry() -> PollerRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = PollerRegistry(lambda patient_id: ClientPoller(_store(), patient_id))
    return _REGISTRY


def _status(patient_id: str, poller: ClientPoller) -> PollerStatusResponse:
    return PollerStatusResponse(
        patient_id=patient_id,
        running=poller.running,
        ledger_size=len(poller.ledger),
        pending_alerts=poller.notifier.pending(),
    )


@router.post("/{patient_id}/poller", response_model=PollerStatusResponse)
def start_poller(patient_id: str) -> PollerStatusResponse:
    poller = _registry().start(patient_id)
    return _status(patient_id, poller)


@router.get("/{patient_id}/poller", response_model=PollerStatusResponse)
def poller_status(patient_id: str) -> PollerStatusResponse:
    poller = _registry().get(patient_id)
    if poller is None:
        raise HTTPException(status_code=404, detail="No active session")
    poller.touch()
    return _status(patient_id, poller)


@router.delete("/{patient_id}/poller")
def stop_poller(patient_id: str) -> Dict[str, Any]:
    if not _registry().stop(patient_id):
        raise HTTPException(status_code=404, detail="No active session")
    return {"status": "stopped", "patient_id": patient_id}


@router.get("/{patient_id}/alerts", response_model=List[SessionAlertResponse])
def drain_alerts(patient_id: str) -> List[SessionAlertResponse]:
    poller = _registry().get(patient_id)
    if poller is None:
        raise HTTPException(status_code=404, detail="No active session")
    poller.touch()
    return [
        SessionAlertResponse(
            title=alert.title,
            description=alert.description,
            tag=alert.tag,
            created_at=alert.created_at,
            duration_ms=alert.duration_ms,
        )
        for alert in poller.notifier.drain()
    ]


def shutdown_pollers() -> int:
    if _REGISTRY is None:
        return 0
    return _REGISTRY.stop_all()
