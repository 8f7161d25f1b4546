from __future__ import annotations

import datetime as dt
import hmac
import logging
import os
from typing import Optional, Union

from fastapi import APIRouter, Header, HTTPException

from apps.api.observability import traced
from apps.api.schemas.notifications import (
    ManualNotificationResponse,
    ReminderNotificationRequest,
    ScheduledSweepResponse,
)
from packages.core.auth.session import (
    SessionVerificationError,
    bearer_token,
    session_verifier_from_env,
)
from packages.core.notifications.email import (
    ConfigurationError,
    ResendEmailClient,
    email_client_from_env,
)
from packages.core.reminders.dispatcher import NotificationDispatcher
from packages.core.reminders.sweep import run_scheduled_sweep
from packages.core.storage.sqlite import SQLiteMedStore


logger = logging.getLogger("medportal.sweep")

router = APIRouter(prefix="/functions", tags=["reminder-notifications"])


def _cron_secret() -> str:
    return os.getenv("CRON_SECRET", "")


def _store() -> SQLiteMedStore:
    data_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "data"))
    db_path = os.getenv("MEDPORTAL_DB_PATH", os.path.join(data_dir, "medportal.db"))
    return SQLiteMedStore(db_path=db_path)


def _email_client() -> ResendEmailClient:
    return email_client_from_env()


def _session_verifier():
    return session_verifier_from_env()


def _now() -> dt.datetime:
    return dt.datetime.now()


def _check_cron_secret(provided: Optional[str]) -> None:
    expected = _cron_secret()
    if not expected or not provided or not hmac.compare_digest(provided, expected):
        logger.error("cron_request_rejected reason=invalid_or_missing_secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


def _run_scheduled() -> ScheduledSweepResponse:
    try:
        email_client = _email_client()
    except ConfigurationError as exc:
        logger.error("sweep_config_error error=%s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    dispatcher = NotificationDispatcher(email_client=email_client)
    with traced("reminders.scheduled_sweep") as span:
        try:
            result = run_scheduled_sweep(_store(), dispatcher, _now())
        except Exception as exc:
            logger.exception("sweep_failed error=%s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        if span is not None:
            span.set_attribute("reminders.notifications_sent", result.notifications_sent)
            span.set_attribute("reminders.retired", result.retired)

    return ScheduledSweepResponse(
        success=True,
        notifications_sent=result.notifications_sent,
        notifications=result.notifications,
    )


def _run_manual(
    payload: ReminderNotificationRequest, authorization: Optional[str]
) -> ManualNotificationResponse:
    token = bearer_token(authorization)
    if token is None:
        logger.error("manual_request_rejected reason=missing_authorization")
        raise HTTPException(status_code=401, detail="Unauthorized - missing authorization")

    try:
        verifier = _session_verifier()
    except SessionVerificationError as exc:
        logger.error("manual_request_config_error error=%s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    try:
        user = verifier.verify(token)
    except SessionVerificationError as exc:
        logger.error("manual_request_rejected reason=%s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized - invalid token") from exc
    logger.info("manual_request_authenticated user=%s", user.user_id)

    if not payload.patient_email or not payload.medicine_name or not payload.dosage:
        raise HTTPException(status_code=400, detail="Missing required fields")

    if payload.notification_type in ("email", "both"):
        try:
            email_client = _email_client()
        except ConfigurationError as exc:
            logger.error("manual_request_config_error error=%s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        with traced("reminders.manual_send", **{"user.id": user.user_id}) as span:
            sent = email_client.send_reminder(
                payload.patient_email, payload.medicine_name, payload.dosage
            )
            if span is not None:
                span.set_attribute("email.success", sent.success)
        logger.info(
            "manual_email_result to=%s success=%s error=%s",
            payload.patient_email,
            sent.success,
            sent.error,
        )

    return ManualNotificationResponse(success=True, message="Notification sent")


@router.post(
    "/send-reminder-notification",
    response_model=Union[ScheduledSweepResponse, ManualNotificationResponse],
)
def send_reminder_notification(
    payload: ReminderNotificationRequest,
    x_cron_secret: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
) -> Union[ScheduledSweepResponse, ManualNotificationResponse]:
    if payload.check_scheduled:
        _check_cron_secret(x_cron_secret)
        return _run_scheduled()
    return _run_manual(payload, authorization)
