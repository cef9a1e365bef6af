"""
Notification Sink.

Fire-and-forget delivery of approval and work-rate notifications.
Delivery failures are logged and never interrupt the workflow.
"""

import logging
import threading
from abc import ABC, abstractmethod

from modules.evaluation.schemas.approval import ApprovalRequest, NotificationEvent

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Destination for notification events."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Deliver one event. May raise; callers go through ``safe_notify``."""
        pass


class LoggingNotificationSink(NotificationSink):
    """Writes notifications to the application log."""

    def notify(self, event: NotificationEvent) -> None:
        logger.info(f"[notify -> {event.recipient_id}] {event.message}")


class InMemoryNotificationSink(NotificationSink):
    """Keeps notifications in memory, newest last."""

    def __init__(self) -> None:
        self._events: list[NotificationEvent] = []
        self._lock = threading.Lock()

    def notify(self, event: NotificationEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[NotificationEvent]:
        with self._lock:
            return list(self._events)

    def for_recipient(self, recipient_id: str) -> list[NotificationEvent]:
        return [e for e in self.events if e.recipient_id == recipient_id]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def safe_notify(sink: NotificationSink | None, event: NotificationEvent) -> bool:
    """
    Deliver an event without letting a sink failure escape.

    Returns:
        bool: True if the sink accepted the event.
    """
    if sink is None:
        return False
    try:
        sink.notify(event)
        return True
    except Exception as e:
        logger.error(f"Failed to deliver notification to {event.recipient_id}: {e}")
        return False


# =============================================================================
# Messages
# =============================================================================


def _requester(request: ApprovalRequest) -> str:
    return request.requester_name or request.requester_id


def submitted_event(request: ApprovalRequest) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=request.approver_team_id,
        message=f"{_requester(request)}님의 {request.payload.type_text} 결재 요청이 도착했습니다.",
        request_id=request.id,
    )


def team_approved_event(request: ApprovalRequest) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=request.approver_hr_id,
        message=(
            f"{_requester(request)}님의 {request.payload.type_text} 요청이 현업승인되었습니다. "
            "최종 결재를 진행해주세요."
        ),
        request_id=request.id,
    )


def final_approved_event(request: ApprovalRequest) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=request.requester_id,
        message=f"{request.payload.type_text} 요청이 최종승인되었습니다.",
        request_id=request.id,
    )


def rejected_event(request: ApprovalRequest) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=request.requester_id,
        message=(
            f"{request.payload.type_text} 요청이 반려되었습니다. "
            f"사유: {request.rejection_reason}"
        ),
        request_id=request.id,
    )


def resubmitted_event(request: ApprovalRequest) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=request.approver_team_id,
        message=f"{_requester(request)}님이 {request.payload.type_text} 요청을 재상신했습니다.",
        request_id=request.id,
    )


def work_rate_applied_event(employee_id: str, year: int, month: int, work_rate: float) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=employee_id,
        message=f"{year}년 {month}월 근무율이 {work_rate * 100:.1f}%로 반영되었습니다.",
    )
