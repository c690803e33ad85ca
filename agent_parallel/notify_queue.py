"""Queue of task notifications broadcast to subscribed sessions."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, Optional

logger = logging.getLogger(__name__)

TICK_INTERVAL_SECS = 0.4


@dataclass(frozen=True)
class TaskQueueEvent:
    """A task notification delivered to subscribers."""

    content: str
    created_at: datetime


Recipient = Callable[[TaskQueueEvent], None]


class TaskNotifyQueue:
    """FIFO of notifications; each tick broadcasts at most one of them."""

    def __init__(self) -> None:
        self._queue: Deque[TaskQueueEvent] = deque()
        self._subscribers: Dict[str, Recipient] = {}

    def __len__(self) -> int:
        return len(self._queue)

    def enqueue(self, content: str, created_at: Optional[datetime] = None) -> None:
        if created_at is None:
            created_at = datetime.now(timezone.utc)
        self._queue.append(TaskQueueEvent(content, created_at))
        logger.debug("任务通知已入队, queue_size=%d", len(self._queue))

    def subscribe(self, session_id: str, recipient: Recipient) -> None:
        self._subscribers[session_id] = recipient
        logger.debug("新增任务通知订阅者, subscribers=%d", len(self._subscribers))

    def unsubscribe(self, session_id: str) -> None:
        self._subscribers.pop(session_id, None)
        logger.debug("移除任务通知订阅者, subscribers=%d", len(self._subscribers))

    def tick(self) -> Optional[TaskQueueEvent]:
        """Take the oldest notification and send it to every subscriber.

        The notification is consumed even when nobody is subscribed.
        Returns the event that was taken, or ``None`` if the queue was empty.
        """
        if not self._queue:
            return None
        event = self._queue.popleft()
        for session_id, recipient in list(self._subscribers.items()):
            try:
                recipient(event)
            except Exception:  # a failing subscriber must not stop the others
                logger.exception("任务通知投递失败, session=%s", session_id)
        return event