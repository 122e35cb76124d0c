import logging
import queue
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from blogcore.config import settings
from blogcore.utils.time_utils import utcnow


@dataclass(frozen=True)
class NewPostNotification:
    post_id: UUID
    queued_at: datetime = field(default_factory=utcnow)


class MailOutbox:
    """
    Mail jobs waiting for a delivery worker.

    Producers hand a message over with put_nowait and never wait on it.
    A message is taken off the queue exactly once by ``drain``, so delivery
    is at most once; a worker that fails after draining loses the message.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)

    def notify_subscribers_about_new_post(self, post_id: UUID) -> None:
        # Raises queue.Full when the outbox is at capacity
        self._queue.put_nowait(NewPostNotification(post_id=post_id))
        logging.debug(f"Queued new post notification for post {post_id}")

    def drain(self, limit: int | None = None) -> list:
        messages = []
        while limit is None or len(messages) < limit:
            try:
                messages.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return messages

    def __len__(self) -> int:
        return self._queue.qsize()


outbox = MailOutbox(maxsize=settings.OUTBOX_MAX_SIZE)
