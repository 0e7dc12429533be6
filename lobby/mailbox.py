"""
Friend Mailbox for RF Online.

Store-and-forward queue for friend requests addressed to players who are
not currently online. Other friend notifications (accept, decline,
remove, game invite) are delivered to online players only.
"""

import logging
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from utils.constants import MESSAGES

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

@dataclass
class PendingFriendRequest:
    """A friend request waiting for its recipient to come online."""
    sender: str
    recipient: str
    created_at: float = field(default_factory=time.time)
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from': self.sender,
            'to': self.recipient,
            'requestId': self.request_id,
            'timestamp': int(self.created_at * 1000)
        }

class FriendMailbox:
    """
    Recipient name -> queue of pending friend requests.

    Args:
        connection_manager: Used to look up which names are online
        notifier: Outbound delivery
        retention_days: Age after which undelivered requests are pruned
    """

    def __init__(self, connection_manager, notifier, retention_days: int = 7):
        self.connection_manager = connection_manager
        self.notifier = notifier
        self.retention_seconds = retention_days * SECONDS_PER_DAY
        self.pending: Dict[str, List[PendingFriendRequest]] = defaultdict(list)

    def send_request(self, sender: str, recipient: str, now: Optional[float] = None) -> Dict[str, Any]:
        """
        Deliver a friend request now, or queue it for later.

        Args:
            sender: Display name of the requester
            recipient: Display name of the target
            now: Timestamp override (seconds)

        Returns:
            Acknowledgement payload for the sender
        """
        request = PendingFriendRequest(sender=sender, recipient=recipient)
        if now is not None:
            request.created_at = now

        recipient_sid = self.connection_manager.get_socket_id_by_name(recipient)
        if recipient_sid:
            self.notifier.emit('friend_request_received', request.to_dict(), to=recipient_sid)
            logger.info(f"Friend request {sender} -> {recipient} delivered")
            return {'to': recipient, 'delivered': True, 'requestId': request.request_id}

        queue = self.pending[recipient]
        existing = next((r for r in queue if r.sender == sender), None)
        if existing:
            request = existing
        else:
            queue.append(request)
            logger.info(f"Friend request {sender} -> {recipient} queued")

        return {
            'to': recipient,
            'delivered': False,
            'requestId': request.request_id,
            'message': MESSAGES['FRIEND_REQUEST_QUEUED']
        }

    def flush(self, socket_id: str, name: str) -> int:
        """
        Deliver and clear every pending request for a name.

        Called whenever ``name`` becomes bound to the live connection
        ``socket_id``.

        Returns:
            Number of requests delivered
        """
        queue = self.pending.pop(name, None)
        if not queue:
            return 0

        for request in queue:
            self.notifier.emit('friend_request_received', request.to_dict(), to=socket_id)

        logger.info(f"Delivered {len(queue)} pending friend requests to {name}")
        return len(queue)

    def notify(self, event: str, sender: str, recipient: str, extra: Optional[Dict[str, Any]] = None) -> bool:
        """
        Point-to-point notification to an online player. Never queued.

        Returns:
            True if the recipient was online
        """
        recipient_sid = self.connection_manager.get_socket_id_by_name(recipient)
        if not recipient_sid:
            logger.debug(f"{event} from {sender} dropped, {recipient} is offline")
            return False

        payload = {'from': sender, 'to': recipient}
        if extra:
            payload.update(extra)
        self.notifier.emit(event, payload, to=recipient_sid)
        return True

    def pending_for(self, name: str) -> List[PendingFriendRequest]:
        return list(self.pending.get(name, []))

    def prune(self, now: Optional[float] = None) -> int:
        """
        Drop requests older than the retention window.

        Returns:
            Number of requests removed
        """
        now = time.time() if now is None else now
        cutoff = now - self.retention_seconds
        removed = 0

        for recipient in list(self.pending.keys()):
            queue = self.pending[recipient]
            kept = [r for r in queue if r.created_at >= cutoff]
            removed += len(queue) - len(kept)
            if kept:
                self.pending[recipient] = kept
            else:
                del self.pending[recipient]

        if removed:
            logger.info(f"Pruned {removed} expired friend requests")
        return removed
