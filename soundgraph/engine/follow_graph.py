"""
Follow / unfollow for the social graph.

A toggle is one storage call that flips the follower → followee edge inside
the request transaction; the manager validates input first and re-reads the
relation afterwards to make sure it landed where the toggle says it did.
"""
import logging
from enum import Enum

from opentelemetry import trace

from soundgraph.engine.errors import InconsistentState, InvalidArgument, NotFound
from soundgraph.engine.store import Storage
from soundgraph.engine.validation import require_id
from soundgraph.telemetry import FOLLOW_TOGGLES_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class FollowStatus(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


class FollowGraphManager:
    def __init__(self, store: Storage):
        self.store = store

    async def toggle_follow(self, actor_id: str, target_id: str) -> FollowStatus:
        """
        Follow `target_id` as `actor_id`, or unfollow if already following.

        Calling it twice restores the original state. Raises InvalidArgument
        for malformed ids or a self-follow, NotFound if either user is missing.
        """
        actor_id = require_id(actor_id, "user id")
        target_id = require_id(target_id, "profile id")
        if actor_id == target_id:
            raise InvalidArgument("Cannot follow yourself")

        with tracer.start_as_current_span("toggle_follow") as span:
            span.set_attribute("follow.actor_id", actor_id)
            span.set_attribute("follow.target_id", target_id)

            if await self.store.get_user(target_id) is None:
                raise NotFound("Profile not found!")
            if await self.store.get_user(actor_id) is None:
                raise NotFound("User not found!")

            added = await self.store.toggle_relation(actor_id, target_id)
            status = FollowStatus.ADDED if added else FollowStatus.REMOVED

            if await self.store.is_following(actor_id, target_id) != added:
                raise InconsistentState(
                    f"Follow edge {actor_id} → {target_id} does not match status {status.value}"
                )

            span.set_attribute("follow.status", status.value)

        FOLLOW_TOGGLES_TOTAL.labels(status=status.value).inc()
        logger.info("%s %s follower of %s", actor_id, status.value, target_id)
        return status
