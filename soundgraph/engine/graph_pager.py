"""Paginated follower / following lists with joined profile summaries."""
import logging
from typing import Any

from opentelemetry import trace

from soundgraph.engine.errors import InvalidArgument, NotFound
from soundgraph.engine.store import Relation, Storage
from soundgraph.engine.validation import DEFAULT_MAX_PAGE_SIZE, page_window, require_id
from soundgraph.schemas import ProfileSummary
from soundgraph.telemetry import GRAPH_PAGE_SIZE

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _relation(value: Any) -> Relation:
    try:
        return Relation(value)
    except ValueError:
        raise InvalidArgument(f"Unknown relation {value!r}") from None


class GraphPager:
    def __init__(self, store: Storage, max_page_size: int = DEFAULT_MAX_PAGE_SIZE):
        self.store = store
        self.max_page_size = max_page_size

    async def page(
        self,
        owner_id: str,
        relation: Any,
        limit: Any = 20,
        page_number: Any = 0,
    ) -> list[ProfileSummary]:
        """
        Return the `page_number`-th window of `limit` profiles on one side
        of `owner_id`'s follow edges.

        An unknown owner and an empty window both give []; callers that need
        a 404 use page_checked().
        """
        relation = _relation(relation)
        owner_id = require_id(owner_id, "profile id")
        skip, limit = page_window(limit, page_number, self.max_page_size)

        with tracer.start_as_current_span("graph_page") as span:
            span.set_attribute("graph.owner_id", owner_id)
            span.set_attribute("graph.relation", relation.value)
            span.set_attribute("graph.skip", skip)
            users = await self.store.page_relation(owner_id, relation, skip, limit)

        GRAPH_PAGE_SIZE.labels(relation=relation.value).observe(len(users))
        return [
            ProfileSummary(id=u.user_id, name=u.name, avatar=u.avatar_url)
            for u in users
        ]

    async def page_checked(
        self,
        owner_id: str,
        relation: Any,
        limit: Any = 20,
        page_number: Any = 0,
    ) -> list[ProfileSummary]:
        """Like page(), but a missing owner is NotFound instead of []."""
        relation = _relation(relation)
        owner_id = require_id(owner_id, "profile id")
        page_window(limit, page_number, self.max_page_size)

        if await self.store.get_user(owner_id) is None:
            raise NotFound("Profile not found!")
        return await self.page(owner_id, relation, limit, page_number)
