from __future__ import annotations

from muusmart.core.logging import get_logger
from muusmart.schemas.enums import Route

logger = get_logger(__name__)


class Navigator:
    """Records view-transition requests; the front end reads ``current_route`` and performs them."""

    def __init__(self) -> None:
        self.current_route: Route | None = None
        self.history: list[Route] = []

    def go_to(self, route: Route) -> None:
        self.current_route = route
        self.history.append(route)
        logger.info("navigation_requested", route=route.value)
