"""Lookup of the tool servers configured for a caller."""

import logging
from typing import Mapping, Optional, Sequence

from ..schemas.generation import ToolServerDescriptor

logger = logging.getLogger(__name__)


class ToolServerProvider:
    """Read-only catalogue of external tool servers.

    Built once at startup from settings. A caller with a per-user entry gets
    those servers; everyone else gets the shared defaults.
    """

    def __init__(
        self,
        defaults: Sequence[ToolServerDescriptor] = (),
        per_user: Optional[Mapping[str, Sequence[ToolServerDescriptor]]] = None,
    ):
        self._defaults = tuple(defaults)
        self._per_user = {user_id: tuple(servers) for user_id, servers in (per_user or {}).items()}
        logger.info(
            f"Tool servers configured: {len(self._defaults)} shared, {len(self._per_user)} per-user entries"
        )

    def for_user(self, user_id: str) -> tuple[ToolServerDescriptor, ...]:
        return self._per_user.get(user_id, self._defaults)

    def resolve(
        self,
        user_id: str,
        requested: Optional[Sequence[ToolServerDescriptor]],
    ) -> tuple[ToolServerDescriptor, ...]:
        """Servers for one request: explicit request servers win over configuration.

        An explicit empty list means no servers.
        """
        if requested is not None:
            return tuple(requested)
        return self.for_user(user_id)
