from __future__ import annotations

import logging
import re
import uuid
from typing import Callable, Optional

logger = logging.getLogger(__name__)

GUEST_PREFIX = "guest_"
GUEST_COOKIE = "planner_guest_id"
GUEST_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

_GUEST_RE = re.compile(r"^guest_[0-9a-f]{32}$")


def mint_guest_id() -> str:
    return f"{GUEST_PREFIX}{uuid.uuid4().hex}"


def is_guest_id(owner_id: str) -> bool:
    return bool(_GUEST_RE.match(owner_id))


class SessionProvider:
    """
    Resolves the single owner id active in one client context.

    An authenticated identity always wins. Without one, the guest id the
    client already holds is reused; if there is none (or it is malformed) a
    new guest id is minted and handed to ``persist`` so the client keeps it.
    """

    def __init__(
        self,
        authenticated_id: Optional[str],
        stored_guest_id: Optional[str],
        persist: Callable[[str], None],
    ) -> None:
        self._authenticated_id = authenticated_id or None
        self._guest_id = stored_guest_id if stored_guest_id and is_guest_id(stored_guest_id) else None
        self._persist = persist

    @property
    def authenticated(self) -> bool:
        return self._authenticated_id is not None

    def current_owner_id(self) -> Optional[str]:
        return self._authenticated_id or self._guest_id

    def ensure_owner_id(self) -> str:
        owner_id = self.current_owner_id()
        if owner_id is None:
            owner_id = mint_guest_id()
            self._persist(owner_id)
            self._guest_id = owner_id
            logger.info("Minted guest session owner=%s", owner_id)
        return owner_id
