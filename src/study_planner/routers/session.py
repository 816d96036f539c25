from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_owner_id, get_session
from ..schemas import SessionOut
from ..session import SessionProvider

router = APIRouter(
    prefix="/api/v1/session",
    tags=["session"],
)


# PUBLIC_INTERFACE
@router.get("/", response_model=SessionOut, summary="Current Owner")
def current_session(
    owner_id: str = Depends(get_owner_id),
    session: SessionProvider = Depends(get_session),
) -> SessionOut:
    """
    Return the owner id this client is scoped to, minting a guest id on first use.
    """
    return SessionOut(owner_id=owner_id, guest=not session.authenticated)
