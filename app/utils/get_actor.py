from dataclasses import dataclass

from fastapi import Header, HTTPException, Request, status

from app.utils.logger import get_logger

logger = get_logger("auth.guard")

SYSTEM_ACTOR_NAME = "system"


@dataclass(frozen=True)
class Actor:
    id: str | None
    username: str
    role: str

    @property
    def display_role(self) -> str:
        return self.role.capitalize()


SYSTEM_ACTOR = Actor(id=None, username=SYSTEM_ACTOR_NAME, role="system")


async def get_current_actor(
    request: Request,
    x_user_id: str | None = Header(None),
    x_user_name: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Actor:
    """
    Identity is authenticated upstream (gateway / BaaS) and forwarded as
    headers. This dependency only refuses requests that arrive without it.
    """
    if not x_user_id:
        logger.warning("Request without forwarded identity", extra={"path": request.url.path})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )

    actor = Actor(
        id=x_user_id,
        username=x_user_name or x_user_id,
        role=(x_user_role or "client").lower(),
    )
    request.state.actor = actor
    return actor
