from fastapi import Depends, HTTPException, status
from app.utils.get_actor import Actor, get_current_actor


def require_role(roles: list[str]):
    async def role_checker(actor: Actor = Depends(get_current_actor)):
        if actor.role.lower() not in [r.lower() for r in roles]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied"
            )
        return actor
    return role_checker
