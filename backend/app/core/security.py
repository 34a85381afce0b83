"""Owner identity handed over by the upstream session layer."""

from fastapi import Header, HTTPException, status


async def get_current_owner(x_owner_id: str = Header(default="")) -> str:
    owner_id = x_owner_id.strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return owner_id
