from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from tokfox.api import deps
from tokfox.core.errors import storage_errors
from tokfox.schemas.account import AccountRead
from tokfox.services.account import remove_invitation, get_by_invitation

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.delete("/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT,
               summary="Unlink an invitation",
               description="Clear the invitation of whichever account holds this version. Unknown versions are ignored.")
async def remove_invitation_route(invitation_id: str, session: AsyncSession = Depends(deps.get_db)):
    await remove_invitation(session, invitation_id)
    with storage_errors():
        await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{invitation_id}/account", response_model=AccountRead,
            summary="Get the account linked to an invitation")
async def get_by_invitation_route(invitation_id: str, session: AsyncSession = Depends(deps.get_db)):
    account = await get_by_invitation(session, invitation_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return account
