import uuid
from typing import Any
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from tokfox.api import deps
from tokfox.core.errors import storage_errors
from tokfox.schemas.account import (
    AccountExistsRead,
    AccountRead,
    AliasPayload,
    InvitationRead,
)
from tokfox.services.account import (
    account_changes,
    create_account,
    account_exists,
    get_account,
    update_account,
    add_invitation,
)

router = APIRouter(prefix="/accounts", tags=["accounts"])


def alias_query(
    type: str | None = Query(default=None, description="Alias type, e.g. 'msisdn'"),
    value: str | None = Query(default=None, description="Alias value, e.g. '+14155552671'"),
) -> AliasPayload:
    return AliasPayload(type=type, value=value)


@router.post("/", response_model=AccountRead, status_code=status.HTTP_201_CREATED,
             summary="Create an account",
             description="Create an account with one unverified alias and one push endpoint.")
async def create_account_route(payload: Any = Body(default=None), session: AsyncSession = Depends(deps.get_db)):
    account = await create_account(session, payload)
    with storage_errors():
        await session.commit()
    return account


@router.get("/exists", response_model=AccountExistsRead, summary="Check whether an alias is registered")
async def account_exists_route(
    alias: AliasPayload = Depends(alias_query),
    session: AsyncSession = Depends(deps.get_db),
):
    return AccountExistsRead(account_exists=await account_exists(session, alias))


@router.get("/", response_model=AccountRead, summary="Get the account owning an alias")
async def get_account_route(
    alias: AliasPayload = Depends(alias_query),
    session: AsyncSession = Depends(deps.get_db),
):
    account = await get_account(session, alias)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.patch("/", response_model=AccountRead,
              summary="Add an alias or push endpoint",
              description="Attach a new alias and/or push endpoint to the account owning the alias in the query. "
                          "Push endpoints repeating an existing invitation or rejection URL are ignored.")
async def update_account_route(
    payload: Any = Body(default=None),
    alias: AliasPayload = Depends(alias_query),
    session: AsyncSession = Depends(deps.get_db),
):
    account = await update_account(session, alias, payload)
    if account is None:
        changes = account_changes(payload)
        if changes.alias is None and changes.push_endpoint is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        raise HTTPException(status_code=404, detail="Account not found")
    with storage_errors():
        await session.commit()
    return account


@router.put("/{account_id}/invitation", response_model=InvitationRead,
            summary="Link an invitation to an account",
            description="Replace the invitation of the account and return it.")
async def add_invitation_route(
    account_id: uuid.UUID,
    payload: Any = Body(default=None),
    session: AsyncSession = Depends(deps.get_db),
):
    invitation = await add_invitation(session, account_id, payload)
    if invitation is None:
        raise HTTPException(status_code=404, detail="Account not found")
    with storage_errors():
        await session.commit()
    return invitation
