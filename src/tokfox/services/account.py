"""Account service layer.

Every operation validates its input first and only then talks to the store,
so validation errors never cost a round trip. Store failures surface as
:class:`~tokfox.core.errors.StorageError`; lookups that find nothing return
``None`` rather than raising. Functions flush but never commit: committing
is left to the caller that owns the session.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from tokfox.core.errors import InvalidInvitationError, storage_errors
from tokfox.core.validation import (
    AliasLike,
    InvitationLike,
    ensure_valid_alias,
    ensure_valid_invitation,
    ensure_valid_push_endpoint,
)
from tokfox.models.account import Account, AccountAlias, AliasType, Invitation, PushEndpoint
from tokfox.repositories import account as account_repo
from tokfox.schemas.account import (
    AccountCreate,
    AccountUpdate,
    PushEndpointPayload,
)

__all__ = [
    "account_changes",
    "create_account",
    "account_exists",
    "get_account",
    "update_account",
    "add_invitation",
    "remove_invitation",
    "get_by_invitation",
]

logger = logging.getLogger(__name__)

AccountData = Union[AccountCreate, Mapping[str, Any], None]


def account_changes(data: Any) -> AccountUpdate:
    """Read the alias / push endpoint parts of a request body of any shape.

    Anything that is not a mapping carries neither part.
    """
    if isinstance(data, AccountCreate):
        return AccountUpdate(alias=data.alias, push_endpoint=data.push_endpoint)
    if isinstance(data, Mapping):
        return AccountUpdate.model_validate(data)
    return AccountUpdate()


def _is_duplicate_endpoint(account: Account, endpoint: PushEndpointPayload) -> bool:
    return any(
        existing.invitation == endpoint.invitation or existing.rejection == endpoint.rejection
        for existing in account.push_endpoints
    )


def _has_alias(account: Account, alias_type: AliasType, value: str) -> bool:
    return any(a.type == alias_type and a.value == value for a in account.alias)


async def create_account(
    session: AsyncSession,
    data: AccountData,
) -> Account:
    data = account_changes(data)
    alias = ensure_valid_alias(data.alias)
    endpoint = ensure_valid_push_endpoint(data.push_endpoint)

    account = Account(
        alias=[AccountAlias(type=AliasType(alias.type), value=alias.value, verified=False)],
        push_endpoints=[
            PushEndpoint(
                invitation=endpoint.invitation,
                rejection=endpoint.rejection,
                description=endpoint.description,
            )
        ],
        invitation=[],
    )
    with storage_errors():
        account = await account_repo.save(session, account)
    logger.info("Account created", extra={"account_id": account.id, "alias_type": alias.type})
    return account


async def account_exists(session: AsyncSession, alias: AliasLike) -> bool:
    payload = ensure_valid_alias(alias)
    with storage_errors():
        count = await account_repo.count_by_alias(session, AliasType(payload.type), payload.value)
    return count > 0


async def get_account(session: AsyncSession, alias: AliasLike) -> Optional[Account]:
    payload = ensure_valid_alias(alias)
    with storage_errors():
        return await account_repo.find_one_by_alias(session, AliasType(payload.type), payload.value)


async def update_account(
    session: AsyncSession,
    alias: AliasLike,
    data: AccountData,
) -> Optional[Account]:
    """Attach a new alias and/or push endpoint to the account owning ``alias``.

    Returns ``None`` when there is nothing to update or no such account.
    A push endpoint sharing its invitation or rejection URL with an existing
    one is ignored, as is an alias the account already holds.
    """
    lookup = ensure_valid_alias(alias)
    data = account_changes(data)
    if data.alias is None and data.push_endpoint is None:
        return None

    new_alias = ensure_valid_alias(data.alias) if data.alias is not None else None
    new_endpoint = ensure_valid_push_endpoint(data.push_endpoint) if data.push_endpoint is not None else None

    with storage_errors():
        account = await account_repo.find_one_by_alias(session, AliasType(lookup.type), lookup.value)
    if account is None:
        return None

    changed = False
    if new_endpoint is not None and not _is_duplicate_endpoint(account, new_endpoint):
        account.push_endpoints.append(
            PushEndpoint(
                invitation=new_endpoint.invitation,
                rejection=new_endpoint.rejection,
                description=new_endpoint.description,
            )
        )
        changed = True
    if new_alias is not None:
        alias_type = AliasType(new_alias.type)
        if not _has_alias(account, alias_type, new_alias.value):
            account.alias.append(AccountAlias(type=alias_type, value=new_alias.value, verified=False))
            changed = True

    if not changed:
        return account
    with storage_errors():
        account = await account_repo.save(session, account)
    logger.info("Account updated", extra={"account_id": account.id})
    return account


def _to_invitations(invitation: Union[InvitationLike, Sequence[InvitationLike]]) -> list[Invitation]:
    if isinstance(invitation, Sequence) and not isinstance(invitation, (str, bytes)):
        items = list(invitation)
    else:
        items = [invitation]
    if not items:
        raise InvalidInvitationError()
    result = []
    for item in items:
        payload = ensure_valid_invitation(item)
        result.append(Invitation(version=payload.version, payload=payload.model_dump(mode="json")))
    return result


async def add_invitation(
    session: AsyncSession,
    account_id: uuid.UUID,
    invitation: Union[InvitationLike, Sequence[InvitationLike]],
) -> Optional[Invitation]:
    """Replace the invitation slot of an account and return its first entry."""
    invitations = _to_invitations(invitation)
    with storage_errors():
        account = await account_repo.get_by_id(session, account_id)
        if account is None:
            return None
        account = await account_repo.replace_invitations(session, account, invitations)
    logger.info(
        "Invitation added",
        extra={"account_id": account.id, "versions": [i.version for i in invitations]},
    )
    return account.invitation[0] if account.invitation else None


async def remove_invitation(session: AsyncSession, invitation_id: str) -> None:
    with storage_errors():
        account = await account_repo.find_one_by_invitation(session, invitation_id)
        if account is None:
            return
        await account_repo.replace_invitations(session, account, [])
    logger.info("Invitation removed", extra={"account_id": account.id, "version": invitation_id})


async def get_by_invitation(session: AsyncSession, invitation_id: str) -> Optional[Account]:
    with storage_errors():
        return await account_repo.find_one_by_invitation(session, invitation_id)
