"""Repository helpers for the Account model.

Lookups follow the three keys accounts are addressed by: an alias
``(type, value)`` pair, the account id, or the version of a linked invitation.
"""

import uuid
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from tokfox.models.account import Account, AccountAlias, AliasType, Invitation

__all__ = [
    "save",
    "count_by_alias",
    "find_one_by_alias",
    "get_by_id",
    "find_one_by_invitation",
    "replace_invitations",
]


async def save(session: AsyncSession, account: Account) -> Account:
    session.add(account)
    # Flush, then refresh so server defaults (created_at) are loaded eagerly;
    # a lazy load during serialization raises MissingGreenlet under asyncio.
    await session.flush()
    await session.refresh(account)
    return account


async def count_by_alias(session: AsyncSession, alias_type: AliasType, value: str) -> int:
    stmt = (
        select(func.count(func.distinct(AccountAlias.account_id)))
        .where(AccountAlias.type == alias_type, AccountAlias.value == value)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def find_one_by_alias(session: AsyncSession, alias_type: AliasType, value: str) -> Optional[Account]:
    stmt = (
        select(Account)
        .join(AccountAlias, AccountAlias.account_id == Account.id)
        .where(AccountAlias.type == alias_type, AccountAlias.value == value)
        .order_by(Account.created_at)
        .limit(1)
    )
    res = await session.execute(stmt)
    return res.scalars().first()


async def get_by_id(session: AsyncSession, account_id: uuid.UUID) -> Optional[Account]:
    res = await session.execute(select(Account).where(Account.id == account_id))
    return res.scalar_one_or_none()


async def find_one_by_invitation(session: AsyncSession, version: str) -> Optional[Account]:
    stmt = (
        select(Account)
        .join(Invitation, Invitation.account_id == Account.id)
        .where(Invitation.version == version)
        .order_by(Account.created_at)
        .limit(1)
    )
    res = await session.execute(stmt)
    return res.scalars().first()


async def replace_invitations(
    session: AsyncSession,
    account: Account,
    invitations: Sequence[Invitation],
) -> Account:
    # delete-orphan cascade removes the rows dropped from the collection
    account.invitation = list(invitations)
    await session.flush()
    return account
