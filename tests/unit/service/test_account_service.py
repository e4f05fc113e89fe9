import uuid
import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from tokfox.core.errors import (
    InvalidPushEndpointError,
    MissingAliasError,
    WrongAliasTypeError,
    WrongAliasValueError,
)
from tokfox.models.account import AliasType
from tokfox.services import account as account_service


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_account(db_session: AsyncSession, alias, push_endpoint):
    account = await account_service.create_account(
        db_session, {"alias": alias, "pushEndpoint": push_endpoint}
    )
    assert isinstance(account.id, uuid.UUID)
    assert account.created_at is not None
    assert len(account.alias) == 1
    assert account.alias[0].type == AliasType.MSISDN
    assert account.alias[0].value == alias["value"]
    assert account.alias[0].verified is False
    assert [(e.invitation, e.rejection, e.description) for e in account.push_endpoints] == [
        ("https://a/i", "https://a/r", None)
    ]
    assert account.invitation == []


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("data, error", [
    ({"pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, MissingAliasError),
    ({"alias": {"type": "email", "value": "a@b.c"},
      "pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, WrongAliasTypeError),
    ({"alias": {"type": "msisdn", "value": "not-a-number"},
      "pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, WrongAliasValueError),
    ({"alias": {"type": "msisdn", "value": "+14155552671"}}, InvalidPushEndpointError),
    ({"alias": {"type": "msisdn", "value": "+14155552671"},
      "pushEndpoint": {"invitation": "ftp://x", "rejection": "https://a/r"}}, InvalidPushEndpointError),
])
async def test_create_account_rejects_invalid_input(db_session: AsyncSession, data, error):
    with pytest.raises(error):
        await account_service.create_account(db_session, data)
    assert await account_service.account_exists(db_session, {"type": "msisdn", "value": "+14155552671"}) is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_account_exists(db_session: AsyncSession, alias, push_endpoint):
    assert await account_service.account_exists(db_session, alias) is False
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    assert await account_service.account_exists(db_session, alias) is True
    other = {"type": "msisdn", "value": "+34600123456"}
    assert await account_service.account_exists(db_session, other) is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_account_exists_validates_alias(db_session: AsyncSession):
    with pytest.raises(MissingAliasError):
        await account_service.account_exists(db_session, {"type": "msisdn"})


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_account(db_session: AsyncSession, alias, push_endpoint):
    assert await account_service.get_account(db_session, alias) is None
    created = await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    fetched = await account_service.get_account(db_session, alias)
    assert fetched is not None and fetched.id == created.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_without_changes_is_noop(db_session: AsyncSession, alias):
    # No account exists and nothing is fetched: the no-op short-circuits.
    assert await account_service.update_account(db_session, alias, {}) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_validates_lookup_alias_first(db_session: AsyncSession):
    with pytest.raises(MissingAliasError):
        await account_service.update_account(db_session, None, {})


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_appends_push_endpoint(db_session: AsyncSession, alias, push_endpoint):
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    new_endpoint = {"invitation": "https://b/i", "rejection": "https://b/r", "description": "tablet"}
    account = await account_service.update_account(db_session, alias, {"pushEndpoint": new_endpoint})
    assert account is not None
    assert [e.invitation for e in account.push_endpoints] == ["https://a/i", "https://b/i"]
    assert account.push_endpoints[1].description == "tablet"


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("duplicate", [
    {"invitation": "https://a/i", "rejection": "https://other/r"},
    {"invitation": "https://other/i", "rejection": "https://a/r"},
])
async def test_update_ignores_duplicate_push_endpoint(db_session: AsyncSession, alias, push_endpoint, duplicate):
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    account = await account_service.update_account(db_session, alias, {"push_endpoint": duplicate})
    assert account is not None
    assert len(account.push_endpoints) == 1
    refetched = await account_service.get_account(db_session, alias)
    assert len(refetched.push_endpoints) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_adds_alias(db_session: AsyncSession, alias, push_endpoint):
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    second = {"type": "msisdn", "value": "+34600123456"}
    account = await account_service.update_account(db_session, alias, {"alias": second})
    assert [(a.value, a.verified) for a in account.alias] == [(alias["value"], False), (second["value"], False)]
    # The account is now reachable through either alias.
    assert await account_service.account_exists(db_session, second) is True
    again = await account_service.update_account(db_session, second, {"alias": alias})
    assert len(again.alias) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_rejects_invalid_push_endpoint(db_session: AsyncSession, alias, push_endpoint):
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    with pytest.raises(InvalidPushEndpointError):
        await account_service.update_account(db_session, alias, {"push_endpoint": {"invitation": "https://b/i"}})


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_unknown_account(db_session: AsyncSession, alias, push_endpoint):
    assert await account_service.update_account(db_session, alias, {"push_endpoint": push_endpoint}) is None


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("data, error", [
    ({"alias": "msisdn:+14155552671",
      "pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, MissingAliasError),
    ({"alias": {"type": 5, "value": "+14155552671"},
      "pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, WrongAliasTypeError),
    ({"alias": {"type": "msisdn", "value": 14155552671},
      "pushEndpoint": {"invitation": "https://a/i", "rejection": "https://a/r"}}, WrongAliasValueError),
    ({"alias": {"type": "msisdn", "value": "+14155552671"}, "pushEndpoint": "https://a/i"},
     InvalidPushEndpointError),
    ("not an object", MissingAliasError),
    (None, MissingAliasError),
])
async def test_create_account_maps_wrong_shapes_to_coded_errors(db_session: AsyncSession, data, error):
    with pytest.raises(error):
        await account_service.create_account(db_session, data)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_maps_wrong_shapes_to_coded_errors(db_session: AsyncSession, alias, push_endpoint):
    await account_service.create_account(db_session, {"alias": alias, "push_endpoint": push_endpoint})
    with pytest.raises(InvalidPushEndpointError):
        await account_service.update_account(db_session, alias, {"pushEndpoint": "https://b/i"})
    with pytest.raises(WrongAliasValueError):
        await account_service.update_account(db_session, alias, {"alias": {"type": "msisdn", "value": 1}})
    # A body that is not an object carries nothing to change.
    assert await account_service.update_account(db_session, alias, ["https://b/i"]) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_account_with_formatted_msisdn(db_session: AsyncSession, push_endpoint):
    value = "+1 415 555 2671" + " " * 60
    account = await account_service.create_account(
        db_session, {"alias": {"type": "msisdn", "value": value}, "push_endpoint": push_endpoint}
    )
    assert account.alias[0].value == value
