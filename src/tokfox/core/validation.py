"""Alias, push endpoint and invitation validation.

Two flavours of the alias and push endpoint checks are exposed:

* ``ensure_valid_*`` raise the matching :class:`~tokfox.core.errors.ValidationError`
  subclass and return the parsed payload, for callers that want the error code;
* ``validate_*`` return ``True`` / ``False`` and never raise.

Inputs are read field by field without coercion, so any shape (a payload
model, a mapping, ``None``, a bare string) ends in one of the coded errors.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Optional, Union

import phonenumbers
from pydantic import AnyHttpUrl, BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tokfox.core.errors import (
    InvalidInvitationError,
    InvalidPushEndpointError,
    MissingAliasError,
    ValidationError,
    WrongAliasTypeError,
    WrongAliasValueError,
)
from tokfox.models.account import AliasType
from tokfox.schemas.account import AliasPayload, InvitationPayload, PushEndpointPayload

__all__ = [
    "ensure_valid_alias",
    "ensure_valid_push_endpoint",
    "ensure_valid_invitation",
    "validate_alias",
    "validate_push_endpoint",
    "is_valid_alias",
]

AliasLike = Union[AliasPayload, Mapping[str, Any], None]
PushEndpointLike = Union[PushEndpointPayload, Mapping[str, Any], None]
InvitationLike = Union[InvitationPayload, Mapping[str, Any]]

MAX_INVITATION_VERSION = 255

_http_url = TypeAdapter(AnyHttpUrl)
# AnyHttpUrl normalizes "https:host" and "http:\\host"; the raw text must
# already read scheme://host.
_SCHEME_AND_HOST = re.compile(r"^https?://[^/\\?#@\s]", re.IGNORECASE)


def _fields(obj: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, Mapping):
        return obj
    return None


def _is_msisdn(value: str) -> bool:
    # No default region: only numbers in international (+CC) format parse.
    try:
        phonenumbers.parse(value, None)
    except phonenumbers.NumberParseException:
        return False
    return True


_ALIAS_VALUE_CHECKS: dict[AliasType, Callable[[str], bool]] = {
    AliasType.MSISDN: _is_msisdn,
}


def _is_http_url(value: Any) -> bool:
    if not isinstance(value, str) or not _SCHEME_AND_HOST.match(value):
        return False
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def ensure_valid_alias(alias: AliasLike) -> AliasPayload:
    fields = _fields(alias)
    if fields is None:
        raise MissingAliasError()
    alias_type, value = fields.get("type"), fields.get("value")
    if not alias_type or not value:
        raise MissingAliasError()

    allowed = [t.value for t in AliasType]
    if not isinstance(alias_type, str) or alias_type not in allowed:
        raise WrongAliasTypeError(allowed)
    if not isinstance(value, str) or not _ALIAS_VALUE_CHECKS[AliasType(alias_type)](value):
        raise WrongAliasValueError(value)
    return AliasPayload(type=alias_type, value=value)


def ensure_valid_push_endpoint(endpoint: PushEndpointLike) -> PushEndpointPayload:
    fields = _fields(endpoint)
    if fields is None:
        raise InvalidPushEndpointError()
    invitation, rejection = fields.get("invitation"), fields.get("rejection")
    description = fields.get("description")
    if not _is_http_url(invitation) or not _is_http_url(rejection):
        raise InvalidPushEndpointError()
    if description is not None and not isinstance(description, str):
        raise InvalidPushEndpointError()
    return PushEndpointPayload(invitation=invitation, rejection=rejection, description=description)


def ensure_valid_invitation(invitation: InvitationLike) -> InvitationPayload:
    fields = _fields(invitation)
    if fields is None:
        raise InvalidInvitationError()
    version = fields.get("version")
    if not isinstance(version, str) or not version or len(version) > MAX_INVITATION_VERSION:
        raise InvalidInvitationError()
    try:
        return InvitationPayload.model_validate(dict(fields))
    except PydanticValidationError:
        raise InvalidInvitationError()


def validate_alias(alias: AliasLike) -> bool:
    try:
        ensure_valid_alias(alias)
    except ValidationError:
        return False
    return True


def validate_push_endpoint(endpoint: PushEndpointLike) -> bool:
    try:
        ensure_valid_push_endpoint(endpoint)
    except ValidationError:
        return False
    return True


is_valid_alias = validate_alias
