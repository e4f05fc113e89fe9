import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tokfox.db.session import Base


class AliasType(str, enum.Enum):
    """Recognized alias kinds. MSISDN is a phone number in international format."""
    MSISDN = "msisdn"


class Account(Base):
    """Account record together with its aliases, push endpoints and invitation.

    Child collections keep insertion order through their ``position`` column
    and are loaded eagerly so they can be read outside of an awaited query.
    Replacing a collection deletes the rows that were dropped from it.
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    alias: Mapped[list["AccountAlias"]] = relationship(
        back_populates="account",
        order_by="AccountAlias.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    push_endpoints: Mapped[list["PushEndpoint"]] = relationship(
        back_populates="account",
        order_by="PushEndpoint.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    invitation: Mapped[list["Invitation"]] = relationship(
        back_populates="account",
        order_by="Invitation.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class AccountAlias(Base):
    __tablename__ = "account_aliases"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    type: Mapped[AliasType] = mapped_column(Enum(AliasType, values_callable=lambda e: [m.value for m in e]))
    value: Mapped[str] = mapped_column(String(255), index=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)

    account: Mapped[Account] = relationship(back_populates="alias")


class PushEndpoint(Base):
    __tablename__ = "push_endpoints"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    invitation: Mapped[str] = mapped_column(Text)
    rejection: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    account: Mapped[Account] = relationship(back_populates="push_endpoints")


class Invitation(Base):
    """Opaque invitation document linked to an account, looked up by ``version``."""

    __tablename__ = "invitations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    version: Mapped[str] = mapped_column(String(255), index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    account: Mapped[Account] = relationship(back_populates="invitation")
