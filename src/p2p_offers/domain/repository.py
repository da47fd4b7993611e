"""Offer Book repository Protocols: offers and external payment confirmations."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import OfferSide, OfferStatus
from src.p2p_offers.domain.models import Offer


class OfferRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, offer: Offer) -> Offer: ...

    async def get(self, db: AsyncSession, offer_id: str) -> Offer | None: ...

    async def get_for_update(self, db: AsyncSession, offer_id: str) -> Offer | None: ...

    async def decrement_remaining(
        self, db: AsyncSession, offer_id: str, amount: Decimal
    ) -> Offer | None: ...

    async def update_status(
        self,
        db: AsyncSession,
        offer_id: str,
        from_status: OfferStatus,
        to_status: OfferStatus,
    ) -> Offer | None: ...

    async def list_open(
        self,
        db: AsyncSession,
        side: OfferSide | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Offer]: ...

    async def list_by_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        status: OfferStatus | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Offer]: ...


class PaymentConfirmationProtocol(Protocol):
    async def consume(
        self,
        db: AsyncSession,
        offer_id: str,
        taker_id: str,
        amount: Decimal,
        trade_id: str,
    ) -> int | None:
        """Mark one matching unconsumed confirmation as used; None if there is none."""
        ...
