"""OfferBookService: posting, cancelling and matching P2P offers.

Sell offers are backed by escrow: the full ``total_amount`` is locked under
the offer id before the offer row is written, and whatever is still
``remaining_amount`` is released on cancel. Buy offers hold no escrow; the
taker's coins are locked under the trade id and settled in the same
transaction as the match.

Every mutation is one transaction: commit on success, rollback on any error.
"""

import logging
from collections.abc import Callable
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.domain.repository import ProfileRepositoryProtocol
from src.p2p_account.infrastructure.persistence import ProfileRepository
from src.p2p_common.enums import OfferSide, OfferStatus
from src.p2p_common.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PaymentNotConfirmedError,
)
from src.p2p_common.id_generator import generate_id
from src.p2p_escrow.domain.models import EscrowRef
from src.p2p_escrow.domain.service import EscrowManager
from src.p2p_offers.application.schemas import (
    CancelOfferResponse,
    CreateOfferRequest,
    OfferListResponse,
    OfferResponse,
    TradeSettlementResponse,
)
from src.p2p_offers.domain.models import Offer, TradeSettlement
from src.p2p_offers.domain.payment_methods import validate_payment_details
from src.p2p_offers.domain.repository import (
    OfferRepositoryProtocol,
    PaymentConfirmationProtocol,
)
from src.p2p_offers.domain.rules import OfferLimits, check_trade_amount, validate_offer_terms
from src.p2p_offers.infrastructure.payment_confirmations import PaymentConfirmationRepository
from src.p2p_offers.infrastructure.persistence import OfferRepository
from src.p2p_referral.domain.service import CommissionAccrual

logger = logging.getLogger(__name__)


class OfferBookService:
    def __init__(
        self,
        offers: OfferRepositoryProtocol | None = None,
        confirmations: PaymentConfirmationProtocol | None = None,
        profiles: ProfileRepositoryProtocol | None = None,
        escrow: EscrowManager | None = None,
        commission: CommissionAccrual | None = None,
        limits: OfferLimits | None = None,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self._offers: OfferRepositoryProtocol = offers or OfferRepository()
        self._confirmations: PaymentConfirmationProtocol = (
            confirmations or PaymentConfirmationRepository()
        )
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._escrow = escrow or EscrowManager()
        self._commission = commission or CommissionAccrual()
        self._limits = limits or OfferLimits.from_settings()
        self._new_id = id_factory

    # ------------------------------------------------------------------
    # Posting
    # ------------------------------------------------------------------

    async def create_sell_offer(
        self,
        db: AsyncSession,
        user_id: str,
        req: CreateOfferRequest,
        reference_price: Decimal,
    ) -> OfferResponse:
        return await self._create(db, user_id, OfferSide.SELL, req, reference_price)

    async def create_buy_offer(
        self,
        db: AsyncSession,
        user_id: str,
        req: CreateOfferRequest,
        reference_price: Decimal,
    ) -> OfferResponse:
        return await self._create(db, user_id, OfferSide.BUY, req, reference_price)

    async def _create(
        self,
        db: AsyncSession,
        user_id: str,
        side: OfferSide,
        req: CreateOfferRequest,
        reference_price: Decimal,
    ) -> OfferResponse:
        # All checks run before anything is locked or written
        validate_offer_terms(
            req.total_amount,
            req.unit_price,
            req.min_trade_amount,
            req.max_trade_amount,
            reference_price,
            self._limits,
        )
        details = (
            validate_payment_details(req.payment_details.model_dump())
            if req.payment_details is not None
            else None
        )

        offer = Offer(
            id=self._new_id(),
            owner_id=user_id,
            side=side,
            total_amount=req.total_amount,
            remaining_amount=req.total_amount,
            unit_price=req.unit_price,
            min_trade_amount=req.min_trade_amount,
            max_trade_amount=req.max_trade_amount,
            reference_price=reference_price,
            payment_details=details,
            terms=req.terms,
        )
        try:
            await self._profiles.get_or_create(db, user_id)
            if side == OfferSide.SELL:
                await self._escrow.open_sell_escrow(db, user_id, offer.total_amount, ref=offer.id)
            saved = await self._offers.insert(db, offer)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Offer posted: id=%s side=%s owner=%s amount=%s price=%s",
            saved.id, side.value, user_id, saved.total_amount, saved.unit_price,
        )
        return OfferResponse.from_offer(saved)

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    async def cancel_offer(
        self, db: AsyncSession, offer_id: str, requester_id: str
    ) -> CancelOfferResponse:
        try:
            offer = await self._offers.get_for_update(db, offer_id)
            if offer is None:
                raise NotFoundError("Offer", offer_id)
            if offer.owner_id != requester_id:
                raise ForbiddenError("Only the offer owner can cancel it")
            if not offer.is_open:
                raise InvalidStateError(f"Offer {offer_id} is {offer.status.value}")

            released = Decimal(0)
            if offer.side == OfferSide.SELL and offer.remaining_amount > 0:
                released = offer.remaining_amount
                escrow = EscrowRef(ref=offer.id, owner_id=offer.owner_id)
                await self._escrow.release(db, escrow, released)

            updated = await self._offers.update_status(
                db, offer_id, OfferStatus.OPEN, OfferStatus.CANCELLED
            )
            if updated is None:
                raise InvalidStateError(f"Offer {offer_id} changed concurrently")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Offer cancelled: id=%s released=%s", offer_id, released)
        return CancelOfferResponse(
            offer_id=offer_id, status=OfferStatus.CANCELLED.value, released_amount=released
        )

    # ------------------------------------------------------------------
    # Match
    # ------------------------------------------------------------------

    async def match_trade(
        self,
        db: AsyncSession,
        offer_id: str,
        taker_id: str,
        trade_amount: Decimal,
    ) -> TradeSettlementResponse:
        try:
            settlement = await self._match_inner(db, offer_id, taker_id, trade_amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Trade settled: trade=%s offer=%s seller=%s buyer=%s amount=%s",
            settlement.trade_id, offer_id, settlement.seller_id,
            settlement.buyer_id, trade_amount,
        )
        return TradeSettlementResponse.from_settlement(settlement)

    async def _match_inner(
        self,
        db: AsyncSession,
        offer_id: str,
        taker_id: str,
        amount: Decimal,
    ) -> TradeSettlement:
        offer = await self._offers.get_for_update(db, offer_id)
        if offer is None:
            raise NotFoundError("Offer", offer_id)
        if not offer.is_open:
            raise InvalidStateError(f"Offer {offer_id} is {offer.status.value}")
        if offer.owner_id == taker_id:
            raise ForbiddenError("Cannot trade against your own offer")
        check_trade_amount(offer, amount)

        trade_id = self._new_id()
        confirmation_id = await self._confirmations.consume(
            db, offer.id, taker_id, amount, trade_id
        )
        if confirmation_id is None:
            raise PaymentNotConfirmedError(offer.id, amount)

        updated = await self._offers.decrement_remaining(db, offer.id, amount)
        if updated is None:
            raise InvalidStateError(f"Offer {offer_id} changed concurrently")

        await self._profiles.get_or_create(db, taker_id)
        if offer.side == OfferSide.SELL:
            seller_id, buyer_id = offer.owner_id, taker_id
            escrow = EscrowRef(ref=offer.id, owner_id=offer.owner_id)
        else:
            seller_id, buyer_id = taker_id, offer.owner_id
            escrow = await self._escrow.open_sell_escrow(
                db, taker_id, amount, ref=trade_id, offer_id=offer.id
            )
        buyer_entry_id = await self._escrow.settle(db, escrow, amount, buyer_id, trade_id)

        await self._profiles.increment_total_trades(db, [seller_id, buyer_id])
        commission = await self._commission.accrue_trade(db, taker_id, amount, trade_id)

        return TradeSettlement(
            trade_id=trade_id,
            offer_id=offer.id,
            side=offer.side,
            seller_id=seller_id,
            buyer_id=buyer_id,
            amount=amount,
            unit_price=offer.unit_price,
            buyer_entry_id=buyer_entry_id,
            offer_remaining=updated.remaining_amount,
            offer_status=updated.status,
            commission=commission,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_offer(self, db: AsyncSession, offer_id: str) -> OfferResponse:
        offer = await self._offers.get(db, offer_id)
        if offer is None:
            raise NotFoundError("Offer", offer_id)
        return OfferResponse.from_offer(offer)

    async def list_open_offers(
        self,
        db: AsyncSession,
        side: OfferSide | None,
        cursor: str | None,
        limit: int,
    ) -> OfferListResponse:
        offers = await self._offers.list_open(db, side, cursor, limit + 1)
        return _page(offers, limit)

    async def list_my_offers(
        self,
        db: AsyncSession,
        user_id: str,
        status: OfferStatus | None,
        cursor: str | None,
        limit: int,
    ) -> OfferListResponse:
        offers = await self._offers.list_by_owner(db, user_id, status, cursor, limit + 1)
        return _page(offers, limit)


def _page(offers: list[Offer], limit: int) -> OfferListResponse:
    has_more = len(offers) > limit
    page = offers[:limit]
    return OfferListResponse(
        items=[OfferResponse.from_offer(o) for o in page],
        next_cursor=page[-1].id if has_more and page else None,
        has_more=has_more,
    )
