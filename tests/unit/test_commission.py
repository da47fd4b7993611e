"""Unit tests for commission arithmetic and CommissionAccrual."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.p2p_account.domain.models import UserProfile
from src.p2p_common.enums import CommissionSource, FundStatus
from src.p2p_referral.domain.commission import calc_commission, rate_bps
from src.p2p_referral.domain.service import CommissionAccrual
from tests.unit.fakes import FakeSession, World

D = Decimal


class TestCalcCommission:
    def test_rates_from_settings(self) -> None:
        assert rate_bps(CommissionSource.TRADE) == 200
        assert rate_bps(CommissionSource.CLAIM) == 150

    def test_trade_commission(self) -> None:
        assert calc_commission(D("20"), CommissionSource.TRADE) == D("0.4")

    def test_claim_commission(self) -> None:
        assert calc_commission(D("0.73"), CommissionSource.CLAIM) == D("0.01095")

    def test_floors_not_rounds(self) -> None:
        # 0.00000074 x 1.5% = 0.0000000111 -> 0.00000001
        assert calc_commission(D("0.00000074"), CommissionSource.CLAIM) == D("0.00000001")


class TestAccrual:
    async def test_no_referrer_no_commission(self, world: World) -> None:
        world.profiles.seed("u1")
        result = await world.commission.accrue_trade(world.session(), "u1", D("20"), "t1")
        assert result is None
        assert world.ledger.entries == {}

    async def test_unknown_user_no_commission(self, world: World) -> None:
        result = await world.commission.accrue_claim(world.session(), "ghost", D("0.73"), "e1")
        assert result is None

    async def test_accrues_on_edge_and_credits_referrer(self, world: World) -> None:
        world.profiles.seed("ref")
        world.profiles.seed("u1", referred_by="ref")
        await world.referrals.create_edge(world.session(), "ref", "u1", "CODE")
        db = world.session()

        result = await world.commission.accrue_trade(db, "u1", D("50"), "t9")

        assert result == D("1")
        assert db.savepoints == 1
        edge = world.referrals.edges["u1"]
        assert edge.accrued_trade_commission == D("1")
        assert edge.accrued_claim_commission == 0
        assert world.ledger.amount_in("ref", FundStatus.AVAILABLE) == D("1")
        [record] = world.ledger.transactions
        assert record.kind == "referral_commission"
        assert record.reference_id == "t9"
        assert world.ledger.entries[1].origin == "referral_commission"

    async def test_missing_edge_is_skipped(self, world: World) -> None:
        world.profiles.seed("u1", referred_by="ref")
        result = await world.commission.accrue_trade(world.session(), "u1", D("50"), "t1")
        assert result is None
        assert world.ledger.entries == {}

    async def test_commission_below_one_unit_is_skipped(self, world: World) -> None:
        world.profiles.seed("ref")
        world.profiles.seed("u1", referred_by="ref")
        await world.referrals.create_edge(world.session(), "ref", "u1", "CODE")
        result = await world.commission.accrue_claim(
            world.session(), "u1", D("0.00000001"), "e1"
        )
        assert result is None
        assert world.referrals.edges["u1"].accrued_claim_commission == 0

    async def test_errors_are_swallowed_and_logged(self, world: World, caplog) -> None:  # type: ignore[no-untyped-def]
        world.profiles.fail_get = True
        db = world.session()

        result = await world.commission.accrue_trade(db, "u1", D("50"), "t1")

        assert result is None
        assert db.savepoint_rollbacks == 1
        assert "Referral commission failed" in caplog.text

    async def test_failed_credit_undoes_edge_increment(
        self, world: World, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        world.profiles.seed("ref")
        world.profiles.seed("u1", referred_by="ref")
        await world.referrals.create_edge(world.session(), "ref", "u1", "CODE")

        async def broken_credit(*args: object, **kwargs: object) -> int:
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(world.store, "credit", broken_credit)
        db = world.session()

        result = await world.commission.accrue_trade(db, "u1", D("50"), "t1")

        assert result is None
        assert db.savepoint_rollbacks == 1
        assert world.referrals.edges["u1"].accrued_trade_commission == 0
        assert world.ledger.transactions == []

    async def test_uses_injected_mocks(self) -> None:
        profiles = AsyncMock()
        profiles.get.return_value = UserProfile(user_id="u1", referred_by=None)
        accrual = CommissionAccrual(profiles=profiles, referrals=AsyncMock(), store=MagicMock())

        assert await accrual.accrue_claim(FakeSession(), "u1", D("1"), "e1") is None
        profiles.get.assert_awaited_once()
