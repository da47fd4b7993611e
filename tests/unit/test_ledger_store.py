"""Unit tests for LedgerStore against the in-memory ledger repository."""

import asyncio
from decimal import Decimal

import pytest

from src.p2p_common.enums import FundOrigin, FundStatus
from src.p2p_common.errors import (
    InsufficientBalanceError,
    InsufficientLockedBalanceError,
    InvalidAmountError,
)
from src.p2p_ledger.domain.store import LedgerStore
from tests.unit.fakes import World

D = Decimal


class TestCredit:
    async def test_credit_adds_available_entry(self, world: World) -> None:
        entry_id = await world.store.credit(world.session(), "u1", D("0.73"), FundOrigin.MINING)
        entry = world.ledger.entries[entry_id]
        assert entry.status == "available"
        assert entry.origin == "mining"
        assert await world.store.get_available_balance(world.session(), "u1") == D("0.73")

    @pytest.mark.parametrize("amount", ["0", "-1"])
    async def test_non_positive_amount_rejected(self, world: World, amount: str) -> None:
        with pytest.raises(InvalidAmountError):
            await world.store.credit(world.session(), "u1", D(amount), FundOrigin.MINING)
        assert world.ledger.entries == {}


class TestLock:
    async def test_locks_oldest_first_and_splits_last_entry(self, world: World) -> None:
        await world.fund("u1", "30", "20", "50")

        ids = await world.store.lock(world.session(), "u1", D("40"), escrow_ref="offer-1")

        balance = await world.store.get_balance(world.session(), "u1")
        assert balance.available == D("60")
        assert balance.locked == D("40")
        assert balance.total == D("100")
        # first entry moved whole, second split 10 / 10, third untouched
        assert world.ledger.entries[1].status == "locked"
        assert world.ledger.entries[2].status == "split"
        children = [e for e in world.ledger.entries.values() if e.parent_id == 2]
        assert sorted((c.status, c.amount) for c in children) == [
            ("available", D("10")),
            ("locked", D("10")),
        ]
        assert world.ledger.entries[3].status == "available"
        assert len(ids) == 2
        assert all(world.ledger.entries[i].escrow_ref == "offer-1" for i in ids)

    async def test_exact_balance_locks_everything_without_split(self, world: World) -> None:
        await world.fund("u1", "25", "25")
        await world.store.lock(world.session(), "u1", D("50"), escrow_ref="r")
        assert world.ledger.amount_in("u1", FundStatus.AVAILABLE) == 0
        assert not any(e.status == "split" for e in world.ledger.entries.values())

    async def test_insufficient_balance_changes_nothing(self, world: World) -> None:
        await world.fund("u1", "10")
        db = world.session()
        with pytest.raises(InsufficientBalanceError) as exc:
            await world.store.lock(db, "u1", D("10.00000001"))
        assert exc.value.details == {"required": "10.00000001", "available": "10"}
        assert world.ledger.amount_in("u1", FundStatus.AVAILABLE) == D("10")
        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == 0

    async def test_lock_zero_rejected(self, world: World) -> None:
        await world.fund("u1", "10")
        with pytest.raises(InvalidAmountError):
            await world.store.lock(world.session(), "u1", D("0"))

    async def test_concurrent_locks_never_overdraw(self, world: World) -> None:
        await world.fund("u1", "10", "10", "10")

        async def attempt() -> bool:
            db = world.session()
            try:
                await world.store.lock(db, "u1", D("12"), escrow_ref="r")
                await db.commit()
                return True
            except InsufficientBalanceError:
                await db.rollback()
                return False

        results = await asyncio.gather(*(attempt() for _ in range(5)))

        assert results.count(True) == 2
        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == D("24")
        assert world.ledger.amount_in("u1", FundStatus.AVAILABLE) == D("6")
        assert world.ledger.supply() == D("30")


class TestUnlock:
    async def test_lock_then_unlock_restores_available(self, world: World) -> None:
        await world.fund("u1", "30", "20")
        db = world.session()
        await world.store.lock(db, "u1", D("35"), escrow_ref="o1")

        await world.store.unlock(db, "u1", D("35"), escrow_ref="o1")

        assert await world.store.get_available_balance(world.session(), "u1") == D("50")
        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == 0
        assert world.ledger.supply() == D("50")

    async def test_unlock_is_limited_to_escrow(self, world: World) -> None:
        await world.fund("u1", "100")
        db = world.session()
        await world.store.lock(db, "u1", D("30"), escrow_ref="a")
        await world.store.lock(db, "u1", D("20"), escrow_ref="b")

        with pytest.raises(InsufficientLockedBalanceError):
            await world.store.unlock(db, "u1", D("25"), escrow_ref="b")

        await world.store.unlock(db, "u1", D("5"), escrow_ref="b")
        locked_b = sum(
            e.amount for e in world.ledger.entries.values()
            if e.status == "locked" and e.escrow_ref == "b"
        )
        assert locked_b == D("15")
        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == D("45")

    async def test_unlock_more_than_locked_fails(self, world: World) -> None:
        await world.fund("u1", "10")
        db = world.session()
        await world.store.lock(db, "u1", D("4"))
        with pytest.raises(InsufficientLockedBalanceError):
            await world.store.unlock(db, "u1", D("5"))


class TestConsume:
    async def test_consume_moves_locked_to_spent(self, world: World) -> None:
        await world.fund("u1", "50")
        db = world.session()
        await world.store.lock(db, "u1", D("50"), escrow_ref="o1")

        await world.store.consume(db, "u1", D("20"), "o1")

        assert world.ledger.amount_in("u1", FundStatus.SPENT) == D("20")
        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == D("30")


class TestTransactions:
    async def test_history_is_newest_first_and_filterable(self, world: World) -> None:
        db = world.session()
        await world.store.record(db, "u1", "mining", D("0.73"))
        await world.store.record(db, "u1", "escrow_lock", D("50"), reference_id="o1")
        await world.store.record(db, "u2", "mining", D("0.73"))

        rows = await world.store.list_transactions(db, "u1", None, 10, None)
        assert [r.kind for r in rows] == ["escrow_lock", "mining"]

        mining = await world.store.list_transactions(db, "u1", None, 10, "mining")
        assert len(mining) == 1


class TestRollback:
    async def test_rollback_restores_split_entries(self, world: World) -> None:
        await world.fund("u1", "30", "20")
        db = world.session()
        await world.store.lock(db, "u1", D("35"), escrow_ref="o1")

        await db.rollback()

        assert world.ledger.amount_in("u1", FundStatus.AVAILABLE) == D("50")
        assert sorted(e.amount for e in world.ledger.entries.values()) == [D("20"), D("30")]
        assert world.ledger.supply() == world.ledger.issued

    async def test_lock_is_free_after_rollback(self, world: World) -> None:
        await world.fund("u1", "30")
        first = world.session()
        await world.store.lock(first, "u1", D("10"))
        await first.rollback()

        await world.store.lock(world.session(), "u1", D("30"))

        assert world.ledger.amount_in("u1", FundStatus.LOCKED) == D("30")


class _BalancesOnlyRepo:
    def __init__(self) -> None:
        self.reads: list[str] = []

    async def sum_balances(self, db: object, owner_id: str) -> tuple[Decimal, Decimal]:
        self.reads.append(owner_id)
        return D("7"), D("3")


class TestBalance:
    async def test_available_and_locked_come_from_one_read(self) -> None:
        repo = _BalancesOnlyRepo()
        store = LedgerStore(repo)  # type: ignore[arg-type]

        balance = await store.get_balance(None, "u1")  # type: ignore[arg-type]

        assert repo.reads == ["u1"]
        assert (balance.available, balance.locked, balance.total) == (D("7"), D("3"), D("10"))

    async def test_balance_after_partial_lock(self, world: World) -> None:
        await world.fund("u1", "30", "20")
        db = world.session()
        await world.store.lock(db, "u1", D("35"), escrow_ref="o1")

        balance = await world.store.get_balance(db, "u1")

        assert balance.available == D("15")
        assert balance.locked == D("35")
