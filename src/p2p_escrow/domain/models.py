from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class EscrowRef:
    """Handle on a block of locked funds.

    ``ref`` is the escrow_ref stamped on the locked entries: the offer id for
    a sell offer, the trade id for a buy-offer fill. ``offer_id`` is the
    offer the escrow serves (defaults to ``ref``).
    """

    ref: str
    owner_id: str
    amount: Decimal = Decimal("0")
    offer_id: str | None = None
    entry_ids: tuple[int, ...] = field(default=())

    @property
    def offer(self) -> str:
        return self.offer_id or self.ref
