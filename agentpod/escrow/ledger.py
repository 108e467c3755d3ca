"""
Escrow Ledger

Tracks escrow agreements and validates their lifecycle:

    created -> funded -> completed
    created | funded -> disputed -> refunded

Fund movement itself is the gateway's job; the ledger only decides whether
a transition is legal.
"""

from datetime import datetime
from typing import Iterator, List, Optional

from ..core.schema import Escrow, EscrowStatus
from ..exceptions import InvalidAmountError, InvalidArgumentError, NotFoundError
from ..storage.kv import KeyValueStore, MemoryStore

# Transitions that must happen before the deadline
DEADLINE_BOUND = (EscrowStatus.FUNDED, EscrowStatus.COMPLETED)


def validate_amount(amount) -> float:
    """Reject non-numeric and non-positive amounts."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidAmountError(amount)
    if amount != amount or amount <= 0:  # NaN or non-positive
        raise InvalidAmountError(amount)
    return amount


class EscrowLedger:
    """Ledger of escrows keyed by id."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else MemoryStore()

    def add(self, escrow: Escrow) -> Escrow:
        """
        Record a new escrow.

        Raises:
            InvalidAmountError: amount is not strictly positive
            InvalidArgumentError: missing counterparty or duplicate id
        """
        validate_amount(escrow.amount)
        if not escrow.counterparty_id:
            raise InvalidArgumentError("Escrow requires a counterparty")
        if escrow.id in self._store:
            raise InvalidArgumentError(f"Duplicate escrow id: {escrow.id}")
        self._store.put(escrow.id, escrow.to_dict())
        return escrow

    def get(self, escrow_id: str) -> Optional[Escrow]:
        data = self._store.get(escrow_id)
        if data:
            return Escrow.from_dict(data)
        return None

    def require(self, escrow_id: str) -> Escrow:
        escrow = self.get(escrow_id)
        if escrow is None:
            raise NotFoundError("Escrow", escrow_id)
        return escrow

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[Escrow]:
        for _, data in self._store.iterate():
            yield Escrow.from_dict(data)

    def list_all(self, status: Optional[EscrowStatus] = None) -> List[Escrow]:
        if status is None:
            return list(self)
        return [e for e in self if e.status == status]

    def active_count(self) -> int:
        """Escrows still holding or awaiting funds (created or funded)."""
        return sum(1 for e in self if e.is_active())

    def check_transition(self, escrow: Escrow, target: EscrowStatus, now: Optional[datetime] = None):
        """
        Raise InvalidArgumentError unless ``escrow`` may move to ``target``.
        """
        if not escrow.can_transition(target):
            raise InvalidArgumentError(
                f"Escrow {escrow.id} cannot move from {escrow.status.value} to {target.value}"
            )
        if target in DEADLINE_BOUND and escrow.is_expired(now):
            raise InvalidArgumentError(
                f"Escrow {escrow.id} deadline {escrow.deadline.isoformat()} has passed"
            )

    def transition(
        self,
        escrow_id: str,
        target: EscrowStatus,
        now: Optional[datetime] = None,
        transaction_hash: Optional[str] = None,
    ) -> Escrow:
        """
        Move an escrow to ``target`` after validating the move.

        Raises:
            NotFoundError: unknown escrow id
            InvalidArgumentError: illegal transition or elapsed deadline
        """
        escrow = self.require(escrow_id)
        self.check_transition(escrow, target, now)
        escrow.status = target
        if transaction_hash:
            escrow.transaction_hash = transaction_hash
        self._store.put(escrow.id, escrow.to_dict())
        return escrow
