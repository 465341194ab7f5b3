"""Petty cash ledger engine.

Pure state transitions over immutable deposit snapshots. A deposit snapshot
carries its withdrawals and their spends, so every operation receives the
whole aggregate and returns a new one with all derived fields recomputed.
Nothing here touches the database; ``petty_cash_service`` loads and saves
the aggregates inside a transaction.

Derived fields:

* ``WithdrawalState.amount_justified`` is the sum of its spends.
* ``DepositState.remaining_amount`` is the deposit amount minus the amount
  given on every withdrawal drawn from it.
* The mutated withdrawal's status is re-derived from those sums, and the
  deposit status from its withdrawals. Only the overdue sweep moves a
  withdrawal to ``not_closed``; any later spend change reopens it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Final, Iterable

from pettycash.models.petty_cash import (
    PettyCashDepositStatus as DepositStatus,
    PettyCashWithdrawalStatus as WithdrawalStatus,
)

MONEY_PLACES: Final = Decimal("0.01")
MAX_AMOUNT: Final = Decimal("9999999999.99")
ZERO: Final = Decimal("0.00")
OTHER_MOTIVE: Final = "other"


class LedgerError(ValueError):
    """Base class for caller errors raised by ledger operations."""


class InvalidAmount(LedgerError):
    """Amount is missing, non-finite or not strictly positive."""


class InsufficientFunds(LedgerError):
    """Withdrawal exceeds what is left on the deposit."""


class DepositNotOpen(LedgerError):
    """Deposit no longer accepts withdrawals."""


class OverJustification(LedgerError):
    """Spend would justify more than the amount given."""


class InvalidSpend(LedgerError):
    """Spend payload is incomplete."""


class WithdrawalHasSpends(LedgerError):
    """Withdrawal cannot be voided while spends reference it."""


class DepositHasWithdrawals(LedgerError):
    """Deposit cannot be deleted while withdrawals reference it."""


class NotFound(LedgerError):
    """Referenced deposit, withdrawal or spend does not exist."""


class ConflictError(LedgerError):
    """Aggregate changed concurrently; reload and reapply."""


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Normalize numbers to a fixed-point currency representation."""

    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmount(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")
    try:
        amount = amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmount(f"Amount out of range: {value!r}") from exc
    if abs(amount) > MAX_AMOUNT:
        raise InvalidAmount(f"Amount exceeds {MAX_AMOUNT}: {value!r}")
    return amount


def _positive_money(value: Decimal | int | float | str, label: str) -> Decimal:
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmount(f"{label} must be positive")
    return amount


def _now(value: datetime | None) -> datetime:
    return value if value is not None else datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SpendState:
    """A single justified expense."""

    id: uuid.UUID
    description: str
    amount: Decimal
    created_at: datetime
    motive: str = OTHER_MOTIVE
    ticket_url: str | None = None
    spend_date: date | None = None


@dataclass(frozen=True, slots=True)
class WithdrawalState:
    """Cash handed to a user, justified by spends."""

    id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    amount_given: Decimal
    created_at: datetime
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    spends: tuple[SpendState, ...] = ()
    description: str | None = None
    withdrawal_date: date | None = None

    @property
    def amount_justified(self) -> Decimal:
        return sum((spend.amount for spend in self.spends), ZERO)

    @property
    def amount_pending(self) -> Decimal:
        return self.amount_given - self.amount_justified

    def is_overdue(self, as_of: datetime, policy_window: timedelta) -> bool:
        """True when still unjustified after the policy window."""
        return (
            self.amount_justified < self.amount_given
            and as_of - self.created_at > policy_window
        )

    def find_spend(self, spend_id: uuid.UUID) -> SpendState:
        for spend in self.spends:
            if spend.id == spend_id:
                return spend
        raise NotFound(f"Spend {spend_id} not found on withdrawal {self.id}")


@dataclass(frozen=True, slots=True)
class DepositState:
    """Cash float and every withdrawal drawn from it."""

    id: uuid.UUID
    organization_id: uuid.UUID
    amount: Decimal
    created_at: datetime
    branch_id: uuid.UUID | None = None
    status: DepositStatus = DepositStatus.OPEN
    withdrawals: tuple[WithdrawalState, ...] = ()
    description: str = ""
    reference: str | None = None
    deposit_date: date | None = None

    @property
    def amount_withdrawn(self) -> Decimal:
        return sum((w.amount_given for w in self.withdrawals), ZERO)

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.amount_withdrawn

    def find_withdrawal(self, withdrawal_id: uuid.UUID) -> WithdrawalState:
        for withdrawal in self.withdrawals:
            if withdrawal.id == withdrawal_id:
                return withdrawal
        raise NotFound(f"Withdrawal {withdrawal_id} not found on deposit {self.id}")


@dataclass(slots=True)
class ReconciliationResult:
    """Outcome of an overdue sweep."""

    changed_deposits: list[DepositState] = field(default_factory=list)
    transitioned_ids: list[uuid.UUID] = field(default_factory=list)


def derive_withdrawal_status(withdrawal: WithdrawalState) -> WithdrawalStatus:
    """Compute the withdrawal status from its spends."""

    justified = withdrawal.amount_justified
    if justified == withdrawal.amount_given:
        return WithdrawalStatus.JUSTIFIED
    if justified > ZERO:
        return WithdrawalStatus.PARTIALLY_JUSTIFIED
    return WithdrawalStatus.PENDING


def derive_deposit_status(deposit: DepositState) -> DepositStatus:
    """Compute the deposit status from its remaining funds and withdrawals."""

    if deposit.remaining_amount > ZERO:
        return DepositStatus.OPEN
    if all(w.status is WithdrawalStatus.JUSTIFIED for w in deposit.withdrawals):
        return DepositStatus.CLOSED
    return DepositStatus.PENDING_FUNDING


def _rederive(
    deposit: DepositState,
    withdrawals: Iterable[WithdrawalState],
    touched: uuid.UUID | None = None,
) -> DepositState:
    # sibling withdrawals keep their stored status
    refreshed = tuple(
        replace(w, status=derive_withdrawal_status(w)) if w.id == touched else w
        for w in withdrawals
    )
    updated = replace(deposit, withdrawals=refreshed)
    return replace(updated, status=derive_deposit_status(updated))


def _replace_withdrawal(
    deposit: DepositState, withdrawal: WithdrawalState
) -> tuple[WithdrawalState, ...]:
    return tuple(withdrawal if w.id == withdrawal.id else w for w in deposit.withdrawals)


def open_deposit(
    *,
    organization_id: uuid.UUID,
    amount: Decimal | int | float | str,
    branch_id: uuid.UUID | None = None,
    description: str = "",
    reference: str | None = None,
    deposit_date: date | None = None,
    now: datetime | None = None,
) -> DepositState:
    """Allocate a new cash float."""

    normalized = _positive_money(amount, "Deposit amount")
    return DepositState(
        id=uuid.uuid4(),
        organization_id=organization_id,
        branch_id=branch_id,
        amount=normalized,
        status=DepositStatus.OPEN,
        created_at=_now(now),
        description=description,
        reference=reference,
        deposit_date=deposit_date,
    )


def draw_withdrawal(
    deposit: DepositState,
    *,
    user_id: uuid.UUID,
    user_name: str,
    amount_given: Decimal | int | float | str,
    description: str | None = None,
    withdrawal_date: date | None = None,
    now: datetime | None = None,
) -> tuple[DepositState, WithdrawalState]:
    """Issue funds from ``deposit`` to a user."""

    normalized = _positive_money(amount_given, "Withdrawal amount")
    remaining = deposit.remaining_amount
    if normalized > remaining:
        raise InsufficientFunds(
            f"Insufficient funds on deposit. Available: {remaining:.2f}. "
            f"Requested: {normalized:.2f}"
        )
    if deposit.status is not DepositStatus.OPEN:
        raise DepositNotOpen(f"Deposit {deposit.id} is {deposit.status.value}")

    moment = _now(now)
    withdrawal = WithdrawalState(
        id=uuid.uuid4(),
        user_id=user_id,
        user_name=user_name,
        amount_given=normalized,
        created_at=moment,
        status=WithdrawalStatus.PENDING,
        description=description,
        withdrawal_date=withdrawal_date,
    )
    updated = _rederive(deposit, (*deposit.withdrawals, withdrawal), withdrawal.id)
    return updated, updated.find_withdrawal(withdrawal.id)


def add_spend(
    deposit: DepositState,
    withdrawal_id: uuid.UUID,
    *,
    amount: Decimal | int | float | str,
    description: str | None = None,
    motive: str | None = None,
    ticket_url: str | None = None,
    spend_date: date | None = None,
    now: datetime | None = None,
) -> tuple[DepositState, SpendState]:
    """Justify part of a withdrawal with an expense."""

    withdrawal = deposit.find_withdrawal(withdrawal_id)
    normalized = _positive_money(amount, "Spend amount")

    motive_value = (motive or OTHER_MOTIVE).strip().lower() or OTHER_MOTIVE
    text = (description or "").strip()
    if not text:
        if motive_value == OTHER_MOTIVE:
            raise InvalidSpend("A description is required when the motive is 'other'")
        text = motive_value

    if withdrawal.amount_justified + normalized > withdrawal.amount_given:
        raise OverJustification(
            f"Spend of {normalized:.2f} exceeds the {withdrawal.amount_pending:.2f} "
            f"left to justify on withdrawal {withdrawal.id}"
        )

    moment = _now(now)
    spend = SpendState(
        id=uuid.uuid4(),
        description=text,
        amount=normalized,
        created_at=moment,
        motive=motive_value,
        ticket_url=ticket_url or None,
        spend_date=spend_date,
    )
    justified = replace(withdrawal, spends=(*withdrawal.spends, spend))
    updated = _rederive(deposit, _replace_withdrawal(deposit, justified), withdrawal.id)
    return updated, spend


def remove_spend(
    deposit: DepositState,
    withdrawal_id: uuid.UUID,
    spend_id: uuid.UUID,
) -> DepositState:
    """Drop a spend and reopen the withdrawal and deposit if needed."""

    withdrawal = deposit.find_withdrawal(withdrawal_id)
    withdrawal.find_spend(spend_id)
    trimmed = replace(
        withdrawal,
        spends=tuple(spend for spend in withdrawal.spends if spend.id != spend_id),
    )
    return _rederive(deposit, _replace_withdrawal(deposit, trimmed), withdrawal.id)


def void_withdrawal(
    deposit: DepositState,
    withdrawal_id: uuid.UUID,
) -> DepositState:
    """Remove a withdrawal that has no spends, returning its funds."""

    withdrawal = deposit.find_withdrawal(withdrawal_id)
    if withdrawal.spends:
        raise WithdrawalHasSpends(
            "Withdrawal has spends attached; remove them before deleting it"
        )
    return _rederive(
        deposit, tuple(w for w in deposit.withdrawals if w.id != withdrawal_id)
    )


def ensure_deletable(deposit: DepositState) -> None:
    """Raise unless the deposit has no withdrawals."""

    if deposit.withdrawals:
        raise DepositHasWithdrawals(
            "Deposit has withdrawals attached; remove them before deleting it"
        )


def reconcile_overdue_withdrawals(
    deposits: Iterable[DepositState],
    *,
    as_of: datetime,
    policy_window: timedelta,
) -> ReconciliationResult:
    """Mark every overdue unjustified withdrawal as ``not_closed``.

    Withdrawals already ``not_closed`` are left alone, so running the sweep
    twice with the same ``as_of`` transitions nothing the second time.
    """

    result = ReconciliationResult()
    for deposit in deposits:
        transitioned: list[uuid.UUID] = []
        withdrawals: list[WithdrawalState] = []
        for withdrawal in deposit.withdrawals:
            if withdrawal.status is not WithdrawalStatus.NOT_CLOSED and withdrawal.is_overdue(
                as_of, policy_window
            ):
                withdrawal = replace(withdrawal, status=WithdrawalStatus.NOT_CLOSED)
                transitioned.append(withdrawal.id)
            withdrawals.append(withdrawal)
        if not transitioned:
            continue
        updated = replace(deposit, withdrawals=tuple(withdrawals))
        result.changed_deposits.append(
            replace(updated, status=derive_deposit_status(updated))
        )
        result.transitioned_ids.extend(transitioned)
    return result


__all__ = [
    "ConflictError",
    "DepositHasWithdrawals",
    "DepositNotOpen",
    "DepositState",
    "InsufficientFunds",
    "InvalidAmount",
    "InvalidSpend",
    "LedgerError",
    "NotFound",
    "OverJustification",
    "ReconciliationResult",
    "SpendState",
    "WithdrawalHasSpends",
    "WithdrawalState",
    "add_spend",
    "derive_deposit_status",
    "derive_withdrawal_status",
    "draw_withdrawal",
    "ensure_deletable",
    "open_deposit",
    "reconcile_overdue_withdrawals",
    "remove_spend",
    "to_money",
    "void_withdrawal",
]
