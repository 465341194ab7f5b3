"""Persistence for the petty cash ledger.

Each mutation loads the deposit aggregate (deposit, withdrawals, spends),
converts it to a ``petty_cash_ledger`` snapshot, applies the pure
operation and writes the resulting snapshot back in one transaction.
Deposits and withdrawals carry a version counter, so a concurrent writer
surfaces as ``ConflictError`` instead of a lost update.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from pettycash.core.config import get_settings
from pettycash.models import (
    Branch,
    PettyCashDeposit,
    PettyCashDepositStatus,
    PettyCashSpend,
    PettyCashWithdrawal,
    PettyCashWithdrawalStatus,
    User,
)
from pettycash.services import audit_service
from pettycash.services import petty_cash_ledger as ledger

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _policy_window(override: timedelta | None = None) -> timedelta:
    return override or get_settings().petty_cash_policy_window


def _set(obj: Any, name: str, value: Any) -> None:
    if getattr(obj, name) != value:
        setattr(obj, name, value)


# ---------------------------------------------------------------------------
# Snapshot conversion
# ---------------------------------------------------------------------------


def _spend_snapshot(row: PettyCashSpend) -> ledger.SpendState:
    return ledger.SpendState(
        id=row.id,
        description=row.description,
        amount=ledger.to_money(row.amount),
        created_at=_as_utc(row.created_at),
        motive=row.motive,
        ticket_url=row.ticket_url,
        spend_date=row.spend_date,
    )


def _withdrawal_snapshot(row: PettyCashWithdrawal) -> ledger.WithdrawalState:
    return ledger.WithdrawalState(
        id=row.id,
        user_id=row.user_id,
        user_name=row.user_name,
        amount_given=ledger.to_money(row.amount_given),
        created_at=_as_utc(row.created_at),
        status=row.status,
        spends=tuple(_spend_snapshot(spend) for spend in row.spends),
        description=row.description,
        withdrawal_date=row.withdrawal_date,
    )


def to_snapshot(row: PettyCashDeposit) -> ledger.DepositState:
    """Convert a loaded deposit aggregate into an engine snapshot."""

    return ledger.DepositState(
        id=row.id,
        organization_id=row.organization_id,
        branch_id=row.branch_id,
        amount=ledger.to_money(row.amount),
        created_at=_as_utc(row.created_at),
        status=row.status,
        withdrawals=tuple(_withdrawal_snapshot(w) for w in row.withdrawals),
        description=row.description,
        reference=row.reference,
        deposit_date=row.deposit_date,
    )


def _sync_spends(
    row: PettyCashWithdrawal, state: ledger.WithdrawalState, organization_id: uuid.UUID
) -> None:
    keep = {spend.id for spend in state.spends}
    for spend_row in list(row.spends):
        if spend_row.id not in keep:
            row.spends.remove(spend_row)
    existing = {spend_row.id for spend_row in row.spends}
    for spend in state.spends:
        if spend.id in existing:
            continue
        row.spends.append(
            PettyCashSpend(
                id=spend.id,
                organization_id=organization_id,
                motive=spend.motive,
                description=spend.description,
                amount=spend.amount,
                ticket_url=spend.ticket_url,
                spend_date=spend.spend_date,
                created_at=spend.created_at,
            )
        )


def _apply_snapshot(row: PettyCashDeposit, state: ledger.DepositState) -> None:
    """Write every raw and derived field of ``state`` onto the aggregate."""

    _set(row, "amount", state.amount)
    _set(row, "remaining_amount", state.remaining_amount)
    _set(row, "status", state.status)

    keep = {w.id for w in state.withdrawals}
    for withdrawal_row in list(row.withdrawals):
        if withdrawal_row.id not in keep:
            row.withdrawals.remove(withdrawal_row)

    existing = {w.id: w for w in row.withdrawals}
    for withdrawal in state.withdrawals:
        withdrawal_row = existing.get(withdrawal.id)
        if withdrawal_row is None:
            withdrawal_row = PettyCashWithdrawal(
                id=withdrawal.id,
                organization_id=row.organization_id,
                user_id=withdrawal.user_id,
                user_name=withdrawal.user_name,
                description=withdrawal.description,
                withdrawal_date=withdrawal.withdrawal_date,
                amount_given=withdrawal.amount_given,
                amount_justified=withdrawal.amount_justified,
                status=withdrawal.status,
                created_at=withdrawal.created_at,
                spends=[],
            )
            row.withdrawals.append(withdrawal_row)
        _set(withdrawal_row, "amount_justified", withdrawal.amount_justified)
        _set(withdrawal_row, "status", withdrawal.status)
        _sync_spends(withdrawal_row, withdrawal, row.organization_id)


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        logger.warning("Concurrent petty cash update detected: %s", exc)
        raise ledger.ConflictError(
            "Petty cash records changed concurrently; reload and retry"
        ) from exc


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _aggregate_stmt() -> Select[tuple[PettyCashDeposit]]:
    return (
        select(PettyCashDeposit)
        .options(
            selectinload(PettyCashDeposit.withdrawals).selectinload(
                PettyCashWithdrawal.spends
            )
        )
        .execution_options(populate_existing=True)
    )


async def load_deposit(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    deposit_id: uuid.UUID,
    for_update: bool = False,
) -> PettyCashDeposit:
    """Return the deposit aggregate or raise ``NotFound``."""

    stmt = _aggregate_stmt().where(
        PettyCashDeposit.id == deposit_id,
        PettyCashDeposit.organization_id == organization_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    deposit = result.scalars().unique().one_or_none()
    if deposit is None:
        raise ledger.NotFound("Deposit not found for organization")
    return deposit


async def load_withdrawal(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    for_update: bool = False,
) -> tuple[PettyCashDeposit, PettyCashWithdrawal]:
    """Return the parent deposit aggregate and the withdrawal inside it."""

    result = await session.execute(
        select(PettyCashWithdrawal.deposit_id).where(
            PettyCashWithdrawal.id == withdrawal_id,
            PettyCashWithdrawal.organization_id == organization_id,
        )
    )
    deposit_id = result.scalar_one_or_none()
    if deposit_id is None:
        raise ledger.NotFound("Withdrawal not found for organization")
    deposit = await load_deposit(
        session,
        organization_id=organization_id,
        deposit_id=deposit_id,
        for_update=for_update,
    )
    for withdrawal in deposit.withdrawals:
        if withdrawal.id == withdrawal_id:
            return deposit, withdrawal
    raise ledger.NotFound("Withdrawal not found for organization")


async def save_deposit(
    session: AsyncSession,
    row: PettyCashDeposit,
    state: ledger.DepositState,
) -> PettyCashDeposit:
    """Persist ``state`` onto ``row`` and return the reloaded aggregate."""

    _apply_snapshot(row, state)
    await _commit(session)
    return await load_deposit(
        session, organization_id=row.organization_id, deposit_id=row.id
    )


async def _ensure_branch(
    session: AsyncSession, *, organization_id: uuid.UUID, branch_id: uuid.UUID | None
) -> None:
    if branch_id is None:
        return
    branch = await session.get(Branch, branch_id)
    if branch is None or branch.organization_id != organization_id:
        raise ledger.NotFound("Branch not found for organization")


async def _ensure_user(
    session: AsyncSession, *, organization_id: uuid.UUID, user_id: uuid.UUID
) -> User:
    user = await session.get(User, user_id)
    if user is None or user.organization_id != organization_id:
        raise ledger.NotFound("User not found for organization")
    return user


async def _audit(
    session: AsyncSession,
    *,
    event_type: str,
    organization_id: uuid.UUID,
    actor: User | None,
    description: str,
    payload: dict[str, Any],
) -> None:
    await audit_service.record_event(
        session,
        event_type=event_type,
        organization_id=organization_id,
        user_id=actor.id if actor is not None else None,
        description=description,
        payload=payload,
        commit=False,
    )


# ---------------------------------------------------------------------------
# Deposits
# ---------------------------------------------------------------------------


async def list_deposits(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    branch_id: uuid.UUID | None = None,
    general_account: bool = False,
    status: PettyCashDepositStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[PettyCashDeposit]:
    """Return deposit aggregates newest first."""

    stmt = _aggregate_stmt().where(PettyCashDeposit.organization_id == organization_id)
    if general_account:
        stmt = stmt.where(PettyCashDeposit.branch_id.is_(None))
    elif branch_id is not None:
        stmt = stmt.where(PettyCashDeposit.branch_id == branch_id)
    if status is not None:
        stmt = stmt.where(PettyCashDeposit.status == status)
    stmt = stmt.order_by(PettyCashDeposit.created_at.desc()).offset(max(0, skip)).limit(
        max(1, min(limit, 200))
    )
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def open_deposit(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    amount: Decimal,
    description: str,
    branch_id: uuid.UUID | None = None,
    reference: str | None = None,
    deposit_date: date | None = None,
    actor: User | None = None,
    now: datetime | None = None,
) -> PettyCashDeposit:
    """Allocate a new cash float to the organization or one of its branches."""

    await _ensure_branch(session, organization_id=organization_id, branch_id=branch_id)
    state = ledger.open_deposit(
        organization_id=organization_id,
        branch_id=branch_id,
        amount=amount,
        description=description,
        reference=reference,
        deposit_date=deposit_date,
        now=now,
    )
    row = PettyCashDeposit(
        id=state.id,
        organization_id=organization_id,
        branch_id=branch_id,
        description=description,
        reference=reference,
        deposit_date=deposit_date,
        amount=state.amount,
        remaining_amount=state.remaining_amount,
        status=state.status,
        created_at=state.created_at,
        withdrawals=[],
    )
    session.add(row)
    await _audit(
        session,
        event_type="petty_cash.deposit.opened",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash deposit opened",
        payload={"deposit_id": str(state.id), "amount": str(state.amount)},
    )
    await _commit(session)
    logger.info(
        "Opened petty cash deposit %s for %s (amount=%s)",
        state.id,
        organization_id,
        state.amount,
    )
    return await load_deposit(session, organization_id=organization_id, deposit_id=state.id)


async def delete_deposit(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    deposit_id: uuid.UUID,
    actor: User | None = None,
) -> None:
    """Delete a deposit that has no withdrawals."""

    row = await load_deposit(
        session, organization_id=organization_id, deposit_id=deposit_id, for_update=True
    )
    ledger.ensure_deletable(to_snapshot(row))
    await session.delete(row)
    await _audit(
        session,
        event_type="petty_cash.deposit.deleted",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash deposit deleted",
        payload={"deposit_id": str(deposit_id), "amount": str(row.amount)},
    )
    await _commit(session)
    logger.info("Deleted petty cash deposit %s", deposit_id)


async def find_open_deposit(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    branch_id: uuid.UUID | None = None,
) -> PettyCashDeposit | None:
    """Return the most recent open deposit for the branch (or general account)."""

    stmt = _aggregate_stmt().where(
        PettyCashDeposit.organization_id == organization_id,
        PettyCashDeposit.status == PettyCashDepositStatus.OPEN,
    )
    if branch_id is None:
        stmt = stmt.where(PettyCashDeposit.branch_id.is_(None))
    else:
        stmt = stmt.where(PettyCashDeposit.branch_id == branch_id)
    stmt = stmt.order_by(PettyCashDeposit.created_at.desc()).limit(1)
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


# ---------------------------------------------------------------------------
# Withdrawals and spends
# ---------------------------------------------------------------------------


async def draw_withdrawal(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    amount_given: Decimal,
    deposit_id: uuid.UUID | None = None,
    branch_id: uuid.UUID | None = None,
    user_name: str | None = None,
    description: str | None = None,
    withdrawal_date: date | None = None,
    actor: User | None = None,
    now: datetime | None = None,
) -> PettyCashWithdrawal:
    """Hand funds from a deposit to a user.

    Without ``deposit_id`` the newest open deposit of the branch (or of the
    general account) is used.
    """

    recipient = await _ensure_user(session, organization_id=organization_id, user_id=user_id)
    if deposit_id is None:
        candidate = await find_open_deposit(
            session, organization_id=organization_id, branch_id=branch_id
        )
        if candidate is None:
            raise ledger.NotFound("No open deposit available for this withdrawal")
        deposit_id = candidate.id
    row = await load_deposit(
        session, organization_id=organization_id, deposit_id=deposit_id, for_update=True
    )
    state, withdrawal = ledger.draw_withdrawal(
        to_snapshot(row),
        user_id=recipient.id,
        user_name=user_name or recipient.full_name,
        amount_given=amount_given,
        description=description,
        withdrawal_date=withdrawal_date,
        now=now,
    )
    await _audit(
        session,
        event_type="petty_cash.withdrawal.drawn",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash withdrawal drawn",
        payload={
            "deposit_id": str(deposit_id),
            "withdrawal_id": str(withdrawal.id),
            "user_id": str(recipient.id),
            "amount_given": str(withdrawal.amount_given),
        },
    )
    saved = await save_deposit(session, row, state)
    logger.info(
        "Drew withdrawal %s of %s from deposit %s (remaining=%s, status=%s)",
        withdrawal.id,
        withdrawal.amount_given,
        deposit_id,
        state.remaining_amount,
        state.status.value,
    )
    return _withdrawal_in(saved, withdrawal.id)


def _withdrawal_in(deposit: PettyCashDeposit, withdrawal_id: uuid.UUID) -> PettyCashWithdrawal:
    for withdrawal in deposit.withdrawals:
        if withdrawal.id == withdrawal_id:
            return withdrawal
    raise ledger.NotFound("Withdrawal not found for organization")


async def delete_withdrawal(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    actor: User | None = None,
) -> PettyCashDeposit:
    """Void a withdrawal without spends and return its funds to the deposit."""

    row, withdrawal_row = await load_withdrawal(
        session,
        organization_id=organization_id,
        withdrawal_id=withdrawal_id,
        for_update=True,
    )
    amount_given = withdrawal_row.amount_given
    state = ledger.void_withdrawal(to_snapshot(row), withdrawal_id)
    await _audit(
        session,
        event_type="petty_cash.withdrawal.deleted",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash withdrawal deleted",
        payload={
            "deposit_id": str(row.id),
            "withdrawal_id": str(withdrawal_id),
            "amount_given": str(amount_given),
        },
    )
    saved = await save_deposit(session, row, state)
    logger.info("Voided withdrawal %s on deposit %s", withdrawal_id, row.id)
    return saved


async def add_spend(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    amount: Decimal,
    description: str | None = None,
    motive: str | None = None,
    ticket_url: str | None = None,
    spend_date: date | None = None,
    actor: User | None = None,
    now: datetime | None = None,
) -> PettyCashWithdrawal:
    """Attach an expense to a withdrawal and re-derive its state."""

    row, _ = await load_withdrawal(
        session,
        organization_id=organization_id,
        withdrawal_id=withdrawal_id,
        for_update=True,
    )
    state, spend = ledger.add_spend(
        to_snapshot(row),
        withdrawal_id,
        amount=amount,
        description=description,
        motive=motive,
        ticket_url=ticket_url,
        spend_date=spend_date,
        now=now,
    )
    await _audit(
        session,
        event_type="petty_cash.spend.added",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash spend added",
        payload={
            "withdrawal_id": str(withdrawal_id),
            "spend_id": str(spend.id),
            "amount": str(spend.amount),
        },
    )
    saved = await save_deposit(session, row, state)
    withdrawal = _withdrawal_in(saved, withdrawal_id)
    logger.info(
        "Added spend %s of %s to withdrawal %s (justified=%s, status=%s)",
        spend.id,
        spend.amount,
        withdrawal_id,
        withdrawal.amount_justified,
        withdrawal.status.value,
    )
    return withdrawal


async def remove_spend(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    withdrawal_id: uuid.UUID,
    spend_id: uuid.UUID,
    actor: User | None = None,
) -> PettyCashWithdrawal:
    """Remove an expense and reopen the withdrawal/deposit when needed."""

    row, _ = await load_withdrawal(
        session,
        organization_id=organization_id,
        withdrawal_id=withdrawal_id,
        for_update=True,
    )
    state = ledger.remove_spend(to_snapshot(row), withdrawal_id, spend_id)
    await _audit(
        session,
        event_type="petty_cash.spend.removed",
        organization_id=organization_id,
        actor=actor,
        description="Petty cash spend removed",
        payload={"withdrawal_id": str(withdrawal_id), "spend_id": str(spend_id)},
    )
    saved = await save_deposit(session, row, state)
    logger.info("Removed spend %s from withdrawal %s", spend_id, withdrawal_id)
    return _withdrawal_in(saved, withdrawal_id)


# ---------------------------------------------------------------------------
# Reconciliation sweep
# ---------------------------------------------------------------------------


async def reconcile_overdue_withdrawals(
    session: AsyncSession,
    *,
    as_of: datetime | None = None,
    policy_window: timedelta | None = None,
    organization_id: uuid.UUID | None = None,
) -> list[uuid.UUID]:
    """Flag overdue unjustified withdrawals as ``not_closed``.

    Returns the ids that changed state; an immediate re-run returns ``[]``.
    """

    moment = _as_utc(as_of) if as_of is not None else datetime.now(UTC)
    window = _policy_window(policy_window)
    cutoff = moment - window

    candidates = (
        select(PettyCashWithdrawal.deposit_id)
        .where(
            PettyCashWithdrawal.status.in_(
                [
                    PettyCashWithdrawalStatus.PENDING,
                    PettyCashWithdrawalStatus.PARTIALLY_JUSTIFIED,
                ]
            ),
            PettyCashWithdrawal.created_at < cutoff,
        )
        .distinct()
    )
    if organization_id is not None:
        candidates = candidates.where(
            PettyCashWithdrawal.organization_id == organization_id
        )
    stmt = _aggregate_stmt().where(PettyCashDeposit.id.in_(candidates)).with_for_update()
    rows = list((await session.execute(stmt)).scalars().unique().all())
    by_id = {row.id: row for row in rows}

    result = ledger.reconcile_overdue_withdrawals(
        [to_snapshot(row) for row in rows], as_of=moment, policy_window=window
    )
    if not result.transitioned_ids:
        return []

    for state in result.changed_deposits:
        _apply_snapshot(by_id[state.id], state)
    await _audit(
        session,
        event_type="petty_cash.reconciliation.swept",
        organization_id=organization_id,
        actor=None,
        description="Overdue petty cash withdrawals marked not closed",
        payload={
            "as_of": moment.isoformat(),
            "policy_window_days": window.days,
            "withdrawal_ids": [str(item) for item in result.transitioned_ids],
        },
    )
    await _commit(session)
    logger.info(
        "Reconciliation sweep marked %s withdrawal(s) not closed as of %s",
        len(result.transitioned_ids),
        moment.isoformat(),
    )
    return result.transitioned_ids


# ---------------------------------------------------------------------------
# Read models: movements and activity report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Movement:
    """A single debit (deposit) or credit (spend) on a petty cash account."""

    id: uuid.UUID
    kind: str
    amount: Decimal
    description: str | None
    reference: str | None
    receipt_url: str | None
    created_at: datetime
    user_id: uuid.UUID | None = None
    user_name: str | None = None


@dataclass(slots=True)
class ActivityTotals:
    deposits: Decimal = Decimal("0.00")
    withdrawals: Decimal = Decimal("0.00")
    spends: Decimal = Decimal("0.00")

    @property
    def balance(self) -> Decimal:
        return self.deposits - self.spends


@dataclass(slots=True)
class ActivityReport:
    """Deposits opened in a date range with their withdrawals and spends."""

    date_from: date
    date_to: date
    deposits: list[PettyCashDeposit] = field(default_factory=list)
    totals: ActivityTotals = field(default_factory=ActivityTotals)


async def list_movements(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    branch_id: uuid.UUID | None = None,
) -> list[Movement]:
    """Combine deposits (debits) and spends (credits), newest first.

    ``branch_id=None`` selects the general account.
    """

    deposit_stmt = select(PettyCashDeposit).where(
        PettyCashDeposit.organization_id == organization_id
    )
    spend_stmt = (
        select(PettyCashSpend, PettyCashWithdrawal)
        .join(PettyCashWithdrawal, PettyCashSpend.withdrawal_id == PettyCashWithdrawal.id)
        .join(PettyCashDeposit, PettyCashWithdrawal.deposit_id == PettyCashDeposit.id)
        .where(PettyCashSpend.organization_id == organization_id)
    )
    if branch_id is None:
        deposit_stmt = deposit_stmt.where(PettyCashDeposit.branch_id.is_(None))
        spend_stmt = spend_stmt.where(PettyCashDeposit.branch_id.is_(None))
    else:
        deposit_stmt = deposit_stmt.where(PettyCashDeposit.branch_id == branch_id)
        spend_stmt = spend_stmt.where(PettyCashDeposit.branch_id == branch_id)

    movements: list[Movement] = []
    for deposit in (await session.execute(deposit_stmt)).scalars().all():
        movements.append(
            Movement(
                id=deposit.id,
                kind="debit",
                amount=ledger.to_money(deposit.amount),
                description=deposit.description,
                reference=deposit.reference,
                receipt_url=None,
                created_at=_as_utc(deposit.created_at),
            )
        )
    for spend, withdrawal in (await session.execute(spend_stmt)).all():
        movements.append(
            Movement(
                id=spend.id,
                kind="credit",
                amount=ledger.to_money(spend.amount),
                description=spend.description,
                reference=spend.motive,
                receipt_url=spend.ticket_url,
                created_at=_as_utc(spend.created_at),
                user_id=withdrawal.user_id,
                user_name=withdrawal.user_name,
            )
        )
    movements.sort(key=lambda item: item.created_at, reverse=True)
    return movements


async def activity_report(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    date_from: date,
    date_to: date,
    branch_id: uuid.UUID | None = None,
) -> ActivityReport:
    """Summarize deposits opened between two dates (inclusive)."""

    if date_from > date_to:
        raise ValueError("date_from must be on or before date_to")
    start = datetime.combine(date_from, time.min, tzinfo=UTC)
    end = datetime.combine(date_to, time.min, tzinfo=UTC) + timedelta(days=1)

    stmt = _aggregate_stmt().where(
        PettyCashDeposit.organization_id == organization_id,
        PettyCashDeposit.created_at >= start,
        PettyCashDeposit.created_at < end,
    )
    if branch_id is not None:
        stmt = stmt.where(PettyCashDeposit.branch_id == branch_id)
    stmt = stmt.order_by(PettyCashDeposit.created_at.asc())
    deposits = list((await session.execute(stmt)).scalars().unique().all())

    report = ActivityReport(date_from=date_from, date_to=date_to, deposits=deposits)
    for deposit in deposits:
        report.totals.deposits += ledger.to_money(deposit.amount)
        for withdrawal in deposit.withdrawals:
            report.totals.withdrawals += ledger.to_money(withdrawal.amount_given)
            for spend in withdrawal.spends:
                report.totals.spends += ledger.to_money(spend.amount)
    return report
