"""Petty cash ledger endpoints."""

from __future__ import annotations

import csv
import io
import logging
import uuid
from collections.abc import Awaitable, Iterable
from datetime import UTC, date, datetime, timedelta
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.api import deps
from pettycash.core.config import get_settings
from pettycash.integrations import S3Client
from pettycash.models.petty_cash import PettyCashDepositStatus
from pettycash.models.user import User
from pettycash.reports.petty_cash_exporter import activity_rows
from pettycash.schemas.petty_cash import (
    ActivityReportRead,
    DepositCreate,
    DepositRead,
    MovementRead,
    ReconcileRequest,
    ReconcileResult,
    SpendCreate,
    TicketUploadResult,
    WithdrawalCreate,
    WithdrawalRead,
)
from pettycash.security.permissions import (
    CASH_MANAGERS,
    require_recipient_or_manager,
    require_roles,
)
from pettycash.services import petty_cash_service as service
from pettycash.services import receipt_service
from pettycash.services.petty_cash_ledger import ConflictError, NotFound

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


async def _ledger(call: Awaitable[T]) -> T:
    """Await a ledger operation, translating caller errors to HTTP responses."""
    try:
        return await call
    except NotFound as exc:
        logger.warning("Petty cash lookup failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        logger.warning("Rejected petty cash operation: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


async def _withdrawal_for_caller(
    session: AsyncSession, current_user: User, withdrawal_id: uuid.UUID
):
    _, withdrawal = await _ledger(
        service.load_withdrawal(
            session,
            organization_id=current_user.organization_id,
            withdrawal_id=withdrawal_id,
        )
    )
    require_recipient_or_manager(current_user, withdrawal.user_id)
    return withdrawal


# ---------------------------------------------------------------------------
# Deposits
# ---------------------------------------------------------------------------


@router.post(
    "/deposits",
    response_model=DepositRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open a petty cash deposit",
)
async def open_deposit(
    payload: DepositCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> DepositRead:
    require_roles(current_user, CASH_MANAGERS)
    deposit = await _ledger(
        service.open_deposit(
            session,
            organization_id=current_user.organization_id,
            amount=payload.amount,
            description=payload.description,
            branch_id=payload.branch_id,
            reference=payload.reference,
            deposit_date=payload.deposit_date,
            actor=current_user,
        )
    )
    return DepositRead.model_validate(deposit)


@router.get("/deposits", response_model=list[DepositRead], summary="List deposits")
async def list_deposits(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    branch_id: uuid.UUID | None = Query(default=None),
    general_account: bool = Query(default=False),
    deposit_status: PettyCashDepositStatus | None = Query(default=None, alias="status"),
    skip: int = 0,
    limit: int = 50,
) -> list[DepositRead]:
    deposits = await service.list_deposits(
        session,
        organization_id=current_user.organization_id,
        branch_id=branch_id,
        general_account=general_account,
        status=deposit_status,
        skip=skip,
        limit=limit,
    )
    return [DepositRead.model_validate(deposit) for deposit in deposits]


@router.get("/deposits/{deposit_id}", response_model=DepositRead, summary="Get deposit")
async def read_deposit(
    deposit_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> DepositRead:
    deposit = await _ledger(
        service.load_deposit(
            session, organization_id=current_user.organization_id, deposit_id=deposit_id
        )
    )
    return DepositRead.model_validate(deposit)


@router.delete(
    "/deposits/{deposit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a deposit without withdrawals",
)
async def delete_deposit(
    deposit_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> Response:
    require_roles(current_user, CASH_MANAGERS)
    await _ledger(
        service.delete_deposit(
            session,
            organization_id=current_user.organization_id,
            deposit_id=deposit_id,
            actor=current_user,
        )
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Withdrawals
# ---------------------------------------------------------------------------


@router.post(
    "/withdrawals",
    response_model=WithdrawalRead,
    status_code=status.HTTP_201_CREATED,
    summary="Draw a withdrawal from a deposit",
)
async def draw_withdrawal(
    payload: WithdrawalCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> WithdrawalRead:
    require_roles(current_user, CASH_MANAGERS)
    withdrawal = await _ledger(
        service.draw_withdrawal(
            session,
            organization_id=current_user.organization_id,
            user_id=payload.user_id,
            amount_given=payload.amount_given,
            deposit_id=payload.deposit_id,
            branch_id=payload.branch_id,
            user_name=payload.user_name,
            description=payload.description,
            withdrawal_date=payload.withdrawal_date,
            actor=current_user,
        )
    )
    return WithdrawalRead.model_validate(withdrawal)


@router.delete(
    "/withdrawals/{withdrawal_id}",
    response_model=DepositRead,
    summary="Delete a withdrawal without spends",
)
async def delete_withdrawal(
    withdrawal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> DepositRead:
    """Void the withdrawal and return the updated deposit."""
    require_roles(current_user, CASH_MANAGERS)
    deposit = await _ledger(
        service.delete_withdrawal(
            session,
            organization_id=current_user.organization_id,
            withdrawal_id=withdrawal_id,
            actor=current_user,
        )
    )
    return DepositRead.model_validate(deposit)


# ---------------------------------------------------------------------------
# Spends and tickets
# ---------------------------------------------------------------------------


@router.post(
    "/withdrawals/{withdrawal_id}/spends",
    response_model=WithdrawalRead,
    status_code=status.HTTP_201_CREATED,
    summary="Justify a withdrawal with a spend",
)
async def add_spend(
    withdrawal_id: uuid.UUID,
    payload: SpendCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> WithdrawalRead:
    await _withdrawal_for_caller(session, current_user, withdrawal_id)
    withdrawal = await _ledger(
        service.add_spend(
            session,
            organization_id=current_user.organization_id,
            withdrawal_id=withdrawal_id,
            amount=payload.amount,
            description=payload.description,
            motive=payload.motive,
            ticket_url=payload.ticket_url,
            spend_date=payload.spend_date,
            actor=current_user,
        )
    )
    return WithdrawalRead.model_validate(withdrawal)


@router.delete(
    "/withdrawals/{withdrawal_id}/spends/{spend_id}",
    response_model=WithdrawalRead,
    summary="Remove a spend",
)
async def remove_spend(
    withdrawal_id: uuid.UUID,
    spend_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> WithdrawalRead:
    await _withdrawal_for_caller(session, current_user, withdrawal_id)
    withdrawal = await _ledger(
        service.remove_spend(
            session,
            organization_id=current_user.organization_id,
            withdrawal_id=withdrawal_id,
            spend_id=spend_id,
            actor=current_user,
        )
    )
    return WithdrawalRead.model_validate(withdrawal)


@router.post(
    "/withdrawals/{withdrawal_id}/tickets",
    response_model=TicketUploadResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a receipt for a withdrawal",
)
async def upload_ticket(
    withdrawal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    s3_client: Annotated[S3Client, Depends(deps.get_s3_client)],
    file: UploadFile = File(...),
) -> TicketUploadResult:
    """Store the receipt; pass the returned ``url`` as ``ticket_url`` on a spend."""
    await _withdrawal_for_caller(session, current_user, withdrawal_id)
    data = await file.read()
    try:
        stored = receipt_service.store_ticket(
            s3_client,
            organization_id=current_user.organization_id,
            withdrawal_id=withdrawal_id,
            file_name=file.filename,
            content_type=file.content_type,
            data=data,
        )
    except receipt_service.InvalidReceipt as exc:
        logger.warning("Rejected petty cash ticket upload: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return TicketUploadResult(
        key=stored.key, url=stored.url, content_type=stored.content_type, size=stored.size
    )


# ---------------------------------------------------------------------------
# Reconciliation and reporting
# ---------------------------------------------------------------------------


@router.post(
    "/reconcile",
    response_model=ReconcileResult,
    summary="Mark overdue unjustified withdrawals as not closed",
)
async def reconcile(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    payload: ReconcileRequest | None = None,
) -> ReconcileResult:
    require_roles(current_user, CASH_MANAGERS)
    payload = payload or ReconcileRequest()
    as_of = payload.as_of or datetime.now(UTC)
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=UTC)
    window_days = payload.policy_window_days or get_settings().petty_cash_policy_window_days
    transitioned = await _ledger(
        service.reconcile_overdue_withdrawals(
            session,
            as_of=as_of,
            policy_window=timedelta(days=window_days),
            organization_id=current_user.organization_id,
        )
    )
    return ReconcileResult(
        as_of=as_of,
        policy_window_days=window_days,
        transitioned=len(transitioned),
        withdrawal_ids=transitioned,
    )


@router.get(
    "/movements",
    response_model=list[MovementRead],
    summary="Debits and credits for a branch or the general account",
)
async def list_movements(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    branch_id: uuid.UUID | None = Query(default=None),
) -> list[MovementRead]:
    movements = await service.list_movements(
        session, organization_id=current_user.organization_id, branch_id=branch_id
    )
    return [MovementRead.model_validate(movement) for movement in movements]


async def _activity(
    session: AsyncSession,
    current_user: User,
    *,
    date_from: date,
    date_to: date,
    branch_id: uuid.UUID | None,
) -> service.ActivityReport:
    return await _ledger(
        service.activity_report(
            session,
            organization_id=current_user.organization_id,
            date_from=date_from,
            date_to=date_to,
            branch_id=branch_id,
        )
    )


@router.get(
    "/reports/activity",
    response_model=ActivityReportRead,
    summary="Deposits, withdrawals and spends in a date range",
)
async def activity_report(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    date_from: date = Query(...),
    date_to: date = Query(...),
    branch_id: uuid.UUID | None = Query(default=None),
) -> ActivityReportRead:
    report = await _activity(
        session, current_user, date_from=date_from, date_to=date_to, branch_id=branch_id
    )
    return ActivityReportRead.model_validate(report)


def _to_csv_stream(rows: list[list[str]]) -> Iterable[str]:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    for row in rows:
        buffer.seek(0)
        buffer.truncate(0)
        writer.writerow(row)
        yield buffer.getvalue()


@router.get("/reports/activity.csv", summary="Activity report as CSV")
async def activity_report_csv(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    date_from: date = Query(...),
    date_to: date = Query(...),
    branch_id: uuid.UUID | None = Query(default=None),
) -> StreamingResponse:
    report = await _activity(
        session, current_user, date_from=date_from, date_to=date_to, branch_id=branch_id
    )
    filename = f"petty-cash-{date_from.isoformat()}-{date_to.isoformat()}.csv"
    return StreamingResponse(
        _to_csv_stream(activity_rows(report)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
