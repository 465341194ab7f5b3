"""CSV rendering of the petty cash activity report."""

from __future__ import annotations

from decimal import Decimal

from pettycash.services.petty_cash_service import ActivityReport

HEADER = [
    "deposit_id",
    "deposit_created_at",
    "deposit_description",
    "deposit_reference",
    "deposit_amount",
    "deposit_remaining",
    "deposit_status",
    "withdrawal_id",
    "withdrawal_user",
    "withdrawal_amount_given",
    "withdrawal_amount_justified",
    "withdrawal_status",
    "spend_id",
    "spend_motive",
    "spend_description",
    "spend_amount",
    "spend_ticket_url",
]


def _format_decimal(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'))}"


def activity_rows(report: ActivityReport) -> list[list[str]]:
    """Flatten the report to one row per spend (or per empty withdrawal/deposit).

    The trailing rows carry the report totals.
    """

    rows: list[list[str]] = [list(HEADER)]
    for deposit in report.deposits:
        deposit_cells = [
            str(deposit.id),
            deposit.created_at.isoformat(),
            deposit.description,
            deposit.reference or "",
            _format_decimal(deposit.amount),
            _format_decimal(deposit.remaining_amount),
            deposit.status.value,
        ]
        if not deposit.withdrawals:
            rows.append(deposit_cells + [""] * 10)
            continue
        for withdrawal in deposit.withdrawals:
            withdrawal_cells = [
                str(withdrawal.id),
                withdrawal.user_name,
                _format_decimal(withdrawal.amount_given),
                _format_decimal(withdrawal.amount_justified),
                withdrawal.status.value,
            ]
            if not withdrawal.spends:
                rows.append(deposit_cells + withdrawal_cells + [""] * 5)
                continue
            for spend in withdrawal.spends:
                rows.append(
                    deposit_cells
                    + withdrawal_cells
                    + [
                        str(spend.id),
                        spend.motive,
                        spend.description,
                        _format_decimal(spend.amount),
                        spend.ticket_url or "",
                    ]
                )

    totals = report.totals
    rows.append([])
    rows.append(["total_deposits", _format_decimal(totals.deposits)])
    rows.append(["total_withdrawals", _format_decimal(totals.withdrawals)])
    rows.append(["total_spends", _format_decimal(totals.spends)])
    rows.append(["balance", _format_decimal(totals.balance)])
    return rows
