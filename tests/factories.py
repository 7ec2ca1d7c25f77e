from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from src.core.liquidity.models import (
    CapitalCallRecord,
    CashFlow,
    CashPosition,
    DistributionRecord,
    InvoiceRecord,
    Recurrence,
    TaxDeadlineRecord,
)

CLIENT_ID = "cl_001"


def position(
    position_id: str,
    balance: str,
    *,
    currency: str = "USD",
    client_id: str = CLIENT_ID,
    account_id: Optional[str] = None,
    as_of: Optional[datetime] = None,
) -> CashPosition:
    return CashPosition(
        position_id=position_id,
        client_id=client_id,
        account_id=account_id,
        balance=Decimal(balance),
        currency=currency,
        as_of=as_of or datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def flow(
    flow_id: str,
    flow_type: str,
    amount: str,
    flow_date: date,
    *,
    category: str = "other",
    currency: str = "USD",
    recurrence: Optional[Recurrence] = None,
) -> CashFlow:
    return CashFlow(
        flow_id=flow_id,
        client_id=CLIENT_ID,
        flow_type=flow_type,
        category=category,
        flow_date=flow_date,
        amount=Decimal(amount),
        currency=currency,
        recurrence=recurrence,
    )


def inflow(flow_id: str, amount: str, flow_date: date, **kwargs) -> CashFlow:
    return flow(flow_id, "inflow", amount, flow_date, **kwargs)


def outflow(flow_id: str, amount: str, flow_date: date, **kwargs) -> CashFlow:
    return flow(flow_id, "outflow", amount, flow_date, **kwargs)


def invoice(
    record_id: str,
    *,
    type: str = "payable",
    status: str = "pending",
    amount: str = "1000",
    client_id: str = CLIENT_ID,
    due_date: date = date(2026, 2, 1),
) -> InvoiceRecord:
    return InvoiceRecord(
        id=record_id,
        client_id=client_id,
        type=type,
        amount=Decimal(amount),
        currency="USD",
        due_date=due_date,
        status=status,
    )


def capital_call(
    record_id: str, *, status: str = "pending", client_id: str = CLIENT_ID
) -> CapitalCallRecord:
    return CapitalCallRecord(
        id=record_id,
        client_id=client_id,
        fund_name="Fund II",
        amount=Decimal("250000"),
        currency="USD",
        due_date=date(2026, 3, 1),
        status=status,
    )


def distribution(
    record_id: str, *, status: str = "expected", client_id: str = CLIENT_ID
) -> DistributionRecord:
    return DistributionRecord(
        id=record_id,
        client_id=client_id,
        fund_name="Fund I",
        amount=Decimal("80000"),
        currency="USD",
        expected_date=date(2026, 4, 15),
        status=status,
    )


def tax_deadline(
    record_id: str, *, status: str = "upcoming", client_id: str = CLIENT_ID
) -> TaxDeadlineRecord:
    return TaxDeadlineRecord(
        id=record_id,
        client_id=client_id,
        tax_type="Income tax",
        amount=Decimal("120000"),
        currency="USD",
        due_date=date(2026, 4, 15),
        status=status,
    )
