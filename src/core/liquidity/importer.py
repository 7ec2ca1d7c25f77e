"""
FILE: src/core/liquidity/importer.py
Projects invoice, capital-call, distribution and tax-deadline records onto CashFlow.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from src.core.liquidity.models import (
    CapitalCallRecord,
    CashFlow,
    DistributionRecord,
    ImportResult,
    InvoiceRecord,
    ScopeType,
    SourceKind,
    SourceRecord,
    TaxDeadlineRecord,
)

logger = logging.getLogger(__name__)

SOURCE_ID_PREFIXES: dict[str, str] = {
    "invoice": "inv",
    "capital_call": "cc",
    "distribution": "dist",
    "tax_deadline": "tax",
}

SETTLED_STATUSES: dict[str, frozenset[str]] = {
    "invoice": frozenset({"paid", "cancelled"}),
    "capital_call": frozenset({"funded", "cancelled"}),
    "distribution": frozenset({"received", "cancelled"}),
    "tax_deadline": frozenset({"paid", "cancelled"}),
}

CONFIRMED_STATUSES: dict[str, str] = {
    "invoice": "approved",
    "capital_call": "confirmed",
    "distribution": "confirmed",
    "tax_deadline": "confirmed",
}

_SOURCE_LABELS: dict[str, str] = {
    "invoice": "invoice",
    "capital_call": "capital call",
    "distribution": "distribution",
    "tax_deadline": "tax deadline",
}

_SOURCE_RECORD_ADAPTER: TypeAdapter[SourceRecord] = TypeAdapter(SourceRecord)


def derive_flow_id(source_kind: str, source_id: str) -> str:
    return f"{SOURCE_ID_PREFIXES[source_kind]}-{source_id}"


def _invoice_to_flow(
    record: InvoiceRecord, scope_type: ScopeType, scope_id: Optional[str]
) -> CashFlow:
    return CashFlow(
        flow_id=derive_flow_id("invoice", record.id),
        client_id=record.client_id,
        scope_type=scope_type,
        scope_id=scope_id,
        flow_type="inflow" if record.type == "receivable" else "outflow",
        category="invoice",
        flow_date=record.due_date,
        amount=record.amount,
        currency=record.currency,
        description=record.description or f"Invoice {record.id}",
        is_confirmed=record.status == CONFIRMED_STATUSES["invoice"],
        source_type="invoice",
        source_id=record.id,
    )


def _capital_call_to_flow(
    record: CapitalCallRecord, scope_type: ScopeType, scope_id: Optional[str]
) -> CashFlow:
    return CashFlow(
        flow_id=derive_flow_id("capital_call", record.id),
        client_id=record.client_id,
        scope_type=scope_type,
        scope_id=scope_id,
        flow_type="outflow",
        category="capital_call",
        flow_date=record.due_date,
        amount=record.amount,
        currency=record.currency,
        description=f"Capital Call: {record.fund_name}",
        is_confirmed=record.status == CONFIRMED_STATUSES["capital_call"],
        source_type="capital_call",
        source_id=record.id,
    )


def _distribution_to_flow(
    record: DistributionRecord, scope_type: ScopeType, scope_id: Optional[str]
) -> CashFlow:
    return CashFlow(
        flow_id=derive_flow_id("distribution", record.id),
        client_id=record.client_id,
        scope_type=scope_type,
        scope_id=scope_id,
        flow_type="inflow",
        category="distribution",
        flow_date=record.expected_date,
        amount=record.amount,
        currency=record.currency,
        description=f"Distribution: {record.fund_name}",
        is_confirmed=record.status == CONFIRMED_STATUSES["distribution"],
        source_type="distribution",
        source_id=record.id,
    )


def _tax_deadline_to_flow(
    record: TaxDeadlineRecord, scope_type: ScopeType, scope_id: Optional[str]
) -> CashFlow:
    return CashFlow(
        flow_id=derive_flow_id("tax_deadline", record.id),
        client_id=record.client_id,
        scope_type=scope_type,
        scope_id=scope_id,
        flow_type="outflow",
        category="tax",
        flow_date=record.due_date,
        amount=record.amount,
        currency=record.currency,
        description=f"Tax Payment: {record.tax_type}",
        is_confirmed=record.status == CONFIRMED_STATUSES["tax_deadline"],
        source_type="tax_deadline",
        source_id=record.id,
    )


_PROJECTIONS: dict[str, Callable[..., CashFlow]] = {
    "invoice": _invoice_to_flow,
    "capital_call": _capital_call_to_flow,
    "distribution": _distribution_to_flow,
    "tax_deadline": _tax_deadline_to_flow,
}


def import_source_records(
    records: Iterable[SourceRecord],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    """Import a mixed batch of source records for one client.

    Records owned by another client, or whose status is settled or cancelled, are
    skipped. Flows are keyed by derived id so a repeated record replaces the earlier
    projection instead of duplicating it. A record that fails to project is reported in
    ``errors`` and the batch continues.
    """
    flows: dict[str, CashFlow] = {}
    errors: list[str] = []
    skipped = 0

    for record in records:
        kind = record.source_kind
        if record.client_id != client_id:
            skipped += 1
            continue
        if record.status in SETTLED_STATUSES[kind]:
            skipped += 1
            continue
        try:
            flow = _PROJECTIONS[kind](record, scope_type, scope_id)
        except (ValidationError, ValueError) as exc:
            errors.append(f"Failed to import {_SOURCE_LABELS[kind]} {record.id}: {exc}")
            continue
        flows[flow.flow_id] = flow

    logger.debug(
        "Imported source records. client_id=%s imported=%s skipped=%s errors=%s",
        client_id,
        len(flows),
        skipped,
        len(errors),
    )
    return ImportResult(
        imported=len(flows),
        skipped=skipped,
        errors=errors,
        flows=list(flows.values()),
    )


def import_from_invoices(
    invoices: Iterable[InvoiceRecord],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    return import_source_records(invoices, client_id, scope_type, scope_id)


def import_from_capital_calls(
    calls: Iterable[CapitalCallRecord],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    return import_source_records(calls, client_id, scope_type, scope_id)


def import_from_distributions(
    distributions: Iterable[DistributionRecord],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    return import_source_records(distributions, client_id, scope_type, scope_id)


def import_from_tax_deadlines(
    deadlines: Iterable[TaxDeadlineRecord],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    return import_source_records(deadlines, client_id, scope_type, scope_id)


def merge_import_results(results: Iterable[ImportResult]) -> ImportResult:
    flows: dict[str, CashFlow] = {}
    errors: list[str] = []
    skipped = 0
    for result in results:
        skipped += result.skipped
        errors.extend(result.errors)
        for flow in result.flows:
            flows[flow.flow_id] = flow
    return ImportResult(
        imported=len(flows), skipped=skipped, errors=errors, flows=list(flows.values())
    )


def import_all_sources(
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
    *,
    invoices: Optional[Sequence[InvoiceRecord]] = None,
    capital_calls: Optional[Sequence[CapitalCallRecord]] = None,
    distributions: Optional[Sequence[DistributionRecord]] = None,
    tax_deadlines: Optional[Sequence[TaxDeadlineRecord]] = None,
) -> ImportResult:
    results = []
    if invoices:
        results.append(import_from_invoices(invoices, client_id, scope_type, scope_id))
    if capital_calls:
        results.append(import_from_capital_calls(capital_calls, client_id, scope_type, scope_id))
    if distributions:
        results.append(import_from_distributions(distributions, client_id, scope_type, scope_id))
    if tax_deadlines:
        results.append(import_from_tax_deadlines(tax_deadlines, client_id, scope_type, scope_id))
    return merge_import_results(results)


def import_raw_records(
    source_kind: SourceKind,
    payloads: Iterable[Mapping[str, Any]],
    client_id: str,
    scope_type: ScopeType = "household",
    scope_id: Optional[str] = None,
) -> ImportResult:
    """Validate raw payloads of one source kind and import the ones that parse."""
    records = []
    errors: list[str] = []
    for index, payload in enumerate(payloads):
        candidate = {**payload, "source_kind": source_kind}
        try:
            records.append(_SOURCE_RECORD_ADAPTER.validate_python(candidate))
        except ValidationError as exc:
            record_id = payload.get("id", f"#{index}")
            first_error = exc.errors()[0]
            location = ".".join(str(part) for part in first_error.get("loc", ()))
            errors.append(
                f"Failed to import {_SOURCE_LABELS[source_kind]} {record_id}: "
                f"{location} {first_error.get('msg', 'validation failed')}".rstrip()
            )
    result = import_source_records(records, client_id, scope_type, scope_id)
    return result.model_copy(update={"errors": errors + result.errors})
