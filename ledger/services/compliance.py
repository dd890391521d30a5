"""
Compliance scoring for a filing period.

A fixed-weight checklist: every business starts at 100 and each failed
check takes its weight off the score and raises one alert.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledger.services.tax.calendar import filing_deadline
from ledger.services.tax.domain import (
    ComplianceAlert,
    ComplianceProfile,
    ComplianceReport,
    FilingRecord,
    PeriodSummary,
    TaxObligation,
    TaxpayerClass,
)
from ledger.services.tax.money import ZERO, round2, to_money
from ledger.services.tax.rates import load_rates
from ledger.utils import engine_setting

logger = logging.getLogger(__name__)

MAX_SCORE = 100
COMPLIANT_SCORE = 80
AT_RISK_SCORE = 60

SEVERITY_ORDER = {'critical': 0, 'high': 1, 'medium': 2, 'low': 3}

# check type -> (severity, weight)
CHECKS = {
    'missing_tin': ('high', 20),
    'missing_cac': ('medium', 10),
    'vat_registration_required': ('critical', 30),
    'vat_return_overdue': ('critical', 25),
    'no_input_vat': ('medium', 15),
    'high_vat_payable': ('high', 10),
    'wht_unremitted': ('critical', 25),
    'paye_unremitted': ('high', 20),
    'no_invoices': ('low', 5),
    'wht_deadline_near': ('high', 10),
    'wht_deadline_imminent': ('critical', 20),
    'filing_deadline_near': ('high', 10),
    'filing_deadline_imminent': ('critical', 20),
}

DEFAULT_HIGH_VAT_PAYABLE_THRESHOLD = Decimal('100000')

FILING_NAMES = {
    TaxObligation.VAT: 'VAT return',
    TaxObligation.PAYE: 'PAYE remittance',
}

# Days before a deadline at which outstanding obligations are flagged
DEADLINE_WARNING_DAYS = 7
DEADLINE_IMMINENT_DAYS = 3


def high_vat_payable_threshold() -> Decimal:
    value = engine_setting('HIGH_VAT_PAYABLE_THRESHOLD', DEFAULT_HIGH_VAT_PAYABLE_THRESHOLD)
    return to_money(value, 'HIGH_VAT_PAYABLE_THRESHOLD')


def status_for(score: int) -> str:
    if score >= COMPLIANT_SCORE:
        return 'compliant'
    if score >= AT_RISK_SCORE:
        return 'at_risk'
    return 'non_compliant'


def deadline_warning(prefix: str, days_left: int) -> Optional[str]:
    """Check type for a deadline ``days_left`` away, or None when it is not close yet."""
    if days_left < 0 or days_left > DEADLINE_WARNING_DAYS:
        return None
    if days_left <= DEADLINE_IMMINENT_DAYS:
        return f"{prefix}_deadline_imminent"
    return f"{prefix}_deadline_near"


def filed_amount(records: Iterable[FilingRecord], obligation: TaxObligation,
                 tax_year: int, month: Optional[int]):
    """
    Total filed/remitted for an obligation in the period and whether any
    filing exists at all. For an annual period every filing of the year counts.
    """
    total = ZERO
    found = False
    for record in records:
        if TaxObligation(record.obligation) != obligation or record.tax_year != tax_year:
            continue
        if month is not None and record.month != month:
            continue
        found = True
        total += record.amount
    return round2(total), found


def score(summary: PeriodSummary, filing_records: Iterable[FilingRecord] = (),
          profile: Optional[ComplianceProfile] = None, as_of: Optional[date] = None) -> ComplianceReport:
    """
    Score one period.

    Args:
        summary: Aggregated period figures
        filing_records: Returns filed and remittances made for the entity
        profile: Registration details; identity checks are skipped without one
        as_of: Date deadlines are judged against (defaults to today)

    Returns:
        ComplianceReport with score, status and alerts ordered critical first
    """
    as_of = as_of or date.today()
    records = list(filing_records)
    rates = load_rates(summary.tax_year)
    failed = []

    def deadline_passed(obligation):
        return as_of > filing_deadline(obligation, rates, summary.month)

    def days_left(obligation):
        return (filing_deadline(obligation, rates, summary.month) - as_of).days

    # Activity
    if summary.invoice_count == 0:
        failed.append(('no_invoices', "No invoices were recorded for this period."))

    # Registration
    if profile is not None:
        if not (profile.tin or '').strip():
            failed.append(('missing_tin', "Tax Identification Number (TIN) is missing."))

        if (TaxpayerClass.parse(profile.taxpayer_class) == TaxpayerClass.COMPANY
                and not (profile.cac_number or '').strip()):
            failed.append(('missing_cac', "CAC registration number is missing for this company."))

        turnover = max(to_money(profile.annual_turnover, 'annual_turnover'), summary.turnover)
        if turnover > rates.vat_registration_threshold and not profile.vat_registered:
            failed.append((
                'vat_registration_required',
                f"Turnover of ₦{turnover:,.2f} exceeds the ₦{rates.vat_registration_threshold:,.0f} "
                "VAT threshold but the business is not VAT registered.",
            ))

    # VAT
    _, vat_filed = filed_amount(records, TaxObligation.VAT, summary.tax_year, summary.month)
    if summary.total_output_vat > 0:
        if not vat_filed and deadline_passed(TaxObligation.VAT):
            failed.append((
                'vat_return_overdue',
                f"VAT return was due on {filing_deadline(TaxObligation.VAT, rates, summary.month)} "
                "and has not been filed.",
            ))

        if summary.total_input_vat == 0:
            failed.append((
                'no_input_vat',
                "Output VAT was charged but no input VAT was recorded on purchases.",
            ))

    if summary.net_vat > high_vat_payable_threshold():
        failed.append((
            'high_vat_payable',
            f"Net VAT payable of ₦{summary.net_vat:,.2f} is unusually high for the period.",
        ))

    # Remittances
    wht_paid, _ = filed_amount(records, TaxObligation.WHT, summary.tax_year, summary.month)
    wht_outstanding = summary.total_wht_remitted > wht_paid
    if wht_outstanding and deadline_passed(TaxObligation.WHT):
        failed.append((
            'wht_unremitted',
            f"₦{summary.total_wht_remitted - wht_paid:,.2f} of withholding tax deducted "
            "has not been remitted.",
        ))
    elif wht_outstanding:
        check = deadline_warning('wht', days_left(TaxObligation.WHT))
        if check:
            failed.append((
                check,
                f"WHT remittance is due on {filing_deadline(TaxObligation.WHT, rates, summary.month)} "
                f"({days_left(TaxObligation.WHT)} day(s) left).",
            ))

    paye_paid, _ = filed_amount(records, TaxObligation.PAYE, summary.tax_year, summary.month)
    paye_outstanding = summary.total_paye > paye_paid
    if paye_outstanding and deadline_passed(TaxObligation.PAYE):
        failed.append((
            'paye_unremitted',
            f"₦{summary.total_paye - paye_paid:,.2f} of PAYE deducted has not been remitted.",
        ))

    # Nearest outstanding VAT return or PAYE remittance still ahead of us
    upcoming = []
    if summary.total_output_vat > 0 and not vat_filed:
        upcoming.append(TaxObligation.VAT)
    if paye_outstanding:
        upcoming.append(TaxObligation.PAYE)
    upcoming = [obligation for obligation in upcoming if not deadline_passed(obligation)]
    if upcoming:
        nearest = min(upcoming, key=days_left)
        check = deadline_warning('filing', days_left(nearest))
        if check:
            failed.append((
                check,
                f"{FILING_NAMES[nearest]} is due on {filing_deadline(nearest, rates, summary.month)} "
                f"({days_left(nearest)} day(s) left).",
            ))

    points = MAX_SCORE
    alerts = []
    for check, message in failed:
        severity, weight = CHECKS[check]
        points -= weight
        alerts.append(ComplianceAlert(type=check, severity=severity, message=message))

    points = max(0, points)
    alerts.sort(key=lambda alert: SEVERITY_ORDER[alert.severity])
    status = status_for(points)

    logger.info(
        f"Compliance score for entity {summary.entity_id} ({summary.tax_year}"
        f"{'/' + str(summary.month) if summary.month else ''}): {points} {status}"
    )

    return ComplianceReport(score=points, status=status, alerts=tuple(alerts))
