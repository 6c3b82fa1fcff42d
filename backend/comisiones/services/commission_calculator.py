"""
Calcul des commissions par employe et agregation par tienda / mois.
"""
from typing import List, Optional

from comisiones.core.roles import get_all_roles
from comisiones.core.rounding import round_money
from comisiones.schemas import (
    CommissionPolicy,
    CommissionThreshold,
    ComplianceResolution,
    EmployeeCommissionResult,
    EngineIssue,
    IssueKind,
    MonthSummary,
    NextTierProjection,
    StaffAssignment,
    StoreSummary,
)
from comisiones.services.compliance_resolver import calculate_compliance


def commission_amount(base: float, commission_pct: float, vat_factor: float = 1.0) -> float:
    """Montant = round(base * taux), la base etant ramenee hors IVA si vat_factor != 1."""
    if vat_factor and vat_factor != 1.0:
        base = base / vat_factor
    return round_money(base * commission_pct)


def calculate_employee_commission(
    assignment: StaffAssignment,
    budget: float,
    sales: float,
    resolution: ComplianceResolution,
    vat_factor: float = 1.0,
    commission_base: Optional[float] = None,
    projection: Optional[NextTierProjection] = None,
    days_worked: int = 1,
    errors: Optional[List[EngineIssue]] = None,
) -> EmployeeCommissionResult:
    """
    Construit le resultat d'un employe.

    La commission est une fraction des ventes (pas du budget ni de l'ecart).
    commission_base permet aux roles "tienda" de commissionner sur une autre base
    que leurs ventes propres, qui restent affichees dans `sales`.
    """
    base = sales if commission_base is None else commission_base
    return EmployeeCommissionResult(
        employee_id=assignment.employee_id,
        name=assignment.name,
        role=assignment.role,
        store=assignment.store,
        date=assignment.date,
        budget=round_money(budget),
        sales=round_money(sales),
        compliance_pct=resolution.compliance_pct,
        commission_pct=resolution.commission_pct,
        commission_amount=commission_amount(base, resolution.commission_pct, vat_factor),
        tier_name=resolution.tier_name,
        next_tier_gap_amount=projection.next_sales_gap if projection else None,
        next_tier=projection,
        days_worked=days_worked,
        errors=list(errors or []),
    )


def summarize_store(
    results: List[EmployeeCommissionResult],
    budget: float,
    sales: float,
    store: Optional[str] = None,
    date: Optional[str] = None,
    errors: Optional[List[EngineIssue]] = None,
) -> StoreSummary:
    """
    Resume d'une tienda. Le cumplimiento de la tienda est calcule sur ses
    totaux, ce n'est pas la moyenne des cumplimientos des employes.
    """
    if store is None:
        store = results[0].store if results else ""
    if date is None:
        date = results[0].date if results else ""

    total_commissions = round_money(sum(r.commission_amount for r in results))

    return StoreSummary(
        store=store,
        date=date,
        total_budget=round_money(budget),
        total_sales=round_money(sales),
        compliance_store_pct=calculate_compliance(sales, budget),
        total_commissions=total_commissions,
        employees=list(results),
        errors=list(errors or []),
    )


def summarize_month(
    store_summaries: List[StoreSummary],
    month: str,
    errors: Optional[List[EngineIssue]] = None,
) -> MonthSummary:
    """
    Resume du mois. commissions_by_role contient toujours tous les roles connus,
    a 0 si aucun employe du role n'a commissionne.
    """
    by_role = {role: 0.0 for role in get_all_roles()}
    for summary in store_summaries:
        for employee in summary.employees:
            by_role[employee.role] += employee.commission_amount

    return MonthSummary(
        month=month,
        stores=list(store_summaries),
        total_commissions=round_money(sum(s.total_commissions for s in store_summaries)),
        commissions_by_role={role: round_money(value) for role, value in by_role.items()},
        errors=list(errors or []),
    )


def check_thresholds(
    thresholds: Optional[List[CommissionThreshold]],
    policy: CommissionPolicy,
) -> Optional[EngineIssue]:
    """
    Bareme absent alors que la politique l'exige -> anomalie de configuration.
    Si l'appelant accepte le repli "sans commission", rien n'est signale.
    """
    if thresholds:
        return None
    if policy.allow_empty_thresholds:
        return None
    return EngineIssue(
        kind=IssueKind.INVALID_CONFIGURATION,
        field="thresholds",
        message="Aucun palier de commission configure pour le mois",
    )
