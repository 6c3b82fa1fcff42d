"""
Service d'agrégation par tienda / jour et par mois.

Relie les briques du moteur: repartition du budget, resolution du cumplimiento,
calcul des commissions selon la base du role, projection au palier suivant.
"""
import logging
from collections import Counter
from typing import Dict, List, Optional, TypeVar

from comisiones.core.keys import EmployeeKey, StoreDay
from comisiones.core.periods import in_period
from comisiones.core.roles import CommissionBasis, Role, ROLE_ORDER, get_role_policy
from comisiones.schemas import (
    BudgetRecord,
    CommissionPolicy,
    CommissionThreshold,
    ComplianceResolution,
    EmployeeCommissionResult,
    EngineIssue,
    MonthSummary,
    RoleBudgetConfig,
    SalesRecord,
    StaffAssignment,
    StoreContext,
    StoreSummary,
)
from comisiones.services.budget_allocator import allocate_budgets, allocate_per_employee
from comisiones.services.commission_calculator import (
    calculate_employee_commission,
    check_thresholds,
    summarize_month,
    summarize_store,
)
from comisiones.services.compliance_resolver import calculate_compliance, resolve_compliance, resolve_tier
from comisiones.services.next_tier import project_next_tier
from comisiones.services.validation import (
    find_inconsistent_assignments,
    validate_role_configs,
    validate_thresholds,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", BudgetRecord, SalesRecord)


def index_by_store_day(records: List[R]) -> Dict[StoreDay, R]:
    """Indexe budgets ou ventes par (tienda, jour). En cas de doublon, le dernier gagne."""
    return {StoreDay(r.store, r.date): r for r in records}


def group_assignments(assignments: List[StaffAssignment]) -> Dict[StoreDay, List[StaffAssignment]]:
    """Regroupe les affectations par (tienda, jour) en conservant l'ordre recu."""
    grouped: Dict[StoreDay, List[StaffAssignment]] = {}
    for assignment in assignments:
        grouped.setdefault(StoreDay(assignment.store, assignment.date), []).append(assignment)
    return grouped


def _accumulate_employees(
    store: str,
    days: List[str],
    budgets: Dict[StoreDay, BudgetRecord],
    sales: Dict[StoreDay, SalesRecord],
    staff: Dict[StoreDay, List[StaffAssignment]],
    role_configs: List[RoleBudgetConfig],
    policy: CommissionPolicy,
) -> Dict[EmployeeKey, Dict]:
    """
    Repartit le budget jour par jour et cumule budget / ventes par employe.

    Un employe qui change de role dans le mois a une entree par role.
    Les ventes d'un jour ne sont attribuees que si l'employe est affecte ce jour-la.
    """
    employees: Dict[EmployeeKey, Dict] = {}

    for day in days:
        key = StoreDay(store, day)
        # Un seul role par employe et par jour (le dernier gagne, voir validation)
        day_staff = {a.employee_id: a for a in staff.get(key, [])}
        if not day_staff:
            continue

        budget_record = budgets.get(key)
        sales_record = sales.get(key)
        if budget_record is None:
            logger.info("[MONTH] Pas de budget pour %s le %s: budget 0", store, day)
        if sales_record is None:
            logger.info("[MONTH] Pas de ventes pour %s le %s: ventes 0", store, day)

        headcount = Counter(a.role for a in day_staff.values())
        pools = allocate_budgets(
            budget_record.total_budget if budget_record else 0.0,
            role_configs,
            headcount,
            policy.distributive_split,
        )

        for assignment in day_staff.values():
            employee_key = EmployeeKey(assignment.employee_id, store, assignment.role)
            entry = employees.setdefault(employee_key, {
                "assignment": assignment,
                "budget": 0.0,
                "sales": 0.0,
                "days": [],
            })

            per_employee = allocate_per_employee(
                pools.get(assignment.role, 0.0),
                headcount[assignment.role],
                assignment.role,
            )
            if get_role_policy(assignment.role).pinned_budget is not None:
                entry["budget"] = per_employee
            else:
                entry["budget"] += per_employee

            if sales_record is not None:
                entry["sales"] += sales_record.sales_by_employee.get(assignment.employee_id, 0.0)
            entry["days"].append(day)

    return employees


def _store_context(store: str, employees: Dict[EmployeeKey, Dict]) -> Optional[StoreContext]:
    """Chiffres du gerente de la tienda (le premier par identifiant s'il y en a plusieurs)."""
    managers = sorted(
        (k for k in employees if k.role == Role.GERENTE),
        key=lambda k: k.employee_id,
    )
    if not managers:
        return None
    entry = employees[managers[0]]
    return StoreContext(store=store, manager_budget=entry["budget"], manager_sales=entry["sales"])


def _employee_result(
    entry: Dict,
    store_budget: float,
    store_sales: float,
    store_resolution: ComplianceResolution,
    store_headcount: int,
    thresholds: List[CommissionThreshold],
    store_context: Optional[StoreContext],
    policy: CommissionPolicy,
    errors: List[EngineIssue],
) -> EmployeeCommissionResult:
    """Calcule la commission d'un employe selon la base de son role."""
    assignment: StaffAssignment = entry["assignment"]
    budget = entry["budget"]
    sales = entry["sales"]
    basis = get_role_policy(assignment.role).basis

    if basis == CommissionBasis.INDIVIDUAL:
        resolution = resolve_compliance(sales, budget, thresholds)
        commission_base = sales
        projection_budget, projection_sales = budget, sales
    elif basis == CommissionBasis.STORE:
        resolution = store_resolution
        commission_base = store_sales
        projection_budget, projection_sales = store_budget, store_sales
    elif basis == CommissionBasis.COLLECTIVE:
        resolution = store_resolution
        commission_base = store_sales / store_headcount if store_headcount > 0 else 0.0
        # Part des ventes de la tienda: pas de projection individuelle
        projection_budget = projection_sales = None
    else:
        # Taux fixe, pas de suivi de cumplimiento ni de projection
        resolution = ComplianceResolution(
            compliance_pct=0.0,
            commission_pct=policy.online_manager_rate,
            tier_name=None,
        )
        commission_base = sales
        projection_budget = projection_sales = None

    projection = None
    if projection_budget is not None:
        projection = project_next_tier(
            resolution.compliance_pct,
            resolution.commission_pct,
            projection_budget,
            projection_sales,
            thresholds,
            store_context=store_context,
            vat_factor=policy.vat_factor,
        )

    days = entry["days"]
    dated_assignment = StaffAssignment(
        employee_id=assignment.employee_id,
        name=assignment.name,
        store=assignment.store,
        date=days[0],
        role=assignment.role,
    )
    return calculate_employee_commission(
        dated_assignment,
        budget,
        sales,
        resolution,
        vat_factor=policy.vat_factor,
        commission_base=commission_base,
        projection=projection,
        days_worked=len(days),
        errors=errors,
    )


def _compute_store(
    store: str,
    days: List[str],
    budgets: Dict[StoreDay, BudgetRecord],
    sales: Dict[StoreDay, SalesRecord],
    staff: Dict[StoreDay, List[StaffAssignment]],
    role_configs: List[RoleBudgetConfig],
    thresholds: List[CommissionThreshold],
    policy: CommissionPolicy,
) -> StoreSummary:
    store_budget = sum(budgets[StoreDay(store, d)].total_budget for d in days if StoreDay(store, d) in budgets)
    store_sales = sum(sales[StoreDay(store, d)].store_sales for d in days if StoreDay(store, d) in sales)

    employees = _accumulate_employees(store, days, budgets, sales, staff, role_configs, policy)
    store_headcount = len({k.employee_id for k in employees})
    store_resolution = resolve_tier(calculate_compliance(store_sales, store_budget), thresholds)
    context = _store_context(store, employees)

    threshold_issue = check_thresholds(thresholds, policy)
    errors = [threshold_issue] if threshold_issue else []

    results = [
        _employee_result(
            entry, store_budget, store_sales, store_resolution, store_headcount,
            thresholds, context, policy, errors,
        )
        for entry in employees.values()
    ]
    results.sort(key=lambda r: (ROLE_ORDER.index(r.role), r.name, r.employee_id))

    return summarize_store(
        results,
        store_budget,
        store_sales,
        store=store,
        date=days[0] if days else "",
        errors=errors,
    )


def compute_store_day(
    store: str,
    date: str,
    budget: Optional[BudgetRecord],
    sales: Optional[SalesRecord],
    assignments: List[StaffAssignment],
    role_configs: List[RoleBudgetConfig],
    thresholds: Optional[List[CommissionThreshold]],
    policy: Optional[CommissionPolicy] = None,
) -> StoreSummary:
    """
    Calcule le resume d'une tienda pour un seul jour.
    Budget ou ventes absents -> traites comme 0 (pas de commission, pas d'erreur).
    """
    policy = policy or CommissionPolicy()
    key = StoreDay(store, date)
    budgets = {key: budget} if budget is not None else {}
    sales_index = {key: sales} if sales is not None else {}
    staff = {key: [a for a in assignments if a.store == store and a.date == date]}
    return _compute_store(store, [date], budgets, sales_index, staff, role_configs, thresholds or [], policy)


def collect_issues(
    role_configs: List[RoleBudgetConfig],
    thresholds: Optional[List[CommissionThreshold]],
    assignments: List[StaffAssignment],
    policy: CommissionPolicy,
) -> List[EngineIssue]:
    """Toutes les anomalies de configuration d'un calcul mensuel."""
    issues: List[EngineIssue] = []
    issues.extend(validate_role_configs(role_configs))
    issues.extend(validate_thresholds(thresholds or []))
    issues.extend(find_inconsistent_assignments(assignments))
    threshold_issue = check_thresholds(thresholds, policy)
    if threshold_issue:
        issues.append(threshold_issue)
    return issues


def compute_month(
    month: str,
    budgets: List[BudgetRecord],
    assignments: List[StaffAssignment],
    sales: List[SalesRecord],
    role_configs: List[RoleBudgetConfig],
    thresholds: Optional[List[CommissionThreshold]],
    policy: Optional[CommissionPolicy] = None,
    cutoff_date: Optional[str] = None,
) -> MonthSummary:
    """
    Calcule le resume des commissions d'un mois.

    Args:
        month: Mois YYYY-MM
        budgets: Budgets journaliers des tiendas
        assignments: Affectations journalieres du personnel
        sales: Ventes journalieres (tienda + par employe)
        role_configs: Configuration des roles du mois
        thresholds: Bareme du mois (ordre quelconque)
        policy: Options de calcul
        cutoff_date: Ignore les jours posterieurs (mois en cours)

    Returns:
        MonthSummary avec une entree par tienda; les anomalies de configuration
        sont listees dans `errors`, le calcul n'est jamais bloque.
    """
    policy = policy or CommissionPolicy()
    thresholds = thresholds or []

    month_budgets = [b for b in budgets if in_period(b.date, month, cutoff_date)]
    month_assignments = [a for a in assignments if in_period(a.date, month, cutoff_date)]
    month_sales = [s for s in sales if in_period(s.date, month, cutoff_date)]

    issues = collect_issues(role_configs, thresholds, month_assignments, policy)
    for issue in issues:
        logger.warning("[MONTH] %s: %s", issue.kind.value, issue.message)

    budget_index = index_by_store_day(month_budgets)
    sales_index = index_by_store_day(month_sales)
    staff_index = group_assignments(month_assignments)

    days_by_store: Dict[str, set] = {}
    for key in list(budget_index) + list(sales_index) + list(staff_index):
        days_by_store.setdefault(key.store, set()).add(key.date)

    summaries = [
        _compute_store(
            store, sorted(days_by_store[store]), budget_index, sales_index, staff_index,
            role_configs, thresholds, policy,
        )
        for store in sorted(days_by_store)
    ]

    summary = summarize_month(summaries, month, errors=issues)
    logger.info(
        "[MONTH] %s: %d tienda(s), commissions %.2f",
        month, len(summary.stores), summary.total_commissions,
    )
    return summary
