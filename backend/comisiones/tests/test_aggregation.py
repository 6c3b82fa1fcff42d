"""
Tests de bout en bout: tienda / jour et resume mensuel.
"""
import pytest
from comisiones.core.roles import Role
from comisiones.schemas import (
    BudgetRecord,
    CalcType,
    CommissionPolicy,
    DistributiveSplit,
    IssueKind,
    RoleBudgetConfig,
    SalesRecord,
    StaffAssignment,
)
from comisiones.services.aggregation import (
    compute_month,
    compute_store_day,
    group_assignments,
    index_by_store_day,
)

ROLE_CONFIGS = [
    RoleBudgetConfig(role=Role.GERENTE, calc_type=CalcType.FIXED, percentage=10),
    RoleBudgetConfig(role=Role.ASESOR, calc_type=CalcType.DISTRIBUTIVE),
]


def _staff(employee_id, name, role, date="2024-03-10", store="T1"):
    return StaffAssignment(employee_id=employee_id, name=name, store=store, date=date, role=role)


def _by_id(summary):
    return {e.employee_id: e for e in summary.employees}


def test_store_day_manager_and_advisors(thresholds):
    """14M de budget, 1 gerente + 4 asesores"""
    assignments = [
        _staff("G1", "Gina", Role.GERENTE),
        _staff("A1", "Ana", Role.ASESOR),
        _staff("A2", "Beto", Role.ASESOR),
        _staff("A3", "Caro", Role.ASESOR),
        _staff("A4", "Dani", Role.ASESOR),
    ]
    budget = BudgetRecord(store="T1", date="2024-03-10", total_budget=14_000_000)
    sales = SalesRecord(
        store="T1", date="2024-03-10", store_sales=15_000_000,
        sales_by_employee={"A1": 3_780_000, "A2": 3_150_000, "A3": 2_000_000},
    )

    summary = compute_store_day("T1", "2024-03-10", budget, sales, assignments, ROLE_CONFIGS, thresholds)
    employees = _by_id(summary)

    assert summary.errors == []
    assert summary.compliance_store_pct == pytest.approx(107.1429)

    assert employees["A1"].budget == 3_150_000
    assert employees["A1"].commission_pct == 0.01
    assert employees["A1"].commission_amount == 37_800.0
    assert employees["A2"].commission_pct == 0.007
    assert employees["A2"].commission_amount == 22_050.0
    assert employees["A3"].commission_amount == 0.0
    assert employees["A4"].sales == 0.0

    # Gerente: cumplimiento et ventes de la tienda
    assert employees["G1"].budget == 1_400_000
    assert employees["G1"].tier_name == "Buena"
    assert employees["G1"].commission_amount == 105_000.0

    assert summary.total_commissions == 164_850.0
    assert [e.employee_id for e in summary.employees] == ["G1", "A1", "A2", "A3", "A4"]


def test_store_day_collective_and_flat_roles(thresholds):
    """Cajero / logistico sur les ventes partagees, gerente online a taux fixe"""
    assignments = [
        _staff("G1", "Gina", Role.GERENTE),
        _staff("A1", "Ana", Role.ASESOR),
        _staff("C1", "Cami", Role.CAJERO),
        _staff("L1", "Luis", Role.LOGISTICO),
        _staff("O1", "Olga", Role.GERENTE_ONLINE),
    ]
    budget = BudgetRecord(store="T1", date="2024-03-10", total_budget=10_000)
    sales = SalesRecord(
        store="T1", date="2024-03-10", store_sales=10_000,
        sales_by_employee={"A1": 9_000, "O1": 500_000},
    )

    summary = compute_store_day("T1", "2024-03-10", budget, sales, assignments, ROLE_CONFIGS, thresholds)
    employees = _by_id(summary)

    # Cumplimiento tienda 100% -> 0.7% sur 10 000 / 5 employes
    assert employees["C1"].budget == 1.0
    assert employees["C1"].commission_pct == 0.007
    assert employees["C1"].commission_amount == 14.0
    assert employees["L1"].commission_amount == 14.0
    # Commission sur une part des ventes de la tienda: pas de projection
    assert employees["C1"].next_tier is None
    assert employees["C1"].next_tier_gap_amount is None
    assert employees["L1"].next_tier is None
    assert employees["G1"].next_tier is not None

    assert employees["O1"].budget == 1.0
    assert employees["O1"].compliance_pct == 0.0
    assert employees["O1"].commission_amount == 5_000.0
    assert employees["O1"].next_tier is None

    assert [e.role for e in summary.employees] == [
        Role.GERENTE, Role.ASESOR, Role.CAJERO, Role.LOGISTICO, Role.GERENTE_ONLINE,
    ]


def test_store_day_without_manager_gives_fixed_share_to_advisors(thresholds):
    """Gerente absent ce jour-la -> ses 10% reviennent aux asesores"""
    assignments = [_staff("A1", "Ana", Role.ASESOR), _staff("A2", "Beto", Role.ASESOR)]
    budget = BudgetRecord(store="T1", date="2024-03-10", total_budget=10_000)
    sales = SalesRecord(
        store="T1", date="2024-03-10", store_sales=10_000,
        sales_by_employee={"A1": 5_000, "A2": 5_000},
    )

    summary = compute_store_day("T1", "2024-03-10", budget, sales, assignments, ROLE_CONFIGS, thresholds)

    assert [e.budget for e in summary.employees] == [5_000, 5_000]
    assert all(e.compliance_pct == 100.0 for e in summary.employees)
    assert all(e.tier_name == "Buena" for e in summary.employees)


def test_store_day_flat_rate_follows_policy(thresholds):
    """Le taux du gerente online vient de la politique"""
    assignments = [_staff("O1", "Olga", Role.GERENTE_ONLINE)]
    sales = SalesRecord(store="T1", date="2024-03-10", store_sales=0, sales_by_employee={"O1": 1000})

    summary = compute_store_day(
        "T1", "2024-03-10", None, sales, assignments, ROLE_CONFIGS, thresholds,
        policy=CommissionPolicy(online_manager_rate=0.02),
    )

    assert summary.employees[0].commission_amount == 20.0


def test_store_day_missing_budget_and_sales(thresholds):
    """Budget et ventes absents -> commissions a 0, pas d'erreur"""
    assignments = [_staff("G1", "Gina", Role.GERENTE), _staff("A1", "Ana", Role.ASESOR)]

    summary = compute_store_day("T1", "2024-03-10", None, None, assignments, ROLE_CONFIGS, thresholds)

    assert summary.errors == []
    assert summary.total_budget == 0
    assert summary.total_commissions == 0
    assert all(e.compliance_pct == 0 for e in summary.employees)


def test_store_day_empty_thresholds_flagged():
    """Bareme vide -> anomalie sur la tienda, aucune commission"""
    assignments = [_staff("A1", "Ana", Role.ASESOR)]
    budget = BudgetRecord(store="T1", date="2024-03-10", total_budget=1000)
    sales = SalesRecord(store="T1", date="2024-03-10", store_sales=2000, sales_by_employee={"A1": 2000})

    summary = compute_store_day("T1", "2024-03-10", budget, sales, assignments, ROLE_CONFIGS, [])

    assert summary.total_commissions == 0
    assert summary.errors[0].kind == IssueKind.INVALID_CONFIGURATION
    assert summary.employees[0].errors[0].field == "thresholds"
    assert summary.employees[0].next_tier.next_commission_pct == "MAX"


def test_index_and_group_helpers():
    """Doublons de budget: le dernier gagne; affectations regroupees par jour"""
    budgets = [
        BudgetRecord(store="T1", date="2024-03-01", total_budget=1),
        BudgetRecord(store="T1", date="2024-03-01", total_budget=2),
    ]
    index = index_by_store_day(budgets)
    assert len(index) == 1
    assert list(index.values())[0].total_budget == 2

    grouped = group_assignments([
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-01"),
        _staff("A2", "Beto", Role.ASESOR, date="2024-03-01"),
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-02"),
    ])
    assert [len(v) for v in grouped.values()] == [2, 1]


def _month_inputs():
    budgets = [
        BudgetRecord(store="T1", date="2024-03-01", total_budget=1000),
        BudgetRecord(store="T1", date="2024-03-02", total_budget=1000),
        BudgetRecord(store="T1", date="2024-04-01", total_budget=5000),
    ]
    assignments = [
        _staff("G1", "Gina", Role.GERENTE, date="2024-03-01"),
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-01"),
        _staff("G1", "Gina", Role.GERENTE, date="2024-03-02"),
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-02"),
        _staff("A2", "Beto", Role.ASESOR, date="2024-03-02"),
        _staff("A1", "Ana", Role.ASESOR, date="2024-04-01"),
    ]
    sales = [
        SalesRecord(store="T1", date="2024-03-01", store_sales=1100, sales_by_employee={"A1": 1000}),
        SalesRecord(store="T1", date="2024-03-02", store_sales=900, sales_by_employee={"A1": 500, "A2": 400}),
        SalesRecord(store="T1", date="2024-04-01", store_sales=9000, sales_by_employee={"A1": 9000}),
    ]
    return budgets, assignments, sales


def test_compute_month_accumulates_days(thresholds):
    """Budgets et ventes cumules sur les jours du mois, avril ignore"""
    budgets, assignments, sales = _month_inputs()

    summary = compute_month("2024-03", budgets, assignments, sales, ROLE_CONFIGS, thresholds)

    assert summary.errors == []
    assert len(summary.stores) == 1
    store = summary.stores[0]
    assert store.date == "2024-03-01"
    assert store.total_budget == 2000
    assert store.total_sales == 2000

    employees = _by_id(store)
    assert employees["A1"].budget == 1350
    assert employees["A1"].sales == 1500
    assert employees["A1"].days_worked == 2
    assert employees["A1"].commission_amount == 15.0
    assert employees["A2"].budget == 450
    assert employees["A2"].commission_amount == 0.0
    assert employees["G1"].budget == 200
    assert employees["G1"].commission_amount == 14.0

    assert summary.total_commissions == 29.0
    assert summary.commissions_by_role[Role.GERENTE] == 14.0
    assert summary.commissions_by_role[Role.ASESOR] == 15.0
    assert summary.commissions_by_role[Role.CAJERO] == 0.0


def test_compute_month_cutoff(thresholds):
    """Les jours apres la date limite sont ignores"""
    budgets, assignments, sales = _month_inputs()

    summary = compute_month(
        "2024-03", budgets, assignments, sales, ROLE_CONFIGS, thresholds, cutoff_date="2024-03-01",
    )
    employees = _by_id(summary.stores[0])

    assert set(employees) == {"G1", "A1"}
    assert employees["A1"].budget == 900
    assert employees["A1"].commission_amount == 10.0
    assert employees["G1"].commission_amount == 11.0
    assert summary.total_commissions == 21.0


def test_compute_month_headcount_split(thresholds):
    """Repartition par employe entre deux roles distributifs"""
    configs = [
        RoleBudgetConfig(role=Role.ASESOR, calc_type=CalcType.DISTRIBUTIVE),
        RoleBudgetConfig(role=Role.COADMINISTRADOR, calc_type=CalcType.DISTRIBUTIVE),
    ]
    budgets = [BudgetRecord(store="T1", date="2024-03-01", total_budget=900)]
    assignments = [
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-01"),
        _staff("A2", "Beto", Role.ASESOR, date="2024-03-01"),
        _staff("K1", "Kike", Role.COADMINISTRADOR, date="2024-03-01"),
    ]

    by_role = compute_month(
        "2024-03", budgets, assignments, [], configs, thresholds,
        policy=CommissionPolicy(distributive_split=DistributiveSplit.ROLE),
    )
    by_head = compute_month(
        "2024-03", budgets, assignments, [], configs, thresholds,
        policy=CommissionPolicy(distributive_split=DistributiveSplit.HEADCOUNT),
    )

    assert _by_id(by_role.stores[0])["A1"].budget == 225
    assert _by_id(by_role.stores[0])["K1"].budget == 450
    assert _by_id(by_head.stores[0])["A1"].budget == 300
    assert _by_id(by_head.stores[0])["K1"].budget == 300


def test_compute_month_reports_issues_without_blocking(thresholds):
    """Anomalies listees, le calcul continue"""
    assignments = [
        _staff("A1", "Ana", Role.ASESOR, date="2024-03-01"),
        _staff("A1", "Ana", Role.CAJERO, date="2024-03-01"),
    ]
    budgets = [BudgetRecord(store="T1", date="2024-03-01", total_budget=1000)]

    summary = compute_month("2024-03", budgets, assignments, [], ROLE_CONFIGS, thresholds)

    assert [i.kind for i in summary.errors] == [IssueKind.INCONSISTENT_ASSIGNMENT]
    assert len(summary.stores) == 1


def test_compute_month_stores_sorted(thresholds):
    """Tiendas triees par nom"""
    budgets = [
        BudgetRecord(store="T2", date="2024-03-01", total_budget=100),
        BudgetRecord(store="T1", date="2024-03-01", total_budget=100),
    ]
    summary = compute_month("2024-03", budgets, [], [], ROLE_CONFIGS, thresholds)

    assert [s.store for s in summary.stores] == ["T1", "T2"]
    assert summary.total_commissions == 0.0
