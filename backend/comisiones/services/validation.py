"""
Validations de configuration et de donnees d'entree.

Aucune fonction ne leve d'exception: chacune retourne la liste des anomalies,
l'appelant decide de bloquer ou simplement d'avertir.
"""
from typing import Dict, List

from comisiones.core.keys import StoreDay
from comisiones.core.periods import parse_date
from comisiones.core.roles import Role
from comisiones.schemas import (
    BudgetRecord,
    CalcType,
    CommissionThreshold,
    EngineIssue,
    IssueKind,
    RoleBudgetConfig,
    StaffAssignment,
)


def _config_issue(field: str, message: str) -> EngineIssue:
    return EngineIssue(kind=IssueKind.INVALID_CONFIGURATION, field=field, message=message)


def validate_role_configs(configs: List[RoleBudgetConfig]) -> List[EngineIssue]:
    """Verifie la configuration des roles d'un mois."""
    issues: List[EngineIssue] = []

    seen = set()
    for config in configs:
        if config.role in seen:
            issues.append(_config_issue("role", f"Le role {config.role.value} est configure plusieurs fois"))
        seen.add(config.role)

        if config.percentage < 0:
            issues.append(_config_issue(
                "percentage",
                f"Le pourcentage du role {config.role.value} ne peut pas etre negatif ({config.percentage})",
            ))
        if config.calc_type == CalcType.DISTRIBUTIVE and config.percentage != 0:
            issues.append(_config_issue(
                "percentage",
                f"Le role distributif {config.role.value} doit avoir un pourcentage de 0 ({config.percentage})",
            ))

    fixed_total = sum(c.percentage for c in configs if c.calc_type == CalcType.FIXED)
    if fixed_total > 100:
        issues.append(_config_issue(
            "percentage",
            f"La somme des roles fixes depasse 100% ({fixed_total:g}%)",
        ))

    return issues


def validate_thresholds(thresholds: List[CommissionThreshold]) -> List[EngineIssue]:
    """Verifie un bareme de commission."""
    issues: List[EngineIssue] = []

    seen = set()
    for tier in thresholds:
        if tier.compliance_min in seen:
            issues.append(_config_issue(
                "compliance_min",
                f"Seuil de cumplimiento duplique: {tier.compliance_min:g}%",
            ))
        seen.add(tier.compliance_min)

        if tier.compliance_min < 0:
            issues.append(_config_issue("compliance_min", f"Seuil negatif pour le palier {tier.name}"))
        if tier.commission_pct < 0:
            issues.append(_config_issue("commission_pct", f"Taux negatif pour le palier {tier.name}"))
        elif tier.commission_pct >= 1:
            # 35 au lieu de 0.0035: bareme saisi en pourcentage entier
            issues.append(_config_issue(
                "commission_pct",
                f"Le taux du palier {tier.name} doit etre une fraction decimale ({tier.commission_pct:g})",
            ))

    return issues


def find_inconsistent_assignments(assignments: List[StaffAssignment]) -> List[EngineIssue]:
    """Un meme employe avec deux roles differents le meme jour dans la meme tienda."""
    issues: List[EngineIssue] = []
    roles_by_key: Dict[tuple, Role] = {}

    for assignment in assignments:
        key = (assignment.employee_id, StoreDay(assignment.store, assignment.date))
        previous = roles_by_key.get(key)
        if previous is not None and previous != assignment.role:
            issues.append(EngineIssue(
                kind=IssueKind.INCONSISTENT_ASSIGNMENT,
                field="role",
                message=(
                    f"Employe {assignment.employee_id} affecte comme {previous.value} et "
                    f"{assignment.role.value} dans {assignment.store} le {assignment.date}"
                ),
            ))
        roles_by_key[key] = assignment.role

    return issues


def validate_budget_record(record: BudgetRecord) -> List[EngineIssue]:
    """Verifie un enregistrement de budget (tienda, date YYYY-MM-DD, montant)."""
    issues: List[EngineIssue] = []

    if not record.store or not record.store.strip():
        issues.append(EngineIssue(kind=IssueKind.MISSING_DATA, field="store", message="La tienda est requise"))

    if not record.date or not record.date.strip():
        issues.append(EngineIssue(kind=IssueKind.MISSING_DATA, field="date", message="La date est requise"))
    elif parse_date(record.date) is None:
        issues.append(_config_issue("date", f"La date doit etre au format YYYY-MM-DD ({record.date})"))

    if record.total_budget < 0:
        issues.append(_config_issue(
            "total_budget",
            f"Le budget de {record.store} le {record.date} ne peut pas etre negatif",
        ))

    return issues
