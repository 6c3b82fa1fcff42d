"""
Moteur de resolution du cumplimiento contre le bareme de commission.
"""
from typing import List, Optional

from comisiones.core.rounding import round_compliance
from comisiones.schemas import CommissionThreshold, ComplianceResolution


def calculate_compliance(sales: float, budget: float) -> float:
    """Cumplimiento en % (ventes / budget * 100). 0 si budget nul."""
    if budget == 0:
        return 0.0
    return round_compliance(sales / budget * 100)


def sort_thresholds(thresholds: List[CommissionThreshold]) -> List[CommissionThreshold]:
    """Tri stable par compliance_min croissant (ne jamais faire confiance a l'ordre recu)."""
    return sorted(thresholds, key=lambda t: t.compliance_min)


def find_tier(compliance_pct: float, thresholds: List[CommissionThreshold]) -> Optional[CommissionThreshold]:
    """
    Trouve le plus haut palier dont compliance_min <= cumplimiento.

    Bandes fermees en bas, ouvertes en haut. En cas de compliance_min egaux,
    le dernier apres le tri stable l'emporte.
    """
    selected = None
    for tier in sort_thresholds(thresholds):
        if tier.compliance_min <= compliance_pct:
            selected = tier
        else:
            break
    return selected


def resolve_tier(compliance_pct: float, thresholds: List[CommissionThreshold]) -> ComplianceResolution:
    """Resout un cumplimiento deja calcule (ex: cumplimiento de la tienda)."""
    tier = find_tier(compliance_pct, thresholds or [])
    if tier is None:
        # Bareme vide ou sous le premier palier -> pas de commission
        return ComplianceResolution(compliance_pct=compliance_pct, commission_pct=0.0, tier_name=None)
    return ComplianceResolution(
        compliance_pct=compliance_pct,
        commission_pct=tier.commission_pct,
        tier_name=tier.name,
    )


def resolve_compliance(sales: float, budget: float, thresholds: List[CommissionThreshold]) -> ComplianceResolution:
    """
    Calcule le cumplimiento et le palier applicable.

    Returns:
        ComplianceResolution(compliance_pct, commission_pct, tier_name)
        commission_pct=0 et tier_name=None si aucun palier n'est atteint.
    """
    return resolve_tier(calculate_compliance(sales, budget), thresholds)
