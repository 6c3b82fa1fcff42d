"""
Projection vers le palier de commission suivant.
"""
from typing import List, Optional

from comisiones.core.rounding import round_money
from comisiones.core.thresholds import COMMISSION_PCT_TOLERANCE
from comisiones.schemas import CommissionThreshold, NextTierProjection, StoreContext
from comisiones.services.commission_calculator import commission_amount

MAX_TIER = "MAX"


def _current_index(ordered: List[CommissionThreshold], current_commission_pct: float) -> int:
    """
    Index du palier courant dans le bareme trie par commission_pct.
    -1 = sous tous les paliers.
    """
    for i, tier in enumerate(ordered):
        if abs(tier.commission_pct - current_commission_pct) < COMMISSION_PCT_TOLERANCE:
            return i

    # Taux hors bareme: on retient le palier juste en dessous
    for i, tier in enumerate(ordered):
        if tier.commission_pct > current_commission_pct:
            return i - 1
    return len(ordered) - 1


def project_next_tier(
    compliance_pct: float,
    current_commission_pct: float,
    budget: float,
    sales: float,
    thresholds: List[CommissionThreshold],
    store_context: Optional[StoreContext] = None,
    vat_factor: float = 1.0,
) -> NextTierProjection:
    """
    Calcule ce qu'il faut vendre pour atteindre le palier suivant.

    Args:
        compliance_pct: Cumplimiento actuel
        current_commission_pct: Taux actuel (fraction decimale)
        budget: Budget de reference
        sales: Ventes actuelles
        thresholds: Bareme du mois (ordre quelconque)
        store_context: Chiffres du gerente; sous le premier palier, l'ecart est
            calcule sur le budget et les ventes du gerente de la tienda
        vat_factor: Diviseur IVA applique au montant projete

    Returns:
        NextTierProjection; next_commission_pct="MAX" si deja au palier le plus haut
        (ou bareme vide), les autres champs a None.
    """
    if not thresholds:
        return NextTierProjection(next_commission_pct=MAX_TIER)

    ordered = sorted(thresholds, key=lambda t: t.commission_pct)
    index = _current_index(ordered, current_commission_pct)

    if index >= len(ordered) - 1:
        return NextTierProjection(next_commission_pct=MAX_TIER)

    next_tier = ordered[index + 1]

    lowest_min = min(t.compliance_min for t in thresholds)
    if store_context is not None and compliance_pct < lowest_min:
        budget = store_context.manager_budget
        sales = store_context.manager_sales

    next_budget = round_money(budget * next_tier.compliance_min / 100)
    next_sales_gap = max(0.0, round_money(next_budget - sales))

    return NextTierProjection(
        next_commission_pct=next_tier.commission_pct,
        next_tier_name=next_tier.name,
        next_budget=next_budget,
        next_sales_gap=next_sales_gap,
        next_commission_amount=commission_amount(next_budget, next_tier.commission_pct, vat_factor),
    )
