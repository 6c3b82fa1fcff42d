"""
Repartition du budget d'une tienda entre roles, puis entre employes.
"""
import logging
from typing import Dict, List, Optional

from comisiones.core.roles import Role, get_role_policy
from comisiones.core.rounding import round_money
from comisiones.schemas import CalcType, DistributiveSplit, RoleBudgetConfig

logger = logging.getLogger(__name__)


def allocate_budgets(
    total_budget: float,
    role_configs: List[RoleBudgetConfig],
    headcount_by_role: Dict[Role, int],
    split: DistributiveSplit = DistributiveSplit.ROLE,
) -> Dict[Role, float]:
    """
    Calcule le pool de budget de chaque role.

    1. Les roles Fixed ayant du personnel prennent round(total * pourcentage / 100).
       Sans personnel, leur pool vaut 0 et leur part reste a distribuer.
    2. Le reste (total - somme des fixes, non borne: peut etre negatif si la
       configuration depasse 100%) va aux roles Distributive ayant du personnel.
    3. Un role distributif sans personnel recoit 0; sa part n'est pas redistribuee.

    Args:
        total_budget: Budget total de la tienda
        role_configs: Configuration des roles du mois
        headcount_by_role: Effectif par role (role absent = 0)
        split: ROLE = parts egales par role, HEADCOUNT = parts egales par employe

    Returns:
        {role: pool} pour chaque role present dans role_configs
    """
    pools: Dict[Role, float] = {config.role: 0.0 for config in role_configs}

    fixed_roles = [c for c in role_configs if c.calc_type == CalcType.FIXED]
    distributive_roles = [c for c in role_configs if c.calc_type == CalcType.DISTRIBUTIVE]

    fixed_total = 0.0
    for config in fixed_roles:
        # Role fixe sans personnel ce jour-la: sa part reste a distribuer
        if headcount_by_role.get(config.role, 0) <= 0:
            continue
        pool = round_money(total_budget * config.percentage / 100)
        pools[config.role] = pool
        fixed_total += pool

    remaining = total_budget - fixed_total
    if remaining < 0:
        logger.warning(
            "[ALLOCATION] Roles fixes sur-alloues: reste negatif %.2f (total %.2f)",
            remaining, total_budget,
        )

    staffed = [c for c in distributive_roles if headcount_by_role.get(c.role, 0) > 0]
    if not staffed:
        return pools

    if split == DistributiveSplit.HEADCOUNT:
        total_heads = sum(headcount_by_role.get(c.role, 0) for c in staffed)
        per_employee = round_money(remaining / total_heads)
        for config in staffed:
            pools[config.role] = round_money(per_employee * headcount_by_role[config.role])
    else:
        share = round_money(remaining / len(staffed))
        for config in staffed:
            pools[config.role] = share

    logger.debug("[ALLOCATION] total=%.2f fixes=%.2f reste=%.2f pools=%s", total_budget, fixed_total, remaining, pools)
    return pools


def allocate_per_employee(role_pool: float, headcount: int, role: Optional[Role] = None) -> float:
    """
    Budget individuel = round(pool / effectif), 0 si effectif nul.

    Les roles a budget nominal (cajero, logistico, gerente_online) recoivent
    leur budget force (1), independamment du pool.
    L'ecart d'arrondi entre la somme des budgets individuels et le pool n'est pas corrige.
    """
    if role is not None:
        pinned = get_role_policy(role).pinned_budget
        if pinned is not None:
            return pinned
    if headcount <= 0:
        return 0.0
    return round_money(role_pool / headcount)
