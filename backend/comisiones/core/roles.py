"""
Catalogue des roles et de leur politique de budget / commission.
"""
from enum import Enum
from typing import Dict, List, NamedTuple, Optional


class Role(str, Enum):
    """Roles du personnel de tienda."""
    GERENTE = "gerente"
    ASESOR = "asesor"
    COADMINISTRADOR = "coadministrador"
    CAJERO = "cajero"
    LOGISTICO = "logistico"
    GERENTE_ONLINE = "gerente_online"


class CommissionBasis(str, Enum):
    """Base de calcul de la commission d'un role."""
    INDIVIDUAL = "INDIVIDUAL"   # budget et ventes propres
    STORE = "STORE"             # cumplimiento et ventes de la tienda
    COLLECTIVE = "COLLECTIVE"   # cumplimiento de la tienda, ventes partagees
    FLAT = "FLAT"               # taux fixe, pas de suivi de cumplimiento


class RolePolicy(NamedTuple):
    # Budget nominal force par employe (1 = "pas suivi en cumplimiento")
    pinned_budget: Optional[float]
    basis: CommissionBasis


ROLE_POLICIES: Dict[Role, RolePolicy] = {
    Role.GERENTE: RolePolicy(None, CommissionBasis.STORE),
    Role.ASESOR: RolePolicy(None, CommissionBasis.INDIVIDUAL),
    Role.COADMINISTRADOR: RolePolicy(None, CommissionBasis.INDIVIDUAL),
    Role.CAJERO: RolePolicy(1.0, CommissionBasis.COLLECTIVE),
    Role.LOGISTICO: RolePolicy(1.0, CommissionBasis.COLLECTIVE),
    Role.GERENTE_ONLINE: RolePolicy(1.0, CommissionBasis.FLAT),
}

# Ordre d'affichage dans les resumes de tienda
ROLE_ORDER: List[Role] = [
    Role.GERENTE,
    Role.COADMINISTRADOR,
    Role.ASESOR,
    Role.CAJERO,
    Role.LOGISTICO,
    Role.GERENTE_ONLINE,
]


def get_role_policy(role: Role) -> RolePolicy:
    """Retourne la politique d'un role."""
    return ROLE_POLICIES[role]


def get_all_roles() -> List[Role]:
    """Retourne tous les roles connus, dans l'ordre d'affichage."""
    return list(ROLE_ORDER)
