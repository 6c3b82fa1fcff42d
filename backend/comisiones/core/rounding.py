"""
Arrondis monétaires et de cumplimiento.
"""
import math

# Precision conservee sur le cumplimiento pour ne pas fausser les bornes de paliers
COMPLIANCE_DECIMALS = 4


def _round_half_up(value: float, decimals: int) -> float:
    if math.isnan(value) or math.isinf(value):
        return value
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_money(value: float) -> float:
    """
    Arrondit un montant a 2 decimales (demi superieur sur l'entier mis a l'echelle).

    NaN et infini sont renvoyes tels quels.
    """
    return _round_half_up(value, 2)


def round_compliance(value: float) -> float:
    """Arrondit un pourcentage de cumplimiento a COMPLIANCE_DECIMALS decimales."""
    return _round_half_up(value, COMPLIANCE_DECIMALS)
