"""
Helpers de dates et de mois (YYYY-MM-DD / YYYY-MM).
"""
from datetime import date, datetime
from typing import Optional


def parse_date(value: str) -> Optional[date]:
    """Parse une date YYYY-MM-DD. Retourne None si le format est invalide."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, TypeError):
        return None


def month_of(value: str) -> str:
    """Retourne le mois YYYY-MM d'une date YYYY-MM-DD."""
    return value.strip()[:7]


def in_period(value: str, month: str, cutoff_date: Optional[str] = None) -> bool:
    """
    Indique si une date appartient au mois demande,
    et ne depasse pas la date limite si elle est fournie.
    """
    if month_of(value) != month:
        return False
    if cutoff_date and value > cutoff_date:
        return False
    return True


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def default_cutoff(month: str) -> Optional[str]:
    """
    Pour le mois en cours, on ne calcule que jusqu'a aujourd'hui.
    Pour un mois passe, pas de limite.
    """
    if month == current_month():
        return date.today().isoformat()
    return None
