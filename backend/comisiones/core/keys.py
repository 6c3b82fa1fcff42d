"""
Cles composites utilisees pour indexer les donnees du moteur.
"""
from typing import NamedTuple

from comisiones.core.roles import Role


class StoreDay(NamedTuple):
    store: str
    date: str  # YYYY-MM-DD


class EmployeeKey(NamedTuple):
    employee_id: str
    store: str
    role: Role
