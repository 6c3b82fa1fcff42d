"""
Configuration lue depuis l'environnement (.env charge par main.py).
"""
import os
from dataclasses import dataclass, field
from typing import List

from comisiones.schemas import CommissionPolicy, DistributiveSplit

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} doit etre un booleen (true/false), recu {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip().replace(",", "."))
    except ValueError:
        raise ValueError(f"{name} doit etre un nombre, recu {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} doit etre un entier, recu {raw!r}")


@dataclass(frozen=True)
class Settings:
    allow_empty_thresholds: bool = False
    use_default_thresholds: bool = True
    vat_factor: float = 1.0
    distributive_split: DistributiveSplit = DistributiveSplit.ROLE
    online_manager_rate: float = 0.01
    cache_max_entries: int = 128
    allowed_origins: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    def policy(self) -> CommissionPolicy:
        return CommissionPolicy(
            allow_empty_thresholds=self.allow_empty_thresholds,
            vat_factor=self.vat_factor,
            distributive_split=self.distributive_split,
            online_manager_rate=self.online_manager_rate,
        )


def load_settings() -> Settings:
    """Construit les Settings depuis os.environ. Leve ValueError sur valeur invalide."""
    split_raw = os.environ.get("COMMISSIONS_DISTRIBUTIVE_SPLIT", "role").strip().lower()
    try:
        split = DistributiveSplit(split_raw)
    except ValueError:
        raise ValueError(
            f"COMMISSIONS_DISTRIBUTIVE_SPLIT doit etre 'role' ou 'headcount', recu {split_raw!r}"
        )

    vat_factor = _env_float("COMMISSIONS_VAT_FACTOR", 1.0)
    if vat_factor <= 0:
        raise ValueError("COMMISSIONS_VAT_FACTOR doit etre strictement positif")

    cache_max_entries = _env_int("COMMISSIONS_CACHE_MAX_ENTRIES", 128)
    if cache_max_entries < 0:
        raise ValueError("COMMISSIONS_CACHE_MAX_ENTRIES ne peut pas etre negatif")

    origins = [o.strip() for o in os.environ.get("ALLOWED_ORIGINS", "").split(",") if o.strip()]

    return Settings(
        allow_empty_thresholds=_env_bool("COMMISSIONS_ALLOW_EMPTY_THRESHOLDS", False),
        use_default_thresholds=_env_bool("COMMISSIONS_USE_DEFAULT_THRESHOLDS", True),
        vat_factor=vat_factor,
        distributive_split=split,
        online_manager_rate=_env_float("COMMISSIONS_ONLINE_MANAGER_RATE", 0.01),
        cache_max_entries=cache_max_entries,
        allowed_origins=origins,
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
