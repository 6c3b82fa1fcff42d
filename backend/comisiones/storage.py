"""
Cache en mémoire des résumés calculés, détenu par l'appelant.
"""
import hashlib
import json
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    return value


def content_key(**inputs: Any) -> str:
    """
    Cle SHA-256 du contenu serialise de toutes les entrees d'un calcul
    (mois, budgets, personnel, ventes, configuration des roles, bareme...).
    """
    payload = json.dumps(_to_jsonable(inputs), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class CacheEntry:
    """Valeur calculee et sa date de calcul."""
    def __init__(self, value: Any):
        self.value = value
        self.created_at = datetime.now()


class SummaryCache:
    """
    Cache-aside borne: le plus ancien est evince au-dela de max_entries.
    max_entries=0 desactive le cache.
    """
    def __init__(self, max_entries: int = 128):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        if self.max_entries <= 0:
            return
        self._entries[key] = CacheEntry(value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Retourne la valeur en cache ou la calcule et la stocke."""
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}
