"""
Bareme de commission par defaut (cumplimiento -> taux).
"""
from typing import List, Dict, Union

# commission_pct en fraction decimale (0.0035 = 0.35%)
DEFAULT_THRESHOLDS: List[Dict[str, Union[float, str]]] = [
    {"compliance_min": 90, "commission_pct": 0.0035, "name": "Muy Regular", "color": "pink"},
    {"compliance_min": 95, "commission_pct": 0.005, "name": "Regular", "color": "orange"},
    {"compliance_min": 100, "commission_pct": 0.007, "name": "Buena", "color": "blue"},
    {"compliance_min": 110, "commission_pct": 0.01, "name": "Excelente", "color": "green"},
]

# Ecart toleré pour reconnaitre un taux de commission dans le bareme
COMMISSION_PCT_TOLERANCE = 1e-4
