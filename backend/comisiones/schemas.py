"""
Modèles Pydantic du moteur de commissions et de l'API.
"""
from enum import Enum
from typing import List, Optional, Dict, Union, Literal
from pydantic import BaseModel, Field

from comisiones.core.roles import Role


class CalcType(str, Enum):
    """Politique de budget d'un role."""
    FIXED = "Fixed"
    DISTRIBUTIVE = "Distributive"


class DistributiveSplit(str, Enum):
    """Repartition du reste entre roles distributifs."""
    ROLE = "role"           # parts egales par role ayant du personnel
    HEADCOUNT = "headcount"  # parts egales par employe


class IssueKind(str, Enum):
    """Types d'anomalies signalees par le moteur."""
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    MISSING_DATA = "MISSING_DATA"
    ARITHMETIC_DEGENERATE = "ARITHMETIC_DEGENERATE"
    INCONSISTENT_ASSIGNMENT = "INCONSISTENT_ASSIGNMENT"


class _Frozen(BaseModel):
    class Config:
        frozen = True


# ==================== ENTREES ====================

class RoleBudgetConfig(_Frozen):
    """Configuration de budget d'un role pour un mois."""
    role: Role
    calc_type: CalcType
    percentage: float = 0.0


class CommissionThreshold(_Frozen):
    """Palier de commission. commission_pct en fraction decimale (0.007 = 0.7%)."""
    compliance_min: float
    commission_pct: float
    name: str
    color: Optional[str] = None


class BudgetRecord(_Frozen):
    """Budget total d'une tienda pour un jour."""
    store: str
    date: str  # YYYY-MM-DD
    total_budget: float = 0.0


class StaffAssignment(_Frozen):
    """Role tenu par un employe dans une tienda un jour donne."""
    employee_id: str
    name: str
    store: str
    date: str  # YYYY-MM-DD
    role: Role


class SalesRecord(_Frozen):
    """Ventes d'une tienda pour un jour (total + par employe)."""
    store: str
    date: str  # YYYY-MM-DD
    store_sales: float = 0.0
    sales_by_employee: Dict[str, float] = Field(default_factory=dict)


class CommissionPolicy(_Frozen):
    """Options de calcul (voir core/config.py pour le chargement depuis l'env)."""
    allow_empty_thresholds: bool = False
    vat_factor: float = 1.0
    distributive_split: DistributiveSplit = DistributiveSplit.ROLE
    online_manager_rate: float = 0.01


# ==================== SORTIES ====================

class EngineIssue(_Frozen):
    """Anomalie inspectable (jamais levee comme exception par le moteur)."""
    kind: IssueKind
    field: Optional[str] = None
    message: str


class ComplianceResolution(_Frozen):
    """Resultat de la resolution d'un cumplimiento contre le bareme."""
    compliance_pct: float
    commission_pct: float
    tier_name: Optional[str] = None


class NextTierProjection(_Frozen):
    """Projection vers le palier suivant ("vends X de plus pour atteindre Y")."""
    next_commission_pct: Union[Literal["MAX"], float]
    next_tier_name: Optional[str] = None
    next_budget: Optional[float] = None
    next_sales_gap: Optional[float] = None
    next_commission_amount: Optional[float] = None


class StoreContext(_Frozen):
    """Chiffres du gerente de la tienda, pour la projection sous le premier palier."""
    store: str
    manager_budget: float
    manager_sales: float


class EmployeeCommissionResult(_Frozen):
    """Commission calculee d'un employe."""
    employee_id: str
    name: str
    role: Role
    store: str
    date: str
    budget: float
    sales: float
    compliance_pct: float
    commission_pct: float
    commission_amount: float
    tier_name: Optional[str] = None
    next_tier_gap_amount: Optional[float] = None
    next_tier: Optional[NextTierProjection] = None
    days_worked: int = 1
    errors: List[EngineIssue] = Field(default_factory=list)


class StoreSummary(_Frozen):
    """Resume d'une tienda pour une periode."""
    store: str
    date: str
    total_budget: float
    total_sales: float
    compliance_store_pct: float
    total_commissions: float
    employees: List[EmployeeCommissionResult] = Field(default_factory=list)
    errors: List[EngineIssue] = Field(default_factory=list)


class MonthSummary(_Frozen):
    """Resume du mois, toutes tiendas confondues."""
    month: str
    stores: List[StoreSummary] = Field(default_factory=list)
    total_commissions: float = 0.0
    commissions_by_role: Dict[Role, float] = Field(default_factory=dict)
    errors: List[EngineIssue] = Field(default_factory=list)


# ==================== REQUETES API ====================

class AllocateRequest(BaseModel):
    total_budget: float
    role_configs: List[RoleBudgetConfig]
    headcount_by_role: Dict[Role, int] = Field(default_factory=dict)
    split: Optional[DistributiveSplit] = None


class AllocateResponse(BaseModel):
    pools: Dict[Role, float]
    per_employee: Dict[Role, float]
    errors: List[EngineIssue] = Field(default_factory=list)


class ResolveRequest(BaseModel):
    sales: float
    budget: float
    thresholds: Optional[List[CommissionThreshold]] = None


class NextTierRequest(BaseModel):
    compliance_pct: float
    current_commission_pct: float
    budget: float
    sales: float
    thresholds: Optional[List[CommissionThreshold]] = None
    store_context: Optional[StoreContext] = None


class ValidateRequest(BaseModel):
    role_configs: List[RoleBudgetConfig] = Field(default_factory=list)
    thresholds: List[CommissionThreshold] = Field(default_factory=list)
    assignments: List[StaffAssignment] = Field(default_factory=list)
    budgets: List[BudgetRecord] = Field(default_factory=list)


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[EngineIssue]


class StoreDayRequest(BaseModel):
    store: str
    date: str
    budget: Optional[BudgetRecord] = None
    sales: Optional[SalesRecord] = None
    assignments: List[StaffAssignment] = Field(default_factory=list)
    role_configs: List[RoleBudgetConfig] = Field(default_factory=list)
    thresholds: Optional[List[CommissionThreshold]] = None


class MonthRequest(BaseModel):
    """Corps de la requete de calcul mensuel."""
    month: str  # YYYY-MM
    budgets: List[BudgetRecord] = Field(default_factory=list)
    assignments: List[StaffAssignment] = Field(default_factory=list)
    sales: List[SalesRecord] = Field(default_factory=list)
    role_configs: List[RoleBudgetConfig] = Field(default_factory=list)
    thresholds: Optional[List[CommissionThreshold]] = None
    cutoff_date: Optional[str] = None  # si absent: aujourd'hui pour le mois en cours
