"""
Routes API FastAPI.

Le moteur est execute sur les donnees postees; rien n'est persiste.
"""
import re
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query, Depends, Request
from fastapi.responses import Response

from comisiones.core.config import Settings
from comisiones.core.periods import default_cutoff
from comisiones.core.thresholds import DEFAULT_THRESHOLDS
from comisiones.schemas import (
    AllocateRequest,
    AllocateResponse,
    CommissionThreshold,
    ComplianceResolution,
    MonthRequest,
    MonthSummary,
    NextTierProjection,
    NextTierRequest,
    ResolveRequest,
    StoreDayRequest,
    StoreSummary,
    ValidateRequest,
    ValidateResponse,
)
from comisiones.services.aggregation import compute_month, compute_store_day
from comisiones.services.budget_allocator import allocate_budgets, allocate_per_employee
from comisiones.services.compliance_resolver import resolve_compliance
from comisiones.services.excel_export import build_month_workbook
from comisiones.services.next_tier import project_next_tier
from comisiones.services.validation import (
    find_inconsistent_assignments,
    validate_budget_record,
    validate_role_configs,
    validate_thresholds,
)
from comisiones.storage import SummaryCache, content_key

router = APIRouter()

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> SummaryCache:
    return request.app.state.summary_cache


def _thresholds_for(thresholds: Optional[List[CommissionThreshold]], settings: Settings) -> List[CommissionThreshold]:
    """Bareme de la requete, ou bareme par defaut si active dans la configuration."""
    if thresholds:
        return thresholds
    if settings.use_default_thresholds:
        return [CommissionThreshold(**t) for t in DEFAULT_THRESHOLDS]
    return []


def _month_summary(payload: MonthRequest, settings: Settings, cache: SummaryCache) -> MonthSummary:
    if not _MONTH_RE.match(payload.month):
        raise HTTPException(status_code=400, detail="Le mois doit etre au format YYYY-MM")

    thresholds = _thresholds_for(payload.thresholds, settings)
    policy = settings.policy()
    cutoff = payload.cutoff_date or default_cutoff(payload.month)

    key = content_key(
        month=payload.month,
        budgets=payload.budgets,
        assignments=payload.assignments,
        sales=payload.sales,
        role_configs=payload.role_configs,
        thresholds=thresholds,
        policy=policy,
        cutoff=cutoff,
    )
    return cache.get_or_compute(key, lambda: compute_month(
        payload.month,
        payload.budgets,
        payload.assignments,
        payload.sales,
        payload.role_configs,
        thresholds,
        policy=policy,
        cutoff_date=cutoff,
    ))


@router.post("/commissions/allocate", response_model=AllocateResponse)
async def allocate(payload: AllocateRequest, settings: Settings = Depends(get_settings)):
    """Repartition du budget total entre roles puis par employe."""
    split = payload.split or settings.distributive_split
    pools = allocate_budgets(payload.total_budget, payload.role_configs, payload.headcount_by_role, split)
    per_employee = {
        role: allocate_per_employee(pool, payload.headcount_by_role.get(role, 0), role)
        for role, pool in pools.items()
    }
    return AllocateResponse(
        pools=pools,
        per_employee=per_employee,
        errors=validate_role_configs(payload.role_configs),
    )


@router.post("/commissions/resolve", response_model=ComplianceResolution)
async def resolve(payload: ResolveRequest, settings: Settings = Depends(get_settings)):
    """Cumplimiento et palier pour un couple ventes / budget."""
    return resolve_compliance(payload.sales, payload.budget, _thresholds_for(payload.thresholds, settings))


@router.post("/commissions/next-tier", response_model=NextTierProjection)
async def next_tier(payload: NextTierRequest, settings: Settings = Depends(get_settings)):
    """Ce qu'il reste a vendre pour atteindre le palier suivant."""
    return project_next_tier(
        payload.compliance_pct,
        payload.current_commission_pct,
        payload.budget,
        payload.sales,
        _thresholds_for(payload.thresholds, settings),
        store_context=payload.store_context,
        vat_factor=settings.vat_factor,
    )


@router.post("/commissions/validate", response_model=ValidateResponse)
async def validate(payload: ValidateRequest):
    """Verifie configuration et donnees sans rien calculer."""
    errors = []
    errors.extend(validate_role_configs(payload.role_configs))
    errors.extend(validate_thresholds(payload.thresholds))
    errors.extend(find_inconsistent_assignments(payload.assignments))
    for record in payload.budgets:
        errors.extend(validate_budget_record(record))
    return ValidateResponse(valid=not errors, errors=errors)


@router.post("/commissions/store-day", response_model=StoreSummary)
async def store_day(payload: StoreDayRequest, settings: Settings = Depends(get_settings)):
    """Resume d'une tienda pour un jour."""
    return compute_store_day(
        payload.store,
        payload.date,
        payload.budget,
        payload.sales,
        payload.assignments,
        payload.role_configs,
        _thresholds_for(payload.thresholds, settings),
        policy=settings.policy(),
    )


@router.post("/commissions/month", response_model=MonthSummary)
async def month_summary(
    payload: MonthRequest,
    block_on_errors: bool = Query(False),
    settings: Settings = Depends(get_settings),
    cache: SummaryCache = Depends(get_cache),
):
    """
    Resume mensuel des commissions.
    Avec block_on_errors=true, une configuration invalide renvoie 422 au lieu du resume.
    """
    summary = _month_summary(payload, settings, cache)
    if block_on_errors and summary.errors:
        raise HTTPException(
            status_code=422,
            detail=[e.model_dump(mode="json") for e in summary.errors],
        )
    return summary


@router.post("/commissions/month/export-excel")
async def export_month_excel(
    payload: MonthRequest,
    settings: Settings = Depends(get_settings),
    cache: SummaryCache = Depends(get_cache),
):
    """Export Excel du resume mensuel."""
    summary = _month_summary(payload, settings, cache)
    content = build_month_workbook(summary)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="comisiones_{payload.month}.xlsx"'},
    )
