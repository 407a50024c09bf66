"""
Meta endpoints: health, quota plans, collection-date rule.
"""
from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query

from captacion.api.dependencies import get_store
from captacion.api.response_models import CollectionDateResponse, HealthResponse, PlanResponse
from captacion.data.coerce import format_currency
from captacion.data.store import SnapshotStore
from captacion.rules.installments import PLANS, InstallmentPlan, compute_collection_date, lookup_plan

router = APIRouter(prefix="/api", tags=["meta"])


def _plan_response(quotas: str, plan: InstallmentPlan) -> PlanResponse:
    return PlanResponse(
        quotas=quotas,
        monthly_amount=plan.monthly_amount,
        total_amount=plan.total_amount,
        monthly_display=format_currency(plan.monthly_amount),
        total_display=format_currency(plan.total_amount),
    )


@router.get("/health", response_model=HealthResponse)
def health(store: SnapshotStore = Depends(get_store)):
    return HealthResponse(status="ok", records=store.count(), store=repr(store.backend))


@router.get("/plans", response_model=list[PlanResponse])
def list_plans():
    return [_plan_response(q, p) for q, p in PLANS.items()]


@router.get("/plans/{quotas}", response_model=PlanResponse)
def get_plan(quotas: str):
    plan = lookup_plan(quotas)
    if plan is None:
        raise HTTPException(404, f"No plan for {quotas!r} quotas (valid: 1-6)")
    return _plan_response(quotas.strip(), plan)


@router.get("/collection-date", response_model=CollectionDateResponse)
def collection_date(diligence_date: str = Query(..., description="YYYY-MM-DD")):
    try:
        d = dt.date.fromisoformat(diligence_date)
    except ValueError:
        raise HTTPException(400, f"Invalid diligence_date: {diligence_date}")
    return CollectionDateResponse(
        diligence_date=d.isoformat(),
        collection_date=compute_collection_date(d).isoformat(),
    )
