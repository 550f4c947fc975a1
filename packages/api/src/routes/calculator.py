# This project was developed with assistance from AI tools.
"""Underwriting calculator, saved formulas and risk scoring endpoints."""

from db import get_db
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, StaffUser
from ..schemas.calculator import (
    AnalyzeRequest,
    DealAnalysis,
    RepairEstimate,
    RepairEstimateRequest,
)
from ..schemas.formulas import (
    FormulaEvaluationRequest,
    FormulaEvaluationResponse,
    FormulaSettings,
    FormulaSettingsUpdate,
    FormulaValidationRequest,
    FormulaValidationResponse,
    FormulaVariableItem,
)
from ..schemas.risk import RiskAssessment, RiskInput
from ..services.calculator import analyze_deal, estimate_repairs
from ..services.formula_engine import (
    FORMULA_VARIABLES,
    evaluate_formula,
    validate_formula,
)
from ..services.formulas import (
    InvalidFormulaError,
    get_user_formulas,
    reset_user_formulas,
    save_user_formulas,
)
from ..services.risk import calculate_risk_score

router = APIRouter()


@router.post("/calculator/analyze", response_model=DealAnalysis)
async def analyze(body: AnalyzeRequest, _user: CurrentUser) -> DealAnalysis:
    """MAO, 70% rule, buy box and profit for one set of inputs."""
    return analyze_deal(body.form, body.sqft)


@router.post("/calculator/repair-estimate", response_model=RepairEstimate)
async def repair_estimate(body: RepairEstimateRequest, _user: CurrentUser) -> RepairEstimate:
    return estimate_repairs(body.scope, body.sqft)


@router.post("/risk/score", response_model=RiskAssessment)
async def risk_score(body: RiskInput, _user: StaffUser) -> RiskAssessment:
    return calculate_risk_score(body)


@router.get("/formulas", response_model=FormulaSettings)
async def get_formulas(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> FormulaSettings:
    """The caller's formulas, with defaults for anything not customized."""
    return await get_user_formulas(session, user)


@router.put("/formulas", response_model=FormulaSettings)
async def save_formulas(
    body: FormulaSettingsUpdate,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> FormulaSettings:
    try:
        return await save_user_formulas(session, user, body)
    except InvalidFormulaError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


@router.delete("/formulas", response_model=FormulaSettings)
async def reset_formulas(
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> FormulaSettings:
    return await reset_user_formulas(session, user)


@router.get("/formulas/variables", response_model=list[FormulaVariableItem])
async def list_variables(_user: CurrentUser) -> list[FormulaVariableItem]:
    return [
        FormulaVariableItem(
            id=v.id,
            name=v.name,
            label=v.label,
            description=v.description,
            default_value=v.default_value,
        )
        for v in FORMULA_VARIABLES
    ]


@router.post("/formulas/validate", response_model=FormulaValidationResponse)
async def validate(body: FormulaValidationRequest, _user: CurrentUser) -> FormulaValidationResponse:
    valid, error = validate_formula(body.expression)
    return FormulaValidationResponse(valid=valid, error=error)


@router.post("/formulas/evaluate", response_model=FormulaEvaluationResponse)
async def evaluate(body: FormulaEvaluationRequest, _user: CurrentUser) -> FormulaEvaluationResponse:
    """Evaluate an expression against caller-supplied variable values."""
    valid, error = validate_formula(body.expression)
    if not valid:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error)
    return FormulaEvaluationResponse(result=evaluate_formula(body.expression, body.variables))
