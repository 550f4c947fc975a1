# This project was developed with assistance from AI tools.
"""Deal risk scoring.

Five weighted factors, each scored 1 (best) to 9 (worst):

=====================  ======
Factor                 Weight
=====================  ======
Price to ARV ratio     30
Rehab to ARV ratio     25
Expected profit margin 25
Property type          10
Seller motivation      10
=====================  ======

The overall score is the weighted average rounded to one decimal. A deal with
no ARV scores worst-case on every ARV-relative factor.
"""

import logging

from db import UnderwritingRecord
from db.enums import PropertyType, RiskLevel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.risk import RiskAssessment, RiskFactor, RiskInput
from .calculator import round_half_up

logger = logging.getLogger(__name__)

# (upper bound inclusive, score, notes)
_PRICE_TO_ARV_BANDS = [
    (0.60, 1, "Excellent deal - asking price well below market"),
    (0.70, 3, "Good deal - healthy margin"),
    (0.80, 5, "Average deal - standard margins"),
    (0.90, 7, "Tight margins - limited profit potential"),
]
_PRICE_TO_ARV_WORST = (9, "High risk - asking price near or above ARV")

_REHAB_TO_ARV_BANDS = [
    (0.10, 1, "Minor repairs - low renovation risk"),
    (0.20, 3, "Moderate rehab - manageable scope"),
    (0.30, 5, "Significant rehab - careful budgeting needed"),
    (0.40, 7, "Major renovation - high cost risk"),
]
_REHAB_TO_ARV_WORST = (9, "Extensive renovation - very high risk")

# (lower bound inclusive, score, notes)
_PROFIT_MARGIN_BANDS = [
    (0.25, 1, "Excellent margins - strong profit potential"),
    (0.20, 3, "Good margins - solid returns expected"),
    (0.15, 5, "Average margins - acceptable returns"),
    (0.10, 7, "Thin margins - limited room for error"),
]
_PROFIT_MARGIN_WORST = (9, "Minimal margins - high loss potential")

_PROPERTY_TYPE_SCORES: dict[str, tuple[int, str]] = {
    PropertyType.SINGLE_FAMILY.value: (2, "Single family - most liquid"),
    PropertyType.TOWNHOUSE.value: (3, "Townhouse - good liquidity"),
    PropertyType.CONDO.value: (4, "Condo - HOA considerations"),
    PropertyType.DUPLEX.value: (3, "Duplex - income potential"),
    PropertyType.TRIPLEX.value: (4, "Triplex - multi-family management"),
    PropertyType.FOURPLEX.value: (5, "Fourplex - commercial considerations"),
    PropertyType.MULTI_FAMILY.value: (6, "Multi-family - complex management"),
    PropertyType.LAND.value: (8, "Land - limited financing options"),
    PropertyType.COMMERCIAL.value: (7, "Commercial - specialized market"),
    PropertyType.OTHER.value: (6, "Other - assess individually"),
}

# Checked in order; first keyword hit wins.
_MOTIVATION_KEYWORDS: list[tuple[tuple[str, ...], int, str]] = [
    (("foreclosure", "distress"), 2, "High motivation - distressed sale"),
    (("relocat", "divorce"), 3, "Motivated seller - life event"),
    (("inherited", "probate"), 3, "Estate sale - potentially motivated"),
    (("investor", "tired landlord"), 4, "Investor exit - negotiable"),
]

_LEVELS: list[tuple[float, RiskLevel, str]] = [
    (
        3,
        RiskLevel.LOW,
        "Strong deal fundamentals. Recommend proceeding with standard due diligence.",
    ),
    (
        5,
        RiskLevel.MEDIUM,
        "Acceptable risk profile. Review all factors carefully before proceeding.",
    ),
    (
        7,
        RiskLevel.HIGH,
        "Elevated risk. Consider additional contingencies or negotiate better terms.",
    ),
]
_CRITICAL = (
    RiskLevel.CRITICAL,
    "High risk deal. Strongly recommend passing unless exceptional circumstances apply.",
)


def _score_ceiling(ratio: float | None, bands, worst) -> tuple[int, str]:
    if ratio is not None:
        for bound, score, notes in bands:
            if ratio <= bound:
                return score, notes
    return worst


def _score_floor(ratio: float | None, bands, worst) -> tuple[int, str]:
    if ratio is not None:
        for bound, score, notes in bands:
            if ratio >= bound:
                return score, notes
    return worst


def _score_motivation(motivation: str | None) -> tuple[int, str]:
    if not motivation:
        return 5, "Motivation unknown"
    lowered = motivation.lower()
    for keywords, score, notes in _MOTIVATION_KEYWORDS:
        if any(k in lowered for k in keywords):
            return score, notes
    return 5, "Standard motivation"


def calculate_risk_score(data: RiskInput) -> RiskAssessment:
    """Score a deal's risk from its pricing, rehab, margin, type and seller."""
    arv = data.arv if data.arv > 0 else None

    price_score, price_notes = _score_ceiling(
        data.asking_price / arv if arv else None, _PRICE_TO_ARV_BANDS, _PRICE_TO_ARV_WORST
    )
    rehab_score, rehab_notes = _score_ceiling(
        data.rehab_cost / arv if arv else None, _REHAB_TO_ARV_BANDS, _REHAB_TO_ARV_WORST
    )
    margin = (data.arv - data.max_offer - data.rehab_cost) / arv if arv else None
    margin_score, margin_notes = _score_floor(margin, _PROFIT_MARGIN_BANDS, _PROFIT_MARGIN_WORST)

    type_key = getattr(data.property_type, "value", data.property_type)
    type_score, type_notes = _PROPERTY_TYPE_SCORES.get(
        type_key, _PROPERTY_TYPE_SCORES[PropertyType.OTHER.value]
    )
    motivation_score, motivation_notes = _score_motivation(data.seller_motivation)

    factors = [
        RiskFactor(
            category="Valuation",
            factor="Price to ARV Ratio",
            score=price_score,
            weight=30,
            notes=price_notes,
        ),
        RiskFactor(
            category="Renovation",
            factor="Rehab to ARV Ratio",
            score=rehab_score,
            weight=25,
            notes=rehab_notes,
        ),
        RiskFactor(
            category="Returns",
            factor="Expected Profit Margin",
            score=margin_score,
            weight=25,
            notes=margin_notes,
        ),
        RiskFactor(
            category="Property",
            factor="Property Type",
            score=type_score,
            weight=10,
            notes=type_notes,
        ),
        RiskFactor(
            category="Deal Quality",
            factor="Seller Motivation",
            score=motivation_score,
            weight=10,
            notes=motivation_notes,
        ),
    ]

    total_weight = sum(f.weight for f in factors)
    weighted = sum(f.score * f.weight for f in factors)
    overall = round_half_up(weighted / total_weight, 1)

    level, recommendation = _CRITICAL
    for bound, candidate, text in _LEVELS:
        if overall <= bound:
            level, recommendation = candidate, text
            break

    return RiskAssessment(
        overall_score=overall,
        risk_level=level,
        factors=factors,
        recommendation=recommendation,
    )


async def save_risk_assessment(
    session: AsyncSession,
    deal_id: int,
    assessment: RiskAssessment,
) -> UnderwritingRecord | None:
    """Store the assessment on the deal's underwriting record.

    Returns None when the deal has no underwriting record yet.
    """
    result = await session.execute(
        select(UnderwritingRecord).where(UnderwritingRecord.deal_id == deal_id)
    )
    record = result.unique().scalar_one_or_none()
    if record is None:
        return None

    record.risk_score = int(round_half_up(assessment.overall_score))
    record.risk_factors = assessment.model_dump(mode="json")
    await session.commit()
    await session.refresh(record)
    logger.info(
        "Risk assessment saved for deal %s: %.1f (%s)",
        deal_id,
        assessment.overall_score,
        assessment.risk_level.value,
    )
    return record
