# This project was developed with assistance from AI tools.
"""Underwriting offer calculations.

Pure math, no I/O. Shared by the calculator route, the underwriting service
and the formula engine defaults. Whole-dollar results round half away from
zero and are floored at zero.
"""

import math

from db.enums import RepairScope

from ..schemas.calculator import DealAnalysis, ProfitResult, RepairEstimate, UnderwritingForm

REPAIR_COST_GUIDES: dict[RepairScope, dict] = {
    RepairScope.COSMETIC: {
        "low": 10,
        "high": 25,
        "description": "Paint, flooring, fixtures, minor updates",
    },
    RepairScope.MODERATE: {
        "low": 25,
        "high": 50,
        "description": "Kitchen/bath refresh, some systems updates",
    },
    RepairScope.EXTENSIVE: {
        "low": 50,
        "high": 100,
        "description": "Full kitchen/bath remodel, major repairs",
    },
    RepairScope.GUT: {
        "low": 100,
        "high": 200,
        "description": "Complete renovation, structural work",
    },
}


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like a spreadsheet: 2.5 -> 3, -2.5 -> -2. Non-finite input rounds to 0."""
    factor = 10**ndigits
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return 0.0
    return math.floor(scaled) / factor


def floor_offer(value: float) -> int:
    """Round to whole dollars and clamp negative offers to zero."""
    return max(0, int(round_half_up(value)))


def calculate_mao(
    arv: float,
    repair_costs: float,
    holding_months: float,
    monthly_holding_cost: float,
    buying_closing_costs: float,
    selling_closing_costs: float,
    target_profit_percent: float,
) -> int:
    """Maximum Allowable Offer.

    ARV x (1 - profit%) - repairs - holding months x monthly cost - closing costs.
    """
    total_holding = holding_months * monthly_holding_cost
    total_closing = buying_closing_costs + selling_closing_costs
    mao = arv * (1 - target_profit_percent / 100) - repair_costs - total_holding - total_closing
    return floor_offer(mao)


def calculate_70_percent_rule(arv: float, repair_costs: float) -> int:
    return floor_offer(arv * 0.7 - repair_costs)


def calculate_buy_box_offer(arv: float, buy_box_percent: float, rehab_cost: float) -> int:
    return floor_offer(arv * (buy_box_percent / 100) - rehab_cost)


def calculate_profit(
    arv: float,
    purchase_price: float,
    repair_costs: float,
    holding_months: float,
    monthly_holding_cost: float,
    buying_closing_costs: float,
    selling_closing_costs: float,
) -> ProfitResult:
    """Profit in dollars, as a percent of ARV, and as ROI on total investment."""
    total_investment = (
        purchase_price
        + repair_costs
        + holding_months * monthly_holding_cost
        + buying_closing_costs
        + selling_closing_costs
    )
    profit = arv - total_investment
    profit_percent = profit / arv * 100 if arv > 0 else 0.0
    roi = profit / total_investment * 100 if total_investment > 0 else 0.0

    return ProfitResult(
        total_investment=round_half_up(total_investment),
        profit=round_half_up(profit),
        profit_percent=round_half_up(profit_percent, 1),
        roi=round_half_up(roi, 1),
    )


def estimate_repairs(scope: RepairScope, sqft: int | None = None) -> RepairEstimate:
    """Repair cost range for a renovation scope, optionally sized by square footage."""
    guide = REPAIR_COST_GUIDES[scope]
    estimate = RepairEstimate(
        scope=scope,
        description=guide["description"],
        low_per_sqft=guide["low"],
        high_per_sqft=guide["high"],
    )
    if sqft:
        estimate.low = float(sqft * guide["low"])
        estimate.high = float(sqft * guide["high"])
    return estimate


def analyze_deal(form: UnderwritingForm, sqft: int | None = None) -> DealAnalysis:
    """Run every offer formula over one underwriting form."""
    mao = calculate_mao(
        form.arv,
        form.repair_costs,
        form.holding_months,
        form.monthly_holding_cost,
        form.buying_closing_costs,
        form.selling_closing_costs,
        form.target_profit_percent,
    )
    purchase_price = form.purchase_price if form.purchase_price is not None else float(mao)
    profit = calculate_profit(
        form.arv,
        purchase_price,
        form.repair_costs,
        form.holding_months,
        form.monthly_holding_cost,
        form.buying_closing_costs,
        form.selling_closing_costs,
    )

    return DealAnalysis(
        mao=mao,
        rule70_offer=calculate_70_percent_rule(form.arv, form.repair_costs),
        buy_box_offer=calculate_buy_box_offer(form.arv, form.buy_box_percent, form.repair_costs),
        total_holding_costs=form.holding_months * form.monthly_holding_cost,
        total_closing_costs=form.buying_closing_costs + form.selling_closing_costs,
        purchase_price=purchase_price,
        profit=profit,
        repair_guide=estimate_repairs(form.repair_scope, sqft),
    )
