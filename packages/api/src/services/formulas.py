# This project was developed with assistance from AI tools.
"""Per-user saved formula settings."""

import logging

from db import UserFormulaSettings
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.formulas import CustomFormula, FormulaSettings, FormulaSettingsUpdate
from .formula_engine import DEFAULT_FORMULAS, validate_formula
from .users import ensure_profile

logger = logging.getLogger(__name__)

# FormulaSettings field -> UserFormulaSettings column
_FORMULA_COLUMNS = {
    "mao": "mao_formula",
    "rule70": "rule70_formula",
    "buy_box": "buy_box_formula",
}


class InvalidFormulaError(ValueError):
    """Raised when a submitted expression fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


async def _get_row(session: AsyncSession, user_id: str) -> UserFormulaSettings | None:
    result = await session.execute(
        select(UserFormulaSettings).where(UserFormulaSettings.user_id == user_id)
    )
    return result.unique().scalar_one_or_none()


def default_settings() -> FormulaSettings:
    return FormulaSettings(
        mao=CustomFormula(**DEFAULT_FORMULAS["mao"]),
        rule70=CustomFormula(**DEFAULT_FORMULAS["rule70"]),
        buy_box=CustomFormula(**DEFAULT_FORMULAS["buy_box"]),
        custom_calculator=None,
    )


async def get_user_formulas(session: AsyncSession, user: UserContext) -> FormulaSettings:
    """Return the user's saved formulas, falling back to defaults per field."""
    row = await _get_row(session, user.user_id)
    if row is None:
        return default_settings()

    data = default_settings().model_dump()
    for field, column in _FORMULA_COLUMNS.items():
        saved = getattr(row, column)
        if saved:
            data[field] = saved
    data["custom_calculator"] = row.custom_calculator or None
    return FormulaSettings.model_validate(data)


async def save_user_formulas(
    session: AsyncSession,
    user: UserContext,
    update: FormulaSettingsUpdate,
) -> FormulaSettings:
    """Validate and persist the provided formulas.

    Raises:
        InvalidFormulaError: If any provided expression is invalid.
    """
    for field in _FORMULA_COLUMNS:
        formula = getattr(update, field)
        if formula is not None:
            valid, error = validate_formula(formula.expression)
            if not valid:
                raise InvalidFormulaError(field, error or "Invalid formula")
    if update.custom_calculator is not None:
        valid, error = validate_formula(update.custom_calculator.formula)
        if not valid:
            raise InvalidFormulaError("custom_calculator", error or "Invalid formula")

    row = await _get_row(session, user.user_id)
    if row is None:
        await ensure_profile(session, user)
        row = UserFormulaSettings(user_id=user.user_id)
        session.add(row)

    provided = update.model_dump(exclude_unset=True)
    for field, column in _FORMULA_COLUMNS.items():
        if field in provided:
            setattr(row, column, provided[field])
    if "custom_calculator" in provided:
        row.custom_calculator = provided["custom_calculator"]

    await session.commit()
    logger.info("Saved formula settings for user %s (%s)", user.user_id, sorted(provided))
    return await get_user_formulas(session, user)


async def reset_user_formulas(session: AsyncSession, user: UserContext) -> FormulaSettings:
    await session.execute(
        delete(UserFormulaSettings).where(UserFormulaSettings.user_id == user.user_id)
    )
    await session.commit()
    return default_settings()


async def load_formula_expressions(session: AsyncSession, user_id: str) -> dict[str, str]:
    """Expression strings keyed by formula id, for server-side evaluation."""
    row = await _get_row(session, user_id)
    expressions = {key: f["expression"] for key, f in DEFAULT_FORMULAS.items()}
    if row is not None:
        for field, column in _FORMULA_COLUMNS.items():
            saved = getattr(row, column)
            if saved and saved.get("expression"):
                expressions[field] = saved["expression"]
    return expressions
