# This project was developed with assistance from AI tools.
"""Custom formula schemas."""

from pydantic import BaseModel, Field

MAX_EXPRESSION_LENGTH = 500


class CustomFormula(BaseModel):
    id: str
    name: str
    expression: str = Field(max_length=MAX_EXPRESSION_LENGTH)
    description: str = ""
    is_default: bool = False


class CalculatorInput(BaseModel):
    variable_id: str
    label: str
    default_value: float = 0


class CustomCalculator(BaseModel):
    """A user-built calculator: one expression plus the inputs it prompts for."""

    id: str
    name: str
    formula: str = Field(max_length=MAX_EXPRESSION_LENGTH)
    inputs: list[CalculatorInput] = Field(default_factory=list)
    description: str = ""


class FormulaSettings(BaseModel):
    mao: CustomFormula
    rule70: CustomFormula
    buy_box: CustomFormula
    custom_calculator: CustomCalculator | None = None


class FormulaSettingsUpdate(BaseModel):
    """Partial update. Omitted fields keep their saved value."""

    mao: CustomFormula | None = None
    rule70: CustomFormula | None = None
    buy_box: CustomFormula | None = None
    custom_calculator: CustomCalculator | None = None


class FormulaValidationRequest(BaseModel):
    expression: str = Field(max_length=MAX_EXPRESSION_LENGTH)


class FormulaValidationResponse(BaseModel):
    valid: bool
    error: str | None = None


class FormulaEvaluationRequest(BaseModel):
    expression: str = Field(max_length=MAX_EXPRESSION_LENGTH)
    variables: dict[str, float] = Field(default_factory=dict)


class FormulaEvaluationResponse(BaseModel):
    result: int


class FormulaVariableItem(BaseModel):
    id: str
    name: str
    label: str
    description: str
    default_value: float
