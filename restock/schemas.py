"""Pydantic contracts for item and count records entering the engine."""

from __future__ import annotations

from typing import Annotated, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    confloat,
)

from .errors import DataQualityError


def _number_input(value):
    if isinstance(value, bool):
        raise ValueError("booleans are not quantities")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


def _cost_input(value):
    value = _number_input(value)
    return 0.0 if value is None else value


def _label_input(value):
    return "" if value is None else str(value).strip()


def _text_input(value):
    return "" if value is None else str(value)


def _optional_id(value):
    return str(value) if value not in (None, "") else None


Quantity = Annotated[
    confloat(ge=0, allow_inf_nan=False), BeforeValidator(_number_input)
]
Cost = Annotated[confloat(ge=0, allow_inf_nan=False), BeforeValidator(_cost_input)]
Label = Annotated[str, Field(min_length=1), BeforeValidator(_label_input)]
Text = Annotated[str, BeforeValidator(_text_input)]
OptionalId = Annotated[Optional[str], BeforeValidator(_optional_id)]

# Counts read back from the store: any finite number, negatives included.
StoredCount = TypeAdapter(
    Annotated[
        confloat(strict=True, allow_inf_nan=False), BeforeValidator(_number_input)
    ]
)

# Any accepted key -> persisted column name, for error reports.
COLUMN_NAMES = {
    "weekday_par": "week_par",
    "weekPar": "week_par",
    "weekendPar": "weekend_par",
    "dailyUsage": "daily_usage",
}


class ItemQuantities(BaseModel):
    """The numeric fields every item needs before it can be evaluated."""

    model_config = ConfigDict(populate_by_name=True)

    weekday_par: Quantity = Field(
        validation_alias=AliasChoices("week_par", "weekday_par", "weekPar")
    )
    weekend_par: Quantity = Field(
        validation_alias=AliasChoices("weekend_par", "weekendPar")
    )
    threshold: Quantity
    daily_usage: Quantity = Field(
        validation_alias=AliasChoices("daily_usage", "dailyUsage")
    )
    cost: Cost = 0.0


class ItemRecord(ItemQuantities):
    """A full item record as written through the catalog."""

    id: OptionalId = None
    name: Label
    category: Label
    unit: Text = ""
    location: Text = ""
    supplier: OptionalId = None


class CountRecord(BaseModel):
    item_id: Label
    count: Quantity
    counted_by: OptionalId = None


def _reason(error: dict) -> str:
    value = error.get("input")
    if error["type"] == "missing" or value is None:
        return "is missing"
    if isinstance(value, str) and not value.strip():
        return "is missing"
    match error["type"]:
        case "finite_number":
            return f"is not finite ({value!r})"
        case "greater_than_equal":
            return f"is negative ({value!r})"
    return f"is not a number ({value!r})"


def to_data_quality_error(
    item_id: str | None, exc: ValidationError
) -> DataQualityError:
    """Report the first failing field of a ValidationError."""
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error["loc"] else "record"
    return DataQualityError(item_id, COLUMN_NAMES.get(field, field), _reason(error))


def validate_item_record(record: dict) -> ItemRecord:
    """Validate a raw item record, coercing numeric text.

    Raises:
        DataQualityError: If a required field is missing or invalid.
    """
    try:
        return ItemRecord.model_validate(record)
    except ValidationError as e:
        raise to_data_quality_error(record.get("id") or None, e) from e


def validate_quantities(item_id: str, values: dict) -> ItemQuantities:
    """Validate stored item numbers. Text is not accepted here."""
    try:
        return ItemQuantities.model_validate(values, strict=True)
    except ValidationError as e:
        raise to_data_quality_error(item_id, e) from e


def validate_count_record(record: dict) -> CountRecord:
    try:
        return CountRecord.model_validate(record)
    except ValidationError as e:
        raise to_data_quality_error(record.get("item_id") or None, e) from e


def validate_stored_count(item_id: str, value: object) -> float:
    try:
        return StoredCount.validate_python(value)
    except ValidationError as e:
        raise DataQualityError(item_id, "count", _reason(e.errors()[0])) from e
