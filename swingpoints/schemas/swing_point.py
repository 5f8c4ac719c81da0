from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swingpoints.domain.candle import AnnotatedCandle, SwingPoint
from swingpoints.domain.company import ProcessedCompany
from swingpoints.utils.validators import strip_timezone


class CandleItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: int
    open_interest: int = Field(0, alias="openInterest")
    is_swing_high: bool = Field(False, alias="isSwingHigh")
    is_swing_low: bool = Field(False, alias="isSwingLow")
    is_higher_high: bool = Field(False, alias="isHigherHigh")
    is_higher_low: bool = Field(False, alias="isHigherLow")
    is_lower_high: bool = Field(False, alias="isLowerHigh")
    is_lower_low: bool = Field(False, alias="isLowerLow")

    @field_validator("timestamp")
    @classmethod
    def strip_zone(cls, value: str) -> str:
        return strip_timezone(value)

    @classmethod
    def from_domain(cls, annotated: AnnotatedCandle) -> "CandleItem":
        candle = annotated.candle
        return cls(
            timestamp=candle.timestamp,
            open=candle.open,
            high=candle.high,
            low=candle.low,
            close=candle.close,
            volume=candle.volume,
            open_interest=candle.open_interest,
            is_swing_high=annotated.is_swing_high,
            is_swing_low=annotated.is_swing_low,
            is_higher_high=annotated.is_higher_high,
            is_higher_low=annotated.is_higher_low,
            is_lower_high=annotated.is_lower_high,
            is_lower_low=annotated.is_lower_low,
        )


class SwingPointSchema(BaseModel):
    timestamp: str
    price: float
    label: str
    time: str
    candle: CandleItem

    @field_validator("timestamp")
    @classmethod
    def strip_zone(cls, value: str) -> str:
        return strip_timezone(value)

    @classmethod
    def from_domain(cls, point: SwingPoint) -> "SwingPointSchema":
        return cls(
            timestamp=point.timestamp,
            price=point.price,
            label=point.label.value,
            time=point.time,
            candle=CandleItem.from_domain(point.candle),
        )


def _points(points: list[SwingPoint] | None) -> list[SwingPointSchema] | None:
    if points is None:
        return None
    return [SwingPointSchema.from_domain(point) for point in points]


class ProcessedCompanySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instrument_key: str = Field(alias="instrumentKey")
    company_name: str = Field(alias="companyName")
    timeframe: int
    swing_points_day: list[SwingPointSchema] | None = Field(None, alias="swingPointsDay")
    swing_points_4h: list[SwingPointSchema] | None = Field(None, alias="swingPoints4H")
    swing_points_1h: list[SwingPointSchema] | None = Field(None, alias="swingPoints1H")
    swing_points_15min: list[SwingPointSchema] | None = Field(None, alias="swingPoints15Min")

    @classmethod
    def from_domain(cls, company: ProcessedCompany) -> "ProcessedCompanySchema":
        return cls(
            instrument_key=company.instrument_key,
            company_name=company.company_name,
            timeframe=company.timeframe,
            swing_points_day=_points(company.swing_points_day),
            swing_points_4h=_points(company.swing_points_4h),
            swing_points_1h=_points(company.swing_points_1h),
            swing_points_15min=_points(company.swing_points_15min),
        )


class CalculateResponse(BaseModel):
    success: bool = True
    data: ProcessedCompanySchema | None = None


class ErrorResponse(BaseModel):
    error: str
