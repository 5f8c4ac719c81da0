from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from swingpoints.domain.timeframe import TimeframeSelection


class TimeFrameSelectionSchema(BaseModel):
    """Which timeframes to fetch. ``day1`` is accepted as an older name for ``daySwings``."""

    model_config = ConfigDict(populate_by_name=True)

    min15: bool | None = None
    hour1: bool | None = None
    hour4: bool | None = None
    day_swings: bool | None = Field(None, validation_alias=AliasChoices("daySwings", "day1", "day_swings"))

    def to_selection(self) -> TimeframeSelection:
        return TimeframeSelection(
            fifteen_min=bool(self.min15),
            one_hour=bool(self.hour1),
            four_hour=bool(self.hour4),
            one_day=bool(self.day_swings),
        )


class CalculateRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "instrumentKey": "NSE_EQ|INE002A01018",
                "companyName": "Reliance Industries",
                "fromDate": "2024-01-01",
                "timeFrameSelection": {"min15": False, "hour1": True, "hour4": True, "daySwings": True},
            }
        },
    )

    instrument_key: str | None = Field(None, alias="instrumentKey")
    company_name: str | None = Field(None, alias="companyName")
    from_date: str | None = Field(None, alias="fromDate")
    time_frame_selection: TimeFrameSelectionSchema | None = Field(None, alias="timeFrameSelection")

    def selection(self) -> TimeframeSelection:
        if self.time_frame_selection is None:
            return TimeframeSelection()
        return self.time_frame_selection.to_selection()
