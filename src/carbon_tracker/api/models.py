"""Pydantic models for API request payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntryPayload(BaseModel):
    """Raw carbon entry submission.

    Values are passed through loosely typed; the accounting engine validates.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: Any = Field(default=None, alias="userId")
    category: Any = None
    activity: Any = None
    amount: Any = None
    co2_emission: Any = Field(default=None, alias="co2Emission")
    date: Any = None

    def to_payload(self) -> dict[str, object]:
        return {
            "userId": self.user_id,
            "category": self.category,
            "activity": self.activity,
            "amount": self.amount,
            "co2Emission": self.co2_emission,
            "date": self.date,
        }


class TargetsPayload(BaseModel):
    """Weekly and monthly target update."""

    model_config = ConfigDict(populate_by_name=True)

    weekly_target: float = Field(alias="weeklyTarget")
    monthly_target: float = Field(alias="monthlyTarget")
