"""
Earnings and cashout Pydantic schemas.
"""

from datetime import datetime
from typing import List

from pydantic import Field

from zapshift.app.schemas.common import CamelModel


class EarningsSummaryResponse(CamelModel):
    total_earning: float
    total_cashed_out: float
    pending_amount: float
    today_earning: float
    weekly_earning: float
    monthly_earning: float
    completed_count: int


class CashoutRequest(CamelModel):
    amount: float = Field(..., gt=0, description="Earning claimed for the parcel")
    parcel_id: int = Field(..., description="Completed parcel being cashed out")


class CashoutResponse(CamelModel):
    success: bool = True
    message: str
    parcel_id: int
    amount: float
    total_cashed_out: float
    pending_amount: float
    cashed_out_at: datetime


class CashoutHistoryItem(CamelModel):
    parcel_id: int
    amount: float
    created_at: datetime


class CashoutHistoryResponse(CamelModel):
    cashouts: List[CashoutHistoryItem]
    total_cashed_out: float
