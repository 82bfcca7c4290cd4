# app/modules/analytics/schemas.py
from pydantic import BaseModel, validator
from typing import Dict, List, Optional
from datetime import date, datetime
from uuid import UUID

REPORT_FORMATS = ["pdf", "csv", "xlsx"]

# ===== DASHBOARD =====

class DashboardShipments(BaseModel):
    total: int = 0
    pending: int = 0
    in_transit: int = 0
    delivered: int = 0

class DashboardDrivers(BaseModel):
    total: int = 0
    active: int = 0
    on_delivery: int = 0

class DashboardResponse(BaseModel):
    shipments: DashboardShipments
    drivers: DashboardDrivers
    customers: int
    revenue: float
    users: int
    admins: int

# ===== FINANCIAL =====

class TrendPoint(BaseModel):
    date: date
    value: float

class ValuationResponse(BaseModel):
    valuation: float
    previous_valuation: float
    change: Optional[float] = None
    trend: List[TrendPoint]

class RevenuePoint(BaseModel):
    date: datetime
    amount: float

class RevenueResponse(BaseModel):
    total: float
    by_service_type: Dict[str, float]
    data: List[RevenuePoint]

class ExpenseCategory(BaseModel):
    name: str
    amount: float
    percentage: float

class ExpensesResponse(BaseModel):
    total: float
    categories: List[ExpenseCategory]

class ProfitMarginResponse(BaseModel):
    margin: float
    gross_profit: float
    revenue: float
    expenses: float

# ===== OPERATIONS =====

class ShipmentAnalyticsResponse(BaseModel):
    total: int
    completed: int
    customers: int
    returns: int

class RegionalPerformance(BaseModel):
    region: str
    shipments: int
    delivered: int
    revenue: float

class ErrorReason(BaseModel):
    reason: str
    count: int

class ErrorSummaryResponse(BaseModel):
    error_rate: float
    total_errors: int
    data: List[ErrorReason]

class FleetUtilizationResponse(BaseModel):
    total: int
    utilized: int
    available: int
    on_road: int
    utilization_rate: float

class LivePosition(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None

class LiveShipment(BaseModel):
    id: UUID
    tracking_number: str
    status: str
    origin: str
    destination: str
    location: Optional[LivePosition] = None

class LiveTrackingResponse(BaseModel):
    active_shipments: int
    shipments: List[LiveShipment]

class DeliveryPerformanceResponse(BaseModel):
    on_time_rate: float
    avg_delivery_time: float
    total_delivered: int

# ===== CUSTOMERS / REPORTS =====

class CustomerMetricsResponse(BaseModel):
    new_customers: int
    total_customers: int
    active_customers: int
    churn_rate: float
    retention: float

class ReportRequest(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    format: str = "pdf"

    @validator('format')
    def check_format(cls, v):
        v = (v or "pdf").lower()
        if v not in REPORT_FORMATS:
            raise ValueError(f"Invalid format. Must be one of: {', '.join(REPORT_FORMATS)}")
        return v

class ReportResponse(BaseModel):
    message: str
    url: Optional[str] = None
    status: str = "processing"
