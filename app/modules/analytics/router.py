# app/modules/analytics/router.py
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user
from .service import AnalyticsService
from .schemas import (
    DashboardResponse, ValuationResponse, RevenueResponse, ExpensesResponse,
    ProfitMarginResponse, ShipmentAnalyticsResponse, RegionalPerformance,
    ErrorSummaryResponse, FleetUtilizationResponse, LiveTrackingResponse,
    DeliveryPerformanceResponse, CustomerMetricsResponse, ReportRequest, ReportResponse
)

# Every analytics route is admin only
router = APIRouter(dependencies=[Depends(get_admin_user)])

RANGE_QUERY = Query("month", description="week, month or year")

@router.get("/health")
async def analytics_health():
    """Health check of the analytics module"""
    return {
        "service": "analytics",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Dashboard summary",
            "Revenue and profit",
            "Operational metrics",
            "Customer metrics",
            "Reports"
        ]
    }

@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(db: Session = Depends(get_db)):
    """Key counters: shipments, drivers, customers, revenue and accounts"""
    service = AnalyticsService(db)
    return await service.get_dashboard()

@router.get("/valuation", response_model=ValuationResponse)
async def get_valuation(
    range: str = RANGE_QUERY,
    db: Session = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_valuation(range)

@router.get("/revenue", response_model=RevenueResponse)
async def get_revenue(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    """Declared value of delivered shipments, by service type"""
    service = AnalyticsService(db)
    return await service.get_revenue(start_date, end_date)

@router.get("/expenses", response_model=ExpensesResponse)
async def get_expenses(
    range: str = RANGE_QUERY,
    db: Session = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_expenses(range)

@router.get("/profit-margin", response_model=ProfitMarginResponse)
async def get_profit_margin(db: Session = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_profit_margin()

@router.get("/shipments", response_model=ShipmentAnalyticsResponse)
async def get_shipment_analytics(
    range: str = RANGE_QUERY,
    db: Session = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_shipment_stats(range)

@router.get("/regional", response_model=List[RegionalPerformance])
async def get_regional_performance(db: Session = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_regional_performance()

@router.get("/errors", response_model=ErrorSummaryResponse)
async def get_error_summary(
    range: str = Query("week", description="week, month or year"),
    db: Session = Depends(get_db)
):
    """Cancellation rate and reasons"""
    service = AnalyticsService(db)
    return await service.get_error_summary(range)

@router.get("/fleet-utilization", response_model=FleetUtilizationResponse)
async def get_fleet_utilization(db: Session = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_fleet_utilization()

@router.get("/live-tracking", response_model=LiveTrackingResponse)
async def get_live_tracking(db: Session = Depends(get_db)):
    """Shipments in transit or out for delivery with their driver's position"""
    service = AnalyticsService(db)
    return await service.get_live_tracking()

@router.get("/delivery-performance", response_model=DeliveryPerformanceResponse)
async def get_delivery_performance(db: Session = Depends(get_db)):
    service = AnalyticsService(db)
    return await service.get_delivery_performance()

@router.get("/customers", response_model=CustomerMetricsResponse)
async def get_customer_metrics(
    range: str = RANGE_QUERY,
    db: Session = Depends(get_db)
):
    service = AnalyticsService(db)
    return await service.get_customer_metrics(range)

@router.post("/reports/{report_type}", response_model=ReportResponse)
async def generate_report(
    report_type: str = Path(..., description="revenue, shipments, drivers, customers, expenses, performance"),
    request: Optional[ReportRequest] = None,
    db: Session = Depends(get_db)
):
    """Queue a report for generation"""
    service = AnalyticsService(db)
    return await service.generate_report(report_type, request or ReportRequest())
