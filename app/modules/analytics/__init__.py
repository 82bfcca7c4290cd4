"""
Analytics Module - Administrator metrics

Features:
- Dashboard summary of shipments, drivers, customers and revenue
- Valuation with change against the previous period and weekly trend
- Revenue, expenses and profit margin
- Shipment, regional, cancellation, fleet and delivery metrics
- Customer growth and churn
- Report generation requests

Architecture:
- router.py: Analytics endpoints (admin only)
- service.py: Metric calculations
- repository.py: Aggregate queries
- schemas.py: Response models
"""

from .router import router
from .service import AnalyticsService
from .repository import AnalyticsRepository

__all__ = [
    "router",
    "AnalyticsService",
    "AnalyticsRepository"
]
