# app/modules/analytics/service.py
from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta
from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session
import logging

from app.config.constants import DriverStatus, ShipmentStatus, STATIC_EXPENSES
from app.shared.utils.helpers import to_float, utcnow
from .repository import AnalyticsRepository
from .schemas import ReportRequest

logger = logging.getLogger(__name__)

RANGE_DELTAS = {
    "week": relativedelta(weeks=1),
    "month": relativedelta(months=1),
    "year": relativedelta(years=1),
}

REPORT_TYPES = ["revenue", "shipments", "drivers", "customers", "expenses", "performance"]

def range_start(range_name: str, now: Optional[datetime] = None) -> datetime:
    """Start of a week/month/year window ending now"""
    if range_name not in RANGE_DELTAS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid range. Must be one of: {', '.join(RANGE_DELTAS)}"
        )
    return (now or utcnow()) - RANGE_DELTAS[range_name]

def percentage(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0

class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = AnalyticsRepository(db)

    # ===== DASHBOARD =====

    async def get_dashboard(self) -> Dict[str, Any]:
        shipments = self.repository.count_shipments_by_status()
        drivers = self.repository.count_drivers_by_status()
        roles = self.repository.count_users_by_role()

        return {
            "shipments": {
                "total": sum(shipments.values()),
                "pending": shipments.get(ShipmentStatus.PENDING.value, 0),
                "in_transit": shipments.get(ShipmentStatus.IN_TRANSIT.value, 0),
                "delivered": shipments.get(ShipmentStatus.DELIVERED.value, 0)
            },
            "drivers": {
                "total": sum(drivers.values()),
                "active": drivers.get(DriverStatus.ACTIVE.value, 0),
                "on_delivery": drivers.get(DriverStatus.ON_DELIVERY.value, 0)
            },
            "customers": self.repository.count_distinct_senders(),
            "revenue": self.repository.sum_delivered_value(),
            "users": roles.get("user", 0),
            "admins": roles.get("admin", 0)
        }

    # ===== FINANCIAL =====

    async def get_valuation(self, range_name: str = "month") -> Dict[str, Any]:
        """
        Delivered declared value over the range

        change compares with the window of the same length right before it;
        the trend splits the range into weekly buckets.
        """
        now = utcnow()
        start = range_start(range_name, now)
        previous_start = start - RANGE_DELTAS[range_name]

        current = self.repository.sum_delivered_value(start, now)
        previous = self.repository.sum_delivered_value(previous_start, start)

        rows = self.repository.get_delivered_values(start, now)
        trend = []
        bucket_start = start
        while bucket_start < now:
            bucket_end = min(bucket_start + timedelta(weeks=1), now)
            value = sum(
                to_float(declared) for declared, created_at, _ in rows
                if bucket_start <= created_at < bucket_end
            )
            trend.append({"date": bucket_start.date(), "value": round(value, 2)})
            bucket_start = bucket_end

        return {
            "valuation": current,
            "previous_valuation": previous,
            "change": self._calculate_change_percentage(current, previous),
            "trend": trend
        }

    async def get_revenue(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        rows = self.repository.get_delivered_values(start_date, end_date)

        by_service_type: Dict[str, float] = {}
        for declared, _, service_type in rows:
            key = service_type or "standard"
            by_service_type[key] = by_service_type.get(key, 0.0) + to_float(declared)

        return {
            "total": sum(to_float(declared) for declared, _, _ in rows),
            "by_service_type": by_service_type,
            "data": [
                {"date": created_at, "amount": to_float(declared)}
                for declared, created_at, _ in rows
            ]
        }

    async def get_expenses(self, range_name: str = "month") -> Dict[str, Any]:
        # Static breakdown until expenses are recorded per shipment
        range_start(range_name)
        total = float(sum(item["amount"] for item in STATIC_EXPENSES))
        return {
            "total": total,
            "categories": [
                {
                    "name": item["name"],
                    "amount": float(item["amount"]),
                    "percentage": percentage(item["amount"], total)
                }
                for item in STATIC_EXPENSES
            ]
        }

    async def get_profit_margin(self) -> Dict[str, float]:
        revenue = self.repository.sum_delivered_value()
        expenses = float(sum(item["amount"] for item in STATIC_EXPENSES))
        gross_profit = revenue - expenses
        return {
            "margin": percentage(gross_profit, revenue),
            "gross_profit": gross_profit,
            "revenue": revenue,
            "expenses": expenses
        }

    # ===== OPERATIONS =====

    async def get_shipment_stats(self, range_name: str = "month") -> Dict[str, int]:
        start = range_start(range_name)
        counts = self.repository.get_status_counts_since(start)
        return {
            "total": sum(counts.values()),
            "completed": counts.get(ShipmentStatus.DELIVERED.value, 0),
            "customers": self.repository.count_distinct_senders(start),
            "returns": counts.get(ShipmentStatus.RETURNED.value, 0)
        }

    async def get_regional_performance(self) -> List[Dict[str, Any]]:
        """Shipments grouped by destination, busiest first"""
        return [
            {
                "region": destination,
                "shipments": shipments,
                "delivered": int(delivered or 0),
                "revenue": to_float(revenue)
            }
            for destination, shipments, delivered, revenue in self.repository.get_regional_performance()
        ]

    async def get_error_summary(self, range_name: str = "week") -> Dict[str, Any]:
        """Cancellations over the range and their reasons"""
        start = range_start(range_name)
        total = self.repository.count_shipments_since(start)
        reasons = self.repository.get_cancellation_reasons(start)
        cancelled = sum(count for _, count in reasons)

        return {
            "error_rate": percentage(cancelled, total),
            "total_errors": cancelled,
            "data": [
                {"reason": reason or "No reason provided", "count": count}
                for reason, count in reasons
            ]
        }

    async def get_fleet_utilization(self) -> Dict[str, Any]:
        vehicles = self.repository.get_vehicle_flags()
        total = len(vehicles)
        utilized = sum(1 for is_assigned, _ in vehicles if is_assigned)
        active = sum(1 for _, is_active in vehicles if is_active)

        return {
            "total": total,
            "utilized": utilized,
            "available": max(active - utilized, 0),
            "on_road": utilized,
            "utilization_rate": percentage(utilized, total)
        }

    async def get_live_tracking(self) -> Dict[str, Any]:
        shipments = self.repository.get_moving_shipments()

        items = []
        for shipment in shipments:
            location = None
            if shipment.driver and shipment.driver.current_lat is not None:
                location = {
                    "lat": to_float(shipment.driver.current_lat),
                    "lng": to_float(shipment.driver.current_lng)
                }
            items.append({
                "id": shipment.id,
                "tracking_number": shipment.tracking_number,
                "status": shipment.status,
                "origin": shipment.origin,
                "destination": shipment.destination,
                "location": location
            })

        return {"active_shipments": len(items), "shipments": items}

    async def get_delivery_performance(self) -> Dict[str, Any]:
        timings = self.repository.get_delivered_timings()
        total = len(timings)

        on_time = sum(
            1 for _, delivered_at, estimated in timings
            if estimated is not None and delivered_at <= estimated
        )
        total_days = sum(
            (delivered_at - created_at).total_seconds() / 86400
            for created_at, delivered_at, _ in timings
        )

        return {
            "on_time_rate": percentage(on_time, total),
            "avg_delivery_time": round(total_days / total, 1) if total else 0.0,
            "total_delivered": total
        }

    # ===== CUSTOMERS =====

    async def get_customer_metrics(self, range_name: str = "month") -> Dict[str, Any]:
        """
        Customer growth over the range

        Churn is the share of the previous window's senders that did not ship
        again in the current window.
        """
        now = utcnow()
        start = range_start(range_name, now)
        previous_start = start - RANGE_DELTAS[range_name]

        previous_senders = self.repository.get_sender_ids(previous_start, start)
        current_senders = self.repository.get_sender_ids(start, now)
        churned = len(previous_senders - current_senders)
        churn_rate = percentage(churned, len(previous_senders))

        return {
            "new_customers": self.repository.count_customers(since=start),
            "total_customers": self.repository.count_customers(),
            "active_customers": len(current_senders),
            "churn_rate": churn_rate,
            "retention": round(100 - churn_rate, 1) if previous_senders else 100.0
        }

    # ===== REPORTS =====

    async def generate_report(self, report_type: str, request: ReportRequest) -> Dict[str, Any]:
        if report_type not in REPORT_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid report type. Must be one of: {', '.join(REPORT_TYPES)}"
            )
        if request.start_date and request.end_date and request.start_date > request.end_date:
            raise HTTPException(status_code=400, detail="start_date must be before end_date")

        logger.info(
            f"📊 {report_type} report requested ({request.format}, "
            f"{request.start_date or 'beginning'} to {request.end_date or 'today'})"
        )
        # Reports are acknowledged only; no file is rendered, so url stays None
        return {
            "message": f"{report_type} report generation started",
            "url": None,
            "status": "processing"
        }

    # ===== UTILITIES =====

    def _calculate_change_percentage(self, current: float, previous: float) -> Optional[float]:
        if previous == 0:
            return None if current == 0 else 100.0
        return round((current - previous) / previous * 100, 2)
