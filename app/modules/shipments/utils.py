# app/modules/shipments/utils.py
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from app.config.constants import DEFAULT_ETA_DAYS, ETA_DAYS, TRACKING_NUMBER_PREFIX
from app.shared.utils.helpers import utcnow


def generate_tracking_number(now: Optional[datetime] = None) -> str:
    """BLY-YYYYMMDD-XXXXX, the suffix being 5 uppercase hex chars"""
    now = now or utcnow()
    unique_part = uuid.uuid4().hex[:5].upper()
    return f"{TRACKING_NUMBER_PREFIX}-{now.strftime('%Y%m%d')}-{unique_part}"


def calculate_eta(service_type: Optional[str] = "standard", now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    key = service_type.lower().strip() if service_type else "standard"
    return now + timedelta(days=ETA_DAYS.get(key, DEFAULT_ETA_DAYS))


def format_address(value: Union[str, Dict[str, Any], None]) -> Optional[str]:
    """Flatten {address, city, state} objects sent by the booking form"""
    if value is None:
        return None
    if isinstance(value, dict):
        parts = [value.get("address"), value.get("city"), value.get("state")]
        return ", ".join(str(part).strip() for part in parts if part)
    return value.strip()
