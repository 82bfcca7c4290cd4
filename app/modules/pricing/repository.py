# app/modules/pricing/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from app.shared.database.models import PricingConfig

logger = logging.getLogger(__name__)

class PricingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[PricingConfig]:
        return self.db.query(PricingConfig).order_by(PricingConfig.service_type.asc()).all()

    def get_by_id(self, config_id: UUID) -> Optional[PricingConfig]:
        return self.db.query(PricingConfig).filter(PricingConfig.id == config_id).first()

    def get_active_for_service_type(self, service_type: str) -> Optional[PricingConfig]:
        """Case-insensitive lookup of the latest active config"""
        return (
            self.db.query(PricingConfig)
            .filter(
                func.lower(PricingConfig.service_type) == service_type.lower(),
                PricingConfig.is_active.is_(True)
            )
            .order_by(PricingConfig.updated_at.desc())
            .first()
        )

    def bulk_create(self, configs: List[Dict[str, Any]]) -> List[PricingConfig]:
        self.db.add_all([PricingConfig(**data) for data in configs])
        self.db.commit()
        return self.get_all()

    def create(self, data: Dict[str, Any]) -> PricingConfig:
        config = PricingConfig(**data)
        self.db.add(config)
        self.db.commit()
        self.db.refresh(config)
        return config

    def update(self, config: PricingConfig, updates: Dict[str, Any]) -> PricingConfig:
        for field, value in updates.items():
            setattr(config, field, value)
        self.db.commit()
        self.db.refresh(config)
        return config
