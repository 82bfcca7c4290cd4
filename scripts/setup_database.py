#!/usr/bin/env python3
"""
Create every table and seed reference data (FAQs, pricing configs)

Safe to run more than once: existing rows are left untouched.
"""
import sys
import time

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from app.config.constants import DEFAULT_FAQS, DEFAULT_PRICING_CONFIGS
from app.config.database import Base, SessionLocal, engine
from app.shared.database import models

def wait_for_db(attempts: int = 30) -> bool:
    """Wait until PostgreSQL accepts connections"""
    print("⏳ Waiting for the database...")

    for attempt in range(attempts):
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            print("✅ Database ready!")
            return True
        except OperationalError:
            print(f"⏳ Attempt {attempt + 1}/{attempts}...")
            time.sleep(1)

    print(f"❌ Database not available after {attempts} seconds")
    return False

def create_tables():
    print("🏗️ Creating tables...")
    Base.metadata.create_all(bind=engine)
    print(f"✅ {len(Base.metadata.tables)} tables ready")

def seed_reference_data():
    db = SessionLocal()
    try:
        existing_questions = {question for (question,) in db.query(models.FAQ.question).all()}
        new_faqs = [faq for faq in DEFAULT_FAQS if faq["question"] not in existing_questions]
        for faq in new_faqs:
            db.add(models.FAQ(**faq))
        print(f"❓ FAQs seeded: {len(new_faqs)}")

        existing_types = {
            service_type for (service_type,) in db.query(models.PricingConfig.service_type).all()
        }
        new_configs = [
            config for config in DEFAULT_PRICING_CONFIGS
            if config["service_type"] not in existing_types
        ]
        for config in new_configs:
            db.add(models.PricingConfig(**config, is_active=True))
        print(f"💰 Pricing configs seeded: {len(new_configs)}")

        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def main() -> bool:
    print("🚚 Blyne Logistics - database setup")
    if not wait_for_db():
        return False

    create_tables()
    seed_reference_data()

    print("🎉 Database setup complete")
    print("💡 Next: python scripts/seed_admin.py to create the first administrator")
    return True

if __name__ == "__main__":
    sys.exit(0 if main() else 1)
