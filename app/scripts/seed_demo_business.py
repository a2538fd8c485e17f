#!/usr/bin/env python3
"""
Script to create a demo business with services, weekly hours and an auth record
Usage: python -m app.scripts.seed_demo_business [--refresh-token TOKEN] [--create-tables]
"""
import argparse
import sys
from datetime import time
from typing import Optional

from cryptography.fernet import Fernet
from sqlalchemy.orm import Session

from app.config.database import create_db_engine, create_session_factory, create_tables
from app.config.settings import get_settings
from app.models.auth_credential import AuthCredential
from app.models.availability import OperatingHourRule
from app.models.business import Business
from app.models.service import Service
from app.services.business.business_store import BusinessStore
from app.utils.encryption import encrypt_token, get_cipher

DEMO_SERVICES = [
    {"service_name": "Initial Consultation", "duration_minutes": 30, "category": "consultation"},
    {"service_name": "Full Session", "duration_minutes": 60, "category": "treatment"},
    {"service_name": "Quick Check-in", "duration_minutes": None, "category": "follow_up"},
]

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def seed_demo_business(
        db: Session,
        cipher: Optional[Fernet] = None,
        refresh_token: Optional[str] = None,
        time_zone: str = "America/New_York",
        email: str = "demo@example.com",
) -> Business:
    """Create the demo business; Mon-Fri 09:00-17:00 in time_zone"""
    business = Business(
        business_name="Demo Wellness Studio",
        email=email,
        location="123 Main Street",
        phone_number="+15555550100",
        description="Demo business for local booking runs",
        is_active=True,
        google_is_connected=bool(refresh_token),
    )
    db.add(business)
    db.flush()

    for service_data in DEMO_SERVICES:
        db.add(Service(business_id=business.id, **service_data))

    encrypted = None
    if refresh_token:
        if cipher is None:
            raise ValueError("A cipher is required to store a refresh token")
        encrypted = encrypt_token(cipher, refresh_token)
    db.add(AuthCredential(business_id=business.id, refresh_token_encrypted=encrypted))
    db.commit()

    rules = [
        OperatingHourRule(day_of_week=day, open_time=time(9, 0), close_time=time(17, 0), time_zone=time_zone)
        for day in range(1, 6)
    ]
    BusinessStore(db, cipher).replace_weekly_schedule(business.id, rules)

    db.refresh(business)
    return business


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed a demo business")
    parser.add_argument("--refresh-token", default=None, help="Google refresh token to store encrypted")
    parser.add_argument("--time-zone", default="America/New_York")
    parser.add_argument("--create-tables", action="store_true")
    args = parser.parse_args(argv)

    settings = get_settings()
    engine = create_db_engine(settings)
    if args.create_tables:
        create_tables(engine)

    cipher = get_cipher(settings.CALENDAR_ENCRYPTION_KEY) if settings.CALENDAR_ENCRYPTION_KEY else None
    db = create_session_factory(engine)()

    try:
        business = seed_demo_business(db, cipher, args.refresh_token, args.time_zone)
        services = db.query(Service).filter(Service.business_id == business.id).all()

        print("\n" + "=" * 60)
        print("BUSINESS CREATED SUCCESSFULLY!")
        print("=" * 60)
        print(f"\nBusiness ID: {business.id}")
        print(f"Name: {business.business_name}")
        print(f"Calendar connected: {business.google_is_connected}")
        print("\nServices:")
        for service in services:
            print(f"  - {service.service_name} ({service.formatted_duration}) id={service.id}")
        print("\nBusiness Hours:")
        for day in range(1, 6):
            print(f"  {DAYS[day - 1]}: 09:00 - 17:00 {args.time_zone}")
        print()
        return 0

    except Exception as e:
        db.rollback()
        print(f"\nError creating business: {e}")
        import traceback
        traceback.print_exc()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
