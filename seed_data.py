#!/usr/bin/env python3
"""
Seed Data Script

Creates sample districts, parks and staff accounts for ParkPass.
Existing bookings are left alone; catalog and accounts are only added when
missing, so the script can be re-run safely.

Usage:
    python seed_data.py
"""

from decimal import Decimal

from parkpass.auth.utils import get_password_hash
from parkpass.database import Base, SessionLocal, engine
from parkpass.models import AdminUser, District, Park

DISTRICTS = [
    {
        "name": "Thiruvananthapuram",
        "description": "Capital district with beaches, zoo and botanical gardens",
        "parks": [
            {
                "name": "Napier Zoological Park",
                "adult_price": Decimal("120.00"),
                "child_price": Decimal("50.00"),
                "capacity": 2000,
                "opening_hours": "09:00 - 17:00",
                "features": ["Zoo", "Museum", "Parking"],
            },
            {
                "name": "Veli Tourist Village",
                "adult_price": Decimal("40.00"),
                "child_price": Decimal("20.00"),
                "capacity": 1500,
                "opening_hours": "08:00 - 18:00",
                "features": ["Boating", "Floating Bridge", "Kids Play Area"],
            },
        ],
    },
    {
        "name": "Ernakulam",
        "description": "Parks and waterfronts around Kochi",
        "parks": [
            {
                "name": "Marine Drive Park",
                "adult_price": Decimal("30.00"),
                "child_price": Decimal("10.00"),
                "capacity": 3000,
                "opening_hours": "06:00 - 21:00",
                "features": ["Walkway", "Boat Jetty"],
            },
        ],
    },
    {
        "name": "Idukki",
        "description": "Hill stations and wildlife sanctuaries",
        "parks": [
            {
                "name": "Eravikulam National Park",
                "adult_price": Decimal("200.00"),
                "child_price": Decimal("150.00"),
                "capacity": 2880,
                "opening_hours": "07:30 - 16:00",
                "features": ["Nilgiri Tahr", "Trekking", "Shuttle Bus"],
            },
        ],
    },
]

STAFF = [
    {"name": "ParkPass Super Admin", "email": "admin@parkpass.in", "password": "Admin123!", "role": "super-admin", "parks": []},
    {"name": "Napier Park Admin", "email": "napier.admin@parkpass.in", "password": "ParkAdmin123!", "role": "park-admin", "parks": ["Napier Zoological Park"]},
    {"name": "Napier Gate Checker", "email": "napier.gate@parkpass.in", "password": "Checker123!", "role": "ticket-checker", "parks": ["Napier Zoological Park"]},
]

def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for ParkPass...")

        print("Creating districts and parks...")
        parks_by_name = {}
        for district_data in DISTRICTS:
            district = db.query(District).filter(District.name == district_data["name"]).first()
            if not district:
                district = District(name=district_data["name"], description=district_data["description"])
                db.add(district)
                db.flush()

            for park_data in district_data["parks"]:
                park = db.query(Park).filter(Park.name == park_data["name"]).first()
                if not park:
                    park = Park(district_id=district.id, is_active=True, **park_data)
                    db.add(park)
                    db.flush()
                parks_by_name[park.name] = park

        print("Creating staff accounts...")
        created_staff = 0
        for staff in STAFF:
            if db.query(AdminUser).filter(AdminUser.email == staff["email"]).first():
                print(f"✅ {staff['email']} already exists, skipping...")
                continue
            db.add(AdminUser(
                name=staff["name"],
                email=staff["email"],
                password_hash=get_password_hash(staff["password"]),
                role=staff["role"],
                is_active=True,
                assigned_parks=[parks_by_name[name] for name in staff["parks"]]
            ))
            created_staff += 1

        db.commit()

        print("✅ Successfully created seed data for ParkPass!")
        print(f"  - {len(DISTRICTS)} districts")
        print(f"  - {len(parks_by_name)} parks")
        print(f"  - {created_staff} new staff accounts")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
