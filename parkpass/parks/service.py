import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from parkpass.models import Booking, District, Park
from parkpass.parks.schemas import DistrictCreate, DistrictUpdate, ParkCreate, ParkUpdate

logger = logging.getLogger(__name__)

# Park columns that cannot be cleared
REQUIRED_PARK_FIELDS = frozenset({"name", "district_id", "adult_price", "child_price", "capacity", "is_active", "features"})

class DistrictService:
    @staticmethod
    def get_district_by_id(db: Session, district_id: int) -> Optional[District]:
        return db.query(District).filter(District.id == district_id).first()

    @staticmethod
    def get_districts(db: Session) -> List[District]:
        """Get all districts ordered by name"""
        return db.query(District).order_by(District.name).all()

    @staticmethod
    def park_counts(db: Session) -> dict:
        """Number of parks per district ID"""
        rows = db.query(Park.district_id, func.count(Park.id)).group_by(Park.district_id).all()
        return {district_id: count for district_id, count in rows}

    @staticmethod
    def create_district(db: Session, district: DistrictCreate) -> District:
        if DistrictService._name_taken(db, district.name):
            raise ValueError(f"District '{district.name}' already exists")

        db_district = District(**district.model_dump())
        db.add(db_district)
        db.commit()
        db.refresh(db_district)
        logger.info("Created district %s (%s)", db_district.id, db_district.name)
        return db_district

    @staticmethod
    def update_district(db: Session, district_id: int, district_update: DistrictUpdate) -> Optional[District]:
        db_district = DistrictService.get_district_by_id(db, district_id)
        if not db_district:
            return None

        update_data = district_update.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is None:
            raise ValueError("District name cannot be cleared")
        if update_data.get("name") and DistrictService._name_taken(db, update_data["name"], exclude_id=district_id):
            raise ValueError(f"District '{update_data['name']}' already exists")

        for field, value in update_data.items():
            setattr(db_district, field, value)

        db.commit()
        db.refresh(db_district)
        return db_district

    @staticmethod
    def delete_district(db: Session, district_id: int) -> bool:
        """Delete a district; refused while it still has parks"""
        db_district = DistrictService.get_district_by_id(db, district_id)
        if not db_district:
            return False

        if db.query(Park.id).filter(Park.district_id == district_id).first():
            raise ValueError("Cannot delete a district that still has parks")

        db.delete(db_district)
        db.commit()
        logger.info("Deleted district %s", district_id)
        return True

    @staticmethod
    def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(District.id).filter(func.lower(District.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.filter(District.id != exclude_id)
        return query.first() is not None

class ParkService:
    @staticmethod
    def get_park_by_id(db: Session, park_id: int) -> Optional[Park]:
        """Get park by ID with its district"""
        return db.query(Park).options(joinedload(Park.district)).filter(Park.id == park_id).first()

    @staticmethod
    def get_parks(
        db: Session,
        district_id: Optional[int] = None,
        include_inactive: bool = False,
        query: Optional[str] = None
    ) -> List[Park]:
        """Get parks with optional filters"""
        parks = db.query(Park).options(joinedload(Park.district))

        if district_id:
            parks = parks.filter(Park.district_id == district_id)
        if not include_inactive:
            parks = parks.filter(Park.is_active.is_(True))
        if query:
            parks = parks.filter(Park.name.ilike(f"%{query}%"))

        return parks.order_by(Park.name).all()

    @staticmethod
    def create_park(db: Session, park: ParkCreate) -> Park:
        if not DistrictService.get_district_by_id(db, park.district_id):
            raise ValueError(f"District {park.district_id} not found")

        db_park = Park(**park.model_dump())
        db.add(db_park)
        db.commit()
        db.refresh(db_park)
        logger.info("Created park %s (%s) in district %s", db_park.id, db_park.name, db_park.district_id)
        return db_park

    @staticmethod
    def update_park(db: Session, park_id: int, park_update: ParkUpdate) -> Optional[Park]:
        """Update park details.

        Prices apply to new bookings only; existing totals are stored on the
        booking and are not recomputed.
        """
        db_park = ParkService.get_park_by_id(db, park_id)
        if not db_park:
            return None

        update_data = park_update.model_dump(exclude_unset=True)
        cleared = sorted(field for field, value in update_data.items() if value is None and field in REQUIRED_PARK_FIELDS)
        if cleared:
            raise ValueError(f"Cannot clear required park fields: {', '.join(cleared)}")
        if update_data.get("district_id") and not DistrictService.get_district_by_id(db, update_data["district_id"]):
            raise ValueError(f"District {update_data['district_id']} not found")

        for field, value in update_data.items():
            setattr(db_park, field, value)

        db.commit()
        db.refresh(db_park)
        logger.info("Updated park %s: %s", park_id, ", ".join(sorted(update_data)))
        return db_park

    @staticmethod
    def set_park_status(db: Session, park_id: int, is_active: bool) -> Optional[Park]:
        db_park = ParkService.get_park_by_id(db, park_id)
        if not db_park:
            return None

        db_park.is_active = is_active
        db.commit()
        db.refresh(db_park)
        logger.info("Park %s %s", park_id, "activated" if is_active else "deactivated")
        return db_park

    @staticmethod
    def delete_park(db: Session, park_id: int) -> bool:
        """Delete a park; refused while bookings reference it"""
        db_park = ParkService.get_park_by_id(db, park_id)
        if not db_park:
            return False

        if db.query(Booking.id).filter(Booking.park_id == park_id).first():
            raise ValueError("Cannot delete a park with bookings; deactivate it instead")

        db.delete(db_park)
        db.commit()
        logger.info("Deleted park %s", park_id)
        return True
