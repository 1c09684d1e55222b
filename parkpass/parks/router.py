from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from parkpass.auth.dependencies import get_current_actor
from parkpass.auth.schemas import Actor
from parkpass.bookings.guard import Action, authorize
from parkpass.bookings.http import raise_for_error
from parkpass.database import get_db
from parkpass.parks.schemas import (
    District, DistrictCreate, DistrictUpdate, Park, ParkCreate, ParkStatusUpdate, ParkUpdate
)
from parkpass.parks.service import DistrictService, ParkService

districts_router = APIRouter()
parks_router = APIRouter()

def _require_catalog_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    raise_for_error(authorize(actor, None, Action.MANAGE_CATALOG))
    return actor

def _authorize_park_update(actor: Actor, park_id: int) -> None:
    """Super-admins edit any park, park-admins only their assigned ones"""
    if authorize(actor, None, Action.MANAGE_CATALOG) is None:
        return
    raise_for_error(authorize(actor, park_id, Action.UPDATE_PARK))

def _district_response(district, counts: dict) -> District:
    return District.model_validate(district).model_copy(update={"park_count": counts.get(district.id, 0)})

# Districts
@districts_router.get("", response_model=List[District])
def get_districts(db: Session = Depends(get_db)):
    """Get all districts with their park counts"""
    counts = DistrictService.park_counts(db)
    return [_district_response(d, counts) for d in DistrictService.get_districts(db)]

@districts_router.post("", response_model=District, status_code=status.HTTP_201_CREATED)
def create_district(
    district: DistrictCreate,
    _: Actor = Depends(_require_catalog_admin),
    db: Session = Depends(get_db)
):
    try:
        return DistrictService.create_district(db, district)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@districts_router.get("/{district_id}", response_model=District)
def get_district(district_id: int, db: Session = Depends(get_db)):
    district = DistrictService.get_district_by_id(db, district_id)
    if not district:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return _district_response(district, DistrictService.park_counts(db))

@districts_router.get("/{district_id}/parks", response_model=List[Park])
def get_district_parks(district_id: int, db: Session = Depends(get_db)):
    """Active parks in a district"""
    if not DistrictService.get_district_by_id(db, district_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return ParkService.get_parks(db, district_id=district_id)

@districts_router.put("/{district_id}", response_model=District)
def update_district(
    district_id: int,
    district_update: DistrictUpdate,
    _: Actor = Depends(_require_catalog_admin),
    db: Session = Depends(get_db)
):
    try:
        district = DistrictService.update_district(db, district_id, district_update)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not district:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return _district_response(district, DistrictService.park_counts(db))

@districts_router.delete("/{district_id}")
def delete_district(
    district_id: int,
    _: Actor = Depends(_require_catalog_admin),
    db: Session = Depends(get_db)
):
    try:
        deleted = DistrictService.delete_district(db, district_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")
    return {"message": "District deleted successfully"}

# Parks
@parks_router.get("", response_model=List[Park])
def get_parks(
    district_id: Optional[int] = Query(None, description="Filter by district ID"),
    q: Optional[str] = Query(None, description="Search by park name"),
    include_inactive: bool = Query(False, description="Include parks closed for booking"),
    db: Session = Depends(get_db)
):
    """List parks open for booking"""
    return ParkService.get_parks(db, district_id=district_id, include_inactive=include_inactive, query=q)

@parks_router.post("", response_model=Park, status_code=status.HTTP_201_CREATED)
def create_park(
    park: ParkCreate,
    _: Actor = Depends(_require_catalog_admin),
    db: Session = Depends(get_db)
):
    try:
        created = ParkService.create_park(db, park)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ParkService.get_park_by_id(db, created.id)

@parks_router.get("/{park_id}", response_model=Park)
def get_park(park_id: int, db: Session = Depends(get_db)):
    """Get park details by ID"""
    park = ParkService.get_park_by_id(db, park_id)
    if not park:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Park not found")
    return park

@parks_router.put("/{park_id}", response_model=Park)
def update_park(
    park_id: int,
    park_update: ParkUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    _authorize_park_update(actor, park_id)
    if park_update.district_id is not None:
        raise_for_error(authorize(actor, None, Action.MANAGE_CATALOG))

    try:
        park = ParkService.update_park(db, park_id, park_update)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not park:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Park not found")
    return park

@parks_router.patch("/{park_id}/status", response_model=Park)
def set_park_status(
    park_id: int,
    status_update: ParkStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """Open or close a park for new bookings"""
    _authorize_park_update(actor, park_id)
    park = ParkService.set_park_status(db, park_id, status_update.is_active)
    if not park:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Park not found")
    return park

@parks_router.delete("/{park_id}")
def delete_park(
    park_id: int,
    _: Actor = Depends(_require_catalog_admin),
    db: Session = Depends(get_db)
):
    try:
        deleted = ParkService.delete_park(db, park_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Park not found")
    return {"message": "Park deleted successfully"}
