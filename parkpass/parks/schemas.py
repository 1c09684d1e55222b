from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

# Districts
class DistrictBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = None

class DistrictCreate(DistrictBase):
    pass

class DistrictUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image: Optional[str] = None

class District(DistrictBase):
    id: int
    park_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Parks
class ParkBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    district_id: int
    description: Optional[str] = None
    image: Optional[str] = None
    adult_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    child_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    capacity: int = Field(..., ge=1)
    is_active: bool = True
    features: List[str] = []
    opening_hours: Optional[str] = None

class ParkCreate(ParkBase):
    pass

class ParkUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    district_id: Optional[int] = None
    description: Optional[str] = None
    image: Optional[str] = None
    adult_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    child_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    capacity: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    features: Optional[List[str]] = None
    opening_hours: Optional[str] = None

class ParkStatusUpdate(BaseModel):
    is_active: bool

class DistrictInfo(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class Park(ParkBase):
    id: int
    district: Optional[DistrictInfo] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
