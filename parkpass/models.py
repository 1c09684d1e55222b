from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Text, ForeignKey, Numeric, JSON, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from parkpass.database import Base

# SQLite only autoincrements INTEGER primary keys
IdType = BigInteger().with_variant(Integer, "sqlite")

# ================================
# Districts & Parks
# ================================
class District(Base):
    __tablename__ = "districts"

    id = Column(IdType, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    image = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    parks = relationship("Park", back_populates="district")

class Park(Base):
    __tablename__ = "parks"

    id = Column(IdType, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    district_id = Column(IdType, ForeignKey("districts.id"), nullable=False, index=True)
    description = Column(Text)
    image = Column(String(500))
    adult_price = Column(Numeric(10, 2), nullable=False)
    child_price = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    features = Column(JSON, default=list)
    opening_hours = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    district = relationship("District", back_populates="parks")
    bookings = relationship("Booking", back_populates="park")
    admins = relationship("AdminUser", secondary="admin_user_parks", back_populates="assigned_parks")

# ================================
# Bookings / Tickets
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(IdType, primary_key=True, index=True)
    ticket_no = Column(String(8), unique=True, index=True)
    park_id = Column(IdType, ForeignKey("parks.id"), nullable=False, index=True)
    visit_date = Column(Date, nullable=False, index=True)
    visitor_name = Column(String(255), nullable=False)
    visitor_email = Column(String(255), nullable=False, index=True)
    visitor_phone = Column(String(50))
    adults = Column(Integer, nullable=False, default=0)
    children = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="active", index=True)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    payment_id = Column(String(100))
    payment_method = Column(String(50))
    used_at = Column(DateTime(timezone=True))
    is_downloaded = Column(Boolean, nullable=False, default=False)
    is_printed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    park = relationship("Park", back_populates="bookings")

# ================================
# Admin Users
# ================================
admin_user_parks = Table(
    "admin_user_parks",
    Base.metadata,
    Column("admin_user_id", IdType, ForeignKey("admin_users.id", ondelete="CASCADE"), primary_key=True),
    Column("park_id", IdType, ForeignKey("parks.id", ondelete="CASCADE"), primary_key=True),
)

class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(IdType, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, index=True)
    is_active = Column(Boolean, default=True, index=True)
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    assigned_parks = relationship("Park", secondary=admin_user_parks, back_populates="admins")

    @property
    def assigned_park_ids(self):
        return sorted(park.id for park in self.assigned_parks)
