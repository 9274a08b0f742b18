"""
Geo Tracking database model.

One row per location ping or site visit reported by a field agent.
"""

from sqlalchemy import Column, Integer, Float, String, Text, Boolean, Numeric, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.domain.geo_tracking.precision import LATITUDE, LONGITUDE


class GeoTracking(Base):
    """
    Geo Tracking model.

    Coordinates are fixed-precision decimals; everything except the user
    reference, the coordinates and the timestamps is optional.
    """
    __tablename__ = "geo_tracking"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # References
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Position
    latitude = Column(Numeric(LATITUDE.precision, LATITUDE.scale), nullable=False)
    longitude = Column(Numeric(LONGITUDE.precision, LONGITUDE.scale), nullable=False)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Device / context metadata
    speed = Column(Float, nullable=True)
    heading = Column(Float, nullable=True)
    accuracy = Column(Float, nullable=True)
    altitude = Column(Float, nullable=True)
    provider = Column(Text, nullable=True)
    batt = Column(Float, nullable=True)  # Battery percentage
    is_charging = Column(Boolean, nullable=True)
    network = Column(Text, nullable=True)
    connection_type = Column(Text, nullable=True)
    wifi_status = Column(Boolean, nullable=True)
    ip_address = Column(String(45), nullable=True)
    location_type = Column(Text, nullable=True)
    activity_type = Column(String(20), nullable=True)  # ActivityType value
    activity_confidence = Column(Float, nullable=True)
    app_state = Column(Text, nullable=True)

    # Visit metadata
    check_in_time = Column(DateTime(timezone=True), nullable=True)
    check_out_time = Column(DateTime(timezone=True), nullable=True)
    visit_purpose = Column(Text, nullable=True)
    site_name = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    check_in_photo_url = Column(Text, nullable=True)
    check_out_photo_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="geo_locations")

    def __repr__(self):
        return f"<GeoTracking(id={self.id}, user_id={self.user_id}, lat={self.latitude}, lng={self.longitude})>"
