"""NamingSeriesCounter SQLAlchemy model"""

from sqlalchemy import Column, Text, Integer
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .base import Base, utcnow


class NamingSeriesCounter(Base):
    """Last number handed out per (series, calendar year)."""
    __tablename__ = "naming_series_counter"

    series = Column(Text, primary_key=True)  # e.g. IND-APP, EAC-MBR
    year = Column(Integer, primary_key=True)
    current_value = Column(Integer, nullable=False, default=0)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "series": self.series,
            "year": self.year,
            "currentValue": self.current_value,
        }
