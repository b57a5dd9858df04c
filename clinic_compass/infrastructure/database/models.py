"""SQLAlchemy ORM models for the clinic profile store"""

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ClinicProfileRecord(Base):
    """Stored clinic profile; the profile body lives in a JSON payload"""

    __tablename__ = "clinic_profile"

    id = Column(Text, primary_key=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, index=True)
