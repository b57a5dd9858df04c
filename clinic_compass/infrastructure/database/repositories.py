"""Data access layer for the clinic profile store"""

from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from clinic_compass.domain.models import (
    BuildingType,
    ClinicProfile,
    ComplaintFrequency,
    OpeningStatus,
    PatientGroup,
    RevisitRange,
    Specialty,
)
from clinic_compass.infrastructure.database.models import ClinicProfileRecord

# Timestamps are owned by the store, not the payload
_TIMESTAMP_FIELDS = ("id", "created_at", "updated_at")


def profile_to_payload(profile: ClinicProfile) -> Dict[str, Any]:
    """Serialize profile body to JSON-compatible dict (enums as their wire values)"""
    payload = asdict(profile)
    for key in _TIMESTAMP_FIELDS:
        payload.pop(key)
    payload["opening_status"] = profile.opening_status.value
    payload["building_type"] = profile.building_type.value
    payload["specialties"] = [s.value for s in profile.specialties]
    payload["patient_group"] = profile.patient_group.value
    payload["revisit_range"] = profile.revisit_range.value
    payload["complaint_frequency"] = profile.complaint_frequency.value
    return payload


def profile_from_payload(profile_id: str, created_at: str, updated_at: str, payload: Dict[str, Any]) -> ClinicProfile:
    data = dict(payload)
    data["opening_status"] = OpeningStatus(data["opening_status"])
    data["building_type"] = BuildingType(data["building_type"])
    data["specialties"] = tuple(Specialty(s) for s in data["specialties"])
    data["patient_group"] = PatientGroup(data["patient_group"])
    data["revisit_range"] = RevisitRange(data["revisit_range"])
    data["complaint_frequency"] = ComplaintFrequency(data["complaint_frequency"])
    return ClinicProfile(id=profile_id, created_at=created_at, updated_at=updated_at, **data)


def _iso_utc(value: datetime) -> str:
    # SQLite hands back naive datetimes; everything stored is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _record_to_profile(record: ClinicProfileRecord) -> ClinicProfile:
    return profile_from_payload(
        record.id,
        _iso_utc(record.created_at),
        _iso_utc(record.updated_at),
        record.payload,
    )


class ProfileRepository:
    """Repository for clinic profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_current(self) -> Optional[ClinicProfile]:
        """Most recently written profile, or None when the store is empty"""
        record = (
            self.db.query(ClinicProfileRecord)
            .order_by(ClinicProfileRecord.updated_at.desc())
            .first()
        )
        return _record_to_profile(record) if record else None

    def upsert(self, profile: ClinicProfile) -> ClinicProfile:
        """
        Insert or update a profile by id.

        created_at is set on first insert and preserved afterwards;
        updated_at is refreshed on every write. Returns the stored profile.
        """
        now = datetime.now(timezone.utc)
        record = self.db.get(ClinicProfileRecord, profile.id)
        if record is None:
            record = ClinicProfileRecord(id=profile.id, created_at=now)
            self.db.add(record)
        record.payload = profile_to_payload(profile)
        record.updated_at = now
        self.db.flush()
        return replace(
            profile,
            created_at=_iso_utc(record.created_at),
            updated_at=_iso_utc(record.updated_at),
        )

    def delete_all(self) -> int:
        """Remove every stored profile, returning how many were deleted"""
        deleted = self.db.query(ClinicProfileRecord).delete()
        self.db.flush()
        return deleted
