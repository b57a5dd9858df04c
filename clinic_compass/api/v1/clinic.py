"""GET/POST/DELETE /v1/clinic - stored clinic profile"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_compass.api.v1.schemas import (
    ClinicProfileResponse,
    ClinicProfileSchema,
    DeleteProfileResponse,
    SaveProfileResponse,
)
from clinic_compass.infrastructure.database.repositories import ProfileRepository
from clinic_compass.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/clinic", response_model=ClinicProfileResponse)
def get_clinic_profile(db: Session = Depends(get_db)):
    """Return the current profile, or null when none is stored"""
    profile = ProfileRepository(db).get_current()
    return ClinicProfileResponse(profile=ClinicProfileSchema.from_domain(profile) if profile else None)


@router.post("/clinic", response_model=SaveProfileResponse)
def save_clinic_profile(request_body: ClinicProfileSchema, db: Session = Depends(get_db)):
    """
    Create or update the clinic profile.

    The store assigns created_at on first save and refreshes updated_at on every save;
    client-supplied timestamps are ignored.
    """
    try:
        stored = ProfileRepository(db).upsert(request_body.to_domain())
        db.commit()
    except Exception:
        db.rollback()
        raise

    logging.info("Profile saved", extra={"profile_id": stored.id})
    return SaveProfileResponse(success=True, profile=ClinicProfileSchema.from_domain(stored))


@router.delete("/clinic", response_model=DeleteProfileResponse)
def delete_clinic_profile(db: Session = Depends(get_db)):
    """Remove the stored profile"""
    deleted = ProfileRepository(db).delete_all()
    db.commit()
    logging.info("Profile deleted", extra={"deleted": deleted})
    return DeleteProfileResponse(success=True)
