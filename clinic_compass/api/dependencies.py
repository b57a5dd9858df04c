"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from clinic_compass.api.v1.schemas import ClinicProfileSchema
from clinic_compass.domain.exceptions import ProfileNotFoundError
from clinic_compass.domain.models import ClinicProfile
from clinic_compass.infrastructure.clients.narrative import NarrativeClient
from clinic_compass.infrastructure.database.repositories import ProfileRepository


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_narrative_client() -> NarrativeClient:
    """Provide LLM narrative client instance"""
    return NarrativeClient()


def resolve_profile(body_profile: Optional[ClinicProfileSchema], db: Session) -> ClinicProfile:
    """
    Profile passed explicitly by the caller, else the stored one.

    Raises:
        ProfileNotFoundError: Neither supplied nor stored
    """
    if body_profile is not None:
        return body_profile.to_domain()
    profile = ProfileRepository(db).get_current()
    if profile is None:
        raise ProfileNotFoundError("No clinic profile supplied or stored")
    return profile
