"""
api.eligibility
===============

Quick RTM qualification check.
"""

from dataclasses import asdict

from fastapi import APIRouter
from pydantic import BaseModel, Field

from leasekeeper.eligibility import EligibilityData, check_eligibility

router = APIRouter(tags=["eligibility"])


class EligibilityRequest(BaseModel):
    total_flats: int = Field(..., ge=0)
    residential_flats: int = Field(..., ge=0)
    commercial_units: int = Field(0, ge=0)
    landlord_resides: bool = False
    average_lease_length: int = Field(0, ge=0)
    participating_leaseholders: int = Field(0, ge=0)
    building_age: int = Field(0, ge=0)


@router.post("/eligibility")
async def eligibility(data: EligibilityRequest):
    return asdict(check_eligibility(EligibilityData(**data.model_dump())))
