"""
leasekeeper.eligibility
=======================

Quick RTM qualification check for a building.

The thresholds follow Chapter 1 of Part 2 of the Commonhold and Leasehold
Reform Act 2002 as simplified for a self-service check: it tells a
leaseholder group whether a claim is worth pursuing, it is not legal advice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

MIN_FLATS = 2
MIN_RESIDENTIAL_PCT = 75.0
RESIDENT_LANDLORD_MAX_FLATS = 4
MIN_LEASE_YEARS = 21
MIN_PARTICIPATION_PCT = 50.0
STRONG_PARTICIPATION_PCT = 75.0
OLD_BUILDING_YEARS = 100


@dataclass
class EligibilityData:
    total_flats: int
    residential_flats: int
    commercial_units: int = 0
    landlord_resides: bool = False
    average_lease_length: int = 0
    participating_leaseholders: int = 0
    building_age: int = 0


@dataclass
class EligibilityResult:
    eligible: bool
    residential_percentage: float
    participation_rate: float
    reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)


def percentage(part: int, whole: int) -> float:
    """``100 * part / whole``, or 0 when *whole* is not positive."""
    return part * 100 / whole if whole > 0 else 0.0


def check_eligibility(data: EligibilityData) -> EligibilityResult:
    """Apply every rule and collect all reasons, not just the first failure."""
    reasons: List[str] = []
    warnings: List[str] = []

    if data.total_flats < MIN_FLATS:
        reasons.append(f"Building must contain at least {MIN_FLATS} flats")

    residential = percentage(data.residential_flats, data.total_flats)
    if residential < MIN_RESIDENTIAL_PCT:
        reasons.append(
            f"Building must be at least {MIN_RESIDENTIAL_PCT:.0f}% residential (currently {residential:.1f}%)"
        )

    if data.total_flats <= RESIDENT_LANDLORD_MAX_FLATS and data.landlord_resides:
        reasons.append(
            f"Landlord cannot reside in buildings with {RESIDENT_LANDLORD_MAX_FLATS} or fewer flats for RTM to apply"
        )

    if data.average_lease_length < MIN_LEASE_YEARS:
        reasons.append(f"Average lease length must be at least {MIN_LEASE_YEARS} years")

    participation = percentage(data.participating_leaseholders, data.residential_flats)
    if participation < MIN_PARTICIPATION_PCT:
        reasons.append(
            f"Need at least {MIN_PARTICIPATION_PCT:.0f}% leaseholder participation (currently {participation:.1f}%)"
        )

    if participation < STRONG_PARTICIPATION_PCT:
        warnings.append("Consider getting more leaseholders on board for a stronger claim")
    if data.commercial_units > 0:
        warnings.append("Commercial units may complicate the RTM process - seek legal advice")
    if data.building_age > OLD_BUILDING_YEARS:
        warnings.append("Older buildings may have complex lease structures - review all leases carefully")

    eligible = not reasons
    if eligible:
        next_steps = [
            "Conduct a formal leaseholder survey",
            "Form an RTM company",
            "Serve the claim notice",
            "Complete the acquisition process",
        ]
    else:
        next_steps = [
            "Address the eligibility issues identified above",
            "Consider alternative management options",
            "Seek professional legal advice",
        ]

    return EligibilityResult(
        eligible=eligible,
        residential_percentage=residential,
        participation_rate=participation,
        reasons=reasons,
        warnings=warnings,
        next_steps=next_steps,
    )
