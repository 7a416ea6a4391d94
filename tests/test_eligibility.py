"""
tests/test_eligibility.py
=========================

Unit tests for leasekeeper.eligibility.check_eligibility
"""

from dataclasses import fields

from leasekeeper.eligibility import EligibilityData, check_eligibility


def _data(**kw):
    base = dict(total_flats=12, residential_flats=12, average_lease_length=99,
                participating_leaseholders=10, building_age=40)
    base.update(kw)
    return EligibilityData(**base)


def test_eligible_building():
    result = check_eligibility(_data())
    assert result.eligible
    assert result.reasons == []
    assert result.warnings == []
    assert result.next_steps[0] == "Conduct a formal leaseholder survey"


def test_every_failed_rule_is_reported():
    result = check_eligibility(_data(total_flats=1, residential_flats=0, average_lease_length=10,
                                     participating_leaseholders=0, landlord_resides=True))
    assert not result.eligible
    assert len(result.reasons) == 5


def test_resident_landlord_only_matters_for_small_buildings():
    assert not check_eligibility(_data(total_flats=4, residential_flats=4, participating_leaseholders=4,
                                       landlord_resides=True)).eligible
    assert check_eligibility(_data(landlord_resides=True)).eligible


def test_thresholds_are_inclusive():
    result = check_eligibility(_data(total_flats=4, residential_flats=3, commercial_units=1,
                                     participating_leaseholders=2, average_lease_length=21))
    assert result.residential_percentage == 75
    assert result.participation_rate == 100 * 2 / 3
    assert result.eligible


def test_warnings():
    result = check_eligibility(_data(participating_leaseholders=7, commercial_units=1,
                                     total_flats=13, building_age=120))
    assert result.eligible
    assert len(result.warnings) == 3


def test_zero_flats_do_not_divide_by_zero():
    result = check_eligibility(_data(total_flats=0, residential_flats=0, participating_leaseholders=0))
    assert result.residential_percentage == 0
    assert result.participation_rate == 0
    assert not result.eligible


def test_only_inputs_the_rules_read():
    assert {f.name for f in fields(EligibilityData)} == {
        "total_flats", "residential_flats", "commercial_units", "landlord_resides",
        "average_lease_length", "participating_leaseholders", "building_age",
    }
