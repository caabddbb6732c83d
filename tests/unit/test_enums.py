# tests/unit/test_enums.py
import pytest

from backoffice.core.enums import (
    AdminStatus,
    AppSection,
    INITIAL_LISTING_STATUS,
    LISTING_TRANSITIONS,
    ListingStatus,
)

LEGAL_EDGES = {
    (ListingStatus.CPV, ListingStatus.ASSIGN),
    (ListingStatus.ASSIGN, ListingStatus.WORKLIST),
    (ListingStatus.WORKLIST, ListingStatus.NR),
    (ListingStatus.NR, ListingStatus.PR),
    (ListingStatus.NR, ListingStatus.NP),
    (ListingStatus.NP, ListingStatus.NR),
    (ListingStatus.PR, ListingStatus.PUBLISHED),
}


def test_every_status_has_a_transition_entry():
    assert set(LISTING_TRANSITIONS) == set(ListingStatus)


@pytest.mark.parametrize("current", list(ListingStatus))
@pytest.mark.parametrize("target", list(ListingStatus))
def test_can_transition_to_matches_pipeline(current, target):
    assert current.can_transition_to(target) == ((current, target) in LEGAL_EDGES)


def test_published_is_terminal():
    assert ListingStatus.PUBLISHED.allowed_targets == frozenset()


def test_np_to_nr_is_the_only_backward_edge():
    order = [ListingStatus.CPV, ListingStatus.ASSIGN, ListingStatus.WORKLIST, ListingStatus.NR,
             ListingStatus.PR, ListingStatus.NP, ListingStatus.PUBLISHED]
    backward = {(a, b) for a, b in LEGAL_EDGES if order.index(b) < order.index(a)}
    assert backward == {(ListingStatus.NP, ListingStatus.NR)}


def test_new_listings_start_in_cpv():
    assert INITIAL_LISTING_STATUS is ListingStatus.CPV


def test_status_values_are_stored_lowercase():
    assert [s.value for s in ListingStatus] == ["cpv", "assign", "worklist", "nr", "pr", "np", "published"]
    assert ListingStatus("nr") is ListingStatus.NR
    assert ListingStatus.NR.label == "NR"


def test_admin_status_toggle():
    assert AdminStatus.ACTIVE.toggled() is AdminStatus.FROZEN
    assert AdminStatus.FROZEN.toggled() is AdminStatus.ACTIVE


def test_sections_match_back_office_pages():
    assert len(AppSection) == 13
    assert AppSection("Deleted Listings") is AppSection.DELETED_LISTINGS
    assert AppSection("Admin Privileges") is AppSection.ADMIN_PRIVILEGES
