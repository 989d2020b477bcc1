from courier_ops.core.lifecycle import (
    ALL_LIFECYCLE_STATES,
    STATUS_PRESENTATION,
    UNCLASSIFIED_LABEL,
    UNCLASSIFIED_STYLE,
    get_status_config,
    get_status_label,
    is_known_state,
)


def test_taxonomy_is_closed_and_unique():
    assert len(ALL_LIFECYCLE_STATES) == 28
    assert len(set(ALL_LIFECYCLE_STATES)) == 28
    assert set(STATUS_PRESENTATION) == set(ALL_LIFECYCLE_STATES)


def test_known_state_presentation():
    assert get_status_config("DELIVERED_SUCCESS") == ("DELIVERED", "emerald")
    assert get_status_label("OUT_FOR_DELIVERY") == "OUT FOR DELIVERY"
    assert is_known_state("ISSUE")


def test_legacy_pickup_spelling_renders_like_current_one():
    assert get_status_config("PICKUP_COMPLETED") == get_status_config("PICKUP_COMPLETE")


def test_unknown_state_fails_soft():
    """Unknown values get the generic label, never an exception"""
    assert get_status_config("TELEPORTED") == (UNCLASSIFIED_LABEL, UNCLASSIFIED_STYLE)
    assert get_status_config(None) == (UNCLASSIFIED_LABEL, UNCLASSIFIED_STYLE)
    assert not is_known_state("TELEPORTED")
