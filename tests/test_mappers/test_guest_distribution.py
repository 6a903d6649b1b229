"""Tests for splitting guests across selected units."""

import pytest

from app.mappers.guest_distribution import distribute_guests

CAPACITIES = {1: 8, 2: 4}


def test_proportional_share_by_capacity():
    assert distribute_guests(10, CAPACITIES, target_unit_id=1) == 7  # ceil(10*8/12)
    assert distribute_guests(10, CAPACITIES, target_unit_id=2) == 4  # ceil(10*4/12)


def test_share_capped_at_unit_capacity():
    assert distribute_guests(20, CAPACITIES, target_unit_id=2) == 4
    assert distribute_guests(20, CAPACITIES, target_unit_id=1) == 8


def test_single_unit_gets_everyone():
    assert distribute_guests(5, {3: 6}, target_unit_id=3) == 5


def test_even_split_without_target():
    assert distribute_guests(10, CAPACITIES) == 5
    assert distribute_guests(7, {1: 6, 2: 8, 3: 4}) == 3


def test_zero_guests():
    assert distribute_guests(0, CAPACITIES, target_unit_id=1) == 0


def test_unknown_target_rejected():
    with pytest.raises(ValueError):
        distribute_guests(4, CAPACITIES, target_unit_id=9)


def test_empty_selection_rejected():
    with pytest.raises(ValueError):
        distribute_guests(4, {})
