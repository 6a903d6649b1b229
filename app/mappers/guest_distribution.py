import math
from collections.abc import Mapping


def distribute_guests(
    total_guests: int,
    capacities: Mapping[int, int],
    target_unit_id: int | None = None,
) -> int:
    """Number of beds a unit gets when a party spans the selected units.

    `capacities` maps every selected unit to its bed capacity. With a target
    unit the share is proportional to its capacity, rounded up and capped at
    that capacity. Without one it is a plain even split.
    """
    if not capacities:
        raise ValueError("at least one unit must be selected")

    if target_unit_id is None:
        return math.ceil(total_guests / len(capacities))

    if target_unit_id not in capacities:
        raise ValueError(f"unit {target_unit_id} is not among the selected units")

    unit_capacity = capacities[target_unit_id]
    total_capacity = sum(capacities.values())
    share = math.ceil(total_guests * unit_capacity / total_capacity)
    return min(share, unit_capacity)
