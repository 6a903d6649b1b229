# (minimum ratio, discount percent), evaluated high to low
OCCUPANCY_TIERS: tuple[tuple[float, int], ...] = (
    (1.0, 0),
    (0.75, 12),
    (0.50, 27),
)
MIN_OCCUPANCY_DISCOUNT = 40


def compute_discount_percent(occupied_beds: int, total_capacity: int) -> int:
    """Map occupancy (occupied beds / capacity) to a discount percentage.

    Tiers:
      - >= 100%: 0 (full price, also when overbooked)
      - >= 75%:  12
      - >= 50%:  27
      - below:   40 (including zero occupied beds)
    """
    if total_capacity <= 0:
        raise ValueError("total_capacity must be positive")

    ratio = occupied_beds / total_capacity
    for min_ratio, percent in OCCUPANCY_TIERS:
        if ratio >= min_ratio:
            return percent
    return MIN_OCCUPANCY_DISCOUNT
