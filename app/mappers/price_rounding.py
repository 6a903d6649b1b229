import math

ROUNDING_STEP = 50


def round_down(amount: float, step: int = ROUNDING_STEP) -> int:
    """Snap an amount down to the price grid, always in the customer's favour."""
    return math.floor(amount / step) * step
