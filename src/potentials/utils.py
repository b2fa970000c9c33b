import math

TWO_PI = 2.0 * math.pi


def nearest_index(value: float) -> int:
    """Round a fractional grid coordinate to the nearest node index (halves round up)."""
    return int(math.floor(value + 0.5))
