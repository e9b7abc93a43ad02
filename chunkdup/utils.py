from typing import Iterable, Optional

SIZE_UNITS = ("B", "K", "M", "G", "T")


def format_size(num_bytes: int) -> str:
    """Format a byte count with a binary unit, e.g. ``1.5K``."""
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024.0 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{num_bytes}B"
    return f"{size:.1f}{SIZE_UNITS[unit_index]}"


def average(values: Iterable[int]) -> Optional[float]:
    """Arithmetic mean, or None for no values."""
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)

