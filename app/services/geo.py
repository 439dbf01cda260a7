import math
from typing import Callable, Iterable, List, Optional, TypeVar

EARTH_RADIUS_KM = 6371

T = TypeVar("T")


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in km between two points (Haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(km: float) -> str:
    if km < 1:
        return f"{round_half_up(km * 1000)} m"
    return f"{km:.1f} km"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sort_by_distance(items: Iterable[T], key: Callable[[T], Optional[float]]) -> List[T]:
    # unknown distances go last, ties keep their original order
    return sorted(items, key=lambda item: (key(item) is None, key(item) or 0))
