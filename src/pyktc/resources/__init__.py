"""Resource descriptions plugged into the generic sync core."""

from pyktc.resources._base import Resource, Route, unique_id
from pyktc.resources.stations import StationsResource
from pyktc.resources.users import UsersResource
from pyktc.resources.washing_bay import WashingBayResource

__all__ = [
    "Resource",
    "Route",
    "StationsResource",
    "UsersResource",
    "WashingBayResource",
    "unique_id",
]
