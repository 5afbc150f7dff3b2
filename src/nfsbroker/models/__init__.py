"""Records persisted by the broker state store."""

from nfsbroker.models.binding import BindDetails, BindResource, bind_resources_match
from nfsbroker.models.instance import ServiceInstance

__all__ = [
    "BindDetails",
    "BindResource",
    "ServiceInstance",
    "bind_resources_match",
]
