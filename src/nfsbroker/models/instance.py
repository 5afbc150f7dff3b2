"""
Service instance model.

A service instance is one provisioned NFS share. The instance id is the
storage key and is not repeated inside the record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ServiceInstance:
    """
    A provisioned service.

    Attributes:
        share: Remote filesystem location, e.g. "nfs-server:/export/vol1"
        service_id: Catalog service ID the instance was provisioned from
        plan_id: Catalog plan ID
        organization_guid: Owning organization
        space_guid: Owning space
    """

    share: str = ""
    service_id: str = ""
    plan_id: str = ""
    organization_guid: str = ""
    space_guid: str = ""

    def matches(self, other: ServiceInstance) -> bool:
        """Compare every field of two instances."""
        return (
            self.share == other.share
            and self.service_id == other.service_id
            and self.plan_id == other.plan_id
            and self.organization_guid == other.organization_guid
            and self.space_guid == other.space_guid
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert instance to dictionary for storage."""
        return {
            "share": self.share,
            "service_id": self.service_id,
            "plan_id": self.plan_id,
            "organization_guid": self.organization_guid,
            "space_guid": self.space_guid,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceInstance:
        """Create instance from dictionary."""
        return cls(
            share=data.get("share") or "",
            service_id=data.get("service_id") or "",
            plan_id=data.get("plan_id") or "",
            organization_guid=data.get("organization_guid") or "",
            space_guid=data.get("space_guid") or "",
        )
