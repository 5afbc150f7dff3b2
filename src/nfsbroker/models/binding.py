"""
Service binding model.

A binding is a credential issued against a service instance for one
application. Its parameters are supplied by the caller on bind and are
replaced by a one-way hash before the binding is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nfsbroker.errors import SerializationError


@dataclass
class BindResource:
    """
    Resource the binding is issued for.

    Attributes:
        app_guid: Application being bound
        route: Route being bound (route services)
        credential_client_id: Client ID for credential bindings
    """

    app_guid: str | None = None
    route: str | None = None
    credential_client_id: str | None = None

    def matches(self, other: BindResource) -> bool:
        """Compare every field of two bind resources."""
        return (
            self.app_guid == other.app_guid
            and self.route == other.route
            and self.credential_client_id == other.credential_client_id
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert bind resource to dictionary, omitting unset fields."""
        data: dict[str, Any] = {}
        if self.app_guid is not None:
            data["app_guid"] = self.app_guid
        if self.route is not None:
            data["route"] = self.route
        if self.credential_client_id is not None:
            data["credential_client_id"] = self.credential_client_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BindResource:
        """Create bind resource from dictionary."""
        return cls(
            app_guid=data.get("app_guid"),
            route=data.get("route"),
            credential_client_id=data.get("credential_client_id"),
        )


def bind_resources_match(a: BindResource | None, b: BindResource | None) -> bool:
    """Compare two optional bind resources.

    Two absent resources match; an absent and a present one never do.
    """
    if a is None or b is None:
        return a is None and b is None
    return a.matches(b)


@dataclass
class BindDetails:
    """
    A binding request, or its persisted form.

    Attributes:
        app_guid: Application the binding belongs to
        plan_id: Catalog plan ID
        service_id: Catalog service ID
        bind_resource: Optional resource details
        parameters: Arbitrary caller parameters. Once persisted this holds
            only the parameter hash (see nfsbroker.persistence.redaction).
    """

    app_guid: str = ""
    plan_id: str = ""
    service_id: str = ""
    bind_resource: BindResource | None = None
    parameters: dict[str, Any] | None = None

    @property
    def has_parameters(self) -> bool:
        """True if the binding carries a non-empty parameters mapping."""
        return bool(self.parameters)

    def to_dict(self) -> dict[str, Any]:
        """Convert binding to dictionary for storage."""
        data: dict[str, Any] = {
            "app_guid": self.app_guid,
            "plan_id": self.plan_id,
            "service_id": self.service_id,
        }
        if self.bind_resource is not None:
            data["bind_resource"] = self.bind_resource.to_dict()
        if self.parameters:
            data["parameters"] = self.parameters
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BindDetails:
        """Create binding from dictionary.

        Raises:
            SerializationError: If bind_resource or parameters is present
                but not a JSON object
        """
        resource = _optional_object(data, "bind_resource")
        return cls(
            app_guid=data.get("app_guid") or "",
            plan_id=data.get("plan_id") or "",
            service_id=data.get("service_id") or "",
            bind_resource=BindResource.from_dict(resource) if resource is not None else None,
            parameters=_optional_object(data, "parameters") or None,
        )


def _optional_object(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise SerializationError(f"binding {key} is not a JSON object")
    return value
