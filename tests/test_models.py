"""Tests for the persisted record models."""

import pytest

from nfsbroker.errors import SerializationError
from nfsbroker.models import BindDetails, BindResource, ServiceInstance, bind_resources_match


class TestServiceInstance:
    def test_matches_all_fields(self, instance: ServiceInstance) -> None:
        assert instance.matches(ServiceInstance(**instance.to_dict()))
        assert not instance.matches(ServiceInstance(share=instance.share))

    def test_from_dict_fills_missing_fields(self) -> None:
        restored = ServiceInstance.from_dict({"share": "server:/some-share", "plan_id": None})

        assert restored == ServiceInstance(share="server:/some-share")

    def test_to_dict_has_every_field(self, instance: ServiceInstance) -> None:
        assert set(instance.to_dict()) == {"share", "service_id", "plan_id", "organization_guid", "space_guid"}


class TestBindResource:
    def test_to_dict_omits_unset_fields(self) -> None:
        assert BindResource(app_guid="app_123").to_dict() == {"app_guid": "app_123"}

    def test_matches(self) -> None:
        resource = BindResource(app_guid="app_123", route="route", credential_client_id="client")

        assert resource.matches(BindResource(app_guid="app_123", route="route", credential_client_id="client"))
        assert not resource.matches(BindResource(app_guid="app_123", route="route"))

    def test_optional_resources(self) -> None:
        resource = BindResource(app_guid="app_123")

        assert bind_resources_match(None, None) is True
        assert bind_resources_match(resource, None) is False
        assert bind_resources_match(None, resource) is False
        assert bind_resources_match(resource, BindResource(app_guid="app_123")) is True


class TestBindDetails:
    def test_to_dict(self, binding: BindDetails) -> None:
        assert binding.to_dict() == {
            "app_guid": "app_123",
            "plan_id": "plan_123",
            "service_id": "service_123",
            "bind_resource": {"app_guid": "app_123", "route": "binding-route"},
            "parameters": {"uid": "1000", "gid": "1000", "secret": "don't tell"},
        }

    def test_to_dict_omits_absent_resource_and_parameters(self) -> None:
        data = BindDetails(app_guid="app_123", parameters={}).to_dict()

        assert data == {"app_guid": "app_123", "plan_id": "", "service_id": ""}

    def test_from_dict(self, binding: BindDetails) -> None:
        assert BindDetails.from_dict(binding.to_dict()) == binding

    @pytest.mark.parametrize(
        "data",
        [
            {"app_guid": "app_123", "bind_resource": "oops"},
            {"app_guid": "app_123", "bind_resource": ["app_123"]},
            {"app_guid": "app_123", "parameters": "oops"},
            {"app_guid": "app_123", "parameters": ["uid", "1000"]},
        ],
    )
    def test_from_dict_rejects_non_object_fields(self, data: dict) -> None:
        with pytest.raises(SerializationError, match="not a JSON object"):
            BindDetails.from_dict(data)

    def test_from_dict_empty_parameters_are_absent(self) -> None:
        restored = BindDetails.from_dict({"app_guid": "app_123", "parameters": {}})

        assert restored.parameters is None
        assert restored.bind_resource is None
        assert restored.has_parameters is False
