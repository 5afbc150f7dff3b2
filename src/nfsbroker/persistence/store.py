"""
Store interface.

This module defines the abstract interface for broker state persistence.
All storage backends must implement this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from nfsbroker.errors import NotFoundError
from nfsbroker.logging import get_logger, log_context
from nfsbroker.models import BindDetails, ServiceInstance
from nfsbroker.persistence.conflict import binding_conflicts, instance_conflicts
from nfsbroker.persistence.redaction import ParameterHasher

logger = get_logger(__name__)


class Store(ABC):
    """Abstract interface for service instance and binding persistence."""

    def __init__(self, hasher: ParameterHasher | None = None) -> None:
        self.hasher = hasher or ParameterHasher()

    # ========== Instance Operations ==========

    @abstractmethod
    def retrieve_instance_details(self, instance_id: str) -> ServiceInstance:
        """
        Retrieve a service instance by ID.

        Args:
            instance_id: The instance ID

        Returns:
            A copy of the stored instance

        Raises:
            InstanceNotFoundError: If not found
        """
        pass

    @abstractmethod
    def create_instance_details(self, instance_id: str, details: ServiceInstance) -> None:
        """
        Store a service instance, overwriting any existing record.

        Args:
            instance_id: The instance ID
            details: The instance to store
        """
        pass

    @abstractmethod
    def delete_instance_details(self, instance_id: str) -> None:
        """
        Delete a service instance.

        Args:
            instance_id: The instance ID

        Raises:
            InstanceNotFoundError: If not found
        """
        pass

    # ========== Binding Operations ==========

    @abstractmethod
    def retrieve_binding_details(self, binding_id: str) -> BindDetails:
        """
        Retrieve a binding by ID.

        Parameters are returned in their persisted (hashed) form.

        Args:
            binding_id: The binding ID

        Returns:
            A copy of the stored binding

        Raises:
            BindingNotFoundError: If not found
        """
        pass

    @abstractmethod
    def create_binding_details(self, binding_id: str, details: BindDetails) -> None:
        """
        Redact and store a binding, overwriting any existing record.

        Args:
            binding_id: The binding ID
            details: The binding request, parameters in plaintext

        Raises:
            SerializationError: If the parameters cannot be serialized
            RedactionError: If the parameters cannot be hashed
        """
        pass

    @abstractmethod
    def delete_binding_details(self, binding_id: str) -> None:
        """
        Delete a binding.

        Args:
            binding_id: The binding ID

        Raises:
            BindingNotFoundError: If not found
        """
        pass

    # ========== Conflict Detection ==========

    def is_instance_conflict(self, instance_id: str, details: ServiceInstance) -> bool:
        """
        Check a provision request against the stored instance.

        Returns:
            True if an instance exists under this ID with different content
        """
        with log_context(instance_id=instance_id):
            try:
                existing = self.retrieve_instance_details(instance_id)
            except NotFoundError:
                return False
            conflict = instance_conflicts(existing, details)
            if conflict:
                logger.info("instance-conflict")
        return conflict

    def is_binding_conflict(self, binding_id: str, details: BindDetails) -> bool:
        """
        Check a bind request against the stored binding.

        Returns:
            True if a binding exists under this ID and the request differs
            from it, including parameters that do not match the stored hash
        """
        with log_context(binding_id=binding_id):
            try:
                existing = self.retrieve_binding_details(binding_id)
            except NotFoundError:
                return False
            conflict = binding_conflicts(existing, details, self.hasher)
            if conflict:
                logger.info("binding-conflict")
        return conflict

    # ========== Durability ==========

    @abstractmethod
    def restore(self, logger: Any = None) -> None:
        """
        Load state from durable storage.

        Args:
            logger: Optional structured logger to bind the session to
        """
        pass

    @abstractmethod
    def save(self, logger: Any = None) -> None:
        """
        Persist state to durable storage.

        Args:
            logger: Optional structured logger to bind the session to
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Backend-specific teardown. Never fails."""
        pass

    # ========== Optional Methods ==========

    def is_healthy(self) -> bool:
        """
        Check if the store is healthy.

        Returns:
            True if healthy
        """
        return True

    def close(self) -> None:
        """Release connections held by the store."""
        return None
