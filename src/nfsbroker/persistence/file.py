"""
File-backed store.

Holds all state in memory and writes it as a single JSON document on an
explicit save. Suitable for a single broker process with a local state
file. Create and delete never save implicitly; the caller decides when
state is made durable.
"""

from __future__ import annotations

import copy
import json
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nfsbroker.errors import BindingNotFoundError, InstanceNotFoundError, SerializationError
from nfsbroker.logging import store_logger
from nfsbroker.models import BindDetails, ServiceInstance
from nfsbroker.persistence.redaction import ParameterHasher, redact_binding_details
from nfsbroker.persistence.store import Store

INSTANCE_MAP_KEY = "InstanceMap"
BINDING_MAP_KEY = "BindingMap"

DEFAULT_FILE_MODE = 0o600


def _records(data: dict[str, Any], key: str) -> dict[str, dict[str, Any]]:
    records = data.get(key)
    if records is None:
        return {}
    if not isinstance(records, dict) or not all(isinstance(v, dict) for v in records.values()):
        raise SerializationError(f"state document has a malformed {key}")
    return records


@dataclass
class DynamicState:
    """
    All broker state, serialized and restored as one unit.

    Attributes:
        instance_map: Instance ID to service instance
        binding_map: Binding ID to redacted binding
    """

    instance_map: dict[str, ServiceInstance] = field(default_factory=dict)
    binding_map: dict[str, BindDetails] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert state to the persisted document."""
        return {
            INSTANCE_MAP_KEY: {k: v.to_dict() for k, v in self.instance_map.items()},
            BINDING_MAP_KEY: {k: v.to_dict() for k, v in self.binding_map.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> DynamicState:
        """Create state from a persisted document.

        Missing or null maps become empty maps.

        Raises:
            SerializationError: If the document is not a state object
        """
        if not isinstance(data, dict):
            raise SerializationError("state document is not a JSON object")
        return cls(
            instance_map={k: ServiceInstance.from_dict(v) for k, v in _records(data, INSTANCE_MAP_KEY).items()},
            binding_map={k: BindDetails.from_dict(v) for k, v in _records(data, BINDING_MAP_KEY).items()},
        )


class FileStore(Store):
    """
    File-backed implementation of Store.

    Every operation holds one store-wide lock, so concurrent requests in
    the same process never mutate the maps at the same time.
    """

    def __init__(
        self,
        file_name: str | Path,
        file_mode: int = DEFAULT_FILE_MODE,
        hasher: ParameterHasher | None = None,
    ) -> None:
        """
        Initialize the store with empty state.

        Args:
            file_name: Path of the JSON state file
            file_mode: Permission bits used when the file is created
            hasher: Parameter hasher for binding redaction
        """
        super().__init__(hasher)
        self.file_name = str(file_name)
        self.file_mode = file_mode
        self._state = DynamicState()
        self._lock = threading.Lock()

    # ========== Durability ==========

    def restore(self, logger: Any = None) -> None:
        """Replace in-memory state with the contents of the state file."""
        log = store_logger("restore-state", logger)
        log.info("start")
        try:
            with self._lock:
                try:
                    service_data = Path(self.file_name).read_bytes()
                except OSError as e:
                    log.error("failed-to-read-state-file", state_file=self.file_name, error=str(e))
                    raise

                try:
                    state = DynamicState.from_dict(json.loads(service_data))
                except ValueError as e:
                    log.error("failed-to-unmarshal-state", state_file=self.file_name, error=str(e))
                    raise SerializationError(f"malformed state file: {self.file_name}", cause=e) from e
                except SerializationError as e:
                    log.error("failed-to-unmarshal-state", state_file=self.file_name, error=str(e))
                    raise

                self._state = state
            log.info("state-restored", state_file=self.file_name)
        finally:
            log.info("end")

    def save(self, logger: Any = None) -> None:
        """Overwrite the state file with the in-memory state."""
        log = store_logger("serialize-state", logger)
        log.info("start")
        try:
            with self._lock:
                try:
                    state_data = json.dumps(self._state.to_dict()).encode("utf-8")
                except (TypeError, ValueError) as e:
                    log.error("failed-to-marshal-state", error=str(e))
                    raise SerializationError("failed to serialize state", cause=e) from e

                try:
                    fd = os.open(self.file_name, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode)
                    with os.fdopen(fd, "wb") as f:
                        f.write(state_data)
                except OSError as e:
                    log.error("failed-to-write-state-file", state_file=self.file_name, error=str(e))
                    raise
            log.info("state-saved", state_file=self.file_name)
        finally:
            log.info("end")

    def cleanup(self) -> None:
        """Nothing to release."""
        return None

    # ========== Instance Operations ==========

    def retrieve_instance_details(self, instance_id: str) -> ServiceInstance:
        """Retrieve a service instance by ID."""
        with self._lock:
            if instance_id not in self._state.instance_map:
                raise InstanceNotFoundError(instance_id)
            return copy.deepcopy(self._state.instance_map[instance_id])

    def create_instance_details(self, instance_id: str, details: ServiceInstance) -> None:
        """Store a service instance."""
        with self._lock:
            self._state.instance_map[instance_id] = copy.deepcopy(details)

    def delete_instance_details(self, instance_id: str) -> None:
        """Delete a service instance."""
        with self._lock:
            if instance_id not in self._state.instance_map:
                raise InstanceNotFoundError(instance_id)
            del self._state.instance_map[instance_id]

    # ========== Binding Operations ==========

    def retrieve_binding_details(self, binding_id: str) -> BindDetails:
        """Retrieve a binding by ID."""
        with self._lock:
            if binding_id not in self._state.binding_map:
                raise BindingNotFoundError(binding_id)
            return copy.deepcopy(self._state.binding_map[binding_id])

    def create_binding_details(self, binding_id: str, details: BindDetails) -> None:
        """Redact and store a binding."""
        # bcrypt runs outside the lock
        redacted = redact_binding_details(details, self.hasher)
        with self._lock:
            self._state.binding_map[binding_id] = redacted

    def delete_binding_details(self, binding_id: str) -> None:
        """Delete a binding."""
        with self._lock:
            if binding_id not in self._state.binding_map:
                raise BindingNotFoundError(binding_id)
            del self._state.binding_map[binding_id]
