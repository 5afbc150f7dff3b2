"""
Conflict detection for repeated provision and bind requests.

A repeated request is an idempotent no-op when it matches the stored
record, and a conflict when it does not. Binding parameters are compared
through their stored hash.
"""

from __future__ import annotations

from nfsbroker.errors import SerializationError
from nfsbroker.logging import get_logger
from nfsbroker.models import BindDetails, ServiceInstance, bind_resources_match
from nfsbroker.persistence.redaction import HASH_KEY, ParameterHasher, canonical_parameters

logger = get_logger(__name__)


def instance_conflicts(existing: ServiceInstance, candidate: ServiceInstance) -> bool:
    """True if the candidate differs from the stored instance in any field."""
    return not existing.matches(candidate)


def binding_conflicts(
    existing: BindDetails,
    candidate: BindDetails,
    hasher: ParameterHasher,
) -> bool:
    """Decide whether a bind request conflicts with the stored binding.

    Args:
        existing: The persisted (redacted) binding
        candidate: The incoming request, parameters in plaintext
        hasher: Hasher used when the binding was stored

    Returns:
        False for an identical repeat, True otherwise
    """
    if existing.app_guid != candidate.app_guid:
        return True
    if existing.plan_id != candidate.plan_id:
        return True
    if existing.service_id != candidate.service_id:
        return True
    if not bind_resources_match(existing.bind_resource, candidate.bind_resource):
        return True

    if not existing.has_parameters and not candidate.has_parameters:
        return False
    if not existing.has_parameters or not candidate.has_parameters:
        return True

    if not isinstance(existing.parameters, dict) or not isinstance(candidate.parameters, dict):
        logger.warning("parameters-not-a-mapping")
        return True

    stored_hash = existing.parameters.get(HASH_KEY)
    if not isinstance(stored_hash, str):
        logger.warning("stored-parameters-hash-malformed")
        return True

    try:
        data = canonical_parameters(candidate.parameters)
    except SerializationError:
        logger.warning("candidate-parameters-not-serializable")
        return True

    return not hasher.verify(data, stored_hash)
