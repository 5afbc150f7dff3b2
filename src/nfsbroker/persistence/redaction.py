"""
Binding parameter redaction.

Binding parameters can carry secrets (uids, passwords, mount options), so
they are never persisted in plaintext. Before a binding is stored its
parameters are replaced by a single entry under HASH_KEY holding a salted
bcrypt hash of their canonical JSON form. A later bind request is checked
against that hash, never against the plaintext.
"""

from __future__ import annotations

import base64
import copy
import hashlib
import json
from typing import Any

import bcrypt

from nfsbroker.errors import RedactionError, SerializationError
from nfsbroker.models import BindDetails

HASH_KEY = "paramsHash"

DEFAULT_HASH_ROUNDS = 10


def canonical_parameters(parameters: dict[str, Any]) -> bytes:
    """Serialize parameters to a deterministic byte sequence.

    Keys are sorted and separators compact, so two mappings with the same
    content always produce the same bytes.

    Raises:
        SerializationError: If the parameters are not JSON-serializable
    """
    try:
        text = json.dumps(
            parameters,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError("binding parameters are not JSON-serializable", cause=e) from e
    return text.encode("utf-8")


def is_redacted(parameters: dict[str, Any] | None) -> bool:
    """True if parameters already hold only the parameter hash."""
    return parameters is not None and len(parameters) == 1 and HASH_KEY in parameters


class ParameterHasher:
    """
    Salted, cost-bounded one-way hash of parameter bytes.

    bcrypt only reads the first 72 bytes of its input, so the canonical
    bytes are reduced with SHA-256 first. The bcrypt salt and work factor
    are embedded in the resulting hash string.
    """

    def __init__(self, rounds: int = DEFAULT_HASH_ROUNDS) -> None:
        self.rounds = rounds

    @staticmethod
    def _prehash(data: bytes) -> bytes:
        return base64.b64encode(hashlib.sha256(data).digest())

    def hash(self, data: bytes) -> str:
        """Hash data with a fresh salt.

        Raises:
            RedactionError: If bcrypt rejects the input or work factor
        """
        try:
            hashed = bcrypt.hashpw(self._prehash(data), bcrypt.gensalt(rounds=self.rounds))
        except ValueError as e:
            raise RedactionError("failed to hash binding parameters", cause=e) from e
        return hashed.decode("ascii")

    def verify(self, data: bytes, hashed: str) -> bool:
        """Check data against a stored hash in constant time.

        A malformed stored hash never verifies.
        """
        try:
            return bcrypt.checkpw(self._prehash(data), hashed.encode("utf-8"))
        except ValueError:
            return False


def redact_binding_details(details: BindDetails, hasher: ParameterHasher) -> BindDetails:
    """Return a copy of details with parameters replaced by their hash.

    Empty or absent parameters, and parameters that already hold only a
    hash, are passed through unchanged.

    Raises:
        SerializationError: If the parameters cannot be serialized
        RedactionError: If hashing fails
    """
    redacted = copy.deepcopy(details)
    if not details.has_parameters or is_redacted(details.parameters):
        return redacted

    assert details.parameters is not None
    data = canonical_parameters(details.parameters)
    redacted.parameters = {HASH_KEY: hasher.hash(data)}
    return redacted
