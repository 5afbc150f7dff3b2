"""Tests for the error hierarchy and error classification."""

from __future__ import annotations

import json
import sqlite3

import pytest

from nfsbroker.error_codes import ErrorCode, classify_error, error_chain, find_in_chain
from nfsbroker.errors import (
    BindingNotFoundError,
    BrokerBaseException,
    BrokerError,
    ConfigurationError,
    InstanceNotFoundError,
    NotFoundError,
    RedactionError,
    SerializationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (BrokerError("failed"), 100),
            (ConfigurationError("bad config"), 104),
            (NotFoundError("id"), 200),
            (InstanceNotFoundError("id"), 201),
            (BindingNotFoundError("id"), 202),
            (SerializationError("bad json"), 210),
            (RedactionError("bad hash"), 211),
        ],
    )
    def test_codes(self, error: BrokerBaseException, code: int) -> None:
        assert error.code == code
        assert isinstance(error, BrokerError)

    def test_not_found_message(self) -> None:
        error = InstanceNotFoundError("instance_123")

        assert error.record_id == "instance_123"
        assert str(error) == "service instance instance_123 not found (code=201)"

    def test_binding_not_found_is_a_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            raise BindingNotFoundError("binding_123")

    def test_str_includes_cause(self) -> None:
        error = SerializationError("failed to decode stored record", cause=ValueError("Expecting value"))

        assert str(error) == "failed to decode stored record (code=210) caused by: Expecting value"

    def test_explicit_error_code_overrides_default(self) -> None:
        error = BrokerError("disk gone", error_code=ErrorCode.STORAGE_ERROR)

        assert error.error_code == ErrorCode.STORAGE_ERROR


class TestClassifyError:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (InstanceNotFoundError("id"), ErrorCode.NOT_FOUND),
            (BindingNotFoundError("id"), ErrorCode.NOT_FOUND),
            (SerializationError("bad"), ErrorCode.SERIALIZATION_FAILED),
            (RedactionError("bad"), ErrorCode.REDACTION_FAILED),
            (ConfigurationError("bad"), ErrorCode.CONFIGURATION_INVALID),
            (BrokerError("bad"), ErrorCode.SYSTEM_ERROR),
            (json.JSONDecodeError("Expecting value", "{", 1), ErrorCode.SERIALIZATION_FAILED),
            (FileNotFoundError("state.json"), ErrorCode.STORAGE_ERROR),
            (sqlite3.OperationalError("database is locked"), ErrorCode.STORAGE_ERROR),
            (RuntimeError("boom"), ErrorCode.UNKNOWN),
        ],
    )
    def test_classification(self, error: Exception, expected: ErrorCode) -> None:
        assert classify_error(error) == expected

    def test_own_type_wins_over_cause(self) -> None:
        error = SerializationError("malformed state file")
        error.__cause__ = FileNotFoundError("state.json")

        assert classify_error(error) == ErrorCode.SERIALIZATION_FAILED

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.NOT_FOUND, 404),
            (ErrorCode.STORAGE_ERROR, 503),
            (ErrorCode.SERIALIZATION_FAILED, 500),
            (ErrorCode.UNKNOWN, 500),
        ],
    )
    def test_http_status(self, code: ErrorCode, status: int) -> None:
        assert code.http_status == status

    def test_classified_through_cause_chain(self) -> None:
        try:
            try:
                raise InstanceNotFoundError("instance_123")
            except InstanceNotFoundError as e:
                raise RuntimeError("request failed") from e
        except RuntimeError as e:
            assert classify_error(e) == ErrorCode.NOT_FOUND


class TestErrorChain:
    def test_root_first(self) -> None:
        root = ValueError("root")
        middle = SerializationError("middle", cause=root)
        middle.__cause__ = root
        leaf = RuntimeError("leaf")
        leaf.__cause__ = middle

        assert error_chain(leaf) == [root, middle, leaf]

    def test_single_error(self) -> None:
        error = RuntimeError("alone")

        assert error_chain(error) == [error]

    def test_find_in_chain(self) -> None:
        root = FileNotFoundError("state.json")
        leaf = RuntimeError("restore failed")
        leaf.__cause__ = root

        assert find_in_chain(leaf, OSError) is root
        assert find_in_chain(leaf, SerializationError) is None
