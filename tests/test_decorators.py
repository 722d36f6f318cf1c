"""
Tests for protected-call boundaries.
"""
from unittest.mock import MagicMock

import pytest

from handlebridge.handles import TypeMismatchError, UseAfterFreeError
from handlebridge.utils import protected, protected_call


class TestProtected:
    """Test protected decorator."""

    def test_handle_error_returns_none(self):
        """HandleError is caught and None is returned by default."""
        mock_logger = MagicMock()

        @protected(mock_logger, "draw failed")
        def draw():
            raise UseAfterFreeError("bitmap")

        assert draw() is None
        mock_logger.error.assert_called_once()
        assert "draw failed" in mock_logger.error.call_args[0][0]
        assert "bitmap" in mock_logger.error.call_args[0][0]

    def test_custom_return_value(self):
        mock_logger = MagicMock()

        @protected(mock_logger, "lookup failed", return_value=-1)
        def lookup():
            raise TypeMismatchError("display", "bitmap")

        assert lookup() == -1

    def test_custom_log_level(self):
        mock_logger = MagicMock()

        @protected(mock_logger, "draw failed", log_level="warning")
        def draw():
            raise UseAfterFreeError("bitmap")

        draw()
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_not_called()

    def test_other_exceptions_propagate(self):
        """Only handle misuse is recoverable here; real bugs still raise."""
        mock_logger = MagicMock()

        @protected(mock_logger)
        def broken():
            raise ValueError("not a handle problem")

        with pytest.raises(ValueError):
            broken()
        mock_logger.error.assert_not_called()

    def test_normal_return_preserved(self):
        mock_logger = MagicMock()

        @protected(mock_logger)
        def working(a, b=2):
            return a + b

        assert working(1, b=3) == 4
        assert working.__name__ == "working"
        mock_logger.error.assert_not_called()


class TestProtectedCall:
    """pcall-style wrapper."""

    def test_success(self):
        assert protected_call(lambda x: x * 2, 21) == (True, 42)

    def test_use_after_free_reported(self, bridge, kinds, heap):
        handle = bridge.wrap(heap.alloc(), kinds.get("bitmap"), owns=True)
        bridge.destroy(handle)
        ok, error = protected_call(bridge.unwrap, handle, kinds.get("bitmap"))
        assert ok is False
        assert isinstance(error, UseAfterFreeError)
        assert error.kind_name == "bitmap"

    def test_wrong_kind_reported(self, bridge, kinds, heap):
        handle = bridge.wrap(heap.alloc(), kinds.get("display"), owns=True)
        ok, error = protected_call(bridge.unwrap, handle, kinds.get("bitmap"))
        assert ok is False
        assert isinstance(error, TypeMismatchError)
        assert str(error) == "bitmap expected, got display"

    def test_other_exceptions_propagate(self):
        def broken():
            raise KeyError("x")

        with pytest.raises(KeyError):
            protected_call(broken)
