"""Tests for utils/studio_context.py - studio scoping via contextvars."""

from uuid import uuid4

import pytest

from utils.studio_context import (
    get_current_studio_id,
    set_current_studio_id,
    clear_current_studio_id,
    studio_context,
)


class TestGetCurrentStudioId:

    def test_raises_without_set(self):
        with pytest.raises(RuntimeError, match="No studio context"):
            get_current_studio_id()

    def test_set_then_get(self):
        studio_id = uuid4()
        set_current_studio_id(studio_id)
        assert get_current_studio_id() == studio_id

    def test_clear_then_get_raises(self):
        set_current_studio_id(uuid4())
        clear_current_studio_id()
        with pytest.raises(RuntimeError):
            get_current_studio_id()


class TestStudioContextManager:

    def test_sets_and_clears(self):
        studio_id = uuid4()

        with studio_context(studio_id):
            assert get_current_studio_id() == studio_id

        with pytest.raises(RuntimeError):
            get_current_studio_id()

    def test_restores_outer_studio(self):
        outer, inner = uuid4(), uuid4()

        with studio_context(outer):
            with studio_context(inner):
                assert get_current_studio_id() == inner
            assert get_current_studio_id() == outer

    def test_clears_on_exception(self):
        with pytest.raises(ZeroDivisionError):
            with studio_context(uuid4()):
                1 / 0

        with pytest.raises(RuntimeError):
            get_current_studio_id()
