"""Unit tests for smart_workflow.utils.ids"""

from __future__ import annotations

import re

import pytest

from smart_workflow.utils.ids import generate_id, to_base36


class TestToBase36:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, "0"), (9, "9"), (10, "a"), (35, "z"), (36, "10"), (1295, "zz")],
    )
    def test_values(self, value, expected):
        assert to_base36(value) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)


class TestGenerateId:
    def test_shape(self):
        assert re.fullmatch(r"tsk_[0-9a-z]+", generate_id("tsk"))

    def test_trailing_underscore_tolerated(self):
        assert generate_id("usr_").startswith("usr_")
        assert "__" not in generate_id("usr_")

    def test_random_suffix_length(self):
        a = generate_id("prj", random_length=4)
        b = generate_id("prj", random_length=12)
        assert len(b) - len(a) == 8

    def test_unique(self):
        assert len({generate_id("not") for _ in range(200)}) == 200

    def test_empty_prefix_rejected(self):
        with pytest.raises(ValueError):
            generate_id("")
