"""Tests for modifier enums and processor dispatch tables."""

import pytest

from query_analyzer.gazetteer import StaticGazetteer
from query_analyzer.modifiers import (
    LocationModifier,
    QuantityModifier,
    TimeModifier,
    check_handlers,
    parse_modifier,
)
from query_analyzer.processors import WhatProcessor, WhenProcessor, WhereProcessor


class TestParseModifier:
    """Tests for tag to enum conversion."""

    def test_known_tag(self):
        """Canonical tags convert to members."""
        assert parse_modifier(TimeModifier, "since") is TimeModifier.SINCE

    def test_case_insensitive(self):
        """Tags are compared lowercase."""
        assert parse_modifier(QuantityModifier, "WITHOUT") is QuantityModifier.WITHOUT

    @pytest.mark.parametrize("tag", [None, "", "sometimes"])
    def test_unknown_tag(self, tag):
        """Missing and unknown tags give None."""
        assert parse_modifier(TimeModifier, tag) is None


class TestCheckHandlers:
    """Tests for dispatch table exhaustiveness."""

    def test_missing_member(self):
        """A table missing a member is rejected."""
        with pytest.raises(TypeError, match="No handler for QuantityModifier members"):
            check_handlers(QuantityModifier, {QuantityModifier.WITH: print})

    def test_complete_table(self):
        """A complete table passes."""
        check_handlers(LocationModifier, {LocationModifier.IN: print})

    def test_processors_cover_their_enums(self, make_manager, now):
        """Every processor handles every member of its modifier enum."""
        manager = make_manager("forest")
        processors = [
            WhatProcessor(manager),
            WhenProcessor(manager, now),
            WhereProcessor(manager, StaticGazetteer()),
        ]
        for processor in processors:
            assert set(processor.handlers()) == set(processor.modifier_enum)

    def test_unknown_tag_not_dispatched(self, make_manager):
        """A tag outside the enum is ignored by the processor."""
        processor = WhatProcessor(make_manager("forest"))
        assert processor.process_modifier("sometimes", 0) is False
        assert processor.process_modifier(None, 0) is False
