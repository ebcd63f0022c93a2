"""
Tests for ordered enums.
"""

import pytest

from narrative_engine.core.enums import AcceptanceLevel, QualityLevel, StandardTier


@pytest.mark.parametrize("enum_class", [StandardTier, QualityLevel, AcceptanceLevel])
def test_rank_follows_declaration_order(enum_class):
    assert [member.rank for member in enum_class] == list(range(len(enum_class)))


def test_comparisons():
    assert StandardTier.STUDENT < StandardTier.AWARD_WINNING
    assert QualityLevel.MASTERPIECE >= QualityLevel.PROFESSIONAL
    assert max(AcceptanceLevel) == list(AcceptanceLevel)[-1]
    assert sorted([QualityLevel.EXCEPTIONAL, QualityLevel.AMATEUR]) == [QualityLevel.AMATEUR, QualityLevel.EXCEPTIONAL]


def test_mixed_types_do_not_compare():
    with pytest.raises(TypeError):
        StandardTier.STUDENT < QualityLevel.AMATEUR
