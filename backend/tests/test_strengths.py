import pytest

from flowstate.services.errors import ValidationError
from flowstate.services.strengths import build_profile, parse_strengths, upsert_strengths_config

from conftest import STRENGTHS_TEXT


def test_parse_strengths_strips_rank_markers_and_blank_lines():
    assert parse_strengths("1. Strategic\n2. Learner\n\n3. Achiever") == ["Strategic", "Learner", "Achiever"]


def test_parse_strengths_accepts_parenthesis_markers_and_drops_short_lines():
    text = "  12) Learner  \n4.\nab\n7. Focus"
    assert parse_strengths(text) == ["Learner", "Focus"]


def test_build_profile_accepts_five_strengths():
    text = "\n".join(f"{i}. Theme{i}" for i in range(1, 6))
    profile, parsed = build_profile("  Ada ", text)

    assert profile.name == "Ada"
    assert profile.top_strengths == ["Theme1", "Theme2", "Theme3", "Theme4", "Theme5"]
    assert len(parsed) == 5
    assert profile.strengths_raw_text == text


def test_build_profile_rejects_four_strengths():
    text = "\n".join(f"{i}. Theme{i}" for i in range(1, 5))
    with pytest.raises(ValidationError):
        build_profile("Ada", text)


def test_build_profile_requires_name():
    with pytest.raises(ValidationError):
        build_profile("   ", STRENGTHS_TEXT)


def test_build_profile_keeps_only_top_five_but_returns_all_parsed():
    profile, parsed = build_profile("Ada", STRENGTHS_TEXT)

    assert profile.top_strengths == ["Strategic", "Learner", "Achiever", "Ideation", "Input"]
    assert parsed[-1] == "Discipline"


def test_upsert_strengths_config_keeps_identity_of_existing_config():
    first = upsert_strengths_config(None, STRENGTHS_TEXT, ["Strategic"], now=1_000)
    second = upsert_strengths_config(first, "1. Learner\n2. Focus", ["Learner", " "], now=2_000)

    assert second.id == first.id
    assert second.created_at == 1_000
    assert second.updated_at == 2_000
    assert second.top_strengths == ["Learner"]


def test_upsert_strengths_config_rejects_empty_text():
    with pytest.raises(ValidationError):
        upsert_strengths_config(None, "   ", ["Strategic"])
