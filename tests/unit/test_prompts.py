import pytest

from prompts import get_prompt_path, load_prompt


def test_prompt_files_exist():
    for prompt_id in ["brand_name_system", "brand_name_user", "enhance_system"]:
        assert get_prompt_path(prompt_id).exists()


def test_system_prompt_describes_record_format():
    prompt = load_prompt("brand_name_system", max_names=40)

    assert "Name:" in prompt
    assert "Pronounced:" in prompt
    assert "Why:" in prompt
    assert not prompt.startswith("---")


def test_user_prompt_requires_idea():
    with pytest.raises(ValueError, match="idea"):
        load_prompt("brand_name_user", count=5)


def test_user_prompt_lists_avoided_names():
    prompt = load_prompt("brand_name_user", idea="a bakery", count=3, avoid_names=["Crumb", "Loaf"])

    assert "EXACTLY 3 business names for: a bakery" in prompt
    assert "Crumb, Loaf" in prompt


def test_missing_prompt_raises():
    with pytest.raises(FileNotFoundError):
        load_prompt("does_not_exist")
