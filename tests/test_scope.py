import pytest

from promptkit import Module, derive_meta


def _module(text: str, category: str = "cinematography") -> Module:
    return Module(id="m", category=category, label="M", prompt_text=text)


def test_requirements_follow_literal_markers():
    meta = derive_meta(_module("Use the CHARACTER REFERENCE IMAGE with the PRODUCT REFERENCE IMAGE."))
    assert meta.requires.character is True
    assert meta.requires.product is True
    assert meta.requires.environment is False
    assert meta.requires.required_slots() == ("character", "product")


def test_markers_are_case_sensitive():
    meta = derive_meta(_module("use the character reference image"))
    assert meta.requires.character is False


@pytest.mark.parametrize(
    ("text", "category", "expected"),
    [
        ("Hands only, tight crop.", "anatomy_pose", "hands_only"),
        ("HANDS ONLY with the ENVIRONMENT REFERENCE IMAGE", "cinematography", "hands_only"),
        ("Rebuild the ENVIRONMENT REFERENCE IMAGE", "cinematography", "environment_only"),
        (
            "CHARACTER REFERENCE IMAGE inside the ENVIRONMENT REFERENCE IMAGE",
            "cinematography",
            "full_body",
        ),
        ("ENVIRONMENT REFERENCE IMAGE behind the face", "facial_pose", "environment_only"),
        ("Six moods", "facial_pose", "face_only"),
        ("An Extreme Facial Close-Up of the subject", "product", "face_only"),
        ("Wide establishing shot", "apparel_textile", "full_body"),
        ("", "anatomy_pose", "full_body"),
    ],
)
def test_scope_resolution_order(text, category, expected):
    assert derive_meta(_module(text, category)).scope == expected


def test_meta_carries_category():
    assert derive_meta(_module("x", "product")).category == "product"


def test_unknown_slot_lookup_raises():
    meta = derive_meta(_module("x"))
    with pytest.raises(ValueError):
        meta.requires.requires("lighting")
