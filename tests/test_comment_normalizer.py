"""Tests for raw comment normalization and the per-entry drop policy."""

from __future__ import annotations

import pytest

from danmaku.domain.entities import WHITE, Comment, DisplayMode, RawCommentEntry
from danmaku.services.comment_normalizer import CommentNormalizer


@pytest.fixture
def normalizer() -> CommentNormalizer:
    return CommentNormalizer()


def test_maps_fields(normalizer) -> None:
    out = normalizer.normalize([RawCommentEntry(params="12.5,1,16777215", text="hello")])

    assert out == [Comment(text="hello", time=12.5, color=16777215, border=False, mode=DisplayMode.SCROLL)]


def test_bad_entry_is_dropped_and_rest_kept(normalizer) -> None:
    raw = [
        RawCommentEntry(params="10,1,16711680", text="ok"),
        RawCommentEntry(params="bad", text="broken"),
    ]

    out = normalizer.normalize(raw)

    assert len(out) == 1
    assert out[0].text == "ok"
    assert out[0].time == 10
    assert out[0].color == 16711680


@pytest.mark.parametrize(
    "params",
    [
        "",
        "10,1",
        "abc,1,255",
        "-1,1,255",
        "nan,1,255",
        "inf,1,255",
    ],
)
def test_drop_policy(normalizer, params) -> None:
    assert normalizer.normalize([RawCommentEntry(params=params, text="x")]) == []


def test_extra_fields_are_ignored(normalizer) -> None:
    out = normalizer.normalize([RawCommentEntry(params="3.25,5,255,1700000000,abcdef,99", text="x")])

    assert out[0].time == 3.25
    assert out[0].color == 255


def test_raw_mode_is_ignored_by_default(normalizer) -> None:
    raw = [RawCommentEntry(params=f"1,{mode},255", text="x") for mode in (1, 4, 5, 7)]

    assert {c.mode for c in normalizer.normalize(raw)} == {DisplayMode.SCROLL}


def test_honor_display_mode_maps_dandanplay_codes() -> None:
    normalizer = CommentNormalizer(honor_display_mode=True)
    raw = [RawCommentEntry(params=f"1,{mode},255", text="x") for mode in ("1", "4", "5", "9", "?")]

    modes = [c.mode for c in normalizer.normalize(raw)]

    assert modes == [
        DisplayMode.SCROLL,
        DisplayMode.BOTTOM,
        DisplayMode.TOP,
        DisplayMode.SCROLL,
        DisplayMode.SCROLL,
    ]


@pytest.mark.parametrize("color", ["", "blue", "-5", "16777216"])
def test_unusable_color_resolves_to_white(normalizer, color) -> None:
    out = normalizer.normalize([RawCommentEntry(params=f"1,1,{color}", text="x")])

    assert out[0].color == WHITE


def test_preserves_input_order_without_sorting(normalizer) -> None:
    raw = [
        RawCommentEntry(params="30,1,1", text="late"),
        RawCommentEntry(params="1,1,1", text="early"),
        RawCommentEntry(params="15,1,1", text="middle"),
    ]

    assert [c.text for c in normalizer.normalize(raw)] == ["late", "early", "middle"]


def test_empty_batch(normalizer) -> None:
    assert normalizer.normalize([]) == []


def test_css_color() -> None:
    comment = Comment(text="x", time=0.0, color=16711680, border=False, mode=DisplayMode.SCROLL)

    assert comment.css_color == "#ff0000"
