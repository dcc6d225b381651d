import pytest

from layout import (
    PAGE_H,
    PAGE_RATIO,
    PAGE_W,
    cover_crop_box,
    gradient_strips,
    progress_percent,
    proposal_filename,
    raster_size,
    round_half_up,
    total_steps,
    view_label,
)


@pytest.mark.parametrize("src", [(4000, 1000), (1000, 4000), (1920, 1080), (297, 210), (3, 1000)])
def test_cover_crop_keeps_shorter_side_and_centres(src):
    src_w, src_h = src
    left, top, right, bottom = cover_crop_box(src_w, src_h)
    crop_w, crop_h = right - left, bottom - top

    if src_w / src_h > PAGE_RATIO:
        assert (top, bottom) == (0, src_h)
        assert abs(left - (src_w - right)) <= 1
    else:
        assert (left, right) == (0, src_w)
        assert abs(top - (src_h - bottom)) <= 1
    assert 0 <= left <= right <= src_w
    assert 0 <= top <= bottom <= src_h


def test_cover_crop_ratio_matches_page():
    left, top, right, bottom = cover_crop_box(4000, 3000)
    assert (right - left) == 4000
    assert (bottom - top) == round_half_up(4000 / PAGE_RATIO)
    assert abs((right - left) / (bottom - top) - PAGE_RATIO) < 0.001


def test_cover_crop_wide_source():
    assert cover_crop_box(3000, 1000) == (793, 0, 2207, 1000)


def test_cover_crop_rejects_empty_image():
    with pytest.raises(ValueError):
        cover_crop_box(0, 100)


def test_raster_size_follows_page_ratio():
    assert raster_size(1920) == (1920, 1358)
    w, h = raster_size(320)
    assert abs(w / h - PAGE_W / PAGE_H) < 0.01


def test_view_labels():
    assert view_label(0) == "VIEW 01"
    assert view_label(9) == "VIEW 10"
    assert view_label(10) == "VIEW 11"
    assert view_label(99) == "VIEW 100"


def test_progress_sequence_for_three_images():
    steps = total_steps(3)
    assert steps == 6
    assert [progress_percent(i, steps) for i in range(1, steps + 1)] == [17, 33, 50, 67, 83, 100]


def test_progress_rounds_half_up():
    assert progress_percent(1, 8) == 13


def test_gradient_strips_cover_bottom_band():
    strips = gradient_strips()
    assert len(strips) == 40
    alphas = [alpha for _, _, alpha in strips]
    assert alphas == sorted(alphas)
    assert alphas[0] == 0
    assert alphas[-1] < 0.7
    tops = [top for top, _, _ in strips]
    assert tops[0] == PAGE_H - 50
    last_top, last_h, _ = strips[-1]
    assert last_top + last_h >= PAGE_H


def test_proposal_filename():
    assert proposal_filename("Rahul Sharma", "Master Bedroom") == "RAHULSHARMA_MASTERBEDROOM.pdf"
    assert proposal_filename("d'Souza & Co.", "Kid's Room #2") == "DSOUZACO_KIDSROOM2.pdf"
    assert proposal_filename("Ana", "Living", ext="zip") == "ANA_LIVING.zip"


def test_progress_holds_back_100_until_last_step():
    total = total_steps(198)
    assert total == 201
    assert progress_percent(total - 1, total) == 99
    assert progress_percent(total, total) == 100
    values = [progress_percent(i, total) for i in range(1, total + 1)]
    assert values == sorted(values)
    assert values.count(100) == 1
