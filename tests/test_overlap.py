import math

import pytest

from sewer_explorer.overlap import Bounds, Point, min_pair_distance, relax_once, resolve_overlaps

BOUNDS = Bounds(400, 300)
PADDING = 20.0


def _points(*coords):
    return [Point.at(f"n{i}", x, y) for i, (x, y) in enumerate(coords)]


def test_empty_and_single():
    assert resolve_overlaps([], 25, BOUNDS, PADDING) == []
    single = _points((5.0, 5.0))
    out = resolve_overlaps(single, 25, BOUNDS, PADDING)
    assert len(out) == 1
    assert (out[0].x, out[0].y) == (5.0, 5.0)


def test_well_separated_points_unchanged():
    pts = _points((50, 50), (100, 50), (50, 100))
    out = resolve_overlaps(pts, 25, BOUNDS, PADDING)
    assert [(p.x, p.y) for p in out] == [(50, 50), (100, 50), (50, 100)]


def test_pair_is_pushed_apart_symmetrically():
    pts = _points((100, 100), (110, 100))
    out = resolve_overlaps(pts, 25, BOUNDS, PADDING)
    assert out[0].x == pytest.approx(92.5)
    assert out[1].x == pytest.approx(117.5)
    assert out[0].y == out[1].y == 100
    assert math.hypot(out[1].x - out[0].x, out[1].y - out[0].y) == pytest.approx(25)


def test_inputs_not_mutated_and_ids_preserved():
    pts = _points((100, 100), (101, 101), (102, 100))
    out = resolve_overlaps(pts, 25, BOUNDS, PADDING)
    assert [p.id for p in out] == ["n0", "n1", "n2"]
    assert (pts[0].x, pts[0].y) == (100, 100)
    assert all((p.original_x, p.original_y) == (q.x, q.y) for p, q in zip(out, pts))


def test_bounds_hold_after_every_pass():
    pts = _points((21, 21), (22, 22), (23, 21), (21, 24), (380, 280), (379, 279))
    working = [Point.at(p.id, p.x, p.y) for p in pts]
    for _ in range(50):
        changed = relax_once(working, 25, BOUNDS, PADDING)
        for p in working:
            assert PADDING <= p.x <= BOUNDS.width - PADDING
            assert PADDING <= p.y <= BOUNDS.height - PADDING
        if not changed:
            break


def test_separation_is_non_decreasing_for_a_pair():
    working = _points((200, 150), (203, 151))
    previous = min_pair_distance(working)
    for _ in range(50):
        if not relax_once(working, 25, BOUNDS, PADDING):
            break
        current = min_pair_distance(working)
        assert current >= previous - 1e-9
        previous = current
    assert previous == pytest.approx(25)


def test_cluster_converges_within_cap():
    pts = _points((200, 150), (205, 150), (200, 155), (195, 148))
    out = resolve_overlaps(pts, 25, BOUNDS, PADDING)
    assert min_pair_distance(out) >= 25 - 0.5


def test_coincident_points_left_in_place():
    pts = _points((100, 100), (100, 100))
    out = resolve_overlaps(pts, 25, BOUNDS, PADDING)
    assert [(p.x, p.y) for p in out] == [(100, 100), (100, 100)]


def test_overcrowded_bounds_return_best_effort():
    tiny = Bounds(50, 50)
    pts = _points(*[(25 + i * 0.1, 25 + (i % 2) * 0.1) for i in range(6)])
    out = resolve_overlaps(pts, 25, tiny, 20, max_iterations=5)
    assert len(out) == 6
    for p in out:
        assert 20 <= p.x <= 30 and 20 <= p.y <= 30
