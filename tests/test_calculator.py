import math
import os

import pytest

from ntaglib import calculator as calc


def test_sigmoid_symmetry_and_midpoint():
    assert calc.sigmoid(0) == pytest.approx(0.5)
    for x in (0.3, 2.0, 7.5):
        assert calc.sigmoid(x) + calc.sigmoid(-x) == pytest.approx(1.0)
        assert calc.sigmoid(x) > calc.sigmoid(-x)


def test_dot_and_norm_consistent():
    v = (1.5, -2.0, 3.25)
    assert calc.norm(v) ** 2 == pytest.approx(calc.dot(v, v))
    assert calc.dot((1, 0, 0), (0, 1, 0)) == 0


def test_distance_properties():
    a = (1.0, 2.0, 3.0)
    b = (-4.0, 0.5, 9.0)
    assert calc.distance(a, a) == 0
    assert calc.distance(a, b) == pytest.approx(calc.distance(b, a))
    diff = tuple(p - q for p, q in zip(a, b))
    assert calc.distance(a, b) == pytest.approx(calc.norm(diff))


def test_sum_and_mean():
    values = [2.0, 5.0, 11.0, -3.0]
    assert calc.get_mean(values) * len(values) == pytest.approx(calc.get_sum(values))
    assert calc.get_sum([]) == 0
    with pytest.raises(ValueError):
        calc.get_mean([])


def test_rms_invariants():
    assert calc.get_rms([4.0, 4.0, 4.0]) == 0
    assert calc.get_rms([]) == 0
    assert math.isnan(calc.get_rms([3.0]))
    values = [1.0, 2.5, 7.0, 3.0]
    shifted = [v + 100 for v in values]
    assert calc.get_rms(shifted) == pytest.approx(calc.get_rms(values))
    scaled = [v * 3 for v in values]
    assert calc.get_rms(scaled) == pytest.approx(3 * calc.get_rms(values))


def test_median():
    assert calc.get_median([9.0, 1.0, 4.0]) == 4.0
    pair = [2.0, 8.0]
    assert calc.get_median(pair) == pytest.approx(calc.get_mean(pair))
    with pytest.raises(ValueError):
        calc.get_median([])


def test_skew_symmetric_is_zero_and_sign():
    assert calc.get_skew([1.0, 2.0, 3.0]) == 0
    assert calc.get_skew([5.0, 5.0, 5.0]) == 0
    assert calc.get_skew([0.0, 0.0, 0.0, 10.0]) > 0
    assert calc.get_skew([0.0, 10.0, 10.0, 10.0]) < 0


def test_find_index():
    items = ["a", "b", "c", "b"]
    assert calc.find_index(items, "b") == 1
    assert calc.find_index(items, "z") == -1


def test_legendre():
    for order in range(1, 6):
        assert calc.legendre_p(order, 1.0) == pytest.approx(1.0)
        assert calc.legendre_p(order, -1.0) == pytest.approx((-1.0) ** order)
    assert calc.legendre_p(1, 0.37) == 0.37
    assert calc.legendre_p(6, 0.5) == 0


def test_opening_angle_degenerate_and_bounds():
    u = (0.0, 0.0, 2.0)
    assert calc.opening_angle(u, u, u) == 0
    a, b, c = (1, 0, 0), (0, 1, 0), (0, 0, 1)
    angle = calc.opening_angle(a, b, c)
    assert 0 < angle <= 90
    assert calc.opening_angle(c, a, b) == pytest.approx(angle)
    assert calc.opening_angle((5, 0, 0), (0, 3, 0), (0, 0, 7)) == pytest.approx(angle)


def test_opening_angle_great_circle_is_90():
    # three directions on a great circle lie on a cone of half-angle 90
    s = math.sqrt(3) / 2
    assert calc.opening_angle((1, 0, 0), (-0.5, s, 0), (-0.5, -s, 0)) == pytest.approx(90.0)


def test_dwall_in_direction_axes():
    r, zp, zm = 100.0, 200.0, -200.0
    center = (0.0, 0.0, 0.0)
    assert calc.dwall_in_direction(center, (0, 0, 1), r, zp, zm) == pytest.approx(zp)
    assert calc.dwall_in_direction(center, (0, 0, -5), r, zp, zm) == pytest.approx(-zm)
    assert calc.dwall_in_direction(center, (1, 0, 0), r, zp, zm) == pytest.approx(r)
    assert calc.dwall_in_direction(center, (0, 3, 0), r, zp, zm) == pytest.approx(r)


def test_dwall_in_direction_zero_direction():
    with pytest.raises(ValueError):
        calc.dwall_in_direction((0, 0, 0), (0, 0, 0), 1.0, 1.0, -1.0)


def test_min_max_index():
    values = [3.0, -1.0, 7.0, -1.0, 7.0]
    assert calc.min_index(values) == 1
    assert calc.max_index(values) == 2
    with pytest.raises(ValueError):
        calc.min_index([])


def test_seed_reproducible_pick():
    items = list(range(50))
    calc.set_seed(7)
    first = [calc.pick_random(items) for _ in range(10)]
    calc.set_seed(7)
    second = [calc.pick_random(items) for _ in range(10)]
    assert first == second
    assert all(x in items for x in first)
    with pytest.raises(IndexError):
        calc.pick_random([])


def test_shuffle_is_permutation():
    items = list(range(20))
    calc.set_seed(3)
    calc.shuffle(items)
    assert sorted(items) == list(range(20))


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.root").write_text("x")
    (tmp_path / "b.txt").write_text("x")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.root").write_text("x")
    deep = sub / "deep"
    deep.mkdir()
    (deep / "d.root").write_text("x")
    return tmp_path


def test_list_files_extension(tree):
    files = calc.list_files(str(tree), ".root")
    assert files == [os.path.join(str(tree), "a.root")]
    all_files = calc.list_files(str(tree))
    assert sorted(os.path.basename(f) for f in all_files) == ["a.root", "b.txt"]


def test_list_files_recursive_one_level(tree):
    files = calc.list_files(str(tree), ".root", True)
    names = sorted(os.path.basename(f) for f in files)
    assert names == ["a.root", "c.root"]


def test_list_files_missing_dir(tmp_path):
    assert calc.list_files(str(tmp_path / "missing")) == []


def test_subdirectories_and_picks(tree):
    subs = calc.list_subdirectories(str(tree))
    assert subs == [os.path.join(str(tree), "sub")]
    assert calc.pick_subdirectory(str(tree)) == subs[0]
    assert calc.pick_file(str(tree), ".txt") == os.path.join(str(tree), "b.txt")


def test_range_indices():
    values = [1.0, 2.0, 2.0, 3.0, 5.0, 8.0]
    assert calc.range_indices(values, 2.0, 5.0) == [1, 2, 3, 4]
    assert calc.range_indices(values, 9.0, 10.0) == []


def test_histogram_counts_and_centres():
    values = [0.5, 1.5, 1.6, 3.2, 9.5, -4.0, 12.0]
    hist = calc.histogram(values, 10, 0.0, 10.0)
    assert len(hist) == 10
    assert sum(count for _, count in hist) == 5
    assert hist[0] == (0.5, 1)
    assert hist[1][1] == 2
    centres = [c for c, _ in hist]
    assert centres == sorted(centres)
    with pytest.raises(ValueError):
        calc.histogram(values, -1, 0.0, 1.0)


def test_split():
    assert calc.split("a,b,c", ",") == ["a", "b", "c"]
    assert calc.split("a,,b", ",") == ["a", "", "b"]
    assert calc.split("a,", ",") == ["a", ""]
    assert calc.split("", ",") == []
    assert calc.split("x::y", "::") == ["x", "y"]
    with pytest.raises(ValueError):
        calc.split("abc", "")


def test_cwd_and_env(monkeypatch):
    assert calc.get_cwd() == os.getcwd() + "/"
    monkeypatch.setenv("NTAGLIB_TEST_DIR", "/tmp/data")
    assert calc.get_env("NTAGLIB_TEST_DIR") == "/tmp/data/"
    monkeypatch.delenv("NTAGLIB_TEST_DIR")
    assert calc.get_env("NTAGLIB_TEST_DIR") == ""


def test_does_exist(tmp_path):
    path = tmp_path / "file.txt"
    assert calc.does_exist(str(path)) is False
    path.write_text("data")
    assert calc.does_exist(str(path)) is True