import pytest

from ntaglib.noise import (
    NoiseHit,
    NoiseManager,
    NoiseTriggerType,
    is_noise_trigger,
)
from ntaglib.store import Store


@pytest.mark.parametrize(
    "trigger, expected",
    [
        (2048, True),
        (1 << 14, True),
        (-2147483648, True),
        (0x80000000, True),
        (2048 | 1, True),
        (1, False),
        (0, False),
    ],
)
def test_is_noise_trigger(trigger, expected):
    assert is_noise_trigger(trigger) is expected


def test_trigger_type_values():
    assert NoiseTriggerType.RANDOM_WIDE == 2048
    assert NoiseTriggerType.NICKEL == 1 << 14
    assert is_noise_trigger(NoiseTriggerType.T2K_DUMMY)


def test_set_noise_time_range():
    manager = NoiseManager()
    manager.set_noise_time_range(0, 535)
    assert manager.noise_start_time == pytest.approx(1000)
    assert manager.noise_end_time == pytest.approx(536000)
    assert manager.noise_window_width == pytest.approx(535000)
    assert manager.n_parts == 1


def test_set_noise_time_range_rejects_empty_window():
    manager = NoiseManager()
    with pytest.raises(ValueError):
        manager.set_noise_time_range(10, 10)


def test_setters():
    manager = NoiseManager()
    manager.set_dark_rate(3.0, 2.0)
    manager.set_pmt_deadtime(500)
    manager.set_noise_max_n200(40, 10)
    manager.set_repeat(False)
    assert (manager.id_dark_rate_khz, manager.od_dark_rate_khz) == (3.0, 2.0)
    assert manager.pmt_deadtime == 500
    assert (manager.id_max_n200, manager.od_max_n200, manager.do_n200_cut) == (40, 10, True)
    assert manager.do_repeat is False


def test_noise_file_list_round_trip(tmp_path):
    writer = NoiseManager()
    writer.set_noise_time_range(-5, 500)
    writer.set_noise_max_n200(45, 12, True)
    writer.set_pmt_deadtime(800)
    files = ["/data/run1/a.root", "/data/run2/b.root"]
    path = tmp_path / "noise.txt"
    writer.write_noise_file_list(str(path), files)

    reader = NoiseManager()
    assert reader.read_noise_file_list(str(path)) == files
    assert reader.noise_start_time == pytest.approx(writer.noise_start_time)
    assert reader.noise_end_time == pytest.approx(writer.noise_end_time)
    assert reader.pmt_deadtime == pytest.approx(800)
    assert reader.do_n200_cut is True
    assert (reader.id_max_n200, reader.od_max_n200) == (45, 12)
    assert reader.noise_files == files


def test_noise_file_list_header(tmp_path):
    manager = NoiseManager()
    manager.set_noise_time_range(0, 535)
    path = tmp_path / "noise.txt"
    manager.write_noise_file_list(str(path), [])
    lines = path.read_text().splitlines()
    assert lines[:6] == [
        "TNOISESTART 0",
        "TNOISEEND 535",
        "PMTDEADTIME 900",
        "noise_cut 0",
        "IDMAXN200 60",
        "ODMAXN200 20",
    ]


def test_read_list_ignores_relative_paths(tmp_path):
    path = tmp_path / "noise.txt"
    path.write_text("TNOISESTART 2\nTNOISEEND 300\n\nrelative.root\n/abs/x.root\n/abs/x.root\n")
    manager = NoiseManager()
    assert manager.read_noise_file_list(str(path)) == ["/abs/x.root"]
    assert manager.noise_start_time == pytest.approx(3000)
    assert manager.noise_end_time == pytest.approx(301000)


def test_n200_cut_rejects_dense_cluster():
    manager = NoiseManager()
    manager.set_noise_max_n200(60, 20, True)
    dense = [100.0 + i for i in range(61)]
    assert manager.passes_n200_cut(dense, [0.0]) is False
    assert manager.passes_n200_cut(dense[:60], [0.0]) is True
    assert manager.passes_n200_cut([0.0], [50.0 + i for i in range(21)]) is False


def test_n200_cut_disabled_passes():
    manager = NoiseManager()
    dense = [100.0] * 500
    assert manager.passes_n200_cut(dense, dense) is True


def _small_manager(seed):
    manager = NoiseManager(seed)
    manager.id_pmt_count = 20
    manager.od_pmt_count = 10
    manager.set_dark_rate(200.0, 150.0)
    manager.set_noise_time_range(0, 100)
    return manager


def test_simulate_noise_invariants():
    manager = _small_manager(3)
    hits = manager.simulate_noise(False)
    assert hits
    times = [hit.t for hit in hits]
    assert times == sorted(times)
    assert all(manager.noise_start_time <= h.t < manager.noise_end_time for h in hits)
    assert all(1 <= h.pmt_id <= 20 for h in hits)
    assert all(h.flag == 2 and h.q >= 0 for h in hits)


def test_simulate_od_pmt_ids():
    hits = _small_manager(4).simulate_noise(True)
    assert hits
    assert all(20001 <= h.pmt_id <= 20010 for h in hits)


def test_simulate_noise_is_reproducible():
    first = _small_manager(7).simulate_noise(False)
    second = _small_manager(7).simulate_noise(False)
    assert len(first) > 0
    assert [(h.t, h.q, h.pmt_id, h.flag) for h in first] == [
        (h.t, h.q, h.pmt_id, h.flag) for h in second
    ]


def test_simulate_zero_rate_gives_no_hits():
    manager = _small_manager(1)
    manager.set_dark_rate(0.0, 0.0)
    assert manager.simulate_noise(False) == []


def test_simulate_rejects_nonpositive_deadtime():
    manager = _small_manager(1)
    manager.set_pmt_deadtime(0)
    with pytest.raises(ValueError):
        manager.simulate_noise(False)


def test_noise_hit_default_flag():
    assert NoiseHit(1.0, 2.0, 3).flag == 2


def test_apply_settings_simulate(capsys):
    store = Store("settings")
    store.set("noise_type", "simulate")
    store.set("IDDARKRATE", 5.5)
    store.set("ODDARKRATE", 3.5)
    store.set("NOISESEED", 42)
    store.set("noise_cut", "true")
    manager = NoiseManager()
    manager.apply_settings(store)
    assert manager.id_dark_rate_khz == pytest.approx(5.5)
    assert manager.od_dark_rate_khz == pytest.approx(3.5)
    assert manager.seed == 42
    assert manager.do_n200_cut is True
    assert "ID dark rate: 5.50 kHz" in capsys.readouterr().out


def test_apply_settings_from_list(tmp_path):
    source = NoiseManager()
    source.set_noise_time_range(1, 400)
    list_path = tmp_path / "in.txt"
    source.write_noise_file_list(str(list_path), ["/noise/f.root"])
    dump_path = tmp_path / "out.txt"

    store = Store()
    store.set("noise_type", "sk6")
    store.set("in_noise", str(list_path))
    store.set("dump_noise", str(dump_path))
    store.set("repeat_noise", "false")
    manager = NoiseManager()
    manager.apply_settings(store)
    assert manager.noise_files == ["/noise/f.root"]
    assert manager.noise_start_time == pytest.approx(source.noise_start_time)
    assert manager.do_repeat is False
    assert NoiseManager().read_noise_file_list(str(dump_path)) == ["/noise/f.root"]