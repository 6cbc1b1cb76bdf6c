"""Noise settings, noise file lists, the N200 noise cut and dark-noise simulation."""

from __future__ import annotations

import glob
import math
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum

from ntaglib.calculator import histogram
from ntaglib.printer import Printer, Verbosity
from ntaglib.store import Store

IN_GATE_FLAG = 2
OD_CABLE_OFFSET = 20000
HIT_TIME_LIMIT = 1000e3

_N200_BINS = 5000
_N200_LOW = -500e3
_N200_HIGH = 500e3


class NoiseTriggerType(IntEnum):
    """Trigger types of events usable as noise."""

    RANDOM_WIDE = 2048
    T2K_DUMMY = -2147483648
    NICKEL = 1 << 14


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def is_noise_trigger(trigger_type: int) -> bool:
    """True if an event with this trigger word can serve as a noise event."""
    word = _int32(int(trigger_type))
    return bool(
        word & NoiseTriggerType.RANDOM_WIDE
        or word == NoiseTriggerType.T2K_DUMMY
        or word & NoiseTriggerType.NICKEL
    )


@dataclass(frozen=True)
class NoiseHit:
    """A single noise PMT hit: time (ns), charge (p.e.), PMT id and flag."""

    t: float
    q: float
    pmt_id: int
    flag: int = IN_GATE_FLAG


class NoiseManager:
    """Holds noise settings and produces noise hits."""

    def __init__(self, seed: int = 0) -> None:
        self.noise_tree_name = "data"
        self.noise_path = "/disk02/calib3/usr/han/dummy"
        self.noise_type = "sk6"
        self.noise_files: list[str] = []

        self.noise_event_length = 1000e3
        self.noise_start_time = 1e3
        self.noise_end_time = 536e3
        self.noise_window_width = 536e3
        self.n_parts = 2

        self.id_max_n200 = 60
        self.od_max_n200 = 20
        self.do_n200_cut = False

        self.pmt_deadtime = 900.0
        self.id_dark_rate_khz = 7.5
        self.od_dark_rate_khz = 4.0
        self.id_pmt_count = 11146
        self.od_pmt_count = 1885

        self.do_repeat = True
        self.randomize_first_entry = True

        self.msg = Printer("NoiseManager")
        self._rng = random.Random()
        self.seed = 0
        self.set_seed(seed)

    # settings

    def set_noise_time_range(self, start_time: float, end_time: float) -> None:
        """Set the noise window in microseconds relative to the trigger."""
        start = start_time * 1e3 + 1000
        end = end_time * 1e3 + 1000
        width = end - start
        if width <= 0:
            raise ValueError("noise window end must come after its start")
        self.noise_start_time = start
        self.noise_end_time = end
        self.noise_window_width = width
        self.n_parts = int(self.noise_event_length / width)

    def set_pmt_deadtime(self, deadtime: float) -> None:
        """Set the PMT dead time in ns."""
        self.pmt_deadtime = deadtime

    def set_dark_rate(self, id_rate: float, od_rate: float) -> None:
        """Set the ID and OD dark rates in kHz."""
        self.id_dark_rate_khz = id_rate
        self.od_dark_rate_khz = od_rate

    def set_noise_max_n200(self, id_cut: int, od_cut: int, do_cut: bool = True) -> None:
        """Set the maximum N200 allowed in noise events and whether to cut."""
        self.id_max_n200 = id_cut
        self.od_max_n200 = od_cut
        self.do_n200_cut = do_cut

    def set_repeat(self, repeat: bool) -> None:
        """Allow or forbid reusing noise events once they run out."""
        self.do_repeat = repeat

    def set_seed(self, seed: int) -> None:
        """Seed the noise random number generator."""
        self.seed = seed
        self._rng.seed(seed)

    def dump_settings(self) -> None:
        """Print the current settings."""
        self.msg.print_block("NoiseManager settings")
        if self.noise_files:
            self.msg.print(f"Noise type: {self.noise_type}")
            self.msg.print(f"Noise files: {len(self.noise_files)}")
            self.msg.print(
                "Randomized starting entry? : "
                + ("yes" if self.randomize_first_entry else "no")
            )
            self.msg.print("Repetition allowed? " + ("yes" if self.do_repeat else "no"))
            if self.do_n200_cut:
                self.msg.print(
                    f"Noise MaxN200: {self.id_max_n200} (ID), {self.od_max_n200} (OD)"
                )
        else:
            self.msg.print(f"ID dark rate: {self.id_dark_rate_khz:3.2f} kHz")
            self.msg.print(f"OD dark rate: {self.od_dark_rate_khz:3.2f} kHz")
        self.msg.print(
            f"Noise range: [{self.noise_start_time * 1e-3 - 1:3.2f}, "
            f"{self.noise_end_time * 1e-3 - 1:3.2f}] usec (T_trigger=0)"
        )
        self.msg.print(f"Seed: {self.seed}")
        self.msg.print(f"PMT deadtime: {self.pmt_deadtime:3.2f} ns")
        print()

    # noise file lists

    def write_noise_file_list(self, path: str, file_paths: Iterable[str] | None = None) -> None:
        """Write the settings followed by the noise file paths."""
        paths = self.noise_files if file_paths is None else list(file_paths)
        start = (self.noise_start_time - 1000) * 1e-3
        end = (self.noise_end_time - 1000) * 1e-3
        with open(path, "w", encoding="utf-8") as out:
            out.write(f"TNOISESTART {start:g}\n")
            out.write(f"TNOISEEND {end:g}\n")
            out.write(f"PMTDEADTIME {self.pmt_deadtime:g}\n")
            out.write(f"noise_cut {int(self.do_n200_cut)}\n")
            out.write(f"IDMAXN200 {self.id_max_n200}\n")
            out.write(f"ODMAXN200 {self.od_max_n200}\n")
            out.write("\n")
            for file_path in paths:
                out.write(f"{file_path}\n")

    def read_noise_file_list(self, path: str) -> list[str]:
        """Read settings and absolute noise file paths from a list file.

        Settings are read as 'key value' pairs up to the first pair whose
        value is not a number; the file paths are the lines starting with '/'.
        """
        with open(path, encoding="utf-8") as list_file:
            text = list_file.read()

        start = self.noise_start_time * 1e-3 - 1
        end = self.noise_end_time * 1e-3 - 1
        words = text.split()
        for option, raw in zip(words[::2], words[1::2]):
            try:
                value = float(raw)
            except ValueError:
                break
            if option == "TNOISESTART":
                start = value
            elif option == "TNOISEEND":
                end = value
            elif option == "PMTDEADTIME":
                self.pmt_deadtime = value
            elif option == "noise_cut":
                self.do_n200_cut = bool(value)
            elif option == "IDMAXN200":
                self.id_max_n200 = int(value)
            elif option == "ODMAXN200":
                self.od_max_n200 = int(value)
        self.set_noise_time_range(start, end)

        files: list[str] = []
        for line in text.splitlines():
            if line.startswith("/") and line not in files:
                files.append(line)
        self.noise_files = files
        return files

    # noise event selection

    def passes_n200_cut(self, id_times: Sequence[float], od_times: Sequence[float]) -> bool:
        """False if any 200 ns bin exceeds the ID or OD N200 limit.

        Always True when the N200 cut is switched off.
        """
        if not self.do_n200_cut:
            return True
        id_hist = histogram(id_times, _N200_BINS, _N200_LOW, _N200_HIGH)
        od_hist = histogram(od_times, _N200_BINS, _N200_LOW, _N200_HIGH)
        for (_, id_count), (_, od_count) in zip(id_hist, od_hist):
            if od_count > self.od_max_n200 or id_count > self.id_max_n200:
                self.msg.print(
                    f"Rejecting noise event with OD N200 {od_count} and ID N200 {id_count}...",
                    Verbosity.WARNING,
                )
                return False
        return True

    # noise simulation

    def simulate_noise(self, od: bool = False) -> list[NoiseHit]:
        """Simulate dark hits in the noise window, sorted by time.

        The window is cut into dead-time segments; each segment of each PMT
        holds at most one hit, present with the Poisson probability of at
        least one dark pulse.
        """
        if self.pmt_deadtime <= 0:
            raise ValueError("PMT deadtime must be positive")
        rate = self.od_dark_rate_khz if od else self.id_dark_rate_khz
        n_segments = int(self.noise_window_width / self.pmt_deadtime)
        expected = rate * 1e3 * self.pmt_deadtime * 1e-9
        p_hit = 1.0 - math.exp(-expected) if expected > 0 else 0.0

        if od:
            pmt_ids = range(OD_CABLE_OFFSET + 1, OD_CABLE_OFFSET + self.od_pmt_count + 1)
        else:
            pmt_ids = range(1, self.id_pmt_count + 1)

        hits: list[NoiseHit] = []
        if p_hit <= 0:
            return hits
        for pmt_id in pmt_ids:
            for segment in self._hit_segments(n_segments, p_hit):
                hit_t = self.noise_start_time + (segment + self._rng.random()) * self.pmt_deadtime
                if hit_t < self.noise_end_time:
                    hit_q = abs(self._rng.gauss(1.0, 0.7))
                    hits.append(NoiseHit(hit_t, hit_q, pmt_id))
        hits.sort(key=lambda hit: hit.t)
        return hits

    def _hit_segments(self, n_segments: int, p_hit: float):
        if p_hit >= 1.0:
            yield from range(n_segments + 1)
            return
        log_miss = math.log(1.0 - p_hit)
        segment = -1
        while True:
            u = 1.0 - self._rng.random()
            segment += 1 + int(math.log(u) / log_miss)
            if segment > n_segments:
                return
            yield segment

    # configuration

    def apply_settings(self, store: Store) -> None:
        """Configure the manager from a Store of options."""
        noise_type = store.get_string("noise_type")
        id_dark_rate = store.get_float("IDDARKRATE")
        od_dark_rate = store.get_float("ODDARKRATE")
        do_cut = store.get_bool("noise_cut", False)
        id_max_n200 = store.get_int("IDMAXN200", 60)
        od_max_n200 = store.get_int("ODMAXN200", 20)
        input_noise = store.get_string("in_noise")
        noise_list = store.get_string("dump_noise")
        t_start = store.get_float("TNOISESTART", 0)
        t_end = store.get_float("TNOISEEND", 535)
        seed = store.get_int("NOISESEED")
        debug = store.get_bool("debug", False)

        self.set_seed(seed)
        self.set_noise_max_n200(id_max_n200, od_max_n200, do_cut)
        self.set_pmt_deadtime(900.0)
        self.randomize_first_entry = store.get_bool("RANDOMIZENOISE", True)
        if debug:
            self.msg.verbosity = Verbosity.DEBUG

        if noise_type == "simulate":
            self.set_dark_rate(id_dark_rate, od_dark_rate)
        else:
            if noise_type:
                self.noise_type = noise_type
            if input_noise:
                if input_noise.endswith(".root"):
                    self.set_noise_time_range(t_start, t_end)
                    self.noise_files = sorted(glob.glob(input_noise))
                else:
                    self.read_noise_file_list(input_noise)
            else:
                self.noise_path = store.get_string("noise_path", self.noise_path)
                self.set_noise_time_range(t_start, t_end)
            if noise_list:
                self.write_noise_file_list(noise_list)
            self.set_repeat(store.get_bool("repeat_noise", True))

        self.dump_settings()