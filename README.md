# ntaglib

Building blocks for neutron tagging analyses in a water Cherenkov detector.
The package depends only on the standard library.

## Modules

- `ntaglib.calculator` holds the numeric helpers: `get_sum`, `get_mean`, `get_rms` (sample standard deviation), `get_median`, `get_skew`, `histogram`, `range_indices`, `legendre_p` (orders 1 to 5), `opening_angle`, and `dwall_in_direction`, which measures the distance to a cylinder wall along a direction. It also provides seeded random picking (`set_seed`, `pick_random`, `shuffle`) and directory listing (`list_files`, `list_subdirectories`, `pick_file`, `pick_subdirectory`).
- `ntaglib.printer` provides `Printer`, a message printer. It tags each message with its owner's name and filters messages by `Verbosity`. An error-level message is printed and then raises `PrinterError`. `print_block` frames a line with `=` walls whose width is set by `BlockSize`.
- `ntaglib.argparser` provides `ArgParser`. It turns command-line tokens (`from_argv`) or `option value` card lines (`from_lines`, `read_file`) into option/value pairs. A flag given without a value reads as `"true"`.
- `ntaglib.store` provides `Store`, an ordered key/value settings store with typed getters (`get_bool`, `get_int`, `get_float`, `get_string`). It can be filled from a config file (`initialize`) or from an `ArgParser` (`read_arguments`). `parse_vector` and `format_vector` convert between 3-vectors and `x,y,z` strings.
- `ntaglib.vertexfit` provides two things:
  - `goodness`, the ad-hoc fit goodness of residual hit times.
  - `TRMSFitter`, a shrinking-grid search for the vertex that minimises the RMS of residual hit times. It takes a callable that maps a trial vertex to time-of-flight-subtracted hit times, and returns a `FitResult`.
- `ntaglib.trigger` emulates the software trigger:
  - `digitize_hit` turns hit time and charge into raw QBee words.
  - `gate_hit` flags hits in the 1.3 µs gate and shifts their times.
  - `TriggerManager.find_main_trigger` picks the earliest enabled `SoftwareTrigger` and combines the coincident trigger bits.
  - `TriggerManager.trigger_offsets` gives up to ten MC trigger records.
- `ntaglib.noise` provides `NoiseManager`. It holds the noise window and dark-rate settings, and writes and reads noise file lists. `passes_n200_cut` applies the N200 selection, and `simulate_noise` simulates PMT dark hits. `apply_settings` configures the manager from a `Store`. `is_noise_trigger` tells whether a trigger word marks an event usable as noise.

## Example

```python
from ntaglib.argparser import ArgParser
from ntaglib.store import Store

parser = ArgParser.from_argv(["prog", "-NOISESEED", "42", "-debug"])
settings = Store("Settings")
settings.read_arguments(parser)

settings.get_int("NOISESEED")      # 42
settings.get_bool("debug", False)  # True
```

```python
from ntaglib.calculator import histogram, get_rms

histogram([0.5, 1.5, 1.6], 2, 0.0, 2.0)  # [(0.5, 1), (1.5, 2)]
get_rms([1.0, 2.0, 3.0])                 # 1.0
```

## What the package does not do

- It has no command-line program. It is a library only.
- It does not read detector event files or noise event files:
  - `NoiseManager` only keeps and writes lists of noise file paths.
  - Noise hits come either from your own data or from `simulate_noise`.
- The software trigger table is not computed here. You pass `find_main_trigger` the trigger candidates.
- There is no detector geometry or PMT position table. `TRMSFitter` needs a caller-supplied function that returns residual hit times for a vertex.

## Tests

```
pip install -e .[test]
pytest
```