"""Neutron tagging helpers: statistics, option parsing, settings, vertex fitting, trigger emulation and noise handling."""

__version__ = "0.1.0"

__all__ = [
    "argparser",
    "calculator",
    "noise",
    "printer",
    "store",
    "trigger",
    "vertexfit",
]