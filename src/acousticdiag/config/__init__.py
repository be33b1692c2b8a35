"""Configuration objects and helpers for AcousticDiag.

This package knows how to load the YAML descriptors that shape a measurement:
- ``config.yaml`` with pipeline tuning (sample rate, transform size, window)
- ``machines.yaml`` with the catalog of machine acceptability envelopes
The resulting typed dataclasses (see :mod:`runtime` and :mod:`catalog`) are
imported everywhere else so sessions, the GUI, and headless runs agree.
"""

from .catalog import find_machine, load_catalog
from .runtime import DiagConfig, config_from_mapping, load_config

__all__ = ["DiagConfig", "config_from_mapping", "load_config", "find_machine", "load_catalog"]
