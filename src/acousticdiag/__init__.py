"""AcousticDiag: handheld acoustic diagnostics for machines.

Samples ambient sound, weights it with an A-weighting approximation, derives
a level and dominant frequency, and records one NORMAL/ABNORMAL verdict per
timed diagnostic window.
"""

__version__ = "0.1.0"
