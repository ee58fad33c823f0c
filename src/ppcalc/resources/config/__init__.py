"""Default calibration tables shipped with ppcalc."""
