# SI multipliers
m = 1.0
cm = 1e-2
mm = 1e-3
s = 1.0
ms = 1e-3
us = 1e-6
MHz = 1e6
kHz = 1e3

# Host conversions: SpinBench FOV is in cm, the host wants mm.
# Delays and TR setters on the host take microseconds.
cm_to_mm = 10.0
ms_to_us = 1e3
