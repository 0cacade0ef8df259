# Config file for the qMRLab vfa_t1 protocol running on the RTHawk host.
# Waveform-derived values (FOV, resolution, RF tip...) are NOT set here, they are
# read from the SpinBench description at load time.

# Raw to image sort, hardcoded 256x256 in-plane and 5 slab encodes
sort_phase_encodes = 256
sort_samples = 256
sort_slice_encodes = 5
sort_accumulate = sort_phase_encodes * sort_slice_encodes

# Controller
base_echo_time = 3 # ms, TE is anchored to the peak of the sinc RF
flip_angle_offset = 17 # deg, FA2 = tip - 17
z_resolution_factor = 10 # starting z resolution = thickness / zRes * 10
loop_name = "tiploop"
samples_key = "acquisition.samples"

# Widget bounds
fov_min = 20 # cm
fov_max_factor = 2
thickness_max_factor = 2
tr_span = 30 # ms above min TR
fa1_max = 90 # deg
fa2_span = 5 # deg above FA2 minimum
te_min = 1 # ms
te_max = 8 # ms
te_default = 3 # ms

# Export
export_directory = "./output/"
export_series = True
export_object_name = "save_image"
splitter_object_name = "splitOutput"

# Logging
log_file = "vfa_t1"
log_level = 20 # INFO

# System limits for the demo waveforms (pypulseq)
max_grad = 32 # mT/m
max_slew = 130 # T/m/s
rf_dead_time = 100e-6 # s
rf_ringdown_time = 20e-6 # s
adc_dead_time = 10e-6 # s
grad_raster_time = 10e-6 # s
gammaB = 42.576e6 # Hz/T, Gyromagnetic ratio
