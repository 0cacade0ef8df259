"""
@Summary: demo waveforms for the vfa_t1 protocol, designed with PyPulseq.

Stands in for the SpinBench export when no scanner host is attached: the sinc
slab-select excitation, the 3D Cartesian readout and the spoiler are designed
here, their parameters are exported with the same keys SpinBench uses, and the
minimum TR follows from the block durations.
"""
import math

import pypulseq as pp

import configs.hw_config_vfa as hw
import configs.units as units
from seq.waveforms import SpinBenchWaveforms


def demo_system():
    return pp.Opts(
        max_grad=hw.max_grad,  # Maximum gradient amplitude [mT/m]
        grad_unit="mT/m",
        max_slew=hw.max_slew,  # Maximum slew rate [T/m/s]
        slew_unit="T/m/s",
        rf_ringdown_time=hw.rf_ringdown_time,
        rf_dead_time=hw.rf_dead_time,
        adc_dead_time=hw.adc_dead_time,
        grad_raster_time=hw.grad_raster_time,
        gamma=hw.gammaB,
    )


def build_demo_waveforms(fov=24.0, n_points=(256, 256, 5), thickness=5.0, flip_angle=20.0,
                         rf_duration=2e-3, readout_duration=2.56e-3, pe_duration=1.5e-3,
                         grad_spoil=4, system=None):
    """
    Design the excitation, readout and spoiler blocks.

    Args:
        fov (float): in-plane field of view (cm).
        n_points (tuple): readout x, y resolution and number of slab encodes.
        thickness (float): slab thickness (mm).
        flip_angle (float): RF tip (deg).
        rf_duration (float): sinc pulse duration (s).
        readout_duration (float): flat time of the readout gradient (s).
        pe_duration (float): duration of the prephasing / phase encoding gradients (s).
        grad_spoil (float): spoiler area in multiples of the readout area.
        system (pp.Opts): hardware limits, ``demo_system()`` if None.

    Returns:
        SpinBenchWaveforms: exported block parameters.
        float: minimum TR (ms).
    """
    if system is None:
        system = demo_system()
    Nx, Ny, Nz = n_points

    # Create slab-selective pulse and corresponding gradients
    rf, gz, gz_reph = pp.make_sinc_pulse(
        flip_angle=flip_angle * math.pi / 180,
        duration=rf_duration,
        slice_thickness=thickness * units.mm,
        apodization=0.5,
        time_bw_product=4,
        system=system,
        return_gz=True,
    )

    # Readout and encoding gradients
    deltak = 1 / (fov * units.cm)
    deltakz = 1 / (thickness * units.mm)
    gx = pp.make_trapezoid(channel="x", flat_area=Nx * deltak, flat_time=readout_duration, system=system)
    gx_pre = pp.make_trapezoid(channel="x", area=-gx.area / 2, duration=pe_duration, system=system)
    gy_pre = pp.make_trapezoid(channel="y", area=-Ny / 2 * deltak, duration=pe_duration, system=system)
    gz_pre = pp.make_trapezoid(channel="z", area=-gz.area / 2 - Nz / 2 * deltakz, duration=pe_duration,
                               system=system)
    gz_spoil = pp.make_trapezoid(channel="z", area=grad_spoil * gx.area, system=system)

    # TE is anchored to the peak of the sinc RF
    peak = (rf.delay + pp.calc_rf_center(rf)[0]) / units.ms

    min_tr = (pp.calc_duration(rf, gz)
              + pp.calc_duration(gx_pre, gy_pre, gz_pre)
              + pp.calc_duration(gx)
              + pp.calc_duration(gz_spoil)) / units.ms

    waveforms = SpinBenchWaveforms(
        excitation={
            "<Slice Select Gradient>.thickness": float(thickness),
            "<Sinc RF>.tip": float(flip_angle),
            "<Sinc RF>.peak": float(peak),
            "<Sinc RF>.duration": float(rf_duration / units.ms),
        },
        readout={
            "<Cartesian Readout>.xRes": int(Nx),
            "<Cartesian Readout>.yRes": int(Ny),
            "<Cartesian Readout>.fov": float(fov),
            "<Cartesian Readout>.readoutDuration": float(readout_duration / units.ms),
            "<Phase Encode Gradient>.res": int(Nz),
        },
        spoiler={
            "<Area Trapezoid>.area": float(gz_spoil.area),
        },
    )
    return waveforms, round(float(min_tr), 3)
