import numpy as np


def ifft_3d(kspace):
    """Centred inverse FFT over all axes of a (slice, phase, readout) k-space."""
    return np.fft.fftshift(np.fft.ifftn(np.fft.ifftshift(kspace)))


def combine_coils(images):
    """
    Sum of squares coil combination.

    Args:
        images (sequence of np.ndarray): one complex image per coil, same shape.

    Returns:
        np.ndarray: real magnitude image.
    """
    images = np.asarray(images)
    return np.sqrt(np.sum(np.abs(images) ** 2, axis=0))


def central_planes(volume):
    # volume is (slice, phase, readout); slice encodes run along z
    n_sl, n_ph, n_rd = volume.shape
    return {'transversal': volume[n_sl // 2, :, :],
            'coronal': volume[:, n_ph // 2, :],
            'sagittal': volume[:, :, n_rd // 2]}
