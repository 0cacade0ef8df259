import numpy as np
import matplotlib.pyplot as plt


def plot_three_planes(planes, show=True, log_scale=False):
    """
    Plot transversal, coronal and sagittal planes side by side.

    Args:
        planes (dict): plane name -> 2D array, as returned by ``central_planes``.
        show (bool): call ``plt.show()`` once drawn.
        log_scale (bool): display log10 of the magnitude (useful for k-space).

    Returns:
        matplotlib.figure.Figure
    """
    fig, axs = plt.subplots(1, len(planes), figsize=(4 * max(len(planes), 1), 4), squeeze=False)

    for ax, (name, plane) in zip(axs[0], planes.items()):
        image = np.abs(plane)
        if log_scale:
            image = np.log10(image + 0.01) # plus 0.01 in case of log(0) = -inf
        ax.imshow(image, cmap='gray', aspect='auto')
        ax.set_title(name.capitalize())
        ax.set_axis_off()

    plt.tight_layout()
    if show:
        plt.show()
    return fig
