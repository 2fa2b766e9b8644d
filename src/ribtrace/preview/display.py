"""Matplotlib-based preview display for rendered images.

Rendered images already carry gamma, so they are shown as they will be
written to disk: clipped to [0, 1] and nothing else.

Features:
    - Preview window for a single render
    - Side-by-side comparison with an amplified difference view and RMSE

Example:
    >>> from src.ribtrace.preview.display import show_preview
    >>> image = tracer.render()  # doctest: +SKIP
    >>> show_preview(image, title="Default scene")  # doctest: +SKIP
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from src.ribtrace.preview.export import compute_rmse


def prepare_for_display(image: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Clip a rendered image to the displayable [0, 1] range."""
    return np.clip(image.astype(np.float64), 0.0, 1.0)


def show_preview(
    image: npt.NDArray[np.float64],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Rendered image array (H, W, 3), top row first.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(prepare_for_display(image))
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.float64],
    image_b: npt.NDArray[np.float64],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two images with difference view.

    Args:
        image_a: First image array (H, W, 3).
        image_b: Second image array (H, W, 3).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE (root mean squared error) between the two images.
    """
    import matplotlib.pyplot as plt

    display_a = prepare_for_display(image_a)
    display_b = prepare_for_display(image_b)
    rmse = compute_rmse(display_a, display_b)

    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
