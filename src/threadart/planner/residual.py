"""
Residual darkness buffer and the line penalty model.

Each pixel holds the darkness still owed to the source image, starting at
255 - value for an 8-bit grayscale pixel. Committing a line spends that
budget; scoring estimates how well a candidate line would spend it.
"""

import numpy as np

from threadart.planner.errors import ConfigurationError

MAX_INTENSITY = 255.0

_EMPTY_INDICES = np.zeros(0, dtype=np.intp)
_EMPTY_WEIGHTS = np.zeros(0, dtype=np.float64)


class ResidualBuffer:
    """
    Dense, mutable per-pixel residual of an inverted grayscale image.

    Args:
        image: uint8 grayscale pixels, either (height, width) or flat
            row-major with width * height entries
        width: image width in pixels
        height: image height in pixels
        line_weight: darkness spent per unit of coverage, in intensity
            units [0, 255)
        lightness_penalty: multiplier applied to overshoot below zero
    """

    def __init__(self, image, width, height, line_weight, lightness_penalty):
        pixels = np.asarray(image, dtype=np.float64).ravel()
        if pixels.size != width * height:
            raise ConfigurationError(
                f"image buffer has {pixels.size} samples, expected {width}x{height}={width * height}"
            )

        self.width = int(width)
        self.height = int(height)
        self.line_weight = float(line_weight)
        self.lightness_penalty = float(lightness_penalty)
        self.values = MAX_INTENSITY - pixels

    def __len__(self):
        return self.values.size

    def clip(self, samples):
        """
        Drop samples outside the buffer.

        Returns:
            (indices, weights) arrays of flattened in-bounds pixels
        """
        # rasterizers may hand back a one-shot iterator
        samples = list(samples)
        if not samples:
            return _EMPTY_INDICES, _EMPTY_WEIGHTS

        pixels = np.array([p for p, _ in samples], dtype=np.int64).reshape(-1, 2)
        weights = np.array([w for _, w in samples], dtype=np.float64)
        xs = pixels[:, 0]
        ys = pixels[:, 1]

        keep = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        flat = xs[keep] + ys[keep] * self.width
        weights = weights[keep]

        in_range = flat < self.values.size
        return flat[in_range].astype(np.intp), weights[in_range]

    def score(self, samples):
        """
        Mean penalty of drawing a line over the given samples.

        Lower is better. Pixels that would go below zero contribute their
        overshoot scaled by lightness_penalty. A line with no in-bounds
        samples scores -inf.
        """
        indices, weights = self.clip(samples)
        return self.score_clipped(indices, weights)

    def score_clipped(self, indices, weights):
        if indices.size == 0:
            return float("-inf")

        adjusted = self.values[indices] - weights * self.line_weight
        penalties = np.where(adjusted < 0.0, -self.lightness_penalty * adjusted, adjusted)
        return float(penalties.mean())

    def commit(self, samples):
        """
        Spend darkness along a line.

        Subtracts weight * line_weight at every in-bounds sample. Values
        may go negative. Returns the number of pixels written.
        """
        indices, weights = self.clip(samples)
        np.subtract.at(self.values, indices, weights * self.line_weight)
        return int(indices.size)

    def loss(self):
        """Total absolute residual over the whole buffer."""
        return float(np.abs(self.values).sum())

    def as_image(self):
        """Residual as a (height, width) float array (a view, not a copy)."""
        return self.values.reshape(self.height, self.width)
