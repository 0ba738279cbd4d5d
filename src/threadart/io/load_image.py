"""
Image loading for threadart.

The planner only ever sees a dense uint8 grayscale buffer; decoding,
resizing and inversion happen here.
"""

import hashlib
import os

import cv2
import numpy as np

from threadart.tracer import get_tracer, trace

SUPPORTED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp", ".webp"]


@trace(label="load_grayscale")
def load_grayscale(path, size=None, invert=False):
    """
    Load an image from disk as 8-bit grayscale.

    Args:
        path: image file path
        size: optional (height, width) to resize to
        invert: flip intensities so light areas attract thread

    Returns:
        (image, metadata) where image is a (H, W) uint8 array and metadata
        has width, height, source_path and digest

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the image cannot be decoded.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise ValueError(f"Failed to load image: {path}")

    if size:
        height, width = int(size[0]), int(size[1])
        img = cv2.resize(img, (width, height), interpolation=cv2.INTER_AREA)

    if invert:
        img = 255 - img

    img = np.ascontiguousarray(img, dtype=np.uint8)
    height, width = img.shape[:2]

    tracer.event(f"Loaded image: {width}x{height}")

    metadata = {
        "width": width,
        "height": height,
        "source_path": os.path.abspath(path),
        "digest": image_digest(img),
    }

    return img, metadata


def image_digest(img):
    """Short content hash of a pixel buffer."""
    h = hashlib.sha256()
    h.update(str(img.shape).encode())
    h.update(img.tobytes())
    return h.hexdigest()[:16]


def validate_image_input(path):
    """
    Check that an input path exists and is a readable image.

    Returns a list of error messages (empty if valid).
    """
    if not os.path.exists(path):
        return [f"File not found: {path}"]

    ext = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        return [f"Unsupported image format: {path}"]

    if cv2.imread(path, cv2.IMREAD_GRAYSCALE) is None:
        return [f"Cannot read image: {path}"]

    return []
