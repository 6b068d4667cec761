"""Binary PPM (P6) output."""
import numpy as np
from numpy.typing import NDArray

MAX_CHANNEL = 255


class ImageWriteError(Exception):
    """The rendered image could not be written to disk."""


def encode_ppm(image: NDArray[np.uint8]) -> bytes:
    height, width, channels = image.shape
    if channels != 3:
        raise ValueError(f"Expected an RGB image, got {channels} channels")

    header = f"P6\n{width} {height}\n{MAX_CHANNEL}\n".encode("ascii")
    return header + np.ascontiguousarray(image, dtype=np.uint8).tobytes()


def write_ppm(path: str, image: NDArray[np.uint8]) -> None:
    data = encode_ppm(image)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ImageWriteError(f"Cannot write image to {path}: {e.strerror or e}") from e
