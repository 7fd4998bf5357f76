"""Edge map primitives used by reference detection."""

import time
from dataclasses import dataclass

import numpy as np
from PIL import Image

from local_estimation.domain.errors import DetectionTimeoutError
from local_estimation.domain.reference import PixelBuffer
from local_estimation.numeric import round_int

LUMA_WEIGHTS = (0.299, 0.587, 0.114)
EDGE_VALUE = 255
MIN_COMPONENT_POINTS = 20
MAX_COMPONENT_POINTS = 10_000
_NEIGHBOURS = 4
_DEADLINE_CHECK_INTERVAL = 512


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in processing-image pixels."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class EdgeComponent:
    """A connected run of edge pixels."""

    point_count: int
    bounding_box: BoundingBox


def check_deadline(deadline: float | None) -> None:
    """Raise when a monotonic deadline has passed."""
    if deadline is not None and time.monotonic() > deadline:
        raise DetectionTimeoutError("Reference detection exceeded its deadline")


def downscale(image: PixelBuffer, max_dimension: int) -> tuple[np.ndarray, float]:
    """Shrink an image so its longer side fits ``max_dimension``.

    Returns the RGBA pixels and the scale factor applied (1.0 when untouched).
    """
    scale = min(1.0, max_dimension / max(image.width, image.height))
    if scale >= 1.0:
        return image.to_array(), 1.0
    width = max(1, round_int(image.width * scale))
    height = max(1, round_int(image.height * scale))
    resized = Image.frombytes("RGBA", (image.width, image.height), image.data).resize(
        (width, height), Image.Resampling.BILINEAR
    )
    return np.asarray(resized, dtype=np.uint8), scale


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Convert RGBA pixels to integer luma."""
    red, green, blue = LUMA_WEIGHTS
    rgb = pixels[..., :3].astype(np.float64)
    luma = rgb[..., 0] * red + rgb[..., 1] * green + rgb[..., 2] * blue
    return np.floor(luma + 0.5).astype(np.int32)


def sobel_edges(gray: np.ndarray, threshold: float) -> np.ndarray:
    """Return a binary edge map (0 or 255) from a 3x3 Sobel gradient magnitude.

    Border pixels never count as edges.
    """
    height, width = gray.shape
    edges = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:  # noqa: PLR2004
        return edges

    g = gray.astype(np.int32)
    top_left, top, top_right = g[:-2, :-2], g[:-2, 1:-1], g[:-2, 2:]
    left, right = g[1:-1, :-2], g[1:-1, 2:]
    bottom_left, bottom, bottom_right = g[2:, :-2], g[2:, 1:-1], g[2:, 2:]

    gx = (top_right + 2 * right + bottom_right) - (top_left + 2 * left + bottom_left)
    gy = (bottom_left + 2 * bottom + bottom_right) - (top_left + 2 * top + top_right)
    magnitude = np.hypot(gx, gy)
    edges[1:-1, 1:-1] = np.where(magnitude > threshold, EDGE_VALUE, 0)
    return edges


class ComponentArena:
    """Preallocated buffers for bounded 4-connected flood fill.

    The visited mask is shared across fills so every edge pixel is claimed by
    at most one component.
    """

    def __init__(
        self, width: int, height: int, max_points: int = MAX_COMPONENT_POINTS
    ) -> None:
        self.width = width
        self.height = height
        self.max_points = max_points
        self.visited = np.zeros(width * height, dtype=bool)
        # Each accepted point pushes at most four neighbours.
        self._stack = np.empty(_NEIGHBOURS * max_points + 1, dtype=np.int64)
        self._points = np.empty(max_points, dtype=np.int64)

    def fill(self, is_edge: np.ndarray, start: int) -> np.ndarray:
        """Collect up to ``max_points`` connected edge pixels from ``start``.

        The returned flat indices are a view that the next fill overwrites.
        """
        width, height = self.width, self.height
        stack, points, visited = self._stack, self._points, self.visited
        stack[0] = start
        top = 1
        count = 0
        while top > 0 and count < self.max_points:
            top -= 1
            index = int(stack[top])
            if visited[index] or not is_edge[index]:
                continue
            visited[index] = True
            points[count] = index
            count += 1

            y, x = divmod(index, width)
            if x + 1 < width:
                stack[top] = index + 1
                top += 1
            if x > 0:
                stack[top] = index - 1
                top += 1
            if y + 1 < height:
                stack[top] = index + width
                top += 1
            if y > 0:
                stack[top] = index - width
                top += 1
        return points[:count]


def find_components(
    edges: np.ndarray,
    deadline: float | None = None,
    min_points: int = MIN_COMPONENT_POINTS,
    max_points: int = MAX_COMPONENT_POINTS,
) -> list[EdgeComponent]:
    """Label connected edge runs in row-major scan order."""
    height, width = edges.shape
    is_edge = (edges == EDGE_VALUE).ravel()
    arena = ComponentArena(width, height, max_points=max_points)
    components: list[EdgeComponent] = []

    for scanned, start in enumerate(np.flatnonzero(is_edge)):
        if scanned % _DEADLINE_CHECK_INTERVAL == 0:
            check_deadline(deadline)
        if arena.visited[start]:
            continue
        indices = arena.fill(is_edge, int(start))
        if len(indices) < min_points:
            continue
        ys, xs = np.divmod(indices, width)
        min_x, min_y = int(xs.min()), int(ys.min())
        components.append(
            EdgeComponent(
                point_count=len(indices),
                bounding_box=BoundingBox(
                    x=min_x,
                    y=min_y,
                    width=int(xs.max()) - min_x,
                    height=int(ys.max()) - min_y,
                ),
            )
        )
    return components
