"""Reference object detection for establishing image scale.

A credit card is searched for first: edge components whose bounding box has
the card's aspect ratio are scored by size, aspect match and edge fill. When
no convincing card is found, circles are located by letting every edge pixel
vote for candidate centers and the strongest plausible circle is taken as a
coin of a known denomination.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from local_estimation.domain.reference import (
    COIN_TYPES,
    REFERENCE_DIMENSIONS,
    Corners,
    DetectedReference,
    PixelBuffer,
    Point,
    ReferenceObjectType,
)
from local_estimation.numeric import round_int
from local_estimation.services.edges import (
    EDGE_VALUE,
    EdgeComponent,
    check_deadline,
    downscale,
    find_components,
    sobel_edges,
    to_grayscale,
)

_CARD = REFERENCE_DIMENSIONS[ReferenceObjectType.CREDIT_CARD]
CARD_ASPECT_RATIO = _CARD.width_mm / _CARD.height_mm
CARD_ASPECT_TOLERANCE = 0.15
CARD_ACCEPT_CONFIDENCE = 0.5
COIN_ACCEPT_CONFIDENCE = 0.4

MIN_RELATIVE_AREA = 0.01
MAX_RELATIVE_AREA = 0.5
MIN_RECTANGLE_ASPECT = 0.5
MAX_RECTANGLE_ASPECT = 3.0
FULL_SIZE_AREA_FRACTION = 0.1

VOTE_ANGLES = 16
CENTER_BIN_PX = 5
RADIUS_STEP_PX = 3
SEARCH_RADIUS_FRACTIONS = (0.02, 0.25)
PLAUSIBLE_RADIUS_FRACTIONS = (0.03, 0.2)
MIN_CIRCLE_VOTES = 10
MAX_CIRCLES = 5
FULL_CONFIDENCE_VOTES = 50

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RectangleCandidate:
    """Rectangular edge component in processing-image pixels."""

    corners: Corners
    width: int
    height: int
    aspect_ratio: float
    area: int
    confidence: float


@dataclass(frozen=True)
class CircleCandidate:
    """Quantized circle with its accumulated votes."""

    x: int
    y: int
    radius: int
    votes: int


def is_card_aspect(aspect_ratio: float) -> bool:
    """Return True when a ratio is within tolerance of a credit card's."""
    deviation = abs(aspect_ratio - CARD_ASPECT_RATIO) / CARD_ASPECT_RATIO
    return deviation < CARD_ASPECT_TOLERANCE


def find_rectangles(
    components: list[EdgeComponent], image_width: int, image_height: int
) -> list[RectangleCandidate]:
    """Keep components whose bounding box is a plausibly sized rectangle."""
    image_area = image_width * image_height
    rectangles: list[RectangleCandidate] = []
    for component in components:
        box = component.bounding_box
        relative_area = box.area / image_area
        if relative_area < MIN_RELATIVE_AREA or relative_area > MAX_RELATIVE_AREA:
            continue
        aspect_ratio = box.width / box.height
        if aspect_ratio < MIN_RECTANGLE_ASPECT or aspect_ratio > MAX_RECTANGLE_ASPECT:
            continue

        fill_ratio = component.point_count / (box.width * 2 + box.height * 2)
        rectangles.append(
            RectangleCandidate(
                corners=(
                    Point(box.x, box.y),
                    Point(box.x + box.width, box.y),
                    Point(box.x + box.width, box.y + box.height),
                    Point(box.x, box.y + box.height),
                ),
                width=box.width,
                height=box.height,
                aspect_ratio=aspect_ratio,
                area=box.area,
                confidence=min(1.0, fill_ratio),
            )
        )
    return rectangles


def detect_circles(
    edges: np.ndarray, deadline: float | None = None
) -> list[CircleCandidate]:
    """Vote for circle centers from every edge pixel.

    Votes land in a fixed accumulator of 5 px center bins per sampled radius,
    so memory is bounded by image size rather than edge density.
    """
    height, width = edges.shape
    ys, xs = np.nonzero(edges == EDGE_VALUE)
    shorter = min(width, height)
    min_radius = round_int(shorter * SEARCH_RADIUS_FRACTIONS[0])
    max_radius = round_int(shorter * SEARCH_RADIUS_FRACTIONS[1])
    radii = np.arange(min_radius, max_radius + 1, RADIUS_STEP_PX)
    if xs.size == 0 or radii.size == 0:
        return []

    xs = xs.astype(np.float64)
    ys = ys.astype(np.float64)
    angles = np.arange(VOTE_ANGLES) * (2 * math.pi / VOTE_ANGLES)
    accumulator = np.zeros(
        (radii.size, height // CENTER_BIN_PX + 2, width // CENTER_BIN_PX + 2),
        dtype=np.int32,
    )

    for radius_index, radius in enumerate(radii):
        check_deadline(deadline)
        votes = accumulator[radius_index]
        for angle in angles:
            cx = np.floor(xs + radius * math.cos(angle) + 0.5)
            cy = np.floor(ys + radius * math.sin(angle) + 0.5)
            inside = (cx >= 0) & (cx < width) & (cy >= 0) & (cy < height)
            bin_x = np.floor(cx[inside] / CENTER_BIN_PX + 0.5).astype(np.intp)
            bin_y = np.floor(cy[inside] / CENTER_BIN_PX + 0.5).astype(np.intp)
            np.add.at(votes, (bin_y, bin_x), 1)

    radius_bins, bin_ys, bin_xs = np.nonzero(accumulator > MIN_CIRCLE_VOTES)
    counts = accumulator[radius_bins, bin_ys, bin_xs]
    order = np.argsort(-counts, kind="stable")[:MAX_CIRCLES]
    return [
        CircleCandidate(
            x=int(bin_xs[i]) * CENTER_BIN_PX,
            y=int(bin_ys[i]) * CENTER_BIN_PX,
            radius=round_int(radii[radius_bins[i]] / RADIUS_STEP_PX) * RADIUS_STEP_PX,
            votes=int(counts[i]),
        )
        for i in order
    ]


@dataclass
class ReferenceDetector:
    """Locates a credit card or coin and derives pixels per millimeter."""

    max_dimension: int = 800
    edge_threshold: float = 50.0
    coin_type: ReferenceObjectType = ReferenceObjectType.COIN_AU_DOLLAR
    debug: bool = False

    def detect(
        self,
        image: PixelBuffer,
        *,
        coin_type: ReferenceObjectType | None = None,
        deadline: float | None = None,
    ) -> DetectedReference | None:
        """Detect a reference object, preferring a confident card over a coin.

        ``deadline`` is a ``time.monotonic()`` timestamp; passing it makes the
        scan raise ``DetectionTimeoutError`` once exceeded.
        """
        resolved_coin = coin_type or self.coin_type
        if resolved_coin not in COIN_TYPES:
            raise ValueError(f"{resolved_coin} is not a coin reference type")

        pixels, scale = downscale(image, self.max_dimension)
        edges = sobel_edges(to_grayscale(pixels), self.edge_threshold)

        card = self._detect_card(edges, scale, deadline)
        if card is not None and card.confidence > CARD_ACCEPT_CONFIDENCE:
            return card

        coin = self._detect_coin(edges, scale, resolved_coin, deadline)
        if coin is not None and coin.confidence > COIN_ACCEPT_CONFIDENCE:
            return coin

        return card

    def create_manual_reference(
        self,
        corners: Corners,
        reference_type: ReferenceObjectType,
        width_mm: float | None = None,
    ) -> DetectedReference:
        """Build a reference from operator-supplied corners.

        Corners run clockwise from top-left; the pixel width is the mean of the
        top and bottom edges.
        """
        physical_width = width_mm or REFERENCE_DIMENSIONS[reference_type].width_mm
        if physical_width <= 0:
            raise ValueError("A custom reference needs a positive width in mm")

        top_width = math.dist(
            (corners[1].x, corners[1].y), (corners[0].x, corners[0].y)
        )
        bottom_width = math.dist(
            (corners[2].x, corners[2].y), (corners[3].x, corners[3].y)
        )
        average_width = (top_width + bottom_width) / 2
        if average_width <= 0:
            raise ValueError("Reference corners must span a positive width")
        return DetectedReference(
            type=reference_type,
            corners=corners,
            pixels_per_mm=average_width / physical_width,
            confidence=1.0,
        )

    def _detect_card(
        self, edges: np.ndarray, scale: float, deadline: float | None
    ) -> DetectedReference | None:
        height, width = edges.shape
        components = find_components(edges, deadline)
        rectangles = find_rectangles(components, width, height)
        candidates = [rect for rect in rectangles if is_card_aspect(rect.aspect_ratio)]
        if self.debug:
            _logger.info(
                "Card search: components=%s rectangles=%s candidates=%s",
                len(components),
                len(rectangles),
                len(candidates),
            )
        if not candidates:
            return None

        full_size_area = width * height * FULL_SIZE_AREA_FRACTION

        def score(rect: RectangleCandidate) -> float:
            size_score = min(1.0, rect.area / full_size_area)
            aspect_score = (
                1 - abs(rect.aspect_ratio - CARD_ASPECT_RATIO) / CARD_ASPECT_RATIO
            )
            return size_score * 0.4 + aspect_score * 0.4 + rect.confidence * 0.2

        best = max(candidates, key=score)
        corners = tuple(Point(c.x / scale, c.y / scale) for c in best.corners)
        return DetectedReference(
            type=ReferenceObjectType.CREDIT_CARD,
            corners=corners,  # type: ignore[arg-type]
            pixels_per_mm=(best.width / scale) / _CARD.width_mm,
            confidence=score(best),
        )

    def _detect_coin(
        self,
        edges: np.ndarray,
        scale: float,
        coin_type: ReferenceObjectType,
        deadline: float | None,
    ) -> DetectedReference | None:
        height, width = edges.shape
        circles = detect_circles(edges, deadline)
        shorter = min(width, height)
        min_radius = shorter * PLAUSIBLE_RADIUS_FRACTIONS[0]
        max_radius = shorter * PLAUSIBLE_RADIUS_FRACTIONS[1]
        plausible = [c for c in circles if min_radius <= c.radius <= max_radius]
        if self.debug:
            _logger.info(
                "Coin search: circles=%s plausible=%s", len(circles), len(plausible)
            )
        if not plausible:
            return None

        best = max(plausible, key=lambda circle: circle.votes)
        radius = best.radius / scale
        cx = best.x / scale
        cy = best.y / scale
        diameter_mm = REFERENCE_DIMENSIONS[coin_type].width_mm
        return DetectedReference(
            type=coin_type,
            corners=(
                Point(cx - radius, cy - radius),
                Point(cx + radius, cy - radius),
                Point(cx + radius, cy + radius),
                Point(cx - radius, cy + radius),
            ),
            pixels_per_mm=(best.radius * 2) / scale / diameter_mm,
            confidence=min(1.0, best.votes / FULL_CONFIDENCE_VOTES),
        )
