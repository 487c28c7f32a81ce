"""
Collision avoidance for new placements.

Positions are dicts with x, y and z keys. Only the floor plane (x, z) is
used for collisions.
"""
import math
from typing import Dict, Iterable, List, Optional, Tuple

DEFAULT_FOOTPRINT_RADIUS = 0.4
CLEARANCE = 0.02
MAX_ATTEMPTS = 100
SEARCH_RADIUS = 20
ANGLE_STEP = math.pi / 4

# Duplicated bundles keep a little more room around them
BUNDLE_CLEARANCE = 0.1
BUNDLE_MAX_ATTEMPTS = 50
MIN_BUNDLE_SIZE = 0.5

Position = Dict[str, float]
Obstacle = Tuple[Position, float]


def footprint_radius(design_element) -> float:
    radius = design_element.footprint_radius if design_element is not None else None
    return radius or DEFAULT_FOOTPRINT_RADIUS


def _collides(candidate: Position, radius: float, obstacles: Iterable[Obstacle]) -> bool:
    for position, other_radius in obstacles:
        distance = math.hypot(candidate['x'] - position['x'], candidate['z'] - position['z'])
        if distance < max(0.1, radius + other_radius - CLEARANCE):
            return True
    return False


def find_non_overlapping_position(desired: Position, obstacles: List[Obstacle], radius: float) -> Position:
    """
    Walk a spiral around `desired` until a spot clears every obstacle.

    Returns `desired` unchanged when no free spot turns up.
    """
    step = radius * 2 + CLEARANCE
    candidate = dict(desired)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        if not _collides(candidate, radius, obstacles):
            return candidate

        ring = math.isqrt(attempt)
        angle = (attempt - ring * ring) * ANGLE_STEP
        distance = ring * step
        candidate = {
            'x': desired['x'] + distance * math.cos(angle),
            'y': desired['y'],
            'z': desired['z'] + distance * math.sin(angle),
        }

        if math.hypot(candidate['x'], candidate['z']) > SEARCH_RADIUS:
            candidate = {
                'x': desired['x'] + (ring % 4) * step,
                'y': desired['y'],
                'z': desired['z'] + (ring // 4) * step,
            }

    return dict(desired)


def bundle_bounds(positions: List[Position]) -> dict:
    xs = [position['x'] for position in positions]
    zs = [position['z'] for position in positions]
    width = max(max(xs) - min(xs), MIN_BUNDLE_SIZE)
    depth = max(max(zs) - min(zs), MIN_BUNDLE_SIZE)
    return {
        'center': {
            'x': (min(xs) + max(xs)) / 2,
            'y': positions[0]['y'],
            'z': (min(zs) + max(zs)) / 2,
        },
        'width': width,
        'depth': depth,
        'offset': max(width, depth) + BUNDLE_CLEARANCE,
    }


def find_bundle_offset(bundle_positions: List[Position], others: List[Position]) -> Optional[Position]:
    """
    Offset (dx, dz) that moves a copy of a bundle clear of `others`.

    The copy starts one bundle-width to the right and spirals around the
    original bundle from there.
    """
    if not bundle_positions:
        return None

    bounds = bundle_bounds(bundle_positions)
    center = bounds['center']
    reference = bundle_positions[0]
    half_width = bounds['width'] / 2
    half_depth = bounds['depth'] / 2
    threshold = DEFAULT_FOOTPRINT_RADIUS + BUNDLE_CLEARANCE

    def overlaps(test: Position) -> bool:
        for position in others:
            if (position['x'] + threshold >= test['x'] - half_width
                    and position['x'] - threshold <= test['x'] + half_width
                    and position['z'] + threshold >= test['z'] - half_depth
                    and position['z'] - threshold <= test['z'] + half_depth):
                return True
        return False

    candidate = {'x': center['x'] + bounds['offset'], 'y': center['y'], 'z': center['z']}
    for attempt in range(1, BUNDLE_MAX_ATTEMPTS + 1):
        if not overlaps(candidate):
            break
        ring = math.isqrt(attempt)
        angle = (attempt - ring * ring) * ANGLE_STEP
        distance = ring * bounds['offset']
        candidate = {
            'x': reference['x'] + distance * math.cos(angle),
            'y': reference['y'],
            'z': reference['z'] + distance * math.sin(angle),
        }

    return {'x': candidate['x'] - center['x'], 'z': candidate['z'] - center['z']}
