"""Trackball-style orbit camera and mesh-name stepping for the viewers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from .scene import Transform

_PI = 3.1415926
_MIN_RADIUS = 1e-1
_MAX_RADIUS = 1e6


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _wrap_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi] the way the viewers do."""
    turns = angle / (2.0 * _PI)
    turns -= _round_half_away(turns)
    return turns * (2.0 * _PI)


def _angle_axis(angle: float, axis: tuple[float, float, float]) -> np.ndarray:
    half = angle / 2.0
    s = math.sin(half)
    return np.array([math.cos(half), axis[0] * s, axis[1] * s, axis[2] * s])


def _quat_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    w1, v1 = float(a[0]), np.asarray(a[1:], dtype=float)
    w2, v2 = float(b[0]), np.asarray(b[1:], dtype=float)
    w = w1 * w2 - float(np.dot(v1, v2))
    v = w1 * v2 + w2 * v1 + np.cross(v1, v2)
    return np.array([w, v[0], v[1], v[2]])


def _rotate(q: np.ndarray, vector: np.ndarray) -> np.ndarray:
    u = np.asarray(q[1:], dtype=float)
    w = float(q[0])
    v = np.asarray(vector, dtype=float)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


@dataclass
class OrbitCamera:
    """Z-up camera orbiting a target point.

    ``azimuth`` is the angle counter-clockwise of the -y axis and ``elevation``
    the angle above the ground, both in radians within [-pi, pi].
    """

    radius: float = 2.0
    azimuth: float = 0.3
    elevation: float = 0.2
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    flip_x: bool = False

    def begin_drag(self) -> None:
        """Start a drag; horizontal motion is reversed while upside-down."""
        self.flip_x = abs(self.elevation) > 0.5 * _PI

    def drag(
        self,
        xrel: float,
        yrel: float,
        window_size: tuple[int, int],
        pan: bool = False,
        frame: Optional[np.ndarray] = None,
    ) -> None:
        """Apply a mouse motion of (xrel, yrel) window pixels.

        With ``pan`` the target moves in the plane of the camera's ``frame``
        (a 3x3 matrix whose columns are the camera's x, y, z axes); otherwise
        the camera tumbles around the target.
        """
        width, height = window_size
        if width <= 0 or height <= 0:
            raise ValueError(f"window size must be positive, got {width}x{height}")
        dx = xrel / float(width) * 2.0
        dx *= float(height) / float(width)
        dy = yrel / float(height) * -2.0

        if pan:
            if frame is None:
                raise ValueError("panning needs the camera frame")
            axes = np.asarray(frame, dtype=float)
            self.target = np.asarray(self.target, dtype=float) - (
                axes[:, 0] * (dx * self.radius) + axes[:, 1] * (dy * self.radius)
            )
        else:
            self.azimuth -= 3.0 * dx * (-1.0 if self.flip_x else 1.0)
            self.elevation -= 3.0 * dy
            self.azimuth = _wrap_angle(self.azimuth)
            self.elevation = _wrap_angle(self.elevation)

    def wheel(self, amount: float) -> None:
        """Dolly in (positive ``amount``) or out, keeping the radius in range."""
        self.radius *= math.pow(0.5, 0.1 * amount)
        self.radius = min(max(self.radius, _MIN_RADIUS), _MAX_RADIUS)

    def apply(self, transform: Transform) -> None:
        """Place ``transform`` at the camera's position, looking at the target."""
        rotation = _quat_mul(
            _angle_axis(self.azimuth, (0.0, 0.0, 1.0)),
            _angle_axis(0.5 * _PI - self.elevation, (1.0, 0.0, 0.0)),
        )
        transform.rotation = rotation
        transform.position = np.asarray(self.target, dtype=float) + self.radius * _rotate(
            rotation, np.array([0.0, 0.0, 1.0])
        )
        transform.scale = np.ones(3)


def prev_name(names: Iterable[str], current: str) -> Optional[str]:
    """Name before ``current`` in sorted order.

    Stays on the first name at the start, gives the first name when
    ``current`` is unknown, and None when there are no names.
    """
    ordered = sorted(set(names))
    if not ordered:
        return None
    if current in ordered:
        index = ordered.index(current)
        return ordered[max(index - 1, 0)]
    return ordered[0]


def next_name(names: Iterable[str], current: str) -> Optional[str]:
    """Name after ``current`` in sorted order.

    Stays on the last name at the end, gives the last name when ``current``
    is unknown, and None when there are no names.
    """
    ordered = sorted(set(names))
    if not ordered:
        return None
    if current in ordered:
        index = ordered.index(current)
        return ordered[min(index + 1, len(ordered) - 1)]
    return ordered[-1]