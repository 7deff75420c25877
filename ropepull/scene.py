"""A hierarchy of transforms with attached drawables, cameras and lights.

Scenes can be loaded from the chunked ``.scene`` file format, which holds
(in order) the chunks ``str0`` (names), ``xfh0`` (transform hierarchy),
``msh0`` (mesh references), ``cam0`` (cameras) and ``lmp0`` (lamps).
"""

from __future__ import annotations

import dataclasses
import enum
import math
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional

import numpy as np

from .chunks import read_chunk

GL_TRIANGLES = 0x0004
GL_TEXTURE_2D = 0x0DE1
NO_LOCATION = 0xFFFFFFFF
TEXTURE_COUNT = 4

_NO_PARENT = 0xFFFFFFFF
_PI = 3.1415926

_HIERARCHY_FORMAT = "<3I3f4f3f"
_MESH_FORMAT = "<3I"
_CAMERA_FORMAT = "<I4s3f"
_LIGHT_FORMAT = "<Ic3B3f"


def _pad(matrix: np.ndarray) -> np.ndarray:
    """Extend a 3x4 affine matrix to 4x4 with a (0, 0, 0, 1) bottom row."""
    return np.vstack([matrix, [0.0, 0.0, 0.0, 1.0]])


def _quat_to_matrix(q: np.ndarray) -> np.ndarray:
    w, x, y, z = (float(v) for v in q)
    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
            [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
            [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
        ]
    )


def _quat_inverse(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    return np.array([q[0], -q[1], -q[2], -q[3]]) / float(np.dot(q, q))


@dataclass(eq=False)
class Transform:
    """Position, rotation (quaternion as w, x, y, z) and scale relative to a parent."""

    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    parent: Optional["Transform"] = None

    def make_local_to_parent(self) -> np.ndarray:
        """3x4 matrix: translate * rotate * scale."""
        rot = _quat_to_matrix(self.rotation)
        linear = rot * np.asarray(self.scale, dtype=float)[np.newaxis, :]
        return np.hstack([linear, np.asarray(self.position, dtype=float).reshape(3, 1)])

    def make_parent_to_local(self) -> np.ndarray:
        """3x4 matrix: 1/scale * rotate^-1 * translate^-1 (zero scale gives zero rows)."""
        inv_scale = np.array([0.0 if s == 0.0 else 1.0 / s for s in self.scale])
        inv_rot = _quat_to_matrix(_quat_inverse(self.rotation))
        linear = inv_rot * inv_scale[:, np.newaxis]
        translation = linear @ -np.asarray(self.position, dtype=float)
        return np.hstack([linear, translation.reshape(3, 1)])

    def make_local_to_world(self) -> np.ndarray:
        if self.parent is None:
            return self.make_local_to_parent()
        return self.parent.make_local_to_world() @ _pad(self.make_local_to_parent())

    def make_world_to_local(self) -> np.ndarray:
        if self.parent is None:
            return self.make_parent_to_local()
        return self.make_parent_to_local() @ _pad(self.parent.make_world_to_local())


@dataclass
class TextureInfo:
    texture: int = 0
    target: int = GL_TEXTURE_2D


@dataclass
class Pipeline:
    """Everything needed to draw one object."""

    program: int = 0
    vao: int = 0
    type: int = GL_TRIANGLES
    start: int = 0
    count: int = 0
    object_to_clip: int = NO_LOCATION
    object_to_light: int = NO_LOCATION
    normal_to_light: int = NO_LOCATION
    set_uniforms: Optional[Callable[[], None]] = None
    textures: list[TextureInfo] = field(
        default_factory=lambda: [TextureInfo() for _ in range(TEXTURE_COUNT)]
    )

    def copy(self) -> "Pipeline":
        return dataclasses.replace(
            self, textures=[dataclasses.replace(t) for t in self.textures]
        )


@dataclass(eq=False)
class Drawable:
    transform: Transform
    pipeline: Pipeline = field(default_factory=Pipeline)


@dataclass(eq=False)
class Camera:
    """Perspective camera looking along its transform's -z axis."""

    transform: Transform
    fovy: float = math.radians(60.0)
    aspect: float = 1.0
    near: float = 0.01

    def make_projection(self) -> np.ndarray:
        """4x4 infinite perspective projection matrix."""
        extent = math.tan(self.fovy / 2.0) * self.near
        left, right = -extent * self.aspect, extent * self.aspect
        bottom, top = -extent, extent
        projection = np.zeros((4, 4))
        projection[0, 0] = (2.0 * self.near) / (right - left)
        projection[1, 1] = (2.0 * self.near) / (top - bottom)
        projection[2, 2] = -1.0
        projection[3, 2] = -1.0
        projection[2, 3] = -2.0 * self.near
        return projection


class LightType(enum.Enum):
    POINT = "p"
    HEMISPHERE = "h"
    SPOT = "s"
    DIRECTIONAL = "d"


@dataclass(eq=False)
class Light:
    transform: Transform
    type: LightType = LightType.POINT
    energy: np.ndarray = field(default_factory=lambda: np.ones(3))
    spot_fov: float = math.radians(45.0)


class SceneFormatError(ValueError):
    """Raised when a scene file holds inconsistent data."""


OnDrawable = Callable[["Scene", Transform, str], None]


def _name_slice(names: bytes, begin: int, end: int) -> Optional[str]:
    if begin <= end <= len(names):
        return names[begin:end].decode("utf-8", errors="replace")
    return None


class Scene:
    """Transforms plus the drawables, cameras and lights attached to them."""

    def __init__(self) -> None:
        self.transforms: list[Transform] = []
        self.drawables: list[Drawable] = []
        self.cameras: list[Camera] = []
        self.lights: list[Light] = []

    @classmethod
    def from_file(cls, path, on_drawable: Optional[OnDrawable] = None) -> "Scene":
        scene = cls()
        scene.load(path, on_drawable)
        return scene

    def load(self, path, on_drawable: Optional[OnDrawable] = None) -> None:
        """Add the contents of a scene file to this scene.

        ``on_drawable(scene, transform, mesh_name)`` is called for every mesh
        entry. Raises ChunkError or SceneFormatError on malformed files.
        """
        with open(path, "rb") as stream:
            names = read_chunk(stream, "str0", None)
            hierarchy = read_chunk(stream, "xfh0", _HIERARCHY_FORMAT)
            meshes = read_chunk(stream, "msh0", _MESH_FORMAT)
            cameras = read_chunk(stream, "cam0", _CAMERA_FORMAT)
            lights = read_chunk(stream, "lmp0", _LIGHT_FORMAT)

            loaded: list[Transform] = []
            for entry in hierarchy:
                parent, name_begin, name_end = entry[0:3]
                px, py, pz, qx, qy, qz, qw, sx, sy, sz = entry[3:]
                transform = Transform()
                if parent != _NO_PARENT:
                    if parent >= len(loaded):
                        raise SceneFormatError(
                            f"scene file '{path}' did not contain transforms in "
                            "topological-sort order."
                        )
                    transform.parent = loaded[parent]
                name = _name_slice(names, name_begin, name_end)
                if name is None:
                    raise SceneFormatError(
                        f"scene file '{path}' contains hierarchy entry with invalid name indices"
                    )
                transform.name = name
                transform.position = np.array([px, py, pz])
                transform.rotation = np.array([qw, qx, qy, qz])
                transform.scale = np.array([sx, sy, sz])
                self.transforms.append(transform)
                loaded.append(transform)

            for index, name_begin, name_end in meshes:
                if index >= len(loaded):
                    raise SceneFormatError(
                        f"scene file '{path}' contains mesh entry with invalid "
                        f"transform index ({index})"
                    )
                name = _name_slice(names, name_begin, name_end)
                if name is None:
                    raise SceneFormatError(
                        f"scene file '{path}' contains mesh entry with invalid name indices"
                    )
                if on_drawable is not None:
                    on_drawable(self, loaded[index], name)

            for index, kind, data, clip_near, _clip_far in cameras:
                if index >= len(loaded):
                    raise SceneFormatError(
                        f"scene file '{path}' contains camera entry with invalid "
                        f"transform index ({index})"
                    )
                kind_text = kind.decode("latin-1")
                if kind_text != "pers":
                    print(f"Ignoring non-perspective camera ({kind_text}) stored in file.")
                    continue
                # far plane is unused: projections are infinite
                self.cameras.append(
                    Camera(loaded[index], fovy=data / 180.0 * _PI, near=clip_near)
                )

            for index, kind, red, green, blue, energy, _distance, fov in lights:
                if index >= len(loaded):
                    raise SceneFormatError(
                        f"scene file '{path}' contains lamp entry with invalid "
                        f"transform index ({index})"
                    )
                kind_text = kind.decode("latin-1")
                try:
                    light_type = LightType(kind_text)
                except ValueError:
                    print(f"Ignoring unrecognized lamp type ({kind_text}) stored in file.")
                    continue
                self.lights.append(
                    Light(
                        loaded[index],
                        type=light_type,
                        energy=np.array([red, green, blue], dtype=float) / 255.0 * energy,
                        spot_fov=fov / 180.0 * _PI,
                    )
                )

            self.load_extra(stream, names, loaded)

    def load_extra(self, stream: BinaryIO, names: bytes, transforms: list[Transform]) -> None:
        """Finish reading a scene file after its main chunks.

        The base scene reads no further chunks and warns when data remains.
        Subclasses that read extra chunks should call this afterwards to keep
        the trailing-data check.
        """
        if stream.read(1):
            source = getattr(stream, "name", "<stream>")
            print(f"WARNING: trailing data in scene file '{source}'", file=sys.stderr)

    def copy(self) -> "Scene":
        """Deep copy with transform references pointing into the copy."""
        return self.copy_with_map()[0]

    def copy_with_map(self) -> tuple["Scene", dict[Optional[Transform], Optional[Transform]]]:
        """Deep copy, also returning the mapping from old to new transforms."""
        result = Scene()
        mapping: dict[Optional[Transform], Optional[Transform]] = {None: None}
        for old in self.transforms:
            new = Transform(
                name=old.name,
                position=np.array(old.position, dtype=float),
                rotation=np.array(old.rotation, dtype=float),
                scale=np.array(old.scale, dtype=float),
                parent=old.parent,
            )
            mapping[old] = new
            result.transforms.append(new)
        for transform in result.transforms:
            transform.parent = mapping[transform.parent]

        result.drawables = [
            Drawable(mapping[d.transform], d.pipeline.copy()) for d in self.drawables
        ]
        result.cameras = [
            dataclasses.replace(c, transform=mapping[c.transform]) for c in self.cameras
        ]
        result.lights = [
            dataclasses.replace(
                light,
                transform=mapping[light.transform],
                energy=np.array(light.energy, dtype=float),
            )
            for light in self.lights
        ]
        return result, mapping