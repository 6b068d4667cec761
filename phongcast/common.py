import math
from dataclasses import dataclass
from typing import Tuple

Vec3 = Tuple[float, float, float]
Color = Tuple[int, int, int]

BACKGROUND_COLOR: Color = (5, 100, 250)

# Hits at or beyond this distance are treated as "nothing in the scene".
MAX_DISTANCE = 1000.0


@dataclass(frozen=True)
class Settings:
    width: int = 1024
    height: int = 768
    fov: float = math.pi / 2
    output: str = "render.ppm"
    workers: int = 1
    verbose: bool = False

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.fov < math.pi:
            raise ValueError(f"Field of view must be in (0, pi) radians, got {self.fov}")
        if self.workers < 1:
            raise ValueError(f"Worker count must be at least 1, got {self.workers}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class Material:
    diffuse_color: Vec3
    albedo: Tuple[float, float]
    specular_exponent: float


@dataclass(frozen=True)
class Sphere:
    center: Vec3
    radius: float
    material: Material


@dataclass(frozen=True)
class Light:
    position: Vec3
    intensity: float


@dataclass(frozen=True)
class World:
    spheres: Tuple[Sphere, ...]
    lights: Tuple[Light, ...]
    background: Color = BACKGROUND_COLOR


@dataclass(frozen=True)
class Hit:
    point: Vec3
    normal: Vec3
    material: Material
