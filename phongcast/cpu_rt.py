import math
import multiprocessing as mp
import time
from typing import Iterable, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from phongcast.app import App
from phongcast.common import MAX_DISTANCE, Color, Hit, Light, Settings, Sphere, Vec3, World
from phongcast.vector import add, dot, normalize, reflect, scale, sub

CAMERA_ORIGIN: Vec3 = (0.0, 0.0, 0.0)


def ray_intersect(origin: Vec3, direction: Vec3, sphere: Sphere) -> Optional[float]:
    # Vector from the ray origin to the sphere center, projected onto the ray
    L = sub(sphere.center, origin)
    tca = dot(L, direction)
    d2 = dot(L, L) - tca * tca

    r2 = sphere.radius * sphere.radius
    if d2 > r2:
        return None

    thc = math.sqrt(r2 - d2)
    t = tca - thc
    if t < 0:
        # near root is behind the origin
        t = tca + thc
    if t < 0:
        return None

    return t


def scene_intersect(origin: Vec3, direction: Vec3, spheres: Iterable[Sphere]) -> Optional[Hit]:
    dist_to_nearest = math.inf
    nearest: Optional[Hit] = None
    for sphere in spheres:
        dist = ray_intersect(origin, direction, sphere)
        # strict comparison: on ties the earlier sphere wins
        if dist is not None and dist < dist_to_nearest:
            dist_to_nearest = dist
            point = add(origin, scale(direction, dist))
            nearest = Hit(
                point=point,
                normal=normalize(sub(point, sphere.center)),
                material=sphere.material,
            )

    if dist_to_nearest >= MAX_DISTANCE:
        return None

    return nearest


def shade(hit: Optional[Hit], lights: Iterable[Light], direction: Vec3, background: Color) -> Color:
    if hit is None:
        return background

    diffuse_intensity = 0.0
    specular_intensity = 0.0
    for light in lights:
        light_dir = normalize(sub(light.position, hit.point))
        diffuse_intensity += light.intensity * max(0.0, dot(light_dir, hit.normal))

        reflected = reflect(scale(light_dir, -1.0), hit.normal)
        specular_intensity += max(0.0, -dot(reflected, direction)) ** hit.material.specular_exponent * light.intensity

    material = hit.material
    k = diffuse_intensity * material.albedo[0] + specular_intensity * material.albedo[1]
    r, g, b = material.diffuse_color
    return int(min(255.0, r * k)), int(min(255.0, g * k)), int(min(255.0, b * k))


def cast_ray(origin: Vec3, direction: Vec3, world: World) -> Color:
    hit = scene_intersect(origin, direction, world.spheres)
    return shade(hit, world.lights, direction, world.background)


def camera_direction(i: int, j: int, width: int, height: int, fov: float) -> Vec3:
    half_height = math.tan(fov / 2.0)
    x = (2 * (i + 0.5) / width - 1) * half_height * width / height
    y = -(2 * (j + 0.5) / height - 1) * half_height
    return normalize((x, y, -1.0))


def render_rows(world: World, settings: Settings, y_start: int, y_end: int) -> NDArray[np.uint8]:
    """Render the rows ``[y_start, y_end)`` of the frame.

    Returns a ``(y_end - y_start, width, 3)`` uint8 block, top row first.
    """
    block = np.zeros((y_end - y_start, settings.width, 3), dtype=np.uint8)
    for j in range(y_start, y_end):
        for i in range(settings.width):
            direction = camera_direction(i, j, settings.width, settings.height, settings.fov)
            block[j - y_start, i, :] = cast_ray(CAMERA_ORIGIN, direction, world)
    return block


def row_chunks(height: int, workers: int) -> List[Tuple[int, int]]:
    # 4 chunks per worker for load balancing
    rows_per_chunk = max(1, height // (workers * 4))
    return [(y_start, min(y_start + rows_per_chunk, height)) for y_start in range(0, height, rows_per_chunk)]


def _render_chunk(args):
    world, settings, y_start, y_end = args
    return y_start, y_end, render_rows(world, settings, y_start, y_end)


class CpuApp(App):
    def run(self):
        if self.settings.workers > 1:
            self._run_parallel()
        else:
            self._run_sequential()

    def _run_sequential(self):
        height = self.settings.height
        start_time = time.time()
        for y in range(height):
            self.image[y:y + 1] = render_rows(self.world, self.settings, y, y + 1)

            if self.settings.verbose and ((y + 1) % 10 == 0 or y == height - 1):
                elapsed = time.time() - start_time
                print(f"Row {y + 1}/{height} ({(y + 1) / height * 100:.1f}%) - {elapsed:.1f}s")

    def _run_parallel(self):
        chunks = [
            (self.world, self.settings, y_start, y_end)
            for y_start, y_end in row_chunks(self.settings.height, self.settings.workers)
        ]
        if self.settings.verbose:
            print(f"Rendering {len(chunks)} row chunks with {self.settings.workers} workers")

        # forked children deadlock once numba has started its threading layer
        with mp.get_context("spawn").Pool(self.settings.workers) as pool:
            results = pool.map(_render_chunk, chunks)

        for y_start, y_end, block in results:
            self.image[y_start:y_end] = block
