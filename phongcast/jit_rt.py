import math
from typing import Tuple

import numba
import numpy as np
from numpy.typing import NDArray

from phongcast import vector
from phongcast.app import App
from phongcast.common import MAX_DISTANCE, World

# Packed sphere row: center (3), radius, diffuse color (3), albedo (2), specular exponent
SPHERE_FIELDS = 10
# Packed light row: position (3), intensity
LIGHT_FIELDS = 4

add = numba.njit(vector.add)
sub = numba.njit(vector.sub)
scale = numba.njit(vector.scale)
dot = numba.njit(vector.dot)
normalize = numba.njit(vector.normalize)
reflect = numba.njit(vector.reflect)


@numba.njit
def to_tuple(array, offset):
    return array[offset], array[offset + 1], array[offset + 2]


@numba.njit
def intersect(center, radius, ray_origin, ray_dir):
    """Distance to the sphere along the ray.

    Any negative value is a miss: either -1.0 when the ray passes outside the
    sphere, or the far root when the whole sphere lies behind the origin.
    """
    L = sub(center, ray_origin)
    tca = dot(L, ray_dir)
    d2 = dot(L, L) - tca * tca

    r2 = radius * radius
    if d2 > r2:
        return -1.0

    thc = math.sqrt(r2 - d2)
    t = tca - thc
    if t < 0:
        t = tca + thc
    return t


@numba.njit
def cast_ray(spheres, lights, ray_origin, ray_dir, background):
    dist_to_nearest = math.inf
    nearest = -1
    for k in range(spheres.shape[0]):
        dist = intersect(to_tuple(spheres[k], 0), spheres[k, 3], ray_origin, ray_dir)
        if dist >= 0 and dist < dist_to_nearest:
            dist_to_nearest = dist
            nearest = k

    if nearest == -1 or dist_to_nearest >= MAX_DISTANCE:
        return background

    sphere = spheres[nearest]
    point = add(ray_origin, scale(ray_dir, dist_to_nearest))
    normal = normalize(sub(point, to_tuple(sphere, 0)))

    diffuse_intensity = 0.0
    specular_intensity = 0.0
    for k in range(lights.shape[0]):
        intensity = lights[k, 3]
        light_dir = normalize(sub(to_tuple(lights[k], 0), point))
        diffuse_intensity += intensity * max(0.0, dot(light_dir, normal))

        reflected = reflect(scale(light_dir, -1.0), normal)
        specular_intensity += max(0.0, -dot(reflected, ray_dir)) ** sphere[9] * intensity

    factor = diffuse_intensity * sphere[7] + specular_intensity * sphere[8]
    return (
        int(min(255.0, sphere[4] * factor)),
        int(min(255.0, sphere[5] * factor)),
        int(min(255.0, sphere[6] * factor)),
    )


@numba.njit
def camera_direction(i, j, width, height, fov):
    half_height = math.tan(fov / 2.0)
    x = (2 * (i + 0.5) / width - 1) * half_height * width / height
    y = -(2 * (j + 0.5) / height - 1) * half_height
    return normalize((x, y, -1.0))


@numba.njit(parallel=True)
def generate_image(image, spheres, lights, fov, background):
    height, width, _ = image.shape
    origin = (0.0, 0.0, 0.0)

    for j in numba.prange(height):
        for i in range(width):
            ray_dir = camera_direction(i, j, width, height, fov)
            r, g, b = cast_ray(spheres, lights, origin, ray_dir, background)
            image[j, i, 0] = r
            image[j, i, 1] = g
            image[j, i, 2] = b


def world_to_arrays(world: World) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    spheres = np.array(
        [
            (
                *s.center,
                s.radius,
                *s.material.diffuse_color,
                *s.material.albedo,
                s.material.specular_exponent,
            )
            for s in world.spheres
        ],
        dtype=np.float64,
    ).reshape(-1, SPHERE_FIELDS)

    lights = np.array(
        [(*light.position, light.intensity) for light in world.lights],
        dtype=np.float64,
    ).reshape(-1, LIGHT_FIELDS)

    return spheres, lights


class JitApp(App):
    def run(self):
        spheres, lights = world_to_arrays(self.world)
        if self.settings.verbose:
            print(f"Compiled render of {len(spheres)} spheres and {len(lights)} lights "
                  f"on {numba.get_num_threads()} threads")

        generate_image(
            self.image,
            spheres,
            lights,
            float(self.settings.fov),
            tuple(int(c) for c in self.world.background),
        )
