from typing import Optional

import numpy as np

from phongcast.common import Light, Material, Settings, Sphere, World
from phongcast.ppm import write_ppm


class App:
    def __init__(self, settings: Settings, world: Optional[World] = None):
        self.settings = settings

        self.image = np.zeros(
            (settings.height, settings.width, 3),
            dtype=np.uint8,
        )

        self.world = world if world is not None else self.create_world()

    def run(self):
        raise NotImplementedError

    def save(self, path: Optional[str] = None) -> str:
        path = path or self.settings.output
        write_ppm(path, self.image)
        return path

    def create_world(self) -> World:
        red = Material(
            diffuse_color=(255.0, 0.0, 0.0),
            albedo=(0.6, 0.3),
            specular_exponent=50.0,
        )
        pink = Material(
            diffuse_color=(150.0, 10.0, 150.0),
            albedo=(0.9, 0.5),
            specular_exponent=50.0,
        )
        gold = Material(
            diffuse_color=(255.0, 195.0, 0.0),
            albedo=(0.6, 0.4),
            specular_exponent=50.0,
        )

        small_gold = Sphere(center=(-6.0, 0.0, -16.0), radius=2.0, material=gold)
        big_red = Sphere(center=(-1.0, -1.5, -12.0), radius=3.0, material=red)
        far_pink = Sphere(center=(7.0, 5.0, -18.0), radius=2.0, material=pink)

        left_light = Light(position=(-20.0, 20.0, 20.0), intensity=1.25)
        top_light = Light(position=(0.0, 20.0, 0.0), intensity=1.0)

        return World(
            spheres=(small_gold, big_red, far_pink),
            lights=(left_light, top_light),
        )
