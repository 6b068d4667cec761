import math

import numpy as np
import pytest

from phongcast.app import App
from phongcast.common import BACKGROUND_COLOR, Light, Material, Settings, Sphere, World
from phongcast.cpu_rt import CpuApp, camera_direction, ray_intersect, render_rows, row_chunks
from phongcast.jit_rt import JitApp, world_to_arrays

DIFFUSE_RED = Material(diffuse_color=(255.0, 0.0, 0.0), albedo=(0.6, 0.3), specular_exponent=50.0)

SINGLE_SPHERE = World(
    spheres=(Sphere(center=(0.0, 0.0, -5.0), radius=2.0, material=DIFFUSE_RED),),
    lights=(Light(position=(0.0, 0.0, 0.0), intensity=1.0),),
)

EMPTY = World(spheres=(), lights=())


@pytest.fixture
def small_settings():
    return Settings(width=64, height=48)

# --- Tests for camera_direction ---

def test_center_pixel_looks_down_negative_z():
    assert camera_direction(1, 1, 3, 3, math.pi / 2) == pytest.approx((0.0, 0.0, -1.0))

def test_top_left_pixel_points_up_and_left():
    x, y, z = camera_direction(0, 0, 64, 48, math.pi / 2)
    assert x < 0 and y > 0 and z < 0
    assert x * x + y * y + z * z == pytest.approx(1.0)

def test_horizontal_extent_uses_aspect_ratio():
    # first column of a 4:3 image at 90 degrees
    x, y, z = camera_direction(0, 0, 4, 3, math.pi / 2)
    assert x / -z == pytest.approx(-(1 - 1 / 4) * 4 / 3)
    assert y / -z == pytest.approx(1 - 1 / 3)

# --- Tests for row_chunks ---

@pytest.mark.parametrize("height,workers", [(1, 4), (10, 2), (100, 3), (768, 8)])
def test_row_chunks_cover_every_row_in_order(height, workers):
    chunks = row_chunks(height, workers)
    assert chunks[0][0] == 0
    assert chunks[-1][1] == height
    for (_, end), (start, _) in zip(chunks, chunks[1:]):
        assert end == start

# --- End-to-end tests ---

def test_single_sphere_center_hit_and_corners_background(small_settings):
    app = CpuApp(small_settings, SINGLE_SPHERE)
    app.run()

    assert tuple(app.image[24, 32]) != BACKGROUND_COLOR
    for j, i in [(0, 0), (0, 63), (47, 0), (47, 63)]:
        assert tuple(app.image[j, i]) == BACKGROUND_COLOR

def test_single_sphere_is_lit_where_it_faces_the_light(small_settings):
    block = render_rows(SINGLE_SPHERE, small_settings, 24, 25)
    r, g, b = block[0, 32]
    assert r > 128
    assert g == 0 and b == 0

def test_render_rows_matches_full_frame(small_settings):
    app = CpuApp(small_settings, SINGLE_SPHERE)
    app.run()
    np.testing.assert_array_equal(render_rows(SINGLE_SPHERE, small_settings, 10, 20), app.image[10:20])

def test_empty_scene_is_all_background():
    app = CpuApp(Settings(width=5, height=3), EMPTY)
    app.run()
    assert (app.image == np.array(BACKGROUND_COLOR, dtype=np.uint8)).all()

def test_parallel_cpu_render_matches_sequential():
    settings = Settings(width=24, height=18)
    sequential = CpuApp(settings)
    sequential.run()

    parallel = CpuApp(Settings(width=24, height=18, workers=2))
    parallel.run()

    np.testing.assert_array_equal(parallel.image, sequential.image)

def test_default_world_is_reference_scene(small_settings):
    world = App(small_settings).world
    assert len(world.spheres) == 3
    assert len(world.lights) == 2
    assert world.spheres[1].center == (-1.0, -1.5, -12.0)
    assert world.spheres[1].material.diffuse_color == (255.0, 0.0, 0.0)
    assert world.background == BACKGROUND_COLOR

def test_base_app_run_is_abstract(small_settings):
    with pytest.raises(NotImplementedError):
        App(small_settings).run()

# --- Tests for the numba backend ---

def test_world_to_arrays_layout():
    spheres, lights = world_to_arrays(SINGLE_SPHERE)
    np.testing.assert_array_equal(spheres, [[0, 0, -5, 2, 255, 0, 0, 0.6, 0.3, 50]])
    np.testing.assert_array_equal(lights, [[0, 0, 0, 1]])

def test_world_to_arrays_empty_scene():
    spheres, lights = world_to_arrays(EMPTY)
    assert spheres.shape == (0, 10)
    assert lights.shape == (0, 4)

def test_jit_empty_scene_is_all_background():
    app = JitApp(Settings(width=4, height=2), EMPTY)
    app.run()
    assert (app.image == np.array(BACKGROUND_COLOR, dtype=np.uint8)).all()

@pytest.mark.parametrize("world", [SINGLE_SPHERE, None])
def test_jit_matches_cpu(small_settings, world):
    cpu = CpuApp(small_settings, world)
    cpu.run()
    jit = JitApp(small_settings, world)
    jit.run()

    diff = np.abs(cpu.image.astype(np.int16) - jit.image.astype(np.int16))
    assert diff.max() <= 1

def test_parallel_cpu_render_after_jit_render():
    settings = Settings(width=8, height=6)
    jit = JitApp(settings)
    jit.run()

    parallel = CpuApp(Settings(width=8, height=6, workers=2))
    parallel.run()

    sequential = CpuApp(settings)
    sequential.run()
    np.testing.assert_array_equal(parallel.image, sequential.image)

def test_jit_tie_keeps_first_in_scan_order():
    blue = Material(diffuse_color=(0.0, 0.0, 255.0), albedo=(0.6, 0.3), specular_exponent=50.0)
    red_sphere = Sphere(center=(0.0, 0.0, -5.0), radius=2.0, material=DIFFUSE_RED)
    blue_sphere = Sphere(center=(0.0, 0.0, -5.0), radius=2.0, material=blue)
    lights = (Light(position=(0.0, 0.0, 0.0), intensity=1.0),)
    # the middle pixel of a 3x3 frame looks straight down -z
    settings = Settings(width=3, height=3)

    red_first = JitApp(settings, World(spheres=(red_sphere, blue_sphere), lights=lights))
    red_first.run()
    r, g, b = red_first.image[1, 1]
    assert r > 0 and g == 0 and b == 0

    blue_first = JitApp(settings, World(spheres=(blue_sphere, red_sphere), lights=lights))
    blue_first.run()
    r, g, b = blue_first.image[1, 1]
    assert r == 0 and g == 0 and b > 0

def test_jit_cutoff_treats_far_sphere_as_background():
    far = Sphere(center=(0.0, 0.0, -2000.0), radius=500.0, material=DIFFUSE_RED)
    world = World(spheres=(far,), lights=(Light(position=(0.0, 0.0, 0.0), intensity=1.0),))
    settings = Settings(width=3, height=3)

    # the center ray does reach the sphere, just beyond the cutoff
    assert ray_intersect((0.0, 0.0, 0.0), camera_direction(1, 1, 3, 3, settings.fov), far) == pytest.approx(1500.0)

    app = JitApp(settings, world)
    app.run()
    assert (app.image == np.array(BACKGROUND_COLOR, dtype=np.uint8)).all()
