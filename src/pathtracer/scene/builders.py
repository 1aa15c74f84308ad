"""Ready-made scenes and their cameras.

The random scene is the classic "final render": a large grey ground sphere,
a 22x22 grid of small spheres with randomly chosen materials, and three
large feature spheres (glass, brown diffuse, polished metal).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.scene.builders import create_random_scene, default_camera
    >>> from pathtracer.scene.world import World
    >>>
    >>> world = create_random_scene(World(), seed=123456)
    >>> setup_camera(default_camera(16.0 / 9.0))
"""

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.config import DEFAULT_ASPECT_RATIO
from pathtracer.materials import Dielectric, Lambertian, Metal
from pathtracer.scene.world import World

# =============================================================================
# Random Scene Parameters
# =============================================================================

GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on the grid a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2

# Small spheres closer than this to the clearing point are skipped
CLEARING_POINT = np.array([4.0, 0.2, 0.0])
CLEARING_DISTANCE = 0.9

# Material choice thresholds on a uniform draw
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15

GLASS_IOR = 1.5


def create_random_scene(world: World, seed: int) -> World:
    """Populate a world with the random sphere field.

    The world is cleared first. The same seed always yields the same scene.

    Args:
        world: The world to fill.
        seed: Seed for numpy's random generator.

    Returns:
        The populated world.
    """
    rng = np.random.default_rng(seed)
    world.clear()

    world.add_sphere((0.0, -GROUND_RADIUS, 0.0), GROUND_RADIUS, Lambertian(GROUND_ALBEDO))

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - CLEARING_POINT) <= CLEARING_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(tuple(albedo))
            elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                material = Metal(tuple(albedo), fuzz=rng.random() / 2.0)
            else:
                material = Dielectric(GLASS_IOR)

            world.add_sphere(tuple(center), SMALL_RADIUS, material)

    world.add_sphere((0.0, 1.0, 0.0), 1.0, Dielectric(GLASS_IOR))
    world.add_sphere((-4.0, 1.0, 0.0), 1.0, Lambertian((0.4, 0.2, 0.1)))
    world.add_sphere((4.0, 1.0, 0.0), 1.0, Metal((0.7, 0.6, 0.5), fuzz=0.0))

    return world


def default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Camera framing the random scene, with a slight depth of field."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


def create_three_spheres_scene(
    world: World,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> ThinLensCamera:
    """Populate a world with three spheres on a large ground sphere.

    Center: blue diffuse; left: glass; right: polished gold metal.

    Args:
        world: The world to fill (cleared first).
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A pinhole camera at the origin looking down -z.
    """
    world.clear()

    world.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian((0.8, 0.8, 0.0)))
    world.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.1, 0.2, 0.5)))
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(GLASS_IOR))
    world.add_sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), fuzz=0.0))

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
