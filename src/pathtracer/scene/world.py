"""Scene aggregate: sphere storage, material lookup and closest-hit queries.

Spheres and their materials are stored in Taichi fields using a Structure of
Arrays layout, one slot per object. ``object_id`` on a HitRecord is the slot
index and selects both the geometry and its material.

The World class is the host-side entry point. It validates parameters before
they reach the device and keeps a Python-side mirror of what was added.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials import Lambertian, Metal
    >>> from pathtracer.scene.world import World
    >>> world = World()
    >>> world.add_sphere((0, 0, -1), 0.5, Lambertian((0.7, 0.3, 0.3)))
    0
    >>> world.add_sphere((0, -100.5, -1), 100, Lambertian((0.8, 0.8, 0.0)))
    1
    >>> # Use hit_world within a Taichi kernel
"""

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import Metal

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Material storage, indexed by the same slot as the sphere
material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
material_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
material_fuzz = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
material_iors = ti.field(dtype=ti.f64, shape=MAX_SPHERES)

MaterialSpec = Lambertian | Metal | Dielectric


def clear_world() -> None:
    """Remove all spheres from the scene storage.

    Resets the sphere count to zero. The field data is not cleared but will
    be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere_record(
    center: tuple[float, float, float],
    radius: float,
    kind: int,
    albedo: tuple[float, float, float],
    fuzz: float,
    ior: float,
) -> int:
    """Write one already validated sphere and its material into the fields.

    Returns:
        The slot index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    material_kinds[idx] = kind
    material_albedos[idx] = albedo
    material_fuzz[idx] = fuzz
    material_iors[idx] = ior
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def load_material(object_id: ti.i32) -> Material:
    """Gather the material of a scene object into a Material struct."""
    return Material(
        kind=material_kinds[object_id],
        albedo=material_albedos[object_id],
        fuzz=material_fuzz[object_id],
        ior=material_iors[object_id],
    )


@ti.func
def hit_world(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Find the closest intersection of a ray with any sphere in the scene.

    Each sphere is tested with the upper bound shrunk to the closest hit
    found so far, so the returned record has the minimum t over all objects
    in (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Lower bound of accepted t values.
        t_max: Upper bound of accepted t values.

    Returns:
        The closest HitRecord with object_id set to the slot of the hit
        sphere, or a miss record if nothing was hit.
    """
    closest_so_far = t_max
    result = make_miss_record()

    n = num_spheres[None]
    for i in range(n):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = HitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                front_face=rec.front_face,
                object_id=i,
            )

    return result


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The slot in the storage fields.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material the sphere was added with.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material: MaterialSpec


class World:
    """Host-side scene builder backed by the module-level Taichi fields.

    There is a single scene storage per process; creating a World clears it.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere from the scene."""
        clear_world()
        self.spheres.clear()

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: MaterialSpec,
    ) -> int:
        """Add a sphere with its material to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be finite and positive.
            material: A Lambertian, Metal or Dielectric instance.

        Returns:
            The object id (slot index) of the added sphere.

        Raises:
            ValueError: If the center is not three finite numbers or the
                radius is not finite and positive.
            TypeError: If material is not a known material type.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if len(center) != 3 or not all(math.isfinite(c) for c in center):
            raise ValueError(f"Center must be 3 finite numbers, got {center!r}")
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Radius must be a finite positive number, got {radius}")
        if not isinstance(material, (Lambertian, Metal, Dielectric)):
            raise TypeError(f"Unsupported material type: {type(material).__name__}")

        center_tuple = (float(center[0]), float(center[1]), float(center[2]))
        kind, albedo, fuzz, ior = material.packed()
        idx = add_sphere_record(center_tuple, float(radius), kind, albedo, fuzz, ior)

        self.spheres.append(
            SphereInfo(sphere_index=idx, center=center_tuple, radius=float(radius), material=material)
        )
        return idx

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self.spheres)
