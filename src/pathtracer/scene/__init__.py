"""Scene module for the sphere aggregate and ready-made scenes.

Components:
    world: Sphere and material storage, closest-hit queries, World builder
    builders: Random sphere field, three-sphere test scene, default camera

Note: world and builders declare or depend on Taichi fields; import them
after Taichi has been initialised.
"""
