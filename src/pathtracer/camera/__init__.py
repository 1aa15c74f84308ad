"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with vertical field of view and a thin lens
        for depth of field

Note: thin_lens declares Taichi fields; import it after Taichi has been
initialised.
"""
