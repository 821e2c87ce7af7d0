"""Video wall geometry, grid cell mapping, shader uniform packing and marker-driven display quads."""

__version__ = "0.1.0"
__all__ = ["geometry", "grid_mapping", "matrix_uniforms", "quad_mapper"]