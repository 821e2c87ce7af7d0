"""GPU uniform data for the grid-based video matrix.

The byte layouts produced here match the shader structs: 48 bytes per cell
mapping and 96 bytes for the per-frame matrix uniforms, little-endian.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Tuple

from .geometry import GridSize
from .grid_mapping import GridCellMapping, InputGridConfig, VideoMatrixConfig

MAX_MAPPINGS = 16
"""Maximum number of cell mappings the shader accepts."""

_CELL_FORMAT = struct.Struct("<4f4fIfII")
_MATRIX_FORMAT = struct.Struct("<8I4I4f8I")

Vec4 = Tuple[float, float, float, float]


@dataclass(frozen=True)
class CellMappingUniform:
    """Shader data for one cell mapping.

    ``orientation`` is a quarter-turn index: 0=0, 1=90, 2=180, 3=270 degrees.
    """

    source_rect: Vec4 = (0.0, 0.0, 0.0, 0.0)
    dest_rect: Vec4 = (0.0, 0.0, 0.0, 0.0)
    orientation: int = 0
    aspect_ratio: float = 1.0
    enabled: bool = False

    SIZE = _CELL_FORMAT.size

    @classmethod
    def from_mapping(
        cls,
        mapping: GridCellMapping,
        input_grid: InputGridConfig,
        output_grid: GridSize,
    ) -> "CellMappingUniform":
        """Build the uniform for a mapping within the given grids."""
        src = mapping.get_source_rect(input_grid.grid_size)
        dst = mapping.get_dest_rect(output_grid)
        return cls(
            source_rect=(src.x, src.y, src.width, src.height),
            dest_rect=(dst.x, dst.y, dst.width, dst.height),
            orientation=mapping.orientation.degrees() // 90,
            aspect_ratio=mapping.aspect_ratio.as_float(),
            enabled=mapping.enabled,
        )

    @classmethod
    def disabled(cls) -> "CellMappingUniform":
        """A disabled placeholder entry."""
        return cls()

    def pack(self) -> bytes:
        """Serialise to the 48-byte shader layout."""
        return _CELL_FORMAT.pack(
            *self.source_rect,
            *self.dest_rect,
            self.orientation,
            self.aspect_ratio,
            1 if self.enabled else 0,
            0,
        )


@dataclass(frozen=True)
class MatrixUniforms:
    """Per-frame matrix settings for the shader."""

    mapping_count: int = 0
    input_cols: int = 3
    input_rows: int = 3
    output_cols: int = 3
    output_rows: int = 3
    output_width: int = 1920
    output_height: int = 1080
    background_color: Vec4 = (0.0, 0.0, 0.0, 1.0)

    SIZE = _MATRIX_FORMAT.size

    @classmethod
    def from_config(
        cls,
        config: VideoMatrixConfig,
        output_resolution: Tuple[int, int] = (1920, 1080),
    ) -> "MatrixUniforms":
        """Build uniforms from a matrix configuration and output pixel size."""
        width, height = output_resolution
        return cls(
            mapping_count=sum(1 for m in config.input_grid.mappings if m.enabled),
            input_cols=config.input_grid.grid_size.columns,
            input_rows=config.input_grid.grid_size.rows,
            output_cols=config.output_grid.columns,
            output_rows=config.output_grid.rows,
            output_width=width,
            output_height=height,
            background_color=tuple(float(c) for c in config.background_color),
        )

    def pack(self) -> bytes:
        """Serialise to the 96-byte shader layout."""
        return _MATRIX_FORMAT.pack(
            self.mapping_count,
            self.input_cols,
            self.input_rows,
            self.output_cols,
            self.output_rows,
            self.output_width,
            self.output_height,
            0,
            0,
            0,
            0,
            0,
            *self.background_color,
            *([0] * 8),
        )


def build_mapping_uniforms(config: VideoMatrixConfig) -> List[CellMappingUniform]:
    """Uniforms for the enabled mappings, padded with placeholders to MAX_MAPPINGS."""
    enabled = (m for m in config.input_grid.mappings if m.enabled)
    uniforms = [
        CellMappingUniform.from_mapping(m, config.input_grid, config.output_grid)
        for m, _ in zip(enabled, range(MAX_MAPPINGS))
    ]
    uniforms.extend(CellMappingUniform.disabled() for _ in range(MAX_MAPPINGS - len(uniforms)))
    return uniforms


def pack_mapping_uniforms(config: VideoMatrixConfig) -> bytes:
    """Contents of the mapping storage buffer for a configuration."""
    return b"".join(u.pack() for u in build_mapping_uniforms(config))