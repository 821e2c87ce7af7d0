# wallmapper

Geometry and configuration tools for grid-based video walls and video matrices.

An input texture is split into an N×M grid of cells. Each cell can be placed
anywhere on an output grid, with its own aspect ratio and orientation. Cells
that are not mapped stay at the background colour. The package also turns
detected calibration markers into per-display quads. It packs the matrix
configuration into little-endian byte layouts that match a shader's uniform
buffer (96 bytes) and its mapping storage buffer (48 bytes per entry).

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `wallmapper.geometry` provides `Rect`, `GridSize` and `DisplayQuad`.
  `GridSize` converts between row-major display ids and `(col, row)`
  positions, and has the presets `two_by_two()`, `three_by_three()` and
  `four_by_four()`.
- `wallmapper.grid_mapping` provides the following:
  - `AspectRatio`, with the standard ratios `RATIO_4_3`, `RATIO_16_9`,
    `RATIO_16_10`, `RATIO_1_1` and `RATIO_21_9`. `AspectRatio.detect(width, height)`
    picks the closest standard ratio, or makes a custom one if none is within 0.1.
  - `Orientation`, with `detect_from_corners` and `apply_to_uv`.
  - `GridPosition` and `GridCellMapping`.
  - `InputGridConfig`, which adds, removes and looks up mappings, lists the
    unmapped cells, and computes a default mapping and the output grid size.
  - `DetectedScreenRegion`.
  - `VideoMatrixConfig`, which holds the input grid, the output grid, the
    background colour, and the active mappings and mapping lookup by output
    position.
- `wallmapper.matrix_uniforms` provides the following:
  - `CellMappingUniform` and `MatrixUniforms`, each with a `pack()` method.
  - `build_mapping_uniforms`, which takes up to `MAX_MAPPINGS` (16) enabled
    mappings and pads the list with disabled entries.
  - `pack_mapping_uniforms`.
- `wallmapper.quad_mapper` provides `MarkerDetection`, `QuadMapConfig`,
  `MarkerGeometry`, `QuadMapResult` and `build_quads`. It also has the helpers
  `compute_geometry`, `compute_corners_from_center`, `is_convex` and
  `quad_area`.

## Example

```python
from wallmapper.geometry import GridSize
from wallmapper.grid_mapping import InputGridConfig, VideoMatrixConfig
from wallmapper.matrix_uniforms import MatrixUniforms, pack_mapping_uniforms

config = VideoMatrixConfig(InputGridConfig(GridSize(3, 3)))
config.input_grid.create_default_mapping()
config.update_output_grid()

uniform_bytes = MatrixUniforms.from_config(config, (1920, 1080)).pack()  # 96 bytes
mapping_bytes = pack_mapping_uniforms(config)  # 16 entries of 48 bytes
```

To build display quads from marker detections:

```python
from wallmapper.geometry import GridSize
from wallmapper.quad_mapper import MarkerDetection, build_quads

detections = [
    MarkerDetection(0, ((430, 220), (530, 220), (530, 320), (430, 320)), confidence=0.95),
    MarkerDetection(1, ((1390, 220), (1490, 220), (1490, 320), (1390, 320)), confidence=0.95),
]
result = build_quads(detections, GridSize(2, 2), (1920, 1080))
for quad in result.quads:
    print(quad.display_id, quad.source_rect, quad.dest_corners)
print(result.missing_displays, result.warnings)
```

`build_quads` drops detections below `QuadMapConfig.min_confidence` and adds
one warning that gives how many it dropped. It lists the display ids that were
not found, and it warns about quads that are not convex, that have a very small
area, or whose corners may be in the wrong order. The perspective matrix it
attaches to each quad is a translation only. It moves the centre of the source
cell onto the centre of the destination quad and does not solve a full
homography.

## What it does not do

This package only computes data. It does not do the following:

- detect markers in camera images
- capture video
- render to a GPU or a window
- save or load configurations

A caller supplies the marker detections and uploads the packed bytes itself.