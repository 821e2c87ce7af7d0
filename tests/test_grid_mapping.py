import math

import pytest

from wallmapper.geometry import GridSize, Rect
from wallmapper.grid_mapping import (
    AspectRatio,
    DetectedScreenRegion,
    GridCellMapping,
    GridPosition,
    InputGridConfig,
    Orientation,
    VideoMatrixConfig,
)


def test_aspect_ratio_values():
    assert abs(AspectRatio.RATIO_4_3.as_float() - 1.333) < 0.01
    assert abs(AspectRatio.RATIO_16_9.as_float() - 1.778) < 0.01
    assert AspectRatio.RATIO_1_1.as_float() == 1.0


def test_aspect_ratio_custom_zero_height():
    assert AspectRatio(5, 0).as_float() == 5.0


def test_aspect_ratio_names():
    assert AspectRatio.RATIO_16_10.name() == "16:10"
    assert AspectRatio.RATIO_21_9.name() == "21:9"
    assert AspectRatio(7, 2).name() == "7:2"


def test_aspect_ratio_detect():
    assert AspectRatio.detect(1920.0, 1080.0) == AspectRatio.RATIO_16_9
    assert AspectRatio.detect(1024.0, 768.0) == AspectRatio.RATIO_4_3
    assert AspectRatio.detect(100.0, 100.0) == AspectRatio.RATIO_1_1


def test_aspect_ratio_detect_invalid_defaults():
    assert AspectRatio.detect(0.0, 100.0) == AspectRatio.RATIO_16_9
    assert AspectRatio.detect(100.0, -1.0) == AspectRatio.RATIO_16_9


def test_aspect_ratio_detect_custom():
    ratio = AspectRatio.detect(4.0, 1.0)
    assert ratio == AspectRatio(400, 100)
    assert ratio.custom
    assert ratio != AspectRatio.RATIO_4_3


def test_orientation_degrees():
    assert Orientation.NORMAL.degrees() == 0
    assert Orientation.ROTATED_90.degrees() == 90
    assert Orientation.ROTATED_180.degrees() == 180
    assert Orientation.ROTATED_270.degrees() == 270
    assert Orientation.ROTATED_180.radians() == pytest.approx(math.pi)


def test_orientation_apply_uv():
    assert Orientation.NORMAL.apply_to_uv(0.0, 0.0) == (0.0, 0.0)
    assert Orientation.ROTATED_90.apply_to_uv(0.0, 0.0) == (1.0, 0.0)
    assert Orientation.ROTATED_180.apply_to_uv(0.0, 0.0) == (1.0, 1.0)
    assert Orientation.ROTATED_270.apply_to_uv(0.0, 0.0) == (0.0, 1.0)


@pytest.mark.parametrize(
    "top_right, top_left, expected",
    [
        ((1.0, 0.0), (0.0, 0.0), Orientation.NORMAL),
        ((0.0, 1.0), (0.0, 0.0), Orientation.ROTATED_90),
        ((0.0, 0.0), (1.0, 0.0), Orientation.ROTATED_180),
        ((0.0, 0.0), (0.0, 1.0), Orientation.ROTATED_270),
    ],
)
def test_orientation_detect_from_corners(top_right, top_left, expected):
    corners = [top_right, top_left, (0.0, 1.0), (1.0, 1.0)]
    assert Orientation.detect_from_corners(corners) is expected


def test_grid_position_center_and_rect():
    pos = GridPosition(1.0, 2.0, 2.0, 1.0)
    assert pos.center() == (2.0, 2.5)
    assert pos.to_normalized_rect(4, 4) == Rect(0.25, 0.5, 0.5, 0.25)
    assert GridPosition().to_normalized_rect(0, 0) == Rect(0.0, 0.0, 1.0, 1.0)


def test_input_grid_config():
    config = InputGridConfig(GridSize(3, 3))
    assert config.total_cells() == 9
    assert config.cell_position(0) == (0, 0)
    assert config.cell_position(1) == (1, 0)
    assert config.cell_position(3) == (0, 1)
    assert config.cell_index(1, 1) == 4

    config.add_mapping(GridCellMapping(0, GridPosition(0.0, 0.0, 1.0, 1.0)))
    assert config.is_cell_mapped(0)
    assert not config.is_cell_mapped(1)

    unmapped = config.unmapped_cells()
    assert len(unmapped) == 8
    assert 0 not in unmapped


def test_input_grid_remove_and_get():
    config = InputGridConfig(GridSize(2, 2))
    config.create_default_mapping()
    assert config.get_mapping(2).output_position == GridPosition(0.0, 1.0, 1.0, 1.0)
    removed = config.remove_mapping(2)
    assert removed.input_cell == 2
    assert config.get_mapping(2) is None
    assert config.remove_mapping(2) is None
    assert config.unmapped_cells() == [2]
    config.clear_mappings()
    assert config.mappings == []


def test_input_source_clamped():
    config = InputGridConfig()
    assert config.with_input_source(5).input_source == 2
    assert config.with_input_source(0).input_source == 1
    assert config.input_source == 1


def test_calculate_output_grid_size():
    config = InputGridConfig(GridSize(3, 3))
    assert config.calculate_output_grid_size() == GridSize(1, 1)
    config.add_mapping(GridCellMapping(0, GridPosition(2.0, 0.5, 1.5, 1.0)))
    assert config.calculate_output_grid_size() == GridSize(4, 2)


def test_grid_cell_mapping_source_rect():
    mapping = GridCellMapping(0, GridPosition(0.0, 0.0, 1.0, 1.0))
    rect = mapping.get_source_rect(GridSize(3, 3))
    assert abs(rect.x - 0.0) < 0.01
    assert abs(rect.y - 0.0) < 0.01
    assert abs(rect.width - 0.333) < 0.01
    assert abs(rect.height - 0.333) < 0.01


def test_grid_cell_mapping_source_rect_cell_and_custom():
    mapping = GridCellMapping(5, GridPosition())
    assert mapping.get_source_rect(GridSize(2, 4)) == Rect(0.5, 0.5, 0.5, 0.25)
    custom = Rect(0.1, 0.2, 0.3, 0.4)
    assert mapping.with_source_rect(custom).get_source_rect(GridSize(2, 4)) == custom


def test_grid_cell_mapping_builders():
    mapping = (
        GridCellMapping(1, GridPosition(1.0, 0.0, 1.0, 1.0))
        .with_aspect_ratio(AspectRatio.RATIO_4_3)
        .with_orientation(Orientation.ROTATED_90)
        .with_display_id(7)
    )
    assert mapping.aspect_ratio == AspectRatio.RATIO_4_3
    assert mapping.orientation is Orientation.ROTATED_90
    assert mapping.display_id == 7
    assert mapping.enabled
    assert mapping.get_dest_rect(GridSize(2, 1)) == Rect(0.5, 0.0, 0.5, 1.0)


def test_video_matrix_config():
    config = VideoMatrixConfig(InputGridConfig(GridSize(2, 2)))
    assert config.output_grid == GridSize(2, 2)

    config.update_output_grid()
    assert config.output_grid == GridSize(1, 1)

    config.input_grid.create_default_mapping()
    config.update_output_grid()
    assert config.output_grid.columns == 2
    assert config.output_grid.rows == 2
    assert len(config.active_mappings()) == 4


def test_video_matrix_defaults_and_builders():
    config = VideoMatrixConfig()
    assert config.output_grid == GridSize(3, 3)
    assert config.background_color == (0.0, 0.0, 0.0, 1.0)
    assert config.auto_detect
    updated = config.with_output_grid(GridSize(4, 1)).with_background_color([1, 0, 0, 1])
    assert updated.output_grid == GridSize(4, 1)
    assert updated.background_color == (1.0, 0.0, 0.0, 1.0)


def test_get_mapping_at_output_skips_disabled():
    config = VideoMatrixConfig(InputGridConfig(GridSize(2, 2)))
    config.input_grid.create_default_mapping()
    assert config.get_mapping_at_output(1.5, 0.5).input_cell == 1
    config.input_grid.get_mapping(1).enabled = False
    assert config.get_mapping_at_output(1.5, 0.5) is None
    assert len(config.active_mappings()) == 3
    assert config.get_mapping_at_output(2.0, 0.0) is None


def test_detected_screen_region_defaults():
    region = DetectedScreenRegion(
        screen_id=3,
        corners=((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)),
        center=(0.5, 0.5),
        width=1.0,
        height=1.0,
    )
    assert region.aspect_ratio == AspectRatio.RATIO_16_9
    assert region.orientation is Orientation.NORMAL