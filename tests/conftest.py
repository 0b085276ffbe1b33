import io

import pytest
from rich.console import Console


class CapturedConsole(Console):
    def __init__(self):
        self.buffer = io.StringIO()
        super().__init__(file=self.buffer, width=200, color_system=None)

    @property
    def text(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def console():
    return CapturedConsole()


@pytest.fixture
def cube_geometry():
    # 2 x 2 x 2 object standing on the floor, centered on the origin
    return {
        "bounding_box": {"min": {"x": -1, "y": 0, "z": -1}, "max": {"x": 1, "y": 2, "z": 1}},
        "center": {"x": 0, "y": 1, "z": 0},
        "dimensions": {"x": 2, "y": 2, "z": 2},
    }
