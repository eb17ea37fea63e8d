import pytest
from PIL import Image

from qrlogo.matrix import ModuleMatrix, encode


def solid_matrix(n: int, dark: bool = True) -> ModuleMatrix:
    return ModuleMatrix([[dark] * n for _ in range(n)])


class SideOnlyMatrix:
    """Matrix stand-in reporting an arbitrary side length."""

    def __init__(self, n):
        self.n = n

    def is_dark(self, row, col):
        return True

    def side_length(self):
        return self.n


@pytest.fixture
def example_matrix():
    return encode("https://example.com", "M")


@pytest.fixture
def red_logo():
    return Image.new("RGBA", (64, 64), (255, 0, 0, 255))
