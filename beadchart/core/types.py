"""Common lightweight type aliases used across rendering and editing."""

from typing import FrozenSet, Literal, Tuple

ShapeMode = Literal["circle", "square"]
ReplaceMode = Literal["global", "single"]
HiddenSet = FrozenSet[str]
RGB = Tuple[int, int, int]

__all__ = ["ShapeMode", "ReplaceMode", "HiddenSet", "RGB"]
