from .tessellate import tessellate, InvalidInputError
from .polygon import flatten, deviation
from ._array_utils import has_cupy

__version__ = "0.1.0"

__all__ = ['tessellate', 'flatten', 'deviation', 'InvalidInputError', 'has_cupy']
