"""Tabulated property data: axes, matrices, file format and generation from fluid models."""

from .data import *  # noqa
from .codec import *  # noqa
from .generator import *  # noqa
