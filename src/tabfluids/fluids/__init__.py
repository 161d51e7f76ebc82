"""Fluid property models that can be tabulated."""

from .base import *  # noqa
from .ideal_gas import *  # noqa
from .coolprop import *  # noqa
