"""
*tabfluids*

Tabulated single-phase fluid properties: density, internal energy and enthalpy
interpolated with bicubic splines over pressure-temperature tables generated
from (and cached for) slower equation-of-state models.
"""

from ._precision import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .constants import *  # noqa
from .config import *  # noqa
from .tables import *  # noqa
from .fluids import *  # noqa
from .interpolation import *  # noqa
from .tabulated import *  # noqa

__version__ = "0.1.0"
