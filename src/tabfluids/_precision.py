from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np


__all__ = ["get_dtype", "set_dtype", "with_precision"]

_tabfluids_dtype: ContextVar[np.typing.DTypeLike] = ContextVar(
    "_tabfluids_dtype", default=np.float64
)
"""
Data type of table axes and property matrices.

Defaults to float64, so table files parse back to arrays identical to the ones written.
"""


def get_dtype() -> np.typing.DTypeLike:
    """
    Get the current data type used for tabulated axes and property matrices.

    :return: The current data type.
    """
    return _tabfluids_dtype.get()


def set_dtype(dtype: np.typing.DTypeLike) -> None:
    """
    Set the data type for tables built in the current context.

    Only floating point types are accepted, as tables hold real valued properties.

    :param dtype: The data type to set as default.
    """
    if not np.issubdtype(dtype, np.floating):
        raise TypeError(f"Table data type must be a floating point type, got {dtype!r}")
    _tabfluids_dtype.set(dtype)


@contextmanager
def with_precision(dtype: np.typing.DTypeLike):
    """
    Context manager to temporarily set the data type, and hence the precision of built tables.

    ```python
    with with_precision(np.float32):
        table = generate_all_tabulated_data(fluid, pressure, temperature)
    ```

    :param dtype: The data type to set within the context.
    """
    if not np.issubdtype(dtype, np.floating):
        raise TypeError(f"Table data type must be a floating point type, got {dtype!r}")
    token = _tabfluids_dtype.set(dtype)
    try:
        yield
    finally:
        _tabfluids_dtype.reset(token)
