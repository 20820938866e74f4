"""Native optimizer library: loading and ctypes bindings."""

from .loader import load_native_library, default_lib_name, ENV_LIB_PATH
from .api import (
    NativeOptimizerAPI,
    NativeOptimizerHandle,
    get_optimizer_api,
    format_param,
    ndarray_handle,
)


__all__ = [
    'load_native_library',
    'default_lib_name',
    'ENV_LIB_PATH',
    'NativeOptimizerAPI',
    'NativeOptimizerHandle',
    'get_optimizer_api',
    'format_param',
    'ndarray_handle',
]
