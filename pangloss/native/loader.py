"""
Native optimizer library loader.

Resolves and loads the shared library that provides the external optimizer
entry points (the MXNet C API) via ``ctypes``.

Resolution policy
-----------------
1. An explicit ``lib_path`` argument always wins.
2. Otherwise the ``PANGLOSS_NATIVE_LIB`` environment variable, if set.
3. Otherwise the platform default name, first next to this module, then
   through the system loader search path.

On Windows the library's directory is registered with
``os.add_dll_directory`` so dependent DLLs are found; the handles are kept
alive on the loaded library object.
"""

import ctypes
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

ENV_LIB_PATH = 'PANGLOSS_NATIVE_LIB'


def default_lib_name() -> str:
    """Platform-specific filename of the native optimizer library."""
    if sys.platform.startswith('win'):
        return 'libmxnet.dll'
    if sys.platform == 'darwin':
        return 'libmxnet.dylib'
    return 'libmxnet.so'


def _load_cdll(lib_path: Path) -> ctypes.CDLL:
    handles = []
    if sys.platform.startswith('win') and hasattr(os, 'add_dll_directory'):
        handles.append(os.add_dll_directory(str(lib_path.parent)))

    lib_str = str(lib_path)
    try:
        lib = ctypes.CDLL(lib_str)
    except OSError as e:
        raise OSError(f"ctypes.CDLL failed for {lib_str!r}: {e}") from e

    setattr(lib, '_pangloss_dll_dir_handles', handles)
    logger.info(f"Loaded native optimizer library from {lib_str}")
    return lib


@lru_cache(maxsize=None)
def load_native_library(lib_path: Optional[str] = None) -> ctypes.CDLL:
    """
    Load the native optimizer library.

    Args:
        lib_path: Exact library file to load. If None, the environment
            variable and default locations are searched.

    Returns:
        Loaded ctypes library handle (cached per ``lib_path``)

    Raises:
        FileNotFoundError: If an explicit path does not exist
        OSError: If no candidate could be loaded
    """
    if lib_path is None:
        lib_path = os.environ.get(ENV_LIB_PATH) or None

    if lib_path is not None:
        path = Path(lib_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Native library not found: {path}")
        return _load_cdll(path)

    name = default_lib_name()
    local = Path(__file__).resolve().parent / name

    errors: List[str] = []
    if local.exists():
        try:
            return _load_cdll(local)
        except OSError as e:
            errors.append(f"- {local} (failed to load: {e})")
    else:
        errors.append(f"- {local} (missing)")

    try:
        lib = ctypes.CDLL(name)
    except OSError as e:
        errors.append(f"- {name} on loader path (failed to load: {e})")
        raise OSError(
            f"Failed to load the native optimizer library. Set {ENV_LIB_PATH} "
            f"or pass lib_path. Tried:\n" + "\n".join(errors)
        ) from e

    logger.info(f"Loaded native optimizer library {name} from loader path")
    return lib
