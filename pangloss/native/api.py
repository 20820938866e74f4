"""
ctypes bindings for the external optimizer entry points.

This module wraps the five C entry points the delegating optimizer needs:

    int MXOptimizerFindCreator(const char* name, void** creator)
    int MXOptimizerCreateOptimizer(void* creator, uint32 num_param,
                                   const char** keys, const char** vals,
                                   void** handle)
    int MXOptimizerUpdate(void* handle, int index, NDArrayHandle weight,
                          NDArrayHandle grad, float lr, float wd)
    int MXOptimizerFree(void* handle)
    const char* MXGetLastError()

Design notes
------------
- ``NativeOptimizerAPI`` does argument marshaling only; it returns raw status
  codes from ``update`` and raises NativeCallError from the lookup, create
  and free calls.
- ``NativeOptimizerHandle`` owns one external optimizer instance and frees it
  exactly once: on ``close()``, on context exit, or when garbage collected.
- Configuration values cross the boundary as strings, in the order given.
"""

import ctypes
import logging
import weakref
from ctypes import POINTER, c_char_p, c_float, c_int, c_uint, c_void_p
from functools import lru_cache
from typing import Any, Optional, Sequence, Tuple

from ..core.errors import ExternalUpdateFailedError, NativeCallError
from .loader import load_native_library

logger = logging.getLogger(__name__)


def format_param(value: Any) -> str:
    """
    Format a configuration value for the native boundary.

    Floats use the shortest round-trip form without a trailing '.0', so
    ``1.0 -> '1'``, ``-1.0 -> '-1'`` and ``0.9 -> '0.9'``.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        text = repr(float(value))
        if text.endswith('.0'):
            text = text[:-2]
        return text
    return str(value)


def ndarray_handle(array: Any) -> c_void_p:
    """
    NDArray handle to pass as a weight or gradient.

    ``MXOptimizerUpdate`` takes ``NDArrayHandle`` arguments, so only objects
    exposing a native ``handle`` attribute (NDArray wrappers) are accepted.
    Integer handles are wrapped in ``c_void_p``.

    Raises:
        TypeError: If ``array`` carries no native handle (e.g. a torch tensor)
    """
    handle = getattr(array, 'handle', None)
    if handle is None:
        raise TypeError(
            f"Native optimizer update needs an NDArray handle, got {type(array).__name__}; "
            f"wrap the array in a native NDArray or use the 'sgd' optimizer"
        )
    return handle if isinstance(handle, c_void_p) else c_void_p(int(handle))


class NativeOptimizerAPI:
    """
    Thin marshaling layer over the native optimizer entry points.

    Args:
        lib: Loaded ctypes library exporting the MXOptimizer* symbols
    """

    def __init__(self, lib: ctypes.CDLL):
        self.lib = lib
        self._bound = False

    def _bind(self) -> None:
        if self._bound:
            return

        lib = self.lib

        lib.MXGetLastError.argtypes = []
        lib.MXGetLastError.restype = c_char_p

        # (const char* name, void** out) -> int
        lib.MXOptimizerFindCreator.argtypes = [c_char_p, POINTER(c_void_p)]
        lib.MXOptimizerFindCreator.restype = c_int

        # (void* creator, uint32 n, const char** keys, const char** vals, void** out) -> int
        lib.MXOptimizerCreateOptimizer.argtypes = [
            c_void_p, c_uint, POINTER(c_char_p), POINTER(c_char_p), POINTER(c_void_p)
        ]
        lib.MXOptimizerCreateOptimizer.restype = c_int

        # (void* handle, int index, void* weight, void* grad, float lr, float wd) -> int
        lib.MXOptimizerUpdate.argtypes = [c_void_p, c_int, c_void_p, c_void_p, c_float, c_float]
        lib.MXOptimizerUpdate.restype = c_int

        # (void* handle) -> int
        lib.MXOptimizerFree.argtypes = [c_void_p]
        lib.MXOptimizerFree.restype = c_int

        self._bound = True

    def last_error(self) -> str:
        """Diagnostic text of the most recent native failure."""
        self._bind()
        message = self.lib.MXGetLastError()
        return message.decode('utf-8', errors='replace') if message else ''

    def _check(self, function: str, status: int) -> None:
        if status != 0:
            raise NativeCallError(function, status, self.last_error())

    def find_creator(self, name: str) -> int:
        """Look up the creator for optimizer ``name``."""
        self._bind()
        creator = c_void_p()
        status = self.lib.MXOptimizerFindCreator(name.encode('utf-8'), ctypes.byref(creator))
        self._check('MXOptimizerFindCreator', status)
        if not creator.value:
            raise NativeCallError('MXOptimizerFindCreator', status, f"No creator for {name!r}")
        return creator.value

    def create_optimizer(self, creator: int, params: Sequence[Tuple[str, str]]) -> int:
        """Create an optimizer instance from ordered (key, value) string pairs."""
        self._bind()
        n = len(params)
        keys = (c_char_p * n)(*[k.encode('utf-8') for k, _ in params])
        vals = (c_char_p * n)(*[v.encode('utf-8') for _, v in params])
        handle = c_void_p()
        status = self.lib.MXOptimizerCreateOptimizer(
            c_void_p(creator), c_uint(n), keys, vals, ctypes.byref(handle)
        )
        self._check('MXOptimizerCreateOptimizer', status)
        return handle.value

    def update(
        self,
        handle: int,
        index: int,
        weight: c_void_p,
        grad: c_void_p,
        lr: float,
        wd: float,
    ) -> int:
        """Run one external update; returns the raw status code."""
        self._bind()
        return self.lib.MXOptimizerUpdate(
            c_void_p(handle), c_int(int(index)), weight, grad,
            c_float(float(lr)), c_float(float(wd)),
        )

    def free(self, handle: int) -> int:
        """Free an optimizer instance; returns the raw status code."""
        self._bind()
        return self.lib.MXOptimizerFree(c_void_p(handle))


def _release(api: NativeOptimizerAPI, value: int, name: str) -> None:
    # Finalizer path: must not raise.
    status = api.free(value)
    if status != 0:
        logger.warning(f"Failed to free native optimizer {name!r} (status={status}): {api.last_error()}")
    else:
        logger.info(f"Released native optimizer {name!r}")


class NativeOptimizerHandle:
    """
    Exclusively owned handle to an external optimizer instance.

    The handle is released exactly once, whichever comes first of
    :meth:`close`, context-manager exit or garbage collection.

    Example:
        >>> with NativeOptimizerHandle.create(api, 'ccsgd', [('momentum', '0.9')]) as h:
        ...     h.update(0, weight_ref, grad_ref, lr=0.1, wd=0.0)
    """

    def __init__(self, api: NativeOptimizerAPI, value: int, name: str):
        if not value:
            raise NativeCallError('MXOptimizerCreateOptimizer', -1, f"Null handle for {name!r}")
        self._api = api
        self._value = value
        self.name = name
        self._finalizer = weakref.finalize(self, _release, api, value, name)

    @classmethod
    def create(
        cls,
        api: NativeOptimizerAPI,
        name: str,
        params: Sequence[Tuple[str, str]],
    ) -> 'NativeOptimizerHandle':
        """Find the creator for ``name`` and instantiate it with ``params``."""
        creator = api.find_creator(name)
        value = api.create_optimizer(creator, params)
        logger.info(f"Created native optimizer {name!r} with params {list(params)}")
        return cls(api, value, name)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def value(self) -> int:
        if self.closed:
            raise RuntimeError(f"Native optimizer {self.name!r} handle is closed")
        return self._value

    def update(self, index: int, weight: c_void_p, grad: c_void_p, lr: float, wd: float) -> None:
        """
        Run one external update.

        Raises:
            ExternalUpdateFailedError: If the native call reports failure
        """
        status = self._api.update(self.value, index, weight, grad, lr, wd)
        if status != 0:
            raise ExternalUpdateFailedError(index, status, self._api.last_error())

    def close(self) -> None:
        """
        Free the external instance. Safe to call more than once.

        Raises:
            NativeCallError: If the native free call reports failure
        """
        if self._finalizer.detach() is None:
            return
        status = self._api.free(self._value)
        if status != 0:
            raise NativeCallError('MXOptimizerFree', status, self._api.last_error())
        logger.info(f"Released native optimizer {self.name!r}")

    def __enter__(self) -> 'NativeOptimizerHandle':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = 'closed' if self.closed else hex(self._value)
        return f"NativeOptimizerHandle({self.name!r}, {state})"


@lru_cache(maxsize=None)
def get_optimizer_api(lib_path: Optional[str] = None) -> NativeOptimizerAPI:
    """Shared NativeOptimizerAPI for the library at ``lib_path``."""
    return NativeOptimizerAPI(load_native_library(lib_path))
