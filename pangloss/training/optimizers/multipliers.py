"""
Per-parameter learning-rate and weight-decay multipliers.

The table is built once, from three ordered sources (later wins):

    0. (weight decay only) every known parameter name that does not end in
       '_weight' or '_gamma' is seeded with 0.0, so biases and normalization
       offsets are exempt from weight decay by default
    1. declarative graph attributes ending in '_lr_mult' / '_wd_mult'
    2. explicit overrides passed by the caller

Lookup for an index checks the index's string form first, then its name, and
falls back to 1.0.
"""

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ...core.errors import ConfigurationError
from ...core.interface import ParameterGraph

logger = logging.getLogger(__name__)

LR_MULT_SUFFIX = '_lr_mult'
WD_MULT_SUFFIX = '_wd_mult'
DECAYED_SUFFIXES = ('_weight', '_gamma')


def _attr_multipliers(graph: Optional[ParameterGraph], suffix: str) -> Dict[str, float]:
    """Collect ``{name: mult}`` from graph attributes ending in ``suffix``."""
    if graph is None:
        return {}

    mults: Dict[str, float] = {}
    for key, value in graph.list_attr(recursive=True).items():
        if not key.endswith(suffix):
            continue
        name = key[:-len(suffix)]
        try:
            mults[name] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid multiplier attribute {key!r}={value!r}: not a number"
            ) from e
    return mults


def _explicit_multipliers(overrides: Optional[Mapping[str, float]], kind: str) -> Dict[str, float]:
    mults: Dict[str, float] = {}
    for key, value in (overrides or {}).items():
        try:
            mults[str(key)] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid {kind} override {key!r}={value!r}: not a number"
            ) from e
    return mults


class MultiplierTable:
    """
    Resolved lr/wd multipliers for a training session.

    Args:
        index_name_map: Parameter index -> name (copied)
        lr_mult: Name (or index string) -> learning-rate multiplier
        wd_mult: Name (or index string) -> weight-decay multiplier

    Use :meth:`build` rather than the constructor to get the standard
    source ordering.
    """

    def __init__(
        self,
        index_name_map: Optional[Mapping[int, str]] = None,
        lr_mult: Optional[Mapping[str, float]] = None,
        wd_mult: Optional[Mapping[str, float]] = None,
    ):
        self._idx2name: Dict[int, str] = dict(index_name_map or {})
        self._lr_mult: Dict[str, float] = dict(lr_mult or {})
        self._wd_mult: Dict[str, float] = dict(wd_mult or {})

    @classmethod
    def build(
        cls,
        index_name_map: Optional[Mapping[int, str]] = None,
        graph: Optional[ParameterGraph] = None,
        lr_mult_overrides: Optional[Mapping[str, float]] = None,
        wd_mult_overrides: Optional[Mapping[str, float]] = None,
    ) -> 'MultiplierTable':
        """
        Build the table from graph attributes and explicit overrides.

        Raises:
            ConfigurationError: If an attribute or override value is not numeric
        """
        idx2name = dict(index_name_map or {})

        lr_mult: Dict[str, float] = {}
        lr_mult.update(_attr_multipliers(graph, LR_MULT_SUFFIX))
        lr_mult.update(_explicit_multipliers(lr_mult_overrides, 'lr_mult'))

        wd_mult: Dict[str, float] = {
            name: 0.0
            for name in idx2name.values()
            if not name.endswith(DECAYED_SUFFIXES)
        }
        wd_mult.update(_attr_multipliers(graph, WD_MULT_SUFFIX))
        wd_mult.update(_explicit_multipliers(wd_mult_overrides, 'wd_mult'))

        logger.debug(
            f"Built multiplier table: {len(idx2name)} named indices, "
            f"{len(lr_mult)} lr entries, {len(wd_mult)} wd entries"
        )
        return cls(idx2name, lr_mult, wd_mult)

    @property
    def index_name_map(self) -> Mapping[int, str]:
        return MappingProxyType(self._idx2name)

    @property
    def lr_mult(self) -> Mapping[str, float]:
        return MappingProxyType(self._lr_mult)

    @property
    def wd_mult(self) -> Mapping[str, float]:
        return MappingProxyType(self._wd_mult)

    def name_of(self, index: int) -> Optional[str]:
        """Name registered for ``index``, or None."""
        return self._idx2name.get(index)

    def _resolve(self, table: Dict[str, float], index: int) -> float:
        key = str(index)
        if key in table:
            return table[key]
        name = self._idx2name.get(index)
        if name is not None:
            return table.get(name, 1.0)
        return 1.0

    def lr_multiplier(self, index: int) -> float:
        """Learning-rate multiplier for ``index`` (1.0 when unknown)."""
        return self._resolve(self._lr_mult, index)

    def wd_multiplier(self, index: int) -> float:
        """Weight-decay multiplier for ``index`` (1.0 when unknown)."""
        return self._resolve(self._wd_mult, index)

    def __repr__(self) -> str:
        return (
            f"MultiplierTable(names={len(self._idx2name)}, "
            f"lr_mult={len(self._lr_mult)}, wd_mult={len(self._wd_mult)})"
        )
