"""Core contracts: errors, protocols, parameter graph and registry."""

from .errors import (
    PanglossError,
    ConfigurationError,
    ShapeMismatchError,
    NativeCallError,
    ExternalUpdateFailedError,
)
from .interface import (
    ParameterGraph,
    LearningRateSchedule,
    UpdateAlgorithm,
    OptimizerComponent,
)
from .graph import ParameterNode, AttributeGraph
from .registry import Registry


__all__ = [
    # Errors
    'PanglossError',
    'ConfigurationError',
    'ShapeMismatchError',
    'NativeCallError',
    'ExternalUpdateFailedError',

    # Protocols
    'ParameterGraph',
    'LearningRateSchedule',
    'UpdateAlgorithm',
    'OptimizerComponent',

    # Graph
    'ParameterNode',
    'AttributeGraph',

    # Registry
    'Registry',
]
