"""
Declarative parameter graph.

A minimal, concrete ParameterGraph: a set of named parameter nodes, each
carrying string-valued attributes such as ``lr_mult`` or ``wd_mult``. It is
what config files describe and what the optimizer reads multipliers from.

Key Design Principles:
- Immutable nodes (build once, read at optimizer construction)
- Attributes stay in their declarative string form; parsing is the
  consumer's job
- Flattened view matches the ``'{node}_{attr}'`` convention of symbolic
  graph frontends

Example:
    >>> graph = AttributeGraph.from_dict({
    ...     'fc1_weight': {'lr_mult': '2.0'},
    ...     'fc1_bias': {'wd_mult': '0.0'},
    ... })
    >>> graph.list_attr()
    {'fc1_weight_lr_mult': '2.0', 'fc1_bias_wd_mult': '0.0'}
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, List, Mapping, Optional


@dataclass(frozen=True)
class ParameterNode:
    """
    Node in a parameter graph.

    Attributes:
        name: Unique parameter name (e.g. 'fc1_weight')
        attrs: Declarative attributes, string -> string

    Example:
        >>> node = ParameterNode(name='fc1_weight', attrs={'lr_mult': '0.5'})
    """
    name: str
    attrs: Dict[str, str] = field(default_factory=dict)

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if not isinstance(other, ParameterNode):
            return False
        return self.name == other.name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {'name': self.name, 'attrs': dict(self.attrs)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParameterNode':
        """Deserialize from dictionary."""
        attrs = data.get('attrs', {}) or {}
        return cls(
            name=data['name'],
            attrs={str(k): str(v) for k, v in attrs.items()},
        )


class AttributeGraph:
    """
    Collection of parameter nodes with declarative attributes.

    Satisfies the :class:`~pangloss.core.interface.ParameterGraph` protocol.

    Example:
        >>> graph = AttributeGraph()
        >>> graph.add_node(ParameterNode('conv0_weight', {'lr_mult': '0.1'}))
        >>> graph.list_attr(recursive=True)
        {'conv0_weight_lr_mult': '0.1'}
    """

    def __init__(self, nodes: Optional[Iterable[ParameterNode]] = None):
        self._nodes: Dict[str, ParameterNode] = {}
        for node in nodes or ():
            self.add_node(node)

    def add_node(self, node: ParameterNode) -> None:
        """
        Add a node to the graph.

        Raises:
            ValueError: If a node with the same name already exists
        """
        if node.name in self._nodes:
            raise ValueError(f"Node '{node.name}' already exists in graph")
        self._nodes[node.name] = node

    def get_node(self, name: str) -> ParameterNode:
        """Get node by name."""
        if name not in self._nodes:
            raise KeyError(f"Node '{name}' not found in graph")
        return self._nodes[name]

    @property
    def names(self) -> List[str]:
        """Parameter names in insertion order."""
        return list(self._nodes)

    def list_attr(self, recursive: bool = True) -> Mapping[str, str]:
        """
        Return declarative attributes.

        Args:
            recursive: If True, return the attributes of every node, keyed
                ``'{node}_{attr}'``. If False, only graph-level attributes are
                returned, and this graph has none.
        """
        if not recursive:
            return {}
        flat: Dict[str, str] = {}
        for node in self._nodes.values():
            for key, value in node.attrs.items():
                flat[f"{node.name}_{key}"] = value
        return flat

    def index_name_map(self) -> Dict[int, str]:
        """Index -> name map following node insertion order."""
        return {i: name for i, name in enumerate(self._nodes)}

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        """Serialize as ``{name: attrs}``."""
        return {name: dict(node.attrs) for name, node in self._nodes.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> 'AttributeGraph':
        """Build from ``{name: {attr: value}}``; values are stringified."""
        return cls(
            ParameterNode.from_dict({'name': name, 'attrs': attrs})
            for name, attrs in data.items()
        )

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def __repr__(self) -> str:
        return f"AttributeGraph(nodes={len(self._nodes)})"
