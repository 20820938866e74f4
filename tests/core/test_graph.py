"""Tests for the attribute graph."""

import pytest

from pangloss.core.graph import AttributeGraph, ParameterNode
from pangloss.core.interface import ParameterGraph


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def graph():
    return AttributeGraph([
        ParameterNode('conv0_weight', {'lr_mult': '0.1'}),
        ParameterNode('conv0_bias'),
        ParameterNode('fc', {'lr_mult': '2', 'wd_mult': '0.5'}),
    ])


# ============================================================================
# TEST NODES
# ============================================================================

def test_node_equality_by_name():
    assert ParameterNode('a', {'x': '1'}) == ParameterNode('a', {'x': '2'})
    assert ParameterNode('a') != ParameterNode('b')
    assert len({ParameterNode('a'), ParameterNode('a')}) == 1


def test_node_from_dict_stringifies_attrs():
    node = ParameterNode.from_dict({'name': 'fc', 'attrs': {'lr_mult': 2.0}})
    assert node.attrs == {'lr_mult': '2.0'}
    assert node.to_dict() == {'name': 'fc', 'attrs': {'lr_mult': '2.0'}}


def test_node_from_dict_without_attrs():
    assert ParameterNode.from_dict({'name': 'fc', 'attrs': None}).attrs == {}


# ============================================================================
# TEST GRAPH
# ============================================================================

def test_graph_satisfies_protocol(graph):
    assert isinstance(graph, ParameterGraph)


def test_list_attr_flattens_node_attributes(graph):
    assert graph.list_attr(recursive=True) == {
        'conv0_weight_lr_mult': '0.1',
        'fc_lr_mult': '2',
        'fc_wd_mult': '0.5',
    }


def test_list_attr_non_recursive_is_empty(graph):
    assert graph.list_attr(recursive=False) == {}


def test_duplicate_node_raises(graph):
    with pytest.raises(ValueError, match="already exists"):
        graph.add_node(ParameterNode('fc'))


def test_get_node(graph):
    assert graph.get_node('fc').attrs['wd_mult'] == '0.5'
    with pytest.raises(KeyError):
        graph.get_node('missing')


def test_index_name_map_follows_insertion_order(graph):
    assert graph.index_name_map() == {0: 'conv0_weight', 1: 'conv0_bias', 2: 'fc'}
    assert graph.names == ['conv0_weight', 'conv0_bias', 'fc']


def test_dict_round_trip(graph):
    rebuilt = AttributeGraph.from_dict(graph.to_dict())
    assert rebuilt.list_attr() == graph.list_attr()
    assert len(rebuilt) == 3
    assert 'conv0_bias' in rebuilt
