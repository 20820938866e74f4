"""
Tests for per-parameter multiplier resolution.

Tests cover:
- Weight decay exemption for non-weight parameters
- Graph attributes
- Explicit overrides and their precedence
- Index-string vs name lookup
- Fallback for unknown indices
"""

import pytest

from pangloss.core.errors import ConfigurationError
from pangloss.core.graph import AttributeGraph, ParameterNode
from pangloss.training.optimizers import MultiplierTable


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def index_name_map():
    return {0: 'fc_weight', 1: 'fc_bias', 2: 'bn_gamma', 3: 'bn_beta'}


@pytest.fixture
def graph():
    return AttributeGraph([
        ParameterNode('fc_weight', {'lr_mult': '0.5', 'wd_mult': '3'}),
        ParameterNode('fc_bias', {'lr_mult': '2'}),
    ])


# ============================================================================
# TEST WEIGHT DECAY EXEMPTION
# ============================================================================

def test_non_weight_names_exempt_from_weight_decay(index_name_map):
    table = MultiplierTable.build(index_name_map)

    assert table.wd_multiplier(0) == 1.0   # fc_weight
    assert table.wd_multiplier(1) == 0.0   # fc_bias
    assert table.wd_multiplier(2) == 1.0   # bn_gamma
    assert table.wd_multiplier(3) == 0.0   # bn_beta


def test_exemption_does_not_touch_lr(index_name_map):
    table = MultiplierTable.build(index_name_map)
    assert [table.lr_multiplier(i) for i in range(4)] == [1.0, 1.0, 1.0, 1.0]


# ============================================================================
# TEST SOURCES AND PRECEDENCE
# ============================================================================

def test_graph_attributes(index_name_map, graph):
    table = MultiplierTable.build(index_name_map, graph=graph)

    assert table.lr_multiplier(0) == 0.5
    assert table.lr_multiplier(1) == 2.0
    assert table.wd_multiplier(0) == 3.0


def test_override_beats_graph_attribute(index_name_map, graph):
    table = MultiplierTable.build(
        index_name_map,
        graph=graph,
        lr_mult_overrides={'fc_weight': 0.25},
        wd_mult_overrides={'fc_bias': 1.0},
    )

    assert table.lr_multiplier(0) == 0.25
    assert table.wd_multiplier(1) == 1.0   # exemption overridden


def test_graph_attribute_beats_exemption():
    graph = AttributeGraph([ParameterNode('fc_bias', {'wd_mult': '0.5'})])
    table = MultiplierTable.build({1: 'fc_bias'}, graph=graph)
    assert table.wd_multiplier(1) == 0.5


def test_index_string_key_beats_name(index_name_map):
    table = MultiplierTable.build(
        index_name_map,
        lr_mult_overrides={'0': 4.0, 'fc_weight': 0.5},
    )
    assert table.lr_multiplier(0) == 4.0


def test_index_string_key_without_name():
    table = MultiplierTable.build(lr_mult_overrides={'9': 3.0})
    assert table.lr_multiplier(9) == 3.0


# ============================================================================
# TEST FALLBACK
# ============================================================================

def test_unknown_index_falls_back_to_one(index_name_map):
    table = MultiplierTable.build(index_name_map, wd_mult_overrides={'fc_weight': 2.0})

    assert table.lr_multiplier(5) == 1.0
    assert table.wd_multiplier(5) == 1.0
    assert table.name_of(5) is None


def test_empty_table():
    table = MultiplierTable.build()
    assert table.lr_multiplier(0) == 1.0
    assert table.wd_multiplier(0) == 1.0


# ============================================================================
# TEST ERRORS
# ============================================================================

def test_malformed_attribute_raises():
    graph = AttributeGraph([ParameterNode('fc_weight', {'lr_mult': 'fast'})])
    with pytest.raises(ConfigurationError, match='fc_weight_lr_mult'):
        MultiplierTable.build({0: 'fc_weight'}, graph=graph)


def test_malformed_override_raises():
    with pytest.raises(ConfigurationError):
        MultiplierTable.build(wd_mult_overrides={'fc_weight': 'heavy'})


def test_tables_are_read_only(index_name_map):
    table = MultiplierTable.build(index_name_map)
    with pytest.raises(TypeError):
        table.wd_mult['fc_weight'] = 5.0
    with pytest.raises(TypeError):
        table.index_name_map[9] = 'x'
