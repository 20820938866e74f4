"""
Tests for the optimizer coordination layer.

Tests cover:
- Effective learning rate and weight decay resolution
- Update counting and schedule interplay
- SGD arithmetic (plain, momentum, rescale, clip, weight decay)
- Shape checking
- State dict save/load
- Config-driven creation
"""

import pytest
import torch

from pangloss.core.errors import ConfigurationError, ShapeMismatchError
from pangloss.core.graph import AttributeGraph, ParameterNode
from pangloss.training.optimizers import (
    OPTIMIZER_REGISTRY,
    OptimizerSpec,
    SGDOptimizer,
    create_optimizer,
    create_optimizer_from_config,
    create_optimizer_from_spec,
    describe_parameters,
    get_optimizer_info,
)
from pangloss.training.schedulers import FactorScheduler


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def names():
    return {0: 'fc_weight', 1: 'fc_bias'}


@pytest.fixture
def optimizer(names):
    return SGDOptimizer(
        learning_rate=0.1,
        weight_decay=0.01,
        index_name_map=names,
        wd_mult_overrides={'fc_weight': 2.0},
    )


# ============================================================================
# TEST EFFECTIVE RATES
# ============================================================================

def test_override_only_affects_its_rate(optimizer):
    assert optimizer.effective_lr(0) == pytest.approx(0.1)
    assert optimizer.effective_wd(0) == pytest.approx(0.01 * 2.0)


def test_unmapped_index_uses_base_rates(optimizer):
    assert optimizer.effective_lr(5) == pytest.approx(0.1)
    assert optimizer.effective_wd(5) == pytest.approx(0.01)


def test_bias_exempt_from_weight_decay(optimizer):
    assert optimizer.effective_wd(1) == 0.0


def test_graph_attributes_feed_multipliers(names):
    graph = AttributeGraph([ParameterNode('fc_weight', {'lr_mult': '0.5'})])
    optimizer = SGDOptimizer(learning_rate=0.2, index_name_map=names, graph=graph)
    assert optimizer.effective_lr(0) == pytest.approx(0.1)
    assert optimizer.effective_lr(1) == pytest.approx(0.2)


def test_malformed_graph_attribute_fails_at_construction(names):
    graph = AttributeGraph([ParameterNode('fc_weight', {'wd_mult': 'n/a'})])
    with pytest.raises(ConfigurationError):
        SGDOptimizer(index_name_map=names, graph=graph)


@pytest.mark.parametrize('kwargs', [
    {'learning_rate': -0.1},
    {'weight_decay': -1.0},
    {'rescale_grad': 0.0},
    {'clip_gradient': -1.0},
    {'momentum': 1.5},
])
def test_invalid_hyperparameters(kwargs):
    with pytest.raises(ConfigurationError):
        SGDOptimizer(**kwargs)


# ============================================================================
# TEST UPDATE COUNTING AND SCHEDULES
# ============================================================================

def test_update_records_count(optimizer, weight, grad):
    optimizer.update(0, weight, grad, None)
    optimizer.update(0, weight, grad, None)
    optimizer.update(1, weight, grad, None)

    assert optimizer.counter.count(0) == 2
    assert optimizer.counter.count(1) == 1
    assert optimizer.num_update == 2


def test_schedule_sees_post_increment_count(weight, grad):
    seen = []

    def schedule(step):
        seen.append(step)
        return 0.1

    optimizer = SGDOptimizer(schedule=schedule, begin_update_count=10)
    optimizer.update(0, weight, grad, None)
    optimizer.update(0, weight, grad, None)

    assert seen == [11, 12]


def test_schedule_supersedes_base_rate(weight, grad):
    optimizer = SGDOptimizer(learning_rate=1.0, schedule=lambda step: 0.01)
    assert optimizer.effective_lr(0) == pytest.approx(0.01)


def test_schedule_base_lr_seeded_from_optimizer(weight, grad):
    schedule = FactorScheduler(step_size=1, factor=0.5)
    optimizer = SGDOptimizer(learning_rate=0.2, schedule=schedule)

    assert schedule.base_lr == 0.2

    optimizer.update(0, weight, grad, None)
    assert optimizer.effective_lr(0) == pytest.approx(0.2)

    optimizer.update(0, weight, grad, None)
    # num_update == 2 -> one halving
    assert optimizer.effective_lr(0) == pytest.approx(0.1)


def test_explicit_schedule_base_lr_kept():
    schedule = FactorScheduler(step_size=1, base_lr=0.5)
    SGDOptimizer(learning_rate=0.2, schedule=schedule)
    assert schedule.base_lr == 0.5


def test_lr_resolution_is_stateless_between_updates(optimizer):
    first = optimizer.effective_lr(0)
    second = optimizer.effective_lr(0)
    assert first == second
    assert optimizer.num_update == 0


# ============================================================================
# TEST SGD ARITHMETIC
# ============================================================================

def test_sgd_plain_step(weight, grad):
    optimizer = SGDOptimizer(learning_rate=0.1)
    new_weight, state = optimizer.update(0, weight, grad, optimizer.create_state(0, weight))

    assert state is None
    assert new_weight is weight
    assert torch.allclose(weight, torch.full((2, 3), 0.95))


def test_sgd_momentum(weight, grad):
    optimizer = SGDOptimizer(learning_rate=0.1, momentum=0.9)
    state = optimizer.create_state(0, weight)
    assert torch.equal(state, torch.zeros(2, 3))

    weight, state = optimizer.update(0, weight, grad, state)
    assert torch.allclose(state, torch.full((2, 3), -0.05))
    assert torch.allclose(weight, torch.full((2, 3), 0.95))

    weight, state = optimizer.update(0, weight, grad, state)
    assert torch.allclose(state, torch.full((2, 3), -0.095))
    assert torch.allclose(weight, torch.full((2, 3), 0.855))


def test_sgd_rescale_and_clip(weight, grad):
    optimizer = SGDOptimizer(learning_rate=0.1, rescale_grad=2.0, clip_gradient=0.5)
    optimizer.update(0, weight, grad, None)
    assert torch.allclose(weight, torch.full((2, 3), 0.95))


def test_sgd_weight_decay(names, weight, grad):
    optimizer = SGDOptimizer(learning_rate=0.1, weight_decay=0.1, index_name_map=names)

    optimizer.update(0, weight, grad, None)
    assert torch.allclose(weight, torch.full((2, 3), 0.94))

    bias = torch.ones(2, 3)
    optimizer.update(1, bias, grad, None)
    assert torch.allclose(bias, torch.full((2, 3), 0.95))


def test_sgd_does_not_track_gradients():
    weight = torch.ones(3, requires_grad=True)
    optimizer = SGDOptimizer(learning_rate=0.1)
    optimizer.update(0, weight, torch.ones(3), None)
    assert weight.grad_fn is None


# ============================================================================
# TEST SHAPE CHECKING
# ============================================================================

def test_shape_mismatch_raises(optimizer, weight):
    with pytest.raises(ShapeMismatchError) as exc_info:
        optimizer.update(0, weight, torch.ones(3, 2), None)

    assert exc_info.value.index == 0
    assert exc_info.value.weight_shape == (2, 3)


def test_shape_mismatch_is_not_counted(optimizer, weight):
    with pytest.raises(ShapeMismatchError):
        optimizer.update(0, weight, torch.ones(4), None)
    assert optimizer.counter.count(0) == 0


def test_shape_mismatch_leaves_weight_untouched(optimizer, weight):
    with pytest.raises(ShapeMismatchError):
        optimizer.update(0, weight, torch.ones(4), None)
    assert torch.equal(weight, torch.ones(2, 3))


# ============================================================================
# TEST STATE DICT
# ============================================================================

def test_state_dict_round_trip(optimizer, weight, grad):
    optimizer.update(0, weight, grad, None)
    optimizer.update(0, weight, grad, None)

    restored = SGDOptimizer(learning_rate=0.1)
    restored.load_state_dict(optimizer.state_dict())

    assert restored.num_update == 2
    assert restored.counter.count(0) == 2


def test_state_dict_includes_schedule():
    schedule = FactorScheduler(step_size=10, factor=0.5)
    optimizer = SGDOptimizer(learning_rate=0.1, schedule=schedule)
    assert optimizer.state_dict()['schedule']['base_lr'] == 0.1


def test_load_state_dict_from_other_optimizer_raises(optimizer):
    state = optimizer.state_dict()
    state['component_name'] = 'ccsgd'
    with pytest.raises(ConfigurationError):
        optimizer.load_state_dict(state)


# ============================================================================
# TEST FACTORY
# ============================================================================

def test_registry_contents():
    assert OPTIMIZER_REGISTRY.names() == ['ccsgd', 'sgd']


@pytest.mark.parametrize('name', ['sgd', 'SGD', 'Sgd'])
def test_create_optimizer_case_insensitive(name):
    optimizer = create_optimizer(name, learning_rate=0.1, momentum=0.9)
    assert isinstance(optimizer, SGDOptimizer)
    assert optimizer.momentum == 0.9


def test_create_optimizer_defaults():
    optimizer = create_optimizer('sgd')
    assert optimizer.learning_rate == 0.01
    assert optimizer.weight_decay == 0.0
    assert optimizer.momentum == 0.0


def test_create_unknown_optimizer_returns_none():
    assert create_optimizer('adamw') is None


def test_create_from_config(names):
    config = {
        'name': 'sgd',
        'learning_rate': 0.1,
        'weight_decay': 0.01,
        'momentum': 0.9,
        'wd_mult_overrides': {'fc_weight': 2.0},
    }
    optimizer = create_optimizer_from_config(config, index_name_map=names)

    assert isinstance(optimizer, SGDOptimizer)
    assert optimizer.momentum == 0.9
    assert optimizer.effective_wd(0) == pytest.approx(0.02)


def test_create_from_config_unknown_name_raises():
    with pytest.raises(ConfigurationError, match='Available'):
        create_optimizer_from_config({'name': 'adamw'})


def test_create_from_config_missing_name_raises():
    with pytest.raises(ConfigurationError):
        create_optimizer_from_config({'learning_rate': 0.1})


def test_create_from_config_does_not_mutate_input():
    config = {'name': 'sgd', 'momentum': 0.5}
    create_optimizer_from_config(config)
    assert config == {'name': 'sgd', 'momentum': 0.5}


def test_spec_round_trip():
    spec = OptimizerSpec(
        name='sgd',
        learning_rate=0.1,
        lr_mult_overrides={'fc_weight': 0.5},
        config={'momentum': 0.9},
    )
    restored = OptimizerSpec.from_dict(spec.to_dict())

    assert restored == spec


def test_spec_from_dict_tolerates_empty_override_maps():
    spec = OptimizerSpec.from_dict({'name': 'sgd', 'lr_mult_overrides': None})
    assert spec.lr_mult_overrides == {}


def test_create_from_spec_with_schedule():
    schedule = FactorScheduler(step_size=100, factor=0.5)
    optimizer = create_optimizer_from_spec(OptimizerSpec(name='sgd', learning_rate=0.3), schedule=schedule)
    assert optimizer.schedule is schedule
    assert schedule.base_lr == 0.3


# ============================================================================
# TEST UTILITIES
# ============================================================================

def test_get_optimizer_info(optimizer, weight, grad):
    optimizer.update(0, weight, grad, None)
    info = get_optimizer_info(optimizer)

    assert info['type'] == 'sgd'
    assert info['learning_rate'] == 0.1
    assert info['num_update'] == 1
    assert info['num_named_params'] == 2
    assert info['scheduled'] is False


def test_describe_parameters(optimizer):
    rows = describe_parameters(optimizer)

    assert [row['name'] for row in rows] == ['fc_weight', 'fc_bias']
    assert rows[0]['wd'] == pytest.approx(0.02)
    assert rows[1]['wd_mult'] == 0.0


def test_describe_unmapped_index(optimizer):
    (row,) = describe_parameters(optimizer, indices=[7])
    assert row['name'] is None
    assert row['lr'] == pytest.approx(0.1)
