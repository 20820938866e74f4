"""
Tests for the name -> factory registry.

Tests:
- Registration (table and decorator)
- Case-insensitive lookup
- Soft (create) and hard (get) lookup failures
- Metadata tracking
"""

import pytest

from pangloss.core.errors import ConfigurationError
from pangloss.core.registry import Registry


# ============================================================================
# TEST FIXTURES
# ============================================================================

class Widget:
    """A widget for testing."""

    def __init__(self, size: int = 1):
        self.size = size


class Gadget:
    def __init__(self, **kwargs):
        self.kwargs = kwargs


@pytest.fixture
def registry():
    return Registry('widget', {'widget': Widget})


# ============================================================================
# TEST REGISTRATION
# ============================================================================

def test_table_entries_are_registered(registry):
    assert registry.has('widget')
    assert 'widget' in registry
    assert len(registry) == 1


def test_register_decorator(registry):
    @registry.register('Gadget')
    class Registered(Gadget):
        pass

    assert registry.has('gadget')
    assert registry.get('GADGET') is Registered


def test_duplicate_registration_raises(registry):
    with pytest.raises(ValueError, match="already registered"):
        registry.add('WIDGET', Gadget)


def test_override_replaces_entry(registry):
    registry.add('widget', Gadget, override=True)
    assert registry.get('widget') is Gadget


def test_empty_name_raises(registry):
    with pytest.raises(ValueError):
        registry.add('  ', Gadget)


# ============================================================================
# TEST LOOKUP
# ============================================================================

@pytest.mark.parametrize('name', ['widget', 'WIDGET', 'Widget', '  widget '])
def test_create_is_case_insensitive(registry, name):
    obj = registry.create(name, size=3)
    assert isinstance(obj, Widget)
    assert obj.size == 3


def test_create_unknown_returns_none(registry):
    assert registry.create('sprocket') is None


def test_get_unknown_raises_configuration_error(registry):
    with pytest.raises(ConfigurationError, match="Available: widget"):
        registry.get('sprocket')


def test_get_unknown_is_a_value_error(registry):
    with pytest.raises(ValueError):
        registry.get('sprocket')


def test_names_sorted():
    registry = Registry('thing', {'b': Gadget, 'A': Widget})
    assert registry.names() == ['a', 'b']
    assert list(registry) == ['a', 'b']


# ============================================================================
# TEST METADATA
# ============================================================================

def test_metadata_tracks_class_and_doc(registry):
    meta = registry.metadata()['widget']
    assert meta['class'] == 'Widget'
    assert meta['doc'] == 'A widget for testing.'


def test_metadata_is_a_copy(registry):
    registry.metadata()['widget']['class'] = 'changed'
    assert registry.metadata()['widget']['class'] == 'Widget'


def test_repr(registry):
    assert repr(registry) == "Registry('widget', names=['widget'])"
