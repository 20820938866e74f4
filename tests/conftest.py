"""Pytest configuration shared by the whole suite."""

import pytest
import torch


class FakeNativeAPI:
    """
    In-memory stand-in for NativeOptimizerAPI.

    Records every call. ``update_status`` / ``free_status`` set the status
    code returned by the next calls; ``creators`` lists the optimizer names
    the fake library knows.
    """

    def __init__(self, creators=('ccsgd',)):
        self.creators = {name: 0x1000 + i for i, name in enumerate(creators)}
        self.created = []
        self.updates = []
        self.freed = []
        self.update_status = 0
        self.free_status = 0
        self.error = ''
        self._next_handle = 0x5000

    def last_error(self):
        return self.error

    def find_creator(self, name):
        from pangloss.core.errors import NativeCallError

        if name not in self.creators:
            self.error = f"Cannot find optimizer {name}"
            raise NativeCallError('MXOptimizerFindCreator', -1, self.error)
        return self.creators[name]

    def create_optimizer(self, creator, params):
        self._next_handle += 0x10
        self.created.append((creator, list(params), self._next_handle))
        return self._next_handle

    def update(self, handle, index, weight, grad, lr, wd):
        self.updates.append({
            'handle': handle, 'index': index,
            'weight': weight, 'grad': grad,
            'lr': lr, 'wd': wd,
        })
        if self.update_status != 0:
            self.error = 'update rejected'
        return self.update_status

    def free(self, handle):
        self.freed.append(handle)
        return self.free_status


class FakeNDArray:
    """Native array stand-in: a shape plus an opaque NDArray handle."""

    def __init__(self, shape, handle):
        self.shape = tuple(shape)
        self.handle = handle

    def __repr__(self):
        return f"FakeNDArray({self.shape}, {hex(self.handle)})"


@pytest.fixture
def make_fake_api():
    """Factory for fake native libraries with custom creators."""
    return FakeNativeAPI


@pytest.fixture
def fake_api():
    """Fake native optimizer library."""
    return FakeNativeAPI()


@pytest.fixture
def patch_native_api(monkeypatch, fake_api):
    """Route the default native API lookup to ``fake_api``."""
    monkeypatch.setattr('pangloss.native.api.get_optimizer_api', lambda lib_path=None: fake_api)
    return fake_api


@pytest.fixture
def weight():
    """Small weight tensor."""
    return torch.ones(2, 3)


@pytest.fixture
def grad():
    """Gradient matching ``weight``."""
    return torch.full((2, 3), 0.5)


@pytest.fixture
def nd_weight():
    """NDArray-handle weight for the native optimizer."""
    return FakeNDArray((2, 3), 0xA000)


@pytest.fixture
def nd_grad():
    """NDArray-handle gradient matching ``nd_weight``."""
    return FakeNDArray((2, 3), 0xB000)
