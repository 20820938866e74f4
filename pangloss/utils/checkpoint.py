"""Checkpoint saving and loading utilities."""

import torch
from pathlib import Path
from typing import Optional, Dict, Any, Union
import logging

from ..core.errors import ConfigurationError
from ..training.optimizers import Optimizer, Updater

logger = logging.getLogger(__name__)


def save_checkpoint(
    optimizer: Optimizer,
    updater: Optional[Updater] = None,
    save_path: Union[str, Path] = "optimizer.pt",
    step: int = 0,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """Save optimizer progress: update counts, schedule state and per-index state.

    Args:
        optimizer: Optimizer whose counters and schedule are saved
        updater: State store whose per-index state is saved (optional)
        save_path: Path to save checkpoint
        step: Training step number
        metadata: Additional metadata to save

    Examples:
        >>> save_checkpoint(
        ...     optimizer, updater,
        ...     save_path="checkpoints/step_5000.pt",
        ...     step=5000,
        ... )
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    checkpoint = {
        'optimizer': optimizer.state_dict(),
        'step': step,
    }

    if updater is not None:
        checkpoint['updater'] = updater.state_dict()

    if metadata is not None:
        checkpoint['metadata'] = metadata

    torch.save(checkpoint, save_path)
    logger.info(f"Saved checkpoint to {save_path}")


def load_checkpoint(
    checkpoint_path: Union[str, Path],
    optimizer: Optional[Optimizer] = None,
    updater: Optional[Updater] = None,
    device: Optional[torch.device] = None,
) -> Dict[str, Any]:
    """Load an optimizer checkpoint.

    Args:
        checkpoint_path: Path to checkpoint file
        optimizer: Optimizer to load counters and schedule state into (optional)
        updater: State store to load per-index state into (optional)
        device: Device to map tensors to (default: cpu)

    Returns:
        Dictionary containing checkpoint data

    Raises:
        FileNotFoundError: If the checkpoint does not exist
        ConfigurationError: If it was saved by a different optimizer, or if
            ``optimizer`` is not the optimizer ``updater`` drives

    Examples:
        >>> checkpoint = load_checkpoint("checkpoint.pt")
        >>> print(f"Step: {checkpoint['step']}")

        >>> load_checkpoint("checkpoint.pt", optimizer=optimizer, updater=updater)
    """
    checkpoint_path = Path(checkpoint_path)

    if not checkpoint_path.exists():
        raise FileNotFoundError(f"Checkpoint not found: {checkpoint_path}")

    logger.info(f"Loading checkpoint from {checkpoint_path}")

    if optimizer is not None and updater is not None and optimizer is not updater.optimizer:
        raise ConfigurationError(
            f"optimizer {optimizer!r} is not the optimizer driven by updater ({updater.optimizer!r})"
        )

    if device is None:
        device = torch.device('cpu')

    checkpoint = torch.load(checkpoint_path, map_location=device, weights_only=False)

    if optimizer is None and updater is not None:
        optimizer = updater.optimizer

    if updater is not None and 'updater' in checkpoint:
        updater.load_state_dict(checkpoint['updater'])
        logger.info(f"Optimizer state loaded for {len(updater)} parameters")
    elif optimizer is not None and 'optimizer' in checkpoint:
        optimizer.load_state_dict(checkpoint['optimizer'])
        logger.info("Optimizer counters loaded")

    return checkpoint


def get_checkpoint_info(checkpoint_path: Union[str, Path]) -> Dict[str, Any]:
    """Get summary information from a checkpoint without applying it."""
    checkpoint = torch.load(Path(checkpoint_path), map_location='cpu', weights_only=False)
    optimizer_state = checkpoint.get('optimizer', {})
    counter = optimizer_state.get('counter', {})
    return {
        'step': checkpoint.get('step', 0),
        'optimizer': optimizer_state.get('component_name'),
        'num_update': counter.get('num_update'),
        'num_states': len(checkpoint.get('updater', {}).get('states', {})),
        'metadata': checkpoint.get('metadata', {}),
    }
