#!/usr/bin/env python
"""
Verification script to check that the playground environment is set up correctly.
"""

import sys
import torch


def verify_setup():
    """Verify that the environment is set up correctly."""
    print("=" * 60)
    print("MLP Playground Environment Verification")
    print("=" * 60)
    print()

    # Check Python version
    print(f"Python version: {sys.version}")
    print()

    # Check PyTorch
    print("PyTorch:")
    print(f"  Version: {torch.__version__}")
    print(f"  float64 support: {torch.zeros(1, dtype=torch.float64).dtype == torch.float64}")
    print()

    # Check other dependencies
    print("Other dependencies:")
    try:
        import numpy
        print(f"  ✓ NumPy: {numpy.__version__}")
    except ImportError:
        print("  ✗ NumPy: NOT INSTALLED")

    try:
        import matplotlib
        print(f"  ✓ Matplotlib: {matplotlib.__version__}")
    except ImportError:
        print("  ✗ Matplotlib: NOT INSTALLED")

    try:
        import yaml
        print(f"  ✓ PyYAML: {yaml.__version__}")
    except ImportError:
        print("  ✗ PyYAML: NOT INSTALLED")

    try:
        import tqdm
        print(f"  ✓ tqdm: {tqdm.__version__}")
    except ImportError:
        print("  ✗ tqdm: NOT INSTALLED")

    try:
        import wandb
        print(f"  ✓ Wandb: {wandb.__version__}")
    except ImportError:
        print("  ⚠ Wandb: NOT INSTALLED (only needed with logging.wandb.enabled)")

    print()

    # Smoke test: one training step on the CPU
    print("Training step test:")
    try:
        from playground import MLP, Optimizer

        model = MLP([2, 4, 1], activation="tanh")
        opt = Optimizer(model, lr=0.05)
        y, cache = model.forward([0.5, -0.5], training=True)
        opt.apply(model, model.backward([[1.0]], cache))
        print(f"  ✓ Forward/backward/apply OK (output {float(y[0, 0]):.4f})")
    except Exception as e:
        print(f"  ✗ Training step failed: {e}")
        return False

    print()
    print("=" * 60)
    print("Verification complete!")
    print("=" * 60)

    return True


if __name__ == "__main__":
    verify_setup()
