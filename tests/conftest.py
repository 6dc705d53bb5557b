import matplotlib

matplotlib.use("Agg")

import pytest
import torch


@pytest.fixture(autouse=True)
def seed_everything():
    """Fixed global seed so weight initialization is reproducible."""
    torch.manual_seed(0)
