"""
Tests for the scripted experiments (config-driven runs).
"""

import yaml

from playground.experiments.optimizer_ablation import make_variants
from playground.experiments.train_playground import create_points, load_config, optimizer_settings, run


def tiny_config(save_dir):
    return {
        "experiment": {"name": "test", "seed": 1},
        "dataset": {"pattern": "circle", "n_samples": 30},
        "model": {"layers": "2,4,1", "activation": "tanh"},
        "optimizer": {"lr": 0.05, "momentum": 0.5},
        "training": {"ticks": 3, "steps_per_tick": 5},
        "logging": {"save_dir": str(save_dir), "grid_resolution": 6, "wandb": {"enabled": False}},
    }


def test_load_config(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(yaml.dump({"model": {"layers": [2, 3, 1]}}))
    assert load_config(str(path)) == {"model": {"layers": [2, 3, 1]}}


def test_load_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == {}


def test_optimizer_settings_defaults():
    assert optimizer_settings({}) == {
        "lr": 0.01, "momentum": 0.0, "l2": 0.0, "weight_decay": 0.0, "clip_norm": 0.0,
    }


def test_create_points_quadrants():
    assert len(create_points({"pattern": "quadrants"}, seed=0)) == 4


def test_run_writes_outputs(tmp_path):
    session = run(tiny_config(tmp_path))

    assert session.step_count == 15
    assert len(session.runs.active.points) == 3
    outputs = sorted(p.name for p in tmp_path.rglob("*") if p.is_file())
    assert any(name.endswith("_decision_boundary.png") for name in outputs)
    assert any(name.endswith("_loss_history.png") for name in outputs)
    assert any(name.endswith("_config.yaml") for name in outputs)


def test_make_variants_grid():
    cfg = {
        "optimizer": {"lr": 0.1},
        "ablation": {"momentum": [0.0, 0.9], "clip_norm": [0.0, 1.0]},
    }
    variants = make_variants(cfg)

    assert len(variants) == 4
    suffixes = [s for s, _ in variants]
    assert "mom0.9_l20.0_wd0.0_clip1.0" in suffixes
    assert all(settings["lr"] == 0.1 for _, settings in variants)
