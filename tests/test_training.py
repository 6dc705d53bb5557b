"""
Tests for the training loop and the cooperative training session.
"""

import pytest
import torch

from playground.errors import ConfigurationError
from playground.models.mlp import MLP, build
from playground.optimizers.sgd import Optimizer
from playground.utils.data import PointSet, create_quadrant_dataset, create_toy_dataset
from playground.utils.training import TrainingSession, mse_loss, train_sgd, train_step


def test_mse_loss_is_half_squared_error():
    y_pred = torch.tensor([[0.75]], dtype=torch.float64)
    y_true = torch.tensor([[0.25]], dtype=torch.float64)
    assert mse_loss(y_pred, y_true) == pytest.approx(0.125)


def test_train_step_returns_pre_update_loss():
    model = MLP([2, 4, 1], activation="tanh")
    opt = Optimizer(model, lr=0.05)
    x = torch.tensor([[0.5], [-0.5]], dtype=torch.float64)
    y = torch.tensor([[1.0]], dtype=torch.float64)

    expected = mse_loss(model.forward(x), y)
    assert train_step(model, opt, x, y) == pytest.approx(expected)


def test_quadrant_points_loss_decreases():
    """[2, 8, 1] relu on the four quadrant points learns the x-sign rule."""
    model = build([2, 8, 1], "relu")
    opt = Optimizer(model, lr=0.05)
    points = create_quadrant_dataset()

    losses = train_sgd(model, opt, points, num_steps=500,
                       generator=torch.Generator().manual_seed(0))

    assert len(losses) == 500
    first = sum(losses[:50]) / 50
    last = sum(losses[-50:]) / 50
    assert last < first


def test_train_sgd_rejects_empty_points():
    model = MLP([2, 4, 1])
    with pytest.raises(ConfigurationError):
        train_sgd(model, Optimizer(model), PointSet(), num_steps=1)


class TestTrainingSession:

    def make_session(self, n_samples=40):
        session = TrainingSession(create_toy_dataset(n_samples, pattern="halves", seed=1), seed=0)
        session.build([2, 8, 1], "tanh", {"lr": 0.05})
        return session

    def test_build_requires_playground_shape(self):
        session = TrainingSession()
        for sizes in ([3, 4, 1], [2, 4, 2], [2]):
            with pytest.raises(ConfigurationError):
                session.build(sizes)

    def test_build_passes_optimizer_settings(self):
        session = TrainingSession()
        session.build([2, 4, 1], "relu", {"lr": 0.2, "momentum": 0.5, "clip_norm": 1.0})
        assert session.optimizer.lr == 0.2
        assert session.optimizer.momentum == 0.5
        assert session.optimizer.clip_norm == 1.0
        assert session.status == "Built model"

    def test_build_rejects_bad_activation(self):
        with pytest.raises(ConfigurationError):
            TrainingSession().build([2, 4, 1], "bogus")

    def test_tick_without_model(self):
        session = TrainingSession(create_quadrant_dataset())
        assert session.train_tick(5) is None
        assert session.status == "Build a model first"
        assert session.runs.active is not None

    def test_tick_without_points(self):
        session = TrainingSession()
        session.build([2, 4, 1])
        assert session.train_tick(5) is None
        assert session.status == "Add points first"

    def test_tick_records_average_loss(self):
        session = self.make_session()
        loss = session.train_tick(10)

        assert loss is not None
        assert session.step_count == 10
        assert session.runs.active.points == [(10, pytest.approx(loss))]
        assert session.last_loss == loss
        assert session.status == "Training"

    def test_ticks_accumulate_steps(self):
        session = self.make_session()
        for _ in range(3):
            session.train_tick(7)
        assert session.step_count == 21
        assert session.runs.active.steps == [7, 14, 21]

    def test_reset_weights_rebuilds(self):
        session = self.make_session()
        session.train_tick(10)
        old = session.model
        session.reset_weights()

        assert session.model is not old
        assert session.step_count == 0
        assert session.status == "Reset weights"
        assert session.optimizer.lr == 0.05

    def test_reset_without_build(self):
        assert TrainingSession().reset_weights() is None

    def test_clear_points(self):
        session = self.make_session()
        session.clear_points()
        assert len(session.points) == 0
        assert session.status == "Cleared points"

    def test_run_executes_ticks(self):
        session = self.make_session()
        losses = session.run(5, steps_per_tick=4, verbose=False)

        assert len(losses) == 5
        assert session.step_count == 20
        assert not session.is_running
        assert session.status == "Stopped"

    def test_stop_takes_effect_at_next_tick(self):
        session = self.make_session()
        seen = []

        def on_tick(s, loss):
            seen.append(s.step_count)
            if len(seen) == 3:
                s.stop()

        losses = session.run(100, steps_per_tick=2, on_tick=on_tick, verbose=False)

        assert len(losses) == 3
        assert seen == [2, 4, 6]
        assert not session.is_running

    def test_start_is_idempotent(self):
        session = self.make_session()
        session.start()
        session.start()
        assert session.is_running
        assert len(session.runs) == 1

    def test_new_run_after_rebuild(self):
        session = self.make_session()
        session.train_tick(5)
        first = session.runs.active
        session.build([2, 4, 1], "relu")
        session.runs.new_run()
        session.train_tick(5)

        assert len(session.runs) == 2
        assert session.runs.active is not first
        assert session.runs.active.points[0][0] == 5
