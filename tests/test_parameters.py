"""Tests for the algorithm parameters."""

import pytest
from pydantic import ValidationError

from acpc.parameters import AlgParameters


class TestAlgParameters:
    """Test defaults and range checks."""

    def test_defaults(self):
        params = AlgParameters()
        assert params.line_int_step == 0.1
        assert params.weights_step == 0.1
        assert params.centers_step == 1.0
        assert params.volume_tolerance == 0.002
        assert params.convergence_criterion == 0.02
        assert params.max_iterations_volume == 200
        assert params.max_iterations_centers == 500
        assert params.volume_lower_bound == 1e-5
        assert params.robustness_constant == 1e-7

    def test_mult(self):
        assert AlgParameters().mult == 10_000_000
        assert AlgParameters(robustness_constant=1e-3).mult == 1000

    @pytest.mark.parametrize("field,value", [
        ("line_int_step", 0.0),
        ("line_int_step", 1.5),
        ("centers_step", 0.0),
        ("centers_step", 2.0),
        ("weights_step", -0.1),
        ("volume_tolerance", 0.0),
        ("convergence_criterion", -1.0),
        ("max_iterations_volume", 0),
        ("max_iterations_centers", -5),
        ("volume_lower_bound", 0.0),
        ("volume_lower_bound", 1.0),
        ("robustness_constant", 0.0),
    ])
    def test_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            AlgParameters(**{field: value})

    def test_frozen(self):
        params = AlgParameters()
        with pytest.raises(ValidationError):
            params.weights_step = 0.5

    def test_copy_with_update(self):
        params = AlgParameters().model_copy(update={"weights_step": 0.02})
        assert params.weights_step == 0.02
        assert params.centers_step == 1.0
