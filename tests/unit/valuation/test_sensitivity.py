# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for WACC x terminal growth sensitivity grids.
"""

import math

import pytest

from underwrite.core import InputValidationError
from underwrite.valuation import (
    DCFInputs,
    DCFOptions,
    calculate_dcf,
    create_sensitivity_ranges,
    generate_sensitivity_matrix,
    sensitivity_table,
)


@pytest.fixture
def dcf_inputs() -> DCFInputs:
    return DCFInputs(
        fcf_series=[100.0, 110.0, 120.0],
        wacc=0.10,
        terminal_growth=0.02,
        net_debt=50.0,
        options=DCFOptions(associates_value=5.0),
    )


class TestSensitivityRanges:
    def test_symmetric_range(self):
        assert create_sensitivity_ranges(0.10, steps=5, step_size=0.01) == pytest.approx(
            [0.08, 0.09, 0.10, 0.11, 0.12]
        )

    def test_single_step(self):
        assert create_sensitivity_ranges(0.02, steps=1) == [0.02]

    @pytest.mark.parametrize(
        "kwargs",
        [dict(base_value="0.1"), dict(base_value=0.1, steps=0), dict(base_value=0.1, step_size=0)],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(InputValidationError):
            create_sensitivity_ranges(**kwargs)


class TestSensitivityMatrix:
    """Each cell is a fresh engine run, or None where wacc <= growth."""

    def test_undefined_cells(self, dcf_inputs):
        matrix = generate_sensitivity_matrix(dcf_inputs, [0.02, 0.10], [0.01, 0.02, 0.03])
        assert matrix[0][0] is not None
        assert matrix[0][1] is None
        assert matrix[0][2] is None
        assert all(cell is not None for cell in matrix[1])

    def test_cells_equal_direct_engine_calls(self, dcf_inputs):
        wacc_range = [0.08, 0.10, 0.12]
        growth_range = [0.01, 0.02, 0.03]
        matrix = generate_sensitivity_matrix(dcf_inputs, wacc_range, growth_range)
        for i, wacc in enumerate(wacc_range):
            for j, growth in enumerate(growth_range):
                direct = calculate_dcf(
                    dcf_inputs.fcf_series, wacc, growth, 50.0, dcf_inputs.options
                )
                assert matrix[i][j] == pytest.approx(direct.equity_value)

    def test_enterprise_value_metric(self, dcf_inputs):
        matrix = generate_sensitivity_matrix(
            dcf_inputs, [0.10], [0.02], metric="enterprise_value"
        )
        assert matrix[0][0] == pytest.approx(dcf_inputs.run().enterprise_value)

    def test_value_falls_as_wacc_rises(self, dcf_inputs):
        matrix = generate_sensitivity_matrix(dcf_inputs, [0.08, 0.10, 0.12], [0.02])
        column = [row[0] for row in matrix]
        assert column == sorted(column, reverse=True)

    def test_unknown_metric(self, dcf_inputs):
        with pytest.raises(InputValidationError):
            generate_sensitivity_matrix(dcf_inputs, [0.1], [0.02], metric="irr")

    def test_shape(self, dcf_inputs):
        matrix = generate_sensitivity_matrix(dcf_inputs, [0.08, 0.09], [0.0, 0.01, 0.02, 0.03])
        assert len(matrix) == 2
        assert all(len(row) == 4 for row in matrix)


def test_sensitivity_table(dcf_inputs):
    df = sensitivity_table(dcf_inputs, [0.02, 0.10], [0.01, 0.02])
    assert df.shape == (2, 2)
    assert df.index.name == "wacc"
    assert df.columns.name == "terminal_growth"
    assert math.isnan(df.loc[0.02, 0.02])
    assert df.loc[0.10, 0.02] == pytest.approx(dcf_inputs.run().equity_value)


def test_inputs_from_projection_reproduce_embedded_valuation(base_projection):
    inputs = DCFInputs.from_projection(base_projection)
    assert inputs.fcf_series == base_projection.unlevered_fcf_series
    assert inputs.run().equity_value == pytest.approx(base_projection.valuation.equity_value)
