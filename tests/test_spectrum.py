"""Tests for the isotropic structure factor and co-spectrum."""

import numpy as np
import pytest

from isospec import (
    StructureFactor,
    ShapeMismatchError,
    UnsupportedDimensionError,
    isotropic_structure_factor,
    budget,
    fit_power_law,
)
from isospec.analysis import setup, structure_factor_, budget_


def _padded_pair(a, b):
    """Zero-pad the shorter of two bin sequences to the longer length."""
    n = max(len(a), len(b))
    return np.pad(a, (0, n - len(a))), np.pad(b, (0, n - len(b)))


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class TestStructureFactorRecord:
    """Tests for the StructureFactor record."""

    def test_empty(self):
        """Test the zeroed constructor."""
        S = StructureFactor.empty(10, 2, box_length=4 * np.pi)
        assert S.dim == 2
        assert S.dk == pytest.approx(0.5)
        assert len(S.k) == len(S.sk) == 11
        np.testing.assert_allclose(S.k, 0.5 * np.arange(11))
        np.testing.assert_array_equal(S.sk, 0.0)

    def test_length_mismatch(self):
        """Test that misaligned k and sk are rejected."""
        with pytest.raises(ValueError):
            StructureFactor(dim=1, box_length=2 * np.pi, dk=1.0, k=np.zeros(3), sk=np.zeros(4))

    def test_invalid_box_length(self):
        """Test that a non-positive box length is rejected."""
        with pytest.raises(ValueError):
            StructureFactor.empty(4, 1, box_length=0.0)

    def test_invalid_dimension(self):
        """Test that dimension 4 is rejected."""
        with pytest.raises(UnsupportedDimensionError):
            StructureFactor.empty(4, 4)


class TestIsotropicStructureFactor:
    """Tests for auto-power structure factors."""

    @pytest.mark.parametrize("shape", [(64,), (32, 32), (16, 16, 16)])
    def test_aligned_finite_nonnegative(self, rng, shape):
        """Test that bins are aligned, finite and non-negative."""
        field = rng.standard_normal(shape)
        S = isotropic_structure_factor(np.fft.rfftn(field))
        assert S.dim == len(shape)
        assert len(S.k) == len(S.sk)
        assert np.all(np.isfinite(S.sk))
        assert np.all(S.sk >= 0)

    def test_wavenumber_axis(self, rng):
        """Test that k is spaced by 2 pi / box_length."""
        uk = np.fft.rfftn(rng.standard_normal((16, 16)))
        S = isotropic_structure_factor(uk, box_length=2.0)
        assert S.dk == pytest.approx(np.pi)
        np.testing.assert_allclose(S.k, np.pi * np.arange(len(S.k)))

    @pytest.mark.parametrize("shape", [(16,), (16, 12), (8, 10, 6)])
    def test_conventions_agree(self, rng, shape):
        """Test that rfftn and fftn spectra give the same S(k)."""
        field = rng.standard_normal(shape)
        S_half = isotropic_structure_factor(np.fft.rfftn(field), isreal=True)
        S_full = isotropic_structure_factor(np.fft.fftn(field), isreal=False)
        a, b = _padded_pair(S_half.sk, S_full.sk)
        np.testing.assert_allclose(a, b, rtol=1e-10, atol=1e-14)

    def test_conventions_agree_first_axis(self, rng):
        """Test that halving the first axis matches the full spectrum."""
        field = rng.standard_normal((12, 10))
        uk = np.fft.rfftn(field, axes=(1, 0))
        S_half = isotropic_structure_factor(uk, axis=0)
        S_full = isotropic_structure_factor(np.fft.fftn(field), isreal=False)
        a, b = _padded_pair(S_half.sk, S_full.sk)
        np.testing.assert_allclose(a, b, rtol=1e-10, atol=1e-14)

    @pytest.mark.parametrize("isreal", [True, False])
    def test_parseval(self, rng, isreal):
        """Test that the bins sum to half the mean square of the field."""
        field = rng.standard_normal((16, 8))
        uk = np.fft.rfftn(field) if isreal else np.fft.fftn(field)
        S = isotropic_structure_factor(uk, isreal=isreal)
        assert S.sk.sum() == pytest.approx(0.5 * np.mean(field**2))

    @pytest.mark.parametrize("isreal", [True, False])
    def test_constant_field(self, isreal):
        """Test that a constant field puts all power in bin 0."""
        field = np.full(8, 3.0)
        uk = np.fft.rfft(field) if isreal else np.fft.fft(field)
        S = isotropic_structure_factor(uk, isreal=isreal)
        assert S.sk[0] == pytest.approx(4.5)
        np.testing.assert_allclose(S.sk[1:], 0.0, atol=1e-14)

    def test_single_mode_2d(self):
        """Test that cos(3x + 4y) lands in bin |k| = 5."""
        N = 32
        x = 2 * np.pi * np.arange(N) / N
        X, Y = np.meshgrid(x, x, indexing="ij")
        S = isotropic_structure_factor(np.fft.rfftn(np.cos(3 * X + 4 * Y)))
        assert S.sk[5] == pytest.approx(0.25)
        np.testing.assert_allclose(np.delete(S.sk, 5), 0.0, atol=1e-12)

    def test_preserve_input(self, rng):
        """Test that the default call leaves the spectrum unchanged."""
        uk = np.fft.rfftn(rng.standard_normal((16, 16)))
        before = uk.copy()
        isotropic_structure_factor(uk)
        np.testing.assert_allclose(uk, before, rtol=1e-14, atol=0)

    def test_no_preserve_leaves_edges_scaled(self, rng):
        """Test that preserve=False leaves the edge planes scaled."""
        uk = np.fft.rfftn(rng.standard_normal((8, 8)))
        before = uk.copy()
        isotropic_structure_factor(uk, preserve=False)
        np.testing.assert_allclose(uk[:, 0], before[:, 0] * np.sqrt(0.5))
        np.testing.assert_allclose(uk[:, -1], before[:, -1] * np.sqrt(0.5))
        np.testing.assert_array_equal(uk[:, 1:-1], before[:, 1:-1])

    def test_no_preserve_same_result(self, rng):
        """Test that preserve does not change S(k)."""
        field = rng.standard_normal((8, 8))
        S1 = isotropic_structure_factor(np.fft.rfftn(field))
        S2 = isotropic_structure_factor(np.fft.rfftn(field), preserve=False)
        np.testing.assert_allclose(S1.sk, S2.sk)

    def test_complex_convention_never_mutates(self, rng):
        """Test that full spectra are not scaled at all."""
        uk = np.fft.fftn(rng.standard_normal((8, 8)))
        before = uk.copy()
        isotropic_structure_factor(uk, isreal=False, preserve=False)
        np.testing.assert_array_equal(uk, before)

    def test_complex_field(self, rng):
        """Test a genuinely complex field under the full convention."""
        field = rng.standard_normal((16, 16)) + 1j * rng.standard_normal((16, 16))
        S = isotropic_structure_factor(np.fft.fftn(field), isreal=False)
        assert S.sk.sum() == pytest.approx(0.5 * np.mean(np.abs(field) ** 2))

    def test_vector_field(self, rng):
        """Test that vector components add their powers."""
        u = np.fft.rfftn(rng.standard_normal((16, 16)))
        v = np.fft.rfftn(rng.standard_normal((16, 16)))
        S_vec = isotropic_structure_factor((u, v))
        S_u = isotropic_structure_factor(u)
        S_v = isotropic_structure_factor(v)
        np.testing.assert_allclose(S_vec.sk, S_u.sk + S_v.sk)

    def test_vector_field_shape_mismatch(self, rng):
        """Test that components of different shapes are rejected."""
        u = np.fft.rfftn(rng.standard_normal((16, 16)))
        v = np.fft.rfftn(rng.standard_normal((16, 8)))
        with pytest.raises(ShapeMismatchError):
            isotropic_structure_factor((u, v))

    def test_empty_tuple(self):
        """Test that an empty tuple is rejected."""
        with pytest.raises(ValueError):
            isotropic_structure_factor(())

    def test_unsupported_dimension(self):
        """Test that 4D spectra are rejected before mutation."""
        uk = np.ones((4, 4, 4, 3), dtype=complex)
        with pytest.raises(UnsupportedDimensionError):
            isotropic_structure_factor(uk, preserve=False)
        np.testing.assert_array_equal(uk, 1.0)

    def test_result_is_read_only(self, rng):
        """Test that the returned arrays cannot be modified."""
        S = isotropic_structure_factor(np.fft.rfftn(rng.standard_normal(32)))
        with pytest.raises(ValueError):
            S.sk[0] = 1.0
        with pytest.raises(ValueError):
            S.k[0] = 1.0

    def test_verbose(self, rng, capsys):
        """Test that verbose prints a summary."""
        isotropic_structure_factor(np.fft.rfftn(rng.standard_normal(16)), verbose=True)
        out = capsys.readouterr().out
        assert "Isotropic structure factor" in out
        assert "dim = 1" in out


class TestAccumulators:
    """Tests for the low-level in-place accumulators."""

    def test_setup(self):
        """Test grid, normalization and record from setup."""
        grid, norm, S = setup((8, 5))
        assert grid.shape == (8, 5)
        assert norm == pytest.approx(1.0 / 64**2)
        assert len(S.sk) == 8
        assert S.dim == 2

    def test_deferred_normalization(self, rng):
        """Test that structure_factor_ leaves normalization to the caller."""
        uk = np.fft.fftn(rng.standard_normal(16))
        grid, norm, S = setup(uk.shape, False)
        structure_factor_(S, grid, uk)
        assert S.sk.sum() == pytest.approx(np.sum(np.abs(uk) ** 2))

    def test_grid_shape_mismatch(self, rng):
        """Test that a spectrum not matching the grid is rejected."""
        grid, norm, S = setup((8,))
        with pytest.raises(ShapeMismatchError):
            structure_factor_(S, grid, np.ones(9, dtype=complex))

    def test_too_few_bins(self):
        """Test that an undersized accumulator is rejected."""
        grid, norm, _ = setup((16,))
        with pytest.raises(ValueError):
            structure_factor_(StructureFactor.empty(2, 1), grid, np.ones(16, dtype=complex))

    def test_budget_inline_normalization(self, rng):
        """Test that budget_ applies the normalization itself."""
        uk = np.fft.fftn(rng.standard_normal(16))
        grid, norm, S = setup(uk.shape, False)
        budget_(S, grid, uk, uk.copy(), norm)
        assert S.sk.sum() == pytest.approx(norm * np.sum(np.abs(uk) ** 2))


class TestBudget:
    """Tests for the cross-power co-spectrum."""

    @pytest.mark.parametrize("isreal", [True, False])
    def test_self_consistency(self, rng, isreal):
        """Test that budget(u, u) reproduces the auto-power S(k)."""
        field = rng.standard_normal((16, 12))
        uk = np.fft.rfftn(field) if isreal else np.fft.fftn(field)
        S_auto = isotropic_structure_factor(uk, isreal=isreal)
        S_cross = budget(uk, uk.copy(), isreal=isreal)
        np.testing.assert_allclose(S_cross.sk, S_auto.sk, rtol=1e-12, atol=1e-16)

    def test_aliased_inputs(self, rng):
        """Test that passing the same array twice is not double-scaled."""
        uk = np.fft.rfftn(rng.standard_normal((16, 12)))
        S_auto = isotropic_structure_factor(uk)
        S_cross = budget(uk, uk)
        np.testing.assert_allclose(S_cross.sk, S_auto.sk, rtol=1e-12, atol=1e-16)

    def test_symmetric(self, rng):
        """Test that the co-spectrum is symmetric in its arguments."""
        u = np.fft.rfftn(rng.standard_normal((16, 16)))
        v = np.fft.rfftn(rng.standard_normal((16, 16)))
        np.testing.assert_allclose(budget(u, v).sk, budget(v, u).sk, atol=1e-15)

    def test_preserves_inputs(self, rng):
        """Test that both spectra are unchanged by default."""
        u = np.fft.rfftn(rng.standard_normal((8, 8)))
        v = np.fft.rfftn(rng.standard_normal((8, 8)))
        u0, v0 = u.copy(), v.copy()
        budget(u, v)
        np.testing.assert_allclose(u, u0, rtol=1e-14, atol=0)
        np.testing.assert_array_equal(v, v0)

    def test_no_preserve_scales_first_only(self, rng):
        """Test that preserve=False halves the edges of uk only."""
        u = np.fft.rfftn(rng.standard_normal((8, 8)))
        v = np.fft.rfftn(rng.standard_normal((8, 8)))
        u0, v0 = u.copy(), v.copy()
        budget(u, v, preserve=False)
        np.testing.assert_allclose(u[:, 0], 0.5 * u0[:, 0])
        np.testing.assert_array_equal(v, v0)

    def test_shape_mismatch(self):
        """Test that spectra of different shapes are rejected unchanged."""
        u = np.ones(8, dtype=complex)
        v = np.ones(9, dtype=complex)
        with pytest.raises(ShapeMismatchError):
            budget(u, v, preserve=False)
        np.testing.assert_array_equal(u, 1.0)
        np.testing.assert_array_equal(v, 1.0)

    def test_shape_mismatch_is_value_error(self):
        """Test that the shape error is also a ValueError."""
        with pytest.raises(ValueError):
            budget(np.ones(8, dtype=complex), np.ones(9, dtype=complex))

    def test_anticorrelated_fields(self, rng):
        """Test that u and -u give a non-positive co-spectrum."""
        u = np.fft.rfftn(rng.standard_normal(32))
        S = budget(u, -u)
        assert np.all(S.sk <= 1e-15)


class TestPowerLawFit:
    """Tests for power-law fits of S(k)."""

    def test_exact_power_law(self):
        """Test that an exact power law is recovered."""
        k = np.arange(32, dtype=float)
        sk = np.zeros_like(k)
        sk[1:] = 2.0 * k[1:] ** -1.5
        S = StructureFactor(dim=1, box_length=2 * np.pi, dk=1.0, k=k, sk=sk)
        A, beta, r_squared = fit_power_law(S)
        assert A == pytest.approx(2.0)
        assert beta == pytest.approx(1.5)
        assert r_squared == pytest.approx(1.0)

    def test_range(self):
        """Test that the fit honours k_min and k_max."""
        k = np.arange(32, dtype=float)
        sk = np.zeros_like(k)
        sk[1:] = np.where(k[1:] < 10, k[1:] ** -1.0, 10.0 * k[1:] ** -2.0)
        S = StructureFactor(dim=1, box_length=2 * np.pi, dk=1.0, k=k, sk=sk)
        _, beta, _ = fit_power_law(S, k_min=12, k_max=30)
        assert beta == pytest.approx(2.0)

    def test_mean_bin_skipped_by_default(self):
        """Test that the k = 0 bin does not enter the default fit."""
        k = 0.5 * np.arange(32, dtype=float)
        sk = np.zeros_like(k)
        sk[0] = 100.0
        sk[1:] = 3.0 * k[1:] ** -2.0
        S = StructureFactor(dim=2, box_length=4 * np.pi, dk=0.5, k=k, sk=sk)
        A, beta, r_squared = fit_power_law(S)
        assert A == pytest.approx(3.0)
        assert beta == pytest.approx(2.0)
        assert r_squared == pytest.approx(1.0)

    def test_nonpositive_k_min(self):
        """Test that k_min = 0 is rejected."""
        k = np.arange(8, dtype=float)
        S = StructureFactor(dim=1, box_length=2 * np.pi, dk=1.0, k=k, sk=np.ones(8))
        with pytest.raises(ValueError):
            fit_power_law(S, k_min=0.0)

    def test_not_enough_points(self):
        """Test that a fit with fewer than two points fails."""
        S = StructureFactor.empty(4, 1)
        with pytest.raises(ValueError):
            fit_power_law(S)
