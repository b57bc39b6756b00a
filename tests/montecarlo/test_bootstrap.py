"""
Tests for bootstrap resampling.

Tests ordinary, balanced, and parametric bootstrap with various statistics.
Verifies seed reproducibility, resample invariants, bias/SE properties and
failure attribution.
"""

import numpy as np
import pytest

from pyresampling.core.exceptions import (
    StatisticComputationError,
    ValidationError,
)
from pyresampling.montecarlo import BootstrapDesign, boot, statistics


# ---------------------------------------------------------------------------
# Statistic functions
# ---------------------------------------------------------------------------

def mean_stat(data, indices):
    """Bootstrap statistic: sample mean."""
    return np.mean(data[indices])


def mean_var_stat(data, indices):
    """Bootstrap statistic: mean and variance (2 statistics)."""
    d = data[indices]
    return np.array([np.mean(d), np.var(d, ddof=1)])


def regression_coef_stat(data, indices):
    """Bootstrap statistic: simple regression intercept and slope."""
    d = data[indices]
    x, y = d[:, 0], d[:, 1]
    x_bar, y_bar = np.mean(x), np.mean(y)
    slope = np.sum((x - x_bar) * (y - y_bar)) / np.sum((x - x_bar) ** 2)
    intercept = y_bar - slope * x_bar
    return np.array([intercept, slope])


# ---------------------------------------------------------------------------
# Tests: Ordinary bootstrap
# ---------------------------------------------------------------------------

class TestOrdinaryBootstrap:
    """Tests for sim='ordinary' bootstrap."""

    def test_basic_mean(self):
        """Bootstrap of the mean works correctly."""
        data = np.arange(1.0, 11.0)
        result = boot(data, mean_stat, R=999, seed=42)

        assert result.t0[0] == pytest.approx(5.5, rel=1e-10)
        assert result.t.shape == (999, 1)
        assert result.R == 999
        assert len(result.bias) == 1
        assert len(result.se) == 1

        # Bias should be small (bootstrap is approximately unbiased for mean)
        assert abs(result.bias[0]) < 0.5

        # True SE of mean = sd/sqrt(n) ~ 0.91
        assert 0.5 < result.se[0] < 1.5

    def test_scalar_statistic_becomes_vector(self):
        """A float-returning statistic yields t0 of shape (1,)."""
        data = np.array([2.0, 4.0, 6.0])
        result = boot(data, lambda d, i: float(np.sum(d[i])), R=20, seed=1)
        assert result.t0.shape == (1,)
        assert result.t0[0] == pytest.approx(12.0)

    def test_multi_statistic(self):
        """Bootstrap with multiple statistics (mean + var)."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        result = boot(data, mean_var_stat, R=500, seed=42)

        assert result.t0.shape == (2,)
        assert result.t.shape == (500, 2)
        assert result.t0[0] == pytest.approx(3.0, rel=1e-10)
        assert result.t0[1] == pytest.approx(2.5, rel=1e-10)

    def test_regression_bootstrap(self):
        """Bootstrap of regression coefficients (vector statistic)."""
        rng = np.random.default_rng(123)
        n = 50
        x = rng.uniform(0, 10, n)
        y = 2.0 + 3.0 * x + rng.normal(0, 1, n)
        data = np.column_stack([x, y])

        result = boot(data, regression_coef_stat, R=500, seed=42)

        assert result.t0[0] == pytest.approx(2.0, abs=1.0)
        assert result.t0[1] == pytest.approx(3.0, abs=0.3)
        assert result.t.shape == (500, 2)

    def test_seed_reproducibility(self):
        """Same seed gives same results."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        r1 = boot(data, mean_stat, R=100, seed=42)
        r2 = boot(data, mean_stat, R=100, seed=42)

        np.testing.assert_array_equal(r1.t, r2.t)
        np.testing.assert_array_equal(r1.t0, r2.t0)
        np.testing.assert_array_equal(r1.bias, r2.bias)
        np.testing.assert_array_equal(r1.se, r2.se)

    def test_different_seeds_differ(self):
        """Different seeds give different results."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        r1 = boot(data, mean_stat, R=100, seed=42)
        r2 = boot(data, mean_stat, R=100, seed=99)

        assert not np.allclose(r1.t, r2.t)

    def test_large_R(self):
        """Large R produces stable estimates."""
        data = np.arange(1.0, 101.0)
        result = boot(data, mean_stat, R=5000, seed=42)

        # True mean = 50.5, SE ~ 28.87/sqrt(100) ~ 2.887
        assert result.t0[0] == pytest.approx(50.5, rel=1e-10)
        assert result.se[0] == pytest.approx(2.887, rel=0.1)
        assert abs(result.bias[0]) < 0.5

    def test_single_observation(self):
        """Bootstrap with n=1 (degenerate case)."""
        data = np.array([5.0])
        result = boot(data, mean_stat, R=100, seed=42)

        assert result.t0[0] == pytest.approx(5.0)
        np.testing.assert_allclose(result.t[:, 0], 5.0)
        assert result.se[0] == 0.0

    def test_single_replicate(self):
        """R=1 is allowed; se is reported as 0."""
        data = np.array([1.0, 2.0, 3.0])
        result = boot(data, mean_stat, R=1, seed=3)
        assert result.t.shape == (1, 1)
        assert result.se[0] == 0.0


# ---------------------------------------------------------------------------
# Tests: Resample invariants
# ---------------------------------------------------------------------------

class TestResampleInvariants:
    """Every resample has length n and draws only original values."""

    def test_length_and_membership(self):
        data = np.array([3.0, 1.5, 7.25, 9.0, -2.0, 4.0])
        seen = []

        def recording_stat(d, indices):
            seen.append(d[indices].copy())
            return np.mean(d[indices])

        boot(data, recording_stat, R=200, seed=7)

        # t0 call plus R replicates
        assert len(seen) == 201
        original = set(data.tolist())
        for sample in seen:
            assert len(sample) == len(data)
            assert set(sample.tolist()) <= original

    def test_2d_rows_kept_together(self, wt_mpg):
        """Rows of 2D data are resampled as units."""
        pairs = {tuple(row) for row in wt_mpg.tolist()}

        def pair_stat(d, indices):
            for row in d[indices].tolist():
                assert tuple(row) in pairs
            return np.mean(d[indices, 0])

        result = boot(wt_mpg, pair_stat, R=50, seed=11)
        assert result.t.shape == (50, 1)

    def test_original_data_not_mutated(self):
        data = np.array([5.0, 1.0, 3.0, 2.0, 4.0])
        before = data.copy()
        result = boot(data, mean_stat, R=50, seed=1)

        np.testing.assert_array_equal(data, before)
        assert not np.shares_memory(result.data, data)
        assert not result.data.flags.writeable

    def test_statistic_cannot_mutate_design_data(self):
        """The design holds a read-only copy."""
        def mutating_stat(d, indices):
            d[0] = 100.0
            return 0.0

        with pytest.raises(StatisticComputationError) as excinfo:
            boot(np.array([1.0, 2.0, 3.0]), mutating_stat, R=5, seed=1)
        assert excinfo.value.stage == "t0"
        assert excinfo.value.replicate is None


# ---------------------------------------------------------------------------
# Tests: Failure propagation
# ---------------------------------------------------------------------------

class TestStatisticFailure:
    """Failed replicates propagate with their index; none are skipped."""

    def test_failure_reports_replicate_index(self):
        calls = {"n": 0}

        def flaky_stat(d, indices):
            calls["n"] += 1
            # Call 1 is t0; call 6 is replicate index 4
            if calls["n"] == 6:
                raise np.linalg.LinAlgError("Singular matrix")
            return np.mean(d[indices])

        with pytest.raises(StatisticComputationError) as excinfo:
            boot(np.arange(1.0, 11.0), flaky_stat, R=50, seed=42)

        err = excinfo.value
        assert err.replicate == 4
        assert err.stage == "replicate"
        assert "replicate 4" in str(err)
        assert isinstance(err.__cause__, np.linalg.LinAlgError)

    def test_degenerate_regression_propagates(self):
        """Resamples where x is constant make the slope undefined."""
        data = np.column_stack([
            np.array([1.0, 1.0, 1.0, 1.0, 2.0]),
            np.array([1.0, 2.0, 3.0, 4.0, 5.0]),
        ])

        def strict_slope(d, indices):
            x = d[indices, 0]
            y = d[indices, 1]
            sxx = np.sum((x - x.mean()) ** 2)
            if sxx == 0:
                raise ZeroDivisionError("x has zero variance in resample")
            return np.sum((x - x.mean()) * (y - y.mean())) / sxx

        # P(x == 2 absent from a resample) = 0.8^5 ~ 0.33 per replicate
        with pytest.raises(StatisticComputationError) as excinfo:
            boot(data, strict_slope, R=200, seed=42)
        assert excinfo.value.replicate is not None
        assert 0 <= excinfo.value.replicate < 200

    def test_wrong_output_length(self):
        calls = {"n": 0}

        def shape_shifting_stat(d, indices):
            calls["n"] += 1
            if calls["n"] == 3:
                return np.array([1.0, 2.0])
            return np.array([np.mean(d[indices])])

        with pytest.raises(StatisticComputationError, match="expected 1"):
            boot(np.arange(5.0), shape_shifting_stat, R=10, seed=0)

    def test_failure_on_original_data(self):
        def broken(d, indices):
            raise RuntimeError("boom")

        with pytest.raises(StatisticComputationError, match="original data"):
            boot(np.arange(5.0), broken, R=10, seed=0)


class TestNonFiniteStatistic:
    """NaN or inf from the statistic is a failure, not a replicate value."""

    def test_nan_reports_replicate_index(self):
        calls = {"n": 0}

        def nan_on_fifth_call(d, indices):
            calls["n"] += 1
            # Call 1 is t0; call 5 is replicate index 3
            if calls["n"] == 5:
                return np.nan
            return np.mean(d[indices])

        with pytest.raises(StatisticComputationError) as excinfo:
            boot(np.arange(1.0, 11.0), nan_on_fifth_call, R=20, seed=0)

        err = excinfo.value
        assert err.replicate == 3
        assert err.stage == "replicate"
        assert "non-finite" in str(err)

    def test_nan_on_original_data(self):
        with pytest.raises(StatisticComputationError) as excinfo:
            boot(np.arange(5.0), lambda d, i: np.nan, R=10, seed=0)

        assert excinfo.value.replicate is None
        assert excinfo.value.stage == "t0"

    def test_inf_component_rejected(self):
        def half_infinite(d, indices):
            return np.array([np.mean(d[indices]), np.inf])

        with pytest.raises(StatisticComputationError, match=r"component\(s\) \[1\]"):
            boot(np.arange(5.0), half_infinite, R=10, seed=0)

    def test_spearman_on_constant_resample(self):
        """Three rows resample to all-equal ranks in about 1 of 9 replicates."""
        data = np.array([[1.0, 3.0], [2.0, 1.0], [3.0, 2.0]])

        with pytest.raises(StatisticComputationError) as excinfo:
            boot(data, statistics.spearman_of(0, 1), R=200, seed=1)

        err = excinfo.value
        assert err.stage == "replicate"
        assert 0 <= err.replicate < 200
        assert isinstance(err.__cause__, ValidationError)


# ---------------------------------------------------------------------------
# Tests: Balanced bootstrap
# ---------------------------------------------------------------------------

class TestBalancedBootstrap:
    """Tests for sim='balanced' bootstrap."""

    def test_balanced_basic(self):
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        result = boot(data, mean_stat, R=100, sim="balanced", seed=42)

        assert result.t0[0] == pytest.approx(3.0, rel=1e-10)
        assert result.t.shape == (100, 1)
        assert result.sim == "balanced"

    def test_balanced_coverage(self):
        """In balanced bootstrap, each obs appears exactly R times total."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        R = 100

        # stype='f' exposes the frequency vector directly
        result = boot(data, lambda d, f: f, R=R, sim="balanced",
                      stype="f", seed=42)

        np.testing.assert_array_equal(result.t0, np.ones(5))
        np.testing.assert_array_equal(result.t.sum(axis=0), np.full(5, R))
        np.testing.assert_array_equal(result.t.sum(axis=1), np.full(R, 5))

    def test_balanced_stratified_coverage(self):
        data = np.arange(6.0)
        strata = np.array([0, 0, 1, 1, 1, 1])
        R = 40
        result = boot(data, lambda d, f: f, R=R, sim="balanced",
                      stype="f", strata=strata, seed=5)

        np.testing.assert_array_equal(result.t.sum(axis=0), np.full(6, R))
        np.testing.assert_array_equal(result.t[:, :2].sum(axis=1), 2.0)
        np.testing.assert_array_equal(result.t[:, 2:].sum(axis=1), 4.0)

    def test_balanced_vs_ordinary_similar_se(self):
        data = np.arange(1.0, 21.0)
        r_ord = boot(data, mean_stat, R=1000, sim="ordinary", seed=42)
        r_bal = boot(data, mean_stat, R=1000, sim="balanced", seed=42)

        assert r_ord.se[0] == pytest.approx(r_bal.se[0], rel=0.3)


# ---------------------------------------------------------------------------
# Tests: Stratified bootstrap
# ---------------------------------------------------------------------------

class TestStratifiedBootstrap:
    """Tests for stratified bootstrap."""

    def test_stratified_preserves_strata_sizes(self):
        data = np.array([1.0, 2.0, 3.0, 100.0, 200.0])
        strata = np.array([0, 0, 0, 1, 1])

        def strata_check_stat(d, indices):
            d_sample = d[indices]
            return np.array([
                float(np.sum(d_sample < 50)),
                float(np.sum(d_sample >= 50)),
            ])

        result = boot(data, strata_check_stat, R=50, strata=strata, seed=42)

        np.testing.assert_array_equal(result.t[:, 0], 3.0)
        np.testing.assert_array_equal(result.t[:, 1], 2.0)
        assert result.info['stratified'] is True

    def test_string_strata(self):
        data = np.array([1.0, 2.0, 10.0, 20.0])
        strata = np.array(["a", "a", "b", "b"])

        result = boot(data, lambda d, i: np.sum(d[i] > 5), R=30,
                      strata=strata, seed=2)
        np.testing.assert_array_equal(result.t[:, 0], 2.0)


# ---------------------------------------------------------------------------
# Tests: stype variations
# ---------------------------------------------------------------------------

class TestStype:
    """Tests for different stype options."""

    def test_stype_f(self):
        """stype='f' passes frequency counts summing to n."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])

        def freq_mean_stat(d, freqs):
            return np.sum(d * freqs) / np.sum(freqs)

        result = boot(data, freq_mean_stat, R=100, stype="f", seed=42)
        assert result.t0[0] == pytest.approx(3.0, rel=1e-10)

    def test_stype_w(self):
        """stype='w' passes normalized weights."""
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])

        def weight_mean_stat(d, weights):
            assert np.sum(weights) == pytest.approx(1.0)
            return np.sum(d * weights)

        result = boot(data, weight_mean_stat, R=100, stype="w", seed=42)
        assert result.t0[0] == pytest.approx(3.0, rel=1e-10)

    def test_stypes_agree_for_the_mean(self):
        """Indices, frequencies and weights describe the same resamples."""
        data = np.array([1.0, 4.0, 9.0, 16.0])
        r_i = boot(data, mean_stat, R=50, seed=8)
        r_f = boot(data, lambda d, f: np.sum(d * f) / len(d), R=50,
                   stype="f", seed=8)
        r_w = boot(data, lambda d, w: np.sum(d * w), R=50,
                   stype="w", seed=8)

        np.testing.assert_allclose(r_i.t, r_f.t, rtol=1e-12)
        np.testing.assert_allclose(r_i.t, r_w.t, rtol=1e-12)


# ---------------------------------------------------------------------------
# Tests: Solution object
# ---------------------------------------------------------------------------

class TestBootstrapSolution:
    """Tests for BootstrapSolution properties and display."""

    def test_summary(self):
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        result = boot(data, mean_stat, R=100, seed=42)
        s = result.summary()

        assert "ORDINARY NONPARAMETRIC BOOTSTRAP" in s
        assert "t1*" in s
        assert "original" in s
        assert "bias" in s
        assert "std. error" in s

    def test_repr(self):
        data = np.array([1.0, 2.0, 3.0])
        result = boot(data, mean_stat, R=100, seed=42)
        r = repr(result)

        assert "BootstrapSolution" in r
        assert "R=100" in r
        assert "k=1" in r

    def test_backend_name(self):
        result = boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, seed=42)
        assert result.backend_name == "cpu_bootstrap"

    def test_timing(self):
        result = boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, seed=42)
        assert result.timing is not None
        assert 'total_seconds' in result.timing
        assert 'bootstrap_replicates' in result.timing

    def test_provenance(self):
        result = boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, seed=42)
        assert "pyresampling_version" in result.provenance
        assert "numpy_version" in result.provenance

    def test_interval_requires_boot_ci(self):
        result = boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, seed=42)
        assert result.ci is None
        with pytest.raises(KeyError, match="boot_ci"):
            result.interval("perc")

    def test_prebuilt_design(self):
        design = BootstrapDesign.for_bootstrap(
            np.arange(1.0, 6.0), mean_stat, R=25, seed=3,
        )
        r1 = boot(design)
        r2 = boot(np.arange(1.0, 6.0), mean_stat, R=25, seed=3)
        np.testing.assert_array_equal(r1.t, r2.t)


# ---------------------------------------------------------------------------
# Tests: Edge cases and validation
# ---------------------------------------------------------------------------

class TestBootstrapValidation:
    """Tests for input validation."""

    def test_R_must_be_positive(self):
        data = np.array([1.0, 2.0, 3.0])
        with pytest.raises(ValueError, match="R must be >= 1"):
            boot(data, mean_stat, R=0)

    def test_R_must_be_integer(self):
        with pytest.raises(ValidationError, match="integer"):
            boot(np.array([1.0, 2.0]), mean_stat, R=10.5)

    def test_invalid_sim(self):
        with pytest.raises(ValueError, match="sim must be"):
            boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, sim="invalid")

    def test_invalid_stype(self):
        with pytest.raises(ValueError, match="stype must be"):
            boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10, stype="x")

    def test_empty_data(self):
        with pytest.raises(ValidationError):
            boot(np.array([]), mean_stat, R=10)

    def test_3d_data_rejected(self):
        with pytest.raises(ValidationError, match="1D or 2D"):
            boot(np.zeros((2, 2, 2)), mean_stat, R=10)

    def test_nan_data_rejected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            boot(np.array([1.0, np.nan]), mean_stat, R=10)

    def test_statistic_must_be_callable(self):
        with pytest.raises(ValidationError, match="callable"):
            boot(np.array([1.0, 2.0]), "mean", R=10)

    def test_strata_length_mismatch(self):
        with pytest.raises(ValueError, match="strata length"):
            boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10,
                 strata=np.array([0, 1]))

    def test_parametric_requires_ran_gen(self):
        with pytest.raises(ValueError, match="ran_gen is required"):
            boot(np.array([1.0, 2.0, 3.0]), mean_stat, R=10,
                 sim="parametric")

    def test_unknown_backend(self):
        with pytest.raises(ValidationError, match="Unknown backend"):
            boot(np.array([1.0, 2.0]), mean_stat, R=10, backend="gpu")


# ---------------------------------------------------------------------------
# Tests: Parametric bootstrap
# ---------------------------------------------------------------------------

class TestParametricBootstrap:
    """Tests for sim='parametric' bootstrap."""

    def test_parametric_normal_mean(self):
        rng_data = np.random.default_rng(123)
        data = rng_data.normal(5.0, 2.0, 30)

        mle_params = {"mean": np.mean(data), "std": np.std(data, ddof=0)}

        def ran_gen(d, mle, rng):
            return rng.normal(mle["mean"], mle["std"], len(d))

        def mean_param_stat(d):
            return np.mean(d)

        result = boot(
            data, mean_param_stat, R=500,
            sim="parametric", ran_gen=ran_gen, mle=mle_params,
            seed=42,
        )

        assert result.t0[0] == pytest.approx(np.mean(data), rel=1e-10)

        expected_se = mle_params["std"] / np.sqrt(len(data))
        assert result.se[0] == pytest.approx(expected_se, rel=0.2)
        assert result.sim == "parametric"

    def test_parametric_seed_reproducibility(self):
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        mle_params = {"mean": 3.0, "std": 1.58}

        def ran_gen(d, mle, rng):
            return rng.normal(mle["mean"], mle["std"], len(d))

        r1 = boot(data, np.mean, R=100, sim="parametric",
                  ran_gen=ran_gen, mle=mle_params, seed=42)
        r2 = boot(data, np.mean, R=100, sim="parametric",
                  ran_gen=ran_gen, mle=mle_params, seed=42)

        np.testing.assert_array_equal(r1.t, r2.t)

    def test_parametric_summary(self):
        data = np.array([1.0, 2.0, 3.0])

        def ran_gen(d, mle, rng):
            return rng.normal(mle["mean"], mle["std"], len(d))

        result = boot(
            data, np.mean, R=50,
            sim="parametric", ran_gen=ran_gen,
            mle={"mean": 2.0, "std": 1.0}, seed=42,
        )
        assert "PARAMETRIC BOOTSTRAP" in result.summary()
