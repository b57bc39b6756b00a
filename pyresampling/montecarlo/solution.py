"""
Solution wrappers for Monte Carlo results.

BootstrapSolution and PermutationSolution wrap Result[P] and provide
convenient accessors and R-style summary output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyresampling.core.result import Result
from pyresampling.montecarlo._common import BootParams, PermutationParams

if TYPE_CHECKING:
    from pyresampling.montecarlo.design import BootstrapDesign, PermutationDesign


_SIM_TITLES = {
    "ordinary": "ORDINARY NONPARAMETRIC BOOTSTRAP",
    "balanced": "BALANCED BOOTSTRAP",
    "parametric": "PARAMETRIC BOOTSTRAP",
}

_CI_LABELS = {
    "normal": "Normal",
    "basic": "Basic",
    "perc": "Percentile",
    "bca": "BCa",
    "stud": "Studentized",
}


@dataclass
class BootstrapSolution:
    """
    User-facing bootstrap results.

    Matches R's boot object output: t0, t, bias, SE, plus CI if computed.
    summary() produces R's print.boot format.
    """
    _result: Result[BootParams]
    _design: 'BootstrapDesign'

    # --- Core boot fields ---

    @property
    def t0(self) -> NDArray[np.floating[Any]]:
        """Observed statistic(s) on original data, shape (k,)."""
        return self._result.params.t0

    @property
    def t(self) -> NDArray[np.floating[Any]]:
        """Bootstrap replicates, shape (R, k)."""
        return self._result.params.t

    @property
    def R(self) -> int:
        return self._result.params.R

    @property
    def k(self) -> int:
        """Length of the statistic vector."""
        return len(self._result.params.t0)

    @property
    def bias(self) -> NDArray[np.floating[Any]]:
        """Bootstrap bias estimate: mean(t) - t0, shape (k,)."""
        return self._result.params.bias

    @property
    def se(self) -> NDArray[np.floating[Any]]:
        """Bootstrap standard error: sd(t), shape (k,)."""
        return self._result.params.se

    @property
    def ci(self) -> dict[str, NDArray] | None:
        """Confidence intervals keyed by type, each (k, 2), or None."""
        return self._result.params.ci

    @property
    def ci_conf_level(self) -> float | None:
        return self._result.params.ci_conf_level

    @property
    def ci_fallbacks(self) -> tuple[str, ...]:
        """Interval components that fell back to the percentile method."""
        return self._result.params.ci_fallbacks

    def interval(self, type: str = "perc", index: int = 0) -> tuple[float, float]:
        """
        (lower, upper) for one CI type and statistic component.

        Raises:
            KeyError: If that CI type has not been computed.
        """
        if self.ci is None or type not in self.ci:
            available = sorted(self.ci) if self.ci else []
            raise KeyError(
                f"CI type {type!r} not computed. Available: {available}. "
                f"Call boot_ci(result, type={type!r}) first."
            )
        lo, hi = self.ci[type][index]
        return float(lo), float(hi)

    # --- Metadata ---

    @property
    def data(self) -> NDArray:
        """Original data (read-only)."""
        return self._design.data

    @property
    def sim(self) -> str:
        return self._design.sim

    @property
    def seed(self) -> int | None:
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def provenance(self) -> dict[str, Any]:
        return self._result.provenance

    # --- Display ---

    def summary(self) -> str:
        """
        R-style print.boot output.

        Produces:
            ORDINARY NONPARAMETRIC BOOTSTRAP

            Bootstrap Statistics :
                original       bias    std. error
            t1*  5.12345    0.01234     0.56789
            t2*  3.45678   -0.00567     0.34567
        """
        lines = [f"\n{_SIM_TITLES.get(self.sim, 'BOOTSTRAP')}\n"]

        lines.append(
            f"Call: boot(data, statistic, R={self.R}, sim=\"{self.sim}\")"
        )
        lines.append("")
        lines.append("Bootstrap Statistics :")
        lines.append(
            f"{'':>8s} {'original':>14s} {'bias':>14s} {'std. error':>14s}"
        )
        for i in range(self.k):
            label = f"t{i+1}*"
            lines.append(
                f"{label:>8s} {self.t0[i]:14.5f} {self.bias[i]:14.5f} "
                f"{self.se[i]:14.5f}"
            )

        if self.ci is not None:
            lines.append("")
            conf_pct = f"{(self.ci_conf_level or 0.95) * 100:g}"
            for ci_type, ci_vals in self.ci.items():
                label = _CI_LABELS.get(ci_type, ci_type)
                lines.append(f"{conf_pct}% {label} ({ci_type}) CI:")
                for i in range(self.k):
                    lo, hi = ci_vals[i]
                    if np.isnan(lo) and np.isnan(hi):
                        continue
                    lines.append(f"  t{i+1}*: ({lo:.5f}, {hi:.5f})")

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            lines.extend(f"  {w}" for w in self.warnings)

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(R={self.R}, k={self.k}, "
            f"sim={self.sim!r}, backend={self.backend_name!r})"
        )


@dataclass
class PermutationSolution:
    """
    User-facing permutation test results.

    Provides observed statistic, permutation distribution, and p-value.
    """
    _result: Result[PermutationParams]
    _design: 'PermutationDesign'

    # --- Core fields ---

    @property
    def observed_stat(self) -> float:
        """Test statistic on original (unpermuted) data."""
        return self._result.params.observed_stat

    @property
    def perm_stats(self) -> NDArray[np.floating[Any]]:
        """Permutation (null) distribution, shape (R,)."""
        return self._result.params.perm_stats

    @property
    def count(self) -> int:
        """Permuted statistics at least as extreme as the observed one."""
        return self._result.params.count

    @property
    def p_value(self) -> float:
        """
        count / R. When count is 0 this is the bound 1/R and
        p_value_is_bound is True: the true p-value is below it.
        """
        return self._result.params.p_value

    @property
    def p_value_is_bound(self) -> bool:
        return self._result.params.p_value_is_bound

    @property
    def p_value_corrected(self) -> float:
        """Phipson-Smyth p-value, (count + 1) / (R + 1)."""
        return self._result.params.p_value_corrected

    @property
    def R(self) -> int:
        return self._result.params.R

    @property
    def alternative(self) -> str:
        return self._result.params.alternative

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def provenance(self) -> dict[str, Any]:
        return self._result.provenance

    # --- Display ---

    def format_p_value(self) -> str:
        """p-value as text; '< 1/R' when no permutation was as extreme."""
        if self.p_value_is_bound:
            return f"< {self.p_value:.4g}"
        return f"{self.p_value:.4g}"

    def summary(self) -> str:
        """Permutation test summary."""
        lines = [
            "\nPERMUTATION TEST",
            "",
            f"Group sizes: {self._design.n1}, {self._design.n2}",
            f"Number of permutations: {self.R}",
            f"Observed statistic: {self.observed_stat:.6g}",
            f"As or more extreme: {self.count}",
            f"p-value ({self.alternative}): {self.format_p_value()}",
            f"Phipson-Smyth p-value: {self.p_value_corrected:.4g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PermutationSolution(R={self.R}, "
            f"observed={self.observed_stat:.4g}, "
            f"p_value={self.format_p_value()})"
        )
