# -*- coding: utf-8 -*-
"""
@module:    network_calcs.py
@name:      Network Calculations
@summary:   Contains generic functions used by every parameterization when
            calculating rates, compositions, log-likelihoods, and covariance
            matrices. Group-wise reductions are performed with the sparse
            `rows_to_groups` mapping matrix rather than with loops over groups.
"""
import numpy as np
import scipy.linalg
from scipy.special import betaln
from scipy.special import gammaln

from .exceptions import SingularCurvatureError

# Define the boundary values which are not to be exceeded during computation
min_exponent_val = -700
max_exponent_val = 700

min_comp_value = 1e-300


def calc_group_sums(long_values, rows_to_groups):
    """
    Sums `long_values` within each group. `long_values` may be 1D, with one
    element per row, or 2D, with one row per row of the design matrix.
    Returns an array with one element (or row) per group.
    """
    return np.asarray(rows_to_groups.T.dot(long_values))


def expand_group_values(group_values, rows_to_groups):
    """
    Broadcasts one value (or row) per group back to one value (or row) per
    row of the design matrix.
    """
    return np.asarray(rows_to_groups.dot(group_values))


def calc_long_exponentials(index):
    """
    Exponentiates the linear index, guarding against numeric under/over-flow.

    Parameters
    ----------
    index : 1D ndarray.
        The linear index, `design.dot(coefs)`, with one element per row.

    Returns
    -------
    long_exponentials : 1D ndarray.
        `exp(index)`, where the index has first been truncated to lie within
        `[min_exponent_val, max_exponent_val]`.
    """
    # Truncate a copy so the caller's index is left untouched.
    truncated_index = np.clip(index, min_exponent_val, max_exponent_val)
    return np.exp(truncated_index)


def calc_long_probabilities(index, rows_to_groups):
    """
    Parameters
    ----------
    index : 1D ndarray.
        The linear index, `design.dot(beta)`, with one element per row.
    rows_to_groups : 2D scipy sparse array.
        There should be one row per row of the design matrix and one column
        per group. This matrix maps the rows of the design matrix to the
        groups (on the columns).

    Returns
    -------
    long_probs : 1D ndarray.
        The within-group composition, `exp(index) / sum(exp(index))`, with one
        element per row. Exact zeros are replaced by `min_comp_value`.
    """
    long_exponentials = calc_long_exponentials(index)

    group_denominators = calc_group_sums(long_exponentials, rows_to_groups)
    long_denominators = expand_group_values(group_denominators,
                                            rows_to_groups)
    long_probs = long_exponentials / long_denominators

    # Guard against underflow
    long_probs[long_probs == 0] = min_comp_value

    return long_probs


def calc_centered_design(design, long_probs, rows_to_groups):
    """
    Subtracts the probability weighted group mean of each column from the
    design matrix. Row `gj` of the result is `x_gj - sum_i p_gi * x_gi`, so
    that `long_probs[:, None] * centered_design` is the derivative of the
    within-group composition with respect to the coefficients.

    Parameters
    ----------
    design : 2D ndarray.
        One row per (group, category) pair and one column per coefficient.
    long_probs : 1D ndarray.
        The within-group composition, with one element per row.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.

    Returns
    -------
    centered_design : 2D ndarray with the same shape as `design`.
    """
    group_means = calc_group_sums(long_probs[:, None] * design,
                                  rows_to_groups)
    return design - expand_group_values(group_means, rows_to_groups)


def calc_log_multinomial_coefs(counts, group_totals):
    """
    Calculates `sum_g [log(n_g!) - sum_j log(Y_gj!)]`, the part of the
    Dirichlet-Multinomial log-likelihood that does not depend on the
    parameters.
    """
    return gammaln(group_totals + 1).sum() - gammaln(counts + 1).sum()


def calc_log_rising_factorial(values, counts):
    """
    Calculates `log(Gamma(values + counts)) - log(Gamma(values))` without
    subtracting two large log-gamma values.

    Parameters
    ----------
    values : scalar or ndarray.
        Strictly positive Dirichlet parameters.
    counts : scalar or ndarray.
        Non-negative integer counts. Should broadcast against `values`.

    Returns
    -------
    log_rising_factorial : ndarray.
        Equals `log(Gamma(counts)) - log(Beta(values, counts))` where
        `counts > 0` and zero where `counts == 0`. This stays accurate as
        `values` grows, i.e. as the dispersion approaches the multinomial
        limit.
    """
    values, counts = np.broadcast_arrays(np.asarray(values, dtype=float),
                                         np.asarray(counts, dtype=float))
    positive = counts > 0
    # Any positive placeholder keeps gammaln and betaln defined at zero counts
    safe_counts = np.where(positive, counts, 1.0)
    return np.where(positive,
                    gammaln(safe_counts) - betaln(values, safe_counts),
                    0.0)


def ensure_finite_value(value):
    """
    Maps NaN and +/- infinity to -infinity so that non-finite
    log-likelihoods are always treated as infeasible.
    """
    if np.isfinite(value):
        return value
    return -np.inf


def calc_asymptotic_covariance(hessian):
    """
    Parameters
    ----------
    hessian : 2D ndarray.
        It should have shape `(num_vars, num_vars)`. It is the matrix of second
        derivatives of the negative log-likelihood with respect to each pair
        of coefficients being estimated, evaluated at the optimum.

    Returns
    -------
    covariance : 2D ndarray.
        The inverse of `hessian`.

    Raises
    ------
    SingularCurvatureError
        If `hessian` contains non-finite values, cannot be inverted, or has
        an inverse with non-positive or non-finite diagonal elements.
    """
    hessian = np.atleast_2d(np.asarray(hessian, dtype=float))
    if not np.isfinite(hessian).all():
        raise SingularCurvatureError("The curvature matrix is not finite.")

    try:
        covariance = scipy.linalg.inv(hessian)
    except (np.linalg.LinAlgError, ValueError) as error:
        msg = "The curvature matrix could not be inverted: {}"
        raise SingularCurvatureError(msg.format(error))

    diagonal = np.diag(covariance)
    if not np.isfinite(covariance).all() or (diagonal <= 0).any():
        msg = "The curvature matrix is not positive definite."
        raise SingularCurvatureError(msg)

    return covariance
