# -*- coding: utf-8 -*-
"""
@name:      Dirichlet-Multinomial Regression
@summary:   Contains functions necessary for estimating the Dirichlet-
            Multinomial models whose dispersion is either a constant
            ("delta_const") or a function of covariates ("delta_func").

            In both cases the Dirichlet parameter of row `gj` is
            `e_gj = exp(x_gj.dot(beta) + d_gj.dot(gamma))`, where `d_gj` is
            the row of the dispersion design: a single column of ones for the
            constant dispersion model, and `[1, z_gj]` for the model with
            dispersion covariates. The two models therefore share one
            log-likelihood and one gradient, evaluated on the full design
            `[x, d]`.
"""
from scipy.special import digamma

from . import network_calcs as nc
from .estimation import EstimationObj


def split_param_vec(param_vec, num_rate_coefs, *args, **kwargs):
    """
    Parameters
    ----------
    param_vec : 1D ndarray.
        Should have one element per rate coefficient, followed by one element
        per dispersion coefficient.
    num_rate_coefs : int.
        The number of rate coefficients.

    Returns
    -------
    tuple.
        `(rate_coefs, dispersion_coefs)`.
    """
    return param_vec[:num_rate_coefs], param_vec[num_rate_coefs:]


def calc_long_rates(params, full_design):
    """
    Calculates the Dirichlet parameter, `e = exp(full_design.dot(params))`,
    for each row.
    """
    return nc.calc_long_exponentials(full_design.dot(params))


def calc_log_likelihood(params,
                        full_design,
                        rows_to_groups,
                        counts,
                        group_totals):
    """
    Parameters
    ----------
    params : 1D ndarray.
        The rate coefficients followed by the dispersion coefficients.
    full_design : 2D ndarray.
        The rate design matrix with the dispersion design matrix appended to
        its columns. One row per (group, category) pair.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.
    group_totals : 1D ndarray.
        The total count of each group, `n_g`.

    Returns
    -------
    log_likelihood : float.
        `sum_g [log(n_g!) + log G(a_g) - log G(a_g + n_g) +
        sum_j (log G(e_gj + Y_gj) - log G(e_gj) - log(Y_gj!))]` where
        `a_g = sum_j e_gj`.
    """
    long_rates = calc_long_rates(params, full_design)
    group_rates = nc.calc_group_sums(long_rates, rows_to_groups)

    group_terms = -1 * nc.calc_log_rising_factorial(group_rates, group_totals)
    long_terms = nc.calc_log_rising_factorial(long_rates, counts)

    return (nc.calc_log_multinomial_coefs(counts, group_totals) +
            group_terms.sum() +
            long_terms.sum())


def calc_gradient(params,
                  full_design,
                  rows_to_groups,
                  counts,
                  group_totals):
    """
    Parameters
    ----------
    params : 1D ndarray.
        The rate coefficients followed by the dispersion coefficients.
    full_design : 2D ndarray.
        The rate design matrix with the dispersion design matrix appended to
        its columns. One row per (group, category) pair.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.
    group_totals : 1D ndarray.
        The total count of each group, `n_g`.

    Returns
    -------
    gradient : 1D ndarray.
        The gradient of the log-likelihood with respect to `params`. Since
        `d e_gj / d params = e_gj * w_gj`, where `w_gj` is the row of the
        full design, each row contributes
        `w_gj * e_gj * [psi(a_g) - psi(a_g + n_g) + psi(e_gj + Y_gj) -
        psi(e_gj)]`.
    """
    long_rates = calc_long_rates(params, full_design)
    group_rates = nc.calc_group_sums(long_rates, rows_to_groups)

    group_digamma_diff = digamma(group_rates) - digamma(group_rates +
                                                        group_totals)
    long_digamma_diff = digamma(long_rates + counts) - digamma(long_rates)

    row_weights = long_rates * (nc.expand_group_values(group_digamma_diff,
                                                       rows_to_groups) +
                                long_digamma_diff)
    return full_design.T.dot(row_weights)


def calc_fitted_probs(params, full_design, rows_to_groups):
    """
    Calculates the expected within-group composition, `e_gj / sum_j e_gj`.
    """
    long_rates = calc_long_rates(params, full_design)
    group_rates = nc.calc_group_sums(long_rates, rows_to_groups)
    return long_rates / nc.expand_group_values(group_rates, rows_to_groups)


class DMEstimator(EstimationObj):
    """
    Estimation object for the Dirichlet-Multinomial models with constant
    dispersion or dispersion covariates.

    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.
        Should have `param_type` in `["delta_const", "delta_func"]`.
    zero_vector : 1D ndarray.
        Determines what is viewed as a "null" set of parameters.
    split_params : callable.
        Should take a vector of parameters and the number of rate
        coefficients and return the rate and dispersion parameters.
    """
    def __init__(self, model_spec, zero_vector, split_params):
        super(DMEstimator, self).__init__(model_spec,
                                          zero_vector,
                                          split_params)
        self.full_design = model_spec.full_design
        self.group_totals = model_spec.group_totals
        return None

    def convenience_calc_probs(self, params):
        return calc_fitted_probs(params,
                                 self.full_design,
                                 self.rows_to_groups)

    def convenience_calc_log_likelihood(self, params):
        return calc_log_likelihood(params,
                                   self.full_design,
                                   self.rows_to_groups,
                                   self.counts,
                                   self.group_totals)

    def convenience_calc_gradient(self, params):
        return calc_gradient(params,
                             self.full_design,
                             self.rows_to_groups,
                             self.counts,
                             self.group_totals)
