# -*- coding: utf-8 -*-
"""
@name:      Intra-Group Correlation Dirichlet-Multinomial
@summary:   Contains functions necessary for estimating the Dirichlet-
            Multinomial model parameterized by the intra-group correlation,
            rho ("rho_const").

            The within-group composition is `p = exp(X beta) / sum(exp(X beta))`
            and the Dirichlet parameters are `p * phi`, where
            `phi = 1 / exp(theta) = (1 - rho) / rho` and
            `theta = log(rho / (1 - rho))`. The parameter vector holds the rate
            coefficients followed by rho itself, so rho must lie in (0, 1).

            This is the only parameterization with an analytic hessian.
"""
import numpy as np
from scipy.special import digamma, polygamma

from . import network_calcs as nc
from .estimation import EstimationObj
from .exceptions import NumericDomainError

# The starting value of rho. It must be an interior point of (0, 1).
initial_rho = 0.1

# Distance kept from the edges of (0, 1) when rho needs explicit bounds.
rho_bound_buffer = 1e-8


def split_param_vec(param_vec, num_rate_coefs, *args, **kwargs):
    """
    Parameters
    ----------
    param_vec : 1D ndarray.
        Should have one element per rate coefficient, followed by rho.
    num_rate_coefs : int.
        The number of rate coefficients.

    Returns
    -------
    tuple.
        `(rate_coefs, np.array([rho]))`.
    """
    return param_vec[:num_rate_coefs], param_vec[num_rate_coefs:]


def calc_precision(rho):
    """
    Parameters
    ----------
    rho : float.
        The intra-group correlation. Should be in the open interval (0, 1).

    Returns
    -------
    precision : float.
        `1 / exp(theta)` where `theta = log(rho / (1 - rho))`.

    Raises
    ------
    NumericDomainError
        If rho is not strictly between zero and one.
    """
    if not 0 < rho < 1:
        msg = "rho must be strictly between 0 and 1. rho = {} passed instead."
        raise NumericDomainError(msg.format(rho))

    theta = np.log(rho) - np.log1p(-rho)
    return np.exp(-theta)


def _calc_dirichlet_params(beta, rho, design, rows_to_groups):
    precision = calc_precision(rho)
    long_probs = nc.calc_long_probabilities(design.dot(beta), rows_to_groups)
    return precision, long_probs, long_probs * precision


def calc_log_likelihood(beta,
                        rho,
                        design,
                        rows_to_groups,
                        counts,
                        group_totals):
    """
    Parameters
    ----------
    beta : 1D ndarray.
        One element per rate coefficient.
    rho : float.
        The intra-group correlation, in (0, 1).
    design : 2D ndarray.
        One row per (group, category) pair and one column per rate
        coefficient.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.
    group_totals : 1D ndarray.
        The total count of each group, `n_g`.

    Returns
    -------
    log_likelihood : float.
        `sum_g [log(n_g!) + log G(phi) - log G(phi + n_g) +
        sum_j (log G(p_gj phi + Y_gj) - log G(p_gj phi) - log(Y_gj!))]`.
    """
    precision, _, long_alphas =\
        _calc_dirichlet_params(beta, rho, design, rows_to_groups)

    group_terms = -1 * nc.calc_log_rising_factorial(precision, group_totals)
    long_terms = nc.calc_log_rising_factorial(long_alphas, counts)

    return (nc.calc_log_multinomial_coefs(counts, group_totals) +
            group_terms.sum() +
            long_terms.sum())


def calc_gradient(beta,
                  rho,
                  design,
                  rows_to_groups,
                  counts,
                  group_totals):
    """
    Parameters
    ----------
    beta : 1D ndarray.
        One element per rate coefficient.
    rho : float.
        The intra-group correlation, in (0, 1).
    design : 2D ndarray.
        One row per (group, category) pair and one column per rate
        coefficient.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.
    group_totals : 1D ndarray.
        The total count of each group, `n_g`.

    Returns
    -------
    gradient : 1D ndarray.
        The gradient of the log-likelihood with respect to `beta` followed by
        its derivative with respect to rho. With
        `D_gj = psi(p_gj phi + Y_gj) - psi(p_gj phi)`, the beta block is
        `phi * sum_gj D_gj p_gj (x_gj - sum_i p_gi x_gi)` and the rho element
        is `-rho**-2 * sum_g [psi(phi) - psi(phi + n_g) + sum_j p_gj D_gj]`.
    """
    precision, long_probs, long_alphas =\
        _calc_dirichlet_params(beta, rho, design, rows_to_groups)
    centered_design = nc.calc_centered_design(design,
                                              long_probs,
                                              rows_to_groups)

    long_digamma_diff = digamma(long_alphas + counts) - digamma(long_alphas)
    weighted_diff = long_probs * long_digamma_diff

    beta_gradient = precision * centered_design.T.dot(weighted_diff)

    precision_score = (digamma(precision) -
                       digamma(precision + group_totals) +
                       nc.calc_group_sums(weighted_diff, rows_to_groups))
    rho_gradient = -1 * precision_score.sum() / rho**2

    return np.concatenate((beta_gradient, [rho_gradient]), axis=0)


def calc_hessian(beta,
                 rho,
                 design,
                 rows_to_groups,
                 counts,
                 group_totals):
    """
    Parameters
    ----------
    beta : 1D ndarray.
        One element per rate coefficient.
    rho : float.
        The intra-group correlation, in (0, 1).
    design : 2D ndarray.
        One row per (group, category) pair and one column per rate
        coefficient.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.
    group_totals : 1D ndarray.
        The total count of each group, `n_g`.

    Returns
    -------
    hessian : 2D ndarray.
        Has shape `(K + 1, K + 1)`. The matrix of second derivatives of the
        log-likelihood with respect to `beta` and rho.

    Notes
    -----
    With `c_gj = x_gj - sum_i p_gi x_gi`, `D` as in `calc_gradient`, and
    `T_gj = psi'(p_gj phi + Y_gj) - psi'(p_gj phi)`, the pieces are

      - beta, beta: `sum_gj (T phi^2 p^2 + D phi p - phi p m_g) c c'`, where
        `m_g = sum_j p_gj D_gj`. The last term comes from the derivative of
        the composition's own jacobian.
      - beta, rho: `-rho**-2 * sum_gj (D p + phi T p^2) c`.
      - rho, rho: `sum_g [S'_g / rho**4 + 2 S_g / rho**3]` where
        `S_g = psi(phi) - psi(phi + n_g) + m_g` and
        `S'_g = psi'(phi) - psi'(phi + n_g) + sum_j p_gj^2 T_gj`.
    """
    precision, long_probs, long_alphas =\
        _calc_dirichlet_params(beta, rho, design, rows_to_groups)
    centered_design = nc.calc_centered_design(design,
                                              long_probs,
                                              rows_to_groups)
    num_rate_coefs = design.shape[1]

    long_digamma_diff = digamma(long_alphas + counts) - digamma(long_alphas)
    long_trigamma_diff = (polygamma(1, long_alphas + counts) -
                          polygamma(1, long_alphas))
    weighted_diff = long_probs * long_digamma_diff
    squared_probs = long_probs**2

    group_weighted_diff = nc.calc_group_sums(weighted_diff, rows_to_groups)
    long_weighted_diff = nc.expand_group_values(group_weighted_diff,
                                                rows_to_groups)

    # Beta-beta block
    beta_weights = (long_trigamma_diff * precision**2 * squared_probs +
                    long_digamma_diff * precision * long_probs -
                    precision * long_probs * long_weighted_diff)
    beta_block = centered_design.T.dot(beta_weights[:, None] *
                                       centered_design)

    # Beta-rho block
    cross_weights = (weighted_diff +
                     precision * long_trigamma_diff * squared_probs)
    cross_block = -1 * centered_design.T.dot(cross_weights) / rho**2

    # Rho-rho element
    precision_score = (digamma(precision) -
                       digamma(precision + group_totals) +
                       group_weighted_diff)
    precision_curvature =\
        (polygamma(1, precision) -
         polygamma(1, precision + group_totals) +
         nc.calc_group_sums(long_trigamma_diff * squared_probs,
                            rows_to_groups))
    rho_element = (precision_curvature.sum() / rho**4 +
                   2 * precision_score.sum() / rho**3)

    hessian = np.empty((num_rate_coefs + 1, num_rate_coefs + 1))
    hessian[:num_rate_coefs, :num_rate_coefs] = beta_block
    hessian[:num_rate_coefs, num_rate_coefs] = cross_block
    hessian[num_rate_coefs, :num_rate_coefs] = cross_block
    hessian[num_rate_coefs, num_rate_coefs] = rho_element

    return hessian


def calc_fitted_probs(beta, design, rows_to_groups):
    """
    Calculates the expected within-group composition, `p`.
    """
    return nc.calc_long_probabilities(design.dot(beta), rows_to_groups)


class RhoEstimator(EstimationObj):
    """
    Estimation object for the Dirichlet-Multinomial model parameterized by
    the intra-group correlation.

    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.
        Should have `param_type == "rho_const"`.
    zero_vector : 1D ndarray.
        Determines what is viewed as a "null" set of parameters. Its last
        element should be inside (0, 1).
    split_params : callable.
        Should take a vector of parameters and the number of rate
        coefficients and return the rate coefficients and rho.
    """
    has_analytic_hessian = True

    def __init__(self, model_spec, zero_vector, split_params):
        super(RhoEstimator, self).__init__(model_spec,
                                           zero_vector,
                                           split_params)
        self.group_totals = model_spec.group_totals
        return None

    def _split_betas_and_rho(self, params):
        betas, rho_array = self.convenience_split_params(params)
        return betas, rho_array[0]

    def convenience_calc_probs(self, params):
        betas, _ = self._split_betas_and_rho(params)
        return calc_fitted_probs(betas, self.design, self.rows_to_groups)

    def convenience_calc_log_likelihood(self, params):
        betas, rho = self._split_betas_and_rho(params)
        return calc_log_likelihood(betas,
                                   rho,
                                   self.design,
                                   self.rows_to_groups,
                                   self.counts,
                                   self.group_totals)

    def convenience_calc_gradient(self, params):
        betas, rho = self._split_betas_and_rho(params)
        return calc_gradient(betas,
                             rho,
                             self.design,
                             self.rows_to_groups,
                             self.counts,
                             self.group_totals)

    def convenience_calc_hessian(self, params):
        betas, rho = self._split_betas_and_rho(params)
        return calc_hessian(betas,
                            rho,
                            self.design,
                            self.rows_to_groups,
                            self.counts,
                            self.group_totals)

    def prepare_initial_values(self, init_values):
        """
        Appends the starting value of rho to a vector of initial rate
        coefficients. Vectors that already contain rho are returned as
        floats, unchanged.
        """
        init_values = np.asarray(init_values, dtype=float)
        if init_values.ndim == 1 and init_values.size == self.num_rate_coefs:
            init_values = np.concatenate((init_values, [initial_rho]))
        self.check_length_of_initial_values(init_values)
        return init_values

    def get_optimizer_bounds(self):
        """
        Leaves the rate coefficients unbounded and keeps rho inside (0, 1).
        """
        return ([(None, None)] * self.num_rate_coefs +
                [(rho_bound_buffer, 1 - rho_bound_buffer)])
