# -*- coding: utf-8 -*-
"""
@name:      Grouped Conditional Logit
@summary:   Contains functions necessary for estimating grouped conditional
            logit models, i.e. multinomial models of the counts within each
            pollinator group with no dispersion parameters.
"""
import numpy as np

from . import network_calcs as nc
from .estimation import EstimationObj


def split_param_vec(param_vec, *args, **kwargs):
    """
    Parameters
    ----------
    param_vec : 1D ndarray.
        Should have 1 element for each rate coefficient being estimated.

    Returns
    -------
    tuple.
        `(param_vec, None)`. The grouped conditional logit model has no
        dispersion parameters.
    """
    return param_vec, None


def calc_log_likelihood(beta, design, rows_to_groups, counts):
    """
    Parameters
    ----------
    beta : 1D ndarray.
        One element per rate coefficient.
    design : 2D ndarray.
        One row per (group, category) pair and one column per rate
        coefficient.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.

    Returns
    -------
    log_likelihood : float.
        `sum_g sum_j Y_gj * log(p_gj)`.
    """
    long_probs = nc.calc_long_probabilities(design.dot(beta), rows_to_groups)
    return counts.dot(np.log(long_probs))


def calc_gradient(beta, design, rows_to_groups, counts):
    """
    Parameters
    ----------
    beta : 1D ndarray.
        One element per rate coefficient.
    design : 2D ndarray.
        One row per (group, category) pair and one column per rate
        coefficient.
    rows_to_groups : 2D scipy sparse array.
        Maps the rows of the design matrix to the groups.
    counts : 1D ndarray.
        The observed counts, one per row of the design matrix.

    Returns
    -------
    gradient : 1D ndarray.
        The gradient of the log-likelihood with respect to `beta`.
        Since `d log(p_gj) / d beta = x_gj - sum_i p_gi x_gi`, the gradient is
        the count weighted sum of the centered design rows.
    """
    long_probs = nc.calc_long_probabilities(design.dot(beta), rows_to_groups)
    centered_design = nc.calc_centered_design(design,
                                              long_probs,
                                              rows_to_groups)
    return centered_design.T.dot(counts)


class GCLEstimator(EstimationObj):
    """
    Estimation object for the grouped conditional logit model.

    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.
        Should have `param_type == "gcl"`.
    zero_vector : 1D ndarray.
        Determines what is viewed as a "null" set of parameters.
    split_params : callable.
        Should take a vector of parameters and the number of rate
        coefficients and return the rate and dispersion parameters.
    """
    def convenience_calc_probs(self, params):
        """
        Calculates the fitted within-group composition for this model and
        dataset.
        """
        betas, _ = self.convenience_split_params(params)
        return nc.calc_long_probabilities(self.design.dot(betas),
                                          self.rows_to_groups)

    def convenience_calc_log_likelihood(self, params):
        """
        Calculates the log-likelihood for this model and dataset.
        """
        betas, _ = self.convenience_split_params(params)
        return calc_log_likelihood(betas,
                                   self.design,
                                   self.rows_to_groups,
                                   self.counts)

    def convenience_calc_gradient(self, params):
        """
        Calculates the gradient of the log-likelihood for this model / dataset.
        """
        betas, _ = self.convenience_split_params(params)
        return calc_gradient(betas,
                             self.design,
                             self.rows_to_groups,
                             self.counts)
