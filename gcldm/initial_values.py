# -*- coding: utf-8 -*-
"""
@name:      Initial Values
@summary:   Obtains starting values for the network models from a Poisson
            generalized linear model of the counts, fitted with statsmodels on
            the same design matrix.
"""
import warnings

import numpy as np
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import PerfectSeparationError


def find_identified_columns(design):
    """
    Returns the positions of the columns of `design` that are linearly
    independent of the columns before them.
    """
    identified = []
    current_rank = 0
    for col in range(design.shape[1]):
        candidate = identified + [col]
        new_rank = np.linalg.matrix_rank(design[:, candidate])
        if new_rank > current_rank:
            identified.append(col)
            current_rank = new_rank
    return identified


def fit_poisson_coefs(counts, design):
    """
    Fits a Poisson GLM with a log link of `counts` on `design`.

    Parameters
    ----------
    counts : 1D ndarray.
        The observed counts.
    design : 2D ndarray.
        One row per element of `counts`.

    Returns
    -------
    coefs : 1D ndarray.
        One element per column of `design`. Columns that are not identified
        given the columns before them, and coefficients that are not finite,
        are set to zero.
    """
    coefs = np.zeros(design.shape[1])
    identified = find_identified_columns(design)
    if len(identified) == 0:
        return coefs

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            fit = sm.GLM(counts,
                         design[:, identified],
                         family=sm.families.Poisson()).fit()
        except (PerfectSeparationError, np.linalg.LinAlgError, ValueError):
            return coefs

    fitted_coefs = np.asarray(fit.params, dtype=float)
    fitted_coefs[~np.isfinite(fitted_coefs)] = 0
    coefs[identified] = fitted_coefs
    return coefs


def get_initial_values(model_spec):
    """
    Returns starting values in the coefficient order of `model_spec`.

    For the grouped conditional logit and the intra-group correlation model,
    the Poisson GLM includes an intercept that is dropped afterwards, so `K`
    values are returned. Rho is appended by the estimator. For the
    Dirichlet-Multinomial models with dispersion coefficients, the GLM is fit
    on the full design and `K + L` values are returned.
    """
    counts = model_spec.counts
    if model_spec.param_type in ["gcl", "rho_const"]:
        glm_design = np.concatenate((np.ones((counts.size, 1)),
                                     model_spec.design),
                                    axis=1)
        return fit_poisson_coefs(counts, glm_design)[1:]

    return fit_poisson_coefs(counts, model_spec.full_design)
