# -*- coding: utf-8 -*-
"""
@name:      Inference
@summary:   Turns a FitResult into Wald-type inferential results: standard
            errors, z-statistics, p-values, and confidence intervals based on
            the inverse of the curvature matrix. When the curvature matrix
            cannot be inverted, the inferential fields hold `Unavailable`
            values while the estimates and log-likelihood are still reported.
"""
import warnings

import numpy as np
import pandas as pd
import scipy.stats

from .network_calcs import calc_asymptotic_covariance
from .exceptions import SingularCurvatureError

# Number of decimals displayed in the summary table
estimate_decimals = 5
z_decimals = 3
p_value_decimals = 5

summary_columns = ["estimate", "std_err", "z", "p_value", "lower", "upper"]

# Critical value reported for the default 95% Wald intervals
conventional_95_z_critical = 1.96


class Unavailable(object):
    """
    Placeholder for a result that could not be computed. It is falsy and
    records the reason the result is missing.
    """
    def __init__(self, reason):
        self.reason = reason

    def __bool__(self):
        return False

    def __eq__(self, other):
        return isinstance(other, Unavailable) and other.reason == self.reason

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None

    def __repr__(self):
        return "Unavailable({!r})".format(self.reason)


def calc_z_critical(alpha):
    """
    Returns the critical value of the standard normal distribution for a
    two-sided `(1 - alpha)` confidence interval. The 95% interval uses the
    conventional value 1.96 rather than `norm.ppf(0.975) = 1.959964...`.
    """
    if not 0 < alpha < 1:
        msg = "alpha must be between 0.0 and 1.0. {} passed instead."
        raise ValueError(msg.format(alpha))
    if alpha == 0.05:
        return conventional_95_z_critical
    return scipy.stats.norm.ppf(1.0 - alpha / 2.0, loc=0, scale=1)


class InferenceReport(object):
    """
    Parameters
    ----------
    fit_result : a gcldm.estimation.FitResult instance.
    param_names : list of str.
        The names of the estimated parameters, in order.
    num_obs : int or None, optional.
        The number of observations (rows of the long format data) used in
        estimation. Default == None.
    alpha : float, optional.
        Should be between 0.0 and 1.0. Determines the (1-alpha)% confidence
        interval that will be reported. Default == 0.05.
    """
    def __init__(self, fit_result, param_names, num_obs=None, alpha=0.05):
        self.fit_result = fit_result
        self.param_names = list(param_names)
        self.num_obs = num_obs
        self.alpha = alpha
        self.z_critical = calc_z_critical(alpha)

        self.params = pd.Series(fit_result.params,
                                index=self.param_names,
                                name="parameters")
        self.log_likelihood = fit_result.log_likelihood
        self.convergence = fit_result.convergence
        self.message = fit_result.message
        self.hessian_source = fit_result.hessian_source

        self._store_inferential_results()
        self._create_results_summary()
        self._create_fit_summary()
        return None

    @property
    def is_available(self):
        return not isinstance(self.cov, Unavailable)

    def _store_inferential_results(self):
        try:
            cov = calc_asymptotic_covariance(self.fit_result.hessian)
        except SingularCurvatureError as error:
            reason = "curvature matrix not invertible: {}".format(error)
            msg = "Standard errors are unavailable because the {}"
            warnings.warn(msg.format(reason), RuntimeWarning)
            unavailable = Unavailable(reason)
            self.cov = unavailable
            self.standard_errors = unavailable
            self.zvalues = unavailable
            self.pvalues = unavailable
            self.lower = unavailable
            self.upper = unavailable
            return None

        self.cov = pd.DataFrame(cov,
                                index=self.param_names,
                                columns=self.param_names)
        self.standard_errors = pd.Series(np.sqrt(np.diag(cov)),
                                         index=self.param_names,
                                         name="std_err")
        self.zvalues = self.params / self.standard_errors
        self.zvalues.name = "z"
        self.pvalues = pd.Series(2 * scipy.stats.norm.sf(np.abs(self.zvalues)),
                                 index=self.param_names,
                                 name="p_value")
        self.lower = self.params - self.z_critical * self.standard_errors
        self.upper = self.params + self.z_critical * self.standard_errors
        self.lower.name = "lower"
        self.upper.name = "upper"
        return None

    def _create_results_summary(self):
        """
        Creates the rounded table of estimation results. Unavailable columns
        are filled with NaN. The unrounded values stay on the report.
        """
        def as_column(value):
            if isinstance(value, Unavailable):
                return np.full(len(self.param_names), np.nan)
            return np.asarray(value, dtype=float)

        summary = pd.DataFrame({"estimate": self.params.values,
                                "std_err": as_column(self.standard_errors),
                                "z": as_column(self.zvalues),
                                "p_value": as_column(self.pvalues),
                                "lower": as_column(self.lower),
                                "upper": as_column(self.upper)},
                               index=self.param_names,
                               columns=summary_columns)

        self.summary = summary.round({"estimate": estimate_decimals,
                                      "std_err": estimate_decimals,
                                      "z": z_decimals,
                                      "p_value": p_value_decimals,
                                      "lower": estimate_decimals,
                                      "upper": estimate_decimals})
        return None

    def _create_fit_summary(self):
        initial_neg_ll = self.fit_result.initial_neg_log_likelihood
        initial_ll = None if initial_neg_ll is None else -1 * initial_neg_ll

        self.fit_summary = pd.Series([len(self.param_names),
                                      self.num_obs,
                                      self.fit_result.null_log_likelihood,
                                      initial_ll,
                                      self.log_likelihood,
                                      self.message],
                                     index=["Number of Parameters",
                                            "Number of Observations",
                                            "Null Log-Likelihood",
                                            "Initial Log-Likelihood",
                                            "Fitted Log-Likelihood",
                                            "Estimation Message"])
        return None

    def conf_int(self, alpha=None, coefs=None, return_df=False):
        """
        Creates the dataframe or array of lower and upper bounds for the
        (1-alpha)% confidence interval of the estimated parameters.

        Parameters
        ----------
        alpha : float or None, optional.
            Should be between 0.0 and 1.0. Default == None, which uses the
            alpha the report was created with.
        coefs : array-like, optional.
            Should contain strings that denote the coefficient names that one
            wants the confidence intervals for. Default == None because that
            will return the confidence interval for all variables.
        return_df : bool, optional.
            Determines whether the returned value will be a dataframe or a
            numpy array. Default = False.

        Returns
        -------
        pandas dataframe, ndarray, or Unavailable.
            The first column contains the lower bound to the confidence
            interval whereas the second column contains the upper values.
            `Unavailable` is returned when the curvature matrix could not be
            inverted.
        """
        if not self.is_available:
            return self.standard_errors

        alpha = self.alpha if alpha is None else alpha
        z_critical = calc_z_critical(alpha)

        lower = self.params - z_critical * self.standard_errors
        upper = self.params + z_critical * self.standard_errors
        lower.name = "lower"
        upper.name = "upper"

        combined = pd.concat((lower, upper), axis=1)
        if coefs is not None:
            combined = combined.loc[coefs, :]

        if return_df:
            return combined
        else:
            return combined.values
