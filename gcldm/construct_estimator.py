"""
@name:      Estimator Constructor
@summary:   Contains functions necessary for constructing the Estimation
            Objects used to provide convenience functions when estimating
            the network models' various parameterizations.
"""
import numpy as np

from .conditional_logit import GCLEstimator
from .conditional_logit import split_param_vec as gcl_split_params

from .dirichlet_multinomial import DMEstimator
from .dirichlet_multinomial import split_param_vec as dm_split_params

from .intragroup_correlation import RhoEstimator
from .intragroup_correlation import initial_rho
from .intragroup_correlation import split_param_vec as rho_split_params

# Map the parameterizations to their appropriate estimator and split params
# functions
param_type_to_resources =\
    {"gcl": {'estimator': GCLEstimator, 'split_func': gcl_split_params},
     "delta_const": {'estimator': DMEstimator,
                     'split_func': dm_split_params},
     "delta_func": {'estimator': DMEstimator,
                    'split_func': dm_split_params},
     "rho_const": {'estimator': RhoEstimator,
                   'split_func': rho_split_params}}


def create_zero_vector(model_spec):
    """
    Returns the "null" parameter vector for `model_spec`: zeros, except for
    rho, which is set to its initial value.
    """
    zero_vector = np.zeros(model_spec.num_params)
    if model_spec.param_type == "rho_const":
        zero_vector[-1] = initial_rho
    return zero_vector


def create_estimation_obj(model_spec):
    """
    Should return a model estimation object corresponding to the
    parameterization of `model_spec`.

    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.

    Returns
    -------
    An instance of a subclass of gcldm.estimation.EstimationObj.
    """
    resources = param_type_to_resources[model_spec.param_type]
    estimator_class, current_split_func =\
        resources['estimator'], resources['split_func']
    return estimator_class(model_spec,
                           create_zero_vector(model_spec),
                           current_split_func)


def neg_log_likelihood(params, model_spec):
    """
    Returns the negative log-likelihood of `params` under `model_spec`, or
    `np.inf` when `params` is infeasible.
    """
    return create_estimation_obj(model_spec).calc_neg_log_likelihood(params)


def neg_gradient(params, model_spec):
    """
    Returns the gradient of the negative log-likelihood of `params` under
    `model_spec`.
    """
    return create_estimation_obj(model_spec).calc_neg_gradient(params)


def neg_hessian(params, model_spec):
    """
    Returns the analytic hessian of the negative log-likelihood. Only
    available for the "rho_const" parameterization; the others raise
    NotImplementedError.
    """
    return create_estimation_obj(model_spec).calc_neg_hessian(params)
