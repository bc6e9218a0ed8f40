# -*- coding: utf-8 -*-
"""
@name:      Network Simulation
@summary:   Builds synthetic pollinator-plant interaction networks in the long
            format expected by `create_network_model`.
"""
from collections import OrderedDict

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError

valid_covariate_types = ["pollinator", "plant", "pair"]


def ensure_valid_covariate_types(covariate_types):
    """
    Ensures that `covariate_types` is a dict whose values are all valid
    covariate types. Raises a helpful ConfigurationError otherwise.
    """
    if not isinstance(covariate_types, dict):
        msg = "covariate_types must be a dict. {} passed instead."
        raise ConfigurationError(msg.format(type(covariate_types)))

    problem_names = [name for name, cov_type in covariate_types.items()
                     if cov_type not in valid_covariate_types]
    if problem_names != []:
        msg = "The following covariates have invalid types: {}. "
        msg_2 = "Valid types are {}."
        raise ConfigurationError(msg.format(problem_names) +
                                 msg_2.format(valid_covariate_types))
    return None


def draw_relative_abundances(num_units, sigma, random_state):
    """
    Draws log-normal abundances and normalizes them to sum to one.
    """
    abundances = random_state.lognormal(mean=0.0, sigma=sigma, size=num_units)
    return abundances / abundances.sum()


def simulate_network(num_pollinators,
                     num_plants,
                     covariate_types,
                     betas,
                     gamma_shape=None,
                     abundance_sigma=1.0,
                     sampling_effort=100,
                     seed=None):
    """
    Parameters
    ----------
    num_pollinators : int.
        The number of pollinators, i.e. row-groups.
    num_plants : int.
        The number of plants, i.e. categories within each group.
    covariate_types : OrderedDict.
        Keys are covariate names. Values are one of `"pollinator"` (a trait
        drawn once per pollinator), `"plant"` (a trait drawn once per plant),
        or `"pair"` (a value drawn per pollinator-plant pair).
    betas : 1D array-like.
        One rate coefficient per covariate, in the order of
        `covariate_types`.
    gamma_shape : float or None, optional.
        The shape of the mean-one Gamma distribution that mixes the Poisson
        rates. Default == None, which produces plain Poisson counts.
    abundance_sigma : float, optional.
        The log-scale standard deviation of the relative abundances.
        Default == 1.0.
    sampling_effort : float, optional.
        Multiplies every rate. Default == 100.
    seed : int or None, optional.
        Seeds the random number generator. Default == None.

    Returns
    -------
    pandas DataFrame.
        One row per pollinator per plant, grouped by pollinator, with columns
        `["pollinator", "plant", "count"]` followed by the covariates.
    """
    ensure_valid_covariate_types(covariate_types)
    betas = np.atleast_1d(np.asarray(betas, dtype=float))
    if betas.size != len(covariate_types):
        msg = "betas has {} elements but {} covariates were declared."
        raise ConfigurationError(msg.format(betas.size, len(covariate_types)))
    if gamma_shape is not None and gamma_shape <= 0:
        msg = "gamma_shape must be positive or None. {} passed instead."
        raise ConfigurationError(msg.format(gamma_shape))

    random_state = np.random.RandomState(seed)
    num_rows = num_pollinators * num_plants

    pollinator_ids = np.repeat(np.arange(1, num_pollinators + 1), num_plants)
    plant_ids = np.tile(np.arange(1, num_plants + 1), num_pollinators)

    ##########
    # Draw the covariates
    ##########
    covariates = OrderedDict()
    for name, cov_type in covariate_types.items():
        if cov_type == "pollinator":
            values = np.repeat(random_state.normal(size=num_pollinators),
                               num_plants)
        elif cov_type == "plant":
            values = np.tile(random_state.normal(size=num_plants),
                             num_pollinators)
        else:
            values = random_state.normal(size=num_rows)
        covariates[name] = values

    if len(covariates) > 0:
        design = np.column_stack(list(covariates.values()))
    else:
        design = np.zeros((num_rows, 0))

    ##########
    # Calculate the rates and draw the counts
    ##########
    pollinator_abundance =\
        draw_relative_abundances(num_pollinators,
                                 abundance_sigma,
                                 random_state)
    plant_abundance =\
        draw_relative_abundances(num_plants, abundance_sigma, random_state)

    rates = (sampling_effort *
             np.repeat(pollinator_abundance, num_plants) *
             np.tile(plant_abundance, num_pollinators) *
             np.exp(design.dot(betas)))

    if gamma_shape is not None:
        rates = rates * random_state.gamma(shape=gamma_shape,
                                           scale=1.0 / gamma_shape,
                                           size=num_rows)

    counts = random_state.poisson(rates)

    dataframe = pd.DataFrame({"pollinator": pollinator_ids,
                              "plant": plant_ids,
                              "count": counts})
    for name, values in covariates.items():
        dataframe[name] = values

    return dataframe
