# -*- coding: utf-8 -*-
"""
@module:    model_spec.py
@name:      Network Model Specification
@summary:   Contains the immutable description of the data and the
            parameterization used by every estimation routine: the grouped
            counts, the rate design matrix, the dispersion design matrix, and
            the mapping from rows to pollinator groups.
"""
import warnings

import numpy as np

from .display_names import param_type_to_display_name
from .exceptions import ConfigurationError
from .network_tools import get_dataframe_from_data
from .network_tools import ensure_object_is_list_of_strings
from .network_tools import ensure_columns_are_in_dataframe
from .network_tools import ensure_valid_nums_in_columns
from .network_tools import ensure_valid_counts
from .network_tools import ensure_valid_param_type
from .network_tools import ensure_contiguity_in_group_rows
from .network_tools import ensure_balanced_groups
from .network_tools import get_original_order_unique_ids
from .network_tools import create_group_index
from .network_tools import create_sparse_mapping
from .network_tools import create_design_matrix

# Create a warning string that will be issued if dispersion covariates are
# passed to a parameterization that does not use them.
_msg_1 = "The {} does not use dispersion covariates. "
_msg_2 = "dispersion_design / dispersion_covariates will be ignored."
_dispersion_ignore_msg = _msg_1 + _msg_2

dispersion_intercept_name = "(dispersion) Intercept"
rho_name = "rho"


def _make_read_only(array):
    array = np.array(array, dtype=float)
    array.flags.writeable = False
    return array


class ModelSpec(object):
    """
    Immutable description of one network dataset and one parameterization.

    Parameters
    ----------
    counts : 1D ndarray.
        One non-negative integer count per (group, category) pair. The counts
        must be grouped contiguously by group, with `num_categories` rows per
        group.
    design : 2D ndarray.
        The rate design matrix. One row per element of `counts` and one
        column per rate coefficient.
    num_groups : int.
        The number of row-groups (pollinators), `G`.
    num_categories : int.
        The number of categories (plants) within each group, `J`.
    param_type : str.
        One of `"gcl"`, `"delta_const"`, `"delta_func"`, or `"rho_const"`
        (or one of the aliases `"dconst"`, `"dfunc"`, `"rconst"`).
    dispersion_design : 2D ndarray or None, optional.
        The dispersion covariates, `Z`, without an intercept column. Only used
        and required when `param_type == "delta_func"`. Default == None.
    coef_names : list of str or None, optional.
        The names of the rate coefficients. Default == None, which produces
        `["x_1", ..., "x_K"]`.
    dispersion_names : list of str or None, optional.
        The names of the columns of `dispersion_design`. Default == None.
    group_ids, category_ids : 1D ndarray or None, optional.
        The labels of the groups and categories, in order. Default == None,
        which uses integer positions.
    """
    def __init__(self,
                 counts,
                 design,
                 num_groups,
                 num_categories,
                 param_type,
                 dispersion_design=None,
                 coef_names=None,
                 dispersion_names=None,
                 group_ids=None,
                 category_ids=None):
        param_type = ensure_valid_param_type(param_type)

        ##########
        # Check the dimensions of the grouped data
        ##########
        ensure_valid_counts(counts)
        counts = np.asarray(counts)
        for value, title in [(num_groups, "num_groups"),
                             (num_categories, "num_categories")]:
            if int(value) != value or value < 1:
                msg = "{} must be a positive integer. {} passed instead."
                raise ConfigurationError(msg.format(title, value))
        num_groups, num_categories = int(num_groups), int(num_categories)

        num_rows = num_groups * num_categories
        if counts.size != num_rows:
            msg = "The response has {} elements but G * J = {} * {} = {}."
            raise ConfigurationError(msg.format(counts.size,
                                                num_groups,
                                                num_categories,
                                                num_rows))

        design = np.asarray(design, dtype=float)
        if design.ndim == 1:
            design = design[:, None]
        if design.ndim != 2 or design.shape[0] != num_rows:
            msg = "design must be a 2D array with {} rows. Its shape is {}."
            raise ConfigurationError(msg.format(num_rows, design.shape))
        if not np.isfinite(design).all():
            raise ConfigurationError("design contains non-finite values.")

        num_rate_coefs = design.shape[1]
        if coef_names is None:
            coef_names = ["x_{}".format(i + 1) for i in range(num_rate_coefs)]
        if len(coef_names) != num_rate_coefs:
            msg = "coef_names has {} elements but design has {} columns."
            raise ConfigurationError(msg.format(len(coef_names),
                                                num_rate_coefs))

        ##########
        # Build the dispersion design for the chosen parameterization
        ##########
        display_name = param_type_to_display_name[param_type]
        if param_type != "delta_func" and dispersion_design is not None:
            warnings.warn(_dispersion_ignore_msg.format(display_name))

        if param_type == "gcl":
            if num_rate_coefs == 0:
                msg = "The {} needs at least one rate covariate."
                raise ConfigurationError(msg.format(display_name))
            full_dispersion_design = None
            all_dispersion_names = []
        elif param_type == "delta_const":
            full_dispersion_design = np.ones((num_rows, 1))
            all_dispersion_names = [dispersion_intercept_name]
        elif param_type == "delta_func":
            if dispersion_design is None:
                msg = "The {} requires a non-empty dispersion design."
                raise ConfigurationError(msg.format(display_name))
            dispersion_design = np.asarray(dispersion_design, dtype=float)
            if dispersion_design.ndim == 1:
                dispersion_design = dispersion_design[:, None]
            if (dispersion_design.ndim != 2 or
                    dispersion_design.shape[0] != num_rows or
                    dispersion_design.shape[1] == 0):
                msg = "dispersion_design must be a 2D array with {} rows and "
                msg_2 = "at least one column. Its shape is {}."
                raise ConfigurationError(
                    (msg + msg_2).format(num_rows, dispersion_design.shape))
            if not np.isfinite(dispersion_design).all():
                msg = "dispersion_design contains non-finite values."
                raise ConfigurationError(msg)
            if dispersion_names is None:
                dispersion_names =\
                    ["z_{}".format(i + 1)
                     for i in range(dispersion_design.shape[1])]
            if len(dispersion_names) != dispersion_design.shape[1]:
                msg = "dispersion_names has {} elements but "
                msg_2 = "dispersion_design has {} columns."
                raise ConfigurationError(
                    (msg + msg_2).format(len(dispersion_names),
                                         dispersion_design.shape[1]))
            full_dispersion_design =\
                np.concatenate((np.ones((num_rows, 1)), dispersion_design),
                               axis=1)
            all_dispersion_names =\
                ([dispersion_intercept_name] +
                 ["(dispersion) {}".format(x) for x in dispersion_names])
        else:
            full_dispersion_design = None
            all_dispersion_names = [rho_name]

        ##########
        # Store the needed data
        ##########
        group_index = create_group_index(num_groups, num_categories)
        rows_to_groups = create_sparse_mapping(group_index)

        self.param_type = param_type
        self.model_type = display_name
        self.num_groups = num_groups
        self.num_categories = num_categories
        self.counts = _make_read_only(counts)
        self.group_totals =\
            _make_read_only(rows_to_groups.T.dot(self.counts))
        self.design = _make_read_only(design)
        self.rows_to_groups = rows_to_groups
        self.group_index = group_index
        self.group_index.flags.writeable = False
        self.num_rate_coefs = num_rate_coefs
        self.num_dispersion_coefs = len(all_dispersion_names)
        self.num_params = num_rate_coefs + self.num_dispersion_coefs
        self.coef_names = list(coef_names)
        self.dispersion_names = all_dispersion_names
        self.param_names = self.coef_names + self.dispersion_names

        if full_dispersion_design is None:
            self.dispersion_design = None
            self.full_design = self.design
        else:
            self.dispersion_design = _make_read_only(full_dispersion_design)
            self.full_design = _make_read_only(
                np.concatenate((design, full_dispersion_design), axis=1))

        self.group_ids = (np.arange(num_groups) if group_ids is None
                          else np.asarray(group_ids))
        self.category_ids = (np.arange(num_categories) if category_ids is None
                             else np.asarray(category_ids))

        self._frozen = True
        return None

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            msg = "ModelSpec objects are read-only. Cannot set `{}`."
            raise AttributeError(msg.format(name))
        object.__setattr__(self, name, value)

    # Short names matching the usual notation for the model.
    @property
    def G(self):
        return self.num_groups

    @property
    def J(self):
        return self.num_categories

    @property
    def K(self):
        return self.num_rate_coefs

    @property
    def L(self):
        return self.num_dispersion_coefs

    @property
    def M(self):
        return self.num_params

    def __repr__(self):
        msg = "ModelSpec(param_type={!r}, G={}, J={}, K={}, L={})"
        return msg.format(self.param_type, self.G, self.J, self.K, self.L)


def create_model_spec(data,
                      response_col,
                      pollinator_col,
                      plant_col,
                      rate_covariates,
                      param_type,
                      dispersion_covariates=None):
    """
    Builds a ModelSpec from long format interaction data.

    Parameters
    ----------
    data : str or pandas DataFrame.
        If string, data should be a path to a CSV file containing the long
        format data. There should be one row per pollinator per plant, with
        all rows of a pollinator next to one another and the plants in the
        same order within every pollinator.
    response_col : str.
        Denotes the column in `data` containing the interaction counts.
    pollinator_col : str.
        Denotes the column in `data` identifying the row-groups.
    plant_col : str.
        Denotes the column in `data` identifying the categories.
    rate_covariates : list of str.
        Columns of `data` used as rate covariates, in coefficient order.
    param_type : str.
        One of `"gcl"`, `"delta_const"`, `"delta_func"`, or `"rho_const"`
        (or the aliases `"dconst"`, `"dfunc"`, `"rconst"`).
    dispersion_covariates : list of str or None, optional.
        Columns of `data` used as dispersion covariates. Must be non-empty
        when `param_type == "delta_func"`. Default == None.

    Returns
    -------
    ModelSpec.
    """
    dataframe = get_dataframe_from_data(data)
    param_type = ensure_valid_param_type(param_type)

    ##########
    # Make sure all necessary columns are in the dataframe
    ##########
    ensure_columns_are_in_dataframe([pollinator_col, plant_col],
                                    dataframe,
                                    '[pollinator_col, plant_col]',
                                    'data')
    ensure_columns_are_in_dataframe([response_col],
                                    dataframe,
                                    'response_col',
                                    'data')

    ensure_object_is_list_of_strings(rate_covariates, "rate_covariates")
    ensure_columns_are_in_dataframe(rate_covariates,
                                    dataframe,
                                    'rate_covariates',
                                    'data')
    ensure_valid_nums_in_columns(rate_covariates, dataframe)

    if param_type == "delta_func":
        if dispersion_covariates is None or len(dispersion_covariates) == 0:
            msg = "dispersion_covariates must be a non-empty list when "
            msg_2 = "param_type == 'delta_func'."
            raise ConfigurationError(msg + msg_2)
        ensure_object_is_list_of_strings(dispersion_covariates,
                                         "dispersion_covariates")
        ensure_columns_are_in_dataframe(dispersion_covariates,
                                        dataframe,
                                        'dispersion_covariates',
                                        'data')
        ensure_valid_nums_in_columns(dispersion_covariates, dataframe)
    elif dispersion_covariates:
        warnings.warn(_dispersion_ignore_msg.format(
            param_type_to_display_name[param_type]))

    ##########
    # Make sure the rows are grouped contiguously and the groups are balanced
    ##########
    group_id_vector = dataframe[pollinator_col].to_numpy()
    category_id_vector = dataframe[plant_col].to_numpy()
    ensure_contiguity_in_group_rows(group_id_vector)
    num_groups, num_categories =\
        ensure_balanced_groups(group_id_vector, category_id_vector)

    counts = dataframe[response_col].to_numpy()
    ensure_valid_counts(counts)

    ##########
    # Create the design matrices for this model
    ##########
    design, coef_names = create_design_matrix(dataframe, rate_covariates)
    if param_type == "delta_func":
        dispersion_design, dispersion_names =\
            create_design_matrix(dataframe, dispersion_covariates)
    else:
        dispersion_design, dispersion_names = None, None

    return ModelSpec(counts,
                     design,
                     num_groups,
                     num_categories,
                     param_type,
                     dispersion_design=dispersion_design,
                     coef_names=coef_names,
                     dispersion_names=dispersion_names,
                     group_ids=get_original_order_unique_ids(group_id_vector),
                     category_ids=get_original_order_unique_ids(
                         category_id_vector))
