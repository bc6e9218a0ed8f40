# -*- coding: utf-8 -*-
"""
@module:    network_tools.py
@name:      Helpful Tools for Network Model Estimation
@summary:   Contains functions that check and prepare one's interaction data
            for model estimation, and the 'mappings' that speed up the group
            wise calculations.
"""
from collections.abc import Iterable

import numpy as np
import pandas as pd

from scipy.sparse import csr_matrix

from .display_names import param_type_to_display_name
from .display_names import param_type_aliases
from .exceptions import ConfigurationError


def get_dataframe_from_data(data):
    """
    Parameters
    ----------
    data : string or pandas dataframe.
        If string, data should be an absolute or relative path to a CSV file
        containing the long format data for this network model. Note long
        format has one row per pollinator per plant. If pandas dataframe, the
        dataframe should be the long format data for the network model.

    Returns
    -------
    dataframe : pandas dataframe of the long format data for the model.
    """
    if isinstance(data, str):
        if data.endswith(".csv"):
            dataframe = pd.read_csv(data)
        else:
            msg_1 = "data = {} is of unknown file type."
            msg_2 = " Please pass path to csv."
            raise ConfigurationError(msg_1.format(data) + msg_2)
    elif isinstance(data, pd.DataFrame):
        dataframe = data
    else:
        msg_1 = "type(data) = {} is an invalid type."
        msg_2 = " Please pass pandas dataframe or path to csv."
        raise ConfigurationError(msg_1.format(type(data)) + msg_2)

    return dataframe


def ensure_object_is_list_of_strings(item, title):
    """
    Checks that the item is a list (or tuple) of strings. If not, raises a
    ConfigurationError.
    """
    assert isinstance(title, str)

    if not isinstance(item, (list, tuple)) or\
            not all(isinstance(x, str) for x in item):
        msg = "{} must be a list of strings. {} passed instead."
        raise ConfigurationError(msg.format(title, item))

    return None


def ensure_columns_are_in_dataframe(columns,
                                    dataframe,
                                    col_title='',
                                    data_title='data'):
    """
    Checks whether each column in `columns` is in `dataframe`. Raises
    ConfigurationError if any of the columns are not in the dataframe.

    Parameters
    ----------
    columns : list of strings.
        Each string should represent a column heading in dataframe.
    dataframe : pandas DataFrame.
        Dataframe containing the data for the network model to be estimated.
    col_title : str, optional.
        Denotes the title of the columns that were passed to the function.
    data_title : str, optional.
        Denotes the title of the dataframe that is being checked to see whether
        it contains the passed columns. Default == 'data'

    Returns
    -------
    None.
    """
    # Make sure columns is an iterable
    assert isinstance(columns, Iterable)
    # Make sure dataframe is a pandas dataframe
    assert isinstance(dataframe, pd.DataFrame)
    # Make sure title is a string
    assert isinstance(col_title, str)
    assert isinstance(data_title, str)

    problem_cols = [col for col in columns if col not in dataframe.columns]
    if problem_cols != []:
        if col_title == '':
            msg = "{} not in {}.columns"
            final_msg = msg.format(problem_cols, data_title)
        else:
            msg = "The following columns in {} are not in {}.columns: {}"
            final_msg = msg.format(col_title, data_title, problem_cols)

        raise ConfigurationError(final_msg)

    return None


def ensure_valid_nums_in_columns(columns, dataframe):
    """
    Checks whether each column in `columns` contains numeric data, excluding
    positive or negative infinity and excluding NaN. Raises ConfigurationError
    if any of the columns do not meet these requirements.

    Parameters
    ----------
    columns : iterable of column headers in `dataframe`.
    dataframe : pandas DataFrame.
        Dataframe containing the data for the network model to be estimated.

    Returns
    -------
    None.
    """
    problem_cols = []
    for col in columns:
        # The condition below checks for values that are not floats or integers
        # This will catch values that are strings.
        if dataframe[col].dtype.kind not in ['f', 'i', 'u', 'b']:
            problem_cols.append(col)
        # The condition below checks for positive or negative inifinity values
        # and for NaN values.
        elif not np.isfinite(dataframe[col].to_numpy().astype(float)).all():
            problem_cols.append(col)

    if problem_cols != []:
        msg = "The following columns contain either +/- inifinity values, "
        msg_2 = "NaN values, or values that are not real numbers "
        msg_3 = "(e.g. strings):\n{}"
        total_msg = msg + msg_2 + msg_3
        raise ConfigurationError(total_msg.format(problem_cols))

    return None


def ensure_valid_counts(counts):
    """
    Ensures that `counts` is a 1D array of finite, non-negative integers.
    Raises a helpful ConfigurationError otherwise.
    """
    counts = np.asarray(counts)
    if counts.ndim != 1:
        msg = "The response counts must be 1D. Received shape {}."
        raise ConfigurationError(msg.format(counts.shape))

    if counts.dtype.kind not in ['f', 'i', 'u']:
        msg = "The response counts must be numeric. Received dtype {}."
        raise ConfigurationError(msg.format(counts.dtype))

    float_counts = counts.astype(float)
    if not np.isfinite(float_counts).all():
        raise ConfigurationError("The response counts must all be finite.")

    if (float_counts < 0).any():
        problem_rows = np.where(float_counts < 0)[0]
        msg = "The response counts must be non-negative. Negative counts "
        msg_2 = "are in rows: {}"
        raise ConfigurationError(msg + msg_2.format(problem_rows.tolist()))

    if (np.round(float_counts) != float_counts).any():
        problem_rows = np.where(np.round(float_counts) != float_counts)[0]
        msg = "The response counts must be integers. Non-integer counts "
        msg_2 = "are in rows: {}"
        raise ConfigurationError(msg + msg_2.format(problem_rows.tolist()))

    return None


def ensure_valid_param_type(param_type):
    """
    Checks the user's parameterization tag and returns its canonical form.
    Raises a helpful ConfigurationError if the tag is not recognized.

    Parameters
    ----------
    param_type : str.
        Should be one of the keys of `param_type_to_display_name` or one of
        the keys of `param_type_aliases`.

    Returns
    -------
    canonical_type : str.
        A key of `param_type_to_display_name`.
    """
    if isinstance(param_type, str):
        canonical_type = param_type_aliases.get(param_type, param_type)
        if canonical_type in param_type_to_display_name:
            return canonical_type

    msg_1 = "The specified parameterization was not valid."
    msg_2 = "Valid parameterizations are {}".format(
        list(param_type_to_display_name.keys()) +
        list(param_type_aliases.keys()))
    msg_3 = "The passed parameterization was: {}".format(param_type)
    raise ConfigurationError("\n".join([msg_1, msg_2, msg_3]))


def get_original_order_unique_ids(id_array):
    """
    Get the unique id's of id_array, in their original order of appearance.

    Parameters
    ----------
    id_array : 1D ndarray.
        Should contain the ids that we want to extract the unique values from.

    Returns
    -------
    original_order_unique_ids : 1D ndarray.
        Contains the unique ids from `id_array`, in their original order of
        appearance.
    """
    assert isinstance(id_array, np.ndarray)
    assert len(id_array.shape) == 1

    # Get the indices of the unique IDs in their order of appearance
    # Note the [1] is because the np.unique() call will return both the sorted
    # unique IDs and the indices
    original_unique_id_indices =\
        np.sort(np.unique(id_array, return_index=True)[1])

    # Get the unique ids, in their original order of appearance
    original_order_unique_ids = id_array[original_unique_id_indices]

    return original_order_unique_ids


def create_sparse_mapping(id_array, unique_ids=None):
    """
    Will create a scipy.sparse compressed-sparse-row matrix that maps
    each row represented by an element in id_array to the corresponding
    value of the unique ids in id_array.

    Parameters
    ----------
    id_array : 1D ndarray.
        Each element should represent some id related to the corresponding row.
    unique_ids : 1D ndarray, or None, optional.
        If not None, each element should be present in `id_array`. The elements
        in `unique_ids` should be present in the order in which one wishes them
        to appear in the columns of the resulting sparse array. If None, then
        the unique_ids will be created from `id_array`, in the order of their
        appearance in `id_array`.

    Returns
    -------
    mapping : 2D scipy.sparse CSR matrix.
        Will contain only zeros and ones. `mapping[i, j] == 1` where
        `id_array[i] == unique_ids[j]`. The id's corresponding to each column
        are given by `unique_ids`. The rows correspond to the elements of
        `id_array`.
    """
    # Create unique_ids if necessary
    if unique_ids is None:
        unique_ids = get_original_order_unique_ids(id_array)

    # Check function arguments for validity
    assert isinstance(unique_ids, np.ndarray)
    assert isinstance(id_array, np.ndarray)
    assert unique_ids.ndim == 1
    assert id_array.ndim == 1

    # Figure out which ids in id_array are represented in unique_ids
    represented_ids = np.isin(id_array, unique_ids)
    # Determine the number of rows in id_array that are in unique_ids
    num_non_zero_rows = represented_ids.sum()
    # Figure out the dimensions of the resulting sparse matrix
    num_rows = id_array.size
    num_cols = unique_ids.size
    # Specify the non-zero values that will be present in the sparse matrix.
    data = np.ones(num_non_zero_rows, dtype=int)
    # Specify which rows will have non-zero entries in the sparse matrix.
    row_indices = np.arange(num_rows)[represented_ids]
    # Map the unique id's to their respective columns
    unique_id_dict = dict(zip(unique_ids, np.arange(num_cols)))
    # Figure out the column indices of the non-zero entries, and do so in a way
    # that avoids a key error (i.e. only look up ids that are represented)
    col_indices =\
        np.array([unique_id_dict[x] for x in id_array[represented_ids]],
                 dtype=int)

    # Create and return the sparse matrix
    return csr_matrix((data, (row_indices, col_indices)),
                      shape=(num_rows, num_cols))


def create_group_index(num_groups, num_categories):
    """
    Creates the group index, i.e. the position of each row's group, for data
    that is grouped contiguously with `num_categories` rows per group.
    """
    return np.repeat(np.arange(num_groups), num_categories)


def ensure_contiguity_in_group_rows(group_id_vector):
    """
    Ensures that all rows pertaining to a given pollinator group are located
    next to one another. Raises a helpful ConfigurationError otherwise. This
    check is needed because the group sums assume that every group occupies
    one contiguous block of rows.

    Parameters
    ----------
    group_id_vector : 1D ndarray.
        Should contain the group id that corresponds to each row.

    Returns
    -------
    None.
    """
    # Each id may only start a new block of rows once.
    block_starts = np.concatenate(([True],
                                   group_id_vector[1:] != group_id_vector[:-1]))
    start_ids = pd.Series(group_id_vector[block_starts])
    repeated = start_ids[start_ids.duplicated()]
    if len(repeated) > 0:
        msg_1 = "All rows pertaining to a given group must be contiguous. "
        msg_2 = "\nRows pertaining to the following group "
        msg_3 = "id's are not contiguous: \n{}"
        raise ConfigurationError(msg_1 + msg_2 +
                                 msg_3.format(repeated.unique().tolist()))
    return None


def ensure_balanced_groups(group_id_vector, category_id_vector):
    """
    Ensures that every group contains exactly one row for each category in the
    dataset, in the same category order. Raises a helpful ConfigurationError
    otherwise.

    Returns
    -------
    (num_groups, num_categories) : tuple of ints.
    """
    group_ids = get_original_order_unique_ids(group_id_vector)
    category_ids = get_original_order_unique_ids(category_id_vector)
    num_groups, num_categories = group_ids.size, category_ids.size

    if group_id_vector.size != num_groups * num_categories:
        msg = "The number of rows, {}, does not equal the number of groups "
        msg_2 = "times the number of categories ({} * {} = {})."
        raise ConfigurationError(
            (msg + msg_2).format(group_id_vector.size,
                                 num_groups,
                                 num_categories,
                                 num_groups * num_categories))

    expected_categories = np.tile(category_ids, num_groups)
    if not (expected_categories == category_id_vector).all():
        problem_rows = np.where(expected_categories != category_id_vector)[0]
        problem_groups = pd.unique(group_id_vector[problem_rows])
        msg = "Every group must list the categories in the same order. "
        msg_2 = "The following groups do not: {}"
        raise ConfigurationError(msg + msg_2.format(problem_groups.tolist()))

    return num_groups, num_categories


def create_design_matrix(dataframe, columns):
    """
    Parameters
    ----------
    dataframe : pandas DataFrame.
        Each column in `columns` should be a numeric column of `dataframe`.
    columns : list of strings.
        The columns, in order, that make up the design matrix.

    Returns
    -------
    design_matrix, var_names : tuple with two elements.
        First element is the design matrix, a 2D numpy array with one row per
        row of `dataframe`. Second element is a list of strings denoting the
        names of each column of the design matrix.
    """
    num_rows = dataframe.shape[0]
    var_names = list(columns)

    if len(columns) > 0:
        design_matrix = dataframe[var_names].to_numpy().astype(float)
    else:
        design_matrix = np.empty((num_rows, 0), dtype=float)

    return design_matrix, var_names
