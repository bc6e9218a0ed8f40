"""
Tests for the network_tools.py file.
"""
import os
import tempfile
import unittest

import numpy as np
import numpy.testing as npt
import pandas as pd

import gcldm.network_tools as nt
from gcldm.exceptions import ConfigurationError


class DataCheckTests(unittest.TestCase):
    def setUp(self):
        self.fake_df = pd.DataFrame({"pollinator": [1, 1, 2, 2],
                                     "plant": ["a", "b", "a", "b"],
                                     "count": [3, 0, 2, 5],
                                     "trait": [0.5, -1.0, 2.0, 0.1],
                                     "label": ["x", "y", "z", "w"]})

    def test_get_dataframe_from_data(self):
        # A dataframe is returned as is
        self.assertIs(nt.get_dataframe_from_data(self.fake_df), self.fake_df)

        # A csv path is read
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "network.csv")
            self.fake_df.to_csv(path, index=False)
            read_df = nt.get_dataframe_from_data(path)
        npt.assert_allclose(read_df["count"].values,
                            self.fake_df["count"].values)

        # Everything else is rejected
        for bad_data in ["network.txt", 5, None, [1, 2]]:
            self.assertRaises(ConfigurationError,
                              nt.get_dataframe_from_data,
                              bad_data)
        return None

    def test_ensure_object_is_list_of_strings(self):
        self.assertIsNone(
            nt.ensure_object_is_list_of_strings(["a", "b"], "title"))
        for bad_item in ["a", ["a", 1], None]:
            self.assertRaises(ConfigurationError,
                              nt.ensure_object_is_list_of_strings,
                              bad_item,
                              "title")
        return None

    def test_ensure_columns_are_in_dataframe(self):
        self.assertIsNone(
            nt.ensure_columns_are_in_dataframe(["trait"], self.fake_df))
        with self.assertRaisesRegex(ConfigurationError, "missing"):
            nt.ensure_columns_are_in_dataframe(["trait", "missing"],
                                               self.fake_df,
                                               col_title="rate_covariates")
        return None

    def test_ensure_valid_nums_in_columns(self):
        self.assertIsNone(
            nt.ensure_valid_nums_in_columns(["trait", "count"], self.fake_df))

        bad_df = self.fake_df.copy()
        bad_df.loc[0, "trait"] = np.inf
        for columns, dataframe in [(["label"], self.fake_df),
                                   (["trait"], bad_df)]:
            self.assertRaises(ConfigurationError,
                              nt.ensure_valid_nums_in_columns,
                              columns,
                              dataframe)
        return None

    def test_ensure_valid_counts(self):
        self.assertIsNone(nt.ensure_valid_counts(np.array([0, 3, 4.0])))

        bad_counts = [np.array([1, -2, 3]),
                      np.array([1.5, 2, 3]),
                      np.array([1, np.nan]),
                      np.array([[1, 2]]),
                      np.array(["a", "b"])]
        for counts in bad_counts:
            self.assertRaises(ConfigurationError,
                              nt.ensure_valid_counts,
                              counts)
        return None

    def test_ensure_valid_param_type(self):
        expected = [("gcl", "gcl"),
                    ("delta_const", "delta_const"),
                    ("dconst", "delta_const"),
                    ("dfunc", "delta_func"),
                    ("rconst", "rho_const"),
                    ("rho_const", "rho_const")]
        for tag, canonical in expected:
            self.assertEqual(nt.ensure_valid_param_type(tag), canonical)

        for bad_tag in ["mnl", "GCL", None, 1]:
            self.assertRaises(ConfigurationError,
                              nt.ensure_valid_param_type,
                              bad_tag)
        return None


class MappingTests(unittest.TestCase):
    def test_get_original_order_unique_ids(self):
        ids = np.array([3, 3, 1, 1, 2, 2])
        npt.assert_allclose(nt.get_original_order_unique_ids(ids), [3, 1, 2])
        return None

    def test_create_sparse_mapping(self):
        group_index = nt.create_group_index(2, 3)
        npt.assert_allclose(group_index, [0, 0, 0, 1, 1, 1])

        mapping = nt.create_sparse_mapping(group_index)
        expected = np.array([[1, 0],
                             [1, 0],
                             [1, 0],
                             [0, 1],
                             [0, 1],
                             [0, 1]])
        self.assertEqual(mapping.shape, (6, 2))
        npt.assert_allclose(mapping.toarray(), expected)
        return None

    def test_ensure_contiguity_in_group_rows(self):
        self.assertIsNone(
            nt.ensure_contiguity_in_group_rows(np.array([1, 1, 2, 2])))
        self.assertRaises(ConfigurationError,
                          nt.ensure_contiguity_in_group_rows,
                          np.array([1, 2, 1, 2]))
        return None

    def test_ensure_balanced_groups(self):
        groups = np.array([1, 1, 2, 2])
        self.assertEqual(
            nt.ensure_balanced_groups(groups, np.array(["a", "b", "a", "b"])),
            (2, 2))

        # Missing category in the second group
        self.assertRaises(ConfigurationError,
                          nt.ensure_balanced_groups,
                          np.array([1, 1, 2]),
                          np.array(["a", "b", "a"]))
        # Categories in a different order
        self.assertRaises(ConfigurationError,
                          nt.ensure_balanced_groups,
                          groups,
                          np.array(["a", "b", "b", "a"]))
        return None

    def test_create_design_matrix(self):
        dataframe = pd.DataFrame({"x": [1, 2], "z": [0.5, 0.25]})
        design, names = nt.create_design_matrix(dataframe, ["z", "x"])
        npt.assert_allclose(design, [[0.5, 1], [0.25, 2]])
        self.assertEqual(names, ["z", "x"])

        design, names = nt.create_design_matrix(dataframe, [])
        self.assertEqual(design.shape, (2, 0))
        self.assertEqual(names, [])

        # ModelSpec adds the dispersion intercept itself
        self.assertRaises(TypeError,
                          nt.create_design_matrix,
                          dataframe,
                          ["x"],
                          add_intercept=True)
        return None
