"""
This file declares the strings that will be displayed for each
parameterization based on the abbreviated parameterization string that is
passed to the network model constructor.
"""
from collections import OrderedDict
param_type_to_display_name = OrderedDict()
param_type_to_display_name["gcl"] = "Grouped Conditional Logit Model"
param_type_to_display_name["delta_const"] =\
    "Dirichlet-Multinomial Model (Constant Dispersion)"
param_type_to_display_name["delta_func"] =\
    "Dirichlet-Multinomial Model (Dispersion Covariates)"
param_type_to_display_name["rho_const"] =\
    "Dirichlet-Multinomial Model (Constant Intra-Group Correlation)"

# Alternative spellings accepted for the parameterization tags
param_type_aliases = {"dconst": "delta_const",
                      "dfunc": "delta_func",
                      "rconst": "rho_const"}
