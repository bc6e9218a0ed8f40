# -*- coding: utf-8 -*-
"""
@name:      Network Model
@summary:   Contains the user facing model object. It builds the ModelSpec,
            runs the estimation, and stores the estimation and inference
            results on the model instance.
"""
import pandas as pd

from .model_spec import ModelSpec
from .model_spec import create_model_spec
from .construct_estimator import create_estimation_obj
from .estimation import estimate
from .estimation import default_maxiter
from .estimation import default_hessian_eps
from .estimation import default_sann_width
from .inference import InferenceReport
from .initial_values import get_initial_values


class NetworkModel(object):
    """
    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.
        Describes the data and the parameterization to be estimated.
    """
    def __init__(self, model_spec):
        if not isinstance(model_spec, ModelSpec):
            msg = "model_spec must be a ModelSpec instance. {} passed instead."
            raise TypeError(msg.format(type(model_spec)))

        self.model_spec = model_spec
        self.model_type = model_spec.model_type
        self.param_type = model_spec.param_type
        self.param_names = model_spec.param_names
        return None

    def fit_mle(self,
                init_vals=None,
                print_res=True,
                method="Nelder-Mead",
                loss_tol=1e-06,
                gradient_tol=1e-06,
                maxiter=default_maxiter,
                hessian_eps=default_hessian_eps,
                sann_width=default_sann_width,
                seed=None,
                alpha=0.05,
                **kwargs):
        """
        Parameters
        ----------
        init_vals : 1D ndarray or None, optional.
            The initial values to start the optimization process with. There
            should be one value per rate coefficient followed by one value per
            dispersion coefficient. For the "rho_const" model the rate
            coefficients alone may be passed, in which case rho starts at 0.1.
            Default == None, which uses the coefficients of a Poisson GLM.
        print_res : bool, optional.
            Determines whether the timing and initial and final log likelihood
            results will be printed as they they are determined.
        method : str, optional.
            One of `"Nelder-Mead"`, `"BFGS"`, `"L-BFGS-B"`, `"CG"`, or
            `"SANN"`. Default == "Nelder-Mead".
        loss_tol : float, optional.
            Determines the tolerance on the difference in objective function
            values from one iteration to the next that is needed to determine
            convergence. Default `== 1e-06`.
        gradient_tol : float, optional.
            Determines the tolerance on the difference in gradient values from
            one iteration to the next which is needed to determine convergence.
            Default `== 1e-06`.
        maxiter : int, optional.
            The maximum number of iterations. Default == 10000.
        hessian_eps : float, optional.
            The finite difference step used for the curvature matrix.
            Default == 1e-6.
        sann_width : float, optional.
            The half-width of the box searched when `method == "SANN"`.
            Default == 10.
        seed : int or None, optional.
            Seeds the simulated annealing routine. Default == None.
        alpha : float, optional.
            Determines the (1-alpha)% confidence intervals in the summary.
            Default == 0.05.

        Returns
        -------
        None. Estimation results are saved to the model instance.
        """
        if init_vals is None:
            init_vals = get_initial_values(self.model_spec)

        # Store the optimization method
        self.optimization_method = method

        # Create the estimation object and get the estimation results
        estimator = create_estimation_obj(self.model_spec)
        fit_result = estimate(init_vals,
                              estimator,
                              method,
                              loss_tol,
                              gradient_tol,
                              maxiter,
                              print_res,
                              hessian_eps=hessian_eps,
                              sann_width=sann_width,
                              seed=seed,
                              **kwargs)

        self.store_fit_results(fit_result, estimator, alpha=alpha)
        return None

    def store_fit_results(self, fit_result, estimator, alpha=0.05):
        """
        Stores the FitResult, the InferenceReport, and the fitted
        compositions on the model instance.
        """
        spec = self.model_spec
        report = InferenceReport(fit_result,
                                 self.param_names,
                                 num_obs=spec.counts.size,
                                 alpha=alpha)

        self.fit_result = fit_result
        self.inference = report

        self.params = report.params
        self.cov = report.cov
        self.standard_errors = report.standard_errors
        self.zvalues = report.zvalues
        self.pvalues = report.pvalues
        self.summary = report.summary
        self.fit_summary = report.fit_summary

        self.log_likelihood = report.log_likelihood
        self.null_log_likelihood = fit_result.null_log_likelihood
        self.convergence = fit_result.convergence
        self.estimation_message = fit_result.message
        self.hessian_source = fit_result.hessian_source
        self.nobs = spec.counts.size

        self.long_fitted_probs =\
            estimator.convenience_calc_probs(fit_result.params)
        self.fitted_probs =\
            pd.DataFrame(self.long_fitted_probs.reshape((spec.num_groups,
                                                         spec.num_categories)),
                         index=pd.Index(spec.group_ids, name="pollinator"),
                         columns=pd.Index(spec.category_ids, name="plant"))
        return None

    def print_summaries(self):
        """
        Returns None. Will print the measures of fit and the estimation results
        for the  model.
        """
        if hasattr(self, "fit_summary") and hasattr(self, "summary"):
            print("\n")
            print(self.fit_summary)
            print("=" * 30)
            print(self.summary)

        else:
            msg = "This {} object has not yet been estimated so there "
            msg_2 = "are no estimation summaries to print."
            raise NotImplementedError(msg.format(self.model_type) + msg_2)

        return None

    def conf_int(self, alpha=0.05, coefs=None, return_df=False):
        """
        Creates the dataframe or array of lower and upper bounds for the
        (1-alpha)% confidence interval of the estimated parameters. See
        `gcldm.inference.InferenceReport.conf_int`.
        """
        if not hasattr(self, "inference"):
            msg = "Must estimate a model before confidence intervals can be "
            msg_2 = "returned."
            raise NotImplementedError(msg + msg_2)
        return self.inference.conf_int(alpha=alpha,
                                       coefs=coefs,
                                       return_df=return_df)

    def __repr__(self):
        return "NetworkModel({!r})".format(self.model_spec)


def create_network_model(data,
                         response_col,
                         pollinator_col,
                         plant_col,
                         rate_covariates,
                         param_type,
                         dispersion_covariates=None):
    """
    Parameters
    ----------
    data : string or pandas dataframe.
        If string, data should be an absolute or relative path to a CSV file
        containing the long format data. Long format has one row per plant
        for each pollinator, with each pollinator's rows kept together.
    response_col : str.
        Denotes the column in `data` containing the interaction counts.
    pollinator_col : str.
        Denotes the column in `data` identifying the pollinators.
    plant_col : str.
        Denotes the column in `data` identifying the plants.
    rate_covariates : list of str.
        The columns of `data` used as rate covariates.
    param_type : str.
        Denotes the parameterization being estimated. Should be one of:

            - "gcl"
            - "delta_const" (or "dconst")
            - "delta_func" (or "dfunc")
            - "rho_const" (or "rconst")
    dispersion_covariates : list of str or None, optional.
        The columns of `data` used as dispersion covariates. Required when
        `param_type` is "delta_func". Default == None.

    Returns
    -------
    NetworkModel.
    """
    model_spec = create_model_spec(data,
                                   response_col,
                                   pollinator_col,
                                   plant_col,
                                   rate_covariates,
                                   param_type,
                                   dispersion_covariates=dispersion_covariates)
    return NetworkModel(model_spec)
