"""
This module provides a general "estimate" function and EstimationObj class for
the network models.
"""
import sys
import time
import warnings

import numpy as np
from scipy.optimize import minimize, dual_annealing, approx_fprime

from . import network_calcs as nc
from .exceptions import ConfigurationError
from .exceptions import NumericDomainError
from .exceptions import SingularCurvatureError
from .exceptions import OptimizationFailureWarning

# Optimizers that only use the objective, those that use the analytic
# gradient, and the simulated annealing routine.
gradient_free_methods = ["Nelder-Mead"]
gradient_methods = ["BFGS", "L-BFGS-B", "CG"]
annealing_methods = ["SANN"]
valid_methods = gradient_free_methods + gradient_methods + annealing_methods
# Gradient based methods that accept box constraints on the parameters
bounded_methods = ["L-BFGS-B"]

default_maxiter = 10000
default_hessian_eps = 1e-6
default_sann_width = 10.0


class EstimationObj(object):
    """
    Generic class for storing pointers to data and methods needed in the
    estimation process.

    Parameters
    ----------
    model_spec : a gcldm.model_spec.ModelSpec instance.
        Should contain the following attributes:

          - counts
          - design
          - rows_to_groups
          - num_rate_coefs
          - num_params
    zero_vector : 1D ndarray.
        Determines what is viewed as a "null" set of parameters. It is
        explicitly passed because some parameters (e.g. rho, which must lie
        in (0, 1)) have their null values at values other than zero.
    split_params : callable.
        Should take a vector of parameters and the number of rate
        coefficients. Should return a tuple containing the rate coefficients
        and the dispersion parameters (or None if the model has none).
    """
    # Subclasses that implement `convenience_calc_hessian` set this to True.
    has_analytic_hessian = False

    def __init__(self, model_spec, zero_vector, split_params):
        # Store pointers to needed objects
        self.model_spec = model_spec
        self.counts = model_spec.counts
        self.design = model_spec.design
        self.rows_to_groups = model_spec.rows_to_groups
        self.num_rate_coefs = model_spec.num_rate_coefs
        self.num_params = model_spec.num_params

        self.zero_vector = np.asarray(zero_vector, dtype=float)
        self.split_params = split_params

        return None

    def convenience_split_params(self, params):
        """
        Splits parameter vector into rate and dispersion parameters.
        """
        return self.split_params(params, self.num_rate_coefs)

    def convenience_calc_probs(self, params):
        raise NotImplementedError

    def convenience_calc_log_likelihood(self, params):
        raise NotImplementedError

    def convenience_calc_gradient(self, params):
        raise NotImplementedError

    def convenience_calc_hessian(self, params):
        msg = "No analytic hessian is available for the {}."
        raise NotImplementedError(msg.format(self.model_spec.model_type))

    def check_length_of_initial_values(self, init_values):
        """
        Ensures that `init_values` is of the correct length. Raises a helpful
        ValueError if otherwise.

        Parameters
        ----------
        init_values : 1D ndarray.
            The initial values to start the optimization process with. There
            should be one value for each coefficient being estimated.

        Returns
        -------
        None.
        """
        if init_values.ndim != 1 or init_values.shape[0] != self.num_params:
            msg = "The initial values are of the wrong dimension."
            msg_1 = "It should be of dimension {}"
            msg_2 = "But instead it has dimension {}"
            raise ValueError(msg +
                             msg_1.format(self.num_params) +
                             msg_2.format(init_values.shape))

        return None

    def prepare_initial_values(self, init_values):
        init_values = np.asarray(init_values, dtype=float)
        self.check_length_of_initial_values(init_values)
        return init_values

    def calc_neg_log_likelihood(self, params):
        """
        Calculates the negative log-likelihood. Infeasible parameters, and
        parameters that produce non-finite log-likelihoods, map to `np.inf`.
        """
        with np.errstate(all="ignore"):
            try:
                log_likelihood =\
                    self.convenience_calc_log_likelihood(params)
            except NumericDomainError:
                return np.inf
        return -1 * nc.ensure_finite_value(log_likelihood)

    def calc_neg_gradient(self, params):
        """
        Calculates the negative gradient of the log-likelihood. Infeasible
        parameters produce a vector of NaNs.
        """
        with np.errstate(all="ignore"):
            try:
                gradient = self.convenience_calc_gradient(params)
            except NumericDomainError:
                return np.full(self.num_params, np.nan)
        return -1 * gradient

    def calc_neg_log_likelihood_and_neg_gradient(self, params):
        """
        Calculates and returns the negative of the log-likelihood and the
        negative of the gradient. This function is used as the objective
        function in scipy.optimize.minimize.
        """
        neg_log_likelihood = self.calc_neg_log_likelihood(params)
        if not np.isfinite(neg_log_likelihood):
            return np.inf, np.zeros(self.num_params)

        neg_gradient = self.calc_neg_gradient(params)
        if not np.isfinite(neg_gradient).all():
            return np.inf, np.zeros(self.num_params)

        return neg_log_likelihood, neg_gradient

    def calc_neg_hessian(self, params):
        """
        Calculate and return the negative of the hessian for this model and
        dataset.
        """
        with np.errstate(all="ignore"):
            return -1 * self.convenience_calc_hessian(params)

    def calc_numerical_neg_hessian(self, params, eps=default_hessian_eps):
        """
        Approximates the hessian of the negative log-likelihood by forward
        differences of the analytic negative gradient.

        Parameters
        ----------
        params : 1D ndarray.
            The point at which the curvature is needed.
        eps : float, optional.
            The finite difference step size. Default == 1e-6.

        Returns
        -------
        neg_hessian : 2D ndarray of shape `(num_params, num_params)`.
            The symmetrized finite-difference jacobian of the negative
            gradient.
        """
        params = np.asarray(params, dtype=float)
        jacobian = approx_fprime(params, self.calc_neg_gradient, eps)
        jacobian = np.reshape(jacobian, (params.size, params.size))
        return 0.5 * (jacobian + jacobian.T)

    def get_optimizer_bounds(self):
        """
        Returns None when no parameter is restricted. Otherwise returns a list
        of `(lower, upper)` tuples, one per parameter, with `None` marking an
        unbounded side.
        """
        return None

    def get_annealing_bounds(self, init_values, width):
        """
        Returns a list of `(lower, upper)` tuples, one per parameter, that
        bound the search of the simulated annealing routine. Restricted
        parameters use their optimizer bounds instead of the search width.
        """
        bounds = [(value - width, value + width) for value in init_values]
        optimizer_bounds = self.get_optimizer_bounds()
        if optimizer_bounds is not None:
            for pos, limits in enumerate(optimizer_bounds):
                if limits != (None, None):
                    bounds[pos] = limits
        return bounds


class FitResult(object):
    """
    Stores the outcome of one call to `estimate`.

    Attributes
    ----------
    params : 1D ndarray.
        The estimated parameters.
    hessian : 2D ndarray.
        The curvature matrix, i.e. the hessian of the negative log-likelihood
        at `params`.
    neg_log_likelihood : float.
        The negative log-likelihood at `params`.
    convergence : int.
        0 for success, 1 when the iteration limit was reached, 2 for any
        other failure.
    message : str.
        The optimizer's termination message.
    hessian_source : str.
        Either `"numerical"` or `"analytic"`.
    """
    def __init__(self,
                 params,
                 hessian,
                 neg_log_likelihood,
                 convergence,
                 message,
                 hessian_source="numerical",
                 initial_values=None,
                 initial_neg_log_likelihood=None,
                 null_log_likelihood=None,
                 method=None,
                 nit=None):
        self.params = params
        self.hessian = hessian
        self.neg_log_likelihood = neg_log_likelihood
        self.convergence = convergence
        self.message = message
        self.hessian_source = hessian_source
        self.initial_values = initial_values
        self.initial_neg_log_likelihood = initial_neg_log_likelihood
        self.null_log_likelihood = null_log_likelihood
        self.method = method
        self.nit = nit
        return None

    @property
    def log_likelihood(self):
        return -1 * self.neg_log_likelihood

    def __repr__(self):
        msg = "FitResult(log_likelihood={:.4f}, convergence={}, method={!r})"
        return msg.format(self.log_likelihood, self.convergence, self.method)


def ensure_valid_method(method):
    """
    Returns the canonical name of the optimizer `method`, ignoring case.
    Raises a ConfigurationError for unknown methods.
    """
    if isinstance(method, str):
        for valid_method in valid_methods:
            if method.lower() == valid_method.lower():
                return valid_method

    msg = "method must be one of {}. {} passed instead."
    raise ConfigurationError(msg.format(valid_methods, method))


def get_message(results):
    message = results.get("message", "")
    if isinstance(message, (list, tuple)):
        message = " ".join(str(x) for x in message)
    elif isinstance(message, bytes):
        message = message.decode("utf-8", "replace")
    return str(message)


def calc_convergence_code(results, maxiter):
    """
    Maps an optimizer result onto 0 (success), 1 (iteration limit reached),
    or 2 (any other failure).
    """
    if results.get("success", False) and np.isfinite(results["fun"]):
        return 0

    message = get_message(results).lower()
    nit = results.get("nit", None)
    if "maximum number" in message or (nit is not None and nit >= maxiter):
        return 1
    return 2


def run_optimizer(init_values,
                  estimator,
                  method,
                  loss_tol,
                  gradient_tol,
                  maxiter,
                  sann_width=default_sann_width,
                  seed=None,
                  **kwargs):
    """
    Minimizes the negative log-likelihood of `estimator`, starting from
    `init_values`, with the requested optimizer. Returns the
    scipy.optimize.OptimizeResult.
    """
    if method in annealing_methods:
        bounds = estimator.get_annealing_bounds(init_values, sann_width)
        return dual_annealing(estimator.calc_neg_log_likelihood,
                              bounds=bounds,
                              x0=init_values,
                              maxfun=maxiter,
                              seed=seed)

    if method in gradient_free_methods:
        return minimize(estimator.calc_neg_log_likelihood,
                        init_values,
                        method=method,
                        tol=loss_tol,
                        options={"maxiter": maxiter},
                        **kwargs)

    if method in bounded_methods and "bounds" not in kwargs:
        kwargs["bounds"] = estimator.get_optimizer_bounds()

    return minimize(estimator.calc_neg_log_likelihood_and_neg_gradient,
                    init_values,
                    method=method,
                    jac=True,
                    tol=loss_tol,
                    options={'gtol': gradient_tol,
                             "maxiter": maxiter},
                    **kwargs)


def calc_curvature(final_params, estimator, hessian_eps):
    """
    Computes the curvature matrix at the optimum. The numerical hessian is
    used unless it cannot be inverted and the estimator has an analytic
    hessian, in which case the analytic hessian is substituted.

    Returns
    -------
    tuple.
        `(hessian, hessian_source)`.
    """
    neg_hessian = estimator.calc_numerical_neg_hessian(final_params,
                                                       hessian_eps)
    if not estimator.has_analytic_hessian:
        return neg_hessian, "numerical"

    try:
        nc.calc_asymptotic_covariance(neg_hessian)
    except SingularCurvatureError:
        msg = "The numerical hessian could not be inverted. "
        msg_2 = "The analytic hessian will be used instead."
        warnings.warn(msg + msg_2)
        return estimator.calc_neg_hessian(final_params), "analytic"

    return neg_hessian, "numerical"


def estimate(init_values,
             estimator,
             method,
             loss_tol,
             gradient_tol,
             maxiter,
             print_results,
             hessian_eps=default_hessian_eps,
             sann_width=default_sann_width,
             seed=None,
             **kwargs):
    """
    Estimates the parameters of the model held by `estimator`.

    Parameters
    ----------
    init_values : 1D ndarray.
        The initial values to start the optimization process with. For the
        intra-group correlation model, the initial rate coefficients alone may
        be passed, in which case rho starts at 0.1.
    estimator : an instance of a subclass of EstimationObj.
    method : str.
        One of `"Nelder-Mead"`, `"BFGS"`, `"L-BFGS-B"`, `"CG"`, or `"SANN"`
        (case insensitive).
    loss_tol : float.
        Determines the tolerance on the difference in objective function
        values from one iteration to the next which is needed to determine
        convergence.
    gradient_tol : float.
        Determines the tolerance on the difference in gradient values from one
        iteration to the next which is needed to determine convergence.
    maxiter : int.
        The maximum number of iterations (function evaluations for `"SANN"`).
    print_results : bool.
        Determines whether the log-likelihoods and estimation time are
        printed.
    hessian_eps : float, optional.
        The step size used for the numerical hessian. Default == 1e-6.
    sann_width : float, optional.
        The half-width of the box searched by simulated annealing, around the
        initial values. Default == 10.
    seed : int or None, optional.
        Seeds the simulated annealing routine. Default == None.
    kwargs :
        Passed to scipy.optimize.minimize.

    Returns
    -------
    FitResult.
    """
    method = ensure_valid_method(method)
    init_values = estimator.prepare_initial_values(init_values)

    # Perform preliminary calculations
    log_likelihood_at_zero =\
        -1 * estimator.calc_neg_log_likelihood(estimator.zero_vector)

    initial_neg_log_likelihood =\
        estimator.calc_neg_log_likelihood(init_values)
    if not np.isfinite(initial_neg_log_likelihood):
        msg = "The log-likelihood is not finite at the initial values: {}"
        raise ConfigurationError(msg.format(init_values))

    if print_results:
        # Print the log-likelihood at zero
        print("Log-likelihood at zero: {:,.4f}".format(log_likelihood_at_zero))

        # Print the log-likelihood at the starting values
        print("Initial Log-likelihood: {:,.4f}".format(
            -1 * initial_neg_log_likelihood))
        sys.stdout.flush()

    # Estimate the actual parameters of the model
    start_time = time.time()

    results = run_optimizer(init_values,
                            estimator,
                            method,
                            loss_tol,
                            gradient_tol,
                            maxiter,
                            sann_width=sann_width,
                            seed=seed,
                            **kwargs)

    # Stop timing the estimation process and report the timing results
    end_time = time.time()
    if print_results:
        elapsed_sec = (end_time - start_time)
        elapsed_min = elapsed_sec / 60.0
        if elapsed_min > 1.0:
            print("Estimation Time: {:.2f} minutes.".format(elapsed_min))
        else:
            print("Estimation Time: {:.2f} seconds.".format(elapsed_sec))
        print("Final log-likelihood: {:,.4f}".format(-1 * results["fun"]))
        sys.stdout.flush()

    convergence = calc_convergence_code(results, maxiter)
    message = get_message(results)
    if convergence != 0:
        msg = "The optimizer did not converge (code {}): {}"
        warnings.warn(msg.format(convergence, message),
                      OptimizationFailureWarning)

    final_params = np.asarray(results["x"], dtype=float)
    hessian, hessian_source = calc_curvature(final_params,
                                             estimator,
                                             hessian_eps)

    return FitResult(final_params,
                     hessian,
                     float(results["fun"]),
                     convergence,
                     message,
                     hessian_source=hessian_source,
                     initial_values=init_values,
                     initial_neg_log_likelihood=initial_neg_log_likelihood,
                     null_log_likelihood=log_likelihood_at_zero,
                     method=method,
                     nit=results.get("nit", None))
