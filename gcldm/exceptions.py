# -*- coding: utf-8 -*-
"""
@name:      Exceptions
@summary:   Declares the errors and warnings raised while building network
            models and estimating them.
"""
import numpy as np


class ConfigurationError(ValueError):
    """
    Raised when the data or arguments used to build a model are malformed.
    Always raised before any numerical work begins.
    """
    pass


class NumericDomainError(ArithmeticError):
    """
    Raised by the numeric core when a parameter vector lies outside the
    domain of the log-likelihood. Recovered by the estimation objects, which
    report an infinite objective instead.
    """
    pass


class SingularCurvatureError(np.linalg.LinAlgError):
    """
    Raised when a curvature matrix cannot be inverted.
    """
    pass


class OptimizationFailureWarning(RuntimeWarning):
    """
    Issued when the optimizer stops without reporting convergence.
    """
    pass
