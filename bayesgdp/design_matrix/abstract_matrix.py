import abc
import numpy as np


class AbstractDesignMatrix():
    """ Covariates of the training rows with an optional leading intercept.

    Keeps the `scaler` that standardized the covariates, if any, so that
    held-out rows and coefficients can be moved between the raw and the
    standardized scale.
    """

    def __init__(self, add_intercept, scaler=None):
        self.intercept_added = add_intercept
        self.scaler = scaler

    @property
    @abc.abstractmethod
    def shape(self):
        pass

    @property
    def n_covariate(self):
        return self.shape[1] - int(self.intercept_added)

    @abc.abstractmethod
    def dot(self, coef):
        pass

    @abc.abstractmethod
    def Tdot(self, v):
        """ Multiply by the transpose of the matrix. """
        pass

    @abc.abstractmethod
    def weighted_gram(self, weight):
        """ Returns X' diag(weight) X as a numpy array. """
        pass

    def map_covariates(self, X_new):
        """ Apply the training standardization to other covariate rows. """
        X_new = self.validate_covariates(X_new)
        if X_new.shape[1] != self.n_covariate:
            raise ValueError(
                "Expected {:d} covariate columns.".format(self.n_covariate)
            )
        if self.scaler is None:
            return X_new
        return self.scaler.transform(X_new)

    def unscale_coef(self, beta, alpha):
        """ Coefficients and intercept on the raw covariate scale. """
        if self.scaler is None:
            return beta, alpha
        return self.scaler.unscale_coef(beta, alpha)

    @staticmethod
    def validate_covariates(X):
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError("Design matrix must be 2-dimensional.")
        if not np.all(np.isfinite(X)):
            raise ValueError("Design matrix contains missing or infinite values.")
        return X
