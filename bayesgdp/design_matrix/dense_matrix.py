import numpy as np
from .abstract_matrix import AbstractDesignMatrix


class DenseDesignMatrix(AbstractDesignMatrix):

    def __init__(self, X, add_intercept=True, scaler=None):
        """
        Parameters
        ----------
        X : numpy array
            Covariates, already standardized if `scaler` is given.
        scaler : CovariateScaler, None
            The fitted map that produced X from the raw covariates.
        """
        X = self.validate_covariates(X)
        super().__init__(add_intercept, scaler)
        if add_intercept:
            X = np.column_stack((np.ones(X.shape[0]), X))
        self.X = X

    @property
    def shape(self):
        return self.X.shape

    def dot(self, coef):
        return self.X.dot(coef)

    def Tdot(self, v):
        return self.X.T.dot(v)

    def weighted_gram(self, weight):
        weight = np.broadcast_to(weight, (self.X.shape[0], ))
        return self.X.T.dot(weight[:, np.newaxis] * self.X)

    def covariates(self):
        """ Returns the matrix without the intercept column. """
        return self.X[:, 1:] if self.intercept_added else self.X
