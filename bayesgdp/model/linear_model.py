import math
import numpy as np
import scipy as sp
import scipy.linalg


class LinearModel():
    """ Gaussian linear model of the training outcome on a design matrix. """

    name = 'linear'

    def __init__(self, y, design):
        y = np.asarray(y, dtype=np.float64)
        if y.ndim != 1 or len(y) != design.shape[0]:
            raise ValueError(
                "Outcome must be a 1-d array with one entry per design row."
            )
        if not np.all(np.isfinite(y)):
            raise ValueError("Outcome contains missing or infinite values.")
        self.y = y
        self.design = design

    @property
    def n_obs(self):
        return len(self.y)

    @property
    def n_pred(self):
        """ Number of covariates, excluding the intercept. """
        return self.design.n_covariate

    @property
    def intercept_added(self):
        return self.design.intercept_added

    def compute_loglik(self, coef, obs_prec):
        """
        Parameters
        ----------
        coef : numpy array
            Intercept first if the design has one.
        obs_prec : float
        """
        resid = self.y - self.design.dot(coef)
        loglik = (
            len(self.y) * math.log(obs_prec) / 2
            - obs_prec * np.sum(resid ** 2) / 2
        )
        return loglik

    def calc_intercept_mle(self):
        return self.y.mean()

    @staticmethod
    def fit_least_squares(y, X, add_intercept=True):
        """ Ordinary least squares fit of y on X.

        Returns the coefficient vector with the intercept (if added) first.
        Raises numpy.linalg.LinAlgError when the design is rank deficient,
        in which case the coefficients are not identified.
        """
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if add_intercept:
            X = np.hstack((np.ones((X.shape[0], 1)), X))
        if X.shape[0] < X.shape[1]:
            raise np.linalg.LinAlgError(
                "Least squares is undefined with {:d} observations and {:d} "
                "coefficients.".format(X.shape[0], X.shape[1])
            )
        coef, _, rank, _ = sp.linalg.lstsq(X, y)
        if rank < X.shape[1]:
            raise np.linalg.LinAlgError(
                "Singular design matrix: rank {:d} with {:d} coefficients."
                .format(rank, X.shape[1])
            )
        return coef

    @staticmethod
    def predict(coef, X, intercept_included=True):
        X = np.asarray(X, dtype=np.float64)
        if intercept_included:
            return coef[0] + X.dot(coef[1:])
        return X.dot(coef)

    @staticmethod
    def simulate_outcome(X, beta, noise_sd, intercept=0., rand_gen=None):
        """
        Parameters
        ----------
        X : numpy array, DesignMatrix
            Only needs to support the `dot()` operation
        rand_gen : BasicRandom, None
            Uses the global numpy generator if None.
        """
        noise = np.random.randn(X.shape[0]) if rand_gen is None \
            else rand_gen.np_random.randn(X.shape[0])
        y = intercept + X.dot(beta) + noise_sd * noise
        return y
