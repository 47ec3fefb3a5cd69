from warnings import warn
import numpy as np


class CovariateScaler():
    """ Column-wise centering and scaling estimated on training rows only.

    The fitted `center` and `scale` are applied unchanged to any other rows,
    so held-out covariates never influence the map. A column without
    variation in the training rows is centered but not scaled.
    """

    def __init__(self, ddof=1):
        self.ddof = ddof
        self.center = None
        self.scale = None
        self.zero_variance = None

    @property
    def is_fitted(self):
        return self.center is not None

    def fit(self, X):
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError("Covariates must be a 2-dimensional array.")
        if X.shape[0] <= self.ddof:
            raise ValueError(
                "At least {:d} rows are needed to estimate the scale."
                .format(self.ddof + 1)
            )
        self.center = np.mean(X, axis=0)
        scale = np.std(X, axis=0, ddof=self.ddof)
        self.zero_variance = \
            scale <= X.shape[0] * 2 ** -52 * np.maximum(np.abs(self.center), 1.)
        if np.any(self.zero_variance):
            warn(
                "Covariate column(s) {} have no variation in the training "
                "data and will not be scaled."
                .format(np.flatnonzero(self.zero_variance).tolist())
            )
        scale[self.zero_variance] = 1.
        self.scale = scale
        return self

    def transform(self, X):
        if not self.is_fitted:
            raise ValueError("The scaler has to be fitted first.")
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != len(self.center):
            raise ValueError(
                "Expected {:d} covariate columns.".format(len(self.center))
            )
        return (X - self.center[np.newaxis, :]) / self.scale[np.newaxis, :]

    def fit_transform(self, X):
        return self.fit(X).transform(X)

    def unscale_coef(self, coef, intercept):
        """ Map coefficients from the standardized to the raw covariate scale.

        Parameters
        ----------
        coef : numpy array
            Shape (n_pred, ...); trailing axes (e.g. MCMC iterations) are
            carried along.
        intercept : float, numpy array
            Shape coef.shape[1:].

        Returns
        -------
        coef_orig : numpy array
            coef / scale
        intercept_orig : numpy array
            intercept - center . coef_orig
        """
        coef = np.asarray(coef)
        expand = (slice(None), ) + (np.newaxis, ) * (coef.ndim - 1)
        coef_orig = coef / self.scale[expand]
        intercept_orig = intercept - np.tensordot(self.center, coef_orig, axes=1)
        return coef_orig, intercept_orig

    def rescale_coef(self, coef_orig, intercept_orig):
        """ Inverse of `unscale_coef`. """
        coef_orig = np.asarray(coef_orig)
        expand = (slice(None), ) + (np.newaxis, ) * (coef_orig.ndim - 1)
        coef = coef_orig * self.scale[expand]
        intercept = intercept_orig + np.tensordot(self.center, coef_orig, axes=1)
        return coef, intercept
