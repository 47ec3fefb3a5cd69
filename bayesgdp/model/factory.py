from ..design_matrix import DenseDesignMatrix, CovariateScaler
from .linear_model import LinearModel


def RegressionModel(outcome, X, standardize=True, add_intercept=True,
                    scaler=None):
    """ Prepare training data for BayesGDP, with pre-processings as needed.

    Parameters
    ----------
    outcome : 1-d numpy array
    X : numpy array
        Raw covariates. Do *not* add an intercept column manually.
    standardize : bool
        If True, center and scale the columns of X. The scaler is attached
        to the design matrix so that held-out covariates are mapped with
        the training center and scale.
    add_intercept : bool
    scaler : CovariateScaler, None
        A scaler already fitted to X, used instead of fitting a new one.
    """
    if standardize:
        if scaler is None:
            scaler = CovariateScaler().fit(X)
        elif not scaler.is_fitted:
            raise ValueError("The supplied scaler has to be fitted first.")
        X = scaler.transform(X)
    else:
        scaler = None
    design = DenseDesignMatrix(X, add_intercept=add_intercept, scaler=scaler)
    return LinearModel(outcome, design)
