import numpy as np


def simulate_design(n_obs, n_pred, corr_design=False, n_binary_pred=0,
                    binary_pred_freq=.5, seed=None):
    """ Gaussian covariates, optionally correlated, followed by 0/1 columns. """

    if seed is not None:
        np.random.seed(seed)

    n_dense_pred = n_pred - n_binary_pred
    if corr_design:
        X = generate_corr_design(n_obs, n_dense_pred)
    else:
        X = np.random.randn(n_obs, n_dense_pred)
    if n_binary_pred > 0:
        X_binary = np.random.binomial(1, binary_pred_freq, (n_obs, n_binary_pred))
        X = np.hstack((X, X_binary))
    return X

def simulate_outcome(X, beta, intercept=0., noise_sd=1., square=False,
                     seed=None):
    """
    Linear outcome with Gaussian noise. If `square`, the linear predictor
    plus noise is squared, so that the square root of the returned outcome
    follows the linear model (provided it stays positive).
    """
    if seed is not None:
        np.random.seed(seed)

    outcome = intercept + X.dot(beta) + noise_sd * np.random.randn(X.shape[0])
    if square:
        if np.any(outcome < 0):
            raise ValueError(
                "Increase the intercept; the linear predictor is negative."
            )
        outcome = outcome ** 2
    return outcome

def generate_corr_design(n_obs, n_pred, n_factor=None, max_sd=10, min_sd=1):
    """
    Each row is drawn from a Gaussian with a covariance proportional to
        I + F L F'
    where F is an orthogonal matrix of size p by n_factor and L is diagonal.
    """
    if n_factor is None:
        n_factor = max(1, int(n_pred / 2))
    factor, _ = np.linalg.qr(np.random.randn(n_pred, n_factor))
    principal_comp_sd = np.linspace(max_sd, min_sd, n_factor + 1)
    loading = principal_comp_sd[:n_factor] - min_sd
    X = np.dot(
        factor,
        loading[:, np.newaxis] * np.random.randn(n_factor, n_obs)
    ).T
    X += min_sd * np.random.randn(n_obs, n_pred)
    return X
