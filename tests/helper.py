import numpy as np
from simulate_data import simulate_design, simulate_outcome


def simulate_data(n_obs=100, n_pred=3, noise_sd=.3, intercept=1.,
                  square=False, seed=None):
    if seed is not None:
        np.random.seed(seed)

    X = simulate_design(n_obs, n_pred)
    beta = np.array([1., -.5, .8] + [0.] * (n_pred - 3))[:n_pred]
    y = simulate_outcome(
        X, beta, intercept=intercept, noise_sd=noise_sd, square=square
    )
    return y, X, beta
