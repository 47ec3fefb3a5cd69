import numpy as np
from sklearn.linear_model import lars_path


class DegenerateCpError(ValueError):
    """ Mallows' Cp is undefined at every step of the lasso path. """
    pass


def select_min_cp_step(cp):
    """ Index of the smallest Cp; the earliest step wins a tie.

    Undefined (NaN) entries are skipped. Raises DegenerateCpError if no
    step has a defined Cp.
    """
    cp = np.asarray(cp, dtype=np.float64)
    if cp.size == 0 or np.all(np.isnan(cp)):
        raise DegenerateCpError(
            "Mallows' Cp is undefined at all steps of the lasso path; the "
            "design is degenerate."
        )
    return int(np.nanargmin(cp))


class LassoPath():
    """ Lasso regularization path by LARS with step selection by Mallows' Cp.

    The intercept is left unpenalized: the response and the covariates are
    centered before computing the path.
    """

    def __init__(self, max_iter=500):
        self.max_iter = max_iter
        self.alphas = None
        self.coef_path = None
        self.intercepts = None
        self.rss = None
        self.df = None
        self.cp = None
        self.sigma_sq = None
        self.selected_step = None

    @property
    def n_step(self):
        return self.coef_path.shape[1]

    def fit(self, X, y):
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        n_obs = X.shape[0]
        if n_obs != len(y):
            raise ValueError("X and y have inconsistent numbers of rows.")

        X_mean = np.mean(X, axis=0)
        y_mean = np.mean(y)
        alphas, _, coef_path = lars_path(
            X - X_mean, y - y_mean, method='lasso', max_iter=self.max_iter
        )
        self.alphas = alphas
        self.coef_path = coef_path
        self.intercepts = y_mean - X_mean.dot(coef_path)

        fitted = self.intercepts[np.newaxis, :] + X.dot(coef_path)
        self.rss = np.sum((y[:, np.newaxis] - fitted) ** 2, axis=0)
        self.df = np.count_nonzero(coef_path, axis=0) + 1
        self.sigma_sq, self.cp = self.compute_cp(self.rss, self.df, n_obs)
        self.selected_step = None
        return self

    @staticmethod
    def compute_cp(rss, df, n_obs):
        """ Mallows' Cp = RSS / sigma^2 - n + 2 df along the path.

        sigma^2 is estimated from the least-regularized step. Returns NaN
        for all steps if that estimate is unavailable or zero.
        """
        resid_df = n_obs - df[-1]
        sigma_sq = rss[-1] / resid_df if resid_df > 0 else float('nan')
        if not sigma_sq > 0:
            return sigma_sq, np.full(len(rss), float('nan'))
        cp = rss / sigma_sq - n_obs + 2 * df
        return sigma_sq, cp

    def select_step(self):
        if self.cp is None:
            raise ValueError("The path has to be computed first.")
        self.selected_step = select_min_cp_step(self.cp)
        return self.selected_step

    def get_coef(self, step=None):
        """ Returns (intercept, coef) at a path step, the selected one by default. """
        if step is None:
            step = self.selected_step if self.selected_step is not None \
                else self.select_step()
        return self.intercepts[step], self.coef_path[:, step]

    def predict(self, X_new, step=None):
        intercept, coef = self.get_coef(step)
        return intercept + np.asarray(X_new, dtype=np.float64).dot(coef)
