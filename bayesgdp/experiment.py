""" Held-out comparison of least squares, lasso and Bayesian GDP regression.

Each repetition splits the rows at random, fits the three estimators on the
training rows and scores their predictions of the square-root response on
the test rows by root-mean-squared error. A single generator supplies every
random draw of the run, splits and MCMC alike, so the repetitions share one
advancing stream; re-seeding per repetition would change the results.
"""
import math
import numbers
import time
from warnings import warn
import numpy as np
import pandas as pd
from .util import simplify_warnings # Monkey patch the warning format
from .random import BasicRandom
from .design_matrix import CovariateScaler
from .model import RegressionModel, LinearModel
from .prior import GDPPrior
from .bayesgdp import BayesGDP
from .gibbs_util import SamplerError, check_chain_length
from .lasso_path import LassoPath, DegenerateCpError
from .util.mcmc_summarizer import summarize


MODEL_NAMES = ('ols', 'lasso', 'gdp')


class ExperimentOptions():

    def __init__(self, nsim=1, train_frac=.8, n_iter=5000, n_burnin=1000,
                 thin=1, params_to_save=BayesGDP.default_params_to_save,
                 cred_level=.95, n_status_update=0):
        """
        Parameters
        ----------
        nsim : int
            Number of random train/test splits.
        train_frac : float
            The training part has floor(train_frac * n) rows.
        n_iter, n_burnin, thin : int
            MCMC settings of the GDP fit; see `BayesGDP.gibbs`.
        params_to_save : tuple of str
            GDP quantities retained by the sampler; 'mu_pred' is always
            added since the prediction is its posterior mean.
        cred_level : float
            Probability of the intervals in the posterior summary.
        n_status_update : int
            Number of progress lines printed over the repetitions.
        """
        if not (isinstance(nsim, numbers.Integral) and nsim > 0):
            raise ValueError("'nsim' must be a positive integer.")
        if not 0 < train_frac < 1:
            raise ValueError("'train_frac' must be between 0 and 1.")
        check_chain_length(n_iter, n_burnin, thin)
        params_to_save = tuple(params_to_save)
        if 'mu_pred' not in params_to_save:
            params_to_save += ('mu_pred', )
        self.nsim = int(nsim)
        self.train_frac = train_frac
        self.n_iter = n_iter
        self.n_burnin = n_burnin
        self.thin = thin
        self.params_to_save = params_to_save
        self.cred_level = cred_level
        self.n_status_update = n_status_update

    def get_info(self):
        return {
            'nsim': self.nsim,
            'train_frac': self.train_frac,
            'n_iter': self.n_iter,
            'n_burnin': self.n_burnin,
            'thin': self.thin,
            'params_to_save': self.params_to_save,
            'cred_level': self.cred_level,
            'n_status_update': self.n_status_update
        }

    @staticmethod
    def create(options):
        """ Accepts None, a dict of keyword arguments, or ExperimentOptions. """
        if isinstance(options, ExperimentOptions):
            return options
        if options is None:
            options = {}
        return ExperimentOptions(**options)


class ComparisonResult():
    """ RMSE of each model over the repetitions and the last GDP fit.

    A failed fit leaves NaN in `rmse` and an entry in `failures`.
    """

    def __init__(self, nsim, options=None):
        self.rmse = {name: np.full(nsim, float('nan')) for name in MODEL_NAMES}
        self.failures = []
        self.last_gdp = None
        self.options = options
        self.runtime = 0.

    def record_failure(self, i_sim, model_name, error):
        self.failures.append({
            'repetition': i_sim,
            'model': model_name,
            'error': type(error).__name__,
            'message': str(error)
        })
        warn("Repetition {:d}: the {:s} fit failed; {:s}: {}".format(
            i_sim, model_name, type(error).__name__, error
        ))

    def to_frame(self):
        frame = pd.DataFrame(self.rmse)
        frame.index.name = 'repetition'
        return frame

    def mean_rmse(self):
        """ Average over the repetitions with a valid score. """
        return self.to_frame().mean(skipna=True)


def split_train_test(n_obs, rand_gen, train_frac=.8):
    """ Draw floor(train_frac * n_obs) training rows without replacement.

    Returns the training and the complementary test indices, both sorted.
    """
    n_train = int(math.floor(train_frac * n_obs))
    if n_train < 1 or n_train >= n_obs:
        raise ValueError(
            "A split of {:d} rows leaves an empty training or test part."
            .format(n_obs)
        )
    train = np.sort(rand_gen.sample_without_replacement(n_obs, n_train))
    test = np.setdiff1d(np.arange(n_obs), train)
    return train, test


def rmse(y, y_pred):
    y = np.asarray(y, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    if y.shape != y_pred.shape:
        raise ValueError("Outcome and prediction have different shapes.")
    return math.sqrt(np.mean((y - y_pred) ** 2))


def fit_ols(y_train, X_train, X_test):
    """ Least squares on the raw covariates; returns test predictions. """
    coef = LinearModel.fit_least_squares(y_train, X_train)
    return LinearModel.predict(coef, X_test)


def fit_lasso(y_train, Z_train, Z_test):
    """ Lasso at the Cp-minimizing path step on standardized covariates. """
    lasso = LassoPath().fit(Z_train, y_train)
    lasso.select_step()
    return lasso.predict(Z_test), lasso


def fit_gdp(y_train, X_train, X_test, rand_gen, options, prior=GDPPrior(),
            scaler=None):
    """ Bayesian GDP fit; the prediction is the posterior mean of mu_pred.

    X_train and X_test are raw covariates; standardization with training
    statistics happens inside `RegressionModel`, reusing `scaler` if it has
    already been fitted to X_train.
    """
    model = RegressionModel(y_train, X_train, standardize=True, scaler=scaler)
    bayes_gdp = BayesGDP(model, prior)
    samples, mcmc_info = bayes_gdp.gibbs(
        options.n_iter, options.n_burnin, options.thin,
        rand_gen=rand_gen, params_to_save=options.params_to_save,
        X_pred=X_test
    )
    y_pred = np.mean(samples['mu_pred'], axis=-1)
    return y_pred, samples, mcmc_info


def run_comparison(y, X, nsim=None, seed=None, rand_gen=None, options=None,
                   prior=GDPPrior()):
    """ Compare OLS, lasso and GDP by held-out RMSE over `nsim` splits.

    Parameters
    ----------
    y : 1-d numpy array
        Non-negative response; the models are fit to sqrt(y).
    X : 2-d numpy array
        Covariates, with categorical ones already encoded as numbers.
    nsim : int, None
        Overrides `options['nsim']` if given.
    seed : int, None
        Seed of the generator shared by the whole run.
    rand_gen : BasicRandom, None
        Generator to use instead of seeding a new one.
    options : None, dict, ExperimentOptions

    Returns
    -------
    result : ComparisonResult
    """
    options = ExperimentOptions.create(options)
    if nsim is not None:
        options = ExperimentOptions(**dict(options.get_info(), nsim=nsim))
    y, X = check_data(y, X)
    if rand_gen is None:
        rand_gen = BasicRandom(seed)

    result = ComparisonResult(options.nsim, options.get_info())
    start_time = time.time()
    for i_sim in range(options.nsim):
        train, test = split_train_test(len(y), rand_gen, options.train_frac)
        y_train, y_test = np.sqrt(y[train]), np.sqrt(y[test])
        X_train, X_test = X[train], X[test]

        scaler = CovariateScaler().fit(X_train)
        Z_train, Z_test = scaler.transform(X_train), scaler.transform(X_test)

        try:
            y_pred = fit_ols(y_train, X_train, X_test)
            result.rmse['ols'][i_sim] = rmse(y_test, y_pred)
        except np.linalg.LinAlgError as error:
            result.record_failure(i_sim, 'ols', error)

        try:
            y_pred, _ = fit_lasso(y_train, Z_train, Z_test)
            result.rmse['lasso'][i_sim] = rmse(y_test, y_pred)
        except (DegenerateCpError, np.linalg.LinAlgError) as error:
            result.record_failure(i_sim, 'lasso', error)

        try:
            y_pred, samples, mcmc_info = fit_gdp(
                y_train, X_train, X_test, rand_gen, options, prior, scaler
            )
            result.rmse['gdp'][i_sim] = rmse(y_test, y_pred)
            result.last_gdp = {
                'repetition': i_sim,
                'samples': samples,
                'mcmc_info': mcmc_info,
                'summary': summarize(
                    samples, cred_level=options.cred_level
                )
            }
        except (SamplerError, np.linalg.LinAlgError) as error:
            result.record_failure(i_sim, 'gdp', error)

        print_progress(options.n_status_update, i_sim + 1, options.nsim,
                       start_time)

    result.runtime = time.time() - start_time
    return result


def check_data(y, X):
    y = np.asarray(y, dtype=np.float64)
    X = np.asarray(X, dtype=np.float64)
    if y.ndim != 1 or X.ndim != 2 or X.shape[0] != len(y):
        raise ValueError(
            "Expected a 1-d response and a 2-d covariate array with the "
            "same number of rows."
        )
    if not (np.all(np.isfinite(y)) and np.all(np.isfinite(X))):
        raise ValueError("The data contain missing or infinite values.")
    if np.any(y < 0):
        raise ValueError(
            "The response must be non-negative for the square-root transform."
        )
    return y, X


def print_progress(n_status_update, n_done, nsim, start_time):
    if n_status_update == 0:
        return
    n_per_update = max(1, int(nsim / min(nsim, n_status_update)))
    if n_done % n_per_update != 0 and n_done != nsim:
        return
    print("{:d} of {:d} repetitions complete: {:.3g} seconds elapsed.".format(
        n_done, nsim, time.time() - start_time
    ))
