import math
import numpy as np
import pandas as pd
import scipy as sp
import scipy.stats
import matplotlib.pyplot as plt
from matplotlib.ticker import MaxNLocator
from .mcmc_diagnostics import effective_sample_size


def hpd_interval(draws, prob=.95):
    """ Narrowest interval containing a fraction `prob` of the draws.

    Parameters
    ----------
    draws : numpy array
        MCMC iterations along the last axis.

    Returns
    -------
    lower, upper : numpy arrays of shape draws.shape[:-1]
    """
    if not 0 < prob < 1:
        raise ValueError("Probability must be between 0 and 1.")
    if np.shape(draws)[-1] == 0:
        raise ValueError("No draws to compute the interval from.")
    sorted_draws = np.sort(draws, axis=-1)
    n_draw = sorted_draws.shape[-1]
    n_in_interval = max(1, int(math.ceil(prob * n_draw)))
    if n_in_interval >= n_draw:
        return sorted_draws[..., 0], sorted_draws[..., -1]
    width = sorted_draws[..., n_in_interval - 1:] \
        - sorted_draws[..., :n_draw - n_in_interval + 1]
    start = np.argmin(width, axis=-1)
    lower = np.take_along_axis(
        sorted_draws, start[..., np.newaxis], axis=-1
    )[..., 0]
    upper = np.take_along_axis(
        sorted_draws, (start + n_in_interval - 1)[..., np.newaxis], axis=-1
    )[..., 0]
    return lower, upper


def credible_interval(draws, prob=.95):
    """ Equal-tailed interval from the posterior quantiles. """
    tail_prob = (1 - prob) / 2
    lower, upper = [
        np.quantile(draws, q, axis=-1) for q in [tail_prob, 1 - tail_prob]
    ]
    return lower, upper


def summarize(samples, names=None, cred_level=.95,
              quantiles=(.025, .25, .5, .75, .975)):
    """ Tabulate posterior summaries, one row per scalar quantity.

    Vector-valued parameters are expanded into rows 'name[j]'. The `ess`
    column is the autocorrelation-based effective sample size.
    """
    if names is None:
        names = list(samples.keys())
    rows = []
    index = []
    for name in names:
        draws = np.atleast_2d(samples[name])
        hpd_lower, hpd_upper = hpd_interval(draws, cred_level)
        quantile_val = np.quantile(draws, quantiles, axis=-1)
        ess = effective_sample_size(draws)
        for j in range(draws.shape[0]):
            row = {
                'mean': np.mean(draws[j]),
                'sd': np.std(draws[j], ddof=1) if draws.shape[1] > 1 else float('nan'),
            }
            for q, val in zip(quantiles, quantile_val[:, j]):
                row['{:g}%'.format(100 * q)] = val
            row['hpd_lower'] = hpd_lower[j]
            row['hpd_upper'] = hpd_upper[j]
            row['ess'] = ess[j]
            rows.append(row)
            index.append(
                name if np.ndim(samples[name]) == 1
                else '{:s}[{:d}]'.format(name, j)
            )
    return pd.DataFrame(rows, index=index)


def plot_rmse_boxplot(rmse, ax=None):
    """ Compare RMSE across models; missing (NaN) entries are left out.

    Parameters
    ----------
    rmse : dict
        Model name -> array of RMSE over repetitions.
    """
    if ax is None:
        ax = plt.gca()
    labels = list(rmse.keys())
    values = [np.asarray(rmse[key])[~np.isnan(rmse[key])] for key in labels]
    ax.boxplot(values)
    ax.set_xticks(np.arange(1, len(labels) + 1))
    ax.set_xticklabels(labels)
    ax.set_ylabel('RMSE')
    return ax


def plot_posterior_hist(draws, label=None, bins=30, ax=None):
    if ax is None:
        ax = plt.gca()
    ax.hist(np.ravel(draws), bins=bins, density=True, color='tab:blue', alpha=.6)
    if label is not None:
        ax.set_xlabel(label)
    ax.set_ylabel('Density')
    return ax


def plot_posterior_density(draws, label=None, n_grid=200, ax=None):
    """ Kernel density estimate of the draws of a scalar quantity. """
    if ax is None:
        ax = plt.gca()
    draws = np.ravel(draws)
    kde = sp.stats.gaussian_kde(draws)
    grid = np.linspace(np.min(draws), np.max(draws), n_grid)
    ax.plot(grid, kde(grid), color='tab:blue', label=label)
    if label is not None:
        ax.set_xlabel(label)
    ax.set_ylabel('Density')
    return ax


def plot_conf_interval(
        coef_samples, conf_level=.95, n_coef_to_plot=None,
        sort_by_median_val=False, marker_scale=1.0, use_hpd=False, ax=None
    ):
    if ax is None:
        ax = plt.gca()
    if use_hpd:
        lower, upper = hpd_interval(coef_samples, conf_level)
    else:
        lower, upper = credible_interval(coef_samples, conf_level)
    median = np.quantile(coef_samples, .5, axis=-1)

    if sort_by_median_val:
        sort_ind = np.argsort(median)
    else:
        sort_ind = np.arange(len(median))  # No sorting

    if n_coef_to_plot is None:
        n_coef_to_plot = len(median)
    coef_index = sort_ind[:n_coef_to_plot]

    ax.plot(
        coef_index, median[coef_index],
        'x', color='tab:blue', ms=marker_scale * 10,
        label='Posterior median'
    )
    ax.plot(
        coef_index, lower[coef_index],
        '_', color='tab:green', ms=marker_scale * 12, lw=marker_scale * 1.2,
        label='{:.1f}% {:s} interval'.format(
            100 * conf_level, 'HPD' if use_hpd else 'credible'
        )
    )
    ax.plot(
        coef_index, upper[coef_index],
        '_', color='tab:green', ms=marker_scale * 12, lw=marker_scale * 1.2
    )
    ax.get_xaxis().set_major_locator(MaxNLocator(integer=True))

    plotted_quantity = {
        'lower': lower[coef_index],
        'median': median[coef_index],
        'upper': upper[coef_index],
        'coef_index': coef_index
    }
    return plotted_quantity
