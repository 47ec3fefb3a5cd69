import numbers
import time
from warnings import warn
import numpy as np
from .util.mcmc_diagnostics import effective_sample_size


class SamplerError(RuntimeError):
    """ The Markov chain produced unusable draws. """
    pass


class SamplerOptions():

    def __init__(self, lambda_update='sample', n_slice_update=1, min_ess=10.):
        """
        Parameters
        ----------
        lambda_update : str, {'sample', None}
            If None, the shrinkage hyper-parameter stays at its initial value.
        n_slice_update : int
            Number of slice sampling steps for lambda per Gibbs iteration.
        min_ess : float
            Saved parameters with a lower effective sample size are reported
            in `mcmc_info['low_ess_params']` with a warning.
        """
        if lambda_update not in ('sample', None):
            raise ValueError("Unsupported update for the shrinkage parameter.")
        if not (isinstance(n_slice_update, numbers.Integral) and n_slice_update > 0):
            raise ValueError("'n_slice_update' must be a positive integer.")
        if not min_ess >= 0:
            raise ValueError("'min_ess' must be non-negative.")
        self.lambda_update = lambda_update
        self.n_slice_update = int(n_slice_update)
        self.min_ess = min_ess

    def get_info(self):
        return {
            'lambda_update': self.lambda_update,
            'n_slice_update': self.n_slice_update,
            'min_ess': self.min_ess
        }

    @staticmethod
    def create(options):
        """ Accepts None, a dict of keyword arguments, or SamplerOptions. """
        if isinstance(options, SamplerOptions):
            return options
        if options is None:
            options = {}
        return SamplerOptions(**options)


def check_chain_length(n_iter, n_burnin, thin):
    """ Raise ValueError unless at least one post burn-in draw is saved. """
    if not (isinstance(thin, numbers.Integral) and thin >= 1):
        raise ValueError("'thin' must be a positive integer.")
    if n_burnin >= n_iter:
        raise ValueError("No iteration is left after the burn-in.")
    if (n_iter - n_burnin) // thin == 0:
        raise ValueError(
            "Thinning by {:d} keeps no draw of the {:d} post burn-in "
            "iterations.".format(thin, n_iter - n_burnin)
        )


class MarkovChainManager():
    """ Storage of the thinned post burn-in draws and progress reporting. """

    scalar_params = ('alpha', 'phi', 'sigma', 'lambda', 'beta0', 'logp')

    def __init__(self, n_pred):
        self.n_pred = n_pred
        self._last_report_time = None

    def get_param_dim(self, name, n_pred_obs):
        if name in self.scalar_params:
            return None
        elif name in ('beta', 'tau', 'beta_orig'):
            return self.n_pred
        elif name == 'mu_pred':
            return n_pred_obs
        raise ValueError("Unknown parameter '{:s}'.".format(name))

    def merge_outputs(self, prev_samples, prev_mcmc_info, new_samples, new_mcmc_info):
        """ Append the draws of a resumed run to those of the previous one. """
        merged_samples = {}
        for name, draws in new_samples.items():
            merged_samples[name] = np.concatenate(
                (prev_samples[name], draws), axis=-1
            )
        merged_info = dict(new_mcmc_info)
        for key in ('n_iter', 'runtime'):
            merged_info[key] = prev_mcmc_info[key] + new_mcmc_info[key]
        for key in ('init', 'n_burnin', 'seed'):
            merged_info[key] = prev_mcmc_info[key]
        return merged_samples, merged_info

    def pre_allocate(self, samples, n_post_burnin, thin, params_to_save, n_pred_obs):
        n_sample = n_post_burnin // thin
        for name in params_to_save:
            dim = self.get_param_dim(name, n_pred_obs)
            shape = (n_sample, ) if dim is None else (dim, n_sample)
            samples[name] = np.zeros(shape)

    def is_saved_iter(self, mcmc_iter, n_burnin, thin):
        return mcmc_iter > n_burnin and (mcmc_iter - n_burnin) % thin == 0

    def store_current_state(
            self, samples, mcmc_iter, n_burnin, thin, state, params_to_save):
        """
        Parameters
        ----------
        state : dict
            Current values of (at least) the saved parameters.
        """
        if not self.is_saved_iter(mcmc_iter, n_burnin, thin):
            return
        index = (mcmc_iter - n_burnin) // thin - 1
        for name in params_to_save:
            samples[name][..., index] = state[name]

    def pack_parameters(self, coef, obs_prec, tau, lam):
        return {
            'alpha': coef[0],
            'beta': coef[1:],
            'phi': obs_prec,
            'tau': tau,
            'lambda': lam,
        }

    def stamp_time(self, curr_time):
        self._last_report_time = curr_time

    def print_status(self, n_status_update, mcmc_iter, n_iter):
        if n_status_update == 0:
            return
        if mcmc_iter % max(1, n_iter // n_status_update) != 0:
            return
        now = time.time()
        print(
            "{:d} of {:d} Gibbs iterations complete: {:.3g} seconds since "
            "the last update.".format(mcmc_iter, n_iter, now - self._last_report_time)
        )
        self._last_report_time = now


def check_samples(samples, min_ess=10.):
    """ Raise SamplerError on non-finite draws; warn on constant or poorly
    mixing chains.

    Parameters
    ----------
    min_ess : float
        Parameters with a component of lower effective sample size are
        reported as not having converged.

    Returns
    -------
    degenerate : list of str
        Parameters whose draws did not vary.
    low_ess : list of str
        Parameters with an effective sample size below `min_ess`.
    """
    non_finite = [
        name for name, draws in samples.items()
        if not np.all(np.isfinite(draws))
    ]
    if non_finite:
        raise SamplerError(
            "Non-finite posterior draws of {:s}.".format(', '.join(non_finite))
        )
    degenerate = []
    low_ess = []
    for name, draws in samples.items():
        if draws.shape[-1] < 2:
            continue
        if np.any(np.ptp(np.atleast_2d(draws), axis=-1) == 0):
            degenerate.append(name)
        ess = effective_sample_size(draws)
        if np.any(ess[~np.isnan(ess)] < min_ess):
            low_ess.append(name)
    if degenerate:
        warn(
            "Posterior draws of {:s} have zero variance; the chain may not "
            "have moved.".format(', '.join(degenerate))
        )
    if low_ess:
        warn(
            "Effective sample size of {:s} is below {:g}; the chain may not "
            "have converged.".format(', '.join(low_ess), min_ess)
        )
    return degenerate, low_ess
