import math
import numpy as np


def effective_sample_size(draws):
    """ Autocorrelation-based effective sample size of each chain.

    Uses Geyer's initial monotone sequence estimator of the integrated
    autocorrelation time, with autocovariances computed by FFT.

    Parameters
    ----------
    draws : numpy array
        MCMC iterations along the last axis.

    Returns
    -------
    ess : numpy array of shape draws.shape[:-1]
        NaN for chains without variation or with fewer than 4 draws.
    """
    draws = np.asarray(draws, dtype=np.float64)
    batch_shape = draws.shape[:-1]
    n_draw = draws.shape[-1]
    chains = draws.reshape((-1, n_draw))
    ess = np.full(chains.shape[0], float('nan'))
    if n_draw < 4:
        return ess.reshape(batch_shape)

    centered = chains - np.mean(chains, axis=-1, keepdims=True)
    n_fft = 2 ** int(math.ceil(math.log2(2 * n_draw)))
    freq = np.fft.rfft(centered, n_fft, axis=-1)
    autocov = np.fft.irfft(freq * np.conj(freq), n_fft, axis=-1)[:, :n_draw]

    n_pair = n_draw // 2
    for i, acov in enumerate(autocov):
        if not acov[0] > 0:
            continue
        rho = acov / acov[0]
        pair_sum = rho[0:2 * n_pair:2] + rho[1:2 * n_pair:2]
        non_positive = np.flatnonzero(pair_sum <= 0)
        n_positive = non_positive[0] if len(non_positive) > 0 else n_pair
        pair_sum = np.minimum.accumulate(pair_sum[:n_positive])
        autocorr_time = max(-1 + 2 * np.sum(pair_sum), 1 / math.log10(n_draw))
        ess[i] = n_draw / autocorr_time

    return ess.reshape(batch_shape)
