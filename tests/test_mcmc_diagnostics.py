import numpy as np

from bayesgdp.util.mcmc_diagnostics import effective_sample_size


def simulate_ar1(coef, n_draw, seed=0):
    np.random.seed(seed)
    x = np.zeros(n_draw)
    x[0] = np.random.randn() / np.sqrt(1 - coef ** 2)
    for i in range(1, n_draw):
        x[i] = coef * x[i - 1] + np.random.randn()
    return x


def test_ess_of_independent_draws_is_close_to_chain_length():
    np.random.seed(0)
    ess = effective_sample_size(np.random.randn(3, 4000))
    assert ess.shape == (3, )
    assert np.all(np.abs(ess / 4000 - 1) < .2)


def test_ess_of_autocorrelated_chain():
    coef, n_draw = .9, 20000
    ess = effective_sample_size(simulate_ar1(coef, n_draw))
    expected = n_draw * (1 - coef) / (1 + coef)
    assert ess.shape == ()
    assert abs(ess / expected - 1) < .3


def test_ess_is_undefined_for_constant_or_short_chains():
    ess = effective_sample_size(np.vstack((np.ones(50), np.arange(50.))))
    assert np.isnan(ess[0])
    assert np.isfinite(ess[1])
    assert np.all(np.isnan(effective_sample_size(np.random.randn(2, 3))))
