import numpy as np
import pytest

from bayesgdp import BayesGDP, RegressionModel, GDPPrior, SamplerError
from bayesgdp.model import Node
from bayesgdp.random import BasicRandom
from bayesgdp.gibbs_util import check_samples
from bayesgdp.util.mcmc_summarizer import credible_interval
from .helper import simulate_data


def set_up_sampler(seed=0, n_obs=100, n_pred=3, **kwargs):
    y, X, beta = simulate_data(n_obs, n_pred, seed=seed, **kwargs)
    model = RegressionModel(y, X)
    return BayesGDP(model), X, beta


def test_posterior_recovers_coefficients():
    bayes_gdp, X, beta = set_up_sampler(seed=0, noise_sd=.3, intercept=2.)
    samples, mcmc_info = bayes_gdp.gibbs(
        n_iter=1500, n_burnin=500, seed=0, params_to_save='all'
    )
    assert samples['beta_orig'].shape == (3, 1000)
    assert samples['tau'].shape == (3, 1000)
    assert samples['phi'].shape == (1000, )
    assert np.allclose(np.mean(samples['beta_orig'], axis=-1), beta, atol=.1)
    assert abs(np.mean(samples['beta0']) - 2.) < .1
    assert abs(np.mean(samples['sigma']) - .3) < .06
    assert np.all(samples['tau'] > 0)
    assert np.all(samples['lambda'] > 0)
    assert 'mu_pred' not in samples
    assert mcmc_info['n_pred_obs'] == 0
    assert mcmc_info['degenerate_params'] == []


def test_deterministic_nodes_follow_draws():
    bayes_gdp, X, beta = set_up_sampler(seed=1)
    X_pred = np.random.randn(7, 3)
    samples, _ = bayes_gdp.gibbs(
        n_iter=50, seed=1, X_pred=X_pred,
        params_to_save=('beta', 'alpha', 'phi', 'sigma',
                        'beta_orig', 'beta0', 'mu_pred')
    )
    scaler = bayes_gdp.model.design.scaler
    Z_pred = scaler.transform(X_pred)
    k = 17
    assert np.allclose(
        samples['mu_pred'][:, k],
        samples['alpha'][k] + Z_pred.dot(samples['beta'][:, k])
    )
    # The same prediction from the coefficients on the raw scale.
    assert np.allclose(
        samples['mu_pred'][:, k],
        samples['beta0'][k] + X_pred.dot(samples['beta_orig'][:, k])
    )
    assert np.allclose(
        samples['beta_orig'] * scaler.scale[:, np.newaxis], samples['beta']
    )
    assert np.allclose(samples['sigma'], samples['phi'] ** -.5)


def test_thinning_and_burnin():
    bayes_gdp, _, _ = set_up_sampler(seed=2)
    samples, mcmc_info = bayes_gdp.gibbs(
        n_iter=100, n_burnin=40, thin=3, seed=0, params_to_save=('beta', 'logp')
    )
    assert samples['beta'].shape == (3, 20)
    assert samples['logp'].shape == (20, )
    with pytest.raises(ValueError):
        bayes_gdp.gibbs(n_iter=10, n_burnin=10)


@pytest.mark.parametrize('thin', [0, -1, 1.5, 11])
def test_thinning_that_keeps_no_draw_is_rejected(thin):
    bayes_gdp, _, _ = set_up_sampler(seed=2)
    with pytest.raises(ValueError):
        bayes_gdp.gibbs(n_iter=30, n_burnin=20, thin=thin, seed=0)
    samples, _ = bayes_gdp.gibbs(
        n_iter=30, n_burnin=20, thin=np.int64(10), seed=0
    )
    assert samples['beta'].shape == (3, 1)


def test_seed_reproducibility():
    bayes_gdp, _, _ = set_up_sampler(seed=3)
    samples_1, _ = bayes_gdp.gibbs(n_iter=30, seed=11)
    samples_2, _ = bayes_gdp.gibbs(n_iter=30, seed=11)
    samples_3, _ = bayes_gdp.gibbs(n_iter=30, seed=12)
    assert np.all(samples_1['beta'] == samples_2['beta'])
    assert not np.allclose(samples_1['beta'], samples_3['beta'])


def test_shared_generator_advances():
    bayes_gdp, _, _ = set_up_sampler(seed=4)
    rg = BasicRandom(seed=5)
    samples_1, _ = bayes_gdp.gibbs(n_iter=20, rand_gen=rg)
    samples_2, _ = bayes_gdp.gibbs(n_iter=20, rand_gen=rg)
    assert not np.allclose(samples_1['beta'], samples_2['beta'])

    rg = BasicRandom(seed=5)
    samples_1_again, _ = bayes_gdp.gibbs(n_iter=20, rand_gen=rg)
    assert np.all(samples_1['beta'] == samples_1_again['beta'])


def test_resumed_chain_matches_uninterrupted_run():
    bayes_gdp, X, _ = set_up_sampler(seed=5)
    X_pred = X[:5] + 1.
    n_iter = 40
    samples, _ = bayes_gdp.gibbs(n_iter=n_iter, seed=0, X_pred=X_pred)

    first_half, mcmc_info = bayes_gdp.gibbs(
        n_iter=n_iter // 2, seed=0, X_pred=X_pred
    )
    resumed = BayesGDP(bayes_gdp.model)
    merged, merged_info = resumed.gibbs_additional_iter(
        mcmc_info, n_iter // 2, X_pred=X_pred,
        merge=True, prev_samples=first_half
    )
    assert merged_info['n_iter'] == n_iter
    for key in samples:
        assert np.allclose(samples[key], merged[key], rtol=1e-10)

    with pytest.raises(ValueError):
        resumed.gibbs_additional_iter(mcmc_info, 5, merge=True)


def test_invalid_params_to_save():
    bayes_gdp, _, _ = set_up_sampler(seed=6)
    with pytest.raises(ValueError):
        bayes_gdp.gibbs(n_iter=5, params_to_save=('beta', 'y'))


def test_unsupported_graph_is_rejected():

    class HorseshoeLikePrior(GDPPrior):
        def build_graph(self, n_obs, n_pred, n_pred_obs=0):
            graph = super().build_graph(n_obs, n_pred, n_pred_obs)
            graph.nodes['tau'] = Node(
                'gamma', {'shape': .5, 'rate': 'tau_rate'}, shape=(n_pred, )
            )
            return graph

    y, X, _ = simulate_data(seed=7)
    bayes_gdp = BayesGDP(RegressionModel(y, X), HorseshoeLikePrior())
    with pytest.raises(NotImplementedError):
        bayes_gdp.gibbs(n_iter=5)


def test_model_without_intercept_is_rejected():
    y, X, _ = simulate_data(seed=8)
    with pytest.raises(ValueError):
        BayesGDP(RegressionModel(y, X, add_intercept=False))


def test_non_finite_draws_raise_sampler_error():
    y, X, _ = simulate_data(seed=9)
    model = RegressionModel(y, X)
    bayes_gdp = BayesGDP(model, GDPPrior(shrink_factor=1e300))
    with pytest.raises(SamplerError):
        bayes_gdp.gibbs(n_iter=20, seed=0, init={'phi': 1e10})


def test_check_samples():
    with pytest.raises(SamplerError):
        check_samples({'beta': np.array([[1., np.nan, 2.]])})
    with pytest.warns(UserWarning, match='zero variance'):
        degenerate, low_ess = check_samples({
            'phi': np.array([1., 2., 3.]), 'lambda': np.ones(3)
        })
    assert degenerate == ['lambda']
    assert low_ess == []


def test_check_samples_flags_poorly_mixing_chain():
    np.random.seed(3)
    n_draw = 1000
    sticky = np.zeros(n_draw)
    for i in range(1, n_draw):
        sticky[i] = .999 * sticky[i - 1] + np.random.randn()
    samples = {
        'alpha': np.random.randn(n_draw),
        'beta': np.vstack((np.random.randn(n_draw), sticky)),
    }
    with pytest.warns(UserWarning, match='Effective sample size of beta'):
        degenerate, low_ess = check_samples(samples, min_ess=10.)
    assert degenerate == []
    assert low_ess == ['beta']


def test_mcmc_info_reports_low_ess_params():
    bayes_gdp, _, _ = set_up_sampler(seed=4)
    _, mcmc_info = bayes_gdp.gibbs(
        n_iter=300, n_burnin=100, seed=0, options={'min_ess': 0.}
    )
    assert mcmc_info['low_ess_params'] == []
    assert mcmc_info['options']['min_ess'] == 0.

    with pytest.warns(UserWarning, match='Effective sample size'):
        _, mcmc_info = bayes_gdp.gibbs(
            n_iter=300, n_burnin=100, seed=0, options={'min_ess': 1e6}
        )
    assert set(mcmc_info['low_ess_params']) == set(mcmc_info['saved_params'])


def test_credible_interval_calibration():
    """ 95% intervals of nonzero coefficients cover the truth >= 90% of trials. """
    n_trial = 30
    is_covered = []
    for trial in range(n_trial):
        y, X, beta = simulate_data(
            n_obs=100, n_pred=3, noise_sd=.5, intercept=1., seed=100 + trial
        )
        bayes_gdp = BayesGDP(RegressionModel(y, X))
        samples, _ = bayes_gdp.gibbs(
            n_iter=1500, n_burnin=500, seed=trial,
            params_to_save=('beta_orig', )
        )
        lower, upper = credible_interval(samples['beta_orig'], .95)
        is_covered.append((lower <= beta) & (beta <= upper))
    assert np.mean(is_covered) >= .9
