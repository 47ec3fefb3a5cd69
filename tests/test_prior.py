import math
import numpy as np
import pytest

from bayesgdp import GDPPrior


def test_clone():

    kwargs = {
        'obs_prec_shape': .01,
        'obs_prec_rate': .02,
        'intercept_prec': 1e-4,
        'lambda_shape': 2.,
        'lambda_rate': .5,
        'shrink_factor': 3.
    }
    prior = GDPPrior(**kwargs)

    changed_kw = {'lambda_shape': 1.5, 'shrink_factor': None}
    kwargs_alt = kwargs.copy()
    kwargs_alt.update(changed_kw)
    cloned = prior.clone(**changed_kw)
    assert cloned.__dict__ == GDPPrior(**kwargs_alt).__dict__
    assert prior.lambda_shape == 2.

    with pytest.warns(UserWarning):
        prior.clone(tau_rate=.5)


def test_invalid_hyper_param():
    with pytest.raises(ValueError):
        GDPPrior(lambda_rate=0.)
    with pytest.raises(ValueError):
        GDPPrior(shrink_factor=-1.)


def test_default_shrink_factor():
    assert GDPPrior().compute_shrink_factor(101) == math.sqrt(100)
    assert GDPPrior(shrink_factor=2.).compute_shrink_factor(101) == 2.
    with pytest.raises(ValueError):
        GDPPrior().compute_shrink_factor(1)


def test_gdp_graph_structure():
    n_obs, n_pred, n_pred_obs = 80, 3, 20
    graph = GDPPrior().build_graph(n_obs, n_pred, n_pred_obs)

    assert graph['phi'].kind == 'gamma'
    assert graph['phi'].params == {'shape': 1e-6, 'rate': 1e-6}
    assert graph['alpha'].params == {'mean': 0., 'precision': 1e-10}
    assert graph['lambda'].params == {'shape': 1., 'rate': 1.}
    assert graph['tau'].kind == 'exponential'
    assert graph['tau'].parents == ('tau_rate', )
    assert graph.parents_of('tau_rate') == ('lambda', )
    assert graph['beta_prec'].params['shrink_factor'] == math.sqrt(n_obs - 1)
    assert set(graph.parents_of('beta_prec')) == {'phi', 'tau'}
    assert graph['beta'].shape == (n_pred, )
    assert graph.stochastic_nodes(observed=True) == ['y']
    assert set(graph.parents_of('y')) == {'mu', 'phi'}
    assert graph['mu_pred'].shape == (n_pred_obs, )
    assert set(graph.parents_of('mu_pred')) == {'X_pred', 'beta', 'alpha'}
    assert set(graph.parents_of('beta0')) == {'alpha', 'beta_orig', 'center'}

    # Held-out responses are not part of the model.
    assert 'y_pred' not in graph
    assert 'mu' in graph.parents_of('y')
    assert 'X_pred' not in graph.parents_of('y')


def test_graph_without_held_out_rows():
    graph = GDPPrior().build_graph(50, 2)
    assert 'mu_pred' not in graph
    assert 'X_pred' not in graph
