import numpy as np
import pytest

from bayesgdp.design_matrix import DenseDesignMatrix, CovariateScaler
from bayesgdp.model import RegressionModel
from .helper import simulate_data

atol = 10e-10
rtol = 10e-10


def test_training_columns_are_standardized():
    _, X, _ = simulate_data(n_obs=50, seed=0)
    X = 3. * X + 7.
    Z = CovariateScaler().fit_transform(X)
    assert np.allclose(Z.mean(axis=0), 0., atol=atol)
    assert np.allclose(Z.std(axis=0, ddof=1), 1., atol=atol, rtol=rtol)


def test_test_rows_use_training_statistics_only():
    _, X, _ = simulate_data(n_obs=60, seed=1)
    X_train, X_test = X[:40], X[40:] + 100.
    scaler = CovariateScaler().fit(X_train)
    Z_test = scaler.transform(X_test)
    expected = (X_test - X_train.mean(axis=0)) / X_train.std(axis=0, ddof=1)
    assert np.allclose(Z_test, expected, atol=atol, rtol=rtol)
    # Refitting on the shifted rows would have changed the map.
    assert not np.allclose(
        Z_test, CovariateScaler().fit_transform(X_test), atol=1e-3
    )


def test_zero_variance_column_is_only_centered():
    X = np.column_stack((np.arange(10.), 5. * np.ones(10)))
    with pytest.warns(UserWarning, match='no variation'):
        scaler = CovariateScaler().fit(X)
    Z = scaler.transform(X)
    assert np.all(np.isfinite(Z))
    assert scaler.scale[1] == 1.
    assert scaler.center[1] == 5.
    assert np.all(Z[:, 1] == 0.)
    assert list(scaler.zero_variance) == [False, True]


def test_transform_before_fit_raises():
    with pytest.raises(ValueError):
        CovariateScaler().transform(np.ones((3, 2)))


def test_coef_rescaling_round_trip():
    np.random.seed(2)
    X = np.random.randn(30, 4) * np.array([1., 10., .1, 3.]) + 2.
    scaler = CovariateScaler().fit(X)
    n_draw = 7
    beta = np.random.randn(4, n_draw)
    alpha = np.random.randn(n_draw)

    beta_orig, beta0 = scaler.unscale_coef(beta, alpha)
    assert beta0.shape == (n_draw, )
    assert np.allclose(beta_orig * scaler.scale[:, np.newaxis], beta)

    # Both parametrizations give the same linear predictor.
    k = 3
    assert np.allclose(
        beta0[k] + X.dot(beta_orig[:, k]),
        alpha[k] + scaler.transform(X).dot(beta[:, k])
    )

    beta_back, alpha_back = scaler.rescale_coef(beta_orig, beta0)
    assert np.allclose(beta_back, beta)
    assert np.allclose(alpha_back, alpha)


def test_dense_design_intercept_and_products():
    _, X, _ = simulate_data(n_obs=20, n_pred=3, seed=3)
    design = DenseDesignMatrix(X, add_intercept=True)
    X_ndarray = np.hstack((np.ones((20, 1)), X))
    w, v = (np.random.randn(size) for size in design.shape)
    assert design.shape == (20, 4)
    assert design.n_covariate == 3
    assert np.allclose(design.dot(v), X_ndarray.dot(v))
    assert np.allclose(design.Tdot(w), X_ndarray.T.dot(w))

    weight = np.random.exponential(size=20)
    gram = X_ndarray.T.dot(weight[:, np.newaxis] * X_ndarray)
    assert np.allclose(design.weighted_gram(weight), gram)
    assert np.allclose(design.weighted_gram(2.), 2 * X_ndarray.T.dot(X_ndarray))
    assert np.all(design.covariates() == X)


def test_design_maps_held_out_rows_with_its_scaler():
    _, X, _ = simulate_data(n_obs=30, n_pred=3, seed=4)
    scaler = CovariateScaler()
    design = DenseDesignMatrix(scaler.fit_transform(X[:20]), scaler=scaler)
    assert np.allclose(design.map_covariates(X[20:]), scaler.transform(X[20:]))
    with pytest.raises(ValueError):
        design.map_covariates(X[20:, :2])

    beta, alpha = np.array([1., -.5, .8]), 2.
    beta_orig, beta0 = design.unscale_coef(beta, alpha)
    assert np.allclose(
        beta0 + X.dot(beta_orig), alpha + scaler.transform(X).dot(beta)
    )

    unscaled = DenseDesignMatrix(X)
    assert np.all(unscaled.map_covariates(X) == X)
    beta_same, alpha_same = unscaled.unscale_coef(beta, alpha)
    assert beta_same is beta and alpha_same == alpha


def test_design_rejects_missing_values():
    X = np.ones((4, 2))
    X[1, 1] = np.nan
    with pytest.raises(ValueError):
        DenseDesignMatrix(X)


def test_regression_model_reuses_fitted_scaler():
    y, X, _ = simulate_data(n_obs=30, n_pred=3, seed=5)
    scaler = CovariateScaler().fit(X)
    model = RegressionModel(y, X, scaler=scaler)
    assert model.design.scaler is scaler
    assert np.allclose(model.design.covariates(), scaler.transform(X))
    with pytest.raises(ValueError):
        RegressionModel(y, X, scaler=CovariateScaler())
    assert RegressionModel(y, X, standardize=False).design.scaler is None
