import numpy as np
import scipy as sp
import scipy.linalg


def draw_conditional_coef(design, obs_prec, prior_prec, z, rand_gen=None):
    """
    Draw (alpha, beta) from the Gaussian with precision
        Prec = X' diag(obs_prec) X + diag(prior_prec)
    and mean Prec^{-1} z, where X is the `design` matrix.

    The Cholesky factor is taken of D Prec D with D = diag(Prec)^{-1/2};
    prior precisions of the intercept and of heavily shrunk coefficients
    differ by many orders of magnitude.

    Parameters
    ----------
    obs_prec : float, 1-d numpy array
    prior_prec : 1-d numpy array
        Intercept first.
    rand_gen : BasicRandom, None
        Uses the global numpy generator if None.
    """
    precond_scale, chol = factorize_precond_prec(design, obs_prec, prior_prec)
    if rand_gen is None:
        std_normal = np.random.randn(len(precond_scale))
    else:
        std_normal = rand_gen.np_random.randn(len(precond_scale))
    precond_draw = sp.linalg.cho_solve((chol, False), precond_scale * z) \
        + sp.linalg.solve_triangular(chol, std_normal, lower=False)
    return precond_scale * precond_draw


def compute_conditional_mean(design, obs_prec, prior_prec, z):
    precond_scale, chol = factorize_precond_prec(design, obs_prec, prior_prec)
    return precond_scale * sp.linalg.cho_solve((chol, False), precond_scale * z)


def factorize_precond_prec(design, obs_prec, prior_prec):
    """ Returns D and the upper Cholesky factor of D Prec D. """
    Prec = design.weighted_gram(obs_prec) + np.diag(prior_prec)
    precond_scale = 1 / np.sqrt(np.diag(Prec))
    Prec_precond = \
        precond_scale[:, np.newaxis] * Prec * precond_scale[np.newaxis, :]
    chol = sp.linalg.cholesky(Prec_precond, lower=False)
    return precond_scale, chol
