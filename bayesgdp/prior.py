import math
from warnings import warn
from .model.graph import ModelGraph, Node


class GDPPrior():

    def __init__(
            self,
            obs_prec_shape=1e-6,
            obs_prec_rate=1e-6,
            intercept_prec=1e-10,
            lambda_shape=1.,
            lambda_rate=1.,
            shrink_factor=None
        ):
        """ Encapsulate prior information for BayesGDP.

        The Generalized Double Pareto prior arises from the hierarchy
            beta_j | phi, tau_j ~ Normal(0, precision=c * phi / tau_j),
            tau_j | lambda ~ Exponential(rate=lambda^2 / 2),
            lambda ~ Gamma(lambda_shape, lambda_rate),
        with phi the observation precision and c the shrinkage factor.

        Parameters
        ----------
        obs_prec_shape, obs_prec_rate : float
            Gamma prior on the observation precision phi. The defaults
            approximate the reference prior 1 / phi.
        intercept_prec : float
            Precision of the Gaussian prior on the intercept; the default is
            nearly flat.
        lambda_shape, lambda_rate : float
            Gamma prior on the shared shrinkage hyper-parameter lambda.
        shrink_factor : float, None
            Multiplier c of the coefficient prior precision. If None,
            sqrt(n_obs - 1) is used, with n_obs the number of training
            observations.
        """
        for name, val in [
                ('obs_prec_shape', obs_prec_shape),
                ('obs_prec_rate', obs_prec_rate),
                ('intercept_prec', intercept_prec),
                ('lambda_shape', lambda_shape),
                ('lambda_rate', lambda_rate)]:
            if not val > 0:
                raise ValueError("'{:s}' must be positive.".format(name))
        if shrink_factor is not None and not shrink_factor > 0:
            raise ValueError("'shrink_factor' must be positive.")

        self.obs_prec_shape = obs_prec_shape
        self.obs_prec_rate = obs_prec_rate
        self.intercept_prec = intercept_prec
        self.lambda_shape = lambda_shape
        self.lambda_rate = lambda_rate
        self.shrink_factor = shrink_factor

    def get_info(self):
        info = {
            'obs_prec_shape': self.obs_prec_shape,
            'obs_prec_rate': self.obs_prec_rate,
            'intercept_prec': self.intercept_prec,
            'lambda_shape': self.lambda_shape,
            'lambda_rate': self.lambda_rate,
            'shrink_factor': self.shrink_factor
        }
        return info

    def clone(self, **kwargs):
        """ Make a clone with only specified attributes modified. """
        info = self.get_info()
        for key in kwargs.keys():
            if key in info:
                info[key] = kwargs[key]
            else:
                warn("'{:s}' is not a valid keyword argument.".format(key))
        return GDPPrior(**info)

    def compute_shrink_factor(self, n_obs):
        if self.shrink_factor is not None:
            return self.shrink_factor
        if n_obs < 2:
            raise ValueError("The default shrinkage factor needs n_obs > 1.")
        return math.sqrt(n_obs - 1)

    def build_graph(self, n_obs, n_pred, n_pred_obs=0):
        """ Describe the GDP linear regression as a model graph.

        Parameters
        ----------
        n_obs : int
            Number of training observations.
        n_pred : int
            Number of covariates, excluding the intercept.
        n_pred_obs : int
            Number of held-out rows whose mean response is tracked through
            the deterministic node 'mu_pred'. Their responses are not part
            of the graph.
        """
        shrink_factor = self.compute_shrink_factor(n_obs)
        graph = ModelGraph()
        graph.add('X', Node('data', shape=(n_obs, n_pred)))
        graph.add('center', Node('data', shape=(n_pred, )))
        graph.add('scale', Node('data', shape=(n_pred, )))
        if n_pred_obs > 0:
            graph.add('X_pred', Node('data', shape=(n_pred_obs, n_pred)))

        graph.add('phi', Node(
            'gamma', {'shape': self.obs_prec_shape, 'rate': self.obs_prec_rate}
        ))
        graph.add('sigma', Node(
            'deterministic', parents=('phi', ), formula='1 / sqrt(phi)'
        ))
        graph.add('alpha', Node(
            'normal', {'mean': 0., 'precision': self.intercept_prec}
        ))
        graph.add('lambda', Node(
            'gamma', {'shape': self.lambda_shape, 'rate': self.lambda_rate}
        ))
        graph.add('tau_rate', Node(
            'deterministic', parents=('lambda', ), formula='lambda ** 2 / 2'
        ))
        graph.add('tau', Node(
            'exponential', {'rate': 'tau_rate'}, shape=(n_pred, )
        ))
        graph.add('beta_prec', Node(
            'deterministic', {'shrink_factor': shrink_factor},
            parents=('phi', 'tau'), formula='shrink_factor * phi / tau',
            shape=(n_pred, )
        ))
        graph.add('beta', Node(
            'normal', {'mean': 0., 'precision': 'beta_prec'}, shape=(n_pred, )
        ))
        graph.add('mu', Node(
            'deterministic', parents=('X', 'beta', 'alpha'),
            formula='X . beta + alpha', shape=(n_obs, )
        ))
        graph.add('y', Node(
            'normal', {'mean': 'mu', 'precision': 'phi'},
            shape=(n_obs, ), observed=True
        ))
        if n_pred_obs > 0:
            graph.add('mu_pred', Node(
                'deterministic', parents=('X_pred', 'beta', 'alpha'),
                formula='X_pred . beta + alpha', shape=(n_pred_obs, )
            ))
        graph.add('beta_orig', Node(
            'deterministic', parents=('beta', 'scale'),
            formula='beta / scale', shape=(n_pred, )
        ))
        graph.add('beta0', Node(
            'deterministic', parents=('alpha', 'beta_orig', 'center'),
            formula='alpha - center . beta_orig'
        ))
        return graph.validate()
