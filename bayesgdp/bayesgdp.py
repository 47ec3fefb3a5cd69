import numpy as np
import math
import time
from .util import simplify_warnings # Monkey patch the warning format
from warnings import warn
from .random import BasicRandom
from .reg_coef_sampler import draw_conditional_coef, compute_conditional_mean
from .prior import GDPPrior
from .gibbs_util import MarkovChainManager, SamplerOptions, SamplerError, \
    check_samples, check_chain_length


class BayesGDP():
    """ Implement Gibbs sampler for linear regression under the GDP prior. """

    # Node kinds the sampler relies on; any other graph is rejected.
    supported_graph = {
        'phi': 'gamma', 'alpha': 'normal', 'lambda': 'gamma',
        'tau': 'exponential', 'beta': 'normal', 'y': 'normal',
        'tau_rate': 'deterministic', 'beta_prec': 'deterministic',
        'mu': 'deterministic', 'sigma': 'deterministic',
        'beta_orig': 'deterministic', 'beta0': 'deterministic'
    }
    default_params_to_save = (
        'beta', 'alpha', 'phi', 'sigma', 'lambda',
        'beta_orig', 'beta0', 'mu_pred', 'logp'
    )

    def __init__(self, model, prior=GDPPrior()):
        """
        Parameters
        ----------
        model : LinearModel object
            Typically created by `RegressionModel`; the design must include
            the intercept column.
        prior : GDPPrior object
        """
        if model.name != 'linear':
            raise NotImplementedError(
                "The GDP sampler only supports the linear model."
            )
        if not model.intercept_added:
            raise ValueError("The design matrix must include the intercept.")

        self.n_obs = model.n_obs
        self.n_pred = model.n_pred
        self.model = model
        self.prior = prior
        self.graph = None
        self.rg = BasicRandom()
        self.manager = MarkovChainManager(self.n_pred)

    def gibbs_additional_iter(
            self, prev_mcmc_info, n_add_iter, X_pred=None,
            n_status_update=0, merge=False, prev_samples=None):
        """ Resume Gibbs sampler from the last state.

        Parameter
        ---------
        prev_mcmc_info : dict
            MCMC info returned by a previous call to the `gibbs` method.
        n_add_iter : int
        X_pred : numpy array, None
            Must be the same held-out covariates as in the previous run.
        merge : bool
            If True, merge the Gibbs sampler outputs from the previous and
            new runs and then return.
        prev_samples : dict
            MCMC samples returned by a previous call to the 'gibbs' method.

        Returns
        -------
        new_samples : dict
        new_mcmc_info : dict
        """

        if merge and prev_samples is None:
            raise ValueError(
                "To merge the outputs from previous and new MCMC runs, you "
                "have to supply the optional argument `prev_samples`."
            )
        n_pred_obs = 0 if X_pred is None else np.shape(X_pred)[0]
        if n_pred_obs != prev_mcmc_info['n_pred_obs']:
            raise ValueError(
                "The held-out covariates differ from the previous run."
            )

        self.rg.set_state(prev_mcmc_info['_random_gen_state'])

        new_samples, new_mcmc_info = self.gibbs(
            n_add_iter, 0, prev_mcmc_info['thin'],
            init=prev_mcmc_info['_markov_chain_state'],
            params_to_save=prev_mcmc_info['saved_params'],
            X_pred=X_pred,
            n_status_update=n_status_update,
            options=prev_mcmc_info['options'],
            _add_iter_mode=True
        )
        if merge:
            new_samples, new_mcmc_info = self.manager.merge_outputs(
                prev_samples, prev_mcmc_info, new_samples, new_mcmc_info
            )

        return new_samples, new_mcmc_info

    def gibbs(self, n_iter, n_burnin=0, thin=1, seed=None, rand_gen=None,
              init=None, params_to_save=default_params_to_save,
              X_pred=None, n_status_update=0, options=None,
              _add_iter_mode=False):
        """ Generate posterior samples under the GDP model and prior.

        Parameters
        ----------
        n_iter : int
            Total number of MCMC iterations i.e. burn-ins + saved posterior draws
        n_burnin : int
            Number of burn-in samples to be discarded
        thin : int
            Number of iterations per saved samples for "thinning" MCMC to reduce
            the output size. In other words, the function saves an MCMC sample
            every `thin` iterations, returning floor((n_iter - n_burnin) / thin)
            samples. Settings that would keep no sample raise ValueError.
        seed : int
            Seed for random number generator. Ignored if `rand_gen` is given.
        rand_gen : BasicRandom, None
            Generator to draw from, advancing its state. Pass the generator
            of an enclosing experiment so that one seed governs the whole run.
        init : dict of numpy arrays
            Specifies, partially or completely, the initial state of Markov
            chain with keys among 'alpha', 'beta', 'phi', 'tau', 'lambda'.
        params_to_save : {'all', tuple or list of str}
            Names of graph nodes (plus 'logp', the log posterior density up
            to a constant) whose draws are kept. 'mu_pred' is only available
            when `X_pred` is given.
        X_pred : numpy array, None
            Covariates of held-out rows on the raw scale; they are mapped
            with the training center and scale. Their responses never enter
            the sampler, so 'mu_pred' holds posterior predictive means.
        n_status_update : int
            Number of updates to print on stdout during the sampler run.

        Other Parameters
        ----------------
        options : None, dict, SamplerOptions
            SamplerOptions class or a dict whose keywords are used as inputs
            to the class.

        Returns
        -------
        samples : dict
            Contains MCMC samples of the parameters as specified by
            **params_to_save**. The last dimension of the arrays correspond
            to MCMC iterations; for example,
            :code:`samples['beta'][:, 0]`
            is the first MCMC sample of regression coefficients.
        mcmc_info : dict
            Contains information on the MCMC run and sampler settings, enough in
            particular to reproduce and resume the sampling process.
        """

        options = SamplerOptions.create(options)
        check_chain_length(n_iter, n_burnin, thin)

        if rand_gen is not None:
            if seed is not None:
                warn("The seed is ignored since a generator is supplied.")
            self.rg = rand_gen
        elif not _add_iter_mode:
            self.rg.set_seed(seed)

        Z_pred = None if X_pred is None \
            else self.model.design.map_covariates(X_pred)
        n_pred_obs = 0 if Z_pred is None else Z_pred.shape[0]
        self.graph = self.prior.build_graph(self.n_obs, self.n_pred, n_pred_obs)
        hyper_param = self.read_hyper_param(self.graph)

        if params_to_save == 'all':
            params_to_save = self.default_params_to_save + ('tau', )
        params_to_save = self.check_params_to_save(params_to_save, n_pred_obs)

        n_status_update = min(n_iter, n_status_update)
        start_time = time.time()
        self.manager.stamp_time(start_time)

        # Initial state of the Markov chain
        coef, obs_prec, tau, lam, init = \
            self.initialize_chain(init, hyper_param)

        # Pre-allocate
        samples = {}
        self.manager.pre_allocate(
            samples, n_iter - n_burnin, thin, params_to_save, n_pred_obs
        )

        # Start Gibbs sampling
        for mcmc_iter in range(1, n_iter + 1):

            coef = self.update_regress_coef(obs_prec, tau, hyper_param)

            obs_prec = self.update_obs_precision(coef, tau, hyper_param)

            # Draw from tau | beta, phi, lambda and then lambda | tau.
            tau = self.update_local_scale(coef[1:], obs_prec, lam, hyper_param)

            if options.lambda_update == 'sample':
                lam = self.update_shrinkage_param(
                    lam, tau, hyper_param, options.n_slice_update
                )

            if self.manager.is_saved_iter(mcmc_iter, n_burnin, thin):
                state = self.manager.pack_parameters(coef, obs_prec, tau, lam)
                state.update(self.compute_deterministic_nodes(
                    state, Z_pred, params_to_save
                ))
                if 'logp' in params_to_save:
                    state['logp'] = self.compute_posterior_logprob(
                        coef, obs_prec, tau, lam, hyper_param
                    )
                self.manager.store_current_state(
                    samples, mcmc_iter, n_burnin, thin, state, params_to_save
                )
            self.manager.print_status(n_status_update, mcmc_iter, n_iter)

        runtime = time.time() - start_time

        degenerate_params, low_ess_params = \
            check_samples(samples, options.min_ess)

        _markov_chain_state = \
            self.manager.pack_parameters(coef, obs_prec, tau, lam)

        mcmc_info = {
            'init': init,
            'n_iter': n_iter,
            'n_burnin': n_burnin,
            'thin': thin,
            'seed': seed,
            'n_pred_obs': n_pred_obs,
            'prior': self.prior.get_info(),
            'saved_params': params_to_save,
            'degenerate_params': degenerate_params,
            'low_ess_params': low_ess_params,
            'runtime': runtime,
            'options': options.get_info(),
            '_markov_chain_state': _markov_chain_state,
            '_random_gen_state': self.rg.get_state(),
        }

        return samples, mcmc_info

    def read_hyper_param(self, graph):
        """ Check that the graph is the GDP regression and extract constants. """
        for name, kind in self.supported_graph.items():
            if name not in graph or graph[name].kind != kind:
                raise NotImplementedError(
                    "The Gibbs sampler supports only the GDP linear regression "
                    "graph; node '{:s}' must be of kind '{:s}'.".format(name, kind)
                )
        if not graph['y'].observed:
            raise ValueError("The outcome node 'y' must be observed.")
        if graph.stochastic_nodes(observed=True) != ['y']:
            raise NotImplementedError("Only the outcome can be observed.")
        hyper_param = {
            'obs_prec_shape': graph['phi'].params['shape'],
            'obs_prec_rate': graph['phi'].params['rate'],
            'intercept_prec': graph['alpha'].params['precision'],
            'lambda_shape': graph['lambda'].params['shape'],
            'lambda_rate': graph['lambda'].params['rate'],
            'shrink_factor': graph['beta_prec'].params['shrink_factor'],
        }
        return hyper_param

    def check_params_to_save(self, params_to_save, n_pred_obs):
        params_to_save = tuple(params_to_save)
        saveable = self.graph.stochastic_nodes(observed=False) \
            + ['sigma', 'beta_orig', 'beta0', 'mu_pred', 'logp']
        for name in params_to_save:
            if name not in saveable:
                raise ValueError(
                    "'{:s}' is not a parameter that can be saved.".format(name)
                )
        if n_pred_obs == 0:
            params_to_save = tuple(
                name for name in params_to_save if name != 'mu_pred'
            )
        return params_to_save

    def initialize_chain(self, init, hyper_param):
        """ Choose the user-specified state if provided, the default ones otherwise."""

        if init is None:
            init = {}
        valid_param_name = ('alpha', 'beta', 'phi', 'tau', 'lambda')
        for key in init:
            if key not in valid_param_name:
                warn("'{:s}' is not a valid parameter name and "
                     "will be ignored.".format(key))

        y = self.model.y
        if 'phi' in init:
            obs_prec = float(init['phi'])
        else:
            y_var = np.var(y)
            obs_prec = 1 / y_var if y_var > 0 else 1.

        if 'lambda' in init:
            lam = float(init['lambda'])
        else:
            lam = 1.

        if 'tau' in init:
            tau = np.array(init['tau'], dtype=np.float64)
            if not len(tau) == self.n_pred:
                raise ValueError('Invalid initial length of local scale parameter.')
        else:
            tau = np.ones(self.n_pred)

        if 'beta' in init:
            beta = np.array(init['beta'], dtype=np.float64)
            if not len(beta) == self.n_pred:
                raise ValueError('Invalid initial length of regression coefficient.')
            alpha = init.get('alpha', self.model.calc_intercept_mle())
            coef = np.concatenate(([alpha], beta))
        else:
            # Start from the conditional posterior mean.
            prior_prec, z = self.compute_coef_conditional(
                obs_prec, tau, hyper_param
            )
            coef = compute_conditional_mean(
                self.model.design, obs_prec, prior_prec, z
            )
            if 'alpha' in init:
                coef[0] = init['alpha']

        init = {
            'alpha': coef[0],
            'beta': coef[1:],
            'phi': obs_prec,
            'tau': tau,
            'lambda': lam
        }

        return coef, obs_prec, tau, lam, init

    def compute_coef_conditional(self, obs_prec, tau, hyper_param):
        """ Prior precision of (alpha, beta) and X' y weighted by phi. """
        prior_prec = np.concatenate((
            [hyper_param['intercept_prec']],
            hyper_param['shrink_factor'] * obs_prec / tau
        ))
        if not (np.all(np.isfinite(prior_prec)) and np.all(prior_prec > 0)):
            raise SamplerError(
                "The prior precision of the coefficients over- or under-flowed."
            )
        z = obs_prec * self.model.design.Tdot(self.model.y)
        return prior_prec, z

    def update_regress_coef(self, obs_prec, tau, hyper_param):
        prior_prec, z = self.compute_coef_conditional(obs_prec, tau, hyper_param)
        try:
            coef = draw_conditional_coef(
                self.model.design, obs_prec, prior_prec, z, self.rg
            )
        except np.linalg.LinAlgError as error:
            raise SamplerError(
                "Cholesky factorization of the coefficient posterior "
                "precision failed: {}".format(error)
            )
        return coef

    def update_obs_precision(self, coef, tau, hyper_param):
        resid = self.model.y - self.model.design.dot(coef)
        beta = coef[1:]
        shape = hyper_param['obs_prec_shape'] + (self.n_obs + self.n_pred) / 2
        rate = hyper_param['obs_prec_rate'] \
            + np.sum(resid ** 2) / 2 \
            + hyper_param['shrink_factor'] * np.sum(beta ** 2 / tau) / 2
        obs_prec = self.rg.gamma(shape, rate)
        return obs_prec

    def update_local_scale(self, beta, obs_prec, lam, hyper_param):
        """ Sample 1 / tau_j from its inverse Gaussian conditional. """

        beta_magnitude = np.abs(beta)
        ig_mean = lam / (beta_magnitude * math.sqrt(hyper_param['shrink_factor'] * obs_prec))
        ig_mean = np.minimum(ig_mean, 1e100)
        tau = 1 / self.rg.inverse_gaussian(ig_mean, lam ** 2)

        if np.any(tau == 0):
            warn(
                "Local scale parameter under-flowed. Replacing with a small number.")
            tau[tau == 0] = 1e-16
        if np.any(np.isinf(tau)):
            warn(
                "Local scale parameter over-flowed. Replacing with a large number.")
            tau[np.isinf(tau)] = 1e16

        return tau

    def update_shrinkage_param(self, lam, tau, hyper_param, n_update=1):
        """ Slice sample lambda given the local scales.

        The conditional density is proportional to
            lambda ** (2 p + shape - 1) * exp(- rate * lambda)
                * exp(- lambda ** 2 * sum(tau) / 2),
        so slicing the last factor leaves a Gamma truncated from above.
        """
        shape = hyper_param['lambda_shape'] + 2 * len(tau)
        rate = hyper_param['lambda_rate']
        tau_sum = np.sum(tau)
        for i in range(n_update):
            log_u = math.log(self.rg.np_random.uniform())
            upper = math.sqrt(lam ** 2 - 2 * log_u / tau_sum)
            lam = self.rg.truncated_gamma(shape, rate, upper)
        return lam

    def compute_deterministic_nodes(self, state, Z_pred, params_to_save):
        beta, alpha = state['beta'], state['alpha']
        values = {'sigma': state['phi'] ** -.5}
        if Z_pred is not None and 'mu_pred' in params_to_save:
            values['mu_pred'] = alpha + Z_pred.dot(beta)
        if 'beta_orig' in params_to_save or 'beta0' in params_to_save:
            values['beta_orig'], values['beta0'] = \
                self.model.design.unscale_coef(beta, alpha)
        return values

    def compute_posterior_logprob(self, coef, obs_prec, tau, lam, hyper_param):

        # Contributions from the likelihood.
        logp = self.model.compute_loglik(coef, obs_prec)

        alpha, beta = coef[0], coef[1:]
        beta_prec = hyper_param['shrink_factor'] * obs_prec / tau

        # for beta | phi, tau and alpha.
        logp += np.sum(.5 * np.log(beta_prec) - beta_prec * beta ** 2 / 2)
        logp += - hyper_param['intercept_prec'] * alpha ** 2 / 2

        # for tau | lambda.
        logp += len(tau) * math.log(lam ** 2 / 2) - lam ** 2 * np.sum(tau) / 2

        # for phi and lambda.
        logp += (hyper_param['obs_prec_shape'] - 1) * math.log(obs_prec) \
            - hyper_param['obs_prec_rate'] * obs_prec
        logp += (hyper_param['lambda_shape'] - 1) * math.log(lam) \
            - hyper_param['lambda_rate'] * lam

        return logp
