import argparse
import numpy as np
import matplotlib.pyplot as plt
from bayesgdp import run_comparison, ExperimentOptions
from bayesgdp.util import DataManager
from bayesgdp.util import mcmc_summarizer
from simulate_data import simulate_design, simulate_outcome


parser = argparse.ArgumentParser(
    description='Held-out RMSE of OLS, Cp-selected lasso and Bayesian GDP '
                'regression on the square root of the response.'
)
parser.add_argument('--csv', default=None,
                    help='Data file; simulated data are used if omitted.')
parser.add_argument('--response', default='cost')
parser.add_argument('--exclude', nargs='*', default=[],
                    help='Columns not used as predictors, e.g. identifiers.')
parser.add_argument('--categorical', nargs='*', default=None)
parser.add_argument('--nsim', type=int, default=10)
parser.add_argument('--n_iter', type=int, default=5000)
parser.add_argument('--n_burnin', type=int, default=1000)
parser.add_argument('--seed', type=int, default=111)
parser.add_argument('--n_status_update', type=int, default=10)
parser.add_argument('--plot', action='store_true')
args = parser.parse_args()

if args.csv is None:
    n_obs, n_pred = 300, 10
    X = simulate_design(n_obs, n_pred, n_binary_pred=2, seed=1)
    beta_true = np.zeros(n_pred)
    beta_true[:3] = [1., -.5, .8]
    y = simulate_outcome(X, beta_true, intercept=8., noise_sd=.5, square=True)
    covariate_name = ['x{:d}'.format(j) for j in range(n_pred)]
else:
    manager = DataManager(
        args.response, exclude=args.exclude, categorical=args.categorical
    )
    y, X, covariate_name = manager.read_data(args.csv)

options = ExperimentOptions(
    nsim=args.nsim, n_iter=args.n_iter, n_burnin=args.n_burnin,
    n_status_update=args.n_status_update
)
result = run_comparison(y, X, seed=args.seed, options=options)

print(result.to_frame())
print('Mean RMSE:')
print(result.mean_rmse())
for failure in result.failures:
    print(failure)

if result.last_gdp is not None:
    summary = result.last_gdp['summary']
    beta_rows = [
        'beta_orig[{:d}]'.format(j) for j in range(len(covariate_name))
    ]
    summary = summary.rename(index=dict(zip(beta_rows, covariate_name)))
    print('Posterior summary of the GDP fit in repetition {:d}:'.format(
        result.last_gdp['repetition']
    ))
    print(summary)

if args.plot:
    plt.figure()
    mcmc_summarizer.plot_rmse_boxplot(result.rmse)
    if result.last_gdp is not None:
        samples = result.last_gdp['samples']
        plt.figure()
        mcmc_summarizer.plot_conf_interval(samples['beta_orig'], use_hpd=True)
        plt.legend()
        plt.figure()
        mcmc_summarizer.plot_posterior_hist(samples['lambda'], label='lambda')
        plt.figure()
        mcmc_summarizer.plot_posterior_density(samples['sigma'], label='sigma')
    plt.show()
