import math
import numpy as np
import scipy as sp
import scipy.stats


class BasicRandom():
    """
    Generators of random variables from the basic distributions used in
    the GDP Gibbs sampler and the held-out comparison.

    A single instance is meant to be shared by the train/test splits and
    the sampler, so that one seed determines a whole comparison run.
    """

    def __init__(self, seed=None):
        self.np_random = np.random.RandomState()
        self.set_seed(seed)

    def set_seed(self, seed):
        self.np_random.seed(seed)

    def get_state(self):
        rand_gen_state = {
            'numpy': self.np_random.get_state(),
        }
        return rand_gen_state

    def set_state(self, rand_gen_state):
        self.np_random.set_state(rand_gen_state['numpy'])

    def sample_without_replacement(self, n, size):
        """ Draw `size` distinct integers from {0, ..., n - 1}. """
        if not 0 <= size <= n:
            raise ValueError("Cannot draw {:d} of {:d} items.".format(size, n))
        return self.np_random.choice(n, size=size, replace=False)

    def inverse_gaussian(self, mean, shape):
        return self.np_random.wald(mean, shape)

    def gamma(self, shape, rate):
        return self.np_random.gamma(shape, scale=1 / rate)

    def truncated_gamma(self, shape, rate, upper):
        """ Sample Gamma(shape, rate) truncated to (0, upper) by inverse cdf. """
        gamma_rv = sp.stats.gamma(shape, scale=1 / rate)
        upper_prob = gamma_rv.cdf(upper)
        if upper_prob == 0.:
            # The truncation point is far in the left tail; the mass is
            # concentrated right below it.
            return upper * self.np_random.uniform() ** (1 / shape)
        x = gamma_rv.ppf(upper_prob * self.np_random.uniform())
        if math.isnan(x) or x <= 0:
            x = upper * self.np_random.uniform()
        return x
