from .direct_gaussian_sampler import draw_conditional_coef, compute_conditional_mean
