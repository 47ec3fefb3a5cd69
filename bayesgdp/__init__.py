from .bayesgdp import BayesGDP
from .model import RegressionModel
from .prior import GDPPrior
from .gibbs_util import SamplerOptions, SamplerError
from .lasso_path import LassoPath, DegenerateCpError
from .experiment import run_comparison, ExperimentOptions, ComparisonResult
