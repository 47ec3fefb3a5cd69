from .factory import RegressionModel
from .linear_model import LinearModel
from .graph import ModelGraph, Node
