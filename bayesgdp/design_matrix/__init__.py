from .dense_matrix import DenseDesignMatrix
from .scaler import CovariateScaler
