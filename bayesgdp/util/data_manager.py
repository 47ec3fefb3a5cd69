import numpy as np
import pandas as pd


class DataManager(object):

    def __init__(self, response, exclude=(), categorical=None):
        """
        Parameters
        ----------
        response : str
            Name of the response column; must be numeric and non-negative.
        exclude : str, list of str
            Columns (e.g. identifiers) not used as predictors.
        categorical : list of str, None
            Columns encoded as 0/1 indicators, dropping the first level. If
            None, object, category and bool columns are treated as such.
        """
        if isinstance(exclude, str):
            exclude = [exclude]
        self.response = response
        self.exclude = list(exclude)
        self.categorical = categorical

    def read_csv(self, filename, **kwargs):
        return pd.read_csv(filename, **kwargs)

    def read_data(self, source, **kwargs):
        """ Read the response and the covariate matrix from a file or a frame.

        Returns
        -------
        y : numpy array
        X : numpy array
        covariate_name : list of str
        """
        if isinstance(source, pd.DataFrame):
            frame = source
        else:
            frame = self.read_csv(source, **kwargs)
        return self.extract(frame)

    def extract(self, frame):
        missing_col = [
            col for col in [self.response] + self.exclude + list(self.categorical or [])
            if col not in frame.columns
        ]
        if missing_col:
            raise ValueError(
                "Column(s) {} not found in the data.".format(missing_col)
            )

        predictors = frame.drop(columns=[self.response] + self.exclude)
        if predictors.shape[1] == 0:
            raise ValueError("No predictor column is left.")

        y = self.extract_response(frame[self.response])
        covariates = self.encode_categorical(predictors)
        has_missing = covariates.isnull().any(axis=0)
        if has_missing.any():
            raise ValueError(
                "Missing values in column(s) {}."
                .format(list(covariates.columns[has_missing]))
            )
        non_numeric = [
            col for col in covariates.columns
            if not pd.api.types.is_numeric_dtype(covariates[col])
        ]
        if non_numeric:
            raise ValueError(
                "Non-numeric entries in column(s) {}.".format(non_numeric)
            )
        X = covariates.to_numpy(dtype=np.float64)
        return y, X, [str(col) for col in covariates.columns]

    def extract_response(self, column):
        if column.isnull().any():
            raise ValueError(
                "Missing values in the response '{:s}'.".format(self.response)
            )
        if not pd.api.types.is_numeric_dtype(column) \
                or pd.api.types.is_bool_dtype(column):
            raise ValueError(
                "The response '{:s}' must be numeric.".format(self.response)
            )
        y = column.to_numpy(dtype=np.float64)
        if np.any(y < 0):
            raise ValueError(
                "The response '{:s}' must be non-negative for the square-root "
                "transform.".format(self.response)
            )
        return y

    def encode_categorical(self, predictors):
        if self.categorical is None:
            categorical = [
                col for col in predictors.columns
                if not pd.api.types.is_numeric_dtype(predictors[col])
                or pd.api.types.is_bool_dtype(predictors[col])
            ]
        else:
            categorical = [
                col for col in self.categorical if col not in self.exclude
            ]
        if not categorical:
            return predictors
        if predictors[categorical].isnull().any().any():
            raise ValueError(
                "Missing values in categorical column(s) {}.".format(categorical)
            )
        return pd.get_dummies(
            predictors, columns=categorical, drop_first=True, dtype=np.float64
        )
