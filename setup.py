from setuptools import setup, find_packages

setup(
    name='bayesgdp',
    version='0.1.0',
    description=\
        'Compares least squares, Mallows-Cp lasso and Bayesian regression '
        + 'under the generalized double Pareto shrinkage prior by held-out '
        + 'RMSE over random train/test splits. The posterior is sampled by '
        + 'Gibbs updates of a declarative model graph.',
    license='MIT',
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['simulate_data'],
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.19', 'scipy', 'pandas', 'scikit-learn', 'matplotlib'
    ],
    extras_require={
        'test': ['pytest']
    },
    zip_safe=False
)
