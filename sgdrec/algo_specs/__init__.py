from . import ols, poisson, logistic, softmax, ordinal

algorithms = {
    'OLS': ols,
    'POISSON': poisson,
    'LOGISTIC': logistic,
    'SOFTMAX': softmax,
    'ORDINAL': ordinal,
}
