"""
Nonparametric and parametric regression tools, for estimating aircraft
parameters from historical data.
"""
import typing
import warnings

import numpy as np
from scipy import linalg, optimize
from scipy.spatial.distance import cdist

from ADWpy.mtools4acdc import reverttoscalar

__all__ = ["GaussianProcess", "LinearFit"]
__author__ = "Yaseen Reza"


def _drop_incomplete(x: np.ndarray, y: np.ndarray):
    """Exclude records with missing inputs or outputs."""
    keep = ~(np.isnan(x).any(axis=1) | np.isnan(y))
    return x[keep], y[keep]


class GaussianProcess:
    """
    Gaussian process regression with a squared exponential kernel.

    Inputs are standardised, and then scaled by the square root of a weighting
    vector, so that a weight < 1 makes the model less sensitive to differences
    in that input. A linear (least squares) trend is used as the prior mean, so
    that extrapolation beyond the data tends towards the trend and not to zero.
    The kernel length scale is found by maximising the marginal likelihood.

    Examples:

        >>> import numpy as np
        >>> x = np.linspace(0, 10, 11)[:, None]
        >>> gp = GaussianProcess().fit(x, 2 * x[:, 0] + 1)
        >>> round(gp.predict([[4.5]]), 3)
        10.0

    """

    def __init__(self, weights: typing.Sequence[float] = None,
                 nugget: float = 1e-4,
                 lengthscale_bounds: typing.Tuple[float, float] = (0.05, 20.0)):
        """
        Args:
            weights: Relative importance of each input dimension. Optional,
                defaults to equal weighting.
            nugget: Regularisation added to the diagonal of the (normalised)
                covariance matrix. Optional, defaults to 1e-4.
            lengthscale_bounds: Search bounds for the kernel length scale, in
                standardised units. Optional.
        """
        self.weights = None if weights is None else np.array(weights, float)
        self.nugget = nugget
        self.lengthscale_bounds = lengthscale_bounds
        self.lengthscale = None
        self._fitted = False
        return

    def _transform(self, x):
        return (x - self._xmean) / self._xscale * np.sqrt(self.weights)

    def _kernel(self, sqdist, lengthscale):
        return np.exp(-0.5 * sqdist / lengthscale ** 2)

    def fit(self, x, y) -> "GaussianProcess":
        """
        Train the model.

        Args:
            x: Training inputs, array of shape (n_records, n_inputs).
            y: Training outputs, array of shape (n_records,).

        Returns:
            The fitted model (self).

        """
        x = np.array(x, dtype=float, ndmin=2)
        y = np.array(y, dtype=float).ravel()
        if x.shape[0] != y.size:
            errormsg = f"Got {x.shape[0]} input records and {y.size} outputs"
            raise ValueError(errormsg)
        x, y = _drop_incomplete(x, y)

        n, ndim = x.shape
        if n < 2:
            errormsg = f"Need at least two complete records, found {n}"
            raise ValueError(errormsg)
        if self.weights is None:
            self.weights = np.ones(ndim)
        elif self.weights.size != ndim:
            errormsg = f"Got {self.weights.size} weights for {ndim} inputs"
            raise ValueError(errormsg)

        self._xmean = x.mean(axis=0)
        xscale = x.std(axis=0)
        self._xscale = np.where(xscale > 0, xscale, 1.0)
        z = self._transform(x)

        # Linear trend as the prior mean
        design = np.column_stack([np.ones(n), z])
        self._beta, *_ = np.linalg.lstsq(design, y, rcond=None)
        residual = y - design @ self._beta

        self._z = z
        self._yscale = residual.std()
        if not self._yscale > 1e-12 * max(1.0, np.abs(y).max()):
            # The trend explains the data, nothing left for the kernel to do
            self._yscale = 1.0
            self.lengthscale = 1.0
            self._alpha = np.zeros(n)
            self._fitted = True
            return self

        r = residual / self._yscale
        sqdist = cdist(z, z, "sqeuclidean")
        eye = np.eye(n)

        def neg_log_likelihood(loglengthscale):
            """Profile (over signal variance) negative log likelihood."""
            cov = self._kernel(sqdist, np.exp(loglengthscale)) \
                + self.nugget * eye
            try:
                cholesky = linalg.cho_factor(cov, lower=True)
            except linalg.LinAlgError:
                return np.inf
            alpha = linalg.cho_solve(cholesky, r)
            sigma2 = max(r @ alpha / n, 1e-300)
            logdet = 2 * np.log(np.diag(cholesky[0])).sum()
            return n * np.log(sigma2) + logdet

        bounds = np.log(self.lengthscale_bounds)
        solution = optimize.minimize_scalar(
            neg_log_likelihood, bounds=tuple(bounds), method="bounded")
        if not np.isfinite(solution.fun):
            warnmsg = (
                "Covariance matrix could not be factorised at any length "
                "scale, falling back to the linear trend"
            )
            warnings.warn(warnmsg, RuntimeWarning, stacklevel=2)
            self.lengthscale = 1.0
            self._alpha = np.zeros(n)
        else:
            self.lengthscale = float(np.exp(solution.x))
            cov = self._kernel(sqdist, self.lengthscale) + self.nugget * eye
            self._alpha = linalg.cho_solve(
                linalg.cho_factor(cov, lower=True), r)

        self._fitted = True
        return self

    def predict(self, x):
        """
        Evaluate the posterior mean of the model.

        Args:
            x: Query inputs, array of shape (n_queries, n_inputs), or a single
                sequence of n_inputs values.

        Returns:
            Predicted outputs, a float for a single query.

        """
        if not self._fitted:
            raise RuntimeError("Call fit() before predict()")
        x = np.array(x, dtype=float, ndmin=2)
        z = self._transform(x)
        trend = np.column_stack([np.ones(z.shape[0]), z]) @ self._beta
        k = self._kernel(cdist(z, self._z, "sqeuclidean"), self.lengthscale)
        return reverttoscalar(trend + self._yscale * (k @ self._alpha))


class LinearFit:
    """
    Least squares straight line, y = a x + b, through complete (x, y) pairs.

    Examples:

        >>> import numpy as np
        >>> line = LinearFit([1, 2, np.nan, 3], [2, 4, 5, 6])
        >>> round(line(10), 6)
        20.0

    """

    def __init__(self, x, y):
        """
        Args:
            x: Independent variable samples. NaN marks a missing value.
            y: Dependent variable samples. NaN marks a missing value.
        """
        x = np.array(x, dtype=float).ravel()
        y = np.array(y, dtype=float).ravel()
        x, y = _drop_incomplete(x[:, None], y)
        if y.size < 2:
            errormsg = f"Need at least two complete records, found {y.size}"
            raise ValueError(errormsg)
        self.coefficients = np.polyfit(x[:, 0], y, 1)
        return

    @property
    def slope(self) -> float:
        return float(self.coefficients[0])

    @property
    def intercept(self) -> float:
        return float(self.coefficients[1])

    def __call__(self, x):
        return reverttoscalar(np.polyval(self.coefficients, x))
