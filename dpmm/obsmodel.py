import numbers
from collections import namedtuple
import numpy as np
import scipy as sp
import scipy.special
from scipy import stats
from sklearn.utils import check_array

Gaussian = namedtuple('Gaussian', ['mu', 'sigma'])
Bernoulli = namedtuple('Bernoulli', ['p'])

LOG_2PI = np.log(2 * np.pi)


def _check_positive(x, name):
    if not (isinstance(x, numbers.Number) and not isinstance(x, bool) and np.isfinite(x) and x > 0):
        raise ValueError("parameter {} must be a positive finite number. Was {}".format(name, x))


def _check_1d(xs):
    """Validate a one-dimensional sequence of finite observations"""
    if np.ndim(xs) != 1:
        raise ValueError("data must be a one-dimensional sequence of observations. Got shape {}".format(np.shape(xs)))
    return check_array(xs, ensure_2d=False, dtype=np.float64)


class GaussianSuffStat:
    def __init__(self):
        """Count, mean and sum of squared deviations from the mean of the observed data"""
        self.n = 0
        self.mean = 0.
        self.sx = 0.

    def observe(self, x):
        self.n += 1
        delta = x - self.mean
        self.mean += delta / self.n
        self.sx += delta * (x - self.mean)

    def forget(self, x):
        if self.n == 1:
            # reset exactly so that rounding error does not accumulate in empty stats
            self.n = 0
            self.mean = 0.
            self.sx = 0.
        else:
            mean_old = self.mean - (x - self.mean) / (self.n - 1)
            self.sx -= (x - mean_old) * (x - self.mean)
            self.sx = max(self.sx, 0.)
            self.mean = mean_old
            self.n -= 1


class BernoulliSuffStat:
    def __init__(self):
        """Count of trials and of successes"""
        self.n = 0
        self.k = 0

    def observe(self, x):
        self.n += 1
        self.k += int(x)

    def forget(self, x):
        self.n -= 1
        self.k -= int(x)


class NormalInvGamma:
    def __init__(self, m=0., v=1., a=1., b=1.):
        """
        Normal-Inverse-Gamma prior on the mean and variance of a Gaussian likelihood

            sigma^2 ~ InvGamma(a, b)
            mu | sigma^2 ~ N(m, sigma^2 * v)

        Arguments:
            m (float): prior mean of mu
            v (float): scale of the prior variance of mu relative to sigma^2
            a (float): shape of the inverse gamma on sigma^2
            b (float): scale of the inverse gamma on sigma^2
        """
        if not (isinstance(m, numbers.Number) and np.isfinite(m)):
            raise ValueError("parameter m must be a finite number. Was " + str(m))
        _check_positive(v, 'v')
        _check_positive(a, 'a')
        _check_positive(b, 'b')
        self._m = float(m)
        self._v = float(v)
        self._a = float(a)
        self._b = float(b)

    @property
    def m(self):
        return self._m

    @property
    def v(self):
        return self._v

    @property
    def a(self):
        return self._a

    @property
    def b(self):
        return self._b

    def __repr__(self):
        return 'NormalInvGamma(m={}, v={}, a={}, b={})'.format(self.m, self.v, self.a, self.b)

    def empty_suffstat(self):
        return GaussianSuffStat()

    def validate_data(self, xs):
        """Check that xs is a non-empty sequence of finite scalars and return it as a list of floats"""
        return _check_1d(xs).tolist()

    def draw(self, rng):
        """Draw Gaussian component parameters from the prior"""
        sigma2 = stats.invgamma.rvs(self.a, scale=self.b, random_state=rng)
        mu = rng.normal(self.m, np.sqrt(sigma2 * self.v))
        return Gaussian(mu, np.sqrt(sigma2))

    def posterior(self, stat):
        """Posterior hyperparameters (m_n, v_n, a_n, b_n) given the sufficient statistics"""
        v_n = 1. / (1. / self.v + stat.n)
        # stat.sx is the sum of squared deviations about stat.mean
        m_n = self.m + stat.n * v_n * (stat.mean - self.m)
        a_n = self.a + stat.n / 2.
        b_n = self.b + 0.5 * (stat.sx + stat.n * (stat.mean - self.m) ** 2 / (1. + stat.n * self.v))
        return m_n, v_n, a_n, b_n

    def ln_m(self, stat):
        """Log marginal likelihood of the data summarized by stat"""
        _, v_n, a_n, b_n = self.posterior(stat)
        return (0.5 * (np.log(v_n) - np.log(self.v)) + self.a * np.log(self.b) - a_n * np.log(b_n)
                + sp.special.gammaln(a_n) - sp.special.gammaln(self.a) - 0.5 * stat.n * LOG_2PI)

    def ln_pp(self, x, stat=None):
        """Log posterior predictive (Student's t) of x; the prior predictive when stat is None"""
        if stat is None:
            stat = self.empty_suffstat()
        m_n, v_n, a_n, b_n = self.posterior(stat)
        df = 2. * a_n
        scale2 = b_n * (1. + v_n) / a_n
        return (sp.special.gammaln((df + 1.) / 2.) - sp.special.gammaln(df / 2.)
                - 0.5 * np.log(df * np.pi * scale2)
                - (df + 1.) / 2. * np.log1p((x - m_n) ** 2 / (df * scale2)))


class BetaBernoulli:
    def __init__(self, a=1., b=1.):
        """Beta(a, b) prior on the success probability of a Bernoulli likelihood"""
        _check_positive(a, 'a')
        _check_positive(b, 'b')
        self._a = float(a)
        self._b = float(b)

    @property
    def a(self):
        return self._a

    @property
    def b(self):
        return self._b

    def __repr__(self):
        return 'BetaBernoulli(a={}, b={})'.format(self.a, self.b)

    def empty_suffstat(self):
        return BernoulliSuffStat()

    def validate_data(self, xs):
        """Check that xs holds only 0/1 (or boolean) outcomes and return them as a list of ints"""
        X = _check_1d(xs)
        if not np.all((X == 0) | (X == 1)):
            raise ValueError("Bernoulli data must be 0 or 1. Got values {}".format(np.unique(X)))
        return X.astype(int).tolist()

    def draw(self, rng):
        return Bernoulli(rng.beta(self.a, self.b))

    def posterior(self, stat):
        return self.a + stat.k, self.b + stat.n - stat.k

    def ln_m(self, stat):
        a_n, b_n = self.posterior(stat)
        return sp.special.betaln(a_n, b_n) - sp.special.betaln(self.a, self.b)

    def ln_pp(self, x, stat=None):
        if stat is None:
            stat = self.empty_suffstat()
        a_n, b_n = self.posterior(stat)
        return np.log(a_n if x else b_n) - np.log(a_n + b_n)


class ConjugateModel:
    def __init__(self, fx, prior):
        """
        Mixture component whose parameters are integrated out under a conjugate prior

        Arguments:
            fx: component parameters drawn from the prior; only a template, the predictive never reads them
            prior: shared conjugate prior (NormalInvGamma or BetaBernoulli); never copied or modified
        """
        self.fx = fx
        self.prior = prior
        self.stat = prior.empty_suffstat()

    @property
    def n(self):
        """Number of data observed by this component"""
        return self.stat.n

    def observe(self, x):
        self.stat.observe(x)

    def forget(self, x):
        """Remove the contribution of x; x must have been observed by this component"""
        assert self.stat.n > 0, 'cannot forget datum {!r} from a component with no data'.format(x)
        self.stat.forget(x)

    def ln_pp(self, x):
        """log posterior predictive density of x given the data in this component"""
        return self.prior.ln_pp(x, self.stat)

    def calc_ll(self):
        """log marginal likelihood of the data in this component"""
        return self.prior.ln_m(self.stat)
