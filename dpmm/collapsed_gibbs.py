#!/usr/bin/env python3

import numbers
import logging
import numpy as np
from scipy.special import logsumexp as lse
from dpmm.allocmodel import CRP
from dpmm.obsmodel import ConjugateModel
from dpmm.utils import ln_pflip

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setLevel(logging.INFO)
handler.setFormatter(logging.Formatter('%(asctime)s - DPMM: %(levelname)s - %(message)s', "%I:%M:%S"))
logger.addHandler(handler)


class Dpmm:
    def __init__(self, xs, prior, alpha=1., rng=None):
        """A collapsed Gibbs sampler for a Dirichlet process mixture with a conjugate prior on the components.

        Data are removed and re-inserted one at a time, so the order of xs changes while sampling; ixs tracks the
        original position of each datum and sort (called at the end of run) restores submission order.

        Arguments:
            xs (array-like): observations, consumable by the likelihood of the prior
            prior: conjugate prior shared by all components (dpmm.NormalInvGamma or dpmm.BetaBernoulli)
            alpha (float): Dirichlet Process concentration parameter; larger values favour more clusters
            rng (np.random.Generator, int or None): source of randomness for the initial partition
        """
        self.prior = prior
        self.alpha = alpha
        self.xs = self._check_validity_of_instance(xs)  # data, in current sampler order

        rng = np.random.default_rng(rng)
        n = len(self.xs)
        self.ixs = list(range(n))  # original position of each datum in xs
        self.crp = CRP(alpha, n)  # prior on the partition
        self.partition = self.crp.draw(rng)

        # The drawn parameters are only a template; they are integrated out by the conjugate prior
        self.components = [ConjugateModel(self.prior.draw(rng), self.prior) for _ in range(self.partition.k)]
        for xi, zi in zip(self.xs, self.partition.z):
            self.components[zi].observe(xi)

        self.ll = []  # joint log probability after each iteration of run
        self.occupancy = {}  # cluster sizes after each iteration of run

    def _check_validity_of_instance(self, xs):
        """ Assert that the data passed to this program are valid, otherwise raise helpful error messages. """
        if not all(hasattr(self.prior, attr) for attr in ['draw', 'ln_pp', 'ln_m', 'empty_suffstat', 'validate_data']):
            raise ValueError("prior must be a conjugate prior such as NormalInvGamma. Was " + repr(self.prior))
        if not (isinstance(self.alpha, numbers.Number) and not isinstance(self.alpha, bool) and np.isfinite(self.alpha) and (self.alpha > 0)):
            raise ValueError("parameter alpha must be a positive number. Was " + str(self.alpha))
        if xs is None or np.ndim(xs) == 0:
            raise ValueError("data must be a sequence of observations. Was " + repr(xs))
        if len(xs) == 0:
            raise ValueError("data must contain at least one observation")

        xs = self.prior.validate_data(xs)
        if self.alpha >= len(xs):
            logger.warning("alpha ({}) is not smaller than the number of observations ({}); "
                           "expect mostly singleton clusters".format(self.alpha, len(xs)))
        return xs

    @property
    def n(self):
        """Number of data"""
        return len(self.xs)

    @property
    def k(self):
        """Number of clusters"""
        return self.partition.k

    @property
    def assignment(self):
        """Cluster id of each datum; in submission order once sort has been called"""
        return list(self.partition.z)

    def remove(self, pos):
        """Remove the datum at position pos from the data and from its cluster. Returns the datum and its original index."""
        x = self.xs.pop(pos)
        ix = self.ixs.pop(pos)
        zi = self.partition.z[pos]

        # Singleton status must be read before the partition forgets the datum
        count = self.partition.counts[zi]
        assert self.components[zi].n == count, \
            'component {} observed {} data but its cluster count is {} (datum {})'.format(zi, self.components[zi].n, count, ix)
        is_singleton = count == 1
        self.partition.remove(pos)

        if is_singleton:
            del self.components[zi]
        else:
            self.components[zi].forget(x)
            assert self.components[zi].n > 0, 'non-singleton component {} emptied by removing datum {}'.format(zi, ix)
        assert len(self.components) == self.partition.k, \
            'removing datum {} left {} components for {} clusters'.format(ix, len(self.components), self.partition.k)

        return x, ix

    def insert(self, x, ix, rng):
        """Assign datum x (original index ix) to a cluster drawn from its conditional and append it to the data"""
        # Log CRP weights: existing clusters by size, new cluster by alpha
        score = self.crp.ln_weights(self.partition.counts)
        for k, component in enumerate(self.components):
            score[k] += component.ln_pp(x)

        # Provisional new component; kept only if x is assigned to it
        new_comp_model = ConjugateModel(self.prior.draw(rng), self.prior)
        score[-1] += new_comp_model.ln_pp(x)

        zi = ln_pflip(score, rng)
        if zi == self.partition.k:
            self.components.append(new_comp_model)

        self.components[zi].observe(x)
        self.xs.append(x)
        self.ixs.append(ix)
        self.partition.append(zi)

    def step(self, pos, rng):
        """Reassign the datum at position pos"""
        x, ix = self.remove(pos)
        self.insert(x, ix, rng)

    def scan(self, rng):
        """Reassign every datum once, in random order"""
        for pos in rng.permutation(self.n):
            self.step(int(pos), rng)

    def run(self, iters, rng):
        """Run the sampler for iters sweeps, then restore the data to submission order

        Arguments:
            iters (int): number of sweeps over the data
            rng (np.random.Generator): source of randomness
        """
        if not (isinstance(iters, numbers.Integral) and (iters > 0)):
            raise ValueError("number of iterations must be a positive integer greater than 0. Was " + str(iters))

        logger.info('Cluster Initialization: {}'.format(self.partition.counts))
        for _ in range(iters):
            self.scan(rng)
            self.ll.append(self.calc_ll())
            l = len(self.ll) - 1  # iterations accumulate across calls to run
            self.occupancy[l] = list(self.partition.counts)
            logger.debug('Iter {}: {}'.format(l, self.partition.counts))

        self.sort()
        logger.info('Final clusters after {} iterations: {}, log probability {:.2f}'.format(
            iters, self.partition.counts, self.ll[-1]))

    def sort(self):
        """Put data and assignments back in submission order by following the cycles of ixs"""
        for i in range(self.n):
            while self.ixs[i] != i:
                j = self.ixs[i]
                self.ixs[i], self.ixs[j] = self.ixs[j], self.ixs[i]
                self.xs[i], self.xs[j] = self.xs[j], self.xs[i]
                self.partition.swap(i, j)

    def calc_ll(self):
        """Joint log probability of the data and the current partition"""
        return self.crp.calc_ll(self.partition) + sum(component.calc_ll() for component in self.components)

    def predict(self, x_new):
        """ Predict cluster membership probabilities for a new datum

        Arguments:
            x_new: new observation
        Returns:
            p (np.ndarray): membership probabilities for all clusters, with the last value the probability of a new cluster
        """
        x_new = self.prior.validate_data([x_new])[0]
        score = self.crp.ln_weights(self.partition.counts)
        for k, component in enumerate(self.components):
            score[k] += component.ln_pp(x_new)
        score[-1] += self.prior.ln_pp(x_new)
        normalizing_constant = lse(score)
        p = np.exp(score - normalizing_constant)
        return p

    def check_invariants(self):
        """Assert that data, tracking, partition and components agree with each other"""
        n = self.n
        assert len(self.ixs) == n and self.partition.n == n, \
            'lengths differ: {} data, {} indices, {} assignments'.format(n, len(self.ixs), self.partition.n)
        assert sorted(self.ixs) == list(range(n)), 'tracked indices are not a permutation of 0..{}'.format(n)
        assert sum(self.partition.counts) == n, 'cluster counts sum to {}, expected {}'.format(sum(self.partition.counts), n)
        assert all(nk > 0 for nk in self.partition.counts), 'empty cluster in {}'.format(self.partition.counts)
        assert len(self.components) == self.partition.k, \
            '{} components for {} clusters'.format(len(self.components), self.partition.k)
        counts = np.bincount(self.partition.z, minlength=self.partition.k)
        assert counts.tolist() == self.partition.counts, \
            'assignment implies counts {} but partition holds {}'.format(counts.tolist(), self.partition.counts)
        for k, component in enumerate(self.components):
            assert component.n == self.partition.counts[k], \
                'component {} observed {} data but its cluster count is {}'.format(k, component.n, self.partition.counts[k])
