import numbers
import numpy as np
import scipy as sp
import scipy.special


class Partition:
    def __init__(self, z=None, counts=None):
        """Assignment of data positions to cluster ids

        Arguments:
            z (list): cluster id of the datum at each position
            counts (list): number of data in each live cluster (ids 0..k-1)
        """
        self.z = [] if z is None else list(z)  # cluster id per position
        self.counts = [] if counts is None else list(counts)  # cluster sizes; never holds a 0

    @classmethod
    def from_assignment(cls, z):
        """Build a partition from an assignment vector with no gaps in its labels"""
        z = [int(zi) for zi in z]
        if len(z) == 0:
            return cls()
        if min(z) < 0:
            raise ValueError("cluster ids must be non-negative. Was " + str(min(z)))
        counts = np.bincount(z)
        if np.any(counts == 0):
            raise ValueError("cluster ids must be contiguous from 0; empty ids: {}".format(np.where(counts == 0)[0]))
        return cls(z, counts.tolist())

    @property
    def n(self):
        return len(self.z)

    @property
    def k(self):
        return len(self.counts)

    def remove(self, pos):
        """Drop the entry at position pos and return the cluster id it held.

        If that cluster is left empty its slot is evicted and every higher cluster id is shifted down by one.
        """
        zi = self.z.pop(pos)
        self.counts[zi] -= 1
        if self.counts[zi] == 0:
            del self.counts[zi]
            self.z = [zj - 1 if zj > zi else zj for zj in self.z]
        return zi

    def append(self, zi):
        """Append an assignment; zi == k opens a new cluster"""
        if zi > self.k or zi < 0:
            raise ValueError("cluster id must be in [0, {}]. Was {}".format(self.k, zi))
        if zi == self.k:
            self.counts.append(1)
        else:
            self.counts[zi] += 1
        self.z.append(zi)

    def swap(self, i, j):
        self.z[i], self.z[j] = self.z[j], self.z[i]

    def __repr__(self):
        return 'Partition(k={}, counts={})'.format(self.k, self.counts)


class CRP:
    def __init__(self, alpha, n):
        """Chinese Restaurant Process (CRP) prior over partitions of n items"""
        if not (isinstance(alpha, numbers.Number) and not isinstance(alpha, bool) and alpha > 0 and np.isfinite(alpha)):
            raise ValueError("parameter alpha must be a positive number. Was " + str(alpha))
        if not (isinstance(n, numbers.Integral) and not isinstance(n, bool) and n > 0):
            raise ValueError("number of items must be a positive integer. Was " + str(n))
        self.alpha = alpha  # DP concentration prior
        self.n = n

    def draw(self, rng):
        """Seat n customers one at a time; each joins a table in proportion to its size, or a new one in proportion to alpha"""
        partition = Partition()
        for _ in range(self.n):
            score = np.hstack([partition.counts, self.alpha])
            partition.append(int(rng.choice(score.shape[0], p=score / score.sum())))
        return partition

    def ln_weights(self, counts):
        """Log prior weight of joining each existing cluster, with the new cluster weight last"""
        return np.log(np.hstack([counts, self.alpha]).astype(float))

    def calc_ll(self, partition):
        """Log probability of a partition under the CRP"""
        active_comps = np.asarray(partition.counts, dtype=float)
        num_comp = active_comps.shape[0]
        N = active_comps.sum()
        return sp.special.gammaln(self.alpha) - sp.special.gammaln(N + self.alpha) + num_comp * np.log(self.alpha) + np.sum(sp.special.gammaln(active_comps))
