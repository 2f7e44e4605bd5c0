import argparse

import numpy as np

from dpmm import Dpmm, NormalInvGamma
from dpmm.utils import generate_toy_data


def two_gaussians(seed=None, num_iter=200, alpha=1.0, num_per_cluster=50):
    """Fit 2 * num_per_cluster points drawn from N(-3, 1) and N(3, 1); the halves should end up in different clusters"""
    data_seed, sampler_seed = np.random.SeedSequence(seed).spawn(2)
    rng = np.random.default_rng(sampler_seed)
    xs = generate_toy_data(seed=data_seed, n_per_cluster=num_per_cluster)

    # Only the scale of the prior matters here
    prior = NormalInvGamma(0.0, 1.0, 1.0, 1.0)

    dpgmm = Dpmm(xs, prior, alpha=alpha, rng=rng)
    dpgmm.run(num_iter, rng)

    z = dpgmm.assignment
    print(z[:num_per_cluster])
    print(z[num_per_cluster:])
    return dpgmm


parser = argparse.ArgumentParser()
parser.add_argument("--seed", type=int, default=None)
parser.add_argument("--num_iter", type=int, default=200)
parser.add_argument("--alpha", type=float, default=1.0)
parser.add_argument("--num_per_cluster", type=int, default=50)


if __name__ == '__main__':
    args = parser.parse_args()
    two_gaussians(seed=args.seed, num_iter=args.num_iter, alpha=args.alpha, num_per_cluster=args.num_per_cluster)
