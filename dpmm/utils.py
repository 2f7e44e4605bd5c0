import numpy as np
import matplotlib

###########################################################################
#######         Functions to Interact with DPMM Model               #######
###########################################################################


def ln_pflip(ln_weights, rng):
    """Draw an index from the categorical distribution given by unnormalized log weights

    The maximum log weight is subtracted before exponentiating so that very large or very small weights
    neither overflow nor underflow.

    Arguments:
        ln_weights (array-like): unnormalized log weights; -inf entries are never drawn
        rng (np.random.Generator): source of randomness

    Returns:
        ix (int): index of the drawn category
    """
    ln_weights = np.asarray(ln_weights, dtype=float)
    if ln_weights.size == 0:
        raise ValueError("ln_weights must not be empty")
    maxval = np.max(ln_weights)
    if not np.isfinite(maxval):
        raise ValueError("ln_weights must have a finite maximum. Was {}".format(maxval))
    cws = np.cumsum(np.exp(ln_weights - maxval))
    u = rng.uniform(0., cws[-1])
    return min(int(np.searchsorted(cws, u, side='right')), ln_weights.size - 1)


def rank_cluster_prediction(model, x_new):
    """Rank existing clusters for a new datum by membership probability

    Arguments:
        model (dpmm.Dpmm): fitted model to use for cluster prediction
        x_new: new observation

    Returns:
        rank_cluster (np.array): sorted array with most likely cluster first
        cluster_p (np.array): corresponding membership probabilities
    """
    p = model.predict(x_new)[:-1]  # last entry is the probability of a new cluster
    rank_cluster = np.argsort(p)[::-1]
    cluster_p = p[rank_cluster]

    return rank_cluster, cluster_p


def generate_toy_data(seed=0, n_per_cluster=50, means=(-3., 3.), sd=1.):
    """Generate one-dimensional toy data, n_per_cluster points from a Gaussian at each mean, in order

    Arguments:
        seed (int): random seed for data generation
        n_per_cluster (int): number of points drawn from each Gaussian
        means (tuple): mean of each Gaussian
        sd (float): standard deviation shared by the Gaussians
    """
    rng = np.random.default_rng(seed)
    xs = np.hstack([rng.normal(mu, sd, n_per_cluster) for mu in means])
    return xs


def plot_dpmm(ax, model, bins=30):
    """Histogram of one-dimensional data coloured by cluster - largest clusters first

    Arguments:
        ax (matplotlib.axes): axes for plot
        model (dpmm.Dpmm): model to visualize; call sort (or run) first so data are in submission order
        bins (int): number of histogram bins shared by all clusters

    Returns:
        ax (matplotlib.axes): axes for plot
    """
    xs = np.asarray(model.xs, dtype=float)
    z = np.asarray(model.assignment)
    idx = np.argsort(-np.asarray(model.partition.counts))
    edges = np.histogram_bin_edges(xs, bins=bins)

    cmap = matplotlib.colormaps['rainbow']
    colors = [cmap(i / max(len(idx), 1)) for i in range(len(idx))]

    for i, k in enumerate(idx):
        num_pts = 'n = {}'.format(model.partition.counts[k])
        _ = ax.hist(xs[z == k], bins=edges, color=colors[i], alpha=0.6, label=num_pts)
    return ax
