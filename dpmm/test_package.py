import pytest
import dpmm
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


@pytest.fixture(scope='module')
def fitted_model():
    xs = dpmm.utils.generate_toy_data(seed=0)
    rng = np.random.default_rng(0)
    prior = dpmm.NormalInvGamma(0., 1., 1., 1.)
    mix = dpmm.Dpmm(xs, prior, alpha=1., rng=rng)
    mix.run(200, rng)
    return mix


def test_tutorial_dpmm(fitted_model):
    z = np.array(fitted_model.assignment)
    first, second = np.bincount(z[:50]).argmax(), np.bincount(z[50:]).argmax()
    assert first != second
    # a few boundary points may land elsewhere
    assert np.sum(z[:50] == first) >= 45
    assert np.sum(z[50:] == second) >= 45
    assert np.sum(z == first) + np.sum(z == second) >= 90
    fitted_model.check_invariants()


def test_rank_cluster_prediction(fitted_model):
    z = np.array(fitted_model.assignment)
    cluster_list, cluster_p = dpmm.utils.rank_cluster_prediction(fitted_model, 3.2)
    assert cluster_list[0] == np.bincount(z[50:]).argmax()
    assert np.all(np.diff(cluster_p) <= 0)


def test_plot_dpmm(fitted_model):
    fig, ax = plt.subplots(figsize=(8, 5))
    _ = dpmm.utils.plot_dpmm(ax, fitted_model)
    _ = ax.legend()
    assert len(ax.get_legend().get_texts()) == fitted_model.k
    plt.close(fig)


def test_generate_toy_data():
    xs = dpmm.utils.generate_toy_data(seed=0, n_per_cluster=20, means=(-3., 0., 3.))
    assert xs.shape == (60,)
    assert np.allclose(xs, dpmm.utils.generate_toy_data(seed=0, n_per_cluster=20, means=(-3., 0., 3.)))


def test_ln_pflip_extreme_weights():
    rng = np.random.default_rng(0)
    draws = [dpmm.utils.ln_pflip([-1e5, -1e5 + np.log(3.)], rng) for _ in range(4000)]
    assert np.mean(draws) == pytest.approx(0.75, abs=0.03)
    draws = [dpmm.utils.ln_pflip([1e5, 1e5], rng) for _ in range(100)]
    assert set(draws) == {0, 1}


def test_ln_pflip_never_draws_zero_weight():
    rng = np.random.default_rng(1)
    assert all(dpmm.utils.ln_pflip([-np.inf, 0., -np.inf], rng) == 1 for _ in range(200))
    assert dpmm.utils.ln_pflip([2.], rng) == 0


def test_ln_pflip_degenerate_weights():
    rng = np.random.default_rng(2)
    with pytest.raises(ValueError):
        dpmm.utils.ln_pflip([], rng)
    with pytest.raises(ValueError):
        dpmm.utils.ln_pflip([-np.inf, -np.inf], rng)
