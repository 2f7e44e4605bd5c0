import pytest
import numpy as np
from dpmm.allocmodel import CRP, Partition


@pytest.fixture
def rng():
    return np.random.default_rng(0)


def test_crp_rejects_bad_params():
    for alpha in [0, -1., np.nan, np.inf, 'a', True]:
        with pytest.raises(ValueError):
            CRP(alpha, 10)
    with pytest.raises(ValueError):
        CRP(1., 0)
    with pytest.raises(ValueError):
        CRP(1., True)


def test_crp_draw_is_consistent_partition(rng):
    partition = CRP(1., 50).draw(rng)
    assert partition.n == 50
    assert sum(partition.counts) == 50
    assert all(nk > 0 for nk in partition.counts)
    assert np.bincount(partition.z).tolist() == partition.counts
    # labels are introduced in order of first appearance
    first_seen = [partition.z.index(k) for k in range(partition.k)]
    assert first_seen == sorted(first_seen)


def test_crp_draw_extreme_alpha(rng):
    assert CRP(1e-12, 30).draw(rng).k == 1
    assert CRP(1e12, 30).draw(rng).k == 30


def test_crp_draw_is_reproducible():
    z1 = CRP(2., 40).draw(np.random.default_rng(5)).z
    z2 = CRP(2., 40).draw(np.random.default_rng(5)).z
    assert z1 == z2


def test_crp_calc_ll_normalized():
    crp = CRP(0.7, 3)
    partitions = [[0, 0, 0], [0, 0, 1], [0, 1, 0], [0, 1, 1], [0, 1, 2]]
    total = sum(np.exp(crp.calc_ll(Partition.from_assignment(z))) for z in partitions)
    assert np.isclose(total, 1.)
    assert np.isclose(CRP(3., 1).calc_ll(Partition.from_assignment([0])), 0.)


def test_crp_ln_weights():
    ln_w = CRP(2., 5).ln_weights([3, 2])
    assert np.allclose(ln_w, np.log([3., 2., 2.]))


def test_partition_remove_non_singleton():
    partition = Partition.from_assignment([0, 1, 1, 0])
    assert partition.remove(1) == 1
    assert partition.z == [0, 1, 0]
    assert partition.counts == [2, 1]


def test_partition_remove_singleton_relabels():
    partition = Partition.from_assignment([0, 1, 1, 2])
    assert partition.remove(0) == 0
    assert partition.z == [0, 0, 1]
    assert partition.counts == [2, 1]
    assert partition.k == 2


def test_partition_append():
    partition = Partition.from_assignment([0, 1])
    partition.append(1)
    partition.append(2)
    assert partition.z == [0, 1, 1, 2]
    assert partition.counts == [1, 2, 1]
    with pytest.raises(ValueError):
        partition.append(4)


def test_partition_from_assignment_rejects_gaps():
    with pytest.raises(ValueError):
        Partition.from_assignment([0, 2, 2])
    with pytest.raises(ValueError):
        Partition.from_assignment([-1, 0])


def test_partition_swap():
    partition = Partition.from_assignment([0, 1, 2])
    partition.swap(0, 2)
    assert partition.z == [2, 1, 0]
    assert partition.counts == [1, 1, 1]
