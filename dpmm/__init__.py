from dpmm.collapsed_gibbs import Dpmm
from dpmm.allocmodel import CRP, Partition
from dpmm.obsmodel import NormalInvGamma, BetaBernoulli, ConjugateModel
from dpmm import utils
