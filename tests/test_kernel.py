import unittest
import math
import numpy as np
import scipy.linalg as la

from rankreduce import RankReduce, RankCappedWarning
from rankreduce.typing import RankReducedEigensolver, SeparableApproximator
from utils import backends, max_distance, to_numpy

class TestKernel(unittest.TestCase):

    def setUp(self):
        self.rankreduce = [RankReduce(backend) for backend in backends]

    def test_rank_one(self):
        for rr in self.rankreduce:
            rect = rr.rectangle((0.0, 1.0, 0.0, 1.0))
            res = rr.eigenvalues(lambda x, y: x * y, rect)
            self.assertEqual(res.rank, 1)
            self.assertEqual(res.implicit_zeros, 0)
            self.assertFalse(res.approximate)
            self.assertAlmostEqual(complex(res.eigenvalues[0]), 1.0 / 3.0, places=12)

    def test_cosine(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-math.pi, math.pi, -math.pi, math.pi))
            res = rr.eigenvalues(lambda x, y: xp.cos(x - y), rect)
            self.assertEqual(res.rank, 2)
            self.assertLess(max_distance(res.eigenvalues, xp.asarray([math.pi, math.pi])), 1e-10)

    def test_nystrom(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            res = rr.eigenvalues(lambda x, y: xp.exp(x * y), rect).sorted()

            nodes, weights = np.polynomial.legendre.leggauss(64)
            sqrtw = np.sqrt(weights)
            kernel = sqrtw[:,None] * np.exp(np.outer(nodes, nodes)) * sqrtw[None,:]
            ref = la.eigvalsh(kernel)[::-1][:5]

            vals = to_numpy(res.eigenvalues)[:5]
            self.assertTrue(np.allclose(vals.real, ref, rtol=0.0, atol=1e-8))
            self.assertTrue(np.all(np.abs(vals.imag) < 1e-8))

    def test_from_representation(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 2.0, 0.0, 2.0))
            func = lambda x, y: xp.exp(-(x - y)**2)
            rep = rr.decompose(func, rect)
            res1 = rr.eigenvalues_of_kernel(rep)
            res2 = rr.eigenvalues(func, rect)
            self.assertEqual(res1.rank, rep.rank)
            self.assertLess(max_distance(res1.eigenvalues, res2.eigenvalues), 1e-12)

            # the trace of the operator is the integral along the diagonal
            trace = complex(np.sum(to_numpy(res1.eigenvalues)))
            self.assertAlmostEqual(trace.real, 2.0, places=8)

    def test_zero(self):
        for rr in self.rankreduce:
            rect = rr.rectangle((0.0, 1.0, 0.0, 1.0))
            res = rr.eigenvalues(lambda x, y: 0.0 * x * y, rect)
            self.assertEqual(res.rank, 0)
            self.assertEqual(res.implicit_zeros, 0)
            self.assertEqual(res.spectral_radius, 0.0)
            self.assertFalse(res.approximate)

    def test_approximate(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: 1.0 / (1.0 + 25.0 * (x - y)**2)
            with self.assertWarns(RankCappedWarning):
                res = rr.eigenvalues(func, rect, max_rank=4)
            self.assertTrue(res.approximate)
            self.assertEqual(res.rank, 4)

            rep = rr.decompose(func, rect, callback=lambda rank, pivot: rank == 2)
            res = rr.eigenvalues_of_kernel(rep)
            self.assertTrue(res.approximate)
            self.assertEqual(res.rank, 2)

    def test_solver_object(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 1.0, 0.0, 1.0))
            solver = RankReducedEigensolver()
            res = solver.eigenvalues(xp, lambda x, y: x * y, rect, SeparableApproximator(grid_size=33))
            self.assertEqual(res.rank, 1)
            self.assertAlmostEqual(complex(res.eigenvalues[0]), 1.0 / 3.0, places=12)

    def test_numpy_instance(self):
        from rankreduce.numpy import rankreduce
        rect = rankreduce.rectangle((0.0, 1.0, 0.0, 1.0))
        res = rankreduce.eigenvalues(lambda x, y: x * y, rect)
        self.assertEqual(res.rank, 1)

    def test_not_square(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 1.0, 0.0, 2.0))
            self.assertRaises(ValueError, rr.eigenvalues, lambda x, y: xp.exp(x * y), rect)

if __name__ == '__main__':
    unittest.main()
