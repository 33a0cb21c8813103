import unittest
import warnings

from rankreduce import RankReduce, RankCappedWarning
from rankreduce.typing import SeparableApproximator, SeparableRepresentation
from utils import backends

class TestSeparable(unittest.TestCase):

    def setUp(self):
        self.rankreduce = [RankReduce(backend) for backend in backends]

    def max_error(self, xp, rep, func, rect, size):
        x, y = rect_axes(xp, rect, size)
        X, Y = xp.meshgrid(x, y, indexing="ij")
        return float(xp.max(xp.abs(rep(X, Y) - func(X, Y))))

    def test_rank_one(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 1.0, -1.0, 2.0))
            func = lambda x, y: (1.0 + x) * xp.cos(y)
            rep = rr.decompose(func, rect)
            self.assertEqual(rep.rank, 1)
            self.assertEqual(len(rep), 1)
            self.assertTrue(rep.converged)
            self.assertFalse(rep.rank_capped)
            self.assertLess(self.max_error(xp, rep, func, rect, 17), 1e-13)

            factor = rep[0]
            self.assertAlmostEqual(abs(factor.pivot), 2.0, places=5)
            self.assertAlmostEqual(factor.pivot_weight * factor.pivot.value, 1.0, places=14)
            self.assertEqual(abs(factor.pivot), rep.first_pivot)

    def test_exact_rank(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: x*y + x**2 * y**2 + xp.sin(x) * xp.cos(y)
            rep = rr.decompose(func, rect, tolerance=1e-10, max_rank=50)
            self.assertEqual(rep.rank, 3)
            self.assertFalse(rep.rank_capped)
            self.assertTrue(rep.converged)
            self.assertLessEqual(rep.residual, rep.tolerance)
            self.assertLess(self.max_error(xp, rep, func, rect, 33), 1e-12)

            x = xp.linspace(-1.0, 1.0, 11)
            y = xp.linspace(-1.0, 1.0, 11)
            self.assertEqual(rep.rows(x).shape, (11, 3))
            self.assertEqual(rep.columns(y).shape, (11, 3))
            self.assertEqual(rep(x, y).shape, (11,))

    def test_factors(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: xp.exp(x * y)
            rep = rr.decompose(func, rect)
            self.assertGreater(rep.rank, 3)

            extracted = sorted(rep, key=lambda factor: factor.step)
            self.assertEqual([factor.step for factor in extracted], list(range(rep.rank)))

            # the first row function is the function along the first pivot line
            x = xp.linspace(-1.0, 1.0, 9)
            first = extracted[0]
            ref = func(x, xp.full_like(x, first.pivot.y))
            self.assertLess(float(xp.max(xp.abs(first.row_function(x) - ref))), 1e-14)

            for k, factor in enumerate(extracted):
                at_pivot_x = xp.asarray([factor.pivot.x])
                at_pivot_y = xp.asarray([factor.pivot.y])
                self.assertAlmostEqual(complex(factor.row_function(at_pivot_x)[0]), factor.pivot.value, places=12)
                self.assertAlmostEqual(complex(factor.column_function(at_pivot_y)[0]), factor.pivot.value, places=12)
                for prev in extracted[:k]:
                    self.assertLess(abs(complex(factor.row_function(xp.asarray([prev.pivot.x]))[0])), 1e-12)
                    self.assertLess(abs(complex(factor.column_function(xp.asarray([prev.pivot.y]))[0])), 1e-12)

            # rows and columns follow the sequence order
            rows, columns = rep.rows(x), rep.columns(x)
            for k, factor in enumerate(rep):
                self.assertLess(float(xp.max(xp.abs(rows[:,k] - factor.row_function(x)))), 1e-14)
                self.assertLess(float(xp.max(xp.abs(columns[:,k] - factor.column_function(x)))), 1e-14)
                self.assertEqual(complex(rep.weights[k]), factor.pivot_weight)

    def test_pivot_order(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: xp.cos(10.0 * x * y)
            rep = rr.decompose(func, rect)
            self.assertTrue(rep.converged)

            # complete pivoting extracts a larger pivot in the second step
            steps = [factor.step for factor in rep]
            self.assertNotEqual(steps, sorted(steps))
            magnitudes = [abs(pivot) for pivot in rep.pivots]
            self.assertEqual(magnitudes, sorted(magnitudes, reverse=True))
            for magnitude, weight in zip(magnitudes, rep.weights):
                self.assertAlmostEqual(magnitude * abs(complex(weight)), 1.0, places=12)

            x = xp.linspace(-1.0, 1.0, 23)
            y = xp.linspace(1.0, -1.0, 23)
            rows, columns = rep.rows(x), rep.columns(y)
            ref = xp.sum(rows * rep.weights * columns, axis=1)
            self.assertLess(float(xp.max(xp.abs(rep(x, y) - ref))), 1e-12)
            self.assertLess(float(xp.max(xp.abs(rep(x, y) - func(x, y)))), 1e-8)

    def test_residual_on_grid(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, 0.0, 2.0))
            func = lambda x, y: xp.exp(x * y)
            rep = rr.decompose(func, rect, tolerance=1e-10)
            self.assertTrue(rep.converged)
            self.assertAlmostEqual(rep.tolerance, 1e-10 * rep.first_pivot)

            x, y = rr.sampling_grid(rect, 129).axes(xp)
            X, Y = xp.meshgrid(x, y, indexing="ij")
            residual = float(xp.max(xp.abs(rep.residual_at(X, Y))))
            self.assertLessEqual(residual, rep.tolerance)

            # the residual has nothing left to extract at the achieved tolerance
            again = rr.decompose(rep.residual_at, rect, tolerance=rep.tolerance, mode="absolute")
            self.assertEqual(again.rank, 0)
            self.assertTrue(again.converged)
            self.assertLessEqual(again.first_pivot, rep.tolerance)

    def test_absolute(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            with rr.separable(tolerance=1e-6, mode="absolute"):
                rep = rr.decompose(lambda x, y: 10.0 * xp.exp(x * y), rect)
            self.assertEqual(rep.tolerance, 1e-6)
            self.assertLessEqual(rep.residual, 1e-6)

    def test_complex(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: xp.exp(1j * x * y)
            rep = rr.decompose(func, rect)
            self.assertTrue(rep.converged)
            self.assertTrue(xp.isdtype(rep.weights.dtype, "complex floating"))
            self.assertLess(self.max_error(xp, rep, func, rect, 33), 1e-8)

    def test_zero(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 1.0, 0.0, 1.0))
            for func in [lambda x, y: 0.0 * x * y, lambda x, y: 0.0]:
                rep = rr.decompose(func, rect)
                self.assertEqual(rep.rank, 0)
                self.assertTrue(rep.converged)
                self.assertEqual(rep.residual, 0.0)
                self.assertEqual(rep.first_pivot, 0.0)
                x = xp.linspace(0.0, 1.0, 5)
                self.assertTrue(bool(xp.all(rep(x, x) == 0.0)))
                self.assertEqual(list(rep), [])

    def test_subnormal(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((0.0, 1.0, 0.0, 1.0))
            with warnings.catch_warnings():
                warnings.simplefilter("error", RankCappedWarning)
                rep = rr.decompose(lambda x, y: 1e-310 * (1.0 + x) * (1.0 + y), rect, max_rank=5)
            self.assertEqual(rep.rank, 0)
            self.assertTrue(rep.converged)
            self.assertGreater(rep.first_pivot, 0.0)
            x = xp.linspace(0.0, 1.0, 5)
            self.assertTrue(bool(xp.all(rep(x, x) == 0.0)))

            func = lambda x, y: x * y
            one = xp.asarray([0.5])
            zero = xp.zeros((1, 1))
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", RuntimeWarning)
                self.assertRaises(ValueError, SeparableRepresentation, func, rect,
                                  one, one, xp.asarray([1e-310]), zero, zero,
                                  residual=0.0, first_pivot=1e-310, tolerance=0.0)

    def test_rank_capped(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: 1.0 / (1.0 + 25.0 * (x - y)**2)
            with self.assertWarns(RankCappedWarning):
                rep = rr.decompose(func, rect, max_rank=3)
            self.assertEqual(rep.rank, 3)
            self.assertTrue(rep.rank_capped)
            self.assertFalse(rep.converged)
            self.assertGreater(rep.residual, rep.tolerance)

    def test_callback(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            calls = []
            def callback(rank, pivot):
                calls.append((rank, pivot))
                return rank == 2
            rep = rr.decompose(lambda x, y: xp.exp(x * y), rect, callback=callback)
            self.assertEqual(rep.rank, 2)
            self.assertTrue(rep.interrupted)
            self.assertFalse(rep.rank_capped)
            self.assertFalse(rep.converged)
            self.assertEqual([rank for rank, _ in calls], [1, 2])
            self.assertCountEqual([pivot for _, pivot in calls], list(rep.pivots))
            extracted = sorted(rep, key=lambda factor: factor.step)
            self.assertEqual([pivot for _, pivot in calls], [factor.pivot for factor in extracted])

    def test_workers(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: xp.exp(x * y) + xp.sin(3.0 * x + y)
            with rr.separable(chunk_size=16):
                rep1 = rr.decompose(func, rect)
            with rr.separable(workers=4, chunk_size=16):
                rep2 = rr.decompose(func, rect)
            self.assertEqual(rep1.rank, rep2.rank)
            self.assertEqual(list(rep1.pivots), list(rep2.pivots))

    def test_immutable(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            rep = rr.decompose(lambda x, y: xp.exp(x * y), rect)
            with self.assertRaises(AttributeError):
                rep._xs = xp.zeros(1) # type: ignore
            with self.assertRaises(AttributeError):
                rep.tolerance = 1.0 # type: ignore
            with self.assertRaises(AttributeError):
                rep[0].pivot_weight = 1.0 # type: ignore

            weights = rep.weights
            weights[0] = 0.0
            self.assertNotEqual(complex(rep.weights[0]), 0.0)

    def test_invalid(self):
        for rr in self.rankreduce:
            xp = rr.namespace
            rect = rr.rectangle((-1.0, 1.0, -1.0, 1.0))
            func = lambda x, y: xp.exp(x * y)
            self.assertRaises(ValueError, rr.decompose, func, rect, tolerance=-1.0)
            self.assertRaises(ValueError, rr.decompose, func, rect, max_rank=0)
            self.assertRaises(ValueError, SeparableApproximator, grid_size=1)
            self.assertRaises(ValueError, SeparableApproximator, workers=0)
            approximator = SeparableApproximator(grid_size=(17, 33))
            self.assertRaises(ValueError, approximator, xp, func, rect, mode="relativ")
            rep = approximator(xp, func, rect, tolerance=1e-8)
            self.assertTrue(rep.converged)

def rect_axes(xp, rect, size):
    return tuple(xp.linspace(domain.lower, domain.upper, size)
                 for domain in (rect.xdomain, rect.ydomain))

if __name__ == '__main__':
    unittest.main()
