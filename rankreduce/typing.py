# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

"""typing has all classes used in the external API of rankreduce."""

from .domain import Domain, Rectangle
from .samplinggrid import SamplingGrid
from .quadrature import Quadrature, GaussLegendre
from .quasimatrix import Quasimatrix

from .matrixeigenvalues import MatrixEigenvalues
from .eigvalssolver import EigvalsSolver
from .eigenresult import EigenResult
from .pairing import Pairing, MatrixPairing, QuadraturePairing

from .separablerepresentation import SeparableRepresentation, SeparableFactor, Pivot
from .separableapproximator import SeparableApproximator
from .rankreducedeigensolver import RankReducedEigensolver

from .options import Options, SeparableOptions, QuadratureOptions, EigenOptions, OptionType
from .errors import DimensionMismatch, SolverFailure, RankCappedWarning

from .rankreduce import RankReduce
