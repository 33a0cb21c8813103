# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .rankreduce import RankReduce
from .errors import DimensionMismatch, SolverFailure, RankCappedWarning

__all__ = ["RankReduce", "DimensionMismatch", "SolverFailure", "RankCappedWarning"]
