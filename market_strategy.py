from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from market_graph import Graph


logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.01
DEFAULT_MAX_ROUNDS = 100_000
# allow tiny negative surplus to count as the reserve itself
SURPLUS_TOL = 1e-12


class InvalidGraphError(ValueError):
    """The graph handed to the auction cannot be split into two sides."""


class InvalidParameterError(ValueError):
    """Bad auction parameter."""


class NotConverged(RuntimeError):
    """The round budget ran out while buyers were still being reassigned."""

    def __init__(self, rounds: int, assignment: Dict[Hashable, Optional[Hashable]]):
        super().__init__(
            f"Did not converge within {rounds} rounds. Consider a larger epsilon or round budget."
        )
        self.rounds = rounds
        self.assignment = assignment


class Side(Enum):
    BUYER = "buyer"
    OBJECT = "object"


SideClassifier = Callable[[Hashable], Side]


# ------------------------------
# Side classification policies
# ------------------------------

def integer_ids_are_buyers(vid: Hashable) -> Side:
    """Integer ids bid, everything else is bid on. bool is not counted as an integer id."""
    if isinstance(vid, int) and not isinstance(vid, bool):
        return Side.BUYER
    return Side.OBJECT


def buyers_in(buyers: Iterable[Hashable]) -> SideClassifier:
    """Classifier that puts exactly the given ids on the buyer side."""
    members = frozenset(buyers)

    def classify(vid: Hashable) -> Side:
        return Side.BUYER if vid in members else Side.OBJECT

    return classify


# ------------------------------
# Parameter validation
# ------------------------------

def _check_epsilon(epsilon: float) -> float:
    if isinstance(epsilon, bool):
        raise InvalidParameterError(f"epsilon must be a number, got {epsilon!r}")
    try:
        eps = float(epsilon)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"epsilon must be a number, got {epsilon!r}")
    if math.isnan(eps) or math.isinf(eps) or eps <= 0:
        raise InvalidParameterError(f"epsilon must be finite and > 0, got {epsilon!r}")
    return eps


def _check_reserve(reserve: Optional[float]) -> Optional[float]:
    if reserve is None:
        return None
    if isinstance(reserve, bool):
        raise InvalidParameterError(f"reserve must be a number or None, got {reserve!r}")
    try:
        value = float(reserve)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"reserve must be a number or None, got {reserve!r}")
    # -inf is allowed and means "bid at any price"
    if math.isnan(value) or value == math.inf:
        raise InvalidParameterError(f"reserve must be a number below +inf, got {reserve!r}")
    return value


def _check_max_rounds(max_rounds: Optional[int]) -> Optional[int]:
    if max_rounds is None:
        return None
    if isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds < 1:
        raise InvalidParameterError(f"max_rounds must be a positive int or None, got {max_rounds!r}")
    return max_rounds


# ------------------------------
# Auction solver
# ------------------------------

class Auction:
    """Epsilon auction for the assignment problem on a bipartite Graph.

    Unassigned buyers repeatedly bid for the adjacent object with the best
    value (edge weight minus current price). A winning bid evicts the
    object's current holder and raises the object's price by ``epsilon``.
    The loop stops after a sweep over all buyers changes nothing. The
    total value found is within ``len(buyers) * epsilon`` of the optimum.

    ``classify`` decides which vertices bid; it defaults to treating
    integer ids as buyers. ``max_rounds`` bounds the number of sweeps
    (``None`` means no bound); running out raises NotConverged.

    ``reserve`` is the value of staying out of the market: a buyer whose
    best value drops below it stops bidding and stays unassigned. By
    default (``None``) it is derived from the graph's buyer-to-object
    weights (see ``_default_floor``): below every weight, so an unsold
    object is always worth a bid whatever the sign of the weights, yet
    finite, so prices stay bounded and markets where buyers outnumber the
    objects they can reach still end. A number overrides it;
    ``float("-inf")`` lets buyers bid at any price, and then only
    ``max_rounds`` stops such a market.
    """

    def __init__(
        self,
        graph: Graph,
        epsilon: float = DEFAULT_EPSILON,
        classify: SideClassifier = integer_ids_are_buyers,
        max_rounds: Optional[int] = DEFAULT_MAX_ROUNDS,
        reserve: Optional[float] = None,
    ):
        self.epsilon = _check_epsilon(epsilon)
        self.max_rounds = _check_max_rounds(max_rounds)
        self.reserve = _check_reserve(reserve)
        if not graph.is_bipartite():
            raise InvalidGraphError("The graph must be bipartite for the auction algorithm.")
        self.graph = graph
        self.classify = classify
        self._reset()

    def _reset(self) -> None:
        sides = {v: self.classify(v) for v in self.graph}
        self.buyers: List[Hashable] = [v for v, side in sides.items() if side is Side.BUYER]
        self.objects = frozenset(v for v, side in sides.items() if side is Side.OBJECT)
        self.prices: Dict[Hashable, float] = {v: 0.0 for v in sides}
        self.assignment: Dict[Hashable, Optional[Hashable]] = {b: None for b in self.buyers}
        # object -> buyer currently holding it
        self.owner: Dict[Hashable, Hashable] = {}
        self.floor = self.reserve if self.reserve is not None else self._default_floor()
        self.rounds = 0

    def _default_floor(self) -> float:
        """Reserve low enough that leaving a buyer out never beats assigning it.

        Any matching with one more pair gains at least (lowest weight -
        floor) and loses at most len(buyers) * weight range elsewhere, so
        with this floor the auction keeps as many buyers assigned as the
        graph allows and stays within len(buyers) * epsilon of the best
        such assignment.
        """
        weights = [
            w
            for b in self.buyers
            for obj, w in self.graph.outgoing(b).items()
            if obj in self.objects
        ]
        if not weights:
            return 0.0
        lowest, spread = min(weights), max(weights) - min(weights)
        return lowest - len(self.buyers) * (spread + self.epsilon) - self.epsilon

    # Best adjacent object for a buyer at current prices, first one wins ties
    def _best_object(self, buyer: Hashable) -> Tuple[Optional[Hashable], float]:
        best_value = float("-inf")
        best: Optional[Hashable] = None
        for obj, w in self.graph.outgoing(buyer).items():
            if obj not in self.objects:
                continue
            value = w - self.prices[obj]
            if value > best_value:
                best_value = value
                best = obj
        return best, best_value

    def _award(self, buyer: Hashable, obj: Hashable) -> None:
        previous = self.owner.get(obj)
        if previous is not None:
            self.assignment[previous] = None
        self.assignment[buyer] = obj
        self.owner[obj] = buyer
        self.prices[obj] += self.epsilon

    def _bidding_round(self) -> int:
        changes = 0
        for buyer in self.buyers:
            if self.assignment[buyer] is not None:
                continue
            obj, value = self._best_object(buyer)
            if obj is None:
                continue
            if value < self.floor - SURPLUS_TOL:
                continue
            self._award(buyer, obj)
            changes += 1
        return changes

    def solve(self) -> List[Tuple[Hashable, Hashable]]:
        """Run the auction to a fixed point and return (buyer, object) pairs in buyer order.

        State is rebuilt from the graph on every call. Buyers that never
        reach an object are left out of the result.
        """
        self._reset()
        if not self.buyers:
            return []

        while True:
            if self.max_rounds is not None and self.rounds >= self.max_rounds:
                raise NotConverged(self.rounds, dict(self.assignment))
            self.rounds += 1
            changes = self._bidding_round()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Round %d: %d bids, %d/%d buyers assigned, prices %s",
                    self.rounds, changes, len(self.owner), len(self.buyers),
                    {o: round(self.prices[o], 4) for o in self.owner},
                )
            if not changes:
                break

        pairs = [(b, o) for b, o in self.assignment.items() if o is not None]
        if logger.isEnabledFor(logging.INFO):
            logger.info(
                "Auction converged after %d rounds: %d/%d buyers assigned, total value %.4f",
                self.rounds, len(pairs), len(self.buyers), self.total_value(pairs),
            )
        return pairs

    # ------------------------------
    # Reporting helpers
    # ------------------------------

    def total_value(self, pairs: Optional[Sequence[Tuple[Hashable, Hashable]]] = None) -> float:
        """Sum of edge weights over ``pairs`` (default: the current assignment)."""
        if pairs is None:
            pairs = [(b, o) for b, o in self.assignment.items() if o is not None]
        total = 0.0
        for b, o in pairs:
            w = self.graph.weight(b, o)
            if w is None:
                raise ValueError(f"No edge between {b!r} and {o!r}.")
            total += w
        return total

    def unassigned_buyers(self) -> List[Hashable]:
        return [b for b, o in self.assignment.items() if o is None]
