import warnings
import numpy
import pandas
from scipy import linalg
from typing import Union, Optional
from ._utils import _as_monthly
from .errors import InsufficientDataError, InvalidConfigurationError, NonStationaryMatrixError, EmptyTransitionRowWarning
from .states import State, MONTHS, N_STATES


class TransitionMatrices:
    """
    Monthly Markov transition matrices. entry `[month][i, j]` is the probability of moving from state `i` on one
    day to state `j` on the next day, where `month` is the month of the next day.
    """

    def __init__(self, matrices: numpy.ndarray):
        matrices = numpy.array(matrices, dtype=float)
        assert matrices.shape == (12, N_STATES, N_STATES), "one 3x3 matrix is needed for each of the 12 months"
        for month in MONTHS:
            _check_stochastic(matrices[month - 1])
        matrices.setflags(write=False)

        self.matrices = matrices
        """read-only array of shape `(12, 3, 3)`. month `m` is at position `m - 1`"""

    def __getitem__(self, month: int) -> numpy.ndarray:
        if month not in MONTHS:
            raise KeyError(f"month has to be between 1 and 12, got {month}")
        return self.matrices[month - 1]

    def __iter__(self):
        return iter(self.matrices)

    def __len__(self):
        return 12

    def adjust(self,
               dry_spell_changes: Union[float, list[float]] = 1,
               wet_spell_changes: Union[float, list[float]] = 1) -> "TransitionMatrices":
        """
        change the expected dry and wet spell durations of each month. see `adjust_transition()`

        Args:
            dry_spell_changes: ratio of desired to current mean dry spell length - single value or one per month
            wet_spell_changes: ratio of desired to current mean wet spell length - single value or one per month

        Returns:
            new `TransitionMatrices`
        """
        dry_spell_changes = _as_monthly(dry_spell_changes, "dry_spell_changes")
        wet_spell_changes = _as_monthly(wet_spell_changes, "wet_spell_changes")
        return TransitionMatrices(numpy.stack([adjust_transition(self[month],
                                                                 dry_spell=dry_spell_changes[month - 1],
                                                                 wet_spell=wet_spell_changes[month - 1])
                                               for month in MONTHS]))

    def equilibria(self, method: str = "eigen") -> pandas.DataFrame:
        """stationary distribution of each month, with months as index and one column per state"""
        return pandas.DataFrame([state_equilibrium(matrix, method=method) for matrix in self.matrices],
                                index=pandas.Index(MONTHS, name="month"),
                                columns=[state.label for state in State])

    def probability_wet(self) -> numpy.ndarray:
        """long-run probability of a wet or extreme day in each month"""
        return numpy.array([probability_wet(equilibrium) for equilibrium in self.equilibria().to_numpy()])

    def to_frame(self) -> pandas.DataFrame:
        """long `DataFrame` with `month` and `from` as index and one column per destination state"""
        labels = [state.label for state in State]
        index = pandas.MultiIndex.from_product([MONTHS, labels], names=["month", "from"])
        return pandas.DataFrame(self.matrices.reshape(12 * N_STATES, N_STATES), index=index, columns=labels)

    def __repr__(self):
        return "TransitionMatrices\n" + self.to_frame().round(4).to_string()


def _check_stochastic(matrix: numpy.ndarray, tol: float = 1e-9):
    if matrix.shape != (N_STATES, N_STATES):
        raise NonStationaryMatrixError(f"transition matrix should be {N_STATES}x{N_STATES}, got {matrix.shape}")
    if numpy.isnan(matrix).any() or (matrix < -tol).any() or (matrix > 1 + tol).any():
        raise NonStationaryMatrixError("transition probabilities must be between 0 and 1")
    if not numpy.allclose(matrix.sum(axis=1), 1.0, rtol=0, atol=tol):
        raise NonStationaryMatrixError("each row of a transition matrix must sum to 1")


def fit_transitions(states: Union[pandas.Series, numpy.ndarray],
                    months: Union[pandas.Series, numpy.ndarray],
                    prev_states: Optional[Union[pandas.Series, numpy.ndarray]] = None) -> TransitionMatrices:
    """
    estimate monthly transition matrices from a sequence of daily states. a transition belongs to the month of the
    day it leads to, so transitions across month boundaries are counted in the later month.

    if a state never occurs as the starting state of a transition in some month, that row is copied from the
    nearest month where the state does occur.

    Args:
        states: daily `State` values
        months: month of each day
        prev_states: state of the previous day. missing values mark days whose previous day is not in the record.
            if not provided, consecutive entries of `states` are treated as consecutive days.

    Returns:
        `TransitionMatrices`
    """
    months = numpy.asarray(months, dtype=int)
    if prev_states is None:
        to_states = numpy.asarray(states, dtype=int)[1:]
        from_states = numpy.asarray(states, dtype=int)[:-1]
        months = months[1:]
    else:
        prev_states = pandas.Series(prev_states, dtype="Float64")
        is_valid = prev_states.notna().to_numpy()
        to_states = numpy.asarray(states, dtype=int)[is_valid]
        from_states = prev_states[is_valid].to_numpy(dtype=int)
        months = months[is_valid]

    counts = numpy.zeros((12, N_STATES, N_STATES))
    numpy.add.at(counts, (months - 1, from_states, to_states), 1)

    totals = counts.sum(axis=2)
    for state in State:
        empty_months = [month for month in MONTHS if totals[month - 1, state] == 0]
        if not empty_months:
            continue
        populated = [month for month in MONTHS if totals[month - 1, state] > 0]
        if not populated:
            raise InsufficientDataError(f"no transitions from state '{state.label}' found in any month")
        for month in empty_months:
            donor = min(populated, key=lambda m: (min(abs(m - month), 12 - abs(m - month)), m))
            warnings.warn(f"no transitions from state '{state.label}' in month {month}, "
                          f"using transitions from month {donor}", EmptyTransitionRowWarning)
            counts[month - 1, state] = counts[donor - 1, state]
            totals[month - 1, state] = totals[donor - 1, state]

    return TransitionMatrices(counts / totals[:, :, numpy.newaxis])


def state_equilibrium(matrix: numpy.ndarray,
                      method: str = "eigen",
                      tol: float = 1e-10,
                      max_iter: int = 10000) -> numpy.ndarray:
    """
    stationary distribution `pi` of a transition matrix, such that `pi @ matrix == pi`

    Args:
        matrix: row-stochastic transition matrix
        method: `eigen` for the left eigenvector of eigenvalue 1, `power` for power iteration
        tol: tolerance for the eigenvalue and for convergence of power iteration
        max_iter: maximum number of power iterations

    Returns:
        probability of each state, sums to 1
    """
    matrix = numpy.asarray(matrix, dtype=float)
    _check_stochastic(matrix)

    if method == "eigen":
        values, vectors = linalg.eig(matrix, left=True, right=False)
        ind = numpy.argmin(numpy.abs(values - 1))
        if abs(values[ind] - 1) > max(tol, 1e-8):
            raise NonStationaryMatrixError("transition matrix has no eigenvalue equal to 1")
        n_unit = numpy.sum(numpy.abs(values - 1) <= max(tol, 1e-8))
        if n_unit > 1:
            raise NonStationaryMatrixError("transition matrix is reducible, its stationary distribution is not unique")
        equilibrium = numpy.real(vectors[:, ind])
        equilibrium = equilibrium / equilibrium.sum()
    elif method == "power":
        equilibrium = numpy.full(matrix.shape[0], 1 / matrix.shape[0])
        for _ in range(max_iter):
            updated = equilibrium @ matrix
            if numpy.abs(updated - equilibrium).max() < tol:
                equilibrium = updated
                break
            equilibrium = updated
        else:
            raise NonStationaryMatrixError(f"power iteration did not converge in {max_iter} iterations")
        equilibrium = equilibrium / equilibrium.sum()
    else:
        raise ValueError(f"'method' has to be in ['eigen', 'power'], got '{method}'")

    if (equilibrium < -1e-9).any() or not numpy.isfinite(equilibrium).all():
        raise NonStationaryMatrixError("stationary distribution has negative entries")
    return numpy.clip(equilibrium, 0, None) / numpy.clip(equilibrium, 0, None).sum()


def probability_wet(equilibrium: numpy.ndarray) -> float:
    """long-run probability of a wet or extreme day"""
    return float(equilibrium[State.WET] + equilibrium[State.EXTREME])


def adjust_transition(matrix: numpy.ndarray, dry_spell: float = 1, wet_spell: float = 1) -> numpy.ndarray:
    """
    change the expected spell durations of a transition matrix. the expected length of a spell in state `s` is
    `1 / (1 - p)` where `p` is the probability of staying in `s`, so scaling the length by `f` sets
    `p = 1 - (1 - p) / f`. the dry state uses `dry_spell`, the wet and extreme states both use `wet_spell`.

    the rest of each row is shared between the other two states in the same proportion as before. rows where `p` is
    already `1` are returned unchanged.

    Args:
        matrix: row-stochastic transition matrix
        dry_spell: ratio of desired to current mean dry spell length
        wet_spell: ratio of desired to current mean wet spell length

    Returns:
        new adjusted transition matrix
    """
    for name, factor in (("dry_spell", dry_spell), ("wet_spell", wet_spell)):
        if not factor > 0:
            raise InvalidConfigurationError(f"'{name}' must be greater than 0, got {factor}")

    matrix = numpy.array(matrix, dtype=float)
    _check_stochastic(matrix)

    factors = {State.DRY: dry_spell, State.WET: wet_spell, State.EXTREME: wet_spell}
    for state, factor in factors.items():
        others = [s for s in State if s != state]
        leave = matrix[state, others].sum()
        if factor == 1 or leave <= 0:
            continue

        new_stay = min(max(1 - leave / factor, 0.0), 1.0)
        matrix[state, others] = matrix[state, others] * (1 - new_stay) / leave
        matrix[state, state] = new_stay

    return matrix
