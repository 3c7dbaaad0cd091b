"""
Stepwise AIC Selection

Bidirectional stepwise search over logistic models. Each step evaluates
every single-variable drop (in model order) and every single-variable add
(in scope order) and applies the move with the lowest AIC when it improves
on the current model. The first move checked wins ties, so the search is
deterministic for a given scope order.
"""

from typing import List, Optional, Sequence
from dataclasses import dataclass
import logging

import pandas as pd

from pd_scorecard.core.exceptions import ConfigurationError
from pd_scorecard.models.logistic import LogisticModel, fit_logistic


logger = logging.getLogger(__name__)

DIRECTIONS = ('both', 'forward', 'backward')


@dataclass
class StepwiseResult:
    """Outcome of a stepwise search."""
    model: LogisticModel
    selected: List[str]
    trace: pd.DataFrame

    @property
    def n_steps(self) -> int:
        return len(self.trace) - 1


def stepwise_aic(
    df: pd.DataFrame,
    scope: Sequence[str],
    target_column: str,
    direction: str = 'both',
    start: Optional[Sequence[str]] = None,
    max_steps: int = 1000,
    max_iter: int = 100,
) -> StepwiseResult:
    """
    Stepwise variable selection by AIC.

    Args:
        df: Training frame with WoE columns and the target
        scope: Candidate variables, in the order adds are checked
        target_column: Binary label column
        direction: 'both', 'forward' or 'backward'
        start: Starting variables (default: the full scope)
        max_steps: Maximum number of applied moves
        max_iter: IRLS iteration limit per fit

    Returns:
        StepwiseResult with the final model, selected variables and a trace
        table (Step, Action, Variables, N_Variables, AIC).
    """
    if direction not in DIRECTIONS:
        raise ConfigurationError(f"direction must be one of {DIRECTIONS}, got '{direction}'")

    scope = list(scope)
    current = list(scope if start is None else start)
    unknown = [v for v in current if v not in scope]
    if unknown:
        raise ConfigurationError(f"Start variables not in scope: {unknown}")

    model = fit_logistic(df, current, target_column, max_iter=max_iter)
    trace = [_trace_row(0, 'start', current, model.aic)]
    logger.info(f"Stepwise start: {len(current)} variables, AIC={model.aic:.2f}")

    for step in range(1, max_steps + 1):
        moves = []
        if direction in ('both', 'backward'):
            for variable in current:
                moves.append((f"- {variable}", [v for v in current if v != variable]))
        if direction in ('both', 'forward'):
            for variable in scope:
                if variable not in current:
                    moves.append((f"+ {variable}", current + [variable]))

        best = None
        for action, candidate in moves:
            candidate_model = fit_logistic(df, candidate, target_column, max_iter=max_iter)
            if best is None or candidate_model.aic < best[2].aic:
                best = (action, candidate, candidate_model)

        if best is None or best[2].aic >= model.aic:
            break

        action, current, model = best
        trace.append(_trace_row(step, action, current, model.aic))
        logger.info(f"Step {step}: {action} -> AIC={model.aic:.2f}")

    logger.info(f"Stepwise selected {len(current)} variables: {current}")
    return StepwiseResult(
        model=model,
        selected=list(current),
        trace=pd.DataFrame(trace),
    )


def _trace_row(step: int, action: str, variables: List[str], aic: float) -> dict:
    return {
        'Step': step,
        'Action': action,
        'Variables': ' + '.join(variables),
        'N_Variables': len(variables),
        'AIC': aic,
    }
