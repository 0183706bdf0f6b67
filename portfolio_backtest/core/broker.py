# portfolio_backtest/core/broker.py
"""
Executing broker combining an execution strategy with a charges strategy.
"""

import logging
from typing import Optional

from .charges import ChargesStrategy, NoCharges
from .execution import ExecutionStrategy, FillAtLast
from .trade import Trade


logger = logging.getLogger(__name__)


class Broker:
    """
    Turns an approved trade into portfolio changes.

    The trade is filled first and charged second. Charges are not
    applied when the fill fails.
    """

    def __init__(
        self,
        charges: Optional[ChargesStrategy] = None,
        execution: Optional[ExecutionStrategy] = None
    ):
        """
        Initialize broker.

        Args:
            charges: Charges strategy, NoCharges if omitted
            execution: Execution strategy, FillAtLast if omitted
        """
        self.charges = charges if charges is not None else NoCharges()
        self.execution = execution if execution is not None else FillAtLast()

    @classmethod
    def default(cls) -> "Broker":
        """Broker with no charges that fills at the last price."""
        return cls(NoCharges(), FillAtLast())

    def get_charges(self) -> ChargesStrategy:
        return self.charges

    def get_execution(self) -> ExecutionStrategy:
        return self.execution

    def execute(self, trade: Trade) -> None:
        """
        Fill and charge a trade.

        Raises:
            ExecutionError: If the fill fails, in which case nothing is charged
            ChargesError: If charges cannot be applied after a fill
        """
        self.execution.execute(trade)
        self.charges.charge(trade)

    def __repr__(self) -> str:
        return f"Broker({self.charges!r}, {self.execution!r})"
