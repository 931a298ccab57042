"""State-diff polling engine."""

from nft_monitor.services.polling.polling_runner import PollingRunner
from nft_monitor.services.polling.state_diff import (
    HoldingOutcome,
    SupplyOutcome,
    evaluate_holding_watch,
    evaluate_supply_watch,
)
from nft_monitor.services.polling.state_diff_poller import PollCycleResult, StateDiffPoller

__all__ = [
    "HoldingOutcome",
    "PollCycleResult",
    "PollingRunner",
    "StateDiffPoller",
    "SupplyOutcome",
    "evaluate_holding_watch",
    "evaluate_supply_watch",
]
