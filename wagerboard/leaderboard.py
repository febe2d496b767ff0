import math
from dataclasses import dataclass
from decimal import ROUND_HALF_CEILING, ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Callable, Dict, Iterable, List, Union

from wagerboard.rainbet import entry_username, entry_wagered
from wagerboard.xfun import record_deposit, record_username, record_wager

Number = Union[int, float]

MASK_PLACEHOLDER = "****"
TOP_N = 10


def mask_username(username: str) -> str:
    """
    Mask username for privacy: UsernameA -> Us***eA
    Shows first 2 and last 2 characters, drops the middle entirely.
    Lengths are counted in code points, so unicode names are sliced
    on character boundaries.
    """
    if not username:
        return MASK_PLACEHOLDER
    if len(username) <= 4:
        return username
    return username[:2] + "***" + username[-2:]


@dataclass(frozen=True)
class LeaderboardEntry:
    username: str
    wagered: Number
    # Kept for frontend compatibility; always equal to wagered.
    weighted_wager: Number

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "wagered": self.wagered,
            "weightedWager": self.weighted_wager,
        }


def round_amount(total: float, decimals: int = 0) -> Number:
    """
    Round on the exact binary value of total.
    decimals=0 gives an int rounded half toward +infinity (-2.5 -> -2);
    anything else a float rounded half away from zero to that many places.
    Non-finite totals count as 0.
    """
    if not math.isfinite(total):
        total = 0
    exact = Decimal(total)
    # Enough digits to quantize any finite float without InvalidOperation.
    with localcontext() as ctx:
        ctx.prec = 400
        if decimals == 0:
            return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_CEILING))
        return float(exact.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP))


def build_leaderboard(
    records: Iterable[Any],
    value_of: Callable[[Any], float],
    name_of: Callable[[Any], str],
    decimals: int = 0,
) -> List[LeaderboardEntry]:
    """
    Group records by their unmasked name, sum value_of per group and rank.

    Grouping happens before masking: names that mask alike stay separate,
    and every record without a resolvable name lands in one group.
    Whole-unit boards rank on the raw sum; boards with decimals rank on
    the rounded amount, so totals equal to the cent tie.
    After ranking, the list is cut to the top 10 and the first two
    places are swapped for display.
    """
    totals: Dict[str, float] = {}
    for record in records:
        name = name_of(record)
        totals[name] = totals.get(name, 0) + value_of(record)

    rows = [(name, total, round_amount(total, decimals)) for name, total in totals.items()]
    rank_on = (lambda row: row[2]) if decimals else (lambda row: row[1])
    # sorted() is stable, so equal keys keep first-seen order
    ranked = sorted(rows, key=rank_on, reverse=True)[:TOP_N]
    if len(ranked) >= 2:
        ranked[0], ranked[1] = ranked[1], ranked[0]

    return [
        LeaderboardEntry(username=mask_username(name), wagered=amount, weighted_wager=amount)
        for name, _, amount in ranked
    ]


def rainbet_leaderboard(entries: Iterable[Dict[str, Any]]) -> List[LeaderboardEntry]:
    return build_leaderboard(entries, value_of=entry_wagered, name_of=entry_username)


def xfun_deposit_leaderboard(records: Iterable[Any]) -> List[LeaderboardEntry]:
    return build_leaderboard(records, value_of=record_deposit, name_of=record_username, decimals=2)


def xfun_wager_leaderboard(records: Iterable[Any]) -> List[LeaderboardEntry]:
    return build_leaderboard(records, value_of=record_wager, name_of=record_username, decimals=2)


XFUN_METRICS: Dict[str, Callable[[Iterable[Any]], List[LeaderboardEntry]]] = {
    "deposited": xfun_deposit_leaderboard,
    "wagered": xfun_wager_leaderboard,
}
