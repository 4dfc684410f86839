from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import inspect

from aquafarm.schemas.events import DailyHistoryEntry, DailyTotals
from aquafarm.services.metrics import (
    EVENT_CATEGORIES,
    UnitEvents,
    chronological,
    current_average_weight,
    event_moment,
    total_costs,
    total_deaths,
    total_feed_kg,
    total_revenue,
    total_sold_kg,
)


def _event_dict(event: Any) -> Dict[str, Any]:
    if isinstance(event, Mapping):
        return dict(event)
    if isinstance(event, BaseModel):
        return event.model_dump()
    # fila ORM
    return {attr.key: getattr(event, attr.key) for attr in inspect(event).mapper.column_attrs}


def daily_history(
    events: UnitEvents,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[DailyHistoryEntry]:
    """
    Actividad de la jaula agrupada por día (ascendente), con totales diarios.
    `start` y `end` son inclusivos; los eventos sin fecha se ignoran.
    """
    by_day: Dict[date, Dict[str, list]] = defaultdict(lambda: {name: [] for name in EVENT_CATEGORIES})

    for category in EVENT_CATEGORIES:
        for event in chronological(getattr(events, category)):
            moment = event_moment(event)
            if moment == datetime.min:
                continue
            day = moment.date()
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
            by_day[day][category].append(event)

    history = []
    for day in sorted(by_day):
        grouped = by_day[day]
        totals = DailyTotals(
            feed_kg=total_feed_kg(grouped["feeding"]),
            deaths=total_deaths(grouped["mortality"]),
            sold_kg=total_sold_kg(grouped["sales"]),
            revenue=total_revenue(grouped["sales"]),
            costs=total_costs(grouped["costs"]),
            average_weight_kg=(
                current_average_weight(None, grouped["weighings"]) if grouped["weighings"] else None
            ),
        )
        history.append(
            DailyHistoryEntry(
                date=day,
                totals=totals,
                **{name: [_event_dict(e) for e in grouped[name]] for name in EVENT_CATEGORIES},
            )
        )
    return history
