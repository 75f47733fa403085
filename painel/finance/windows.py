"""Resolução de filtros de período (hoje/semana/mês/personalizado).

Os limites são calculados no fuso de negócio (America/Sao_Paulo), sempre o
mesmo independente do fuso da máquina, e devolvidos em UTC porque é assim que
as datas ficam gravadas no banco.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from painel.errors import InvalidRange, MissingBound, ValidationError

BUSINESS_TZ = ZoneInfo("America/Sao_Paulo")

SELECTORS = ("today", "week", "month", "custom")

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class TimeWindow:
    start: datetime  # UTC, inclusivo
    end: datetime  # UTC, inclusivo

    def contains(self, instant: datetime) -> bool:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return self.start <= instant <= self.end


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _local_to_utc(day: date, at: time) -> datetime:
    return datetime.combine(day, at, tzinfo=BUSINESS_TZ).astimezone(timezone.utc)


def business_date(instant: datetime) -> date:
    """Dia do calendário de um instante no fuso de negócio."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(BUSINESS_TZ).date()


def local_midnight_utc(day: date) -> datetime:
    """Instante UTC de 00:00 no fuso de negócio; é assim que datas digitadas são gravadas."""
    return _local_to_utc(day, time.min)


def day_window(day: date) -> TimeWindow:
    return TimeWindow(start=_local_to_utc(day, time.min), end=_local_to_utc(day, _END_OF_DAY))


def range_window(start_day: date, end_day: date) -> TimeWindow:
    if end_day < start_day:
        raise InvalidRange("A data final não pode ser anterior à data inicial.")
    return TimeWindow(start=_local_to_utc(start_day, time.min), end=_local_to_utc(end_day, _END_OF_DAY))


def resolve_window(
    selector: str,
    start_date: date | None = None,
    end_date: date | None = None,
    now: datetime | None = None,
) -> TimeWindow:
    if selector not in SELECTORS:
        raise ValidationError(f"Filtro de período inválido: {selector}")

    if selector == "custom":
        if start_date is None or end_date is None:
            raise MissingBound("Informe a data inicial e a data final.")
        return range_window(start_date, end_date)

    today = business_date(now or _utcnow())

    if selector == "today":
        return day_window(today)

    if selector == "week":
        # Semana de segunda a domingo (pt-BR)
        monday = today - timedelta(days=today.weekday())
        return range_window(monday, monday + timedelta(days=6))

    first = today.replace(day=1)
    last = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    return range_window(first, last)
