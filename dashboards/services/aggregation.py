"""
Declarative grouping engine used by every analytics report.

A report describes *what* to group with a :class:`GroupSpec` (a key selector
plus the measures to reduce) and :func:`aggregate` does the rest. Records
can be model instances or ``.values()`` dicts.

Rules shared by every report:

* measure values go through lenient parsing, so text like ``"10 kg"`` counts
  as 10 and unparsable text counts as 0
* a missing key (``None`` or blank) groups under ``UNKNOWN``
* empty sums and averages are 0
* buckets are ordered by the primary measure's sum, descending, with ties
  left in first-seen order
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from core.parsing import parse_number

UNKNOWN = 'Unknown'

SUM = 'sum'
AVG = 'avg'
MIN = 'min'
MAX = 'max'
REDUCERS = (SUM, AVG, MIN, MAX)


def value_of(record, name: str):
    """Read ``name`` from a dict row or an object attribute."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _selector(source: Union[str, Callable]) -> Callable:
    if callable(source):
        return source
    return lambda record: value_of(record, source)


@dataclass(frozen=True)
class Measure:
    """A numeric field to reduce within each bucket."""
    name: str
    source: Union[str, Callable, None] = None
    reducers: Tuple[str, ...] = (SUM,)

    def __post_init__(self):
        unknown = set(self.reducers) - set(REDUCERS)
        if unknown:
            raise ValueError(f"Unrecognized reducer(s) for {self.name}: {sorted(unknown)}")

    def read(self, record) -> float:
        return parse_number(_selector(self.source or self.name)(record))


@dataclass(frozen=True)
class GroupSpec:
    """
    How to bucket a record set.

    ``key`` is a field name or a callable returning the group key.
    ``primary`` names the measure whose sum orders the output; when unset
    buckets are ordered by count. ``sort=False`` keeps first-seen order.
    """
    key: Union[str, Callable]
    measures: Tuple[Measure, ...] = ()
    primary: Optional[str] = None
    sort: bool = True

    def key_for(self, record):
        key = _selector(self.key)(record)
        if key is None or (isinstance(key, str) and not key.strip()):
            return UNKNOWN
        return key


@dataclass
class Bucket:
    """One group produced by :func:`aggregate`."""
    key: Any
    count: int = 0
    sums: Dict[str, float] = field(default_factory=dict)
    mins: Dict[str, float] = field(default_factory=dict)
    maxs: Dict[str, float] = field(default_factory=dict)

    def add(self, record, measures: Sequence[Measure]):
        self.count += 1
        for measure in measures:
            value = measure.read(record)
            self.sums[measure.name] = self.sums.get(measure.name, 0.0) + value
            if measure.name not in self.mins or value < self.mins[measure.name]:
                self.mins[measure.name] = value
            if measure.name not in self.maxs or value > self.maxs[measure.name]:
                self.maxs[measure.name] = value

    def sum(self, name: str) -> float:
        return self.sums.get(name, 0.0)

    def avg(self, name: str) -> float:
        if not self.count:
            return 0.0
        return self.sum(name) / self.count

    def min(self, name: str) -> float:
        return self.mins.get(name, 0.0)

    def max(self, name: str) -> float:
        return self.maxs.get(name, 0.0)

    def reduced(self, measure: Measure) -> Dict[str, float]:
        """
        Requested reductions of one measure, keyed ``<name>`` for the sum and
        ``avg_<name>``, ``min_<name>``, ``max_<name>`` for the rest.
        """
        out = {}
        for reducer in measure.reducers:
            if reducer == SUM:
                out[measure.name] = self.sum(measure.name)
            else:
                out[f'{reducer}_{measure.name}'] = getattr(self, reducer)(measure.name)
        return out

    def as_dict(self, measures: Sequence[Measure] = (), key_name: str = 'key') -> Dict[str, Any]:
        data = {key_name: self.key, 'count': self.count}
        for measure in measures:
            data.update(self.reduced(measure))
        return data


def aggregate(records: Iterable, spec: GroupSpec) -> List[Bucket]:
    """Group ``records`` according to ``spec``."""
    buckets: Dict[Any, Bucket] = {}
    for record in records:
        key = spec.key_for(record)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = Bucket(key=key)
        bucket.add(record, spec.measures)

    result = list(buckets.values())
    if spec.sort:
        if spec.primary:
            result.sort(key=lambda b: b.sum(spec.primary), reverse=True)
        else:
            result.sort(key=lambda b: b.count, reverse=True)
    return result


def totals(records: Iterable, measures: Sequence[Measure]) -> Bucket:
    """Reduce a whole record set to a single bucket."""
    bucket = Bucket(key=None)
    for record in records:
        bucket.add(record, measures)
    return bucket


def index_buckets(buckets: Iterable[Bucket]) -> Dict[Any, Bucket]:
    return {bucket.key: bucket for bucket in buckets}


def zero_filled(buckets: Iterable[Bucket], keys: Iterable) -> List[Bucket]:
    """One bucket per key in ``keys`` order, empty where nothing was grouped."""
    by_key = index_buckets(buckets)
    return [by_key.get(key) or Bucket(key=key) for key in keys]
