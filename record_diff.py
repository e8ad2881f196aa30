"""
Route 53 record set model and record set diff engine.

Records from the old zone are paired with records from the new zone by
identity key. Old records without a counterpart are reported as missing,
pairs whose content differs are reported as mismatched. Records that only
exist in the new zone are never reported.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple


# Record set attributes paired with their Route 53 API keys, in API order
API_FIELDS: Tuple[Tuple[str, str], ...] = (
    ('name', 'Name'),
    ('type', 'Type'),
    ('set_identifier', 'SetIdentifier'),
    ('weight', 'Weight'),
    ('region', 'Region'),
    ('geo_location', 'GeoLocation'),
    ('failover', 'Failover'),
    ('multi_value_answer', 'MultiValueAnswer'),
    ('ttl', 'TTL'),
    ('resource_records', 'ResourceRecords'),
    ('alias_target', 'AliasTarget'),
    ('health_check_id', 'HealthCheckId'),
    ('traffic_policy_instance_id', 'TrafficPolicyInstanceId'),
    ('cidr_routing_config', 'CidrRoutingConfig'),
    ('geo_proximity_location', 'GeoProximityLocation'),
)

# Every attribute that takes part in the mismatch check
COMPARED_FIELDS: Tuple[str, ...] = tuple(attr for attr, _ in API_FIELDS)


@dataclass(frozen=True)
class ResourceRecordSet:
    """One Route 53 resource record set, as retrieved"""
    name: str
    type: str
    set_identifier: Optional[str] = None
    weight: Optional[int] = None
    region: Optional[str] = None
    geo_location: Optional[Dict[str, Any]] = None
    failover: Optional[str] = None
    multi_value_answer: Optional[bool] = None
    ttl: Optional[int] = None
    resource_records: Optional[Tuple[str, ...]] = None
    alias_target: Optional[Dict[str, Any]] = None
    health_check_id: Optional[str] = None
    traffic_policy_instance_id: Optional[str] = None
    cidr_routing_config: Optional[Dict[str, Any]] = None
    geo_proximity_location: Optional[Dict[str, Any]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'ResourceRecordSet':
        """Build a record set from a ListResourceRecordSets entry"""
        values = {}
        for attr, key in API_FIELDS:
            if data.get(key) is None:
                continue
            if attr == 'resource_records':
                values[attr] = tuple(rr.get('Value') for rr in data[key])
            else:
                values[attr] = data[key]
        return cls(**values)

    def to_api(self) -> Dict[str, Any]:
        """Render the record set back into the Route 53 API shape"""
        data = {}
        for attr, key in API_FIELDS:
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == 'resource_records':
                value = [{'Value': v} for v in value]
            data[key] = value
        return data

    def values_text(self) -> str:
        """Short human-readable form of the record's payload"""
        if self.alias_target:
            return f"ALIAS {self.alias_target.get('DNSName', '')}"
        if self.resource_records:
            return ', '.join(str(v) for v in self.resource_records)
        return ''


@dataclass(frozen=True)
class MismatchedPair:
    """An old record set and the new record set it was paired with"""
    old: ResourceRecordSet
    new: ResourceRecordSet

    def to_dict(self) -> Dict[str, Any]:
        return {'Old': self.old.to_api(), 'New': self.new.to_api()}


@dataclass(frozen=True)
class RecordDiff:
    """Outcome of comparing an old record collection against a new one"""
    missing: Tuple[ResourceRecordSet, ...] = field(default_factory=tuple)
    mismatched: Tuple[MismatchedPair, ...] = field(default_factory=tuple)

    @property
    def has_differences(self) -> bool:
        return bool(self.missing or self.mismatched)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            'Missing': [record.to_api() for record in self.missing],
            'Mismatched': [pair.to_dict() for pair in self.mismatched],
        }


def identity_key(record: ResourceRecordSet) -> Tuple[str, str, Optional[str]]:
    """Key used to pair old and new record sets.

    Routing-policy record sets share name and type and are told apart by
    their set identifier; simple record sets have no identifier.
    """
    return (record.name, record.type, record.set_identifier)


def records_equal(old: ResourceRecordSet, new: ResourceRecordSet) -> bool:
    """Strict attribute-by-attribute equality over COMPARED_FIELDS.

    No normalization is applied: a trailing dot, a TTL difference or a
    different value order all count as differences.
    """
    for attr in COMPARED_FIELDS:
        if getattr(old, attr) != getattr(new, attr):
            return False
    return True


def find_counterpart(record: ResourceRecordSet,
                     candidates: Sequence[ResourceRecordSet]) -> Optional[ResourceRecordSet]:
    """Return the first candidate sharing the record's identity key"""
    key = identity_key(record)
    for candidate in candidates:
        if identity_key(candidate) == key:
            return candidate
    return None


def compare_records(old_records: Iterable[ResourceRecordSet],
                    new_records: Sequence[ResourceRecordSet],
                    excluded_types: FrozenSet[str] = frozenset()) -> RecordDiff:
    """Compare the old zone's record sets against the new zone's.

    Each old record set is matched to the first new record set with the same
    identity key. Unmatched old records are missing. Matched pairs whose type
    is in ``excluded_types`` are accepted as-is; other pairs are mismatched
    when any compared attribute differs.
    """
    missing = []
    mismatched = []

    for old in old_records:
        new = find_counterpart(old, new_records)
        if new is None:
            missing.append(old)
            continue
        if old.type in excluded_types:
            continue
        if not records_equal(old, new):
            mismatched.append(MismatchedPair(old=old, new=new))

    return RecordDiff(missing=tuple(missing), mismatched=tuple(mismatched))
