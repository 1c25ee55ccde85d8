"""
Attendance Integrity Validator (``payroll_engines.anti_spoofing``).

Responsibility
--------------
Decide, from GPS evidence, whether a claimed clock-in location is
trustworthy enough to accept.  Location spoofing cannot be prevented, only
detected: every check raises zero or more flags, each flag carries a fixed
weight, and the weights sum into a 0..100 risk score.

Checks, in order:

1. Basic verification -- haversine distance to the workplace against the
   allowed radius (``OUTSIDE_RADIUS``).
2. Accuracy -- reported accuracy above the ceiling (``GPS_ACCURACY_LOW``).
3. IP location -- caller-supplied IP geolocation far from the claim
   (``IP_LOCATION_MISMATCH``).  No lookup is performed here.
4. Speed -- implied speed between temporally adjacent samples, including
   the claim (``SUSPICIOUS_MOVEMENT``, ``IMPOSSIBLE_SPEED``).
5. Accuracy pattern -- suspiciously perfect, constant accuracy
   (``CONSISTENT_PERFECT_ACCURACY``).
6. Clustering -- nearly every past clock-in from one exact spot
   (``LOCATION_CLUSTERING``).
7. Time pattern -- machine-regular sample intervals (``TIME_PATTERN_ANOMALY``).
8. Devices -- too many device ids or user agents
   (``DEVICE_INCONSISTENCY``, ``USER_AGENT_INCONSISTENCY``).

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O.  "Now" is the
``observed_at`` timestamp inside ``ValidationContext``; the validator never
reads a clock.  History is read-only; persisting attempts is the caller's
job (see ``ClockInAttempt``).

Invariants enforced
-------------------
* ``0 <= risk_score <= 100``.
* ``is_valid`` is derived: no critical flag present AND
  ``risk_score <= max_valid_risk_score``.  It cannot be set by a caller.
* A flag contributes its weight once, however many samples triggered it.

Failure modes
-------------
* None for well-typed input.  The validator always returns a result.
  Pairs of samples with zero or negative elapsed time are skipped (speed
  is undefined) and counted in ``SpeedCheck.skipped_pairs``.

Audit relevance
---------------
A rejected clock-in must be explainable.  The result carries the flags,
the score and typed per-check details, and rejections are logged at
WARNING with the employee id and flags.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from payroll_kernel.logging_config import get_logger
from payroll_engines.geo import GeoPoint, haversine_distance, travel_speed_kmh
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.anti_spoofing")


class AntiSpoofingFlag(str, Enum):
    """Reasons a location claim looks suspicious."""

    GPS_ACCURACY_LOW = "GPS_ACCURACY_LOW"
    OUTSIDE_RADIUS = "OUTSIDE_RADIUS"
    IP_LOCATION_MISMATCH = "IP_LOCATION_MISMATCH"
    SUSPICIOUS_MOVEMENT = "SUSPICIOUS_MOVEMENT"
    IMPOSSIBLE_SPEED = "IMPOSSIBLE_SPEED"
    CONSISTENT_PERFECT_ACCURACY = "CONSISTENT_PERFECT_ACCURACY"
    LOCATION_CLUSTERING = "LOCATION_CLUSTERING"
    TIME_PATTERN_ANOMALY = "TIME_PATTERN_ANOMALY"
    DEVICE_INCONSISTENCY = "DEVICE_INCONSISTENCY"
    USER_AGENT_INCONSISTENCY = "USER_AGENT_INCONSISTENCY"


_FLAG_DESCRIPTIONS: dict[AntiSpoofingFlag, str] = {
    AntiSpoofingFlag.GPS_ACCURACY_LOW: "GPS accuracy is below acceptable threshold",
    AntiSpoofingFlag.OUTSIDE_RADIUS: "Location is outside the permitted work area",
    AntiSpoofingFlag.IP_LOCATION_MISMATCH: (
        "GPS location does not match approximate IP location"
    ),
    AntiSpoofingFlag.SUSPICIOUS_MOVEMENT: (
        "Detected unusually fast movement between locations"
    ),
    AntiSpoofingFlag.IMPOSSIBLE_SPEED: "Movement speed exceeds physically possible limits",
    AntiSpoofingFlag.CONSISTENT_PERFECT_ACCURACY: (
        "GPS accuracy is suspiciously consistent and perfect"
    ),
    AntiSpoofingFlag.LOCATION_CLUSTERING: "Majority of check-ins from identical location",
    AntiSpoofingFlag.TIME_PATTERN_ANOMALY: (
        "Check-in timing follows suspicious regular pattern"
    ),
    AntiSpoofingFlag.DEVICE_INCONSISTENCY: "Multiple different devices used recently",
    AntiSpoofingFlag.USER_AGENT_INCONSISTENCY: (
        "Multiple different browsers or apps used recently"
    ),
}


def flag_description(flag: AntiSpoofingFlag | str) -> str:
    """Human-readable text for a flag."""
    return _FLAG_DESCRIPTIONS[AntiSpoofingFlag(flag)]


DEFAULT_RISK_WEIGHTS: Mapping[AntiSpoofingFlag, int] = MappingProxyType({
    AntiSpoofingFlag.GPS_ACCURACY_LOW: 15,
    AntiSpoofingFlag.OUTSIDE_RADIUS: 30,
    AntiSpoofingFlag.IP_LOCATION_MISMATCH: 25,
    AntiSpoofingFlag.SUSPICIOUS_MOVEMENT: 20,
    AntiSpoofingFlag.IMPOSSIBLE_SPEED: 40,
    AntiSpoofingFlag.CONSISTENT_PERFECT_ACCURACY: 20,
    AntiSpoofingFlag.LOCATION_CLUSTERING: 25,
    AntiSpoofingFlag.TIME_PATTERN_ANOMALY: 15,
    AntiSpoofingFlag.DEVICE_INCONSISTENCY: 20,
    AntiSpoofingFlag.USER_AGENT_INCONSISTENCY: 10,
})

DEFAULT_CRITICAL_FLAGS: frozenset[AntiSpoofingFlag] = frozenset({
    AntiSpoofingFlag.OUTSIDE_RADIUS,
    AntiSpoofingFlag.IMPOSSIBLE_SPEED,
})

MAX_RISK_SCORE = 100


@dataclass(frozen=True)
class AntiSpoofingPolicy:
    """
    Thresholds and weights for the validator.

    The defaults are tuning values, not physical constants.  Override any
    of them through ``payroll_config`` or at instantiation.
    """

    max_accuracy_meters: float = 100.0
    ip_mismatch_meters: float = 10_000.0

    suspicious_speed_kmh: float = 100.0
    impossible_speed_kmh: float = 200.0
    speed_history_window: int = 5

    perfect_accuracy_meters: float = 5.0
    perfect_accuracy_ratio: float = 0.8
    perfect_accuracy_max_variance: float = 2.0
    accuracy_min_history: int = 3
    accuracy_history_window: int = 10

    cluster_radius_meters: float = 10.0
    cluster_ratio: float = 0.9
    cluster_min_size: int = 10
    cluster_min_clock_ins: int = 5

    time_pattern_min_history: int = 5
    time_pattern_min_intervals: int = 5
    time_pattern_variance_ratio: float = 0.1

    device_min_history: int = 3
    max_device_ids: int = 3
    max_user_agents: int = 2

    risk_weights: Mapping[AntiSpoofingFlag, int] = field(
        default_factory=lambda: DEFAULT_RISK_WEIGHTS,
    )
    critical_flags: frozenset[AntiSpoofingFlag] = DEFAULT_CRITICAL_FLAGS
    max_valid_risk_score: int = 70

    def __post_init__(self) -> None:
        for name in (
            "max_accuracy_meters", "ip_mismatch_meters", "suspicious_speed_kmh",
            "impossible_speed_kmh", "perfect_accuracy_meters", "cluster_radius_meters",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.suspicious_speed_kmh > self.impossible_speed_kmh:
            raise ValueError("suspicious_speed_kmh cannot exceed impossible_speed_kmh")
        for name in (
            "speed_history_window", "accuracy_min_history", "accuracy_history_window",
            "cluster_min_size", "cluster_min_clock_ins", "device_min_history",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        # Interval statistics need at least one gap between two samples
        if self.time_pattern_min_history < 2:
            raise ValueError("time_pattern_min_history must be at least 2")
        if self.time_pattern_min_intervals < 0:
            raise ValueError("time_pattern_min_intervals cannot be negative")
        if not 0 <= self.max_valid_risk_score <= MAX_RISK_SCORE:
            raise ValueError(
                f"max_valid_risk_score must be within [0, {MAX_RISK_SCORE}]"
            )

        # Normalize keys so YAML strings and enum members are interchangeable
        weights = {AntiSpoofingFlag(k): int(v) for k, v in self.risk_weights.items()}
        missing = set(AntiSpoofingFlag) - set(weights)
        if missing:
            raise ValueError(
                "risk_weights missing flags: " + ", ".join(sorted(f.value for f in missing))
            )
        if any(w < 0 for w in weights.values()):
            raise ValueError("risk_weights cannot be negative")
        object.__setattr__(self, "risk_weights", MappingProxyType(weights))
        object.__setattr__(
            self, "critical_flags",
            frozenset(AntiSpoofingFlag(f) for f in self.critical_flags),
        )


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocationSample:
    """One historical GPS fix for an employee."""

    latitude: float
    longitude: float
    accuracy_meters: float
    timestamp: datetime
    device_id: str | None = None
    user_agent: str | None = None

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class ValidationContext:
    """
    Everything the validator knows besides the claim itself.

    ``observed_at`` is the time of the claim; it is supplied by the caller
    so that validation is reproducible.
    """

    workplace: GeoPoint
    radius_meters: float
    observed_at: datetime
    employee_id: str = ""
    location_history: tuple[LocationSample, ...] = ()
    previous_clock_ins: tuple[LocationSample, ...] = ()
    ip_location: GeoPoint | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "location_history", tuple(self.location_history))
        object.__setattr__(self, "previous_clock_ins", tuple(self.previous_clock_ins))


# ---------------------------------------------------------------------------
# Per-check details
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BasicVerification:
    distance_meters: float
    radius_meters: float
    verified: bool

    @property
    def message(self) -> str:
        if self.verified:
            return "Location verified"
        return (
            f"You are {round(self.distance_meters)}m from the workplace, "
            f"max allowed {round(self.radius_meters)}m"
        )


@dataclass(frozen=True)
class AccuracyCheck:
    accuracy_meters: float
    max_accuracy_meters: float
    low_accuracy: bool


@dataclass(frozen=True)
class IpLocationCheck:
    distance_meters: float
    threshold_meters: float
    mismatch: bool


@dataclass(frozen=True)
class MovementSegment:
    """Movement between two temporally adjacent samples."""

    started_at: datetime
    ended_at: datetime
    distance_meters: float
    speed_kmh: float


@dataclass(frozen=True)
class SpeedCheck:
    pairs_checked: int
    skipped_pairs: int
    max_speed_kmh: float
    suspicious_segments: tuple[MovementSegment, ...] = ()
    impossible_segments: tuple[MovementSegment, ...] = ()


@dataclass(frozen=True)
class AccuracyPatternCheck:
    sample_count: int
    average_accuracy: float
    variance: float
    perfect_accuracy_ratio: float


@dataclass(frozen=True)
class ClusteringCheck:
    cluster_count: int
    largest_cluster_size: int
    clustering_ratio: float


@dataclass(frozen=True)
class TimePatternCheck:
    interval_count: int
    average_interval_seconds: float
    interval_variance: float


@dataclass(frozen=True)
class DeviceCheck:
    unique_device_ids: int
    unique_user_agents: int


@dataclass(frozen=True)
class AntiSpoofingDetails:
    """Typed evidence from each check; None where a check did not run."""

    basic_verification: BasicVerification
    accuracy_check: AccuracyCheck
    speed_check: SpeedCheck
    ip_location_check: IpLocationCheck | None = None
    accuracy_pattern_check: AccuracyPatternCheck | None = None
    clustering_check: ClusteringCheck | None = None
    time_pattern_check: TimePatternCheck | None = None
    device_check: DeviceCheck | None = None


@dataclass(frozen=True)
class AntiSpoofingResult:
    """Verdict for one clock-in claim.  ``is_valid`` is derived."""

    risk_score: int
    flags: frozenset[AntiSpoofingFlag]
    details: AntiSpoofingDetails
    critical_flags: frozenset[AntiSpoofingFlag] = DEFAULT_CRITICAL_FLAGS
    max_valid_risk_score: int = 70

    def __post_init__(self) -> None:
        if not 0 <= self.risk_score <= MAX_RISK_SCORE:
            raise ValueError(f"risk_score must be within [0, {MAX_RISK_SCORE}]")
        object.__setattr__(self, "flags", frozenset(self.flags))

    @property
    def critical_flags_raised(self) -> frozenset[AntiSpoofingFlag]:
        return self.flags & self.critical_flags

    @property
    def is_valid(self) -> bool:
        return (
            not self.critical_flags_raised
            and self.risk_score <= self.max_valid_risk_score
        )

    @property
    def distance_meters(self) -> float:
        return self.details.basic_verification.distance_meters

    @property
    def descriptions(self) -> list[str]:
        return [flag_description(f) for f in sorted(self.flags, key=lambda f: f.value)]


@dataclass(frozen=True)
class ClockInAttempt:
    """
    Audit record for one clock-in attempt, accepted or not.

    Rejected attempts are recorded too, with ``completed_at=None``.
    """

    employee_id: str
    claimed: GeoPoint
    accuracy_meters: float
    attempted_at: datetime
    accepted: bool
    risk_score: int
    flags: frozenset[AntiSpoofingFlag]
    completed_at: datetime | None = None

    @classmethod
    def from_result(
        cls,
        employee_id: str,
        claimed: GeoPoint,
        accuracy_meters: float,
        attempted_at: datetime,
        result: AntiSpoofingResult,
    ) -> ClockInAttempt:
        return cls(
            employee_id=employee_id,
            claimed=claimed,
            accuracy_meters=accuracy_meters,
            attempted_at=attempted_at,
            accepted=result.is_valid,
            risk_score=result.risk_score,
            flags=result.flags,
            completed_at=attempted_at if result.is_valid else None,
        )


# ---------------------------------------------------------------------------
# Analyses
# ---------------------------------------------------------------------------


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _variance(values: Sequence[float]) -> float:
    avg = _mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def cluster_locations(
    samples: Sequence[LocationSample],
    radius_meters: float,
) -> list[list[LocationSample]]:
    """Greedy clustering: each unassigned sample seeds a cluster of its neighbours."""
    clusters: list[list[LocationSample]] = []
    used: set[int] = set()
    for i, seed in enumerate(samples):
        if i in used:
            continue
        used.add(i)
        cluster = [seed]
        for j in range(i + 1, len(samples)):
            if j in used:
                continue
            if haversine_distance(seed.point, samples[j].point) <= radius_meters:
                cluster.append(samples[j])
                used.add(j)
        clusters.append(cluster)
    return clusters


class AttendanceIntegrityValidator:
    """
    Score a clock-in location claim.

    Stateless apart from its policy; safe to share across threads.
    """

    def __init__(self, policy: AntiSpoofingPolicy | None = None):
        self._policy = policy or AntiSpoofingPolicy()

    @property
    def policy(self) -> AntiSpoofingPolicy:
        return self._policy

    def _speed_check(
        self,
        claimed: GeoPoint,
        context: ValidationContext,
        flags: set[AntiSpoofingFlag],
    ) -> SpeedCheck:
        policy = self._policy
        samples = sorted(
            context.location_history + context.previous_clock_ins,
            key=lambda s: s.timestamp,
        )
        window = samples[-policy.speed_history_window:]
        track = [(s.point, s.timestamp) for s in window]
        track.append((claimed, context.observed_at))

        checked = skipped = 0
        max_speed = 0.0
        suspicious: list[MovementSegment] = []
        impossible: list[MovementSegment] = []
        for (a, a_time), (b, b_time) in zip(track, track[1:]):
            speed = travel_speed_kmh(a, a_time, b, b_time)
            if speed is None:
                skipped += 1
                continue
            checked += 1
            max_speed = max(max_speed, speed)
            segment = MovementSegment(
                started_at=a_time,
                ended_at=b_time,
                distance_meters=haversine_distance(a, b),
                speed_kmh=speed,
            )
            if speed > policy.impossible_speed_kmh:
                impossible.append(segment)
            if speed > policy.suspicious_speed_kmh:
                suspicious.append(segment)

        if suspicious:
            flags.add(AntiSpoofingFlag.SUSPICIOUS_MOVEMENT)
        if impossible:
            flags.add(AntiSpoofingFlag.IMPOSSIBLE_SPEED)
        return SpeedCheck(
            pairs_checked=checked,
            skipped_pairs=skipped,
            max_speed_kmh=max_speed,
            suspicious_segments=tuple(suspicious),
            impossible_segments=tuple(impossible),
        )

    def _accuracy_pattern_check(
        self,
        accuracy_meters: float,
        history: Sequence[LocationSample],
        flags: set[AntiSpoofingFlag],
    ) -> AccuracyPatternCheck | None:
        policy = self._policy
        if len(history) < policy.accuracy_min_history:
            return None
        accuracies = [s.accuracy_meters for s in history[-policy.accuracy_history_window:]]
        accuracies.append(accuracy_meters)
        variance = _variance(accuracies)
        perfect = sum(1 for a in accuracies if a <= policy.perfect_accuracy_meters)
        ratio = perfect / len(accuracies)
        if (
            ratio > policy.perfect_accuracy_ratio
            and variance < policy.perfect_accuracy_max_variance
        ):
            flags.add(AntiSpoofingFlag.CONSISTENT_PERFECT_ACCURACY)
        return AccuracyPatternCheck(
            sample_count=len(accuracies),
            average_accuracy=_mean(accuracies),
            variance=variance,
            perfect_accuracy_ratio=ratio,
        )

    def _clustering_check(
        self,
        clock_ins: Sequence[LocationSample],
        flags: set[AntiSpoofingFlag],
    ) -> ClusteringCheck | None:
        policy = self._policy
        if len(clock_ins) < policy.cluster_min_clock_ins:
            return None
        clusters = cluster_locations(clock_ins, policy.cluster_radius_meters)
        largest = max(len(c) for c in clusters)
        ratio = largest / len(clock_ins)
        if ratio > policy.cluster_ratio and largest > policy.cluster_min_size:
            flags.add(AntiSpoofingFlag.LOCATION_CLUSTERING)
        return ClusteringCheck(
            cluster_count=len(clusters),
            largest_cluster_size=largest,
            clustering_ratio=ratio,
        )

    def _time_pattern_check(
        self,
        history: Sequence[LocationSample],
        flags: set[AntiSpoofingFlag],
    ) -> TimePatternCheck | None:
        policy = self._policy
        if len(history) < policy.time_pattern_min_history:
            return None
        ordered = sorted(history, key=lambda s: s.timestamp)
        intervals = [
            (b.timestamp - a.timestamp).total_seconds()
            for a, b in zip(ordered, ordered[1:])
        ]
        average = _mean(intervals)
        variance = _variance(intervals)
        if (
            len(intervals) > policy.time_pattern_min_intervals
            and variance < average * policy.time_pattern_variance_ratio
        ):
            flags.add(AntiSpoofingFlag.TIME_PATTERN_ANOMALY)
        return TimePatternCheck(
            interval_count=len(intervals),
            average_interval_seconds=average,
            interval_variance=variance,
        )

    def _device_check(
        self,
        samples: Sequence[LocationSample],
        flags: set[AntiSpoofingFlag],
    ) -> DeviceCheck | None:
        policy = self._policy
        if len(samples) < policy.device_min_history:
            return None
        device_ids = {s.device_id for s in samples if s.device_id}
        user_agents = {s.user_agent for s in samples if s.user_agent}
        if len(device_ids) > policy.max_device_ids:
            flags.add(AntiSpoofingFlag.DEVICE_INCONSISTENCY)
        if len(user_agents) > policy.max_user_agents:
            flags.add(AntiSpoofingFlag.USER_AGENT_INCONSISTENCY)
        return DeviceCheck(
            unique_device_ids=len(device_ids),
            unique_user_agents=len(user_agents),
        )

    def score(self, flags: frozenset[AntiSpoofingFlag]) -> int:
        """Sum of the flag weights, capped at 100."""
        return min(
            MAX_RISK_SCORE, sum(self._policy.risk_weights[f] for f in flags),
        )

    @traced_engine(
        "anti_spoofing", "1.0",
        fingerprint_fields=("claimed", "accuracy_meters", "context"),
    )
    def validate_location(
        self,
        claimed: GeoPoint,
        accuracy_meters: float,
        context: ValidationContext,
    ) -> AntiSpoofingResult:
        """
        Validate a claimed clock-in location.

        Args:
            claimed: The location the device reports.
            accuracy_meters: The device's reported accuracy radius.
            context: Workplace geofence, claim time and recent history.

        Returns:
            AntiSpoofingResult; never raises for well-typed input.
        """
        policy = self._policy
        flags: set[AntiSpoofingFlag] = set()

        logger.debug("location_validation_started", extra={
            "employee_id": context.employee_id,
            "history_count": len(context.location_history),
            "clock_in_count": len(context.previous_clock_ins),
        })

        # 1. Geofence
        distance = haversine_distance(claimed, context.workplace)
        basic = BasicVerification(
            distance_meters=distance,
            radius_meters=context.radius_meters,
            verified=distance <= context.radius_meters,
        )
        if not basic.verified:
            flags.add(AntiSpoofingFlag.OUTSIDE_RADIUS)

        # 2. Reported accuracy
        accuracy = AccuracyCheck(
            accuracy_meters=accuracy_meters,
            max_accuracy_meters=policy.max_accuracy_meters,
            low_accuracy=accuracy_meters > policy.max_accuracy_meters,
        )
        if accuracy.low_accuracy:
            flags.add(AntiSpoofingFlag.GPS_ACCURACY_LOW)

        # 3. IP geolocation, when the caller has one
        ip_check = None
        if context.ip_location is not None:
            ip_distance = haversine_distance(claimed, context.ip_location)
            ip_check = IpLocationCheck(
                distance_meters=ip_distance,
                threshold_meters=policy.ip_mismatch_meters,
                mismatch=ip_distance > policy.ip_mismatch_meters,
            )
            if ip_check.mismatch:
                flags.add(AntiSpoofingFlag.IP_LOCATION_MISMATCH)

        # 4-8. History analyses
        speed = self._speed_check(claimed, context, flags)
        accuracy_pattern = self._accuracy_pattern_check(
            accuracy_meters, context.location_history, flags,
        )
        clustering = self._clustering_check(context.previous_clock_ins, flags)
        time_pattern = self._time_pattern_check(context.location_history, flags)
        devices = self._device_check(
            context.location_history + context.previous_clock_ins, flags,
        )

        frozen_flags = frozenset(flags)
        result = AntiSpoofingResult(
            risk_score=self.score(frozen_flags),
            flags=frozen_flags,
            details=AntiSpoofingDetails(
                basic_verification=basic,
                accuracy_check=accuracy,
                speed_check=speed,
                ip_location_check=ip_check,
                accuracy_pattern_check=accuracy_pattern,
                clustering_check=clustering,
                time_pattern_check=time_pattern,
                device_check=devices,
            ),
            critical_flags=policy.critical_flags,
            max_valid_risk_score=policy.max_valid_risk_score,
        )

        log_extra = {
            "employee_id": context.employee_id,
            "risk_score": result.risk_score,
            "flags": result.flags,
            "distance_meters": round(distance, 1),
            "is_valid": result.is_valid,
        }
        if result.is_valid:
            logger.info("location_validation_completed", extra=log_extra)
        else:
            logger.warning("clock_in_location_rejected", extra={
                **log_extra,
                "critical_flags": result.critical_flags_raised,
                "verification_message": basic.message,
            })
        return result


def validate_location(
    claimed: GeoPoint,
    accuracy_meters: float,
    context: ValidationContext,
    policy: AntiSpoofingPolicy | None = None,
) -> AntiSpoofingResult:
    """Validate with a one-off validator."""
    return AttendanceIntegrityValidator(policy).validate_location(
        claimed, accuracy_meters, context,
    )
