"""
Domain service: copy-on-write editing of sampling events.

Every operation takes an event and returns a new one; the input is left
untouched, so a snapshot handed to the metrics engine never changes under
it. Edits that break the field-entry rules raise ``EventEditError``.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional, Union

from fishsurvey.domain.models import (
    EnvironmentalReadings,
    EventLocation,
    FishObservation,
    NetSet,
    SamplingEvent,
    SetLocation,
    Transect,
)

logger = logging.getLogger(__name__)

SamplingSetModel = Union[Transect, NetSet]


class EventEditError(ValueError):
    """An edit was rejected because it breaks an event entry rule."""


def create_event(
    location: EventLocation,
    environmental: Optional[EnvironmentalReadings] = None,
) -> SamplingEvent:
    """Start a new, empty, unfinalized event."""
    return SamplingEvent(
        location=location,
        environmental=environmental or EnvironmentalReadings(),
        gear_type=location.gear,
    )


def _ensure_editable(event: SamplingEvent) -> None:
    if event.is_finalized:
        raise EventEditError("Event is finalized and can no longer be edited")


def _require_set(event: SamplingEvent, set_id: int) -> SamplingSetModel:
    sampling_set = event.get_set(set_id)
    if sampling_set is None:
        raise EventEditError(f"Set {set_id} does not exist in this event")
    return sampling_set


def _append_set(event: SamplingEvent, new_set: SamplingSetModel) -> SamplingEvent:
    return event.model_copy(update={
        "sets": [*event.sets, new_set],
        "sets_created": new_set.set_id,
    })


def _replace_set(event: SamplingEvent, replacement: SamplingSetModel) -> SamplingEvent:
    sets = [replacement if s.set_id == replacement.set_id else s for s in event.sets]
    return event.model_copy(update={"sets": sets})


def add_transect(
    event: SamplingEvent,
    effort_time_seconds: float,
    location: SetLocation,
) -> SamplingEvent:
    """
    Append an electrofishing transect.

    Args:
        event: Event to extend
        effort_time_seconds: Electrofishing time; must be positive
        location: UTM coordinates of the transect

    Returns:
        New event with the transect appended
    """
    _ensure_editable(event)
    if not effort_time_seconds or effort_time_seconds <= 0:
        raise EventEditError("Effort time must be greater than zero seconds")
    transect = Transect(
        set_id=event.sets_created + 1,
        effort_time_seconds=effort_time_seconds,
        location=location,
    )
    logger.debug(f"Adding transect #{transect.set_id} ({effort_time_seconds}s)")
    return _append_set(event, transect)


def add_net_set(
    event: SamplingEvent,
    set_datetime: datetime,
    location: SetLocation,
) -> SamplingEvent:
    """Append a net deployment; it stays pending until pulled."""
    _ensure_editable(event)
    net = NetSet(
        set_id=event.sets_created + 1,
        set_datetime=set_datetime,
        location=location,
    )
    logger.debug(f"Adding net #{net.set_id} set at {set_datetime.isoformat()}")
    return _append_set(event, net)


def pull_net(
    event: SamplingEvent,
    set_id: int,
    pull_datetime: datetime,
    location: Optional[SetLocation] = None,
) -> SamplingEvent:
    """
    Record the pull of a pending net, making its soak time available.

    Args:
        event: Event holding the net
        set_id: Net set to pull
        pull_datetime: When the net was retrieved
        location: Corrected coordinates, if any

    Returns:
        New event with the net pulled
    """
    _ensure_editable(event)
    net = _require_set(event, set_id)
    if not isinstance(net, NetSet):
        raise EventEditError(f"Set {set_id} is a transect, not a net set")
    if not net.is_pending:
        raise EventEditError(f"Net {set_id} has already been pulled")
    try:
        pulled = NetSet.model_validate({
            **net.model_dump(exclude={"soak_time_hours", "cpue"}),
            "pull_datetime": pull_datetime,
            "location": (location or net.location).model_dump(),
        })
    except ValueError as e:
        raise EventEditError(f"Invalid pull time for net {set_id}: {e}") from e
    return _replace_set(event, pulled)


def remove_set(event: SamplingEvent, set_id: int) -> SamplingEvent:
    """Delete a set. Remaining sets keep their numbers."""
    _ensure_editable(event)
    _require_set(event, set_id)
    return event.model_copy(update={"sets": [s for s in event.sets if s.set_id != set_id]})


def add_fish(event: SamplingEvent, set_id: int, fish: FishObservation) -> SamplingEvent:
    """
    Record a fish (or a batch of identical fish) on a set.

    Fish cannot be entered on a net that has not been pulled yet.
    """
    _ensure_editable(event)
    sampling_set = _require_set(event, set_id)
    if sampling_set.is_pending:
        raise EventEditError(f"Net {set_id} has not been pulled; fish cannot be entered yet")
    updated = sampling_set.model_copy(update={"fish": [*sampling_set.fish, fish]})
    return _replace_set(event, updated)


def update_fish(
    event: SamplingEvent,
    set_id: int,
    index: int,
    fish: FishObservation,
) -> SamplingEvent:
    """Replace the fish entry at ``index`` on a set."""
    _ensure_editable(event)
    sampling_set = _require_set(event, set_id)
    if not 0 <= index < len(sampling_set.fish):
        raise EventEditError(f"Set {set_id} has no fish entry at index {index}")
    fish_list = list(sampling_set.fish)
    fish_list[index] = fish
    return _replace_set(event, sampling_set.model_copy(update={"fish": fish_list}))


def delete_fish(event: SamplingEvent, set_id: int, indices: Iterable[int]) -> SamplingEvent:
    """Remove the fish entries at the given indices from a set."""
    _ensure_editable(event)
    sampling_set = _require_set(event, set_id)
    doomed = set(indices)
    missing = sorted(i for i in doomed if not 0 <= i < len(sampling_set.fish))
    if missing:
        raise EventEditError(f"Set {set_id} has no fish entries at indices {missing}")
    fish_list = [f for i, f in enumerate(sampling_set.fish) if i not in doomed]
    return _replace_set(event, sampling_set.model_copy(update={"fish": fish_list}))


def finalize_event(event: SamplingEvent) -> SamplingEvent:
    """Mark the event read-only."""
    return event.model_copy(update={"is_finalized": True})
