"""Per-field change notification for controller state.

Each published field keeps its own subscriber list. Writers go through
`_publish()`, which compares against the stored value and only notifies when
the value actually changed, so a UI layer bound to one field is not re-rendered
for unrelated or no-op writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


log = logging.getLogger(__name__)

Callback = Callable[[Any], None]


@dataclass(eq=False)
class Subscription:
    field_name: str
    callback: Callback
    _owner: "Observable | None" = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._owner is not None

    def cancel(self) -> None:
        if self._owner is None:
            return
        self._owner._unsubscribe(self)
        self._owner = None


class Observable:
    """Base class holding a fixed set of published fields."""

    _published: tuple[str, ...] = ()
    # Events notify on every emit; they carry no stored value.
    _events: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._subscribers: dict[str, list[Subscription]] = {
            name: [] for name in (*self._published, *self._events)
        }

    def _init_fields(self, values: dict[str, Any]) -> None:
        # Initial values are assigned silently.
        unknown = set(values) - set(self._published)
        if unknown:
            raise KeyError(f"Unknown published fields: {sorted(unknown)}")
        self._values.update(values)

    def _value(self, name: str) -> Any:
        return self._values[name]

    def subscribe(self, field_name: str, callback: Callback) -> Subscription:
        """Call `callback(new_value)` whenever `field_name` changes.

        `field_name` may also name an event, in which case `callback` receives
        the emitted payload.
        """

        if field_name not in self._subscribers:
            raise KeyError(f"Unknown field or event: {field_name}")
        sub = Subscription(field_name=field_name, callback=callback, _owner=self)
        self._subscribers[field_name].append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        subs = self._subscribers.get(sub.field_name) or []
        if sub in subs:
            subs.remove(sub)

    def _publish(self, name: str, value: Any) -> bool:
        """Store `value` and notify subscribers. Returns True if it changed."""

        old = self._values.get(name)
        if name in self._values and old == value:
            return False
        self._values[name] = value
        self._notify(self._subscribers[name], value)
        return True

    def _publish_many(self, values: Iterable[tuple[str, Any]]) -> list[str]:
        """Apply several writes before notifying anyone.

        Subscribers of the first field then never observe a half-updated state
        through the other fields.
        """

        changed: list[str] = []
        for name, value in values:
            if name in self._values and self._values[name] == value:
                continue
            self._values[name] = value
            changed.append(name)
        for name in changed:
            self._notify(self._subscribers[name], self._values[name])
        return changed

    def _emit(self, event: str, payload: Any) -> None:
        self._notify(self._subscribers[event], payload)

    def _notify(self, subs: list[Subscription], value: Any) -> None:
        # Copy: a callback may cancel its own subscription.
        for sub in list(subs):
            try:
                sub.callback(value)
            except Exception:
                log.exception("Subscriber for %s raised", sub.field_name)
