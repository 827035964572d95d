"""
client/form.py

FormBuffer: the single mutable draft behind a create/edit form.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .entities import EntityKind, coerce_int
from .errors import FormValidationError

logger = logging.getLogger(__name__)


def validation_messages(error: ValidationError) -> Dict[str, str]:
    """pydantic errors -> {field: message}; model-level errors land under '__all__'."""
    messages = {}
    for err in error.errors():
        key = str(err['loc'][0]) if err['loc'] else '__all__'
        msg = err['msg'].replace('Value error, ', '')
        messages[key] = f"{messages[key]}; {msg}" if key in messages else msg
    return messages


class FormBuffer:
    """
    Draft record for one entity kind.

    Closed until opened with open_for_create() or open_for_edit(). Editing
    works on a deep copy, so nested availability maps and feature lists of
    the record being edited are never touched by the form.
    """

    def __init__(self, kind: EntityKind):
        self.kind = kind
        self.data: Dict[str, Any] = kind.template()
        self.editing_id: Optional[str] = None
        self.is_open = False

    @property
    def is_edit(self) -> bool:
        return self.editing_id is not None

    def reset(self):
        self.data = self.kind.template()
        self.editing_id = None

    def open_for_create(self):
        self.reset()
        self.is_open = True

    def open_for_edit(self, record: Dict[str, Any]):
        data = self.kind.template()
        data.update(copy.deepcopy({k: v for k, v in record.items() if k in data}))
        self.data = data
        self.editing_id = record['id']
        self.is_open = True

    def cancel(self):
        self.reset()
        self.is_open = False

    def _check_field(self, name: str):
        if name not in self.kind.fields:
            raise FormValidationError({name: f"unknown field for {self.kind.label.lower()}"})

    def choices(self, name: str, options: Iterable[Any]) -> List[Any]:
        """
        Options for a single-choice widget over ``name``.

        When editing, the record's current value is appended if it is not
        one of ``options``, so saving an untouched form stores it unchanged.
        """
        self._check_field(name)
        options = list(options)
        current = self.data[name]
        if self.is_edit and current not in options:
            options.append(current)
        return options

    def set_field(self, name: str, value: Any):
        self._check_field(name)
        if name in self.kind.numeric_fields:
            try:
                value = coerce_int(value)
            except ValueError as e:
                raise FormValidationError({name: str(e)}) from None
        self.data[name] = value

    def toggle(self, name: str, value: Any):
        """Add ``value`` to a set-valued field, or remove it when already present."""
        self._check_field(name)
        if name not in self.kind.set_fields:
            raise FormValidationError({name: 'not a multi-select field'})
        values = list(self.data[name] or [])
        if value in values:
            values.remove(value)
        else:
            values.append(value)
        self.data[name] = values

    def toggle_slot(self, day: str, slot: str):
        if self.kind.availability_style != 'slots':
            raise FormValidationError({'availability': f"{self.kind.label} availability has no time slots"})
        slots = list(self.data['availability'].get(day, []))
        if slot in slots:
            slots.remove(slot)
        else:
            slots.append(slot)
            slots.sort()
        self.data['availability'][day] = slots

    def set_availability(self, day: str, field: str, value: Any):
        if self.kind.availability_style != 'hours':
            raise FormValidationError({'availability': f"{self.kind.label} availability has no working hours"})
        if field not in ('available', 'start_time', 'end_time'):
            raise FormValidationError({'availability': f"unknown availability field '{field}'"})
        day_data = dict(self.data['availability'].get(day) or {})
        day_data[field] = value
        self.data['availability'][day] = day_data

    def validate(self) -> Dict[str, Any]:
        """Normalised payload, or FormValidationError with one message per field."""
        try:
            return self.kind.draft_model.model_validate(self.data).model_dump()
        except ValidationError as e:
            raise FormValidationError(validation_messages(e)) from e

    def commit(self, store) -> str:
        """
        Validate and hand the draft to ``store``; returns the record id.

        Any failure propagates and leaves the buffer open with its contents.
        """
        payload = self.validate()
        if self.is_edit:
            record_id = self.editing_id
            store.update(record_id, payload)
        else:
            record_id = store.create(payload)
        logger.debug(f"Committed {self.kind.label} form for {record_id}")
        self.cancel()
        return record_id
