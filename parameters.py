# parameters.py v1.1
# Part of Project Tesseract: 4D Projection Lab
# v1.1: "Dotted Keys"
# - Parameters arrive from the UI as flat keys ('pointSize') or one-level
#   dotted keys ('rotationSpeeds.xw'); the store keeps them as a nested dict.
# - Simulations only ever see a snapshot, so they cannot mutate the store.

from numbers import Number

class ParameterStore:
    """
    Nested key -> value mapping for simulation parameters. Last write wins.

    >>> store = ParameterStore()
    >>> store.set('rotationSpeeds.xw', 0.8)
    >>> store.snapshot()
    {'rotationSpeeds': {'xw': 0.8}}
    """
    def __init__(self, initial: dict = None):
        self._values = {}
        if initial:
            self.update(initial)

    def set(self, key: str, value):
        if not isinstance(value, (Number, bool)):
            raise TypeError(f"Parameter '{key}' must be numeric or boolean, got {type(value).__name__}")
        if '.' in key:
            parent, child = key.split('.', 1)
            group = self._values.get(parent)
            if not isinstance(group, dict):
                group = {}
                self._values[parent] = group
            group[child] = value
        else:
            self._values[key] = value

    def update(self, values: dict):
        """Accepts flat/dotted keys as well as already nested groups."""
        for key, value in values.items():
            if isinstance(value, dict):
                for child, child_value in value.items():
                    self.set(f"{key}.{child}", child_value)
            else:
                self.set(key, value)

    def get(self, key: str, default=None):
        return resolve(self._values, key, default)

    def apply_defaults(self, controls):
        """Seeds the store with the default value of every control."""
        for control in controls:
            self.set(control.id, control.default)

    def reset(self):
        self._values = {}

    def snapshot(self) -> dict:
        """A copy safe to hand to a simulation."""
        return {k: dict(v) if isinstance(v, dict) else v for k, v in self._values.items()}

    def __contains__(self, key: str) -> bool:
        return resolve(self._values, key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return sum(len(v) if isinstance(v, dict) else 1 for v in self._values.values())

    def __repr__(self):
        return f"ParameterStore({self._values!r})"


_MISSING = object()

def resolve(params: dict, key: str, default=None):
    """
    Reads a flat or dotted key from a (possibly partial) parameter dict.
    Missing groups, missing keys and None values all give `default`.
    """
    if not params:
        return default
    if '.' in key:
        parent, child = key.split('.', 1)
        group = params.get(parent)
        if not isinstance(group, dict):
            return default
        value = group.get(child)
    else:
        value = params.get(key)
    return default if value is None else value
