"""
Numbering configuration, i.e. the `numbering:` section of page or project frontmatter.

```yaml
numbering:
  enumerator: "A%s"
  figure: true
  heading_1: true
  heading_2: true
  algorithm: true   # custom container kinds are allowed too
```

`numbering: true` (or `false`) is also valid, and means "number everything" (or nothing) regardless of kind.
That form isn't representable as a NumberingOptions, so `from_config` hands it back separately as the override.

Invalid configuration raises `pydantic.ValidationError`.
"""

import re
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, model_validator

HEADING_DEPTHS = range(1, 7)

_HEADING_KEY_REGEX = re.compile(r"heading_(\d+)")

NumberingConfig = Union[None, bool, Mapping[str, Any], "NumberingOptions"]


class NumberingOptions(BaseModel):
    """Per-kind toggles for numbering. None means "not configured", which `get()` treats as False."""

    enumerator: Optional[StrictStr] = None
    """Template applied to every formatted number, e.g. 'A%s' to get Figure A1, A2..."""

    figure: Optional[StrictBool] = None
    equation: Optional[StrictBool] = None
    table: Optional[StrictBool] = None
    code: Optional[StrictBool] = None
    heading_1: Optional[StrictBool] = None
    heading_2: Optional[StrictBool] = None
    heading_3: Optional[StrictBool] = None
    heading_4: Optional[StrictBool] = None
    heading_5: Optional[StrictBool] = None
    heading_6: Optional[StrictBool] = None

    kinds: Dict[str, StrictBool] = Field(default_factory=dict)
    """Toggles for any other target kinds, e.g. custom container kinds."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @model_validator(mode="before")
    @classmethod
    def collect_custom_kinds(cls, data: Any) -> Any:
        """Frontmatter puts custom kinds next to the built-in ones, move them into `kinds`."""
        if not isinstance(data, Mapping):
            return data
        fields: Dict[str, Any] = {}
        custom: Dict[str, Any] = {}
        for key, value in data.items():
            if key in cls.model_fields:
                fields[key] = value
                continue
            if _HEADING_KEY_REGEX.fullmatch(key):
                raise ValueError(f"Numbering '{key}' refers to a heading depth outside 1-6")
            if value is not None:
                custom[key] = value
        kinds = fields.get("kinds", {})
        if custom and isinstance(kinds, Mapping):
            fields["kinds"] = {**kinds, **custom}
        return fields

    def get(self, kind: str) -> Optional[bool]:
        if kind in _TOGGLE_FIELDS:
            return getattr(self, kind)
        return self.kinds.get(kind)

    def heading(self, depth: Optional[int]) -> Optional[bool]:
        if depth not in HEADING_DEPTHS:
            return None
        return getattr(self, f"heading_{depth}")

    def fill_missing(self, fallback: "NumberingOptions") -> "NumberingOptions":
        """Return a copy where every unset value is taken from `fallback`.

        Used to layer page-level numbering over project-level numbering."""
        update: Dict[str, Any] = {
            name: getattr(fallback, name)
            for name in ("enumerator", *_TOGGLE_FIELDS)
            if getattr(self, name) is None
        }
        update["kinds"] = {**fallback.kinds, **self.kinds}
        return self.model_copy(update=update)

    @classmethod
    def with_defaults(cls, numbering: Optional["NumberingOptions"]) -> "NumberingOptions":
        """Equations, figures, and tables are numbered unless the configuration says otherwise."""
        defaults = cls(equation=True, figure=True, table=True)
        if numbering is None:
            return defaults
        return numbering.fill_missing(defaults)

    @classmethod
    def from_config(
        cls, config: NumberingConfig
    ) -> Tuple[Optional["NumberingOptions"], Optional[bool]]:
        """Parse frontmatter-style numbering config.

        Returns (options, number_all). Exactly one of them is not None, unless config is None."""
        if config is None:
            return None, None
        if isinstance(config, bool):
            return None, config
        if isinstance(config, NumberingOptions):
            return config, None
        return cls.model_validate(config), None


_TOGGLE_FIELDS = frozenset(
    name for name in NumberingOptions.model_fields if name not in ("enumerator", "kinds")
)
