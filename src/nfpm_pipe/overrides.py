"""Per-format override resolution.

The effective configuration for a format is the package definition's shared
fields with the format's override block layered on top. The merge walks the
declared fields of the schema: nested blocks (scripts, signatures, triggers,
...) are merged field by field, and for every leaf field a supplied override
value (anything but ``None``) wins over the base value.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, TypeVar

from pydantic import BaseModel, ValidationError

from nfpm_pipe.config.nfpm import NFPMConfig, NFPMOverridables
from nfpm_pipe.exceptions import OverrideMergeError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def merge_block(base: ModelT, override: BaseModel | None, *, path: str = "") -> ModelT:
    """Layer ``override`` on top of ``base`` and return a new instance.

    Args:
        base: Block holding the shared values
        override: Block of the same schema whose supplied values win; None means
            an all-empty override
        path: Dotted location of the block, used in error messages

    Returns:
        A new instance of ``type(base)``; neither input is modified

    Raises:
        OverrideMergeError: If the override does not fit the base schema
    """
    model = type(base)
    if override is not None and not isinstance(override, model):
        raise OverrideMergeError(
            f"cannot merge {type(override).__name__} onto {model.__name__} at {path or '<root>'}",
            context={"field": path},
        )

    values: Dict[str, Any] = {}
    for name in model.model_fields:
        field_path = f"{path}.{name}" if path else name
        base_value = getattr(base, name)
        override_value = getattr(override, name) if override is not None else None
        if isinstance(base_value, BaseModel):
            values[name] = merge_block(base_value, override_value, path=field_path)
        elif override_value is not None:
            values[name] = copy.deepcopy(override_value)
        else:
            values[name] = copy.deepcopy(base_value)

    try:
        return model.model_validate(values)
    except ValidationError as err:
        raise OverrideMergeError(f"invalid merged configuration at {path or '<root>'}: {err}", context={"field": path}) from err


def merge_overrides(fpm: NFPMConfig, format: str) -> NFPMOverridables:
    """Return the effective configuration of ``fpm`` for ``format``.

    A missing override block behaves like an empty one, so the result then
    equals the shared configuration.
    """
    per_format = fpm.overrides.get(format)
    if per_format is not None:
        logger.debug(f"applying {format} overrides for nfpm {fpm.id}")
    try:
        return merge_block(fpm.overridables(), per_format)
    except OverrideMergeError as err:
        err.context.setdefault("format", format)
        raise
