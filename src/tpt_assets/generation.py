"""Entry points for procedural asset generation.

Generators are not wired in yet. The functions here produce placeholder
descriptors with the shape real generators will return, and never write to the
asset store: persisting a result is the caller's job via
:meth:`tpt_assets.storage.AssetRepository.save_asset`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Final

from . import __version__
from .errors import ValidationError

__all__ = [
    "GENERATOR_VERSION",
    "GeneratedAsset",
    "generate_asset",
    "generate_batch",
]

GENERATOR_VERSION: Final[str] = "1.0.0"
"""Version stamped into the metadata of every generated descriptor."""

PLACEHOLDER_DATA: Final[str] = "placeholder-generated-data"


@dataclass(slots=True)
class GeneratedAsset:
    """Descriptor returned by a generator run."""

    type: str
    config: Any
    data: Any
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def generate_asset(asset_type: str, config: Any = None) -> GeneratedAsset:
    """Return a descriptor for *asset_type* generated from *config*."""

    if not isinstance(asset_type, str) or not asset_type.strip():
        raise ValidationError("Missing asset_type")
    return GeneratedAsset(
        type=asset_type,
        config=config,
        data=PLACEHOLDER_DATA,
        metadata={
            "generated_at": datetime.now(UTC).isoformat(),
            "version": GENERATOR_VERSION,
            "backend_version": __version__,
        },
    )


def generate_batch(requests: Iterable[Mapping[str, Any]]) -> list[GeneratedAsset]:
    """Run :func:`generate_asset` for each ``{asset_type, config}`` request.

    ``type`` is accepted as an alias for ``asset_type``.
    """

    results: list[GeneratedAsset] = []
    for request in requests:
        if not isinstance(request, Mapping):
            raise ValidationError("Batch entries must be objects")
        asset_type = request.get("asset_type", request.get("type"))
        results.append(generate_asset(asset_type, request.get("config")))
    return results
