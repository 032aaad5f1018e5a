"""Provider-type factory table."""

from __future__ import annotations

from typing import Callable, Optional

from cloudunify.errors import InvalidArgumentError
from cloudunify.models import ProviderType

from .base import CloudProvider
from .google_drive import GoogleDriveProvider
from .onedrive import OneDriveProvider

ProviderFactory = Callable[..., CloudProvider]

DEFAULT_FACTORIES: dict[ProviderType, ProviderFactory] = {
    ProviderType.GOOGLE_DRIVE: GoogleDriveProvider,
    ProviderType.ONEDRIVE: OneDriveProvider,
}


def create_provider(
    type_tag: ProviderType,
    provider_id: str,
    *,
    name: Optional[str] = None,
    application_name: Optional[str] = None,
    factories: Optional[dict[ProviderType, ProviderFactory]] = None,
) -> CloudProvider:
    """
    Build a disconnected adapter for type_tag.

    application_name is passed on only when set, so custom factories that
    take just (provider_id, name) keep working.

    The type tag is looked up in an explicit table; adapters are never
    identified by inspecting instance types.
    """
    table = factories if factories is not None else DEFAULT_FACTORIES
    factory = table.get(type_tag)
    if factory is None:
        raise InvalidArgumentError(
            "Unsupported provider type",
            details={"type_tag": getattr(type_tag, "value", type_tag)},
        )
    if application_name is None:
        return factory(provider_id, name=name)
    return factory(provider_id, name=name, application_name=application_name)
