"""Conversion of Clicksign JSON:API resources into provider value objects."""

from __future__ import annotations

from typing import Any

from signflow.domain.models.provider import (
    ProviderDocument,
    ProviderEnvelope,
    ProviderEvent,
    ProviderRequirement,
    ProviderSigner,
)


def _attributes(resource: dict[str, Any]) -> dict[str, Any]:
    return resource.get("attributes") or {}


def _related_id(resource: dict[str, Any], name: str) -> str | None:
    relationship = (resource.get("relationships") or {}).get(name) or {}
    data = relationship.get("data") or {}
    return data.get("id")


def envelope_from(resource: dict[str, Any]) -> ProviderEnvelope:
    attrs = _attributes(resource)
    return ProviderEnvelope(
        id=str(resource.get("id", "")),
        status=attrs.get("status") or "",
        name=attrs.get("name"),
    )


def document_from(resource: dict[str, Any]) -> ProviderDocument:
    """Build a ProviderDocument.

    Download URLs are reported either under links.files or under
    attributes.downloads depending on the endpoint.
    """
    attrs = _attributes(resource)
    files = (resource.get("links") or {}).get("files") or {}
    downloads = attrs.get("downloads") or {}
    return ProviderDocument(
        id=str(resource.get("id", "")),
        status=attrs.get("status") or "",
        finished_at=attrs.get("finished_at") or attrs.get("modified"),
        signed_url=files.get("signed") or downloads.get("signed_file_url"),
        original_url=files.get("original") or downloads.get("original_file_url"),
    )


def signer_from(resource: dict[str, Any]) -> ProviderSigner:
    attrs = _attributes(resource)
    return ProviderSigner(
        id=str(resource.get("id", "")),
        name=attrs.get("name") or "",
        email=attrs.get("email") or "",
        status=attrs.get("status"),
        phone_number=attrs.get("phone_number"),
    )


def requirement_from(resource: dict[str, Any]) -> ProviderRequirement:
    attrs = _attributes(resource)
    return ProviderRequirement(
        id=str(resource.get("id", "")),
        action=attrs.get("action") or "",
        role=attrs.get("role"),
        auth=attrs.get("auth"),
        document_id=_related_id(resource, "document"),
        signer_id=_related_id(resource, "signer"),
    )


def event_from(resource: dict[str, Any]) -> ProviderEvent:
    attrs = _attributes(resource)
    return ProviderEvent(
        id=str(resource.get("id", "")),
        type=resource.get("type") or "events",
        name=attrs.get("name") or "",
        created_at=attrs.get("created_at"),
        metadata=attrs.get("metadata") or {},
    )


def error_summary(errors: list[dict[str, Any]]) -> str:
    """Join JSON:API error entries into one readable line.

    Each entry contributes its title, detail, code and source pointer or
    parameter; entries are separated by " | ".
    """
    summaries = []
    for error in errors:
        parts = []
        for field in ("title", "detail", "code"):
            value = error.get(field)
            if isinstance(value, str) and value:
                parts.append(f"{field}: {value}")
        source = error.get("source")
        if isinstance(source, dict):
            source_parts = [
                f"{key}: {source[key]}" for key in ("pointer", "parameter") if source.get(key)
            ]
            if source_parts:
                parts.append(f"source: {', '.join(source_parts)}")
        if parts:
            summaries.append(", ".join(parts))
    return " | ".join(summaries)
