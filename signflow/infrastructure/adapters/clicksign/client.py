"""Clicksign API v3 client (JSON:API over httpx).

Authentication uses the raw access token in the Authorization header
(no "Bearer" prefix). Every response's x-request-id is logged so that
failures can be traced with Clicksign support.
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from structlog import get_logger

from signflow.config.settings import ClicksignConfig
from signflow.domain.errors import SigningProviderNotConfiguredError, ValidationError
from signflow.domain.models.provider import (
    ENVELOPE_ACTIVE_STATUSES,
    ProviderDocument,
    ProviderEnvelope,
    ProviderEvent,
    ProviderRequirement,
    ProviderSigner,
    SignerInput,
)
from signflow.infrastructure.adapters.clicksign.errors import (
    ClicksignError,
    ClicksignPermanentError,
    ClicksignTransientError,
)
from signflow.infrastructure.adapters.clicksign.mappers import (
    document_from,
    envelope_from,
    error_summary,
    event_from,
    requirement_from,
    signer_from,
)
from signflow.infrastructure.monitoring.metrics import get_metrics_collector

logger = get_logger()

JSON_API_MEDIA_TYPE = "application/vnd.api+json"
MAX_SIGNER_NAME_LENGTH = 255

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_LINE_BREAKS = re.compile(r"[\r\n\t]")
_WHITESPACE = re.compile(r"\s+")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SleepFn = Callable[[float], Awaitable[None]]


def clean_signer_name(name: str | None) -> str:
    """Normalise a signer name for the provider.

    Trims, cuts at 255 characters, drops control characters, turns line
    breaks and tabs into spaces and collapses runs of whitespace.

    Raises:
        ValidationError: If fewer than 2 characters remain.
    """
    cleaned = (name or "").strip()
    if len(cleaned) < 2:
        raise ValidationError("Signer name must have at least 2 characters", field="name")
    cleaned = cleaned[:MAX_SIGNER_NAME_LENGTH].strip()
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _LINE_BREAKS.sub(" ", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    if len(cleaned) < 2:
        raise ValidationError(
            "Signer name must have at least 2 valid characters", field="name"
        )
    return cleaned


def clean_signer_email(email: str | None) -> str:
    cleaned = (email or "").strip()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValidationError("Signer email is required and must be valid", field="email")
    return cleaned


class ClicksignClient:
    """Client for the Clicksign envelope API."""

    def __init__(
        self,
        config: ClicksignConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize Clicksign client.

        Args:
            config: Clicksign API configuration.
            transport: Optional httpx transport (tests use MockTransport).
            sleep: Coroutine used between polling attempts.
        """
        self.config = config
        self._base_url = config.api_base.rstrip("/")
        self._timeout = config.timeout_seconds
        self._transport = transport
        self._sleep = sleep

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _headers(self) -> dict[str, str]:
        if not self.config.access_token:
            raise SigningProviderNotConfiguredError()
        return {
            "Authorization": self.config.access_token,
            "Content-Type": JSON_API_MEDIA_TYPE,
            "Accept": JSON_API_MEDIA_TYPE,
        }

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a JSON:API request and return the decoded body.

        Raises:
            ClicksignTransientError: Timeouts, connection errors, 429, 5xx.
            ClicksignPermanentError: Any other non-2xx response.
        """
        headers = self._headers()
        url = f"{self._base_url}{path}"
        log = logger.bind(operation=operation, method=method, path=path)
        collector = get_metrics_collector()
        started = time.perf_counter()

        async with self._http_client() as client:
            try:
                response = await client.request(method, url, json=body, headers=headers)
            except httpx.TimeoutException as e:
                collector.record_provider_request(operation, "timeout")
                log.warning("clicksign_request_timeout", timeout=self._timeout)
                raise ClicksignTransientError(
                    f"Request timeout after {self._timeout}s", retry_after=5
                ) from e
            except httpx.RequestError as e:
                collector.record_provider_request(operation, "connection_error")
                log.warning("clicksign_request_failed", error=str(e))
                raise ClicksignTransientError(f"Request failed: {e}", retry_after=5) from e

        elapsed = time.perf_counter() - started
        request_id = response.headers.get("x-request-id")
        log.debug(
            "clicksign_response",
            status_code=response.status_code,
            request_id=request_id,
        )

        if response.is_error:
            collector.record_provider_request(operation, "rejected", elapsed)
            error = self._error_from_response(response, request_id)
            log.error(
                "clicksign_request_rejected",
                status_code=response.status_code,
                request_id=request_id,
                error=str(error),
            )
            raise error

        if response.status_code == 204 or not response.content:
            collector.record_provider_request(operation, "success", elapsed)
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            collector.record_provider_request(operation, "rejected", elapsed)
            log.error(
                "clicksign_response_not_json",
                status_code=response.status_code,
                request_id=request_id,
            )
            raise ClicksignPermanentError(
                f"Clicksign API returned a non-JSON body: {response.text[:200]}",
                status_code=response.status_code,
                request_id=request_id,
            ) from e
        if not isinstance(payload, dict):
            collector.record_provider_request(operation, "rejected", elapsed)
            raise ClicksignPermanentError(
                "Clicksign API returned an unexpected body",
                status_code=response.status_code,
                request_id=request_id,
            )
        collector.record_provider_request(operation, "success", elapsed)
        return payload

    def _error_from_response(
        self, response: httpx.Response, request_id: str | None
    ) -> ClicksignError:
        status = response.status_code
        message = f"Clicksign API error: {status} {response.reason_phrase}"
        errors: list[dict[str, Any]] = []
        try:
            payload = response.json()
        except ValueError:
            payload = None
            message = f"{message} - {response.text[:500]}"
        if isinstance(payload, dict) and isinstance(payload.get("errors"), list):
            errors = [e for e in payload["errors"] if isinstance(e, dict)]
            summary = error_summary(errors)
            if summary:
                message = summary

        first = errors[0] if errors else {}
        kwargs: dict[str, Any] = {
            "status_code": status,
            "title": str(first["title"]) if first.get("title") else None,
            "detail": str(first["detail"]) if first.get("detail") else message,
            "request_id": request_id,
            "code": str(first["code"]) if first.get("code") is not None else None,
            "errors": errors,
        }

        if status == 429 or status >= 500:
            retry_after = response.headers.get("Retry-After")
            return ClicksignTransientError(
                message,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else 30,
                **kwargs,
            )
        return ClicksignPermanentError(message, **kwargs)

    # ------------------------------------------------------------------
    # Envelopes
    # ------------------------------------------------------------------

    async def create_envelope(
        self,
        name: str,
        locale: str = "pt-BR",
        auto_close: bool = True,
        remind_interval: int | None = None,
        block_after_refusal: bool | None = None,
        deadline_at: str | None = None,
    ) -> str:
        """Create a draft envelope.

        Returns:
            The envelope id.
        """
        attributes: dict[str, Any] = {"name": name, "locale": locale, "auto_close": auto_close}
        if remind_interval is not None:
            attributes["remind_interval"] = remind_interval
        if block_after_refusal is not None:
            attributes["block_after_refusal"] = block_after_refusal
        if deadline_at is not None:
            attributes["deadline_at"] = deadline_at

        payload = await self._request(
            "POST",
            "/envelopes",
            "create_envelope",
            {"data": {"type": "envelopes", "attributes": attributes}},
        )
        envelope_id = str(payload["data"]["id"])
        logger.info("clicksign_envelope_created", envelope_id=envelope_id)
        return envelope_id

    async def update_envelope(
        self, envelope_id: str, attributes: dict[str, Any]
    ) -> ProviderEnvelope:
        payload = await self._request(
            "PATCH",
            f"/envelopes/{envelope_id}",
            "update_envelope",
            {"data": {"id": envelope_id, "type": "envelopes", "attributes": attributes}},
        )
        return envelope_from(payload.get("data") or {"id": envelope_id})

    async def get_envelope(self, envelope_id: str) -> ProviderEnvelope:
        payload = await self._request("GET", f"/envelopes/{envelope_id}", "get_envelope")
        return envelope_from(payload["data"])

    async def get_envelope_status(self, envelope_id: str) -> str:
        return (await self.get_envelope(envelope_id)).status

    async def activate_envelope(self, envelope_id: str) -> None:
        """Start the envelope unless it is already active, running or closed."""
        log = logger.bind(envelope_id=envelope_id)
        try:
            status = await self.get_envelope_status(envelope_id)
        except ClicksignError as e:
            log.warning("clicksign_envelope_status_unavailable", error=str(e))
        else:
            if status in ENVELOPE_ACTIVE_STATUSES:
                log.info("clicksign_envelope_already_active", status=status)
                return
        await self.update_envelope(envelope_id, {"status": "running"})
        log.info("clicksign_envelope_activated")

    async def notify_envelope(self, envelope_id: str, message: str | None = None) -> None:
        attributes = {"message": message} if message else {}
        await self._request(
            "POST",
            f"/envelopes/{envelope_id}/notifications",
            "notify_envelope",
            {"data": {"type": "notifications", "attributes": attributes}},
        )

    async def delete_envelope(self, envelope_id: str) -> None:
        await self._request("DELETE", f"/envelopes/{envelope_id}", "delete_envelope")

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def add_document(
        self,
        envelope_id: str,
        filename: str,
        content_base64: str | None = None,
        template: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Upload a document into an envelope.

        Args:
            envelope_id: Target envelope.
            filename: File name shown to signers.
            content_base64: Data URI ("data:application/pdf;base64,...").
            template: Template reference, used instead of content_base64.
            metadata: Free-form metadata stored with the document.

        Returns:
            The document id.
        """
        if not content_base64 and not template:
            raise ValidationError("Either content_base64 or template is required")
        attributes: dict[str, Any] = {"filename": filename}
        if content_base64:
            attributes["content_base64"] = content_base64
        else:
            attributes["template"] = template
        if metadata:
            attributes["metadata"] = metadata

        payload = await self._request(
            "POST",
            f"/envelopes/{envelope_id}/documents",
            "add_document",
            {"data": {"type": "documents", "attributes": attributes}},
        )
        document_id = str(payload["data"]["id"])
        logger.info(
            "clicksign_document_added", envelope_id=envelope_id, document_id=document_id
        )
        return document_id

    async def get_document(self, envelope_id: str, document_id: str) -> ProviderDocument:
        payload = await self._request(
            "GET", f"/envelopes/{envelope_id}/documents/{document_id}", "get_document"
        )
        return document_from(payload["data"])

    async def get_document_status(
        self, document_id: str, envelope_id: str | None = None
    ) -> ProviderDocument:
        """Read document status and download links.

        The envelope-scoped endpoint is tried first; a 404 there falls
        back to the top-level /documents endpoint.
        """
        if envelope_id:
            try:
                return await self.get_document(envelope_id, document_id)
            except ClicksignError as e:
                if not e.is_not_found:
                    raise
                logger.warning(
                    "clicksign_document_fallback_lookup",
                    envelope_id=envelope_id,
                    document_id=document_id,
                )
        payload = await self._request("GET", f"/documents/{document_id}", "get_document")
        return document_from(payload["data"])

    async def delete_document(self, envelope_id: str, document_id: str) -> None:
        await self._request(
            "DELETE",
            f"/envelopes/{envelope_id}/documents/{document_id}",
            "delete_document",
        )

    async def download(self, url: str) -> bytes:
        """Download a file, resolving relative URLs against the provider host."""
        if not url.startswith("http"):
            host = self._base_url.replace("/api/v3", "")
            url = f"{host}{url}"
        headers = {"Authorization": self._headers()["Authorization"]}

        async with self._http_client() as client:
            try:
                response = await client.get(url, headers=headers, follow_redirects=True)
            except httpx.RequestError as e:
                raise ClicksignTransientError(f"Download failed: {e}") from e

        if response.is_error:
            raise ClicksignError(
                f"Download failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        logger.info("clicksign_file_downloaded", size=len(response.content))
        return response.content

    # ------------------------------------------------------------------
    # Signers
    # ------------------------------------------------------------------

    async def add_signer(self, envelope_id: str, signer: SignerInput) -> str:
        """Create a signer in an envelope.

        Raises:
            ValidationError: If the name or email is unusable.

        Returns:
            The signer id.
        """
        attributes: dict[str, Any] = {
            "name": clean_signer_name(signer.name),
            "email": clean_signer_email(signer.email),
        }
        if signer.birthday:
            attributes["birthday"] = signer.birthday
        if signer.phone_number is not None:
            attributes["phone_number"] = signer.phone_number
        if signer.has_documentation is not None:
            attributes["has_documentation"] = signer.has_documentation
        if signer.refusable is not None:
            attributes["refusable"] = signer.refusable
        if signer.group is not None:
            attributes["group"] = signer.group
        if signer.communicate_events is not None:
            attributes["communicate_events"] = signer.communicate_events.to_dict()

        payload = await self._request(
            "POST",
            f"/envelopes/{envelope_id}/signers",
            "add_signer",
            {"data": {"type": "signers", "attributes": attributes}},
        )
        signer_id = str(payload["data"]["id"])
        logger.info("clicksign_signer_added", envelope_id=envelope_id, signer_id=signer_id)
        return signer_id

    async def get_signers(self, envelope_id: str) -> list[ProviderSigner]:
        payload = await self._request("GET", f"/envelopes/{envelope_id}/signers", "get_signers")
        return [signer_from(item) for item in payload.get("data") or []]

    async def delete_signer(self, envelope_id: str, signer_id: str) -> None:
        await self._request(
            "DELETE", f"/envelopes/{envelope_id}/signers/{signer_id}", "delete_signer"
        )

    # ------------------------------------------------------------------
    # Requirements
    # ------------------------------------------------------------------

    @staticmethod
    def _requirement_body(
        attributes: dict[str, Any], document_id: str, signer_id: str
    ) -> dict[str, Any]:
        return {
            "data": {
                "type": "requirements",
                "attributes": attributes,
                "relationships": {
                    "document": {"data": {"type": "documents", "id": document_id}},
                    "signer": {"data": {"type": "signers", "id": signer_id}},
                },
            }
        }

    async def _wait_for_document(
        self, envelope_id: str, document_id: str, attempts: int
    ) -> bool:
        for attempt in range(1, attempts + 1):
            try:
                document = await self.get_document_status(document_id, envelope_id)
            except ClicksignError as e:
                logger.warning(
                    "clicksign_document_check_failed", attempt=attempt, error=str(e)
                )
            else:
                if document.status and document.status not in ("processing", "uploading"):
                    return True
            if attempt < attempts:
                await self._sleep(self.config.requirement_retry_delay)
        return False

    async def add_signature_requirement(
        self,
        envelope_id: str,
        document_id: str,
        signer_id: str,
        max_retries: int = 3,
    ) -> ProviderRequirement:
        """Bind a signer to a document with the "agree"/"sign" requirement.

        Waits for the document to leave processing, then retries while the
        provider reports the document as not yet available.
        """
        if not await self._wait_for_document(envelope_id, document_id, max_retries):
            logger.warning(
                "clicksign_document_maybe_unavailable",
                envelope_id=envelope_id,
                document_id=document_id,
            )

        body = self._requirement_body(
            {"action": "agree", "role": "sign"}, document_id, signer_id
        )
        for attempt in range(1, max_retries + 1):
            try:
                payload = await self._request(
                    "POST",
                    f"/envelopes/{envelope_id}/requirements",
                    "add_signature_requirement",
                    body,
                )
            except ClicksignError as e:
                if e.is_document_unavailable and attempt < max_retries:
                    await self._sleep(self.config.requirement_retry_delay)
                    continue
                raise
            return requirement_from(payload["data"])
        raise ClicksignError("Could not add signature requirement")  # pragma: no cover

    async def add_auth_requirement(
        self,
        envelope_id: str,
        document_id: str,
        signer_id: str,
        auth: str = "icp_brasil",
    ) -> ProviderRequirement:
        """Require the signer to authenticate ("email", "icp_brasil" or "sms")."""
        if auth not in ("email", "icp_brasil", "sms"):
            raise ValidationError(f"Unsupported authentication method: {auth}")
        payload = await self._request(
            "POST",
            f"/envelopes/{envelope_id}/requirements",
            "add_auth_requirement",
            self._requirement_body(
                {"action": "provide_evidence", "auth": auth}, document_id, signer_id
            ),
        )
        return requirement_from(payload["data"])

    async def bulk_requirements(
        self, envelope_id: str, operations: list[dict[str, Any]]
    ) -> list[ProviderRequirement]:
        """Apply add/remove/update requirement operations atomically."""
        for operation in operations:
            if operation.get("op") not in ("add", "remove", "update"):
                raise ValidationError(f"Invalid bulk operation: {operation.get('op')}")
        payload = await self._request(
            "POST",
            f"/envelopes/{envelope_id}/bulk_requirements",
            "bulk_requirements",
            {"atomic:operations": operations},
        )
        results = payload.get("atomic:results") or []
        return [requirement_from(r["data"]) for r in results if r.get("data")]

    async def get_requirements(self, envelope_id: str) -> list[ProviderRequirement]:
        payload = await self._request(
            "GET", f"/envelopes/{envelope_id}/requirements", "get_requirements"
        )
        return [requirement_from(item) for item in payload.get("data") or []]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def get_document_events(
        self, envelope_id: str, document_id: str
    ) -> list[ProviderEvent]:
        payload = await self._request(
            "GET",
            f"/envelopes/{envelope_id}/documents/{document_id}/events",
            "get_document_events",
        )
        return [event_from(item) for item in payload.get("data") or []]

    async def get_envelope_events(self, envelope_id: str) -> list[ProviderEvent]:
        payload = await self._request(
            "GET", f"/envelopes/{envelope_id}/events", "get_envelope_events"
        )
        return [event_from(item) for item in payload.get("data") or []]
