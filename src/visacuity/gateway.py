"""
Visual acuity Observation gateway.

High level
----------
VisualAcuityGateway records and retrieves LogMAR readings on a FHIR server:

- create_reading / create_or_update_reading build the Observation (see
  `observation.build_observation`) and POST / conditionally PUT it.
- get_readings / get_readings_with_scale search Observations for one
  patient and eye and normalize each Bundle entry into a VisualAcuityReading.

Key behaviors
-------------
- Every network operation raises NotConfiguredError until a server base
  address is set (constructor, configure() or from_env()).
- Transport failures are re-raised as TransportFailureError; OperationOutcome
  diagnostics are joined into the message when the server sent any.
- Retries happen beneath the gateway, in the transport.

Environment
-----------
VISACUITY_FHIR_BASE_URL : Server base address used by from_env()
VISACUITY_FHIR_TOKEN    : Bearer token used by from_env()
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Union

from .codes import EXAM_CATEGORY_TOKEN, method_token
from .errors import NotConfiguredError, TransportFailureError
from .normalize import normalize, normalize_with_scale
from .observation import build_observation
from .reading import BodySite, VisualAcuityReading
from .scales import UnitSystem
from .transport import FhirTransport, TransportError

LOGGER = logging.getLogger(__name__)

Credential = Union[str, Mapping[str, str], None]

OBSERVATION_PATH = "Observation"


class VisualAcuityGateway:
    """
    Client for visual acuity Observations on one FHIR server.

    Parameters
    ----------
    server_base_address : str, optional
        FHIR base URL, e.g. 'https://fhir.example.org/r4'.
    credential : str or mapping, optional
        A bearer token, or a mapping of auth headers sent verbatim.
    transport : FhirTransport, optional
        Transport to use; a default retrying transport is built otherwise.
    """

    def __init__(
        self,
        server_base_address: Optional[str] = None,
        credential: Credential = None,
        transport: Optional[FhirTransport] = None,
    ) -> None:
        self.server_base_address = server_base_address
        self.transport = transport if transport is not None else FhirTransport()
        self._headers: Dict[str, str] = {}
        self._credential_headers: Dict[str, str] = {}
        self.set_credential(credential)

    @classmethod
    def from_env(cls, transport: Optional[FhirTransport] = None) -> "VisualAcuityGateway":
        """Build a gateway from VISACUITY_FHIR_BASE_URL / VISACUITY_FHIR_TOKEN."""
        return cls(
            server_base_address=os.getenv("VISACUITY_FHIR_BASE_URL") or None,
            credential=os.getenv("VISACUITY_FHIR_TOKEN") or None,
            transport=transport,
        )

    # --------------------------------------------------------------------------
    # Configuration
    # --------------------------------------------------------------------------

    def configure(self, server_base_address: str, credential: Credential = None) -> None:
        """Point the gateway at a FHIR server, optionally replacing the credential."""
        self.server_base_address = server_base_address
        if credential is not None:
            self.set_credential(credential)

    def set_credential(self, credential: Credential) -> None:
        """
        Set the credential: a bearer token string, a mapping of auth headers,
        or None to clear it.
        """
        if credential is None:
            self._credential_headers = {}
        elif isinstance(credential, str):
            self._credential_headers = {"Authorization": f"Bearer {credential}"}
        else:
            self._credential_headers = dict(credential)

    def set_headers(self, headers: Optional[Mapping[str, str]]) -> None:
        """Replace the extra headers sent with every request."""
        self._headers = dict(headers or {})

    @property
    def headers(self) -> Dict[str, str]:
        """Headers for the next request; credential headers win on conflict."""
        return {**self._headers, **self._credential_headers}

    def close(self) -> None:
        self.transport.close()

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _require_server(self) -> str:
        if not self.server_base_address:
            raise NotConfiguredError(
                "FHIR server base address is not set; call configure() first"
            )
        return self.server_base_address

    def _send(
        self,
        base_address: str,
        fallback_message: str,
        *,
        method: str,
        query: Mapping[str, Any],
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            return self.transport.request(
                OBSERVATION_PATH,
                method=method,
                base_address=base_address,
                headers=self.headers,
                query=query,
                body=body,
            )
        except TransportError as e:
            diagnostics = e.diagnostics
            message = "; ".join(diagnostics) if diagnostics else fallback_message
            LOGGER.error("%s: %s", fallback_message, e)
            raise TransportFailureError(
                message, diagnostics=diagnostics, status_code=e.status_code
            ) from e

    def _search(self, subject_ref: str, body_site: Union[str, BodySite]) -> List[Dict[str, Any]]:
        base_address = self._require_server()
        site = BodySite.from_label(body_site)
        query = {
            "category": EXAM_CATEGORY_TOKEN,
            "subject": subject_ref,
            "code": method_token(site),
        }
        bundle = self._send(
            base_address,
            "Failed to retrieve visual acuity Observations",
            method="GET",
            query=query,
        )
        entries = bundle.get("entry") or []
        if not isinstance(entries, list):
            raise TransportFailureError(
                f"Malformed Bundle: 'entry' is a {type(entries).__name__}, not a list"
            )
        resources = [
            entry["resource"]
            for entry in entries
            if isinstance(entry, dict) and entry.get("resource")
        ]
        if len(resources) != len(entries):
            LOGGER.warning(
                "Dropped %d Bundle entries without a resource",
                len(entries) - len(resources),
            )
        return resources

    # --------------------------------------------------------------------------
    # Public API
    # --------------------------------------------------------------------------

    def create_reading(
        self,
        subject_ref: str,
        body_site: Union[str, BodySite],
        logmar: float,
        encounter_ref: Optional[str] = None,
        effective_date_time: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a new visual acuity Observation and return the server's copy.

        Raises
        ------
        NotConfiguredError
            If no server base address is set.
        InvalidArgumentError
            If `body_site` is not a known eye.
        TransportFailureError
            If the server rejects the request or cannot be reached.
        """
        base_address = self._require_server()
        observation = build_observation(
            subject_ref, body_site, logmar, encounter_ref, effective_date_time
        )
        created = self._send(
            base_address,
            "Failed to create visual acuity Observation",
            method="POST",
            query={"category": EXAM_CATEGORY_TOKEN},
            body=observation,
        )
        LOGGER.info("Created Observation %s for %s", created.get("id", "?"), subject_ref)
        return created

    def create_or_update_reading(
        self,
        subject_ref: str,
        body_site: Union[str, BodySite],
        logmar: float,
        encounter_ref: Optional[str] = None,
        effective_date_time: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Conditionally update (upsert) the patient's exam Observation.

        The server matches on category and subject; if nothing matches a new
        resource is created. Raises the same errors as create_reading().
        """
        base_address = self._require_server()
        observation = build_observation(
            subject_ref, body_site, logmar, encounter_ref, effective_date_time
        )
        saved = self._send(
            base_address,
            "Failed to create or update visual acuity Observation",
            method="PUT",
            query={"category": EXAM_CATEGORY_TOKEN, "subject": subject_ref},
            body=observation,
        )
        LOGGER.info("Saved Observation %s for %s", saved.get("id", "?"), subject_ref)
        return saved

    def get_readings(
        self, subject_ref: str, body_site: Union[str, BodySite]
    ) -> List[VisualAcuityReading]:
        """Return the patient's readings for one eye, in Bundle order."""
        return [normalize(resource) for resource in self._search(subject_ref, body_site)]

    def get_readings_with_scale(
        self,
        unit_system: Union[str, UnitSystem],
        subject_ref: str,
        body_site: Union[str, BodySite],
    ) -> List[VisualAcuityReading]:
        """
        Like get_readings(), with `display` resolved to a Snellen fraction of
        the given chart wherever the LogMAR value is a chart value.
        """
        self._require_server()
        unit_system = UnitSystem.from_label(unit_system)
        return [
            normalize_with_scale(unit_system, resource)
            for resource in self._search(subject_ref, body_site)
        ]
