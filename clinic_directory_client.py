"""Clinic Directory API client.

A thin wrapper around the REST API using ``requests``.  Every public
method returns a tuple ``(data, error)``: on success ``data`` holds the
decoded JSON body (``None`` for 204 responses) and ``error`` is
``None``; on failure ``data`` is ``None`` and ``error`` is a dictionary
with ``status_code`` and ``message``.

The client covers:

* CRUD for clinics, doctors and health services;
* linking doctors to clinics and health services to doctors;
* recomputing a clinic's derived health services.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]

RESOURCES = {
    "clinics": "/clinics",
    "doctors": "/doctors",
    "health_services": "/healthServices",
}


class ClinicDirectoryAPI:
    """Client for the clinic directory API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL including the version prefix, e.g.
                ``https://example.com/v1``.
            api_key: Bearer token sent in the ``Authorization`` header.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Result:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    detail = err_json.get("detail") if isinstance(err_json, dict) else None
                    message = detail if isinstance(detail, str) else str(detail or err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _path(self, resource: str, entity_id: Optional[str] = None) -> str:
        base = RESOURCES[resource]
        return f"{base}/{entity_id}" if entity_id else f"{base}/"

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------
    def create(self, resource: str, name: str) -> Result:
        return self._request("POST", self._path(resource), json_body={"name": name})

    def list(self, resource: str, **filters: Any) -> Result:
        """List entities; keyword arguments become query parameters."""
        params = {key: value for key, value in filters.items() if value is not None}
        return self._request("GET", self._path(resource), params=params or None)

    def get(self, resource: str, entity_id: str) -> Result:
        return self._request("GET", self._path(resource, entity_id))

    def rename(self, resource: str, entity_id: str, name: str) -> Result:
        return self._request("PATCH", self._path(resource, entity_id), json_body={"name": name})

    def delete(self, resource: str, entity_id: str) -> Result:
        return self._request("DELETE", self._path(resource, entity_id))

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------
    def add_doctor_to_clinic(self, doctor_id: str, clinic_id: str) -> Result:
        return self._request("POST", f"/clinics/doctor/{clinic_id}", json_body={"doctorId": doctor_id})

    def remove_doctor_from_clinic(self, doctor_id: str, clinic_id: str) -> Result:
        return self._request("DELETE", f"/clinics/doctor/{clinic_id}", json_body={"doctorId": doctor_id})

    def add_health_service_to_doctor(self, health_service_id: str, doctor_id: str) -> Result:
        return self._request(
            "POST",
            f"/doctors/healthService/{doctor_id}",
            json_body={"healthServiceId": health_service_id},
        )

    def remove_health_service_from_doctor(self, health_service_id: str, doctor_id: str) -> Result:
        return self._request(
            "DELETE",
            f"/doctors/healthService/{doctor_id}",
            json_body={"healthServiceId": health_service_id},
        )

    def recompute_clinic(self, clinic_id: str) -> Result:
        return self._request("POST", f"/clinics/{clinic_id}/healthServices/recompute")
