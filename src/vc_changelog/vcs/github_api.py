"""
Minimal client for the GitHub REST API.

Wraps HTTP requests made with :mod:`requests`. Responses with an error
status, connection failures and undecodable bodies raise a
:class:`~vc_changelog.vcs.query.QueryError`. List endpoints are
followed across pages through the ``Link`` response header.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import requests

from vc_changelog.vcs.query import QueryError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


API_URL = "https://api.github.com"

_OWNER_REPO_REGEX = re.compile(r"github\.com[/:]([\w.-]+)/([\w.-]+?)(?:\.git)?/?$")


def owner_repo(repo_url: str) -> Tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub URL; empty strings if it is not one."""
    match = _OWNER_REPO_REGEX.search(repo_url.strip())
    if match is None:
        return "", ""
    return match.group(1), match.group(2)


class GithubAPI:
    """Authenticated access to the GitHub REST API.

    Parameters
    ----------
    token : str
        Personal access or app token. Requests are anonymous when empty.
    api_url : str, optional
        Base URL of the API, for GitHub Enterprise installations.
    request_timeout : float, optional
        Timeout in seconds for each HTTP request.
    """

    def __init__(self, token: str = "", api_url: str = API_URL, request_timeout: float = 30.0) -> None:
        self.api_url = api_url.rstrip("/")
        self.request_timeout = request_timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        if token:
            self.session.headers["Authorization"] = f"token {token}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[requests.Response]:
        """Send a request and return the response.

        Returns ``None`` for a 404 when ``allow_missing`` is True.

        Raises
        ------
        QueryError
            If the request fails or GitHub answers with an error status.
        """
        url = path if path.startswith("http") else f"{self.api_url}{path}"
        logger.debug("GitHub API %s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("GitHub API request failed: %s", exc)
            raise QueryError(str(exc)) from exc
        if allow_missing and response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.error("GitHub API returned status %s: %s", response.status_code, response.text)
            raise QueryError(f"GitHub API returned status {response.status_code}: {response.text}")
        return response

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False) -> Any:
        response = self.request("GET", path, params=params, allow_missing=allow_missing)
        if response is None:
            return None
        return self._decode(response)

    def get_paginated(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Collect every item of a list endpoint, following ``rel="next"`` links."""
        items: List[Any] = []
        url: Optional[str] = path
        query: Optional[Dict[str, Any]] = dict(params or {}, per_page=100)
        while url:
            response = self.request("GET", url, params=query)
            items.extend(self._decode(response))
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string.
            query = None
        return items

    def post_json(self, path: str, payload: Dict[str, Any]) -> Any:
        response = self.request("POST", path, payload=payload)
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse GitHub API response: %s", exc)
            raise QueryError("Failed to parse GitHub API response") from exc
