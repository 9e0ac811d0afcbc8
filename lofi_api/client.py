"""Lofi API client.

A thin wrapper around the HTTP API for scripts, bots and tests.  It
uses the ``requests`` library and mirrors the server's routes one
method per endpoint:

* accounts: :meth:`LofiClient.register`, :meth:`LofiClient.login`,
  :meth:`LofiClient.get_user`
* catalog: :meth:`LofiClient.list_songs`, :meth:`LofiClient.like_song`,
  :meth:`LofiClient.liked_songs`
* playlists: create, edit, add/remove songs, favourite, random, get,
  list and delete
* :meth:`LofiClient.search`

Every method returns a tuple ``(data, error)``.  On success ``data``
holds the ``data`` member of the response envelope (or the message for
endpoints that only return one) and ``error`` is ``None``.  On failure
``data`` is ``None`` and ``error`` is a dictionary with the keys
``status_code`` and ``message``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class LofiClient:
    """Client for the Lofi API.

    ``base_url`` is the server root (e.g. ``http://localhost:8080``);
    the ``/api`` prefix is added by the client.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request against ``/api<path>``.

        Returns the parsed JSON body as ``data`` on success, or an error
        dictionary built from the ``message`` of the error body.
        """
        url = f"{self.base_url}/api{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
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
                    message = err_json.get("message") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _data(self, method: str, path: str, **kwargs: Any) -> Result:
        body, error = self._request(method, path, **kwargs)
        if error:
            return None, error
        return (body or {}).get("data"), None

    def _message(self, method: str, path: str, **kwargs: Any) -> Result:
        body, error = self._request(method, path, **kwargs)
        if error:
            return None, error
        return (body or {}).get("message"), None

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def register(self, name: str, email: str, password: str, **profile: Any) -> Result:
        payload = {"name": name, "email": email, "password": password, **profile}
        return self._data("POST", "/users", json_body=payload)

    def login(self, email: str, password: str) -> Result:
        """Log in and remember the returned token for later calls."""
        token, error = self._data("POST", "/login", json_body={"email": email, "password": password})
        if token:
            self.token = token
        return token, error

    def get_user(self, user_id: str) -> Result:
        return self._data("GET", f"/users/{user_id}")

    # ------------------------------------------------------------------
    # Songs
    # ------------------------------------------------------------------
    def list_songs(self) -> Result:
        return self._data("GET", "/songs")

    def like_song(self, song_id: str) -> Result:
        """Toggle the like on a song; ``data`` is the server's message."""
        return self._message("PUT", f"/songs/like/{song_id}")

    def liked_songs(self) -> Result:
        return self._data("GET", "/songs/like")

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------
    def create_playlist(self, name: str, description: str = "", image_url: str = "") -> Result:
        return self._data(
            "POST", "/playlists",
            json_body={"name": name, "description": description, "image_url": image_url},
        )

    def edit_playlist(self, playlist_id: str, name: str, description: str = "",
                      image_url: str = "") -> Result:
        return self._data(
            "PUT", f"/playlists/edit/{playlist_id}",
            json_body={"name": name, "description": description, "image_url": image_url},
        )

    def add_song(self, playlist_id: str, song_id: str) -> Result:
        return self._data(
            "PUT", "/playlists/add-song",
            json_body={"playlist_id": playlist_id, "song_id": song_id},
        )

    def remove_song(self, playlist_id: str, song_id: str) -> Result:
        return self._data(
            "PUT", "/playlists/remove-song",
            json_body={"playlist_id": playlist_id, "song_id": song_id},
        )

    def favourite_playlists(self) -> Result:
        return self._data("GET", "/playlists/favourite")

    def random_playlists(self) -> Result:
        return self._data("GET", "/playlists/random")

    def get_playlist(self, playlist_id: str) -> Result:
        """Return ``{"playlist": ..., "songs": [...]}``."""
        return self._data("GET", f"/playlists/{playlist_id}")

    def list_playlists(self) -> Result:
        return self._data("GET", "/playlists")

    def delete_playlist(self, playlist_id: str) -> Result:
        return self._message("DELETE", f"/playlists/{playlist_id}")

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def search(self, text: str) -> Tuple[Dict[str, List[Dict[str, Any]]], Optional[Dict[str, Any]]]:
        data, error = self._data("GET", "/search", params={"search": text})
        if error:
            return {"songs": [], "playlists": []}, error
        return data or {"songs": [], "playlists": []}, None
