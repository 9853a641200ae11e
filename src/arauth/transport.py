"""httpx transport adapter for ``google-auth`` token refresh.

``google-auth`` performs token exchanges through an abstract
:class:`google.auth.transport.Request` callable. This module implements
that interface on top of :class:`httpx.Client` so credential refresh uses
the same HTTP stack as the rest of arauth.

Example::

    from arauth.transport import Request

    with Request(timeout=10.0) as request:
        credentials.refresh(request)
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import google.auth.exceptions
import google.auth.transport
import httpx

DEFAULT_TIMEOUT = 30.0


class _Response(google.auth.transport.Response):
    """Expose an :class:`httpx.Response` through the ``google-auth`` response interface."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return dict(self._response.headers)

    @property
    def data(self) -> bytes:
        return self._response.content


class Request(google.auth.transport.Request):
    """``google-auth`` request callable backed by :class:`httpx.Client`.

    Network failures are re-raised as
    :class:`google.auth.exceptions.TransportError`, which ``google-auth``
    expects from every transport.

    Args:
        client: Optional pre-configured client. When omitted, a client is
            created and closed by :meth:`close`.
        timeout: Default timeout in seconds, used when ``google-auth``
            does not pass one explicitly.
    """

    def __init__(
        self, client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()
        self._timeout = timeout

    def __call__(
        self,
        url: str,
        method: str = "GET",
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> _Response:
        try:
            response = self._client.request(
                method,
                url,
                content=body,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise google.auth.exceptions.TransportError(exc) from exc
        return _Response(response)

    def close(self) -> None:
        """Close the underlying client if this request created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Request:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
