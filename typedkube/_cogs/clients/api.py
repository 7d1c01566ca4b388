"""
The only place where the HTTP requests are made to the API server.

Everything above (the request builders, the discovery) composes the URLs,
the queries and the bodies; here, they are sent with the context's session,
checked for the API errors, and retried on the transient errors if configured.
"""
import asyncio
import collections.abc
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

import aiohttp

from typedkube._cogs.clients import auth, errors
from typedkube._cogs.configs import configuration
from typedkube._cogs.helpers import typedefs
from typedkube._cogs.structs import references

# The client errors (4xx) are never retried: the same request gets the same error.
RETRIABLE_ERRORS = (aiohttp.ClientConnectionError, errors.APIServerError, asyncio.TimeoutError)


async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        data: Optional[bytes] = None,
        params: Optional[references.QueryParams] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    if payload is not None and data is not None:
        raise ValueError("Either a JSON payload or raw data can be sent, not both.")

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    what = f"{method.upper()} {url}"
    backoffs = _iter_backoffs(settings.networking.error_backoffs)
    attempt = 0
    while True:
        attempt += 1
        try:
            response = await context.session.request(
                method=method,
                url=url,
                json=payload,
                data=data,
                params=params,
                headers=headers,
                timeout=timeout,
            )
            await errors.check_response(response)  # but do not parse it!
        except RETRIABLE_ERRORS as e:
            backoff = next(backoffs, None)
            if backoff is None:
                logger.error(f"Request attempt #{attempt} failed; escalating: {what} -> {e!r}")
                raise
            logger.error(f"Request attempt #{attempt} failed; will retry in {backoff}s: "
                         f"{what} -> {e!r}")
            await asyncio.sleep(backoff)  # non-awakable! but still cancellable.
        else:
            if attempt > 1:
                logger.debug(f"Request attempt #{attempt} succeeded: {what}")
            return response


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> Any:
    response = await request('get', url, context=context, settings=settings, logger=logger)
    async with response:
        return await response.json()


def _iter_backoffs(backoffs: Union[float, Iterable[float]]) -> Iterator[float]:
    if isinstance(backoffs, collections.abc.Iterable):
        yield from backoffs
    else:
        yield backoffs
