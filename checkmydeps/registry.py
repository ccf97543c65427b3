"""npm registry client and bounded-concurrency metadata fetching."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .config import DEFAULT_CONCURRENCY, DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT
from .errors import PackageNotFoundError, RegistryFetchError
from .logging import get_logger
from .models import DependencyDeclaration, RegistryPackageData

T = TypeVar("T")
R = TypeVar("R")

logger = get_logger("registry")


@dataclass
class FetchResult:
    """Outcome of fetching one package; exactly one of data/error is set."""

    package_name: str
    data: Optional[RegistryPackageData] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.data is not None


def encode_package_name(package_name: str) -> str:
    """Encode a package name for a registry URL (``@scope/name`` -> ``@scope%2Fname``)."""
    return quote(package_name, safe="@")


class RegistryClient:
    """Client for the npm registry document endpoint."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the registry client.

        Args:
            registry_url: Base URL of the registry
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx client (owned by the caller)
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "RegistryClient":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def package_url(self, package_name: str) -> str:
        return f"{self.registry_url}/{encode_package_name(package_name)}"

    async def get_package_data(self, package_name: str) -> RegistryPackageData:
        """Fetch the registry document of a package.

        Args:
            package_name: Name of the package

        Returns:
            Parsed registry document

        Raises:
            PackageNotFoundError: The registry does not know the package
            RegistryFetchError: Timeout, network, HTTP or payload errors
        """
        if self._client is None:
            raise RuntimeError("RegistryClient must be used as an async context manager")

        url = self.package_url(package_name)
        logger.debug("GET %s", url)

        try:
            # httpx timeouts apply per read; bound the whole request as well
            response = await asyncio.wait_for(
                self._client.get(url, timeout=self.timeout), self.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise RegistryFetchError(
                package_name, f"Timeout fetching metadata for {package_name}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RegistryFetchError(
                package_name, f"Request error for {package_name}: {exc}"
            ) from exc

        if response.status_code == 404:
            raise PackageNotFoundError(
                package_name, f"Package {package_name} not found in the registry"
            )
        if response.status_code != 200:
            raise RegistryFetchError(
                package_name,
                f"Failed to fetch package {package_name}: HTTP {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RegistryFetchError(
                package_name, f"Failed to parse response for {package_name}: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise RegistryFetchError(
                package_name, f"Unexpected response for {package_name}: not a JSON object"
            )

        try:
            return RegistryPackageData.model_validate(payload)
        except ValidationError as exc:
            raise RegistryFetchError(
                package_name,
                f"Invalid registry document for {package_name}: {exc.error_count()} errors",
            ) from exc


async def process_in_chunks(
    items: Sequence[T],
    callback: Callable[[T, int], Awaitable[R]],
    limit: int = DEFAULT_CONCURRENCY,
) -> list[R]:
    """Run ``callback(item, index)`` for every item with at most ``limit`` in flight.

    The window slides rather than running fixed chunks: a new call starts as
    soon as any running one finishes. Results are returned in the order of ``items`` regardless of completion
    order.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if not items:
        return []

    semaphore = asyncio.Semaphore(limit)

    async def run(item: T, index: int) -> R:
        async with semaphore:
            return await callback(item, index)

    return list(await asyncio.gather(*(run(item, index) for index, item in enumerate(items))))


async def fetch_registry_data(
    declarations: Sequence[DependencyDeclaration],
    client: RegistryClient,
    limit: int = DEFAULT_CONCURRENCY,
) -> list[FetchResult]:
    """Fetch registry metadata for declared dependencies.

    One request is issued per distinct registry name; the returned list lines
    up with ``declarations``. A failing package yields a FetchResult with
    ``error`` set and does not affect the others.
    """
    names = list(dict.fromkeys(declaration.registry_name for declaration in declarations))

    async def fetch(name: str, _index: int) -> FetchResult:
        try:
            data = await client.get_package_data(name)
        except RegistryFetchError as exc:
            logger.debug("%s", exc)
            return FetchResult(package_name=name, error=str(exc))
        return FetchResult(package_name=name, data=data)

    results = await process_in_chunks(names, fetch, limit)
    by_name = dict(zip(names, results))

    return [by_name[declaration.registry_name] for declaration in declarations]
