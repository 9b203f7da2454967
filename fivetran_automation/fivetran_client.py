"""Fivetran REST API client for listing account resources and pausing connectors."""

from typing import Iterable, List, Optional
from urllib.parse import quote
import logging

import httpx

from .config import Settings
from .errors import ApiError, ConnectorPauseError, ResponseDecodeError
from .filters import compile_filters
from .http_call import HttpCaller, ParamBuilder, basic_auth_header
from .pagination import CursorPager
from .types import FilterSpec, Item, QueryResult

logger = logging.getLogger(__name__)

# A single empty clause: list everything
NO_FILTERS: List[FilterSpec] = [{}]


class FivetranClient:
    """Client for the Fivetran REST API.

    Listing methods accept ``filters``, a list of ``{field: value}`` clauses
    OR-ed together, and ``exit_on_first_match``, which stops paging as soon as
    one item matches.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self.base_url = settings.fivetran_base_url.rstrip('/')

        self._auth_header = basic_auth_header(settings.fivetran_api_key, settings.fivetran_api_secret)
        self.client = httpx.Client(timeout=settings.request_timeout, transport=transport)

        self.params = ParamBuilder(self._auth_header, api_version=settings.fivetran_api_version)
        self.caller = HttpCaller(self.client)
        self.pager = CursorPager(self.caller, self.params, page_size=settings.page_size)

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "FivetranClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _get_api_url(self, path: str) -> str:
        """Construct an API URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def query(
        self,
        path: str,
        filters: Optional[Iterable[FilterSpec]] = None,
        exit_on_first_match: bool = True,
    ) -> QueryResult:
        """Run a paginated, filtered listing of *path* and keep the termination reason."""
        filters = list(filters) if filters is not None else NO_FILTERS
        return self.pager.run(self._get_api_url(path), filters, exit_on_first_match)

    def get_groups(self, filters=None, exit_on_first_match: bool = True) -> List[Item]:
        """List all groups in the account (e.g. filter on ``name``)."""
        return self.query("groups", filters, exit_on_first_match).items

    def get_users(self, filters=None, exit_on_first_match: bool = True) -> List[Item]:
        """List all users in the account (e.g. filter on ``email``)."""
        return self.query("users", filters, exit_on_first_match).items

    def get_teams(self, filters=None, exit_on_first_match: bool = True) -> List[Item]:
        """List all teams in the account (e.g. filter on ``name``)."""
        return self.query("teams", filters, exit_on_first_match).items

    def get_connectors_in_group(
        self, group_id: str, filters=None, exit_on_first_match: bool = True
    ) -> List[Item]:
        """List the connectors of one group (e.g. filter on ``service``)."""
        return self.query(f"groups/{quote(str(group_id), safe='')}/connectors", filters, exit_on_first_match).items

    def get_connectors(self, filters=None, exit_on_first_match: bool = True) -> List[Item]:
        """List connectors across every group in the account.

        Groups are walked in listing order. If a group's connectors cannot be
        listed the walk stops there and the connectors found so far are
        returned. With ``exit_on_first_match`` and a non-empty filter the walk
        ends after the first group that yields a match, rather than collecting
        the first match of every group.
        """
        filters = list(filters) if filters is not None else NO_FILTERS
        stop_on_match = exit_on_first_match and compile_filters(filters).filter_required
        connectors: List[Item] = []
        for group in self.get_groups(NO_FILTERS, exit_on_first_match=False):
            group_id = group.get("id") if isinstance(group, dict) else None
            if not group_id:
                logger.warning("Skipping group without id: %r", group)
                continue
            try:
                found = self.get_connectors_in_group(group_id, filters, exit_on_first_match)
            except (ApiError, ResponseDecodeError, httpx.HTTPError) as e:
                logger.error(f"Listing connectors of group {group_id} failed: {e}")
                break
            connectors.extend(found)
            if stop_on_match and found:
                break
        return connectors

    def pause_connector(self, connector_id: str) -> None:
        """Pause a connector."""
        url = self._get_api_url(f"connectors/{quote(str(connector_id), safe='')}")
        params = self.params.build("PATCH", {"paused": True})
        try:
            self.caller.call(url, params)
        except ApiError as e:
            logger.error(f"pauseConnector: Pause Failed, connector_id='{connector_id}'")
            raise ConnectorPauseError(connector_id, e.error) from e
        logger.info(f"pauseConnector: Pause Success, connector_id='{connector_id}'")
