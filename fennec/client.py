"""The public FurAffinity client.

Every read operation follows the same path: fetch the page through the
PageFetcher, detect its theme, apply the page kind's DualFieldMap and
validate the record into its pydantic model. Listing operations wrap the
single-page operation in a Paginator.

Example::

    async with FennecClient(ClientConfig(cookies=COOKIES, timezone="UTC")) as fa:
        async for batch in fa.get_user_gallery("someone"):
            for submission in batch:
                print(submission.id, submission.title)

        submission = await fa.get_submission(12345678)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Literal, TypeVar

from fennec.common.extractor import extract_body
from fennec.common.field_map import DualFieldMap, ExtractionContext
from fennec.common.paginator import Paginator, SearchPaginator
from fennec.common.request_manager import HttpxTransport, PageFetcher
from fennec.config import ClientConfig, SearchQueryParams
from fennec.data_types import (
    FORM_URLENCODED,
    HttpMethod,
    NoteFolder,
    PageTheme,
    PaginationCursor,
    RequestOptions,
)
from fennec.field_maps.comments import comment_text_map
from fennec.field_maps.gallery import GalleryKind, gallery_map
from fennec.field_maps.journals import journal_map, journals_map
from fennec.field_maps.messages import MESSAGES, MESSAGES_PATH
from fennec.field_maps.notes import NOTES, NOTES_PATH, note_map
from fennec.field_maps.search import SEARCH_PATH, search_map
from fennec.field_maps.stats import STATISTICS, statistics_path
from fennec.field_maps.submissions import submission_map, submissions_inbox_map
from fennec.field_maps.user import user_page_map
from fennec.field_maps.watchlist import (
    WatchDirection,
    watchlist_map,
    watchlist_path,
)
from fennec.models import (
    CommentText,
    FennecRecord,
    Journal,
    JournalListing,
    JournalsPage,
    Messages,
    Navigation,
    Note,
    NotesPage,
    SearchPage,
    Submission,
    SubmissionListing,
    SubmissionPage,
    SubmissionStatistics,
    UserPage,
    WatchedUser,
    WatchlistPage,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=FennecRecord)

SiteId = int | str

SUBMISSIONS_INBOX_PATH = "/msg/submissions/"


def ensure_id(value: SiteId) -> int:
    """Coerce a numeric site id given as text."""
    return value if isinstance(value, int) else int(str(value).strip())


class FennecClient:
    """Async client for reading FurAffinity pages as typed records.

    Attributes:
        config: Validated client configuration.
        fetcher: Page fetcher issuing requests through the transport.
        last_seen_theme: Theme of the most recently extracted page, for
            diagnostics. Not meaningful when one client is shared by
            concurrent tasks.
    """

    def __init__(
        self,
        config: ClientConfig | str | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            config: A ClientConfig, or just a raw cookie string.
            sleep: Coroutine used to wait between retries.
        """
        if isinstance(config, str):
            config = ClientConfig(cookies=config)
        self.config = config or ClientConfig()

        self._owns_transport = self.config.transport is None
        self.transport = self.config.transport or HttpxTransport(
            timeout=self.config.timeout
        )
        self.fetcher = PageFetcher(
            self.transport,
            cookies=self.config.cookies,
            site_root=self.config.site_root,
            disable_retry=self.config.disable_retry,
            max_retries=self.config.max_retries,
            retry_base_delay=self.config.retry_base_delay,
            soft_error_rules=self.config.soft_error_rules,
            sleep=sleep,
        )
        self.last_seen_theme: PageTheme | None = None

    async def aclose(self) -> None:
        """Close the default transport. A caller-supplied one is left open."""
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()

    async def __aenter__(self) -> FennecClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _fetch_record(
        self, path: str, dual_map: DualFieldMap, model: type[R]
    ) -> R:
        """Fetch ``path`` and extract one ``model`` record from it.

        Raises:
            SiteError: If the page could not be fetched.
            DataFormatAssumptionException: If the record doesn't validate.
        """
        result = await self.fetcher.fetch(path, dual_map.request)
        context = ExtractionContext(timezone=self.config.zone, url=result.url)
        extraction = extract_body(result.body, dual_map, context)
        self.last_seen_theme = extraction.theme
        logger.debug(
            f"Extracted {model.__name__} from {result.url}",
            extra={"theme": extraction.theme.value, "attempts": result.attempts},
        )
        return model.from_extraction(extraction)

    # -------------------------------------------------------------------------
    # Submissions
    # -------------------------------------------------------------------------

    def get_submissions(
        self, cursor: PaginationCursor = SUBMISSIONS_INBOX_PATH
    ) -> Paginator[SubmissionListing]:
        """Page through the new-submissions inbox, newest first."""
        return Paginator(self.get_submissions_page, cursor)

    async def get_submissions_page(
        self, cursor: PaginationCursor = SUBMISSIONS_INBOX_PATH
    ) -> SubmissionPage:
        return await self._fetch_record(
            cursor, submissions_inbox_map(cursor), SubmissionPage
        )

    async def get_submission(self, submission_id: SiteId) -> Submission:
        submission_id = ensure_id(submission_id)
        path = f"/view/{submission_id}/"
        return await self._fetch_record(
            path, submission_map(submission_id, path), Submission
        )

    @staticmethod
    def get_navigation_from_submission(
        submission: Submission | SiteId, items: Sequence[int] | None = None
    ) -> Navigation:
        """Find the neighbouring submissions in the artist's mini-gallery.

        Args:
            submission: A fetched submission, or a submission id.
            items: Mini-gallery ids; taken from ``submission.nav_items`` when
                a Submission is given.

        Returns:
            Navigation with the closest lower id as ``previous`` and the
            closest higher id as ``next``; either may be None.
        """
        if isinstance(submission, Submission):
            items = submission.nav_items
            current = submission.id
        else:
            current = ensure_id(submission)

        if not items or current is None:
            return Navigation()

        previous = following = None
        for item in sorted(items):
            if item > current:
                following = item
                break
            if item < current:
                previous = item
        return Navigation(previous=previous, next=following)

    # -------------------------------------------------------------------------
    # Galleries
    # -------------------------------------------------------------------------

    async def _get_gallery_at(
        self, cursor: PaginationCursor, kind: GalleryKind
    ) -> SubmissionPage:
        return await self._fetch_record(
            cursor, gallery_map(cursor, kind), SubmissionPage
        )

    def _gallery(self, kind: GalleryKind, user_name: str) -> Paginator[SubmissionListing]:
        async def fetch_page(cursor: PaginationCursor) -> SubmissionPage:
            return await self._get_gallery_at(cursor, kind)

        return Paginator(fetch_page, f"/{kind}/{user_name}/")

    def get_user_gallery(self, user_name: str) -> Paginator[SubmissionListing]:
        return self._gallery("gallery", user_name)

    async def get_user_gallery_page(
        self, user_name: str, page: int | str
    ) -> SubmissionPage:
        return await self._get_gallery_at(f"/gallery/{user_name}/{page}/", "gallery")

    def get_user_scraps(self, user_name: str) -> Paginator[SubmissionListing]:
        return self._gallery("scraps", user_name)

    async def get_user_scraps_page(
        self, user_name: str, page: int | str
    ) -> SubmissionPage:
        return await self._get_gallery_at(f"/scraps/{user_name}/{page}/", "scraps")

    def get_user_favorites(self, user_name: str) -> Paginator[SubmissionListing]:
        return self._gallery("favorites", user_name)

    async def get_user_favorites_page(
        self, user_name: str, page: int | str
    ) -> SubmissionPage:
        return await self._get_gallery_at(
            f"/favorites/{user_name}/{page}/", "favorites"
        )

    # -------------------------------------------------------------------------
    # Users and journals
    # -------------------------------------------------------------------------

    async def get_user_page(self, user_name: str) -> UserPage:
        path = f"/user/{user_name}/"
        return await self._fetch_record(path, user_page_map(path), UserPage)

    def get_user_journals(self, user_name: str) -> Paginator[JournalListing]:
        async def fetch_page(cursor: PaginationCursor) -> JournalsPage:
            return await self._fetch_record(
                cursor, journals_map(cursor, user_name), JournalsPage
            )

        return Paginator(fetch_page, f"/journals/{user_name}/")

    async def get_user_journals_page(
        self, user_name: str, page: int | str
    ) -> JournalsPage:
        path = f"/journals/{user_name}/{page}/"
        return await self._fetch_record(
            path, journals_map(path, user_name), JournalsPage
        )

    async def get_journal(self, journal_id: SiteId) -> Journal:
        journal_id = ensure_id(journal_id)
        path = f"/journal/{journal_id}/"
        return await self._fetch_record(path, journal_map(journal_id, path), Journal)

    def _watchlist(
        self, direction: WatchDirection, user_name: str
    ) -> Paginator[WatchedUser]:
        async def fetch_page(cursor: PaginationCursor) -> WatchlistPage:
            return await self._fetch_record(
                cursor, watchlist_map(cursor, user_name), WatchlistPage
            )

        return Paginator(fetch_page, watchlist_path(direction, user_name))

    def get_user_watching(self, user_name: str) -> Paginator[WatchedUser]:
        """Page through the users ``user_name`` watches."""
        return self._watchlist("by", user_name)

    async def get_user_watching_page(
        self, user_name: str, page: int | str
    ) -> WatchlistPage:
        path = watchlist_path("by", user_name, page)
        return await self._fetch_record(
            path, watchlist_map(path, user_name), WatchlistPage
        )

    def get_user_watchers(self, user_name: str) -> Paginator[WatchedUser]:
        """Page through the users watching ``user_name``."""
        return self._watchlist("to", user_name)

    async def get_user_watchers_page(
        self, user_name: str, page: int | str
    ) -> WatchlistPage:
        path = watchlist_path("to", user_name, page)
        return await self._fetch_record(
            path, watchlist_map(path, user_name), WatchlistPage
        )

    async def get_submission_statistics(
        self, user_name: str, page: int | str = 1
    ) -> SubmissionStatistics:
        return await self._fetch_record(
            statistics_path(user_name, page), STATISTICS, SubmissionStatistics
        )

    # -------------------------------------------------------------------------
    # Messages, notes and comments
    # -------------------------------------------------------------------------

    async def get_messages(self) -> Messages:
        return await self._fetch_record(MESSAGES_PATH, MESSAGES, Messages)

    async def get_notes(self) -> NotesPage:
        return await self._fetch_record(NOTES_PATH, NOTES, NotesPage)

    async def get_note(self, note_id: SiteId) -> Note:
        note_id = ensure_id(note_id)
        path = f"/viewmessage/{note_id}/"
        return await self._fetch_record(path, note_map(note_id, path), Note)

    async def move_note(
        self, ids: SiteId | Sequence[SiteId], folder: NoteFolder | str
    ) -> None:
        """Move notes to another folder.

        Args:
            ids: One note id or several.
            folder: Target folder.

        Raises:
            SiteError: If the site rejects the request.
            ValueError: If ``folder`` isn't a known folder name.
        """
        folder = NoteFolder(folder)
        if isinstance(ids, int | str):
            ids = [ids]
        body = {
            "manage_notes": 1,
            "move_to": folder.value,
            "items[]": [ensure_id(note_id) for note_id in ids],
        }
        await self.fetcher.fetch(
            NOTES_PATH,
            RequestOptions(
                method=HttpMethod.POST, body=body, content_type=FORM_URLENCODED
            ),
        )
        logger.info(f"Moved {len(ids)} note(s) to {folder.value}")

    async def get_comment_text(
        self, comment_id: SiteId, origin: Literal["submission", "journal"]
    ) -> CommentText:
        """Read the full text of one comment from its reply page."""
        comment_id = ensure_id(comment_id)
        return await self._fetch_record(
            f"/replyto/{origin}/{comment_id}",
            comment_text_map(comment_id),
            CommentText,
        )

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(
        self, query: str, params: SearchQueryParams | None = None
    ) -> SearchPaginator[SubmissionListing]:
        async def fetch_page(page: int) -> SearchPage:
            return await self.get_search_page(query, params, page)

        return SearchPaginator(fetch_page)

    async def get_search_page(
        self,
        query: str,
        params: SearchQueryParams | None = None,
        page: int = 1,
    ) -> SearchPage:
        body = (params or SearchQueryParams()).to_body(query, page)
        return await self._fetch_record(SEARCH_PATH, search_map(body), SearchPage)
