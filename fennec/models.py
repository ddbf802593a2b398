"""Pydantic models for extracted records.

Every page kind the client reads has one model here. The extractor produces
plain dicts; ``FennecRecord.from_extraction`` validates them so a change in
the site's markup that yields values of the wrong shape is reported as a
DataFormatAssumptionException rather than leaking through as bad data.

Fields are optional throughout: a selector that matches nothing resolves to
None (or an empty list) and that is a normal outcome, not a validation error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fennec.common.exceptions import DataFormatAssumptionException
from fennec.data_types import Extraction, PaginationCursor

T = TypeVar("T", bound="FennecRecord")

SubmissionType = Literal["image", "flash", "story", "music", "unknown"]


class FennecRecord(BaseModel):
    """Base class for every extracted record."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def from_record(
        cls: type[T], record: dict[str, Any], request_url: str = ""
    ) -> T:
        """Validate an extracted record.

        Args:
            record: Field name to extracted value.
            request_url: URL of the page the record came from.

        Returns:
            Validated instance of the model.

        Raises:
            DataFormatAssumptionException: If validation fails.
        """
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            errors_list = [dict(err) for err in e.errors()]
            raise DataFormatAssumptionException(
                errors=errors_list,
                failed_doc=record,
                model_name=cls.__name__,
                request_url=request_url,
            ) from e

    @classmethod
    def from_extraction(cls: type[T], extraction: Extraction) -> T:
        return cls.from_record(extraction.record, extraction.url)


# =============================================================================
# Comments
# =============================================================================


class CommentText(FennecRecord):
    """The quoted text of a single comment, read from its reply page."""

    id: int | None = None
    body_text: str | None = None
    body_html: str | None = None


class Comment(CommentText):
    """A comment on a submission or journal.

    Moderated or deleted comments still render a container with an id but
    no author, body or date. They are kept in the list; ``is_hidden`` flags
    them.
    """

    self_link: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    user_thumb_url: str | None = None
    timestamp: datetime | None = None
    when: datetime | None = None

    @property
    def is_hidden(self) -> bool:
        return not any(
            (self.user_name, self.user_url, self.body_text, self.when)
        )


# =============================================================================
# Submissions
# =============================================================================


class SubmissionListing(FennecRecord):
    """A submission tile in a gallery, inbox or search listing."""

    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    artist_name: str | None = None
    thumb_url: str | None = None
    when: datetime | None = None


class SubmissionPage(FennecRecord):
    """One page of a gallery, scraps, favorites or the submissions inbox."""

    self_link: str | None = None
    submissions: list[SubmissionListing] = Field(default_factory=list)
    next_page: PaginationCursor | None = None
    previous_page: PaginationCursor | None = None

    @property
    def items(self) -> list[SubmissionListing]:
        return self.submissions


class Submission(FennecRecord):
    """A submission's detail page."""

    id: int | None = None
    self_link: str | None = None
    type: SubmissionType | None = None
    title: str | None = None
    thumb_url: str | None = None
    content_url: str | None = None
    artist_name: str | None = None
    artist_url: str | None = None
    artist_thumb_url: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    when: datetime | None = None
    keywords: list[str] = Field(default_factory=list)
    nav_items: list[int] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)


class Navigation(BaseModel):
    """Neighbouring submission ids in an artist's mini-gallery."""

    previous: int | None = None
    next: int | None = None


# =============================================================================
# Journals
# =============================================================================


class Journal(FennecRecord):
    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    user_thumb_url: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    when: datetime | None = None
    comments: list[Comment] = Field(default_factory=list)


class JournalListing(FennecRecord):
    """A journal entry as shown on a user's journal list."""

    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    when: datetime | None = None
    comment_count: int | None = None


class JournalsPage(FennecRecord):
    self_link: str | None = None
    user_name: str | None = None
    journals: list[JournalListing] = Field(default_factory=list)
    next_page: PaginationCursor | None = None
    previous_page: PaginationCursor | None = None

    @property
    def items(self) -> list[JournalListing]:
        return self.journals


# =============================================================================
# User page
# =============================================================================


class FeaturedSubmission(FennecRecord):
    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    thumb_url: str | None = None


class UserGalleryItem(FennecRecord):
    """A thumbnail in the user page's latest submissions or favorites strip."""

    id: int | None = None
    self_link: str | None = None
    thumb_url: str | None = None
    when: datetime | None = None


class ProfileId(FennecRecord):
    """The submission the user has set as their profile picture."""

    id: int | None = None
    self_link: str | None = None
    thumb_url: str | None = None
    when: datetime | None = None


class ArtistInformation(FennecRecord):
    title: str | None = None
    value: str | None = None


class ContactInformation(FennecRecord):
    service: str | None = None
    link: str | None = None
    value: str | None = None


class Shout(FennecRecord):
    id: int | None = None
    user_name: str | None = None
    user_url: str | None = None
    user_thumb_url: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    when: datetime | None = None


class UserPage(FennecRecord):
    """A user's profile page."""

    user_name: str | None = None
    self_link: str | None = None
    user_class: str | None = None
    user_thumb_url: str | None = None
    header_text: str | None = None
    header_html: str | None = None
    statistics_text: str | None = None
    statistics_html: str | None = None
    featured_submission: FeaturedSubmission | None = None
    latest_submissions: list[UserGalleryItem] = Field(default_factory=list)
    favorites: list[UserGalleryItem] = Field(default_factory=list)
    top_journal: JournalListing | None = None
    profile_id: ProfileId | None = None
    artist_information: list[ArtistInformation] = Field(default_factory=list)
    contact_information: list[ContactInformation] = Field(default_factory=list)
    shouts: list[Shout] = Field(default_factory=list)


# =============================================================================
# Watch lists
# =============================================================================


class WatchedUser(FennecRecord):
    user_name: str | None = None
    user_url: str | None = None


class WatchlistPage(FennecRecord):
    """One page of the users someone watches, or of their watchers."""

    self_link: str | None = None
    user_name: str | None = None
    users: list[WatchedUser] = Field(default_factory=list)
    next_page: PaginationCursor | None = None
    previous_page: PaginationCursor | None = None

    @property
    def items(self) -> list[WatchedUser]:
        return self.users


# =============================================================================
# Messages and notes
# =============================================================================


class WatchMessage(FennecRecord):
    id: int | None = None
    user_name: str | None = None
    user_url: str | None = None
    user_thumb_url: str | None = None
    when: datetime | None = None


class SubmissionCommentMessage(FennecRecord):
    id: int | None = None
    submission_id: int | None = None
    submission_title: str | None = None
    submission_url: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    when: datetime | None = None


class JournalCommentMessage(FennecRecord):
    id: int | None = None
    title: str | None = None
    url: str | None = None
    journal_id: int | None = None
    user_name: str | None = None
    user_url: str | None = None
    when: datetime | None = None


class ShoutMessage(FennecRecord):
    id: int | None = None
    user_name: str | None = None
    user_url: str | None = None
    when: datetime | None = None


class FavoriteMessage(FennecRecord):
    id: int | None = None
    submission_id: int | None = None
    submission_title: str | None = None
    submission_url: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    when: datetime | None = None


class JournalMessage(FennecRecord):
    id: int | None = None
    journal_title: str | None = None
    journal_url: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    when: datetime | None = None


class Messages(FennecRecord):
    """The "other messages" notification center."""

    my_username: str | None = None
    watches: list[WatchMessage] = Field(default_factory=list)
    comments: list[SubmissionCommentMessage] = Field(default_factory=list)
    journal_comments: list[JournalCommentMessage] = Field(default_factory=list)
    shouts: list[ShoutMessage] = Field(default_factory=list)
    favorites: list[FavoriteMessage] = Field(default_factory=list)
    journals: list[JournalMessage] = Field(default_factory=list)


class NoteListing(FennecRecord):
    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    unread: bool = False
    when: datetime | None = None


class NotesPage(FennecRecord):
    notes: list[NoteListing] = Field(default_factory=list)


class Note(FennecRecord):
    id: int | None = None
    self_link: str | None = None
    title: str | None = None
    user_name: str | None = None
    user_url: str | None = None
    body_text: str | None = None
    body_html: str | None = None
    when: datetime | None = None


# =============================================================================
# Search and statistics
# =============================================================================


class SearchPage(FennecRecord):
    submissions: list[SubmissionListing] = Field(default_factory=list)
    more: bool = False

    @property
    def items(self) -> list[SubmissionListing]:
        return self.submissions


class SubmissionStatistic(FennecRecord):
    id: int | None = None
    submission_title: str | None = None
    submission_url: str | None = None
    thumb_url: str | None = None
    when: datetime | None = None
    views: int | None = None
    favorites: int | None = None
    comments: int | None = None
    keywords: list[str] = Field(default_factory=list)


class SubmissionStatistics(FennecRecord):
    statistics: list[SubmissionStatistic] = Field(default_factory=list)
