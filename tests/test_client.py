"""Tests for FennecClient operations against saved fixture pages.

Each test registers fixture pages on the fake transport under the paths the
client is expected to request, then checks the validated records.
"""

from datetime import datetime, timezone
from urllib.parse import urlencode

import pytest

from fennec.client import FennecClient, ensure_id
from fennec.common.exceptions import DataFormatAssumptionException, SiteError
from fennec.common.request_manager import SITE_ROOT
from fennec.config import SearchQueryParams, SearchTypes
from fennec.data_types import FORM_URLENCODED, HttpMethod, NoteFolder, PageTheme
from fennec.models import Navigation, Submission, SubmissionPage
from tests.utils import collect_batches

PACIFIC_EVENING = datetime(2024, 10, 25, 3, 1, tzinfo=timezone.utc)
THUMB_TIME = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


class TestSubmission:
    @pytest.mark.asyncio
    async def test_classic_submission(self, make_client, fake_transport, fixture_html):
        """A classic submission page shall extract into a Submission."""
        fake_transport.add("/view/555/", fixture_html("classic", "submission"))
        client = make_client(timezone="US/Pacific")

        submission = await client.get_submission("555")

        assert fake_transport.urls == [f"{SITE_ROOT}/view/555/"]
        assert client.last_seen_theme == PageTheme.CLASSIC
        assert submission.id == 555
        assert submission.self_link == "/view/555/"
        assert submission.type == "image"
        assert submission.title == "Sunset Fox"
        assert submission.artist_name == "artist"
        assert submission.artist_url == "/user/artist/"
        assert submission.artist_thumb_url == (
            "https://a.furaffinity.net/1700000000/artist.gif"
        )
        assert submission.thumb_url == "https://t.furaffinity.net/555@400-1700000000.jpg"
        assert submission.content_url == (
            "https://d.furaffinity.net/art/artist/1700000000/"
            "1700000000.artist_sunset.png"
        )
        assert submission.body_text == "A fox watching the sunset."
        assert submission.body_html == "A fox <b>watching</b> the sunset."
        assert submission.when == PACIFIC_EVENING
        assert submission.keywords == ["fox", "sunset"]
        assert submission.nav_items == [556, 554]

    @pytest.mark.asyncio
    async def test_classic_comments(self, make_client, fake_transport, fixture_html):
        """Comments shall be extracted, with moderated ones flagged as hidden."""
        fake_transport.add("/view/555/", fixture_html("classic", "submission"))
        submission = await make_client(timezone="US/Pacific").get_submission(555)

        visible, hidden = submission.comments
        assert visible.id == 9001
        assert visible.self_link == "#cid:9001"
        assert visible.user_name == "Commenter"
        assert visible.user_url == "/user/commenter/"
        assert visible.user_thumb_url == (
            "https://a.furaffinity.net/1700000000/commenter.gif"
        )
        assert visible.body_text == "Lovely colors!"
        assert visible.timestamp == PACIFIC_EVENING
        assert visible.when == PACIFIC_EVENING
        assert not visible.is_hidden

        assert hidden.id == 9002
        assert hidden.is_hidden
        assert hidden.user_name is None
        assert hidden.when is None

    @pytest.mark.asyncio
    async def test_beta_music_submission(self, make_client, fake_transport, fixture_html):
        """An audio player shall make a submission music, sourced from the audio."""
        fake_transport.add("/view/777/", fixture_html("beta", "submission_music"))
        client = make_client(timezone="US/Pacific")

        submission = await client.get_submission(777)

        assert client.last_seen_theme == PageTheme.BETA
        assert submission.type == "music"
        assert submission.content_url == (
            "https://d.furaffinity.net/art/musician/music/1700000000/night_drive.mp3"
        )
        assert submission.title == "Night Drive"
        assert submission.artist_name == "Musician"
        assert submission.artist_url == "/user/musician/"
        assert submission.when == PACIFIC_EVENING
        assert submission.body_html == "Synthwave for <i>late</i> nights."
        assert submission.keywords == ["synthwave", "music"]
        assert submission.nav_items == [778]

        (comment,) = submission.comments
        assert comment.id == 8001
        assert comment.user_name == "Fan"
        assert comment.user_url == "/user/fan/"
        assert comment.body_text == "Great track!"
        assert comment.timestamp is None
        assert comment.when == PACIFIC_EVENING

    @pytest.mark.asyncio
    async def test_naive_dates_without_timezone(
        self, make_client, fake_transport, fixture_html
    ):
        """Without a configured timezone, dates shall be naive wall-clock times."""
        fake_transport.add("/view/555/", fixture_html("classic", "submission"))
        submission = await make_client().get_submission(555)
        assert submission.when == datetime(2024, 10, 24, 20, 1)

    @pytest.mark.asyncio
    async def test_missing_submission(self, make_client, fake_transport):
        """A "not in our database" page shall raise a 404 SiteError."""
        fake_transport.add(
            "/view/1/",
            "<html><body>The submission you are trying to find is not in our "
            "database.</body></html>",
        )
        with pytest.raises(SiteError) as exc_info:
            await make_client().get_submission(1)
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_repeat_fetch_is_identical(
        self, make_client, fake_transport, fixture_html
    ):
        """Fetching the same page twice shall yield equal records."""
        fake_transport.add("/view/555/", fixture_html("classic", "submission"))
        client = make_client(timezone="US/Pacific")
        first = await client.get_submission(555)
        second = await client.get_submission(555)
        assert first == second
        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_malformed_mini_gallery_link(
        self, make_client, fake_transport, fixture_html
    ):
        """A mini-gallery link without a numeric id shall be skipped."""
        body = fixture_html("classic", "submission").replace(
            'href="/view/556/"', 'href="/view/abc/"'
        )
        fake_transport.add("/view/555/", body)

        submission = await make_client().get_submission(555)

        assert submission.nav_items == [554]


class TestNavigation:
    def test_from_submission(self):
        """Neighbours shall be the closest lower and higher mini-gallery ids."""
        submission = Submission(id=555, nav_items=[556, 554, 600, 500])
        nav = FennecClient.get_navigation_from_submission(submission)
        assert nav == Navigation(previous=554, next=556)

    def test_from_id_and_items(self):
        """An id and explicit items shall work without a fetched submission."""
        nav = FennecClient.get_navigation_from_submission("555", [560, 570])
        assert nav == Navigation(previous=None, next=560)

    def test_current_id_excluded(self):
        """The current submission shall never be its own neighbour."""
        nav = FennecClient.get_navigation_from_submission(555, [555, 554])
        assert nav == Navigation(previous=554, next=None)

    def test_no_items(self):
        """Without mini-gallery items there shall be no neighbours."""
        assert FennecClient.get_navigation_from_submission(555, []) == Navigation()

    def test_ensure_id(self):
        """Numeric ids given as text shall be coerced."""
        assert ensure_id(" 42 ") == 42
        assert ensure_id(42) == 42
        with pytest.raises(ValueError):
            ensure_id("abc")


class TestGalleries:
    @pytest.mark.asyncio
    async def test_classic_gallery_pagination(
        self, make_client, fake_transport, fixture_html
    ):
        """The classic gallery shall be followed through its next links."""
        fake_transport.add("/gallery/artist/", fixture_html("classic", "gallery_page1"))
        fake_transport.add("/gallery/artist/2/", fixture_html("classic", "gallery_page2"))

        batches = await collect_batches(make_client().get_user_gallery("artist"))

        assert [[s.id for s in batch] for batch in batches] == [[101, 102], [103]]
        assert fake_transport.urls == [
            f"{SITE_ROOT}/gallery/artist/",
            f"{SITE_ROOT}/gallery/artist/2/",
        ]
        first = batches[0][0]
        assert first.title == "First Piece"
        assert first.artist_name == "artist"
        assert first.self_link == "/view/101/"
        assert first.thumb_url == "https://t.furaffinity.net/101@200-1700000000.jpg"
        assert first.when == THUMB_TIME

    @pytest.mark.asyncio
    async def test_beta_gallery_form_pagination(
        self, make_client, fake_transport, fixture_html
    ):
        """The beta gallery shall be followed through its Next form."""
        fake_transport.add("/gallery/artist/", fixture_html("beta", "gallery_page1"))
        fake_transport.add("/gallery/artist/2/", fixture_html("beta", "gallery_page2"))

        submissions = await make_client().get_user_gallery("artist").collect()

        assert [s.id for s in submissions] == [201, 202, 203]
        assert submissions[0].title == "Beta One"
        assert submissions[0].artist_name == "artist"

    @pytest.mark.asyncio
    async def test_gallery_page(self, make_client, fake_transport, fixture_html):
        """A single gallery page shall expose its links."""
        fake_transport.add("/gallery/artist/2/", fixture_html("beta", "gallery_page2"))

        page = await make_client().get_user_gallery_page("artist", 2)

        assert isinstance(page, SubmissionPage)
        assert page.self_link == "/gallery/artist/2/"
        assert page.next_page is None
        assert page.previous_page == "/gallery/artist/"
        assert [s.id for s in page.items] == [203]

    @pytest.mark.asyncio
    async def test_scraps_and_favorites_paths(
        self, make_client, fake_transport, fixture_html
    ):
        """Scraps and favorites shall be read from their own listings."""
        fake_transport.add("/scraps/artist/", fixture_html("classic", "gallery_page2"))
        fake_transport.add("/favorites/artist/3/", fixture_html("classic", "gallery_page2"))
        client = make_client()

        scraps = await client.get_user_scraps("artist").collect()
        favorites = await client.get_user_favorites_page("artist", 3)

        assert [s.id for s in scraps] == [103]
        assert [s.id for s in favorites.submissions] == [103]
        assert fake_transport.urls == [
            f"{SITE_ROOT}/scraps/artist/",
            f"{SITE_ROOT}/favorites/artist/3/",
        ]

    @pytest.mark.asyncio
    async def test_failed_page_stops_pagination(
        self, make_client, fake_transport, fixture_html
    ):
        """A page that fails to fetch shall raise out of the paginator."""
        fake_transport.add("/gallery/artist/", fixture_html("classic", "gallery_page1"))
        paginator = make_client().get_user_gallery("artist")

        assert [s.id for s in await paginator.__anext__()] == [101, 102]
        with pytest.raises(SiteError) as exc_info:
            await paginator.__anext__()
        assert exc_info.value.status == 404
        assert paginator.cursor == "/gallery/artist/2/"


class TestSubmissionsInbox:
    @pytest.mark.asyncio
    async def test_inbox_pagination(self, make_client, fake_transport, fixture_html):
        """The new-submissions inbox shall be paged newest first."""
        fake_transport.add("/msg/submissions/", fixture_html("classic", "inbox_page1"))
        fake_transport.add(
            "/msg/submissions/new~299@72/", fixture_html("classic", "inbox_page2")
        )

        batches = await collect_batches(make_client().get_submissions())

        assert [[s.id for s in batch] for batch in batches] == [[301, 300], [299]]
        first = batches[0][0]
        assert first.title == "Inbox One"
        assert first.artist_name == "artist"
        assert first.self_link == "/view/301/"
        assert first.when == THUMB_TIME

    @pytest.mark.asyncio
    async def test_inbox_page_links(self, make_client, fake_transport, fixture_html):
        """An inbox page shall report its previous link but no next link."""
        cursor = "/msg/submissions/new~299@72/"
        fake_transport.add(cursor, fixture_html("classic", "inbox_page2"))

        page = await make_client().get_submissions_page(cursor)

        assert page.self_link == cursor
        assert page.next_page is None
        assert page.previous_page == "/msg/submissions/new~301@72/"


class TestUsers:
    @pytest.mark.asyncio
    async def test_beta_user_page(self, make_client, fake_transport, fixture_html):
        """A beta profile shall extract every panel."""
        fake_transport.add("/user/artist/", fixture_html("beta", "user"))

        user = await make_client(timezone="US/Pacific").get_user_page("artist")

        assert user.user_name == "artist"
        assert user.self_link == "/user/artist/"
        assert user.user_class == "Member"
        assert user.user_thumb_url == "https://a.furaffinity.net/1700000000/artist.gif"
        assert user.header_text == "Hi! I draw foxes."
        assert user.header_html == "Hi! I draw <b>foxes</b>."
        assert "Views: 1200" in user.statistics_text

        assert user.featured_submission is not None
        assert user.featured_submission.id == 601
        assert user.featured_submission.title == "Featured Fox"
        assert user.featured_submission.thumb_url == (
            "https://t.furaffinity.net/601@400-1700000000.jpg"
        )

        assert [item.id for item in user.latest_submissions] == [611, 612]
        assert [item.id for item in user.favorites] == [621]

        assert user.top_journal is not None
        assert user.top_journal.id == 701
        assert user.top_journal.title == "Commissions open"
        assert user.top_journal.body_text == "Slots are open again."
        assert user.top_journal.comment_count == 3
        assert user.top_journal.when == PACIFIC_EVENING

        assert user.profile_id is not None
        assert user.profile_id.id == 631

        assert [(i.title, i.value) for i in user.artist_information] == [
            ("Species", "Fox"),
            ("Favorite Music", "Synthwave"),
        ]
        (contact,) = user.contact_information
        assert contact.service == "Twitter"
        assert contact.link == "https://twitter.com/artist_fox"
        assert contact.value == "artist_fox"

        (shout,) = user.shouts
        assert shout.id == 801
        assert shout.user_name == "Friend"
        assert shout.user_url == "/user/friend/"
        assert shout.body_text == "Nice gallery!"
        assert shout.when == PACIFIC_EVENING

    @pytest.mark.asyncio
    async def test_sparse_classic_user_page(
        self, make_client, fake_transport, fixture_html
    ):
        """Panels a user hasn't set up shall be None or empty."""
        fake_transport.add("/user/newbie/", fixture_html("classic", "user_empty"))

        user = await make_client().get_user_page("newbie")

        assert user.user_name == "newbie"
        assert user.featured_submission is None
        assert user.top_journal is None
        assert user.profile_id is None
        assert user.latest_submissions == []
        assert user.shouts == []

    @pytest.mark.asyncio
    async def test_watching_pagination(self, make_client, fake_transport, fixture_html):
        """Watch lists shall be paged through their Next forms."""
        fake_transport.add("/watchlist/by/artist/", fixture_html("beta", "watchlist_page1"))
        fake_transport.add(
            "/watchlist/by/artist/2/", fixture_html("classic", "watchlist_page2")
        )

        users = await make_client().get_user_watching("artist").collect()

        assert [u.user_name for u in users] == ["friend", "painter", "sculptor"]
        assert users[0].user_url == "/user/friend/"

    @pytest.mark.asyncio
    async def test_watchers_page(self, make_client, fake_transport, fixture_html):
        """A watchers page shall report its Back form as the previous page."""
        fake_transport.add(
            "/watchlist/to/artist/2/", fixture_html("classic", "watchlist_page2")
        )

        page = await make_client().get_user_watchers_page("artist", 2)

        assert page.user_name == "artist"
        assert page.next_page is None
        assert page.previous_page == "/watchlist/by/artist/"

    @pytest.mark.asyncio
    async def test_submission_statistics(
        self, make_client, fake_transport, fixture_html
    ):
        """Per-submission statistics shall be read from the stats table."""
        fake_transport.add("/stats/artist/submissions/1/", fixture_html("classic", "stats"))

        stats = await make_client().get_submission_statistics("artist")

        first, second = stats.statistics
        assert first.id == 555
        assert first.submission_title == "Sunset Fox"
        assert first.submission_url == "/view/555/"
        assert first.views == 1204
        assert first.favorites == 87
        assert first.comments == 12
        assert first.keywords == ["fox", "sunset"]
        assert first.when == datetime(2024, 10, 24, 20, 1)
        assert second.keywords == []


class TestJournals:
    @pytest.mark.asyncio
    async def test_journal_list(self, make_client, fake_transport, fixture_html):
        """A journal list shall stop at an empty trailing page."""
        fake_transport.add("/journals/writer/", fixture_html("beta", "journals"))
        fake_transport.add(
            "/journals/writer/2/",
            '<html><body data-static-path="/themes/beta"></body></html>',
        )

        batches = await collect_batches(make_client().get_user_journals("writer"))

        assert len(batches) == 1
        first, second = batches[0]
        assert first.id == 1001
        assert first.self_link == "/journal/1001/"
        assert first.title == "Convention plans"
        assert first.body_html == "See you at the <b>con</b>!"
        assert first.comment_count == 3
        assert first.when == datetime(2024, 10, 24, 20, 1)
        assert second.id == 1000
        assert second.comment_count == 0

    @pytest.mark.asyncio
    async def test_journal_list_page(self, make_client, fake_transport, fixture_html):
        fake_transport.add("/journals/writer/1/", fixture_html("beta", "journals"))

        page = await make_client().get_user_journals_page("writer", 1)

        assert page.user_name == "writer"
        assert page.next_page == "/journals/writer/2/"
        assert page.previous_page is None

    @pytest.mark.asyncio
    async def test_journal(self, make_client, fake_transport, fixture_html):
        """A journal page shall extract with its comments."""
        fake_transport.add("/journal/1001/", fixture_html("beta", "journal"))

        journal = await make_client(timezone="US/Pacific").get_journal(1001)

        assert journal.id == 1001
        assert journal.title == "Convention plans"
        assert journal.user_name == "writer"
        assert journal.user_url == "/user/writer/"
        assert journal.body_text == "See you at the con!"
        assert journal.when == PACIFIC_EVENING
        assert [c.id for c in journal.comments] == [7001, 7002]
        assert journal.comments[0].user_name == "Reader"
        assert journal.comments[1].is_hidden


class TestMessagesAndNotes:
    @pytest.mark.asyncio
    async def test_messages(self, make_client, fake_transport, fixture_html):
        """Every notification group shall be extracted."""
        fake_transport.add("/msg/others/", fixture_html("beta", "messages"))

        messages = await make_client(timezone="US/Pacific").get_messages()

        assert messages.my_username == "me"
        (watch,) = messages.watches
        assert (watch.id, watch.user_name, watch.user_url) == (
            5001,
            "NewFan",
            "/user/newfan/",
        )
        assert watch.when == PACIFIC_EVENING
        (comment,) = messages.comments
        assert comment.submission_id == 555
        assert comment.submission_title == "Sunset Fox"
        assert comment.user_name == "Commenter"
        (journal_comment,) = messages.journal_comments
        assert journal_comment.journal_id == 1001
        assert journal_comment.title == "Convention plans"
        (shout,) = messages.shouts
        assert shout.user_name == "Friend"
        (favorite,) = messages.favorites
        assert favorite.submission_title == "Sunset Fox"
        assert favorite.user_name == "Collector"
        (journal,) = messages.journals
        assert journal.journal_title == "Stream tonight"
        assert journal.user_name == "Writer"

    @pytest.mark.parametrize("theme", ["classic", "beta"])
    @pytest.mark.asyncio
    async def test_notes(self, theme, make_client, fake_transport, fixture_html):
        """Both themes shall list notes with the same record shape."""
        fake_transport.add("/msg/pms/", fixture_html(theme, "notes"))

        notes = (await make_client().get_notes()).notes

        assert [n.id for n in notes] == [111, 222]
        assert [n.unread for n in notes] == [True, False]
        assert [n.title for n in notes] == ["Commission question", "Re: Trade"]
        assert [n.user_name for n in notes] == ["Client", "Friend"]
        assert notes[0].user_url == "/user/client/"
        assert notes[0].when == datetime(2024, 10, 24, 20, 1)
        assert notes[1].when == datetime(2024, 10, 20, 9, 15)

    @pytest.mark.asyncio
    async def test_note(self, make_client, fake_transport, fixture_html):
        fake_transport.add("/viewmessage/111/", fixture_html("beta", "note"))

        note = await make_client(timezone="US/Pacific").get_note(111)

        assert note.id == 111
        assert note.title == "Commission question"
        assert note.user_name == "Client"
        assert note.user_url == "/user/client/"
        assert note.body_html == "Are your <b>slots</b> open?"
        assert note.when == PACIFIC_EVENING

    @pytest.mark.asyncio
    async def test_move_note(self, make_client, fake_transport):
        """Moving notes shall issue exactly one form POST."""
        fake_transport.add("/msg/pms/", "<html><body>Notes</body></html>")

        result = await make_client().move_note([111, 222], "archive")

        assert result is None
        assert len(fake_transport.calls) == 1
        url, options = fake_transport.calls[0]
        assert url == f"{SITE_ROOT}/msg/pms/"
        assert options.method == HttpMethod.POST
        assert options.content_type == FORM_URLENCODED
        assert options.cookies == "a=1; b=2"
        assert options.body == {
            "manage_notes": 1,
            "move_to": "archive",
            "items[]": [111, 222],
        }
        assert urlencode(options.body, doseq=True) == (
            "manage_notes=1&move_to=archive&items%5B%5D=111&items%5B%5D=222"
        )

    @pytest.mark.asyncio
    async def test_move_single_note(self, make_client, fake_transport):
        fake_transport.add("/msg/pms/", "<html><body>Notes</body></html>")

        await make_client().move_note("111", NoteFolder.TRASH)

        body = fake_transport.calls[0][1].body
        assert body["items[]"] == [111]
        assert body["move_to"] == "trash"

    @pytest.mark.asyncio
    async def test_move_note_unknown_folder(self, make_client, fake_transport):
        """An unknown folder shall be rejected before any request."""
        with pytest.raises(ValueError):
            await make_client().move_note([111], "shredder")
        assert fake_transport.calls == []

    @pytest.mark.asyncio
    async def test_move_note_rejected(self, make_client, fake_transport):
        """A login-required answer shall raise a 401 SiteError."""
        fake_transport.add(
            "/msg/pms/",
            "<html><body>You must be logged in to view this page.</body></html>",
        )
        with pytest.raises(SiteError) as exc_info:
            await make_client().move_note([111], NoteFolder.ARCHIVE)
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_comment_text(self, make_client, fake_transport, fixture_html):
        """The quoted comment shall be read from its reply page."""
        fake_transport.add("/replyto/submission/9001", fixture_html("beta", "replyto"))

        comment = await make_client().get_comment_text(9001, "submission")

        assert comment.id == 9001
        assert comment.body_text == "Lovely colors!"
        assert comment.body_html == "Lovely <i>colors</i>!"


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_pages(self, make_client, fake_transport, fixture_html):
        """Search shall re-POST with an incremented page until no more results."""
        fake_transport.add("/search/", fixture_html("beta", "search_page1"))
        fake_transport.add("/search/", fixture_html("beta", "search_page2"))
        params = SearchQueryParams(types=SearchTypes(art=True))

        batches = await collect_batches(make_client().search("fox", params))

        assert [[s.id for s in batch] for batch in batches] == [[401, 402], [403]]
        assert [opts.body["page"] for _, opts in fake_transport.calls] == [1, 2]
        for _, opts in fake_transport.calls:
            assert opts.method == HttpMethod.POST
            assert opts.body["q"] == "fox"
            assert opts.body["type-art"] == "on"
            assert "type-music" not in opts.body
        first = batches[0][0]
        assert first.title == "Fox One"
        assert first.artist_name == "artist"
        assert first.when == THUMB_TIME

    @pytest.mark.asyncio
    async def test_search_page(self, make_client, fake_transport, fixture_html):
        fake_transport.add("/search/", fixture_html("beta", "search_page2"))

        page = await make_client().get_search_page("fox", page=2)

        assert page.more is False
        assert [s.id for s in page.submissions] == [403]
        assert fake_transport.calls[0][1].body["page"] == 2


class TestValidation:
    @pytest.mark.asyncio
    async def test_wrong_shape_raises(self, make_client, fake_transport):
        """Values of the wrong type shall raise DataFormatAssumptionException."""
        fake_transport.add(
            "/view/5/",
            """
            <html><body data-static-path="/themes/beta">
            <div id="submission_page">
                <section class="minigallery-more"><div class="preview-gallery">
                    <a href="/view/oops/">broken</a>
                </div></section>
            </div>
            </body></html>
            """,
        )
        with pytest.raises(DataFormatAssumptionException) as exc_info:
            await make_client().get_submission(5)

        error = exc_info.value
        assert error.model_name == "Submission"
        assert error.request_url == f"{SITE_ROOT}/view/5/"
        assert error.errors[0]["loc"][0] == "nav_items"
