from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from uboard.controllers.post import MAX_REPORTS, PostController
from uboard.core.errors import (
    CapacityExceededError,
    NothingToUndoError,
    NotFoundError,
    StoreFailure,
    UnauthorizedError,
    UploadDisabledError,
    ValidationError,
)
from uboard.models.comment import Comment
from uboard.models.engagement import UserCheckin, UserPostLike, UserReport
from uboard.models.post import Post, Tag, post_tags
from uboard.repositories.engagement import CheckinRepository, LikeRepository, ReportRepository
from uboard.repositories.post import PostRepository
from uboard.repositories.tag import TagRepository
from uboard.services.storage_service import UploadedFile


async def _count(db, table, *criteria):
    result = await db.execute(select(func.count()).select_from(table).where(*criteria))
    return result.scalar()


class TestFetching:
    async def test_lists_posts_newest_first_with_derived_fields(self, db, post_controller, make_user, make_post):
        author = await make_user()
        first = await make_post(author.id)
        second = await make_post(author.id)
        await LikeRepository(db).add(author.id, first.id)

        result = await post_controller.get_posts(author.id, "Events", 100, 0)

        assert result.status == 200
        assert result.data.count == 2
        assert result.data.total == 2
        posts = result.data.result
        assert [p.id for p in posts] == [second.id, first.id]
        assert posts[1].author.first_name == author.first_name
        assert posts[1].like_count == 1
        assert posts[1].does_user_like is True
        assert posts[0].does_user_like is False
        assert posts[0].total_comments == 0

    async def test_type_filter_and_total_ignore_pagination(self, post_controller, make_user, make_post):
        author = await make_user()
        for _ in range(3):
            await make_post(author.id)
        await make_post(author.id, post_type="Textbooks", location="")

        events = await post_controller.get_posts(author.id, "Events", 2, 0)
        everything = await post_controller.get_posts(author.id, "All", 2, 2)

        assert events.data.count == 2
        assert events.data.total == 3
        assert everything.data.count == 2
        assert everything.data.total == 4

    async def test_limit_is_capped(self, post_controller, make_user, make_post):
        author = await make_user()
        for _ in range(52):
            await make_post(author.id)

        result = await post_controller.get_posts(author.id, "All", 1000, 0)

        assert result.data.count == 50
        assert result.data.total == 52

    async def test_empty_page_reports_no_content(self, post_controller, make_user, make_post):
        author = await make_user()
        await make_post(author.id)

        result = await post_controller.get_posts(author.id, "All", 10, 5)

        assert result.status == 204
        assert result.data.result == []
        assert result.data.total == 1

    async def test_counts_comments(self, db, post_controller, comment_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id)
        await comment_controller.create_comment("A comment long enough", author.id, post.id)
        await comment_controller.create_comment("Another comment here", author.id, post.id)

        result = await post_controller.get_posts(author.id, "All", 10, 0)

        assert result.data.result[0].total_comments == 2

    async def test_user_posts_only_include_that_author(self, post_controller, make_user, make_post):
        author = await make_user()
        other = await make_user()
        mine = await make_post(author.id)
        await make_post(other.id)

        result = await post_controller.get_user_posts(other.id, author.id, "All", 10, 0)

        assert [p.id for p in result.data.result] == [mine.id]
        assert result.data.total == 1

    async def test_returns_post_details(self, db, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id)
        await LikeRepository(db).add(author.id, post.id)

        result = await post_controller.get_post(author.id, post.id)

        assert result.status == 200
        detail = result.data.result
        assert detail.body == post.body
        assert detail.author.last_name == author.last_name
        assert detail.like_count == 1
        assert detail.does_user_like is True
        assert detail.tags == []

    @pytest.mark.parametrize("post_id", ["123-123-123", str(uuid4())])
    async def test_missing_post(self, post_controller, make_user, post_id):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await post_controller.get_post(user.id, post_id)

    async def test_flags_follow_the_requesting_user(self, db, post_controller, make_user, make_post):
        author = await make_user()
        reader = await make_user()
        post = await make_post(author.id)
        await LikeRepository(db).add(author.id, post.id)
        await CheckinRepository(db).add(author.id, post.id)
        await ReportRepository(db).add(author.id, post.id)

        mine = (await post_controller.get_post(author.id, post.id)).data.result
        theirs = (await post_controller.get_post(reader.id, post.id)).data.result

        assert (mine.does_user_like, mine.is_user_checked_in, mine.did_user_report) == (True, True, True)
        assert (theirs.does_user_like, theirs.is_user_checked_in, theirs.did_user_report) == (False, False, False)
        assert theirs.like_count == 1
        assert theirs.users_checked_in == 1

    @pytest.mark.parametrize(
        "operation, args",
        [
            ("get_posts", ("All", 10, 0)),
            ("update_post", ("{post}",)),
            ("delete_post", ("{post}",)),
            ("upvote", ("{post}",)),
            ("report", ("{post}",)),
        ],
    )
    async def test_store_failure_is_reported(self, db, files, make_user, make_post, operation, args):
        def lost_connection(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        class BrokenPostRepository(PostRepository):
            async def get(self, *args, **kwargs):
                lost_connection()

            async def exists(self, *args, **kwargs):
                lost_connection()

            async def list_previews(self, *args, **kwargs):
                lost_connection()

        controller = PostController(
            BrokenPostRepository(db),
            LikeRepository(db),
            CheckinRepository(db),
            ReportRepository(db),
            TagRepository(db),
            files,
        )
        user = await make_user()
        post = await make_post(user.id)
        args = [post.id if arg == "{post}" else arg for arg in args]

        with pytest.raises(StoreFailure) as exc_info:
            await getattr(controller, operation)(user.id, *args)
        assert exc_info.value.status_code == 500


class TestCreation:
    async def test_creates_post(self, db, post_controller, make_user):
        author = await make_user()

        result = await post_controller.create_post(
            author.id, "Events", "This is a new post!", "This is a new post!This is a new post!", "location", 10
        )

        assert result.status == 201
        assert result.data.result.author_id == author.id
        assert result.data.result.capacity == 10
        assert await _count(db, Post) == 1

    @pytest.mark.parametrize(
        "post_type, title, body, location, capacity",
        [
            (None, "title", "body", "location", 10),
            ("Events", None, "body", "location", 10),
            ("Events", "title", "", "location", 10),
            ("Events", "title", "body", "location", None),
            ("Events", "title", "body", "", 10),
        ],
    )
    async def test_rejects_missing_fields(self, db, post_controller, make_user, post_type, title, body, location, capacity):
        author = await make_user()

        with pytest.raises(ValidationError):
            await post_controller.create_post(author.id, post_type, title, body, location, capacity)
        assert await _count(db, Post) == 0

    async def test_location_optional_outside_events(self, post_controller, make_user):
        author = await make_user()

        result = await post_controller.create_post(author.id, "Textbooks", "Selling MAT137 notes", "Cheap notes", None, 0)

        assert result.status == 201
        assert result.data.result.location == ""

    async def test_stores_coords(self, post_controller, make_user):
        author = await make_user()

        result = await post_controller.create_post(
            author.id, "Events", "Picnic", "Bring food", "Queens Park", 5, coords={"lat": 43.66, "lng": -79.39}
        )

        assert result.data.result.coords.lat == 43.66

    async def test_creates_new_tags(self, db, post_controller, make_user):
        author = await make_user()
        tags = ["csc108", "bananaPepper"]

        result = await post_controller.create_post(author.id, "Events", "Title", "Body text", "location", 10, tags)

        detail = (await post_controller.get_post(author.id, result.data.result.id)).data.result
        assert sorted(t.text for t in detail.tags) == sorted(tags)

    async def test_reuses_existing_tags(self, db, post_controller, make_user):
        author = await make_user()
        await post_controller.create_post(author.id, "Events", "First", "Body text", "location", 10, ["csc108"])

        result = await post_controller.create_post(
            author.id, "Events", "Second", "Body text", "location", 44, ["csc108", "new"]
        )

        detail = (await post_controller.get_post(author.id, result.data.result.id)).data.result
        assert sorted(t.text for t in detail.tags) == ["csc108", "new"]
        assert await _count(db, Tag) == 2

    async def test_keeps_at_most_three_trimmed_tags(self, db, post_controller, make_user):
        author = await make_user()

        result = await post_controller.create_post(
            author.id, "Events", "Title", "Body text", "location", 10, ["  a ", "a", "b", "", "c", "d", "e"]
        )

        detail = (await post_controller.get_post(author.id, result.data.result.id)).data.result
        assert sorted(t.text for t in detail.tags) == ["a", "b", "c"]
        assert await _count(db, post_tags) == 3

    async def test_uploads_thumbnail(self, post_controller, files, make_user, tmp_path):
        author = await make_user()
        image = tmp_path / "thumb.png"
        image.write_bytes(b"png")

        result = await post_controller.create_post(
            author.id, "Events", "Title", "Body text", "location", 10, file=UploadedFile(str(image), "thumb.png")
        )

        assert result.data.result.thumbnail == "http://files.test/thumbnails/thumb.png"
        assert files.uploads == [(str(image), "thumb.png")]

    async def test_refuses_file_when_uploads_disabled(self, db, post_controller, files, make_user, tmp_path):
        author = await make_user()
        files.available = False

        with pytest.raises(UploadDisabledError):
            await post_controller.create_post(
                author.id, "Events", "Title", "Body text", "location", 10, file=UploadedFile(str(tmp_path / "x"), "x.png")
            )
        assert files.uploads == []
        assert await _count(db, Post) == 0

    @pytest.mark.parametrize(
        "post_type, title, location, tags",
        [
            ("E" * 51, "Title", "location", None),
            ("Events", "T" * 201, "location", None),
            ("Events", "Title", "L" * 256, None),
            ("Events", "Title", "location", ["ok", "t" * 65]),
        ],
    )
    async def test_rejects_overlong_fields(self, db, post_controller, make_user, post_type, title, location, tags):
        author = await make_user()

        with pytest.raises(ValidationError):
            await post_controller.create_post(author.id, post_type, title, "Body text", location, 10, tags)
        assert await _count(db, Post) == 0
        assert await _count(db, Tag) == 0


class TestUpdateAndDelete:
    async def test_partial_update_keeps_other_fields(self, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id, body="Original body", capacity=7, location="Robarts")

        result = await post_controller.update_post(author.id, post.id, title="New title")

        updated = result.data.result
        assert result.status == 200
        assert updated.title == "New title"
        assert (updated.body, updated.capacity, updated.location, updated.coords) == ("Original body", 7, "Robarts", None)

    async def test_blank_values_count_as_omitted(self, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id, title="Movie night", body="Bring snacks", capacity=7, location="Robarts")

        result = await post_controller.update_post(author.id, post.id, title="  ", body="", location="", capacity=0)

        updated = result.data.result
        assert updated.type == "Events"
        assert (updated.title, updated.body, updated.location, updated.capacity) == (
            "Movie night",
            "Bring snacks",
            "Robarts",
            7,
        )

    async def test_update_rejects_overlong_title(self, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id)

        with pytest.raises(ValidationError):
            await post_controller.update_post(author.id, post.id, title="T" * 201)

    async def test_update_by_non_author(self, post_controller, make_user, make_post):
        author = await make_user()
        other = await make_user()
        post = await make_post(author.id)

        with pytest.raises(UnauthorizedError):
            await post_controller.update_post(other.id, post.id, title="Hijacked")

    async def test_update_missing_post(self, post_controller, make_user):
        author = await make_user()
        with pytest.raises(NotFoundError):
            await post_controller.update_post(author.id, uuid4(), title="Nothing")

    async def test_delete_cascades_but_keeps_tags(self, db, post_controller, comment_controller, make_user):
        author = await make_user()
        reader = await make_user()
        created = await post_controller.create_post(author.id, "Events", "Doomed", "Body text", "loc", 5, ["shared"])
        survivor = await post_controller.create_post(author.id, "Events", "Survivor", "Body text", "loc", 5, ["shared"])
        post_id = created.data.result.id
        await comment_controller.create_comment("A comment long enough", reader.id, post_id)
        await post_controller.upvote(reader.id, post_id)
        await post_controller.checkin(reader.id, post_id)
        await post_controller.report(reader.id, post_id)

        result = await post_controller.delete_post(author.id, post_id)

        assert result.status == 204
        for model in (Comment, UserPostLike, UserCheckin, UserReport):
            assert await _count(db, model, model.post_id == post_id) == 0
        assert await _count(db, post_tags, post_tags.c.post_id == post_id) == 0
        assert await _count(db, Tag) == 1
        detail = (await post_controller.get_post(author.id, survivor.data.result.id)).data.result
        assert [t.text for t in detail.tags] == ["shared"]

    async def test_delete_by_non_author(self, post_controller, make_user, make_post):
        author = await make_user()
        other = await make_user()
        post = await make_post(author.id)

        with pytest.raises(UnauthorizedError):
            await post_controller.delete_post(other.id, post.id)

    async def test_delete_missing_post(self, post_controller, make_user):
        author = await make_user()
        with pytest.raises(NotFoundError):
            await post_controller.delete_post(author.id, uuid4())


class TestVotes:
    async def test_upvote_is_idempotent(self, db, post_controller, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)

        first = await post_controller.upvote(user.id, post.id)
        second = await post_controller.upvote(user.id, post.id)

        assert (first.status, second.status) == (204, 204)
        assert (await post_controller.get_post(user.id, post.id)).data.result.like_count == 1

    async def test_downvote_without_like(self, db, post_controller, make_user, make_post):
        user = await make_user()
        other = await make_user()
        post = await make_post(user.id)
        await post_controller.upvote(other.id, post.id)

        with pytest.raises(NothingToUndoError):
            await post_controller.downvote(user.id, post.id)
        assert await LikeRepository(db).count(post.id) == 1

    async def test_downvote_removes_like(self, db, post_controller, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        await post_controller.upvote(user.id, post.id)

        result = await post_controller.downvote(user.id, post.id)

        assert result.status == 204
        assert await LikeRepository(db).count(post.id) == 0

    async def test_upvote_missing_post(self, post_controller, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await post_controller.upvote(user.id, uuid4())


class TestReports:
    async def test_repeat_reports_count_once(self, db, post_controller, make_user, make_post):
        author = await make_user()
        reporter = await make_user()
        post = await make_post(author.id)

        await post_controller.report(reporter.id, post.id)
        result = await post_controller.report(reporter.id, post.id)

        assert result.status == 201
        assert result.data.result.report_count == 1
        assert result.data.result.deleted is False
        assert (await post_controller.get_post(author.id, post.id)).status == 200

    async def test_post_removed_at_threshold(self, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id)
        reporters = [await make_user() for _ in range(MAX_REPORTS)]

        results = [await post_controller.report(r.id, post.id) for r in reporters]

        assert [r.status for r in results[:-1]] == [201] * (MAX_REPORTS - 1)
        assert results[-1].status == 200
        assert results[-1].data.message == "Post has been deleted"
        assert results[-1].data.result.deleted is True
        with pytest.raises(NotFoundError):
            await post_controller.get_post(author.id, post.id)

    async def test_final_report_after_post_already_removed(self, post_controller, make_user, make_post, monkeypatch):
        author = await make_user()
        post = await make_post(author.id)
        reporters = [await make_user() for _ in range(MAX_REPORTS)]
        for reporter in reporters[:-1]:
            await post_controller.report(reporter.id, post.id)

        async def already_removed(post_id):
            return None

        monkeypatch.setattr(post_controller.posts, "get", already_removed)
        result = await post_controller.report(reporters[-1].id, post.id)

        assert result.status == 200
        assert result.data.result.deleted is True


class TestCheckin:
    async def test_capacity_scenario(self, db, post_controller, make_user, make_post):
        user_a = await make_user()
        user_b = await make_user()
        post = await make_post(user_a.id, capacity=1)

        assert (await post_controller.checkin(user_a.id, post.id)).status == 204
        with pytest.raises(CapacityExceededError) as exc_info:
            await post_controller.checkin(user_b.id, post.id)
        assert exc_info.value.status_code == 409
        assert (await post_controller.checkout(user_a.id, post.id)).status == 204
        assert (await post_controller.checkin(user_b.id, post.id)).status == 204

        detail = (await post_controller.get_post(user_b.id, post.id)).data.result
        assert detail.users_checked_in == 1
        assert detail.is_user_checked_in is True

    async def test_over_capacity_leaves_count_unchanged(self, db, post_controller, make_user, make_post):
        author = await make_user()
        post = await make_post(author.id, capacity=3)
        users = [await make_user() for _ in range(4)]

        for user in users[:3]:
            await post_controller.checkin(user.id, post.id)
        with pytest.raises(CapacityExceededError):
            await post_controller.checkin(users[3].id, post.id)

        assert await CheckinRepository(db).count(post.id) == 3

    async def test_checkout_without_checkin(self, post_controller, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)

        with pytest.raises(NothingToUndoError):
            await post_controller.checkout(user.id, post.id)

    async def test_checkin_missing_post(self, post_controller, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await post_controller.checkin(user.id, uuid4())


async def test_search_requires_query(post_controller, make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await post_controller.search_posts(user.id, "All", "   ", 10, 0)
