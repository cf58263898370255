import pytest

from codeplay_sdk.file_session import FileSession
from codeplay_sdk.settings import EditorSettings
from ._helpers import make_file


def test_open_is_idempotent_and_keeps_buffer():
    session = FileSession()
    session.open_file(make_file("src/a.ts", "one"))
    session.open_file(make_file("src/b.ts", "two"))
    session.update_content("src/a.ts", "edited")

    session.open_file(make_file("src/a.ts", "fresh from disk"))

    assert [f.id for f in session.open_files] == ["src/a.ts", "src/b.ts"]
    assert session.active_file_id == "src/a.ts"
    assert session.get_file("src/a.ts").content == "edited"
    assert session.get_file("src/a.ts").is_unsaved is True


def test_close_active_falls_back_to_first_remaining():
    session = FileSession()
    for path in ("a.js", "b.js", "c.js"):
        session.open_file(make_file(path))
    assert session.active_file_id == "c.js"

    session.close_file("c.js")
    assert session.active_file_id == "a.js"

    session.set_active("b.js")
    session.close_file("a.js")
    assert session.active_file_id == "b.js"

    session.close_file("b.js")
    assert session.active_file_id is None
    assert session.active_file is None


def test_close_others_and_close_all():
    session = FileSession()
    for path in ("a.js", "b.js", "c.js"):
        session.open_file(make_file(path))

    session.close_others("missing.js")
    assert len(session.open_files) == 3

    session.close_others("b.js")
    assert [f.id for f in session.open_files] == ["b.js"]
    assert session.active_file_id == "b.js"

    session.close_all()
    assert session.open_files == []
    assert session.active_file_id is None


def test_unknown_ids_are_ignored():
    session = FileSession()
    session.open_file(make_file("a.js"))

    session.set_active("nope.js")
    session.update_content("nope.js", "x")
    session.rename_file("nope.js", "y")
    session.close_file("nope.js")

    assert session.active_file_id == "a.js"
    assert session.has_unsaved_files() is False


def test_rename_and_path_updates_keep_dirty_state():
    session = FileSession()
    session.open_file(make_file("src/a.js", "x"))
    session.update_content("src/a.js", "y")

    session.rename_file("src/a.js", "b.js")
    session.update_path("src/a.js", "lib/b.js")

    open_file = session.get_file("src/a.js")
    assert open_file.name == "b.js"
    assert open_file.path == "lib/b.js"
    assert open_file.is_unsaved is True


def test_update_content_marks_dirty_and_bumps_modified_at():
    session = FileSession()
    open_file = session.open_file(make_file("a.py", "print(1)"))
    before = open_file.modified_at

    session.update_content("a.py", "print(2)")

    assert open_file.content == "print(2)"
    assert open_file.is_unsaved is True
    assert open_file.modified_at >= before
    assert session.has_unsaved_files() is True


@pytest.mark.asyncio
async def test_save_invokes_callback_and_clears_dirty_flag():
    saved = []
    session = FileSession(on_save=lambda f: saved.append((f.id, f.content)))
    session.open_file(make_file("a.js"))
    session.open_file(make_file("b.js"))
    session.update_content("a.js", "A")
    session.update_content("b.js", "B")

    assert await session.save("a.js") is True
    assert saved == [("a.js", "A")]
    assert session.get_file("a.js").is_unsaved is False

    count = await session.save_all()
    assert count == 1
    assert saved[-1] == ("b.js", "B")
    assert session.has_unsaved_files() is False


@pytest.mark.asyncio
async def test_failed_save_leaves_file_dirty():
    async def failing_save(open_file):
        raise RuntimeError("disk full")

    session = FileSession(on_save=failing_save)
    session.open_file(make_file("a.js"))
    session.update_content("a.js", "A")

    with pytest.raises(RuntimeError):
        await session.save("a.js")
    assert session.get_file("a.js").is_unsaved is True


@pytest.mark.asyncio
async def test_edit_during_save_keeps_file_dirty_with_new_content():
    saved = []

    async def slow_save(open_file):
        saved.append(open_file.content)
        session.update_content("a.js", "typed while saving")

    session = FileSession(on_save=slow_save, settings=EditorSettings(auto_save=False))
    session.open_file(make_file("a.js"))
    session.update_content("a.js", "first draft")

    assert await session.save("a.js") is True

    assert saved == ["first draft"]
    current = session.get_file("a.js")
    assert current.content == "typed while saving"
    assert current.is_unsaved is True

    await session.save("a.js")
    assert saved[-1] == "typed while saving"
    assert session.get_file("a.js").is_unsaved is False


def test_subscribers_see_every_change():
    session = FileSession()
    seen = []
    unsubscribe = session.subscribe(lambda s: seen.append(s.active_file_id))

    session.open_file(make_file("a.js"))
    session.open_file(make_file("b.js"))
    unsubscribe()
    session.close_all()

    assert seen == ["a.js", "b.js"]
