import asyncio
import threading

import pytest

from codeplay_sdk.editor import EditorSession


class RecordingClient:
    def __init__(self, tree):
        self.tree = tree
        self.saved = []
        self.save_threads = []

    def get_project(self, project_id):
        return {"id": project_id, "title": "Demo", "templateFiles": {"content": self.tree}}

    def save_project_files(self, project_id, content):
        self.save_threads.append(threading.get_ident())
        self.saved.append((project_id, content))
        return {"id": project_id, "templateFiles": {"content": content}}


TREE = {
    "src": {
        "name": "src",
        "type": "folder",
        "children": {"main.ts": {"name": "main.ts", "type": "file", "content": "start()"}},
    },
    "README.md": {"name": "README.md", "type": "file", "content": "# Demo"},
}


@pytest.mark.asyncio
async def test_saving_writes_content_back_into_project_tree():
    client = RecordingClient(TREE)
    editor = EditorSession(client, "p1")
    editor.load(open_paths=["src/main.ts"])

    assert editor.paths == ["src/main.ts", "README.md"]
    assert editor.files.active_file_id == "src/main.ts"

    editor.files.update_content("src/main.ts", "start(true)")
    await editor.files.save("src/main.ts")

    project_id, content = client.saved[-1]
    assert project_id == "p1"
    assert content["src"]["children"]["main.ts"]["content"] == "start(true)"
    assert content["README.md"]["content"] == "# Demo"
    assert TREE["src"]["children"]["main.ts"]["content"] == "start()"
    assert editor.files.has_unsaved_files() is False


def test_open_unknown_path_raises():
    editor = EditorSession(RecordingClient(TREE), "p1")
    editor.load()
    with pytest.raises(KeyError):
        editor.open("nope.txt")
    assert editor.open("README.md").language == "markdown"


@pytest.mark.asyncio
async def test_upload_runs_off_the_event_loop_thread():
    client = RecordingClient(TREE)
    editor = EditorSession(client, "p1", auto_save_delay=0.05)
    editor.load(open_paths=["README.md"])

    editor.files.update_content("README.md", "# Changed")
    await asyncio.sleep(0.2)
    await editor.files.wait_for_pending_saves()

    assert client.saved[-1][1]["README.md"]["content"] == "# Changed"
    assert client.save_threads[-1] != threading.get_ident()
    assert editor.files.has_unsaved_files() is False
