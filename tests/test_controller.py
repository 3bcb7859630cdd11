"""
Dashboard controller tests: login gate, project cache, pending media and
the create / update / delete flows against the in-memory gateway.
"""

import pytest

from folioboard.gateway import DataError, ProjectFields, StorageError
from folioboard.modules.projects import DashboardController
from folioboard.modules.projects.controller import (
    DELETE_STALE, EDITOR_CLOSED, EDITOR_CREATE, EDITOR_EDIT, EDITOR_STALE, LIST_EMPTY, LIST_FAILED,
    SAVE_IN_PROGRESS,
)


@pytest.fixture
def controller(gateway):
    return DashboardController(gateway)


@pytest.fixture
def signed_in(controller, credentials):
    assert controller.login(*credentials)
    return controller


def calls_named(gateway, name):
    return [call for call in gateway.calls if call[0] == name]


def open_seeded(controller, gateway, **fields):
    """Insert a row behind the controller's back, refresh and open it"""
    project = gateway.insert_project(fields)
    controller.refresh()
    assert controller.open_project(project.id)
    gateway.calls.clear()
    return project


# ---------------------------------------------------------------------------
# Session gate
# ---------------------------------------------------------------------------

def test_wrong_password_stays_on_login_form(controller, gateway):
    assert controller.login("admin@example.com", "nope") is False
    assert controller.authenticated is False
    assert controller.login_error == "Invalid login credentials"
    assert calls_named(gateway, "list_projects") == []


def test_login_shows_dashboard_and_loads_list(signed_in, gateway):
    assert signed_in.authenticated
    assert signed_in.login_error is None
    assert signed_in.user_email == "admin@example.com"
    assert calls_named(gateway, "list_projects")
    assert signed_in.list_message == LIST_EMPTY


def test_ensure_session_without_session_shows_login(controller):
    assert controller.ensure_session() is False
    assert controller.authenticated is False
    assert controller.initialized


def test_initial_list_failure_keeps_dashboard(controller, gateway, credentials):
    gateway.fail_next("list_projects", DataError("offline"))
    assert controller.login(*credentials)
    assert controller.authenticated
    assert controller.list_message == LIST_FAILED


def test_session_ending_elsewhere_returns_to_login(signed_in, gateway, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file())
    assert len(signed_in.previews) == 1

    gateway.sign_out()

    assert signed_in.authenticated is False
    assert signed_in.editor_state == EDITOR_CLOSED
    assert signed_in.projects_cache == []
    assert len(signed_in.previews) == 0


def test_sign_out(signed_in, gateway):
    signed_in.dispatch("sign_out")
    assert signed_in.authenticated is False
    assert gateway.get_session() is None


def test_unknown_action_is_rejected(controller):
    with pytest.raises(ValueError):
        controller.dispatch("publish")


# ---------------------------------------------------------------------------
# List and editor
# ---------------------------------------------------------------------------

def test_list_items_meta(signed_in, gateway):
    gateway.insert_project({"title": "Draft one"})
    gateway.insert_project({"title": "Live", "is_featured": True, "launched_on": "2024-05"})
    gateway.insert_project({"title": None, "launched_on": "2023"})
    signed_in.refresh()

    items = signed_in.list_items()

    assert [(i["title"], i["meta"]) for i in items] == [
        ("Untitled project", "2023"),
        ("Live", "Featured · 2024-05"),
        ("Draft one", "Draft"),
    ]


def test_refresh_failure_is_reported_in_list(signed_in, gateway):
    gateway.fail_next("list_projects", DataError("offline"))
    signed_in.dispatch("refresh")
    assert signed_in.list_message == LIST_FAILED


def test_add_opens_empty_create_editor(signed_in):
    signed_in.dispatch("add")
    assert signed_in.editor_state == EDITOR_CREATE
    assert signed_in.current_project is None
    assert signed_in.can_delete is False
    assert signed_in.draft == ProjectFields()


def test_open_project_loads_draft(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Site", summary="About", is_featured=True)

    assert signed_in.editor_state == EDITOR_EDIT
    assert signed_in.editor_title == "Editing: Site"
    assert signed_in.draft.title == "Site"
    assert signed_in.draft.is_featured is True
    assert signed_in.list_items()[0]["active"]
    assert signed_in.can_delete
    assert signed_in.open_project("missing") is False
    assert signed_in.current_project.id == project.id


def test_cancel_releases_previews(signed_in, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file())
    signed_in.gallery_change([make_file("a.png"), make_file("b.png")])
    assert len(signed_in.previews) == 3

    signed_in.dispatch("cancel")

    assert signed_in.editor_state == EDITOR_CLOSED
    assert len(signed_in.previews) == 0


# ---------------------------------------------------------------------------
# Pending media
# ---------------------------------------------------------------------------

def test_gallery_files_beyond_free_slots_are_dropped(signed_in, gateway, make_file):
    open_seeded(signed_in, gateway, title="Site", gallery_urls=["p/1.png", "p/2.png"])

    accepted = signed_in.gallery_change([make_file(f"{n}.png") for n in range(9)])

    assert len(accepted) == 8
    assert signed_in.remaining_slots() == 0
    assert [e.file.filename for e in signed_in.media.uploads][-1] == "7.png"


def test_removal_frees_a_slot_and_is_idempotent(signed_in, gateway):
    open_seeded(signed_in, gateway, title="Site", gallery_urls=["a.jpg", "b.jpg"])

    assert signed_in.gallery_remove("a.jpg")
    assert signed_in.gallery_remove("a.jpg")
    assert signed_in.gallery_remove("not-in-gallery.jpg") is False

    assert signed_in.media.removals == {"a.jpg"}
    assert signed_in.remaining_slots() == 9
    assert [i["path"] for i in signed_in.gallery_view()] == ["b.jpg"]


def test_pending_remove_discards_queued_file(signed_in, make_file):
    signed_in.add()
    first, second = signed_in.gallery_change([make_file("a.png"), make_file("b.png")])

    assert signed_in.dispatch("pending_remove", first.preview)
    assert first.preview not in signed_in.previews
    assert [i["preview"] for i in signed_in.gallery_view()] == [second.preview]
    assert signed_in.pending_remove("unknown") is False


def test_replacing_thumbnail_releases_old_preview(signed_in, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file("one.png"))
    old = signed_in.media.thumbnail_preview
    signed_in.thumbnail_change(make_file("two.png"))

    assert old not in signed_in.previews
    assert signed_in.thumbnail_view()["alt"] == "two.png preview"


def test_media_actions_keep_typed_fields(signed_in, make_file):
    signed_in.add()
    fields = ProjectFields(title="Typed", summary="so far")
    signed_in.gallery_change([make_file()], fields)
    assert signed_in.draft == fields


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_with_thumbnail_and_gallery(signed_in, gateway, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file("cover.png"))
    signed_in.gallery_change([make_file("one.jpg"), make_file("two.jpg")])
    gateway.calls.clear()

    saved = signed_in.submit(ProjectFields(title="New Site", cta_url="https://site.test"))

    assert saved is not None
    ops = [call[0] for call in gateway.calls]
    assert ops == ["insert_project", "upload", "update_project",
                   "upload", "upload", "update_project"]
    assert gateway.calls[0][1]["gallery_urls"] == []
    assert saved.thumbnail_url.startswith(f"project-{saved.id}/thumbnail-")
    assert saved.thumbnail_url.endswith(".png")
    assert [p.split("/")[1].split("-")[:2] for p in saved.gallery_urls] == [
        ["gallery", "0"], ["gallery", "1"],
    ]
    assert signed_in.projects_cache[0] == saved
    assert signed_in.editor_state == EDITOR_EDIT
    assert signed_in.current_project == saved
    assert signed_in.editor_success == "Project created."
    assert len(signed_in.previews) == 0
    assert gateway.list_projects()[0] == saved


def test_reopening_created_project_shows_saved_media(signed_in, gateway, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file("cover.png"))
    signed_in.gallery_change([make_file("one.jpg"), make_file("two.jpg")])
    saved = signed_in.submit(ProjectFields(title="New Site"))

    signed_in.cancel()
    assert signed_in.open_project(saved.id)

    thumb = signed_in.thumbnail_view()
    assert thumb["src"] == gateway.public_url(saved.thumbnail_url)
    assert thumb["src"].startswith("http://localhost:54321/storage/v1/object/public/project-images/")

    gallery = signed_in.gallery_view()
    assert [item["kind"] for item in gallery] == ["persisted", "persisted"]
    assert [item["path"] for item in gallery] == saved.gallery_urls
    assert [item["src"] for item in gallery] == [gateway.public_url(p) for p in saved.gallery_urls]
    assert all(item["src"].startswith("http://") for item in gallery)
    assert signed_in.remaining_slots() == 8


def test_create_without_media_is_a_single_insert(signed_in, gateway):
    signed_in.add()
    gateway.calls.clear()

    saved = signed_in.submit(ProjectFields(title="Bare"))

    assert [call[0] for call in gateway.calls] == ["insert_project"]
    assert saved.gallery_urls == []


def test_failed_create_media_step_discards_the_row(signed_in, gateway, make_file):
    signed_in.add()
    signed_in.thumbnail_change(make_file("cover.png"))
    gateway.fail_next("update_project", DataError("column missing"))

    assert signed_in.submit(ProjectFields(title="Broken")) is None

    assert signed_in.editor_error == "column missing"
    assert gateway.rows == {}
    assert gateway.objects == {}
    assert signed_in.projects_cache == []
    assert signed_in.editor_state == EDITOR_CREATE
    assert signed_in.loading is False


def test_insert_failure_sets_error(signed_in, gateway):
    signed_in.add()
    gateway.fail_next("insert_project", DataError(""))
    assert signed_in.submit(ProjectFields(title="x")) is None
    assert signed_in.editor_error == "Something went wrong."


def test_submit_refused_while_saving(signed_in, gateway):
    signed_in.add()
    signed_in.set_loading_state(True)
    gateway.calls.clear()

    assert signed_in.submit(ProjectFields(title="x")) is None
    assert signed_in.editor_error == SAVE_IN_PROGRESS
    assert gateway.calls == []


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

def test_update_removes_then_appends_gallery(signed_in, gateway, make_file):
    project = open_seeded(signed_in, gateway, title="Site", gallery_urls=["a.jpg", "b.jpg"])
    signed_in.gallery_remove("a.jpg")
    signed_in.gallery_change([make_file("c.jpg")])

    saved = signed_in.submit(ProjectFields(title="Site"))

    assert ("remove", ["a.jpg"]) in gateway.calls
    assert saved.gallery_urls[0] == "b.jpg"
    assert saved.gallery_urls[1].startswith(f"project-{project.id}/gallery-1-")
    assert len(saved.gallery_urls) == 2
    assert len(calls_named(gateway, "update_project")) == 1
    assert signed_in.editor_success == "Project saved."


def test_update_replaces_thumbnail_and_removes_old(signed_in, gateway, make_file):
    project = open_seeded(signed_in, gateway, title="Site", thumbnail_url="project-x/thumbnail-old.png")
    signed_in.thumbnail_change(make_file("new.webp"))

    saved = signed_in.submit(ProjectFields(title="Site"))

    assert saved.thumbnail_url.startswith(f"project-{project.id}/thumbnail-")
    assert saved.thumbnail_url.endswith(".webp")
    assert ("remove", ["project-x/thumbnail-old.png"]) in gateway.calls


def test_absolute_urls_are_never_removed_from_storage(signed_in, gateway):
    open_seeded(signed_in, gateway, title="Site",
                gallery_urls=["https://cdn.test/legacy.png", "p/keep.png"])
    signed_in.gallery_remove("https://cdn.test/legacy.png")

    saved = signed_in.submit(ProjectFields(title="Site"))

    assert calls_named(gateway, "remove") == []
    assert saved.gallery_urls == ["p/keep.png"]


def test_update_writes_form_fields(signed_in, gateway):
    open_seeded(signed_in, gateway, title="Old", is_featured=True, summary="x")

    saved = signed_in.submit(ProjectFields(title="New", summary="", is_featured=False))

    assert saved.title == "New"
    assert saved.summary == ""
    assert saved.is_featured is False
    assert signed_in.find_project(saved.id).title == "New"


def test_failed_update_leaves_cache_unchanged(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Keep")
    before = list(signed_in.projects_cache)
    gateway.fail_next("update_project", DataError("permission denied"))

    assert signed_in.submit(ProjectFields(title="Changed")) is None

    assert signed_in.projects_cache == before
    assert signed_in.editor_error == "permission denied"
    assert signed_in.current_project.id == project.id
    assert gateway.rows[project.id]["title"] == "Keep"


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def test_delete_requires_confirmation(signed_in, gateway):
    open_seeded(signed_in, gateway, title="Site")
    assert signed_in.delete(confirmed=False) is False
    assert gateway.calls == []


def test_delete_row_then_media(signed_in, gateway):
    project = open_seeded(
        signed_in, gateway, title="Site", thumbnail_url="p/t.png",
        gallery_urls=["p/1.png", "p/2.png", "p/3.png"],
    )

    assert signed_in.dispatch("delete", confirmed=True)

    assert gateway.calls == [
        ("delete_project", project.id),
        ("remove", ["p/t.png", "p/1.png", "p/2.png", "p/3.png"]),
    ]
    assert signed_in.find_project(project.id) is None
    assert signed_in.editor_state == EDITOR_CLOSED


def test_delete_failure_keeps_project(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Site", thumbnail_url="p/t.png")
    gateway.fail_next("delete_project", DataError(""))

    assert signed_in.delete(confirmed=True) is False

    assert signed_in.editor_error == "Failed to delete."
    assert signed_in.find_project(project.id) is not None
    assert calls_named(gateway, "remove") == []
    assert signed_in.loading is False


def test_storage_cleanup_failure_still_deletes(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Site", thumbnail_url="p/t.png")
    gateway.fail_next("remove", StorageError("bucket gone"))

    assert signed_in.delete(confirmed=True)
    assert signed_in.find_project(project.id) is None
    assert project.id not in gateway.rows


def test_delete_refused_while_saving(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Site")
    signed_in.set_loading_state(True)

    assert signed_in.delete(confirmed=True) is False

    assert signed_in.editor_error == SAVE_IN_PROGRESS
    assert gateway.calls == []
    assert project.id in gateway.rows


def test_delete_stays_loading_until_storage_cleanup_ends(signed_in, gateway, monkeypatch):
    open_seeded(signed_in, gateway, title="Site", thumbnail_url="p/t.png")
    seen = []
    original = gateway.remove

    def remove(paths):
        seen.append(signed_in.loading)
        original(paths)

    monkeypatch.setattr(gateway, "remove", remove)

    assert signed_in.delete(confirmed=True)
    assert seen == [True]
    assert signed_in.loading is False


def test_delete_for_another_project_is_refused(signed_in, gateway):
    other = gateway.insert_project({"title": "Other"})
    project = open_seeded(signed_in, gateway, title="Open")

    assert signed_in.delete(confirmed=True, project_id=other.id) is False

    assert signed_in.editor_error == DELETE_STALE
    assert gateway.calls == []
    assert other.id in gateway.rows and project.id in gateway.rows


def test_delete_with_matching_project_id(signed_in, gateway):
    project = open_seeded(signed_in, gateway, title="Open")
    assert signed_in.delete(confirmed=True, project_id=str(project.id))
    assert project.id not in gateway.rows


# ---------------------------------------------------------------------------
# Editor binding
# ---------------------------------------------------------------------------

def test_bound_to(signed_in, gateway):
    assert signed_in.bound_to("") is False
    signed_in.add()
    assert signed_in.bound_to("")
    project = open_seeded(signed_in, gateway, title="Site")
    assert signed_in.bound_to(project.id)
    assert signed_in.bound_to("") is False
    assert signed_in.bound_to("other") is False


def test_rebind_editor_reopens_posted_project(signed_in, gateway, make_file):
    first = gateway.insert_project({"title": "A"})
    open_seeded(signed_in, gateway, title="B")
    signed_in.thumbnail_change(make_file())
    typed = ProjectFields(title="A edited")

    assert signed_in.rebind_editor(first.id, typed)

    assert signed_in.current_project.id == first.id
    assert signed_in.draft == typed
    assert signed_in.editor_error == EDITOR_STALE
    assert len(signed_in.previews) == 0
    assert gateway.calls == []


def test_rebind_editor_to_vanished_project_closes_editor(signed_in, gateway):
    open_seeded(signed_in, gateway, title="B")
    assert signed_in.rebind_editor("gone") is False
    assert signed_in.editor_state == EDITOR_CLOSED


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_registry_reuses_and_evicts_idle_dashboards(make_file, credentials):
    from folioboard.gateway import InMemoryGateway
    from folioboard.modules.projects import ControllerRegistry

    now = [0.0]
    store = {"rows": {}, "objects": {}}
    registry = ControllerRegistry(
        lambda: InMemoryGateway(users=dict([credentials]), store=store),
        idle_seconds=60, clock=lambda: now[0],
    )

    first = registry.get("a")
    assert registry.get("a") is first
    first.add()
    first.thumbnail_change(make_file())

    now[0] = 61.0
    other = registry.get("b")

    assert "a" not in registry
    assert len(registry) == 1
    assert len(first.previews) == 0
    assert registry.get("a") is not first
    assert other is registry.get("b")


def test_registry_restores_persisted_session(credentials):
    from folioboard.gateway import InMemoryGateway
    from folioboard.modules.projects import ControllerRegistry

    source = InMemoryGateway(users=dict([credentials]))
    session = source.sign_in(*credentials)
    registry = ControllerRegistry(lambda: InMemoryGateway(users=dict([credentials])))

    controller = registry.get("key", persisted_session=session)

    assert controller.ensure_session()
    assert controller.user_email == credentials[0]
