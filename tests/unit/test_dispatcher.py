import logging

from fakes import FINALIZER, RecordingClient, RecordingController, build_resource

from operator_framework import (
    Action,
    EventDispatcher,
    InMemoryResourceClient,
    WatchEvent,
)
from operator_framework import config as framework_config


def build_dispatcher(controller, client):
    return EventDispatcher(controller, client, finalizer=FINALIZER)


def test_added_resource_gets_finalizer():
    resource = build_resource()
    controller = RecordingController()
    client = RecordingClient()

    build_dispatcher(controller, client).event_received(Action.ADDED, resource)

    assert controller.created == [resource]
    assert controller.deleted == []
    assert len(client.replaced) == 1
    replaced, version = client.replaced[0]
    assert replaced.finalizers == (FINALIZER,)
    assert version == "7"


def test_update_persists_controller_result():
    resource = build_resource()
    reconciled = build_resource(spec={"size": 3}, resource_version="7")
    controller = RecordingController(result=reconciled)
    client = RecordingClient()

    build_dispatcher(controller, client).event_received(Action.MODIFIED, resource)

    replaced, version = client.replaced[0]
    assert replaced.spec == {"size": 3}
    assert replaced.finalizers == (FINALIZER,)
    assert version == "7"


def test_finalizer_is_not_added_twice():
    resource = build_resource(finalizers=(FINALIZER,))
    client = RecordingClient()

    build_dispatcher(RecordingController(), client).event_received(
        Action.MODIFIED, resource
    )

    replaced, _ = client.replaced[0]
    assert replaced.finalizers == (FINALIZER,)


def test_marked_resource_runs_delete_and_drops_finalizer():
    resource = build_resource(
        finalizers=(FINALIZER,), deletion_timestamp="2024-01-01T00:00:00Z"
    )
    controller = RecordingController()
    client = RecordingClient()

    build_dispatcher(controller, client).event_received(Action.MODIFIED, resource)

    assert controller.deleted == [resource]
    assert controller.created == []
    assert len(client.replaced) == 1
    replaced, version = client.replaced[0]
    assert replaced.finalizers == ()
    assert version == "7"


def test_delete_keeps_foreign_finalizers():
    resource = build_resource(
        finalizers=("other-finalizer", FINALIZER, "third"),
        deletion_timestamp="2024-01-01T00:00:00Z",
    )
    client = RecordingClient()

    build_dispatcher(RecordingController(), client).event_received(
        Action.ADDED, resource
    )

    replaced, _ = client.replaced[0]
    assert replaced.finalizers == ("other-finalizer", "third")


def test_marked_resource_without_our_finalizer_is_reconciled():
    resource = build_resource(
        finalizers=("other-finalizer",), deletion_timestamp="2024-01-01T00:00:00Z"
    )
    controller = RecordingController()
    client = RecordingClient()

    build_dispatcher(controller, client).event_received(Action.MODIFIED, resource)

    assert controller.deleted == []
    assert controller.created == [resource]
    replaced, _ = client.replaced[0]
    assert replaced.finalizers == ("other-finalizer", FINALIZER)


def test_deleted_and_error_events_are_only_logged(caplog):
    controller = RecordingController()
    client = RecordingClient()
    dispatcher = build_dispatcher(controller, client)

    with caplog.at_level(logging.DEBUG, logger="operator_framework.dispatcher"):
        dispatcher.event_received(Action.DELETED, build_resource())
        dispatcher.event_received(Action.ERROR, None)

    assert controller.created == []
    assert controller.deleted == []
    assert client.replaced == []
    assert "Resource deleted: Database default/demo" in caplog.text
    assert "Received error for resource" in caplog.text


def test_create_failure_is_swallowed_without_replace(caplog):
    controller = RecordingController(fail_on="create_or_update")
    client = RecordingClient()

    with caplog.at_level(logging.ERROR):
        build_dispatcher(controller, client).event_received(
            Action.ADDED, build_resource()
        )

    assert client.replaced == []
    assert "Error handling ADDED for Database default/demo" in caplog.text


def test_delete_failure_leaves_finalizer_in_place():
    resource = build_resource(
        finalizers=(FINALIZER,), deletion_timestamp="2024-01-01T00:00:00Z"
    )
    controller = RecordingController(fail_on="delete")
    client = RecordingClient()

    build_dispatcher(controller, client).event_received(Action.MODIFIED, resource)

    assert len(controller.deleted) == 1
    assert client.replaced == []
    assert resource.finalizers == (FINALIZER,)


def test_conflict_is_not_retried(caplog):
    controller = RecordingController()
    client = RecordingClient(conflict=True)

    with caplog.at_level(logging.WARNING):
        build_dispatcher(controller, client).event_received(
            Action.ADDED, build_resource()
        )

    assert len(controller.created) == 1
    assert len(client.replaced) == 1
    assert "version conflict" in caplog.text


def test_controller_receives_context_with_client():
    controller = RecordingController()
    client = RecordingClient()
    dispatcher = EventDispatcher(
        controller, client, finalizer=FINALIZER, api_client="api"
    )

    dispatcher.handle(WatchEvent(Action.ADDED, build_resource()))

    context = controller.contexts[0]
    assert context.client is client
    assert context.api_client == "api"


def test_upsert_without_resource_is_logged(caplog):
    client = RecordingClient()

    with caplog.at_level(logging.ERROR):
        build_dispatcher(RecordingController(), client).event_received(
            Action.MODIFIED, None
        )

    assert client.replaced == []
    assert "MODIFIED event without a resource" in caplog.text


def test_finalizer_defaults_to_controller_then_config():
    class NamedController(RecordingController):
        finalizer_name = "named.example.com/cleanup"

    named = EventDispatcher(NamedController(), RecordingClient())
    assert named.finalizer == "named.example.com/cleanup"

    framework_config.register_opts()
    framework_config.CONF.set_override(
        "default_finalizer", "configured/finalizer", group="operator"
    )
    try:
        configured = EventDispatcher(RecordingController(), RecordingClient())
        assert configured.finalizer == "configured/finalizer"
    finally:
        framework_config.CONF.clear_override("default_finalizer", group="operator")

    assert (
        EventDispatcher(RecordingController(), RecordingClient()).finalizer
        == framework_config.DEFAULT_FINALIZER
    )


def drain(store, dispatcher):
    handled = 0
    while True:
        events = store.pop_events()
        if not events:
            return handled
        for event in events:
            dispatcher.handle(event)
            handled += 1


def test_lifecycle_against_in_memory_store():
    store = InMemoryResourceClient()
    controller = RecordingController()
    dispatcher = build_dispatcher(controller, store)

    created = store.create(build_resource(resource_version=None))
    drain(store, dispatcher)

    stored = store.get(created.key)
    assert stored.finalizers == (FINALIZER,)
    assert len(controller.created) == 2

    store.mark_for_deletion(created.key, "2024-01-01T00:00:00Z")
    drain(store, dispatcher)

    assert len(controller.deleted) == 1
    assert store.list() == []


def test_redelivered_marked_resource_runs_delete_again():
    store = InMemoryResourceClient()
    controller = RecordingController()
    dispatcher = build_dispatcher(controller, store)

    created = store.create(build_resource(finalizers=(FINALIZER, "other-finalizer")))
    marked = store.mark_for_deletion(created.key, "2024-01-01T00:00:00Z")

    dispatcher.event_received(Action.MODIFIED, marked)
    assert store.get(created.key).finalizers == ("other-finalizer",)

    # The same snapshot arrives again before the removal was observed.
    dispatcher.event_received(Action.MODIFIED, marked)

    assert controller.deleted == [marked, marked]
    assert controller.created == []
    assert store.get(created.key).finalizers == ("other-finalizer",)


def test_conflict_on_finalizer_removal_is_not_retried(caplog):
    resource = build_resource(
        finalizers=(FINALIZER,), deletion_timestamp="2024-01-01T00:00:00Z"
    )
    controller = RecordingController()
    client = RecordingClient(conflict=True)

    with caplog.at_level(logging.WARNING):
        build_dispatcher(controller, client).event_received(Action.MODIFIED, resource)

    assert controller.deleted == [resource]
    assert len(client.replaced) == 1
    assert client.replaced[0][0].finalizers == ()
    assert "version conflict" in caplog.text


def test_unexpected_snapshot_type_does_not_escape(caplog):
    client = RecordingClient()

    with caplog.at_level(logging.ERROR):
        build_dispatcher(RecordingController(), client).event_received(
            Action.ADDED, object()
        )

    assert client.replaced == []
    assert "Error handling ADDED" in caplog.text
