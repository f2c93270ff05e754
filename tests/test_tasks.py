import asyncio

from fakes import FakeGateway

from taskmasters.client.errors import NetworkFailure, Result, ValidationFailure
from taskmasters.client.models import Task, TaskDraft, User
from taskmasters.client.tasks import TaskBoard, TaskStats

ME = User(id=1, username="testuser")


def _board(notifier):
    gateway = FakeGateway()
    return gateway, TaskBoard(gateway, notifier, ME)


def test_load_all_fills_personal_and_shared(notifier):
    gateway, board = _board(notifier)
    gateway.responses["get_tasks"] = Result.success([Task(id=1, name="Write report", owner_id=1)])
    gateway.responses["get_shared_tasks"] = Result.success(
        [Task(id=7, name="Plan trip", owner_id=2, owner_username="friend1", completed=True)]
    )

    results = asyncio.run(board.load_all())

    assert results["personal"].ok and results["shared"].ok
    assert [t.id for t in board.personal] == [1]
    assert [t.id for t in board.shared] == [7]
    assert board.stats() == TaskStats(total=2, completed=1, pending=1)


def test_create_validates_before_calling_server(notifier):
    gateway, board = _board(notifier)

    blank = asyncio.run(board.create(TaskDraft(name="  ")))
    bad_priority = asyncio.run(board.create(TaskDraft(name="Study", priority="Urgent")))

    assert isinstance(blank.error, ValidationFailure)
    assert isinstance(bad_priority.error, ValidationFailure)
    assert gateway.calls == []


def test_create_appends_server_task(notifier, banners):
    gateway, board = _board(notifier)
    gateway.responses["create_task"] = lambda user_id, draft: Result.success(
        Task(id=5, name=draft.name.strip(), owner_id=user_id, priority=draft.priority)
    )

    result = asyncio.run(board.create(TaskDraft(name="Study", priority="High")))

    assert result.ok
    assert [(t.id, t.priority) for t in board.personal] == [(5, "High")]
    assert banners[-1].text == "Task 'Study' created"


def test_toggle_flips_completion(notifier):
    gateway, board = _board(notifier)
    gateway.responses["get_tasks"] = Result.success([Task(id=1, name="Write report", owner_id=1)])
    asyncio.run(board.load_all())

    assert asyncio.run(board.toggle(1)).value is True
    assert board.personal[0].completed is True
    assert gateway.calls_to("update_task") == [(1, 1, True)]
    assert asyncio.run(board.toggle(99)).value is False


def test_failed_toggle_keeps_state(notifier, banners):
    gateway, board = _board(notifier)
    gateway.responses["get_tasks"] = Result.success([Task(id=1, name="Write report", owner_id=1)])
    gateway.responses["update_task"] = Result.failure(NetworkFailure("offline"))
    asyncio.run(board.load_all())

    result = asyncio.run(board.toggle(1))

    assert not result.ok
    assert board.personal[0].completed is False
    assert banners[-1].kind == "error"


def test_delete_honours_confirmation(notifier):
    gateway, board = _board(notifier)
    gateway.responses["get_tasks"] = Result.success([Task(id=1, name="Write report", owner_id=1)])
    asyncio.run(board.load_all())

    assert asyncio.run(board.delete(1, confirm=lambda task: False)).value is False
    assert gateway.calls_to("delete_task") == []

    assert asyncio.run(board.delete(1, confirm=lambda task: True)).value is True
    assert board.personal == ()


def test_disposed_board_ignores_late_load(notifier):
    gateway, board = _board(notifier)
    gateway.responses["get_tasks"] = Result.success([Task(id=1, name="Write report", owner_id=1)])
    board.dispose()

    asyncio.run(board.load_all())

    assert board.personal == ()
